import pytest

from hive.domain.chat import crypto
from hive.infra import jwt as jwt_helper


def _bearer(user) -> dict:
    token = jwt_helper.encode_access({"sub": user.id, "username": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_conversation_requires_friendship(api_client, services, make_user):
    alice = await make_user("alice")
    await make_user("bob")
    resp = await api_client.post("/api/startConversation", json={"username": "bob"}, headers=_bearer(alice))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "not_friends"


@pytest.mark.asyncio
async def test_send_and_page_history(api_client, services, make_user, befriend):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await befriend(alice, bob)

    started = await api_client.post("/api/startConversation", json={"username": "bob"}, headers=_bearer(alice))
    assert started.status_code == 200
    conversation = started.json()

    for text in ("one", "two", "three"):
        sent = await api_client.post(
            "/api/sendMessage",
            json={"conversationId": conversation["id"], "content": crypto.encrypt_text(text, conversation["encryption_key"])},
            headers=_bearer(alice),
        )
        assert sent.status_code == 201

    page = await api_client.get(
        f"/api/conversations/{conversation['id']}", params={"page": 1, "limit": 2}, headers=_bearer(bob)
    )
    assert page.status_code == 200
    body = page.json()
    assert body["total"] == 3
    assert body["has_next_page"] is True
    newest = body["items"][0]["content"]
    assert crypto.decrypt_text(newest, conversation["encryption_key"]) == "three"

    listed = await api_client.get("/api/conversations", headers=_bearer(bob))
    assert [item["message_count"] for item in listed.json()] == [3]


@pytest.mark.asyncio
async def test_history_errors(api_client, services, make_user, befriend):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    await befriend(alice, bob)
    started = await api_client.post("/api/startConversation", json={"username": "bob"}, headers=_bearer(alice))
    conversation_id = started.json()["id"]

    outsider = await api_client.get(f"/api/conversations/{conversation_id}", headers=_bearer(carol))
    assert outsider.status_code == 403

    bad_limit = await api_client.get(
        f"/api/conversations/{conversation_id}", params={"limit": 0}, headers=_bearer(alice)
    )
    assert bad_limit.status_code == 422
    assert bad_limit.json()["detail"] == "invalid_limit"

    missing = await api_client.get("/api/conversations/not-a-uuid", headers=_bearer(alice))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_conversation(api_client, services, make_user, befriend):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await befriend(alice, bob)
    started = await api_client.post("/api/startConversation", json={"username": "bob"}, headers=_bearer(alice))

    resp = await api_client.delete(f"/api/conversations/{started.json()['id']}", headers=_bearer(bob))
    assert resp.status_code == 204
    assert services.db.conversations == {}
