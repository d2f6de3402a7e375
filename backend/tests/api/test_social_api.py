import pytest

from hive.infra import jwt as jwt_helper


def _bearer(user) -> dict:
    token = jwt_helper.encode_access({"sub": user.id, "username": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_friend_request_handshake(api_client, services, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")

    sent = await api_client.post("/api/sendFriendRequest", json={"username": "bob"}, headers=_bearer(alice))
    assert sent.status_code == 200
    friendship_id = sent.json()["id"]
    assert sent.json()["status"] == "PENDING"

    pending = await api_client.get("/api/friendRequests", headers=_bearer(bob))
    assert [item["sender"]["username"] for item in pending.json()] == ["alice"]

    accepted = await api_client.post(
        "/api/acceptFriendRequest", json={"friendshipId": friendship_id}, headers=_bearer(bob)
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "ACCEPTED"

    friends = await api_client.get("/api/friends", headers=_bearer(alice))
    assert [item["username"] for item in friends.json()] == ["bob"]

    again = await api_client.put(f"/api/declineFriendRequest/{friendship_id}", headers=_bearer(bob))
    assert again.status_code == 409
    assert again.json()["detail"] == "not_pending"


@pytest.mark.asyncio
async def test_sender_cannot_accept_own_request(api_client, services, make_user):
    alice = await make_user("alice")
    await make_user("bob")
    sent = await api_client.post("/api/sendFriendRequest", json={"username": "bob"}, headers=_bearer(alice))

    resp = await api_client.post(
        "/api/acceptFriendRequest", json={"friendshipId": sent.json()["id"]}, headers=_bearer(alice)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_friend_request_errors(api_client, services, make_user):
    alice = await make_user("alice")

    self_request = await api_client.post("/api/sendFriendRequest", json={"username": "alice"}, headers=_bearer(alice))
    assert self_request.status_code == 409

    unknown = await api_client.post("/api/sendFriendRequest", json={"username": "ghost"}, headers=_bearer(alice))
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_decline_via_dev_headers(api_client, services, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    sent = await api_client.post("/api/sendFriendRequest", json={"username": "bob"}, headers=_bearer(alice))

    resp = await api_client.put(
        f"/api/declineFriendRequest/{sent.json()['id']}",
        headers={"X-User-Id": bob.id, "X-Username": bob.username},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "DECLINED"


@pytest.mark.asyncio
async def test_friend_request_rate_limit_returns_429(api_client, services, make_user, monkeypatch):
    from hive.settings import settings

    monkeypatch.setattr(settings, "friend_requests_per_minute", 1)
    alice = await make_user("alice")
    await make_user("bob")
    await make_user("carol")

    first = await api_client.post("/api/sendFriendRequest", json={"username": "bob"}, headers=_bearer(alice))
    assert first.status_code == 200
    limited = await api_client.post("/api/sendFriendRequest", json={"username": "carol"}, headers=_bearer(alice))
    assert limited.status_code == 429
    assert limited.json()["detail"] == "per_minute"
    assert int(limited.headers["Retry-After"]) >= 1
