import pytest

from hive.infra import jwt as jwt_helper


def _bearer(user) -> dict:
    token = jwt_helper.encode_access({"sub": user.id, "username": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_register_login_and_me(api_client, services):
    created = await api_client.post(
        "/api/users",
        json={"username": "alice", "password": "hunter22", "name": "Alice", "profilePicture": "https://img/a.png"},
    )
    assert created.status_code == 201
    assert created.json()["profile_picture"] == "https://img/a.png"
    assert "password_hash" not in created.json()

    login = await api_client.post("/api/login", json={"username": "alice", "password": "hunter22"})
    assert login.status_code == 200
    body = login.json()
    assert body["token_type"] == "bearer"

    me = await api_client.get("/api/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


@pytest.mark.asyncio
async def test_register_duplicate_username_conflicts(api_client, services, make_user):
    await make_user("alice")
    resp = await api_client.post("/api/users", json={"username": "alice", "password": "hunter22", "name": "Other"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "username_taken"
    assert resp.json()["request_id"]


@pytest.mark.asyncio
async def test_register_validation_error(api_client, services):
    resp = await api_client.post("/api/users", json={"username": "al", "password": "1", "name": "Al"})
    assert resp.status_code == 422
    assert resp.json()["detail"] == "validation_error"
    assert services.db.users == {}


@pytest.mark.asyncio
async def test_login_with_wrong_password(api_client, services, make_user):
    await make_user("alice")
    resp = await api_client.post("/api/login", json={"username": "alice", "password": "wrong-one"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_me_requires_credentials(api_client, services):
    resp = await api_client.get("/api/me")
    assert resp.status_code == 401

    bad = await api_client.get("/api/me", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "invalid_token"


@pytest.mark.asyncio
async def test_user_lookups(api_client, services, make_user):
    alice = await make_user("alice")
    headers = _bearer(alice)

    by_id = await api_client.get(f"/api/users/id/{alice.id}", headers=headers)
    assert by_id.status_code == 200
    assert by_id.json()["username"] == "alice"

    missing = await api_client.get("/api/username/ghost", headers=headers)
    assert missing.status_code == 404

    taken = await api_client.get("/api/username/alice/available")
    assert taken.json() == {"username": "alice", "available": False}

    search = await api_client.get("/api/users/search/ali", headers=headers)
    assert [item["username"] for item in search.json()["items"]] == ["alice"]
    assert search.json()["has_next_page"] is False
