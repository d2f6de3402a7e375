import pytest

from hive.domain.exceptions import AuthenticationError, ConflictError, NotFoundError
from hive.domain.identity.schemas import LoginRequest, RegisterRequest
from hive.infra import jwt as jwt_helper


@pytest.mark.asyncio
async def test_register_hashes_password_and_login_issues_token(services):
    profile = await services.identity.register(
        RegisterRequest(username="alice", password="hunter22", name="Alice", profilePicture="https://img/a.png")
    )
    stored = services.db.users[profile.id]
    assert stored.password_hash != "hunter22"
    assert profile.profile_picture == "https://img/a.png"
    assert profile.friends == [] and profile.conversations == []

    response = await services.identity.login(LoginRequest(username="alice", password="hunter22"))
    claims = jwt_helper.decode_access(response.access_token)
    assert claims["sub"] == profile.id
    assert claims["username"] == "alice"
    assert response.user.id == profile.id


@pytest.mark.asyncio
async def test_login_rejects_wrong_password_and_unknown_user(services, make_user):
    await make_user("alice")
    with pytest.raises(AuthenticationError) as wrong:
        await services.identity.login(LoginRequest(username="alice", password="nope-nope"))
    with pytest.raises(AuthenticationError) as unknown:
        await services.identity.login(LoginRequest(username="ghost", password="hunter22"))
    assert wrong.value.reason == unknown.value.reason == "invalid_credentials"


@pytest.mark.asyncio
async def test_duplicate_username_conflicts(services, make_user):
    await make_user("alice")
    with pytest.raises(ConflictError) as exc:
        await make_user("alice")
    assert exc.value.reason == "username_taken"
    assert len(services.db.users) == 1


@pytest.mark.asyncio
async def test_lookup_by_id_and_username(services, make_user):
    alice = await make_user("alice")
    assert (await services.identity.get_user(alice.id)).username == "alice"
    assert (await services.identity.get_by_username("alice")).id == alice.id
    with pytest.raises(NotFoundError):
        await services.identity.get_user("not-a-uuid")
    with pytest.raises(NotFoundError):
        await services.identity.get_by_username("ghost")


@pytest.mark.asyncio
async def test_username_availability(services, make_user):
    await make_user("alice")
    assert not (await services.identity.username_available("alice")).available
    assert (await services.identity.username_available("bobby")).available


@pytest.mark.asyncio
async def test_search_pages_ten_at_a_time(services, make_user):
    for index in range(12):
        await make_user(f"user{index:02d}")
    await make_user("someone")

    first = await services.identity.search("user", page=1)
    assert len(first.items) == 10
    assert first.has_next_page is True
    assert first.items[0].username == "user00"

    second = await services.identity.search("user", page=2)
    assert [item.username for item in second.items] == ["user10", "user11"]
    assert second.has_next_page is False


@pytest.mark.asyncio
async def test_search_blank_query_returns_nothing(services, make_user):
    await make_user("alice")
    result = await services.identity.search("   ")
    assert result.items == []
    assert result.has_next_page is False
