import pytest

from hive.domain.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError
from hive.domain.social.audit import FRIENDSHIP_STREAM
from hive.infra.auth import AuthenticatedUser
from hive.infra.rate_limit import RateLimitExceeded
from hive.settings import settings


@pytest.mark.asyncio
async def test_send_request_records_pending_on_both_users(services, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")

    summary = await services.social.send_request(alice, "bob")

    assert summary.status == "PENDING"
    assert summary.sender_id == alice.id
    assert summary.receiver_id == bob.id
    assert services.db.users[alice.id].pending_friend_requests == [summary.id]
    assert services.db.users[bob.id].pending_friend_requests == [summary.id]


@pytest.mark.asyncio
async def test_accept_makes_users_friends(services, make_user, fake_redis):
    alice = await make_user("alice")
    bob = await make_user("bob")
    summary = await services.social.send_request(alice, "bob")

    accepted = await services.social.accept_request(bob, summary.id)

    assert accepted.status == "ACCEPTED"
    assert services.db.users[alice.id].friends == [bob.id]
    assert services.db.users[bob.id].friends == [alice.id]
    assert services.db.users[alice.id].pending_friend_requests == []
    assert services.db.users[bob.id].pending_friend_requests == []
    assert [user.username for user in await services.social.list_friends(alice)] == ["bob"]

    entries = await fake_redis.xrange(FRIENDSHIP_STREAM)
    assert [fields["event"] for _, fields in entries] == ["requested", "accepted"]


@pytest.mark.asyncio
async def test_duplicate_request_conflicts_in_either_direction(services, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await services.social.send_request(alice, "bob")

    with pytest.raises(ConflictError) as again:
        await services.social.send_request(alice, "bob")
    with pytest.raises(ConflictError) as reverse:
        await services.social.send_request(bob, "alice")

    assert again.value.reason == reverse.value.reason == "already_requested"
    assert len(services.db.friendships) == 1


@pytest.mark.asyncio
async def test_request_after_acceptance_conflicts(services, make_user, befriend):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await befriend(alice, bob)

    with pytest.raises(ConflictError) as exc:
        await services.social.send_request(bob, "alice")
    assert exc.value.reason == "already_friends"


@pytest.mark.asyncio
async def test_cannot_befriend_self_or_unknown_user(services, make_user):
    alice = await make_user("alice")
    with pytest.raises(ConflictError) as exc:
        await services.social.send_request(alice, "alice")
    assert exc.value.reason == "self_request"
    with pytest.raises(NotFoundError):
        await services.social.send_request(alice, "ghost")
    assert services.db.friendships == {}


@pytest.mark.asyncio
async def test_only_receiver_can_respond_once(services, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    summary = await services.social.send_request(alice, "bob")

    with pytest.raises(AuthorizationError) as exc:
        await services.social.accept_request(alice, summary.id)
    assert exc.value.reason == "not_receiver"

    await services.social.accept_request(bob, summary.id)
    with pytest.raises(ConflictError) as again:
        await services.social.decline_request(bob, summary.id)
    assert again.value.reason == "not_pending"


@pytest.mark.asyncio
async def test_unknown_friendship_is_not_found(services, make_user):
    bob = await make_user("bob")
    with pytest.raises(NotFoundError):
        await services.social.accept_request(bob, "not-a-uuid")
    with pytest.raises(NotFoundError):
        await services.social.accept_request(bob, "00000000-0000-0000-0000-000000000000")


@pytest.mark.asyncio
async def test_decline_then_resend_reopens_the_same_row(services, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    summary = await services.social.send_request(alice, "bob")

    declined = await services.social.decline_request(bob, summary.id)
    assert declined.status == "DECLINED"
    assert services.db.users[bob.id].pending_friend_requests == []
    assert services.db.users[bob.id].friends == []

    reopened = await services.social.send_request(bob, "alice")
    assert reopened.id == summary.id
    assert reopened.status == "PENDING"
    assert reopened.sender_id == bob.id
    assert len(services.db.friendships) == 1


@pytest.mark.asyncio
async def test_list_pending_includes_sender_profile(services, make_user):
    alice = await make_user("alice", name="Alice Liddell")
    bob = await make_user("bob")
    await services.social.send_request(alice, "bob")

    pending = await services.social.list_pending(bob)
    assert len(pending) == 1
    assert pending[0].sender.name == "Alice Liddell"
    assert await services.social.list_pending(alice) == []


@pytest.mark.asyncio
async def test_notifications_reach_connected_users(services, make_user, relay, emitted):
    alice = await make_user("alice")
    bob = await make_user("bob")
    relay.registry.register(alice.id, "sid-alice")
    relay.registry.register(bob.id, "sid-bob")

    summary = await services.social.send_request(alice, "bob")

    notice = emitted(relay, "friendRequest", "sid-bob")[0]
    assert notice["userObj"]["username"] == "alice"
    assert notice["friendship"]["id"] == summary.id
    assert emitted(relay, "friendRequestSent", "sid-alice")[0]["id"] == summary.id

    await services.social.accept_request(bob, summary.id)
    assert len(emitted(relay, "friendRequestAccepted")) == 2


@pytest.mark.asyncio
async def test_offline_receiver_still_gets_persisted_request(services, make_user, relay):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await services.social.send_request(alice, "bob")

    relay.emit.assert_not_awaited()
    assert len(services.db.users[bob.id].pending_friend_requests) == 1


@pytest.mark.asyncio
async def test_send_rate_limit(services, make_user, monkeypatch):
    monkeypatch.setattr(settings, "friend_requests_per_minute", 1)
    alice = await make_user("alice")
    await make_user("bob")
    await make_user("carol")

    await services.social.send_request(alice, "bob")
    with pytest.raises(RateLimitExceeded):
        await services.social.send_request(alice, "carol")


@pytest.mark.asyncio
async def test_unknown_actor_is_rejected(services, make_user):
    await make_user("bob")
    ghost = AuthenticatedUser(id="00000000-0000-0000-0000-000000000001", username="ghost")
    with pytest.raises(AuthenticationError):
        await services.social.send_request(ghost, "bob")
    with pytest.raises(AuthenticationError):
        await services.social.send_request(None, "bob")
