"""Guard checks for the friend-request handshake."""

from __future__ import annotations

from typing import Optional

from hive.domain.exceptions import AuthorizationError, ConflictError, NotFoundError
from hive.infra import rate_limit
from hive.settings import settings

from .models import Friendship, FriendshipStatus


async def enforce_send_limit(user_id: str) -> None:
	await rate_limit.enforce(
		"friend_request",
		user_id,
		limit=settings.friend_requests_per_minute,
		window_seconds=60,
		reason="per_minute",
	)


def guard_not_self(user_id: str, target_id: str) -> None:
	if str(user_id) == str(target_id):
		raise ConflictError("self_request")


def guard_can_request(existing: Optional[Friendship]) -> None:
	if existing is None:
		return
	if existing.status is FriendshipStatus.PENDING:
		raise ConflictError("already_requested")
	if existing.status is FriendshipStatus.ACCEPTED:
		raise ConflictError("already_friends")


def guard_can_respond(friendship: Optional[Friendship], actor_id: str) -> Friendship:
	"""Only the receiver may answer, and only while the request is pending."""
	if friendship is None:
		raise NotFoundError("friendship_not_found")
	if friendship.receiver_id != actor_id:
		raise AuthorizationError("not_receiver")
	if friendship.status is not FriendshipStatus.PENDING:
		raise ConflictError("not_pending")
	return friendship
