"""Friend-request handshake: send, accept, decline and the derived listings."""

from __future__ import annotations

import logging
from typing import List, Optional

from hive.domain.exceptions import AuthenticationError, ConflictError, NotFoundError
from hive.domain.identity.models import User
from hive.domain.identity.repo import PostgresUserRepository
from hive.domain.identity.schemas import UserPublic
from hive.domain.ids import require_id
from hive.domain.relay import delivery
from hive.infra.auth import AuthenticatedUser

from . import audit, policy
from .models import Friendship, FriendshipStatus
from .repo import PostgresFriendshipRepository
from .schemas import FriendRequestNotice, FriendshipSummary, PendingFriendRequest

logger = logging.getLogger(__name__)


def _summary_payload(friendship: Friendship) -> dict:
	return FriendshipSummary.from_model(friendship).model_dump(mode="json")


async def _audit_event(event: str, friendship: Friendship) -> None:
	# the transition is committed; notifications still go out
	try:
		await audit.log_friend_event(event, friendship)
	except Exception:
		logger.exception("Failed to append friendship event", extra={"friendship_id": friendship.id, "event": event})


class SocialService:
	def __init__(self, repository=None, users=None) -> None:
		self._repo = repository or PostgresFriendshipRepository()
		self._users = users or PostgresUserRepository()

	async def _require_actor(self, auth_user: Optional[AuthenticatedUser]) -> User:
		if auth_user is None:
			raise AuthenticationError("authentication_required")
		actor = await self._users.get_user(require_id(auth_user.id, "user_not_found"))
		if actor is None:
			raise AuthenticationError("unknown_user")
		return actor

	async def send_request(self, auth_user: Optional[AuthenticatedUser], username: str) -> FriendshipSummary:
		actor = await self._require_actor(auth_user)
		await policy.enforce_send_limit(actor.id)
		target = await self._users.get_by_username(username)
		if target is None:
			audit.inc_send_reject("user_not_found")
			raise NotFoundError("user_not_found")
		try:
			policy.guard_not_self(actor.id, target.id)
			existing = await self._repo.find_between(actor.id, target.id)
			policy.guard_can_request(existing)
		except ConflictError as exc:
			audit.inc_send_reject(exc.reason)
			raise

		if existing is not None and existing.status is FriendshipStatus.DECLINED:
			friendship = await self._repo.reopen_request(existing.id, actor.id, target.id)
			event = "re_requested"
		else:
			friendship = await self._repo.create_request(actor.id, target.id)
			event = "requested"
		audit.inc_request_sent()
		await _audit_event(event, friendship)
		logger.info("friend request sent", extra={"friendship_id": friendship.id, "event": event})

		await delivery.emit_to_user(actor.id, "friendRequestSent", _summary_payload(friendship))
		notice = FriendRequestNotice(
			friendship=FriendshipSummary.from_model(friendship),
			user_obj=UserPublic.from_model(actor),
		)
		await delivery.emit_to_user(target.id, "friendRequest", notice.model_dump(mode="json", by_alias=True))
		return FriendshipSummary.from_model(friendship)

	async def _load_for_response(self, actor: User, friendship_id: str) -> Friendship:
		friendship = await self._repo.get_friendship(require_id(friendship_id, "friendship_not_found"))
		return policy.guard_can_respond(friendship, actor.id)

	async def accept_request(self, auth_user: Optional[AuthenticatedUser], friendship_id: str) -> FriendshipSummary:
		actor = await self._require_actor(auth_user)
		friendship = await self._load_for_response(actor, friendship_id)
		updated = await self._repo.accept(friendship)
		audit.inc_accept()
		await _audit_event("accepted", updated)
		payload = _summary_payload(updated)
		for user_id in (updated.sender_id, updated.receiver_id):
			await delivery.emit_to_user(user_id, "friendRequestAccepted", payload)
		return FriendshipSummary.from_model(updated)

	async def decline_request(self, auth_user: Optional[AuthenticatedUser], friendship_id: str) -> FriendshipSummary:
		actor = await self._require_actor(auth_user)
		friendship = await self._load_for_response(actor, friendship_id)
		updated = await self._repo.decline(friendship)
		audit.inc_decline()
		await _audit_event("declined", updated)
		payload = _summary_payload(updated)
		for user_id in (updated.sender_id, updated.receiver_id):
			await delivery.emit_to_user(user_id, "friendRequestDeclined", payload)
		return FriendshipSummary.from_model(updated)

	async def list_pending(self, auth_user: Optional[AuthenticatedUser]) -> List[PendingFriendRequest]:
		actor = await self._require_actor(auth_user)
		pending = await self._repo.list_pending_for(actor.id)
		senders = {user.id: user for user in await self._users.get_users({f.sender_id for f in pending})}
		return [
			PendingFriendRequest(
				friendship=FriendshipSummary.from_model(friendship),
				sender=UserPublic.from_model(senders[friendship.sender_id]),
			)
			for friendship in pending
			if friendship.sender_id in senders
		]

	async def list_friends(self, auth_user: Optional[AuthenticatedUser]) -> List[UserPublic]:
		actor = await self._require_actor(auth_user)
		friends = await self._users.get_users(actor.friends)
		return [UserPublic.from_model(user) for user in friends]


_SERVICE = SocialService()


async def send_request(auth_user: Optional[AuthenticatedUser], username: str) -> FriendshipSummary:
	return await _SERVICE.send_request(auth_user, username)


async def accept_request(auth_user: Optional[AuthenticatedUser], friendship_id: str) -> FriendshipSummary:
	return await _SERVICE.accept_request(auth_user, friendship_id)


async def decline_request(auth_user: Optional[AuthenticatedUser], friendship_id: str) -> FriendshipSummary:
	return await _SERVICE.decline_request(auth_user, friendship_id)


async def list_pending(auth_user: AuthenticatedUser) -> List[PendingFriendRequest]:
	return await _SERVICE.list_pending(auth_user)


async def list_friends(auth_user: AuthenticatedUser) -> List[UserPublic]:
	return await _SERVICE.list_friends(auth_user)
