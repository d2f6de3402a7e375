"""REST surface for friend requests."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from hive.api.errors import to_http_error
from hive.domain.exceptions import HiveError
from hive.domain.identity.schemas import UserPublic
from hive.domain.social import service
from hive.domain.social.schemas import (
	FriendRequestSend,
	FriendshipAction,
	FriendshipSummary,
	PendingFriendRequest,
)
from hive.infra.auth import AuthenticatedUser, get_current_user
from hive.infra.rate_limit import RateLimitExceeded

router = APIRouter(prefix="/api")


@router.post("/sendFriendRequest", response_model=FriendshipSummary)
async def send_friend_request(
	payload: FriendRequestSend,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> FriendshipSummary:
	try:
		return await service.send_request(auth_user, payload.username)
	except (HiveError, RateLimitExceeded) as exc:
		raise to_http_error(exc) from None


@router.post("/acceptFriendRequest", response_model=FriendshipSummary)
async def accept_friend_request(
	payload: FriendshipAction,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> FriendshipSummary:
	try:
		return await service.accept_request(auth_user, payload.friendship_id)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.put("/declineFriendRequest/{friendship_id}", response_model=FriendshipSummary)
async def decline_friend_request(
	friendship_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> FriendshipSummary:
	try:
		return await service.decline_request(auth_user, friendship_id)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/friendRequests", response_model=List[PendingFriendRequest])
async def list_friend_requests(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[PendingFriendRequest]:
	try:
		return await service.list_pending(auth_user)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/friends", response_model=List[UserPublic])
async def list_friends(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[UserPublic]:
	try:
		return await service.list_friends(auth_user)
	except HiveError as exc:
		raise to_http_error(exc) from None
