"""REST surface for posts, likes and comments."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from hive.api.errors import to_http_error
from hive.domain.exceptions import HiveError
from hive.domain.feed import service
from hive.domain.feed.schemas import CommentCreateRequest, CommentResponse, PostCreateRequest, PostResponse
from hive.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api")


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
	payload: PostCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PostResponse:
	try:
		return await service.create_post(auth_user, payload)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/posts/user/{user_id}", response_model=List[PostResponse])
async def list_user_posts(
	user_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[PostResponse]:
	try:
		return await service.list_user_posts(user_id)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/posts/friends/{user_id}", response_model=List[PostResponse])
async def list_friends_feed(
	user_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[PostResponse]:
	try:
		return await service.list_friends_feed(auth_user, user_id)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.put("/likePost/{post_id}/like", response_model=PostResponse)
async def like_post(
	post_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PostResponse:
	try:
		return await service.like_post(auth_user, post_id)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
	post_id: str,
	payload: CommentCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> CommentResponse:
	try:
		return await service.comment(auth_user, post_id, payload)
	except HiveError as exc:
		raise to_http_error(exc) from None
