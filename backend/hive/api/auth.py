"""Identity endpoints: registration, login and user lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from hive.api.errors import to_http_error
from hive.domain.exceptions import HiveError
from hive.domain.identity import service
from hive.domain.identity.schemas import (
	LoginRequest,
	LoginResponse,
	RegisterRequest,
	UserProfile,
	UserPublic,
	UsernameAvailability,
	UserSearchResponse,
)
from hive.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api")


@router.post("/users", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest) -> UserProfile:
	try:
		return await service.register(payload)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest) -> LoginResponse:
	try:
		return await service.login(payload)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/me", response_model=UserProfile)
async def me(auth_user: AuthenticatedUser = Depends(get_current_user)) -> UserProfile:
	try:
		return await service.me(auth_user)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/users/id/{user_id}", response_model=UserPublic)
async def get_user(
	user_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> UserPublic:
	try:
		return await service.get_user(user_id)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/username/{username}", response_model=UserPublic)
async def get_by_username(
	username: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> UserPublic:
	try:
		return await service.get_by_username(username)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/username/{username}/available", response_model=UsernameAvailability)
async def username_available(username: str) -> UsernameAvailability:
	return await service.username_available(username)


@router.get("/users/search/{query}", response_model=UserSearchResponse)
async def search_users(
	query: str,
	page: int = Query(default=1, ge=1),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> UserSearchResponse:
	return await service.search(query, page=page)
