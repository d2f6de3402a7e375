"""Account registration, login and user lookups."""

from __future__ import annotations

import logging

from hive.domain.exceptions import AuthenticationError, NotFoundError
from hive.domain.ids import require_id
from hive.infra import jwt as jwt_helper
from hive.infra.auth import AuthenticatedUser
from hive.infra.password import check_needs_rehash, hash_password, verify_password
from hive.obs import metrics as obs_metrics
from hive.settings import settings

from .models import User
from .repo import PostgresUserRepository
from .schemas import (
	LoginRequest,
	LoginResponse,
	RegisterRequest,
	UserProfile,
	UserPublic,
	UsernameAvailability,
	UserSearchResponse,
)

logger = logging.getLogger(__name__)


def issue_access_token(user: User) -> str:
	return jwt_helper.encode_access({"sub": user.id, "username": user.username})


class IdentityService:
	def __init__(self, repository=None) -> None:
		self._repo = repository or PostgresUserRepository()

	@property
	def repository(self):
		return self._repo

	async def register(self, payload: RegisterRequest) -> UserProfile:
		user = await self._repo.create_user(
			username=payload.username,
			password_hash=hash_password(payload.password),
			name=payload.name,
			phone=payload.phone,
			city=payload.city,
			profile_picture=payload.profile_picture,
		)
		obs_metrics.inc_identity_register()
		logger.info("user registered", extra={"user_id": user.id})
		return UserProfile.from_model(user)

	async def login(self, payload: LoginRequest) -> LoginResponse:
		user = await self._repo.get_by_username(payload.username)
		# unknown user and wrong password are indistinguishable to the caller
		if user is None or not verify_password(user.password_hash, payload.password):
			obs_metrics.inc_identity_login("rejected")
			raise AuthenticationError("invalid_credentials")
		if check_needs_rehash(user.password_hash):
			logger.info("password hash parameters outdated", extra={"user_id": user.id})
		obs_metrics.inc_identity_login("ok")
		return LoginResponse(
			access_token=issue_access_token(user),
			expires_in=settings.access_ttl_minutes * 60,
			user=UserProfile.from_model(user),
		)

	async def require_user(self, user_id: str) -> User:
		user = await self._repo.get_user(require_id(user_id, "user_not_found"))
		if user is None:
			raise NotFoundError("user_not_found")
		return user

	async def me(self, auth_user: AuthenticatedUser) -> UserProfile:
		return UserProfile.from_model(await self.require_user(auth_user.id))

	async def get_user(self, user_id: str) -> UserPublic:
		return UserPublic.from_model(await self.require_user(user_id))

	async def get_by_username(self, username: str) -> UserPublic:
		user = await self._repo.get_by_username(username)
		if user is None:
			raise NotFoundError("user_not_found")
		return UserPublic.from_model(user)

	async def username_available(self, username: str) -> UsernameAvailability:
		user = await self._repo.get_by_username(username)
		return UsernameAvailability(username=username, available=user is None)

	async def search(self, query: str, *, page: int = 1) -> UserSearchResponse:
		page = max(1, page)
		size = settings.user_search_page_size
		needle = query.strip()
		if not needle:
			return UserSearchResponse(items=[], page=page, has_next_page=False)
		# one extra row tells us whether another page exists
		rows = await self._repo.search(needle, offset=(page - 1) * size, limit=size + 1)
		return UserSearchResponse(
			items=[UserPublic.from_model(user) for user in rows[:size]],
			page=page,
			has_next_page=len(rows) > size,
		)


_SERVICE = IdentityService()


async def register(payload: RegisterRequest) -> UserProfile:
	return await _SERVICE.register(payload)


async def login(payload: LoginRequest) -> LoginResponse:
	return await _SERVICE.login(payload)


async def me(auth_user: AuthenticatedUser) -> UserProfile:
	return await _SERVICE.me(auth_user)


async def get_user(user_id: str) -> UserPublic:
	return await _SERVICE.get_user(user_id)


async def get_by_username(username: str) -> UserPublic:
	return await _SERVICE.get_by_username(username)


async def username_available(username: str) -> UsernameAvailability:
	return await _SERVICE.username_available(username)


async def search(query: str, *, page: int = 1) -> UserSearchResponse:
	return await _SERVICE.search(query, page=page)
