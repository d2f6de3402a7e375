"""Pydantic schemas for registration, login and user lookups."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import NAME_MIN_LENGTH, PASSWORD_MIN_LENGTH, USERNAME_MIN_LENGTH, User


class RegisterRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	username: str = Field(..., min_length=USERNAME_MIN_LENGTH, max_length=32, pattern=r"^\S+$")
	password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=256)
	name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=80)
	phone: Optional[str] = Field(default=None, max_length=32)
	city: Optional[str] = Field(default=None, max_length=80)
	profile_picture: Optional[str] = Field(default=None, alias="profilePicture", max_length=2048)


class LoginRequest(BaseModel):
	username: str = Field(..., min_length=1)
	password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
	"""Profile fields any authenticated user may see."""

	id: str
	username: str
	name: str
	city: Optional[str] = None
	profile_picture: Optional[str] = None

	@classmethod
	def from_model(cls, user: User) -> "UserPublic":
		return cls(
			id=user.id,
			username=user.username,
			name=user.name,
			city=user.city,
			profile_picture=user.profile_picture,
		)


class UserProfile(UserPublic):
	"""The caller's own account, including its social references."""

	phone: Optional[str] = None
	friends: List[str] = Field(default_factory=list)
	pending_friend_requests: List[str] = Field(default_factory=list)
	conversations: List[str] = Field(default_factory=list)
	created_at: datetime

	@classmethod
	def from_model(cls, user: User) -> "UserProfile":
		return cls(
			id=user.id,
			username=user.username,
			name=user.name,
			city=user.city,
			profile_picture=user.profile_picture,
			phone=user.phone,
			friends=list(user.friends),
			pending_friend_requests=list(user.pending_friend_requests),
			conversations=list(user.conversations),
			created_at=user.created_at,
		)


class LoginResponse(BaseModel):
	access_token: str
	token_type: str = "bearer"
	expires_in: int
	user: UserProfile


class UsernameAvailability(BaseModel):
	username: str
	available: bool


class UserSearchResponse(BaseModel):
	items: List[UserPublic]
	page: int
	has_next_page: bool
