"""Pydantic schemas for friend requests."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from hive.domain.identity.schemas import UserPublic

from .models import Friendship


class FriendRequestSend(BaseModel):
	username: str = Field(..., min_length=1, description="Username of the user to befriend")


class FriendshipAction(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	friendship_id: str = Field(..., alias="friendshipId")


class FriendshipSummary(BaseModel):
	id: str
	sender_id: str
	receiver_id: str
	status: Literal["PENDING", "ACCEPTED", "DECLINED"]
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_model(cls, friendship: Friendship) -> "FriendshipSummary":
		return cls(
			id=friendship.id,
			sender_id=friendship.sender_id,
			receiver_id=friendship.receiver_id,
			status=friendship.status.value,
			created_at=friendship.created_at,
			updated_at=friendship.updated_at,
		)


class FriendRequestNotice(BaseModel):
	"""Pushed to the receiver; carries the sender's public profile."""

	friendship: FriendshipSummary
	user_obj: UserPublic = Field(..., serialization_alias="userObj")


class PendingFriendRequest(BaseModel):
	friendship: FriendshipSummary
	sender: UserPublic
