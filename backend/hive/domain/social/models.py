"""Domain models for friend requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FriendshipStatus(str, Enum):
	"""Lifecycle of a friend request between two users."""

	PENDING = "PENDING"
	ACCEPTED = "ACCEPTED"
	DECLINED = "DECLINED"


@dataclass(slots=True)
class Friendship:
	"""One row per unordered pair; the sender is whoever asked most recently."""

	id: str
	sender_id: str
	receiver_id: str
	status: FriendshipStatus
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_record(cls, record) -> "Friendship":
		return cls(
			id=str(record["id"]),
			sender_id=str(record["sender_id"]),
			receiver_id=str(record["receiver_id"]),
			status=FriendshipStatus(record["status"]),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)

	def involves(self, user_id: str) -> bool:
		return user_id in (self.sender_id, self.receiver_id)

	def other(self, user_id: str) -> str:
		return self.receiver_id if user_id == self.sender_id else self.sender_id
