"""Domain models for user accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

USERNAME_MIN_LENGTH = 3
NAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 5


def _ids(values) -> List[str]:
	return [str(value) for value in values or []]


@dataclass(slots=True)
class User:
	"""A registered account together with its social references."""

	id: str
	username: str
	password_hash: str
	name: str
	created_at: datetime
	phone: Optional[str] = None
	city: Optional[str] = None
	profile_picture: Optional[str] = None
	friends: List[str] = field(default_factory=list)
	pending_friend_requests: List[str] = field(default_factory=list)
	conversations: List[str] = field(default_factory=list)

	@classmethod
	def from_record(cls, record) -> "User":
		return cls(
			id=str(record["id"]),
			username=record["username"],
			password_hash=record["password_hash"],
			name=record["name"],
			created_at=record["created_at"],
			phone=record["phone"],
			city=record["city"],
			profile_picture=record["profile_picture"],
			friends=_ids(record["friends"]),
			pending_friend_requests=_ids(record["pending_friend_requests"]),
			conversations=_ids(record["conversations"]),
		)

	def is_friend(self, user_id: str) -> bool:
		return user_id in self.friends
