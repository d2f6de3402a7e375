"""Domain models for two-party conversations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple

from .crypto import EmojiRef, SealedText


def canonical_pair(user_one: str, user_two: str) -> Tuple[str, str]:
	ordered = sorted((str(user_one), str(user_two)))
	return ordered[0], ordered[1]


def emojis_from_json(raw) -> Tuple[EmojiRef, ...]:
	if isinstance(raw, str):
		raw = json.loads(raw) if raw else []
	return tuple(EmojiRef(emoji=item["emoji"], index=int(item["index"])) for item in raw or [])


def emojis_to_json(emojis) -> str:
	return json.dumps([ref.to_dict() for ref in emojis], ensure_ascii=False)


@dataclass(slots=True)
class Conversation:
	"""Exactly two participants stored in canonical order."""

	id: str
	user_a: str
	user_b: str
	encryption_key: str
	created_at: datetime
	message_ids: List[str] = field(default_factory=list)

	@classmethod
	def from_record(cls, record) -> "Conversation":
		return cls(
			id=str(record["id"]),
			user_a=str(record["user_a"]),
			user_b=str(record["user_b"]),
			encryption_key=record["encryption_key"],
			created_at=record["created_at"],
			message_ids=[str(value) for value in record["message_ids"] or []],
		)

	def participants(self) -> Tuple[str, str]:
		return (self.user_a, self.user_b)

	def is_participant(self, user_id: str) -> bool:
		return user_id in (self.user_a, self.user_b)

	def other(self, user_id: str) -> str:
		return self.user_b if user_id == self.user_a else self.user_a


@dataclass(slots=True)
class Message:
	id: str
	conversation_id: str
	sender_id: str
	receiver_id: str
	content: str
	emojis: Tuple[EmojiRef, ...]
	just_emojis: bool
	timestamp: datetime

	@classmethod
	def from_record(cls, record) -> "Message":
		return cls(
			id=str(record["id"]),
			conversation_id=str(record["conversation_id"]),
			sender_id=str(record["sender_id"]),
			receiver_id=str(record["receiver_id"]),
			content=record["content"],
			emojis=emojis_from_json(record["emojis"]),
			just_emojis=bool(record["just_emojis"]),
			timestamp=record["timestamp"],
		)

	def sealed(self) -> SealedText:
		return SealedText(content=self.content, emojis=self.emojis, just_emojis=self.just_emojis)
