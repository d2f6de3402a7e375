"""Conversation and message persistence.

A message insert and the conversation append happen in one transaction, and
the caller learns whether the message was the first in its conversation.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from hive.domain.exceptions import NotFoundError
from hive.domain.ids import new_id
from hive.infra import postgres
from hive.infra.memory import MemoryDatabase

from .crypto import EmojiRef
from .models import Conversation, Message, canonical_pair, emojis_to_json


class PostgresChatRepository:
	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		async with postgres.connection() as conn:
			row = await conn.fetchrow("SELECT * FROM conversations WHERE id = $1", conversation_id)
		return Conversation.from_record(row) if row else None

	async def find_conversation(self, user_one: str, user_two: str) -> Optional[Conversation]:
		user_a, user_b = canonical_pair(user_one, user_two)
		async with postgres.connection() as conn:
			row = await conn.fetchrow(
				"SELECT * FROM conversations WHERE user_a = $1 AND user_b = $2",
				user_a,
				user_b,
			)
		return Conversation.from_record(row) if row else None

	async def create_conversation(self, user_one: str, user_two: str, encryption_key: str) -> Tuple[Conversation, bool]:
		"""Create the pair's conversation, or return the one a concurrent call created."""
		user_a, user_b = canonical_pair(user_one, user_two)
		async with postgres.connection() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					"""
					INSERT INTO conversations (id, user_a, user_b, encryption_key)
					VALUES ($1, $2, $3, $4)
					ON CONFLICT (user_a, user_b) DO NOTHING
					RETURNING *
					""",
					new_id(),
					user_a,
					user_b,
					encryption_key,
				)
				if row is None:
					row = await conn.fetchrow(
						"SELECT * FROM conversations WHERE user_a = $1 AND user_b = $2",
						user_a,
						user_b,
					)
					return Conversation.from_record(row), False
				await conn.execute(
					"""
					UPDATE users
					SET conversations = array_append(conversations, $1)
					WHERE id = ANY($2::uuid[])
					""",
					row["id"],
					[user_a, user_b],
				)
		return Conversation.from_record(row), True

	async def list_conversations(self, user_id: str) -> List[Conversation]:
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM conversations
				WHERE user_a = $1 OR user_b = $1
				ORDER BY created_at DESC
				""",
				user_id,
			)
		return [Conversation.from_record(row) for row in rows]

	async def append_message(
		self,
		conversation: Conversation,
		*,
		sender_id: str,
		receiver_id: str,
		content: str,
		emojis: Sequence[EmojiRef],
		just_emojis: bool,
		timestamp: datetime,
	) -> Tuple[Message, bool]:
		async with postgres.connection() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					"""
					INSERT INTO messages (id, conversation_id, sender_id, receiver_id, content, emojis, just_emojis, timestamp)
					VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, $8)
					RETURNING *
					""",
					new_id(),
					conversation.id,
					sender_id,
					receiver_id,
					content,
					emojis_to_json(emojis),
					just_emojis,
					timestamp,
				)
				total = await conn.fetchval(
					"""
					UPDATE conversations
					SET message_ids = array_append(message_ids, $2)
					WHERE id = $1
					RETURNING cardinality(message_ids)
					""",
					conversation.id,
					row["id"],
				)
				if total is None:
					raise NotFoundError("conversation_not_found")
		return Message.from_record(row), int(total) == 1

	async def count_messages(self, conversation_id: str) -> int:
		async with postgres.connection() as conn:
			total = await conn.fetchval(
				"SELECT COUNT(*) FROM messages WHERE conversation_id = $1",
				conversation_id,
			)
		return int(total or 0)

	async def list_messages(self, conversation_id: str, *, offset: int, limit: int) -> List[Message]:
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM messages
				WHERE conversation_id = $1
				ORDER BY timestamp DESC, id DESC
				OFFSET $2 LIMIT $3
				""",
				conversation_id,
				offset,
				limit,
			)
		return [Message.from_record(row) for row in rows]

	async def delete_conversation(self, conversation: Conversation) -> None:
		async with postgres.connection() as conn:
			async with conn.transaction():
				await conn.execute("DELETE FROM conversations WHERE id = $1", conversation.id)
				await conn.execute(
					"""
					UPDATE users
					SET conversations = array_remove(conversations, $1)
					WHERE id = ANY($2::uuid[])
					""",
					conversation.id,
					list(conversation.participants()),
				)


class InMemoryChatRepository:
	def __init__(self, db: MemoryDatabase) -> None:
		self._db = db

	def _copy(self, conversation: Conversation) -> Conversation:
		return replace(conversation, message_ids=list(conversation.message_ids))

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		conversation = self._db.conversations.get(conversation_id)
		return self._copy(conversation) if conversation else None

	async def find_conversation(self, user_one: str, user_two: str) -> Optional[Conversation]:
		pair = canonical_pair(user_one, user_two)
		for conversation in self._db.conversations.values():
			if conversation.participants() == pair:
				return self._copy(conversation)
		return None

	async def create_conversation(self, user_one: str, user_two: str, encryption_key: str) -> Tuple[Conversation, bool]:
		async with self._db.lock:
			user_a, user_b = canonical_pair(user_one, user_two)
			for existing in self._db.conversations.values():
				if existing.participants() == (user_a, user_b):
					return self._copy(existing), False
			conversation = Conversation(
				id=new_id(),
				user_a=user_a,
				user_b=user_b,
				encryption_key=encryption_key,
				created_at=datetime.now(timezone.utc),
			)
			self._db.conversations[conversation.id] = conversation
			for user_id in (user_a, user_b):
				user = self._db.users.get(user_id)
				if user is not None:
					user.conversations.append(conversation.id)
			return self._copy(conversation), True

	async def list_conversations(self, user_id: str) -> List[Conversation]:
		matches = [self._copy(c) for c in self._db.conversations.values() if c.is_participant(user_id)]
		return sorted(matches, key=lambda conversation: conversation.created_at, reverse=True)

	async def append_message(
		self,
		conversation: Conversation,
		*,
		sender_id: str,
		receiver_id: str,
		content: str,
		emojis: Sequence[EmojiRef],
		just_emojis: bool,
		timestamp: datetime,
	) -> Tuple[Message, bool]:
		async with self._db.lock:
			stored = self._db.conversations.get(conversation.id)
			if stored is None:
				raise NotFoundError("conversation_not_found")
			message = Message(
				id=new_id(),
				conversation_id=stored.id,
				sender_id=sender_id,
				receiver_id=receiver_id,
				content=content,
				emojis=tuple(emojis),
				just_emojis=just_emojis,
				timestamp=timestamp,
			)
			self._db.messages[message.id] = message
			stored.message_ids.append(message.id)
			return replace(message), len(stored.message_ids) == 1

	async def count_messages(self, conversation_id: str) -> int:
		conversation = self._db.conversations.get(conversation_id)
		return len(conversation.message_ids) if conversation else 0

	async def list_messages(self, conversation_id: str, *, offset: int, limit: int) -> List[Message]:
		conversation = self._db.conversations.get(conversation_id)
		if conversation is None:
			return []
		# append order breaks timestamp ties
		ordered = sorted(
			enumerate(self._db.messages[message_id] for message_id in conversation.message_ids),
			key=lambda pair: (pair[1].timestamp, pair[0]),
			reverse=True,
		)
		return [replace(message) for _, message in ordered[offset : offset + limit]]

	async def delete_conversation(self, conversation: Conversation) -> None:
		async with self._db.lock:
			stored = self._db.conversations.pop(conversation.id, None)
			if stored is None:
				return
			for message_id in stored.message_ids:
				self._db.messages.pop(message_id, None)
			for user_id in stored.participants():
				user = self._db.users.get(user_id)
				if user is not None and stored.id in user.conversations:
					user.conversations.remove(stored.id)
