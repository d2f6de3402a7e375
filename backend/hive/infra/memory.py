"""Process-local store backing the in-memory repositories.

The identity, social, chat and feed repositories share one instance so a
multi-entity mutation (friendship plus both users, message plus conversation)
happens under a single lock, mirroring a database transaction.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict


class MemoryDatabase:
	def __init__(self) -> None:
		self.lock = asyncio.Lock()
		self.users: Dict[str, Any] = {}
		self.friendships: Dict[str, Any] = {}
		self.conversations: Dict[str, Any] = {}
		self.messages: Dict[str, Any] = {}
		self.posts: Dict[str, Any] = {}
		self.comments: Dict[str, Any] = {}

	def clear(self) -> None:
		for table in (
			self.users,
			self.friendships,
			self.conversations,
			self.messages,
			self.posts,
			self.comments,
		):
			table.clear()
