"""Persistence for user accounts: asyncpg in production, in-memory for tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import asyncpg

from hive.domain.exceptions import ConflictError
from hive.domain.ids import new_id
from hive.infra import postgres
from hive.infra.memory import MemoryDatabase

from .models import User

_USER_COLUMNS = """
	id, username, password_hash, name, phone, city, profile_picture,
	friends, pending_friend_requests, conversations, created_at
"""


def _like_pattern(query: str) -> str:
	escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
	return f"%{escaped}%"


class PostgresUserRepository:
	async def create_user(
		self,
		*,
		username: str,
		password_hash: str,
		name: str,
		phone: Optional[str] = None,
		city: Optional[str] = None,
		profile_picture: Optional[str] = None,
	) -> User:
		async with postgres.connection() as conn:
			try:
				row = await conn.fetchrow(
					f"""
					INSERT INTO users (id, username, password_hash, name, phone, city, profile_picture)
					VALUES ($1, $2, $3, $4, $5, $6, $7)
					RETURNING {_USER_COLUMNS}
					""",
					new_id(),
					username,
					password_hash,
					name,
					phone,
					city,
					profile_picture,
				)
			except asyncpg.UniqueViolationError:
				raise ConflictError("username_taken") from None
		return User.from_record(row)

	async def get_user(self, user_id: str) -> Optional[User]:
		async with postgres.connection() as conn:
			row = await conn.fetchrow(f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1", user_id)
		return User.from_record(row) if row else None

	async def get_by_username(self, username: str) -> Optional[User]:
		async with postgres.connection() as conn:
			row = await conn.fetchrow(f"SELECT {_USER_COLUMNS} FROM users WHERE username = $1", username)
		return User.from_record(row) if row else None

	async def get_users(self, user_ids: Iterable[str]) -> List[User]:
		ids = list(user_ids)
		if not ids:
			return []
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				f"SELECT {_USER_COLUMNS} FROM users WHERE id = ANY($1::uuid[]) ORDER BY username",
				ids,
			)
		return [User.from_record(row) for row in rows]

	async def search(self, query: str, *, offset: int, limit: int) -> List[User]:
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_USER_COLUMNS}
				FROM users
				WHERE username ILIKE $1 OR name ILIKE $1
				ORDER BY username
				OFFSET $2 LIMIT $3
				""",
				_like_pattern(query),
				offset,
				limit,
			)
		return [User.from_record(row) for row in rows]


class InMemoryUserRepository:
	"""Dict-backed repository sharing a MemoryDatabase with the other domains."""

	def __init__(self, db: MemoryDatabase) -> None:
		self._db = db

	async def create_user(
		self,
		*,
		username: str,
		password_hash: str,
		name: str,
		phone: Optional[str] = None,
		city: Optional[str] = None,
		profile_picture: Optional[str] = None,
	) -> User:
		async with self._db.lock:
			if any(user.username == username for user in self._db.users.values()):
				raise ConflictError("username_taken")
			user = User(
				id=new_id(),
				username=username,
				password_hash=password_hash,
				name=name,
				created_at=datetime.now(timezone.utc),
				phone=phone,
				city=city,
				profile_picture=profile_picture,
			)
			self._db.users[user.id] = user
			return _copy(user)

	async def get_user(self, user_id: str) -> Optional[User]:
		user = self._db.users.get(user_id)
		return _copy(user) if user else None

	async def get_by_username(self, username: str) -> Optional[User]:
		for user in self._db.users.values():
			if user.username == username:
				return _copy(user)
		return None

	async def get_users(self, user_ids: Iterable[str]) -> List[User]:
		wanted = set(user_ids)
		users = [_copy(user) for user in self._db.users.values() if user.id in wanted]
		return sorted(users, key=lambda user: user.username)

	async def search(self, query: str, *, offset: int, limit: int) -> List[User]:
		needle = query.lower()
		matches = [
			user
			for user in self._db.users.values()
			if needle in user.username.lower() or needle in user.name.lower()
		]
		matches.sort(key=lambda user: user.username)
		return [_copy(user) for user in matches[offset : offset + limit]]


def _copy(user: User) -> User:
	# callers must not mutate stored state outside the lock
	return replace(
		user,
		friends=list(user.friends),
		pending_friend_requests=list(user.pending_friend_requests),
		conversations=list(user.conversations),
	)
