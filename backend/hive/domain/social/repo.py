"""Friendship persistence; every transition updates the row and both users together."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

import asyncpg

from hive.domain.exceptions import ConflictError, NotFoundError
from hive.domain.ids import new_id
from hive.infra import postgres
from hive.infra.memory import MemoryDatabase

from .models import Friendship, FriendshipStatus

_PAIR_FILTER = """
	LEAST(sender_id, receiver_id) = LEAST($1::uuid, $2::uuid)
	AND GREATEST(sender_id, receiver_id) = GREATEST($1::uuid, $2::uuid)
"""


class PostgresFriendshipRepository:
	async def get_friendship(self, friendship_id: str) -> Optional[Friendship]:
		async with postgres.connection() as conn:
			row = await conn.fetchrow("SELECT * FROM friendships WHERE id = $1", friendship_id)
		return Friendship.from_record(row) if row else None

	async def find_between(self, user_a: str, user_b: str) -> Optional[Friendship]:
		async with postgres.connection() as conn:
			row = await conn.fetchrow(f"SELECT * FROM friendships WHERE {_PAIR_FILTER}", user_a, user_b)
		return Friendship.from_record(row) if row else None

	async def create_request(self, sender_id: str, receiver_id: str) -> Friendship:
		friendship_id = new_id()
		async with postgres.connection() as conn:
			async with conn.transaction():
				try:
					row = await conn.fetchrow(
						"""
						INSERT INTO friendships (id, sender_id, receiver_id, status)
						VALUES ($1, $2, $3, 'PENDING')
						RETURNING *
						""",
						friendship_id,
						sender_id,
						receiver_id,
					)
				except asyncpg.UniqueViolationError:
					# a concurrent request for the same pair won the insert
					raise ConflictError("already_requested") from None
				await conn.execute(
					"""
					UPDATE users
					SET pending_friend_requests = array_append(pending_friend_requests, $1)
					WHERE id = ANY($2::uuid[])
					""",
					friendship_id,
					[sender_id, receiver_id],
				)
		return Friendship.from_record(row)

	async def reopen_request(self, friendship_id: str, sender_id: str, receiver_id: str) -> Friendship:
		async with postgres.connection() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					"""
					UPDATE friendships
					SET sender_id = $2, receiver_id = $3, status = 'PENDING', updated_at = NOW()
					WHERE id = $1 AND status = 'DECLINED'
					RETURNING *
					""",
					friendship_id,
					sender_id,
					receiver_id,
				)
				if row is None:
					raise ConflictError("already_requested")
				await conn.execute(
					"""
					UPDATE users
					SET pending_friend_requests = array_append(array_remove(pending_friend_requests, $1), $1)
					WHERE id = ANY($2::uuid[])
					""",
					friendship_id,
					[sender_id, receiver_id],
				)
		return Friendship.from_record(row)

	async def accept(self, friendship: Friendship) -> Friendship:
		async with postgres.connection() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					"""
					UPDATE friendships
					SET status = 'ACCEPTED', updated_at = NOW()
					WHERE id = $1 AND status = 'PENDING'
					RETURNING *
					""",
					friendship.id,
				)
				if row is None:
					raise ConflictError("not_pending")
				for user_id, friend_id in (
					(friendship.sender_id, friendship.receiver_id),
					(friendship.receiver_id, friendship.sender_id),
				):
					await conn.execute(
						"""
						UPDATE users
						SET friends = CASE WHEN $3 = ANY(friends) THEN friends ELSE array_append(friends, $3) END,
							pending_friend_requests = array_remove(pending_friend_requests, $1)
						WHERE id = $2
						""",
						friendship.id,
						user_id,
						friend_id,
					)
		return Friendship.from_record(row)

	async def decline(self, friendship: Friendship) -> Friendship:
		async with postgres.connection() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					"""
					UPDATE friendships
					SET status = 'DECLINED', updated_at = NOW()
					WHERE id = $1 AND status = 'PENDING'
					RETURNING *
					""",
					friendship.id,
				)
				if row is None:
					raise ConflictError("not_pending")
				await conn.execute(
					"""
					UPDATE users
					SET pending_friend_requests = array_remove(pending_friend_requests, $1)
					WHERE id = ANY($2::uuid[])
					""",
					friendship.id,
					[friendship.sender_id, friendship.receiver_id],
				)
		return Friendship.from_record(row)

	async def list_pending_for(self, receiver_id: str) -> List[Friendship]:
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM friendships
				WHERE receiver_id = $1 AND status = 'PENDING'
				ORDER BY updated_at DESC
				""",
				receiver_id,
			)
		return [Friendship.from_record(row) for row in rows]


class InMemoryFriendshipRepository:
	def __init__(self, db: MemoryDatabase) -> None:
		self._db = db

	def _user(self, user_id: str):
		user = self._db.users.get(user_id)
		if user is None:
			raise NotFoundError("user_not_found")
		return user

	async def get_friendship(self, friendship_id: str) -> Optional[Friendship]:
		friendship = self._db.friendships.get(friendship_id)
		return replace(friendship) if friendship else None

	async def find_between(self, user_a: str, user_b: str) -> Optional[Friendship]:
		pair = {user_a, user_b}
		for friendship in self._db.friendships.values():
			if {friendship.sender_id, friendship.receiver_id} == pair:
				return replace(friendship)
		return None

	async def create_request(self, sender_id: str, receiver_id: str) -> Friendship:
		async with self._db.lock:
			pair = {sender_id, receiver_id}
			if any({f.sender_id, f.receiver_id} == pair for f in self._db.friendships.values()):
				raise ConflictError("already_requested")
			sender, receiver = self._user(sender_id), self._user(receiver_id)
			now = datetime.now(timezone.utc)
			friendship = Friendship(
				id=new_id(),
				sender_id=sender_id,
				receiver_id=receiver_id,
				status=FriendshipStatus.PENDING,
				created_at=now,
				updated_at=now,
			)
			self._db.friendships[friendship.id] = friendship
			sender.pending_friend_requests.append(friendship.id)
			receiver.pending_friend_requests.append(friendship.id)
			return replace(friendship)

	async def reopen_request(self, friendship_id: str, sender_id: str, receiver_id: str) -> Friendship:
		async with self._db.lock:
			friendship = self._db.friendships.get(friendship_id)
			if friendship is None or friendship.status is not FriendshipStatus.DECLINED:
				raise ConflictError("already_requested")
			sender, receiver = self._user(sender_id), self._user(receiver_id)
			friendship.sender_id = sender_id
			friendship.receiver_id = receiver_id
			friendship.status = FriendshipStatus.PENDING
			friendship.updated_at = datetime.now(timezone.utc)
			for user in (sender, receiver):
				if friendship_id not in user.pending_friend_requests:
					user.pending_friend_requests.append(friendship_id)
			return replace(friendship)

	async def accept(self, friendship: Friendship) -> Friendship:
		async with self._db.lock:
			stored = self._db.friendships.get(friendship.id)
			if stored is None or stored.status is not FriendshipStatus.PENDING:
				raise ConflictError("not_pending")
			sender, receiver = self._user(stored.sender_id), self._user(stored.receiver_id)
			stored.status = FriendshipStatus.ACCEPTED
			stored.updated_at = datetime.now(timezone.utc)
			for user, friend in ((sender, receiver), (receiver, sender)):
				if friend.id not in user.friends:
					user.friends.append(friend.id)
				if stored.id in user.pending_friend_requests:
					user.pending_friend_requests.remove(stored.id)
			return replace(stored)

	async def decline(self, friendship: Friendship) -> Friendship:
		async with self._db.lock:
			stored = self._db.friendships.get(friendship.id)
			if stored is None or stored.status is not FriendshipStatus.PENDING:
				raise ConflictError("not_pending")
			stored.status = FriendshipStatus.DECLINED
			stored.updated_at = datetime.now(timezone.utc)
			for user_id in (stored.sender_id, stored.receiver_id):
				user = self._user(user_id)
				if stored.id in user.pending_friend_requests:
					user.pending_friend_requests.remove(stored.id)
			return replace(stored)

	async def list_pending_for(self, receiver_id: str) -> List[Friendship]:
		pending = [
			replace(friendship)
			for friendship in self._db.friendships.values()
			if friendship.receiver_id == receiver_id and friendship.status is FriendshipStatus.PENDING
		]
		return sorted(pending, key=lambda friendship: friendship.updated_at, reverse=True)
