"""Post and comment persistence."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from hive.domain.ids import new_id
from hive.infra import postgres
from hive.infra.memory import MemoryDatabase

from .models import Comment, Post


class PostgresFeedRepository:
	async def create_post(self, author_id: str, text: str, image: Optional[str]) -> Post:
		async with postgres.connection() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO posts (id, author_id, text, image)
				VALUES ($1, $2, $3, $4)
				RETURNING *
				""",
				new_id(),
				author_id,
				text,
				image,
			)
		return Post.from_record(row)

	async def get_post(self, post_id: str) -> Optional[Post]:
		async with postgres.connection() as conn:
			row = await conn.fetchrow("SELECT * FROM posts WHERE id = $1", post_id)
		return Post.from_record(row) if row else None

	async def list_posts_by(self, author_ids: Iterable[str]) -> List[Post]:
		ids = list(author_ids)
		if not ids:
			return []
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM posts
				WHERE author_id = ANY($1::uuid[])
				ORDER BY created_at DESC, id DESC
				""",
				ids,
			)
		return [Post.from_record(row) for row in rows]

	async def like(self, post_id: str, user_id: str) -> Optional[Post]:
		"""Record a like once per user; returns None when the post does not exist."""
		async with postgres.connection() as conn:
			row = await conn.fetchrow(
				"""
				UPDATE posts
				SET likes = likes + 1, liked_by = array_append(liked_by, $2)
				WHERE id = $1 AND NOT ($2 = ANY(liked_by))
				RETURNING *
				""",
				post_id,
				user_id,
			)
			if row is None:
				row = await conn.fetchrow("SELECT * FROM posts WHERE id = $1", post_id)
		return Post.from_record(row) if row else None

	async def add_comment(self, post_id: str, user_id: str, content: str) -> Comment:
		async with postgres.connection() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO comments (id, post_id, user_id, content)
				VALUES ($1, $2, $3, $4)
				RETURNING *
				""",
				new_id(),
				post_id,
				user_id,
				content,
			)
		return Comment.from_record(row)

	async def comments_for(self, post_ids: Iterable[str]) -> Dict[str, List[Comment]]:
		ids = list(post_ids)
		grouped: Dict[str, List[Comment]] = {post_id: [] for post_id in ids}
		if not ids:
			return grouped
		async with postgres.connection() as conn:
			rows = await conn.fetch(
				"""
				SELECT * FROM comments
				WHERE post_id = ANY($1::uuid[])
				ORDER BY created_at ASC
				""",
				ids,
			)
		for row in rows:
			comment = Comment.from_record(row)
			grouped.setdefault(comment.post_id, []).append(comment)
		return grouped


class InMemoryFeedRepository:
	def __init__(self, db: MemoryDatabase) -> None:
		self._db = db

	def _copy(self, post: Post) -> Post:
		return replace(post, liked_by=list(post.liked_by))

	async def create_post(self, author_id: str, text: str, image: Optional[str]) -> Post:
		async with self._db.lock:
			post = Post(
				id=new_id(),
				author_id=author_id,
				text=text,
				image=image,
				created_at=datetime.now(timezone.utc),
			)
			self._db.posts[post.id] = post
			return self._copy(post)

	async def get_post(self, post_id: str) -> Optional[Post]:
		post = self._db.posts.get(post_id)
		return self._copy(post) if post else None

	async def list_posts_by(self, author_ids: Iterable[str]) -> List[Post]:
		wanted = set(author_ids)
		posts = [self._copy(post) for post in self._db.posts.values() if post.author_id in wanted]
		return sorted(posts, key=lambda post: post.created_at, reverse=True)

	async def like(self, post_id: str, user_id: str) -> Optional[Post]:
		async with self._db.lock:
			post = self._db.posts.get(post_id)
			if post is None:
				return None
			if user_id not in post.liked_by:
				post.liked_by.append(user_id)
				post.likes += 1
			return self._copy(post)

	async def add_comment(self, post_id: str, user_id: str, content: str) -> Comment:
		async with self._db.lock:
			comment = Comment(
				id=new_id(),
				post_id=post_id,
				user_id=user_id,
				content=content,
				created_at=datetime.now(timezone.utc),
			)
			self._db.comments[comment.id] = comment
			return replace(comment)

	async def comments_for(self, post_ids: Iterable[str]) -> Dict[str, List[Comment]]:
		grouped: Dict[str, List[Comment]] = {post_id: [] for post_id in post_ids}
		for comment in sorted(self._db.comments.values(), key=lambda item: item.created_at):
			if comment.post_id in grouped:
				grouped[comment.post_id].append(replace(comment))
		return grouped
