"""Posts, likes and comments."""

from __future__ import annotations

from typing import List, Optional

from hive.domain.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from hive.domain.identity.repo import PostgresUserRepository
from hive.domain.ids import normalise_id, require_id
from hive.infra.auth import AuthenticatedUser
from hive.obs import metrics as obs_metrics

from .models import Post
from .repo import PostgresFeedRepository
from .schemas import CommentCreateRequest, CommentResponse, PostCreateRequest, PostResponse


class FeedService:
	def __init__(self, repository=None, users=None) -> None:
		self._repo = repository or PostgresFeedRepository()
		self._users = users or PostgresUserRepository()

	async def _with_comments(self, posts: List[Post]) -> List[PostResponse]:
		comments = await self._repo.comments_for(post.id for post in posts)
		return [PostResponse.from_model(post, comments.get(post.id)) for post in posts]

	async def _require_post(self, post_id: str) -> Post:
		post = await self._repo.get_post(require_id(post_id, "post_not_found"))
		if post is None:
			raise NotFoundError("post_not_found")
		return post

	async def create_post(self, auth_user: AuthenticatedUser, payload: PostCreateRequest) -> PostResponse:
		post = await self._repo.create_post(auth_user.id, payload.text, payload.image)
		obs_metrics.inc_post_created()
		return PostResponse.from_model(post)

	async def list_user_posts(self, user_id: str) -> List[PostResponse]:
		author_id = require_id(user_id, "user_not_found")
		if await self._users.get_user(author_id) is None:
			raise NotFoundError("user_not_found")
		return await self._with_comments(await self._repo.list_posts_by([author_id]))

	async def list_friends_feed(self, auth_user: AuthenticatedUser, user_id: Optional[str] = None) -> List[PostResponse]:
		"""The caller's own posts and their friends' posts, newest first."""
		if user_id is not None and normalise_id(user_id) != normalise_id(auth_user.id):
			raise AuthorizationError("feed_owner_only")
		actor = await self._users.get_user(require_id(auth_user.id, "user_not_found"))
		if actor is None:
			raise AuthenticationError("unknown_user")
		posts = await self._repo.list_posts_by([actor.id, *actor.friends])
		return await self._with_comments(posts)

	async def like_post(self, auth_user: AuthenticatedUser, post_id: str) -> PostResponse:
		post = await self._repo.like(require_id(post_id, "post_not_found"), auth_user.id)
		if post is None:
			raise NotFoundError("post_not_found")
		return (await self._with_comments([post]))[0]

	async def comment(self, auth_user: AuthenticatedUser, post_id: str, payload: CommentCreateRequest) -> CommentResponse:
		post = await self._require_post(post_id)
		comment = await self._repo.add_comment(post.id, auth_user.id, payload.content)
		obs_metrics.inc_post_comment_created()
		return CommentResponse.from_model(comment)


_SERVICE = FeedService()


async def create_post(auth_user: AuthenticatedUser, payload: PostCreateRequest) -> PostResponse:
	return await _SERVICE.create_post(auth_user, payload)


async def list_user_posts(user_id: str) -> List[PostResponse]:
	return await _SERVICE.list_user_posts(user_id)


async def list_friends_feed(auth_user: AuthenticatedUser, user_id: Optional[str] = None) -> List[PostResponse]:
	return await _SERVICE.list_friends_feed(auth_user, user_id)


async def like_post(auth_user: AuthenticatedUser, post_id: str) -> PostResponse:
	return await _SERVICE.like_post(auth_user, post_id)


async def comment(auth_user: AuthenticatedUser, post_id: str, payload: CommentCreateRequest) -> CommentResponse:
	return await _SERVICE.comment(auth_user, post_id, payload)
