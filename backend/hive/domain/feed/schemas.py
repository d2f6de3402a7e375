"""Pydantic schemas for posts and comments."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import Comment, Post


class PostCreateRequest(BaseModel):
	text: str = Field(..., min_length=1, max_length=5000)
	image: Optional[str] = Field(default=None, max_length=2048)


class CommentCreateRequest(BaseModel):
	content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
	id: str
	post_id: str
	user_id: str
	content: str
	created_at: datetime

	@classmethod
	def from_model(cls, comment: Comment) -> "CommentResponse":
		return cls(
			id=comment.id,
			post_id=comment.post_id,
			user_id=comment.user_id,
			content=comment.content,
			created_at=comment.created_at,
		)


class PostResponse(BaseModel):
	id: str
	author_id: str
	text: str
	image: Optional[str] = None
	likes: int
	liked_by: List[str]
	comments: List[CommentResponse] = Field(default_factory=list)
	created_at: datetime

	@classmethod
	def from_model(cls, post: Post, comments: Optional[List[Comment]] = None) -> "PostResponse":
		return cls(
			id=post.id,
			author_id=post.author_id,
			text=post.text,
			image=post.image,
			likes=post.likes,
			liked_by=list(post.liked_by),
			comments=[CommentResponse.from_model(comment) for comment in comments or []],
			created_at=post.created_at,
		)
