"""Domain models for the social feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(slots=True)
class Post:
	id: str
	author_id: str
	text: str
	created_at: datetime
	image: Optional[str] = None
	likes: int = 0
	liked_by: List[str] = field(default_factory=list)

	@classmethod
	def from_record(cls, record) -> "Post":
		return cls(
			id=str(record["id"]),
			author_id=str(record["author_id"]),
			text=record["text"],
			created_at=record["created_at"],
			image=record["image"],
			likes=int(record["likes"]),
			liked_by=[str(value) for value in record["liked_by"] or []],
		)


@dataclass(slots=True)
class Comment:
	id: str
	post_id: str
	user_id: str
	content: str
	created_at: datetime

	@classmethod
	def from_record(cls, record) -> "Comment":
		return cls(
			id=str(record["id"]),
			post_id=str(record["post_id"]),
			user_id=str(record["user_id"]),
			content=record["content"],
			created_at=record["created_at"],
		)
