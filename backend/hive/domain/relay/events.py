"""Typed relay events, validated at the socket boundary before dispatch."""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from hive.domain.chat.schemas import MAX_CONTENT_LENGTH, MAX_EMOJIS, EmojiItem, SendMessageRequest


class _RelayEvent(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	# optional in-band credential; must match the identity bound at connect
	token: Optional[str] = None


class SendFriendRequest(_RelayEvent):
	type: Literal["sendFriendRequest"] = "sendFriendRequest"
	username: str = Field(..., min_length=1)


class AcceptFriendRequest(_RelayEvent):
	type: Literal["acceptFriendRequest"] = "acceptFriendRequest"
	friendship_id: str = Field(..., alias="friendshipId")


class DeclineFriendRequest(_RelayEvent):
	type: Literal["declineFriendRequest"] = "declineFriendRequest"
	friendship_id: str = Field(..., alias="friendshipId")


class SendMessage(_RelayEvent):
	type: Literal["message"] = "message"
	conversation_id: str = Field(..., alias="conversationId")
	content: str = Field(default="", max_length=MAX_CONTENT_LENGTH)
	emojis: List[EmojiItem] = Field(default_factory=list, max_length=MAX_EMOJIS)
	just_emojis: bool = Field(default=False, alias="justEmojis")

	def to_request(self) -> SendMessageRequest:
		return SendMessageRequest(
			conversation_id=self.conversation_id,
			content=self.content,
			emojis=self.emojis,
			just_emojis=self.just_emojis,
		)


RelayEvent = Annotated[
	Union[SendFriendRequest, AcceptFriendRequest, DeclineFriendRequest, SendMessage],
	Field(discriminator="type"),
]

_ADAPTER: TypeAdapter[RelayEvent] = TypeAdapter(RelayEvent)

EVENT_NAMES = frozenset({"sendFriendRequest", "acceptFriendRequest", "declineFriendRequest", "message"})


def parse_event(name: str, payload: Any) -> RelayEvent:
	"""Build the typed event for `name`; raises pydantic.ValidationError on bad payloads."""
	body = dict(payload) if isinstance(payload, dict) else {}
	body["type"] = name
	return _ADAPTER.validate_python(body)
