"""Pydantic schemas for conversations and messages."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .crypto import EmojiRef
from .models import Conversation, Message

MAX_CONTENT_LENGTH = 20_000
MAX_EMOJIS = 500


class EmojiItem(BaseModel):
	emoji: str = Field(..., min_length=1, max_length=16)
	index: int = Field(..., ge=0)

	def to_ref(self) -> EmojiRef:
		return EmojiRef(emoji=self.emoji, index=self.index)


class StartConversationRequest(BaseModel):
	username: str = Field(..., min_length=1, description="Friend to start chatting with")


class SendMessageRequest(BaseModel):
	"""Content is cipher-text produced by the sender; it is stored verbatim."""

	model_config = ConfigDict(populate_by_name=True)

	conversation_id: str = Field(..., alias="conversationId")
	content: str = Field(default="", max_length=MAX_CONTENT_LENGTH)
	emojis: List[EmojiItem] = Field(default_factory=list, max_length=MAX_EMOJIS)
	just_emojis: bool = Field(default=False, alias="justEmojis")


class MessageResponse(BaseModel):
	id: str
	conversation_id: str
	sender_id: str
	receiver_id: str
	content: str
	emojis: List[EmojiItem]
	just_emojis: bool
	timestamp: datetime

	@classmethod
	def from_model(cls, message: Message) -> "MessageResponse":
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			sender_id=message.sender_id,
			receiver_id=message.receiver_id,
			content=message.content,
			emojis=[EmojiItem(emoji=ref.emoji, index=ref.index) for ref in message.emojis],
			just_emojis=message.just_emojis,
			timestamp=message.timestamp,
		)


class ConversationResponse(BaseModel):
	id: str
	participants: List[str]
	# handed out in plaintext; see hive.domain.chat.crypto
	encryption_key: str
	message_count: int
	created_at: datetime

	@classmethod
	def from_model(cls, conversation: Conversation) -> "ConversationResponse":
		return cls(
			id=conversation.id,
			participants=list(conversation.participants()),
			encryption_key=conversation.encryption_key,
			message_count=len(conversation.message_ids),
			created_at=conversation.created_at,
		)


class MessagePage(BaseModel):
	conversation: Optional[ConversationResponse] = None
	items: List[MessageResponse]
	page: int
	limit: int
	total: int
	has_next_page: bool
