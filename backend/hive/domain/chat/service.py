"""Message relay: conversation membership, persistence and participant-only delivery."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from hive.domain.exceptions import (
	AuthenticationError,
	AuthorizationError,
	ConflictError,
	NotFoundError,
	ValidationFailed,
)
from hive.domain.identity.repo import PostgresUserRepository
from hive.domain.ids import require_id
from hive.domain.relay import delivery
from hive.infra.auth import AuthenticatedUser
from hive.obs import metrics as obs_metrics
from hive.settings import settings

from . import crypto
from .models import Conversation
from .repo import PostgresChatRepository
from .schemas import ConversationResponse, MessagePage, MessageResponse, SendMessageRequest

logger = logging.getLogger(__name__)


def _actor_id(auth_user: Optional[AuthenticatedUser]) -> str:
	if auth_user is None:
		raise AuthenticationError("authentication_required")
	return auth_user.id


def validate_page(page: int, limit: int) -> None:
	if page < 1:
		raise ValidationFailed("invalid_page")
	if limit < 1 or limit > settings.chat_max_page_size:
		raise ValidationFailed("invalid_limit")


class ChatService:
	def __init__(self, repository=None, users=None) -> None:
		self._repo = repository or PostgresChatRepository()
		self._users = users or PostgresUserRepository()

	async def _require_conversation(self, actor_id: str, conversation_id: str) -> Conversation:
		conversation = await self._repo.get_conversation(require_id(conversation_id, "conversation_not_found"))
		if conversation is None:
			raise NotFoundError("conversation_not_found")
		if not conversation.is_participant(actor_id):
			raise AuthorizationError("not_participant")
		return conversation

	async def start_conversation(self, auth_user: Optional[AuthenticatedUser], username: str) -> ConversationResponse:
		actor_id = _actor_id(auth_user)
		actor = await self._users.get_user(require_id(actor_id, "user_not_found"))
		if actor is None:
			raise AuthenticationError("unknown_user")
		peer = await self._users.get_by_username(username)
		if peer is None:
			raise NotFoundError("user_not_found")
		if peer.id == actor.id:
			raise ConflictError("self_conversation")
		if not actor.is_friend(peer.id):
			raise AuthorizationError("not_friends")
		existing = await self._repo.find_conversation(actor.id, peer.id)
		if existing is not None:
			return ConversationResponse.from_model(existing)
		conversation, created = await self._repo.create_conversation(actor.id, peer.id, crypto.generate_key())
		if created:
			obs_metrics.inc_conversation_created()
			logger.info("conversation started", extra={"conversation_id": conversation.id})
		return ConversationResponse.from_model(conversation)

	async def send_message(self, auth_user: Optional[AuthenticatedUser], payload: SendMessageRequest) -> MessageResponse:
		actor_id = _actor_id(auth_user)
		if not payload.content and not payload.emojis:
			raise ValidationFailed("empty_message")
		conversation = await self._require_conversation(actor_id, payload.conversation_id)
		receiver_id = conversation.other(actor_id)
		message, first = await self._repo.append_message(
			conversation,
			sender_id=actor_id,
			receiver_id=receiver_id,
			content=payload.content,
			emojis=[item.to_ref() for item in payload.emojis],
			just_emojis=payload.just_emojis,
			timestamp=datetime.now(timezone.utc),
		)
		obs_metrics.inc_chat_send()
		response = MessageResponse.from_model(message)
		body = response.model_dump(mode="json")
		if await delivery.emit_to_user(receiver_id, "message", body):
			obs_metrics.inc_chat_delivered()
		await delivery.emit_to_user(actor_id, "message", body)
		if first:
			# the loaded copy predates the append
			conversation.message_ids.append(message.id)
			await delivery.emit_to_user(
				receiver_id,
				"newConversation",
				ConversationResponse.from_model(conversation).model_dump(mode="json"),
			)
		return response

	async def history(
		self,
		auth_user: Optional[AuthenticatedUser],
		conversation_id: str,
		*,
		page: int = 1,
		limit: Optional[int] = None,
	) -> MessagePage:
		actor_id = _actor_id(auth_user)
		limit = settings.chat_page_size if limit is None else limit
		validate_page(page, limit)
		conversation = await self._require_conversation(actor_id, conversation_id)
		total = await self._repo.count_messages(conversation.id)
		messages = await self._repo.list_messages(conversation.id, offset=(page - 1) * limit, limit=limit)
		return MessagePage(
			conversation=ConversationResponse.from_model(conversation),
			items=[MessageResponse.from_model(message) for message in messages],
			page=page,
			limit=limit,
			total=total,
			has_next_page=page * limit < total,
		)

	async def list_conversations(self, auth_user: Optional[AuthenticatedUser]) -> List[ConversationResponse]:
		actor_id = _actor_id(auth_user)
		conversations = await self._repo.list_conversations(actor_id)
		return [ConversationResponse.from_model(conversation) for conversation in conversations]

	async def delete_conversation(self, auth_user: Optional[AuthenticatedUser], conversation_id: str) -> None:
		actor_id = _actor_id(auth_user)
		conversation = await self._require_conversation(actor_id, conversation_id)
		await self._repo.delete_conversation(conversation)
		logger.info("conversation deleted", extra={"conversation_id": conversation.id})


_SERVICE = ChatService()


async def start_conversation(auth_user: AuthenticatedUser, username: str) -> ConversationResponse:
	return await _SERVICE.start_conversation(auth_user, username)


async def send_message(auth_user: Optional[AuthenticatedUser], payload: SendMessageRequest) -> MessageResponse:
	return await _SERVICE.send_message(auth_user, payload)


async def history(
	auth_user: AuthenticatedUser,
	conversation_id: str,
	*,
	page: int = 1,
	limit: Optional[int] = None,
) -> MessagePage:
	return await _SERVICE.history(auth_user, conversation_id, page=page, limit=limit)


async def list_conversations(auth_user: AuthenticatedUser) -> List[ConversationResponse]:
	return await _SERVICE.list_conversations(auth_user)


async def delete_conversation(auth_user: AuthenticatedUser, conversation_id: str) -> None:
	await _SERVICE.delete_conversation(auth_user, conversation_id)
