"""REST surface for conversations and message history."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from hive.api.errors import to_http_error
from hive.domain.chat import service
from hive.domain.chat.schemas import (
	ConversationResponse,
	MessagePage,
	MessageResponse,
	SendMessageRequest,
	StartConversationRequest,
)
from hive.domain.exceptions import HiveError
from hive.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api")


@router.post("/startConversation", response_model=ConversationResponse)
async def start_conversation(
	payload: StartConversationRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ConversationResponse:
	try:
		return await service.start_conversation(auth_user, payload.username)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/conversations", response_model=List[ConversationResponse])
async def list_conversations(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[ConversationResponse]:
	try:
		return await service.list_conversations(auth_user)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.get("/conversations/{conversation_id}", response_model=MessagePage)
async def conversation_history(
	conversation_id: str,
	page: int = Query(default=1),
	limit: Optional[int] = Query(default=None),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MessagePage:
	try:
		return await service.history(auth_user, conversation_id, page=page, limit=limit)
	except HiveError as exc:
		raise to_http_error(exc) from None


@router.delete("/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
	conversation_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Response:
	try:
		await service.delete_conversation(auth_user, conversation_id)
	except HiveError as exc:
		raise to_http_error(exc) from None
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sendMessage", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
	payload: SendMessageRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MessageResponse:
	try:
		return await service.send_message(auth_user, payload)
	except HiveError as exc:
		raise to_http_error(exc) from None
