"""Chat domain exports."""

from .service import delete_conversation, history, list_conversations, send_message, start_conversation

__all__ = [
	"delete_conversation",
	"history",
	"list_conversations",
	"send_message",
	"start_conversation",
]
