"""Socket.IO relay namespace: authenticated connections, friend requests and chat."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

import socketio
from pydantic import ValidationError
from socketio.exceptions import ConnectionRefusedError as ConnectionRefused

from hive.domain.chat import service as chat_service
from hive.domain.exceptions import AuthenticationError, HiveError
from hive.domain.social import service as social_service
from hive.infra.auth import AuthenticatedUser, bearer_from_header, verify_access_jwt
from hive.infra.rate_limit import RateLimitExceeded
from hive.obs import logging as obs_logging
from hive.obs import metrics as obs_metrics

from .events import (
	EVENT_NAMES,
	AcceptFriendRequest,
	DeclineFriendRequest,
	SendFriendRequest,
	SendMessage,
	parse_event,
)
from .registry import InMemorySessionRegistry, SessionRegistry

logger = logging.getLogger(__name__)


def _header(scope: dict, name: str) -> Optional[str]:
	target = name.encode().lower()
	for key, value in scope.get("headers", []):
		if key.lower() == target:
			return value.decode()
	return None


def extract_token(environ: dict, auth: Optional[dict]) -> Optional[str]:
	"""Find the bearer token in the handshake auth, the query string or the headers."""
	if isinstance(auth, dict) and auth.get("token"):
		return str(auth["token"])
	query = parse_qs(environ.get("QUERY_STRING", ""))
	if query.get("token"):
		return query["token"][0]
	header = environ.get("HTTP_AUTHORIZATION") or _header(environ.get("asgi.scope", {}), "authorization")
	return bearer_from_header(header)


class RelayNamespace(socketio.AsyncNamespace):
	"""Default namespace; every connection is bound to one verified user."""

	def __init__(self, registry: Optional[SessionRegistry] = None, namespace: str = "/") -> None:
		super().__init__(namespace)
		self.registry: SessionRegistry = registry if registry is not None else InMemorySessionRegistry()
		self._sessions: Dict[str, AuthenticatedUser] = {}

	async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
		try:
			user = verify_access_jwt(extract_token(environ, auth))
		except AuthenticationError as exc:
			logger.info("relay connection refused", extra={"reason": exc.reason})
			raise ConnectionRefused(exc.reason) from None
		obs_metrics.socket_connected(self.namespace)
		self._sessions[sid] = user
		self.registry.register(user.id, sid)

	async def on_disconnect(self, sid: str, reason: Optional[str] = None) -> None:
		user = self._sessions.pop(sid, None)
		if user is None:
			return
		obs_metrics.socket_disconnected(self.namespace)
		self.registry.unregister(user.id, sid)

	async def trigger_event(self, event: str, *args: Any):
		if event not in EVENT_NAMES:
			return await super().trigger_event(event, *args)
		sid = args[0]
		payload = args[1] if len(args) > 1 else None
		obs_metrics.socket_event(self.namespace, event)
		bound = self._sessions.get(sid)
		tokens = obs_logging.bind_context(user_id=bound.id if bound else None, route=f"socket:{event}")
		try:
			await self.dispatch(sid, event, payload)
		except HiveError as exc:
			await self._emit_error(sid, event, exc.reason, exc.code)
		except RateLimitExceeded as exc:
			await self._emit_error(sid, event, exc.reason, "rate_limited")
		except ValidationError:
			await self._emit_error(sid, event, "invalid_payload", "invalid")
		except Exception:
			logger.exception("relay event crashed", extra={"event": event})
			await self._emit_error(sid, event, "internal_error", "internal")
		finally:
			obs_logging.reset_context(tokens)
		return None

	def session_user(self, sid: str) -> AuthenticatedUser:
		user = self._sessions.get(sid)
		if user is None:
			raise AuthenticationError("authentication_required")
		return user

	async def dispatch(self, sid: str, name: str, payload: Any) -> None:
		user = self.session_user(sid)
		event = parse_event(name, payload)
		if event.token is not None and verify_access_jwt(event.token).id != user.id:
			raise AuthenticationError("token_mismatch")
		if isinstance(event, SendFriendRequest):
			await social_service.send_request(user, event.username)
		elif isinstance(event, AcceptFriendRequest):
			await social_service.accept_request(user, event.friendship_id)
		elif isinstance(event, DeclineFriendRequest):
			await social_service.decline_request(user, event.friendship_id)
		elif isinstance(event, SendMessage):
			await chat_service.send_message(user, event.to_request())

	async def _emit_error(self, sid: str, event: str, reason: str, code: str) -> None:
		obs_metrics.socket_error(event, reason)
		logger.info("relay event failed", extra={"event": event, "reason": reason, "code": code})
		await self.emit("error", {"error": reason, "code": code}, to=sid)
