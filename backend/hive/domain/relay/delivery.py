"""Push helpers used by the services to reach a user's live connection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from hive.obs import metrics as obs_metrics

if TYPE_CHECKING:  # pragma: no cover - typing only
	from .sockets import RelayNamespace

_namespace: Optional["RelayNamespace"] = None


def set_namespace(namespace: Optional["RelayNamespace"]) -> None:
	global _namespace
	_namespace = namespace


async def emit_to_user(user_id: str, event: str, payload: dict) -> bool:
	"""Emit to the user's registered connection; returns False when they are offline."""
	if _namespace is None:
		return False
	sid = _namespace.registry.lookup(user_id)
	if sid is None:
		return False
	obs_metrics.socket_event(_namespace.namespace, event)
	await _namespace.emit(event, payload, to=sid)
	return True
