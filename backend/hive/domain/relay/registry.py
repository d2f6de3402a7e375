"""Session registry mapping a user to their live relay connection."""

from __future__ import annotations

from typing import Dict, Optional, Protocol


class SessionRegistry(Protocol):
	def register(self, user_id: str, connection_id: str) -> None:
		...

	def lookup(self, user_id: str) -> Optional[str]:
		...

	def unregister(self, user_id: str, connection_id: Optional[str] = None) -> None:
		...


class InMemorySessionRegistry:
	"""Process-local registry; one connection per user, last writer wins.

	Every mutation is a single dict operation, so no lock is needed on the
	event loop.
	"""

	def __init__(self) -> None:
		self._connections: Dict[str, str] = {}

	def register(self, user_id: str, connection_id: str) -> None:
		self._connections[user_id] = connection_id

	def lookup(self, user_id: str) -> Optional[str]:
		return self._connections.get(user_id)

	def unregister(self, user_id: str, connection_id: Optional[str] = None) -> None:
		if connection_id is None:
			self._connections.pop(user_id, None)
			return
		# a late disconnect must not evict a newer connection for the same user
		if self._connections.get(user_id) == connection_id:
			del self._connections[user_id]

	def __len__(self) -> int:
		return len(self._connections)

	def __contains__(self, user_id: object) -> bool:
		return user_id in self._connections
