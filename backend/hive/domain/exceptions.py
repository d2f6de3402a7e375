"""Domain-level exceptions shared by the social, chat and feed flows."""

from __future__ import annotations


class HiveError(Exception):
	"""Base class for domain errors surfaced to clients."""

	reason: str = "unknown"
	code: str = "error"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class AuthenticationError(HiveError):
	reason = "authentication_required"
	code = "authentication"


class AuthorizationError(HiveError):
	reason = "forbidden"
	code = "authorization"


class NotFoundError(HiveError):
	reason = "not_found"
	code = "not_found"


class ConflictError(HiveError):
	reason = "conflict"
	code = "conflict"


class ValidationFailed(HiveError):
	reason = "invalid"
	code = "invalid"


class PersistenceError(HiveError):
	"""Raised when the store rejects or fails an operation; the cause is chained."""

	reason = "persistence_failure"
	code = "persistence"
