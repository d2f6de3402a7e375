"""Identifier helpers shared by the domain services."""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from hive.domain.exceptions import NotFoundError


def new_id() -> str:
	return str(uuid4())


def normalise_id(value: object) -> Optional[str]:
	"""Return the canonical string form of a UUID, or None when malformed."""
	try:
		return str(UUID(str(value)))
	except (TypeError, ValueError):
		return None


def require_id(value: object, reason: str) -> str:
	"""Canonicalise an identifier; malformed ids cannot exist, so they are not found."""
	parsed = normalise_id(value)
	if parsed is None:
		raise NotFoundError(reason)
	return parsed
