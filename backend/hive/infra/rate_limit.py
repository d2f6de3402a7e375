"""Fixed-window action budgets counted in Redis."""

from __future__ import annotations

import time
from typing import Optional, Tuple

from hive.infra.redis import redis_client


class RateLimitExceeded(Exception):
	"""Raised when an actor has spent the budget for the current window."""

	def __init__(self, reason: str = "rate_limited", *, retry_after: Optional[int] = None) -> None:
		super().__init__(reason)
		self.reason = reason
		self.retry_after = retry_after


async def hit(kind: str, actor_id: str, *, window_seconds: int = 60, now: Optional[float] = None) -> Tuple[int, int]:
	"""Count one action; returns the window's count and the seconds until it resets."""
	now = time.time() if now is None else now
	window = max(1, int(window_seconds))
	slot = int(now // window)
	key = f"rl:{kind}:{actor_id}:{window}:{slot}"
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, window)
		count, _ = await pipe.execute()
	return int(count), max(1, (slot + 1) * window - int(now))


async def allow(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> bool:
	"""Return True when the operation is still within the allowed budget."""
	if limit <= 0:
		return False
	count, _ = await hit(kind, actor_id, window_seconds=window_seconds, now=now)
	return count <= limit


async def enforce(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	reason: str = "rate_limited",
) -> None:
	if limit <= 0:
		raise RateLimitExceeded(reason, retry_after=window_seconds)
	count, reset_in = await hit(kind, actor_id, window_seconds=window_seconds)
	if count > limit:
		raise RateLimitExceeded(reason, retry_after=reset_in)
