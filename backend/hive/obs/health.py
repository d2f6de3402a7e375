"""Liveness and readiness probes for Redis, Postgres and the schema version."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Tuple

from hive.infra import postgres
from hive.infra.redis import redis_client
from hive.obs import metrics
from hive.settings import settings

LOGGER = logging.getLogger(__name__)

REDIS_TIMEOUT_SECONDS = 0.2
POSTGRES_TIMEOUT_SECONDS = 0.3


async def _timed_check(
	name: str,
	probe: Callable[[], Awaitable[Any]],
	timeout: float,
	mark: Callable[..., None],
) -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(probe(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		mark(False)
		LOGGER.warning("readiness check failed", extra={"check": name}, exc_info=True)
		return {"ok": False, "error": str(exc)}
	latency = perf_counter() - start
	mark(True, latency_seconds=latency)
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}


async def _ping_redis() -> None:
	await redis_client.ping()


async def _ping_postgres() -> None:
	async with postgres.connection() as conn:
		await conn.execute("SELECT 1")


async def _schema_status(min_version: str) -> Dict[str, Any]:
	try:
		async with postgres.connection() as conn:
			version = await conn.fetchval("SELECT max(version) FROM schema_migrations")
	except Exception as exc:  # pragma: no cover - table missing before first migration
		return {"ok": False, "error": str(exc)}
	if version is None:
		return {"ok": False, "error": "no_migrations"}
	current = str(version)
	return {"ok": current >= min_version, "version": current, "required": min_version}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	redis_state, postgres_state = await asyncio.gather(
		_timed_check("redis", _ping_redis, REDIS_TIMEOUT_SECONDS, metrics.mark_redis),
		_timed_check("postgres", _ping_postgres, POSTGRES_TIMEOUT_SECONDS, metrics.mark_postgres),
	)
	if postgres_state["ok"]:
		schema_state = await _schema_status(settings.health_min_migration)
	else:
		schema_state = {"ok": False, "error": "postgres_unavailable"}
	checks = {"redis": redis_state, "postgres": postgres_state, "migrations": schema_state}
	ok = all(check["ok"] for check in checks.values())
	return (200 if ok else 503), {"status": "ok" if ok else "degraded", "checks": checks}
