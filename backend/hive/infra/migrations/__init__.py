"""Apply the SQL migrations shipped next to this module.

Files are applied in lexical order and recorded in `schema_migrations`, so a
restart only runs the files that have not been applied yet.
"""

from __future__ import annotations

import logging
import pathlib
from typing import List

import asyncpg

LOGGER = logging.getLogger(__name__)
MIGRATIONS_DIR = pathlib.Path(__file__).resolve().parent


def migration_files() -> List[pathlib.Path]:
	return sorted(MIGRATIONS_DIR.glob("*.sql"))


async def apply_migrations(pool: asyncpg.pool.Pool) -> List[str]:
	applied_now: List[str] = []
	async with pool.acquire() as conn:
		await conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS schema_migrations (
				version TEXT PRIMARY KEY,
				applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
			)
			"""
		)
		rows = await conn.fetch("SELECT version FROM schema_migrations")
		applied = {row["version"] for row in rows}
		for path in migration_files():
			version = path.stem.split("_", 1)[0]
			if version in applied:
				continue
			async with conn.transaction():
				await conn.execute(path.read_text(encoding="utf-8"))
				await conn.execute("INSERT INTO schema_migrations (version) VALUES ($1)", version)
			LOGGER.info("Applied migration %s", path.name)
			applied_now.append(version)
	return applied_now
