from contextlib import asynccontextmanager

import asyncpg
import pytest

from hive.domain.exceptions import NotFoundError, PersistenceError
from hive.infra import postgres


class _Pool:
    def __init__(self, error: Exception | None = None) -> None:
        self._error = error

    @asynccontextmanager
    async def acquire(self):
        if self._error is not None:
            raise self._error
        yield object()


@pytest.mark.asyncio
async def test_acquire_failure_becomes_persistence_error(monkeypatch):
    refused = OSError("connection refused")
    monkeypatch.setattr(postgres, "_pool", _Pool(refused))

    with pytest.raises(PersistenceError) as exc:
        async with postgres.connection():
            pass
    assert exc.value.code == "persistence"
    assert exc.value.__cause__ is refused


@pytest.mark.asyncio
async def test_query_failure_keeps_driver_cause(monkeypatch):
    monkeypatch.setattr(postgres, "_pool", _Pool())
    failure = asyncpg.PostgresError("relation does not exist")

    with pytest.raises(PersistenceError) as exc:
        async with postgres.connection():
            raise failure
    assert exc.value.reason == "persistence_failure"
    assert exc.value.__cause__ is failure


@pytest.mark.asyncio
async def test_domain_errors_pass_through_unchanged(monkeypatch):
    monkeypatch.setattr(postgres, "_pool", _Pool())

    with pytest.raises(NotFoundError):
        async with postgres.connection():
            raise NotFoundError("user_not_found")
