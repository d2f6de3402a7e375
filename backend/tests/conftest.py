import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
import socketio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from hive.domain.chat import service as chat_service
from hive.domain.chat.repo import InMemoryChatRepository
from hive.domain.feed import service as feed_service
from hive.domain.feed.repo import InMemoryFeedRepository
from hive.domain.identity import service as identity_service
from hive.domain.identity.repo import InMemoryUserRepository
from hive.domain.identity.schemas import RegisterRequest
from hive.domain.relay import delivery
from hive.domain.relay.sockets import RelayNamespace
from hive.domain.social import service as social_service
from hive.domain.social.repo import InMemoryFriendshipRepository
from hive.infra import postgres
from hive.infra.auth import AuthenticatedUser
from hive.infra.memory import MemoryDatabase
from hive.main import app
from hive.settings import settings

TEST_PASSWORD = "hunter22"


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from hive.infra.redis import redis_client, set_redis_client

	# keep the wrapped client, not the proxy itself
	original = redis_client._client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests may authenticate via X-User-Id/X-Username headers, which are only
	accepted in dev mode.
	"""
	original_env = settings.environment
	original_migrations = settings.run_migrations
	settings.environment = "dev"
	settings.run_migrations = False
	try:
		yield
	finally:
		settings.environment = original_env
		settings.run_migrations = original_migrations


@pytest.fixture
def memory_db():
	return MemoryDatabase()


@pytest.fixture
def services(memory_db, monkeypatch):
	"""Wire every domain service to one shared in-memory store."""
	users = InMemoryUserRepository(memory_db)
	wired = SimpleNamespace(
		db=memory_db,
		identity=identity_service.IdentityService(repository=users),
		social=social_service.SocialService(repository=InMemoryFriendshipRepository(memory_db), users=users),
		chat=chat_service.ChatService(repository=InMemoryChatRepository(memory_db), users=users),
		feed=feed_service.FeedService(repository=InMemoryFeedRepository(memory_db), users=users),
	)
	monkeypatch.setattr(identity_service, "_SERVICE", wired.identity)
	monkeypatch.setattr(social_service, "_SERVICE", wired.social)
	monkeypatch.setattr(chat_service, "_SERVICE", wired.chat)
	monkeypatch.setattr(feed_service, "_SERVICE", wired.feed)
	return wired


@pytest.fixture
def make_user(services):
	async def _make(username: str, name: str | None = None) -> AuthenticatedUser:
		profile = await services.identity.register(
			RegisterRequest(username=username, password=TEST_PASSWORD, name=name or username.title())
		)
		return AuthenticatedUser(id=profile.id, username=profile.username)

	return _make


@pytest.fixture
def befriend(services):
	async def _befriend(sender: AuthenticatedUser, receiver: AuthenticatedUser) -> str:
		summary = await services.social.send_request(sender, receiver.username)
		await services.social.accept_request(receiver, summary.id)
		return summary.id

	return _befriend


@pytest.fixture
def relay(monkeypatch):
	"""A relay namespace with a mocked emit, installed as the delivery target."""
	server = socketio.AsyncServer(async_mode="asgi")
	namespace = RelayNamespace()
	server.register_namespace(namespace)
	namespace.emit = AsyncMock()
	monkeypatch.setattr(delivery, "_namespace", namespace)
	return namespace


@pytest.fixture
def emitted():
	def _emitted(namespace, event: str, sid: str | None = None) -> list:
		"""Payloads the namespace emitted for `event`, optionally only to `sid`."""
		return [
			call.args[1]
			for call in namespace.emit.await_args_list
			if call.args[0] == event and (sid is None or call.kwargs.get("to") == sid)
		]

	return _emitted


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
