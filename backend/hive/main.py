"""FastAPI application entrypoint.

Serve ``hive.main:socket_app`` so Socket.IO and the REST API share one ASGI app.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hive.api import auth, chat, feed, ops, social
from hive.api.errors import install_error_handlers
from hive.domain.relay.delivery import set_namespace
from hive.domain.relay.sockets import RelayNamespace
from hive.infra import postgres
from hive.infra.migrations import apply_migrations
from hive.obs import init as obs_init
from hive.settings import settings

logger = logging.getLogger(__name__)

_DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:8081",
	"http://127.0.0.1:8081",
	"http://localhost:19006",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
	pool = await postgres.init_pool()
	if settings.run_migrations and pool is not None:
		applied = await apply_migrations(pool)
		if applied:
			logger.info("migrations applied", extra={"versions": applied})
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="Hive API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins or "*" in allow_origins:
	# credentials cannot be combined with a wildcard origin
	allow_origins = _DEV_ORIGINS if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=allow_origins)
relay_namespace = RelayNamespace()
sio.register_namespace(relay_namespace)
set_namespace(relay_namespace)
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)
obs_init(app)

app.include_router(auth.router, tags=["identity"])
app.include_router(social.router, tags=["social"])
app.include_router(chat.router, tags=["chat"])
app.include_router(feed.router, tags=["feed"])
app.include_router(ops.router, tags=["ops"])
