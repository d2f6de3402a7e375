"""Prometheus metrics for the HTTP surface, the socket relay, and the domain services."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary

REQUEST_COUNTER = Counter(
	"hive_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"hive_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOCKET_CLIENTS = Gauge(
	"hive_socketio_clients",
	"Active Socket.IO clients per namespace",
	["namespace"],
)

SOCKET_EVENTS = Counter(
	"hive_socketio_events_total",
	"Socket.IO events handled per namespace",
	["namespace", "event"],
)

SOCKET_ERRORS = Counter(
	"hive_socketio_errors_total",
	"Relay errors reported back to the initiating connection",
	["event", "reason"],
)

FRIEND_REQUESTS_SENT = Counter(
	"hive_friend_requests_sent_total",
	"Friend requests created or reopened",
)

FRIEND_REQUESTS_REJECTED = Counter(
	"hive_friend_requests_rejected_total",
	"Friend requests refused before persistence",
	["reason"],
)

FRIENDSHIPS_ACCEPTED = Counter(
	"hive_friendships_accepted_total",
	"Friend requests accepted",
)

FRIENDSHIPS_DECLINED = Counter(
	"hive_friendships_declined_total",
	"Friend requests declined",
)

CHAT_SEND = Counter(
	"hive_chat_messages_sent_total",
	"Chat messages persisted",
)

CHAT_DELIVERED = Counter(
	"hive_chat_messages_delivered_total",
	"Chat messages pushed to a connected receiver",
)

CHAT_CONVERSATIONS_CREATED = Counter(
	"hive_chat_conversations_created_total",
	"Conversations started",
)

POSTS_CREATED = Counter(
	"hive_posts_created_total",
	"Posts created",
)

POST_COMMENTS_CREATED = Counter(
	"hive_post_comments_created_total",
	"Comments added to posts",
)

IDENTITY_REGISTER = Counter(
	"hive_identity_register_total",
	"Accounts registered",
)

IDENTITY_LOGIN = Counter(
	"hive_identity_login_total",
	"Login attempts",
	["result"],
)

REDIS_UP = Gauge("hive_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("hive_redis_latency_seconds", "Redis ping latency (seconds)")

POSTGRES_UP = Gauge("hive_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("hive_postgres_latency_seconds", "Postgres ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def socket_connected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).inc()


def socket_disconnected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).dec()


def socket_event(namespace: str, event: str) -> None:
	SOCKET_EVENTS.labels(namespace=namespace, event=event).inc()


def socket_error(event: str, reason: str) -> None:
	SOCKET_ERRORS.labels(event=event, reason=reason).inc()


def inc_friend_request_sent() -> None:
	FRIEND_REQUESTS_SENT.inc()


def inc_friend_request_reject(reason: str) -> None:
	FRIEND_REQUESTS_REJECTED.labels(reason=reason).inc()


def inc_friendship_accepted() -> None:
	FRIENDSHIPS_ACCEPTED.inc()


def inc_friendship_declined() -> None:
	FRIENDSHIPS_DECLINED.inc()


def inc_chat_send() -> None:
	CHAT_SEND.inc()


def inc_chat_delivered() -> None:
	CHAT_DELIVERED.inc()


def inc_conversation_created() -> None:
	CHAT_CONVERSATIONS_CREATED.inc()


def inc_post_created() -> None:
	POSTS_CREATED.inc()


def inc_post_comment_created() -> None:
	POST_COMMENTS_CREATED.inc()


def inc_identity_register() -> None:
	IDENTITY_REGISTER.inc()


def inc_identity_login(result: str) -> None:
	IDENTITY_LOGIN.labels(result=result).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
