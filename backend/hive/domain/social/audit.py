"""Audit trail and counters for friend-request transitions."""

from __future__ import annotations

from typing import Dict

from hive.infra.redis import redis_client
from hive.obs import metrics as obs_metrics

from .models import Friendship

FRIENDSHIP_STREAM = "x:friendships.events"


async def log_friend_event(event: str, friendship: Friendship, fields: Dict[str, str] | None = None) -> None:
	payload = {
		"event": event,
		"friendship_id": friendship.id,
		"sender_id": friendship.sender_id,
		"receiver_id": friendship.receiver_id,
		"status": friendship.status.value,
		**(fields or {}),
	}
	await redis_client.xadd(FRIENDSHIP_STREAM, payload)


def inc_request_sent() -> None:
	obs_metrics.inc_friend_request_sent()


def inc_send_reject(reason: str) -> None:
	obs_metrics.inc_friend_request_reject(reason)


def inc_accept() -> None:
	obs_metrics.inc_friendship_accepted()


def inc_decline() -> None:
	obs_metrics.inc_friendship_declined()
