"""
backend/booking_engine/services/events.py

Event emitter: pushes booking lifecycle events to the Redis list
`events:p2p` for whatever consumer handles notifications.

Without Redis configured, events are only logged.
"""

import json
import time
import logging

from redis import Redis

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

EVENTS_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict, redis: Redis | None = None) -> None:
    """
    Emit a p2p event (instant delivery).

    Failures are logged and never raised.
    """
    redis = redis if redis is not None else redis_client
    if redis is None:
        logger.debug(f"Event not emitted (no Redis): {event_type} {payload}")
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis.rpush(EVENTS_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {EVENTS_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
