"""
backend/app/services/events.py

Event emitter: pushes appointment events to a Redis queue for
notification consumers (reminders, confirmation messages).

Queue:
- events:p2p — instant delivery (notifications to specific users)
"""

import json
import time
import logging

from redis import Redis

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(redis: Redis | None, event_type: str, payload: dict) -> None:
    """
    Emit a p2p event (instant delivery).

    Pushed to Redis list `events:p2p` for the consumer loop.
    Skipped when Redis is not configured.
    """
    if redis is None:
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis.rpush(P2P_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
