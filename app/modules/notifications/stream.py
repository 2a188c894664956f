"""
In-process push channel for notification reads.

Each open /notifications/stream connection registers a queue for its user;
fan-out publishes one event per created read row so the client refetches.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Set, Tuple

logger = logging.getLogger(__name__)

_subscribers: Dict[str, Set[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]]] = {}


def subscribe(user_id: str) -> asyncio.Queue:
    queue: asyncio.Queue = asyncio.Queue()
    _subscribers.setdefault(user_id, set()).add((asyncio.get_running_loop(), queue))
    return queue


def unsubscribe(user_id: str, queue: asyncio.Queue) -> None:
    entries = _subscribers.get(user_id)
    if not entries:
        return
    for entry in [e for e in entries if e[1] is queue]:
        entries.discard(entry)
    if not entries:
        _subscribers.pop(user_id, None)


def subscriber_count(user_id: str) -> int:
    return len(_subscribers.get(user_id, ()))


def publish(user_id: str, event_type: str, payload: Dict[str, Any]) -> None:
    """Queue an event for every open stream of user_id; safe to call from worker threads"""
    message = {"event": event_type, "data": payload}
    for loop, queue in list(_subscribers.get(user_id, ())):
        try:
            loop.call_soon_threadsafe(queue.put_nowait, message)
        except RuntimeError:
            # loop already closed
            unsubscribe(user_id, queue)


async def event_generator(user_id: str):
    """Registers the caller's queue on first iteration and drops it when the stream closes"""
    queue = subscribe(user_id)
    try:
        while True:
            msg = await queue.get()
            yield {
                "event": msg["event"],
                "data": json.dumps(msg["data"], ensure_ascii=False, default=str),
            }
    except asyncio.CancelledError:
        pass
    finally:
        unsubscribe(user_id, queue)
