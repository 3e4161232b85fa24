from __future__ import annotations

import logging
from queue import Full, Queue
from threading import Lock
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# In-process pub/sub feeding the SSE stream. Each worker process only sees its
# own subscribers; the push relay covers users connected elsewhere.
MAX_PENDING_EVENTS = 100

_subs: dict[int, List[Queue]] = {}
_lock = Lock()


def subscribe(user_id: int) -> Queue:
    q: Queue = Queue(maxsize=MAX_PENDING_EVENTS)
    with _lock:
        _subs.setdefault(int(user_id), []).append(q)
    return q


def unsubscribe(user_id: int, q: Queue) -> None:
    with _lock:
        arr = _subs.get(int(user_id))
        if not arr:
            return
        if q in arr:
            arr.remove(q)
        if not arr:
            _subs.pop(int(user_id), None)


def subscriber_count(user_id: int) -> int:
    with _lock:
        return len(_subs.get(int(user_id), []))


def publish(user_id: int, event: Dict[str, Any]) -> int:
    """Deliver ``event`` to every open stream of ``user_id``; returns how many got it."""
    with _lock:
        arr = list(_subs.get(int(user_id), []))
    delivered = 0
    for q in arr:
        try:
            q.put_nowait(event)
            delivered += 1
        except Full:
            # Stalled client; it will resync from GET /notifications
            logger.debug("Dropping event for user %s: stream queue full", user_id)
    return delivered
