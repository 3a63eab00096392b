"""Web-facing observer for calendar change events.

Subscribes to ``schedule.changed`` on the GLOBAL_EVENT_BUS and keeps a
small in-memory ring buffer per process, so browser clients that cannot
hold a subscription can poll ``/api/events?since=<cursor>`` instead.

Each event gets an auto-increment id used as the polling cursor. A lock
guards the buffer; MAX_EVENTS caps its size.
"""
from __future__ import annotations
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import GLOBAL_EVENT_BUS, SCHEDULE_CHANGED

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300
_started = False


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    if not isinstance(payload, dict) or not payload.get('user_id'):
        return
    with _lock:
        _events.append({
            'id': _next_id,
            'type': event_name,
            'user_id': payload['user_id'],
            'change': payload.get('change'),
            'date': payload.get('date'),
            'ts': datetime.now(timezone.utc).isoformat(),
        })
        _next_id += 1
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe the recorder once."""
    global _started
    if _started:
        return
    GLOBAL_EVENT_BUS.subscribe(SCHEDULE_CHANGED, _record)
    _started = True


def get_events(user_id: str, since: Optional[int] = None) -> Dict[str, Any]:
    """Return the caller's events newer than ``since`` (exclusive)."""
    with _lock:
        data = [e for e in _events if e['user_id'] == user_id and (since is None or e['id'] > since)]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events', 'MAX_EVENTS']
