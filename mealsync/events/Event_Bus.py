"""In-process event bus for calendar change notifications.

Event names used so far:
  schedule.changed -> payload {"user_id": str, "change": "INSERT"|"UPDATE"|"DELETE", "date": str | None}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
SCHEDULE_CHANGED = "schedule.changed"

Listener = Callable[[str, Any], None]


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Listener]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Listener):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Listener):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def subscriber_count(self, event_name: str) -> int:
		return len(self._subscribers.get(event_name, []))

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception as e:
				logger.error(f"Error delivering {event_name} to {cb}: {e}")


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def publish_schedule_change(user_id: str, change: str = "UPDATE", date: str | None = None,
							bus: EventBus = GLOBAL_EVENT_BUS) -> None:
	"""Publish a schedule.changed event for one owner."""
	bus.publish(SCHEDULE_CHANGED, {"user_id": user_id, "change": change, "date": date})


__all__ = ['EventBus', 'GLOBAL_EVENT_BUS', 'SCHEDULE_CHANGED', 'publish_schedule_change']
