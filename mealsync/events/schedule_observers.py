"""Change notification facade for the calendar.

``ChangeNotifier.subscribe`` hands back a ``Subscription``. While it is
active, every ``schedule.changed`` event owned by the session's user
triggers a full re-fetch of the schedule followed by ``on_change(schedule)``.

Events that arrive while a re-fetch is running are folded into a single
follow-up re-fetch. Re-fetch failures are logged and dropped; the
subscription stays active. Offline sessions get an inert subscription.
"""
from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from mealsync.domain.Plan import Schedule
from mealsync.domain.Session import Session
from .Event_Bus import EventBus, GLOBAL_EVENT_BUS, SCHEDULE_CHANGED

logger = logging.getLogger(__name__)

OnChange = Callable[[Schedule], Union[None, Awaitable[None]]]


class Subscription:
    def __init__(self, cancel: Optional[Callable[[], None]] = None):
        self._cancel = cancel
        self._active = cancel is not None

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        cancel, self._cancel = self._cancel, None
        cancel()


class _ScheduleListener:
    def __init__(self, schedule_repo, session: Session, on_change: OnChange):
        self.schedule_repo = schedule_repo
        self.session = session
        self.on_change = on_change
        self.closed = False
        self._task: Optional[asyncio.Task] = None
        self._dirty = False

    @property
    def refreshing(self) -> bool:
        return self._task is not None and not self._task.done()

    def __call__(self, event_name: str, payload: Any) -> None:
        if self.closed or not isinstance(payload, dict):
            return
        if payload.get("user_id") != self.session.user_id:
            return
        if self.refreshing:
            self._dirty = True
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"Dropping {event_name}: no running event loop")
            return
        self._task = loop.create_task(self._refresh())

    async def _refresh(self) -> None:
        while not self.closed:
            self._dirty = False
            try:
                schedule = await self.schedule_repo.get(self.session)
            except Exception as e:
                logger.warning(f"Schedule re-fetch after change failed: {e}")
                schedule = None
            if schedule is not None and not self.closed:
                try:
                    result = self.on_change(schedule)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    logger.error(f"Change callback failed: {e}")
            if not self._dirty:
                break

    async def wait_idle(self) -> None:
        while self.refreshing:
            await self._task

    def close(self) -> None:
        self.closed = True


class ChangeNotifier:
    def __init__(self, schedule_repo, bus: EventBus = GLOBAL_EVENT_BUS):
        self.schedule_repo = schedule_repo
        self.bus = bus
        self._listeners = []

    def subscribe(self, session: Session, on_change: OnChange) -> Subscription:
        if self.schedule_repo.is_offline(session):
            logger.debug("Offline session: change subscription is inert")
            return Subscription()
        listener = _ScheduleListener(self.schedule_repo, session, on_change)
        self.bus.subscribe(SCHEDULE_CHANGED, listener)
        self._listeners.append(listener)

        def _cancel():
            listener.close()
            self.bus.unsubscribe(SCHEDULE_CHANGED, listener)
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(_cancel)

    async def drain(self) -> None:
        """Wait until every in-flight re-fetch has finished."""
        for listener in list(self._listeners):
            await listener.wait_idle()


__all__ = ['ChangeNotifier', 'Subscription']
