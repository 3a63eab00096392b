"""Wiring of storage backends, repositories and services for one process."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mealsync.events.Event_Bus import EventBus, GLOBAL_EVENT_BUS
from mealsync.events.schedule_observers import ChangeNotifier
from mealsync.infra.Feedback_Repository import FeedbackRepository
from mealsync.infra.Grocery_Repository import GroceryListRepository
from mealsync.infra.History_Repository import MealHistoryRepository
from mealsync.infra.Plan_Repository import WeeklyPlanRepository
from mealsync.infra.Profile_Repository import ProfileRepository
from mealsync.infra.Schedule_Repository import ScheduleRepository
from mealsync.infra.Settings_Repository import SettingsRepository
from mealsync.infra.local_storage import LocalStorage
from mealsync.infra.mode import ModeResolver
from mealsync.infra.remote_store import RemoteStore
from mealsync.logic.calendar.archive import ArchiveEngine
from mealsync.logic.learning.summary import LearningSummaryAggregator
from mealsync.utilities import config

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    storage: LocalStorage
    remote: Optional[RemoteStore]
    resolver: ModeResolver
    settings: SettingsRepository
    profiles: ProfileRepository
    plans: WeeklyPlanRepository
    schedule: ScheduleRepository
    grocery: GroceryListRepository
    history: MealHistoryRepository
    archive: ArchiveEngine
    learning: LearningSummaryAggregator
    notifier: ChangeNotifier
    feedback: FeedbackRepository

    async def aclose(self) -> None:
        if self.remote is not None:
            await self.remote.aclose()


def build_context(data_dir: Optional[Path] = None, remote: Optional[RemoteStore] = None,
                  remote_configured: Optional[bool] = None, bus: EventBus = GLOBAL_EVENT_BUS) -> AppContext:
    if remote is None and config.is_remote_configured():
        remote = RemoteStore(config.REMOTE_STORE_URL, config.REMOTE_STORE_KEY, config.REMOTE_TIMEOUT_SECONDS)
    if remote_configured is None:
        remote_configured = remote is not None
    storage = LocalStorage(data_dir)
    resolver = ModeResolver(remote_configured)
    schedule = ScheduleRepository(storage, remote, resolver)
    plans = WeeklyPlanRepository(storage, remote, resolver)
    ctx = AppContext(
        storage=storage,
        remote=remote,
        resolver=resolver,
        settings=SettingsRepository(storage, remote, resolver),
        profiles=ProfileRepository(storage, remote, resolver),
        plans=plans,
        schedule=schedule,
        grocery=GroceryListRepository(storage, remote, resolver, config.GROCERY_HISTORY_LIMIT),
        history=MealHistoryRepository(schedule.local, remote, resolver),
        archive=ArchiveEngine(schedule, plans),
        learning=LearningSummaryAggregator(schedule),
        notifier=ChangeNotifier(schedule, bus),
        feedback=FeedbackRepository(remote, resolver),
    )
    logger.info(f"Context ready (remote store {'configured' if remote_configured else 'not configured'})")
    return ctx


_context: Optional[AppContext] = None


def get_context() -> AppContext:
    global _context
    if _context is None:
        _context = build_context()
    return _context


def set_context(ctx: Optional[AppContext]) -> None:
    global _context
    _context = ctx
