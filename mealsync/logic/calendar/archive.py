"""Archive/merge engine: commit the draft week into the calendar.

One conflict policy applies to the whole batch but is evaluated per day, so
a week can end up partially overwritten and partially preserved. The batch
is best-effort, not a transaction: days written before a failure stay
written, and re-running with ``overwrite=True`` repairs them.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Union

from mealsync.domain.Plan import DayPlan, Schedule, WeeklyPlan, empty_day, iso, parse_iso_date
from mealsync.domain.Session import Session
from mealsync.utilities.constants import PLAN_LENGTH_DAYS
from mealsync.utilities.errors import MealSyncError

logger = logging.getLogger(__name__)

DateLike = Union[str, date]


@dataclass
class ArchiveResult:
    start_date: str
    written: List[str] = field(default_factory=list)
    preserved: List[str] = field(default_factory=list)


def target_dates(start_date: DateLike, days: int = PLAN_LENGTH_DAYS) -> List[str]:
    start = parse_iso_date(start_date)
    return [iso(start + timedelta(days=i)) for i in range(days)]


def find_conflicts(schedule: Schedule, start_date: DateLike, days: int = PLAN_LENGTH_DAYS) -> List[str]:
    """Dates in the archive range that already hold at least one meal."""
    return [key for key in target_dates(start_date, days)
            if key in schedule and not schedule[key].is_empty()]


class ArchiveEngine:
    def __init__(self, schedule_repo, plan_repo):
        self.schedule_repo = schedule_repo
        self.plan_repo = plan_repo
        # user_id -> {date: entry before the last archive, None if absent}
        self._undo: Dict[str, Dict[str, Optional[DayPlan]]] = {}

    async def archive(self, session: Session, plan: WeeklyPlan, start_date: DateLike,
                      overwrite: bool = True) -> ArchiveResult:
        keys = target_dates(start_date)
        existing = await self.schedule_repo.get(session, keys[0], keys[-1])
        self._undo[session.user_id] = {key: existing.get(key) for key in keys}

        result = ArchiveResult(start_date=keys[0])
        for key, day in zip(keys, plan.days):
            current = existing.get(key)
            if overwrite or current is None or current.is_empty():
                await self.schedule_repo.upsert_day(session, key, day)
                result.written.append(key)
            else:
                result.preserved.append(key)

        # Archiving moves the draft, it does not copy it
        await self.plan_repo.clear(session)
        logger.info(
            f"Archived plan at {keys[0]} (overwrite={overwrite}): "
            f"{len(result.written)} written, {len(result.preserved)} preserved"
        )
        return result

    def can_revert(self, session: Session) -> bool:
        return session.user_id in self._undo

    async def revert(self, session: Session) -> bool:
        """Restore the seven days touched by the last archive. Single level only."""
        snapshot = self._undo.pop(session.user_id, None)
        if snapshot is None:
            return False
        try:
            for key, prior in snapshot.items():
                # the calendar is only ever upserted, so absent days come back empty
                await self.schedule_repo.upsert_day(session, key, prior or empty_day(key))
        except MealSyncError:
            self._undo[session.user_id] = snapshot
            raise
        logger.info(f"Reverted last archive for {len(snapshot)} days")
        return True
