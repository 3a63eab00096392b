"""Meal history: stored facts online, a view derived from the Schedule offline.

The two providers are distinct types. DerivedHistoryProvider has
no state of its own and is never authoritative: it re-reads the local
Schedule on every call, so saving through it is a no-op.
"""
import logging
from typing import Any, Dict, List, Protocol

from mealsync.domain.MealHistory import MealHistoryEntry, MealType
from mealsync.domain.Session import Session
from mealsync.infra.dual_mode import DualModeRepository, RemoteBackend
from mealsync.utilities.constants import MEAL_HISTORY_DEFAULT_LIMIT
from mealsync.utilities.errors import MalformedRecord

logger = logging.getLogger(__name__)


class MealHistorySource(Protocol):
    authoritative: bool

    async def get(self, session: Session, limit: int) -> List[MealHistoryEntry]: ...

    async def save(self, session: Session, entries: List[MealHistoryEntry]) -> None: ...


def _row_to_entry(row: Dict[str, Any]) -> MealHistoryEntry:
    try:
        return MealHistoryEntry(
            date=str(row["date"])[:10],
            type=MealType(row["meal_type"]),
            meal_name=str(row["meal_name"]),
            rating=row.get("rating") or None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedRecord(f"Bad meal_history row: {e}")


class DerivedHistoryProvider:
    authoritative = False

    def __init__(self, schedule_store):
        # LocalScheduleStore
        self.schedule_store = schedule_store

    async def get(self, session: Session, limit: int) -> List[MealHistoryEntry]:
        schedule = self.schedule_store.load()
        entries: List[MealHistoryEntry] = []
        for key in sorted(schedule, reverse=True):
            day = schedule[key]
            for meal_type in MealType:
                name = day.meal(meal_type.slot)
                if name:
                    entries.append(MealHistoryEntry(date=key, type=meal_type, meal_name=name))
        return entries[:limit]

    async def save(self, session: Session, entries: List[MealHistoryEntry]) -> None:
        logger.debug(f"Offline mode: {len(entries)} history entries not stored (derived from schedule)")


class StoredHistoryProvider(RemoteBackend):
    authoritative = True
    TABLE = "meal_history"

    async def get(self, session: Session, limit: int) -> List[MealHistoryEntry]:
        rows = await self.store.select(session, self.TABLE, order="date.desc", limit=limit)
        return [_row_to_entry(r) for r in rows or []]

    async def save(self, session: Session, entries: List[MealHistoryEntry]) -> None:
        if not entries:
            return
        await self.store.insert(session, self.TABLE, [
            {
                "date": e.date,
                "meal_type": e.type.value,
                "meal_name": e.meal_name,
                "rating": e.rating,
            }
            for e in entries
        ])


class MealHistoryRepository(DualModeRepository):
    def __init__(self, schedule_store, remote_store, resolver):
        super().__init__(DerivedHistoryProvider(schedule_store), StoredHistoryProvider(remote_store), resolver)

    def source(self, session: Session) -> MealHistorySource:
        return self.backend(session)

    async def get(self, session: Session, limit: int = MEAL_HISTORY_DEFAULT_LIMIT) -> List[MealHistoryEntry]:
        return await self.backend(session).get(session, limit)

    async def save(self, session: Session, entries: List[MealHistoryEntry]) -> None:
        await self.backend(session).save(session, entries)
