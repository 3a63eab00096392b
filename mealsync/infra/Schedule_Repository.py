"""Calendar (Schedule) persistence: ISO date -> DayPlan, only ever upserted per entry."""
import logging
from typing import Any, Dict, List, Optional

from mealsync.domain.Plan import DayPlan, Schedule, empty_day, iso, normalize_slot, parse_iso_date
from mealsync.domain.Session import Session
from mealsync.infra.dual_mode import DualModeRepository, LocalBackend, RemoteBackend
from mealsync.infra.paths import SCHEDULE_KEY
from mealsync.infra.remote_store import eq, gte, lte
from mealsync.utilities.errors import InvalidDateRange, MalformedRecord, NotFound

logger = logging.getLogger(__name__)


# ---------- Row mapping helpers ----------

def _row_to_day(row: Dict[str, Any]) -> DayPlan:
    if not isinstance(row, dict) or not row.get("date"):
        raise MalformedRecord(f"Bad scheduled_meals row: {row!r}")
    key = str(row["date"])[:10]
    return DayPlan.from_dict({
        "day": key,
        "breakfast": row.get("breakfast"),
        "lunch": row.get("lunch"),
        "dinner": row.get("dinner"),
    })


def _day_to_row(key: str, plan: DayPlan) -> Dict[str, Any]:
    return {
        "date": key,
        "breakfast": plan.breakfast or None,
        "lunch": plan.lunch or None,
        "dinner": plan.dinner or None,
    }


def _in_range(key: str, start: Optional[str], end: Optional[str]) -> bool:
    # ISO date strings order the same as the dates they name
    return (start is None or key >= start) and (end is None or key <= end)


class LocalScheduleStore(LocalBackend):
    def load(self) -> Schedule:
        raw = self.storage.get_item(SCHEDULE_KEY)
        if not isinstance(raw, dict):
            return {}
        schedule: Schedule = {}
        for key, value in raw.items():
            try:
                parse_iso_date(key)
                schedule[key] = DayPlan.from_dict(value).for_date(key)
            except (MalformedRecord, InvalidDateRange) as e:
                logger.warning(f"Skipping unreadable local schedule entry '{key}': {e}")
        return schedule

    async def get(self, session: Session, start: Optional[str] = None, end: Optional[str] = None) -> Schedule:
        return {k: v for k, v in self.load().items() if _in_range(k, start, end)}

    async def get_day(self, session: Session, key: str) -> Optional[DayPlan]:
        return self.load().get(key)

    async def upsert_day(self, session: Session, key: str, plan: DayPlan) -> None:
        raw = self.storage.get_item(SCHEDULE_KEY)
        if not isinstance(raw, dict):
            raw = {}
        raw[key] = plan.to_dict()
        self.storage.set_item(SCHEDULE_KEY, raw)


class RemoteScheduleStore(RemoteBackend):
    TABLE = "scheduled_meals"
    COLUMNS = "date,breakfast,lunch,dinner"

    async def get(self, session: Session, start: Optional[str] = None, end: Optional[str] = None) -> Schedule:
        filters = []
        if start:
            filters.append(("date", gte(start)))
        if end:
            filters.append(("date", lte(end)))
        rows = await self.store.select(session, self.TABLE, columns=self.COLUMNS,
                                       filters=filters, order="date.desc")
        schedule: Schedule = {}
        for row in rows or []:
            day = _row_to_day(row)
            schedule[day.day] = day
        return schedule

    async def get_day(self, session: Session, key: str) -> Optional[DayPlan]:
        try:
            row = await self.store.select(session, self.TABLE, columns=self.COLUMNS,
                                          filters=[("date", eq(key))], single=True)
        except NotFound:
            return None
        return _row_to_day(row)

    async def upsert_day(self, session: Session, key: str, plan: DayPlan) -> None:
        await self.store.upsert(session, self.TABLE, _day_to_row(key, plan), on_conflict="user_id,date")


class ScheduleRepository(DualModeRepository):
    def __init__(self, storage, remote_store, resolver):
        super().__init__(LocalScheduleStore(storage), RemoteScheduleStore(remote_store), resolver)

    async def get(self, session: Session, start=None, end=None) -> Schedule:
        """Calendar entries, optionally limited to an inclusive date range."""
        start_key = iso(parse_iso_date(start)) if start is not None else None
        end_key = iso(parse_iso_date(end)) if end is not None else None
        return await self.backend(session).get(session, start_key, end_key)

    async def get_day(self, session: Session, date) -> Optional[DayPlan]:
        return await self.backend(session).get_day(session, iso(parse_iso_date(date)))

    async def upsert_day(self, session: Session, date, plan: DayPlan) -> DayPlan:
        key = iso(parse_iso_date(date))
        stored = plan.for_date(key)
        await self.backend(session).upsert_day(session, key, stored)
        return stored

    async def update_meal(self, session: Session, date, slot: str, value: str) -> DayPlan:
        """Inline calendar edit of one slot; creates the day when absent."""
        key = iso(parse_iso_date(date))
        current = await self.get_day(session, key) or empty_day(key)
        return await self.upsert_day(session, key, current.with_meal(slot, value))

    async def transfer_meal(self, session: Session, source_date, source_slot: str,
                            target_date, target_slot: str, move: bool = False) -> List[DayPlan]:
        """Copy (or move) one meal between calendar cells. Returns the days written."""
        source_key = iso(parse_iso_date(source_date))
        target_key = iso(parse_iso_date(target_date))
        source = await self.get_day(session, source_key)
        meal = source.meal(source_slot) if source else ""
        if not meal:
            raise NotFound(f"No {source_slot} scheduled on {source_key}")
        if (source_key, normalize_slot(source_slot)) == (target_key, normalize_slot(target_slot)):
            return [source]

        written = [await self.update_meal(session, target_key, target_slot, meal)]
        if move:
            written.append(await self.update_meal(session, source_key, source_slot, ""))
        return written
