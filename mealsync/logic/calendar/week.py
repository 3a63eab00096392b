"""Load a Monday-to-Sunday calendar week back into the planner as a draft."""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Tuple

from mealsync.domain.Plan import DayPlan, Schedule, WeeklyPlan, iso, parse_iso_date
from mealsync.domain.Session import Session
from mealsync.logic.calendar.archive import DateLike, target_dates
from mealsync.utilities.constants import WEEKDAYS

logger = logging.getLogger(__name__)


@dataclass
class LoadedWeek:
    start_date: str
    end_date: str
    label: str
    plan: WeeklyPlan


def week_bounds(day: DateLike) -> Tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    d = parse_iso_date(day)
    monday = d - timedelta(days=d.weekday())
    return monday, monday + timedelta(days=6)


def week_label(monday: date, sunday: date) -> str:
    # e.g. "Jan 5 - Jan 11, 2026"
    return f"{monday:%b} {monday.day} - {sunday:%b} {sunday.day}, {sunday.year}"


def plan_from_schedule(schedule: Schedule, monday: DateLike) -> WeeklyPlan:
    """Date-keyed entries become weekday-labelled days; missing dates are empty days."""
    days = []
    for key, weekday in zip(target_dates(monday), WEEKDAYS):
        entry = schedule.get(key)
        if entry is None:
            days.append(DayPlan(day=weekday))
        else:
            days.append(DayPlan(weekday, entry.breakfast, entry.lunch, entry.dinner))
    return WeeklyPlan(days)


async def load_week(schedule_repo, session: Session, day: DateLike) -> LoadedWeek:
    monday, sunday = week_bounds(day)
    start, end = iso(monday), iso(sunday)
    schedule = await schedule_repo.get(session, start, end)
    logger.info(f"Loaded week {start}..{end} ({len(schedule)} stored days)")
    return LoadedWeek(start, end, week_label(monday, sunday), plan_from_schedule(schedule, monday))
