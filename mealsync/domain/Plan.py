"""Plan domain entities.

DayPlan is shared by both views of a week: inside a draft WeeklyPlan its
``day`` is a weekday label ("Monday"), inside the archived Schedule it is the
ISO date key. The draft is day-of-week indexed, the calendar is absolute-date
indexed.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List

from mealsync.utilities.constants import ISO_DATE_FORMAT, MEAL_SLOTS, PLAN_LENGTH_DAYS
from mealsync.utilities.errors import InvalidDateRange, MalformedRecord


def _text(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecord(f"Field '{field_name}' must be a string, got {type(value).__name__}")
    return value


def normalize_slot(slot: str) -> str:
    """Accept 'Lunch' / 'lunch' and return the canonical lowercase slot."""
    key = (slot or "").strip().lower()
    if key not in MEAL_SLOTS:
        raise MalformedRecord(f"Unknown meal slot '{slot}'. Valid: {', '.join(MEAL_SLOTS)}")
    return key


def parse_iso_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), ISO_DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidDateRange(f"Not an ISO date (YYYY-MM-DD): {value!r}")


def iso(d: date) -> str:
    return d.strftime(ISO_DATE_FORMAT)


@dataclass
class DayPlan:
    day: str
    breakfast: str = ""
    lunch: str = ""
    dinner: str = ""

    def is_empty(self) -> bool:
        return not (self.breakfast or self.lunch or self.dinner)

    def meal(self, slot: str) -> str:
        return getattr(self, normalize_slot(slot))

    def with_meal(self, slot: str, value: str) -> "DayPlan":
        return replace(self, **{normalize_slot(slot): value or ""})

    def for_date(self, key: str) -> "DayPlan":
        """Copy of this day re-labelled with a calendar date key."""
        return replace(self, day=key)

    @staticmethod
    def from_dict(data: Any) -> "DayPlan":
        if not isinstance(data, dict):
            raise MalformedRecord(f"DayPlan must be an object, got {type(data).__name__}")
        return DayPlan(
            day=_text(data.get("day"), "day"),
            breakfast=_text(data.get("breakfast"), "breakfast"),
            lunch=_text(data.get("lunch"), "lunch"),
            dinner=_text(data.get("dinner"), "dinner"),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "day": self.day,
            "breakfast": self.breakfast,
            "lunch": self.lunch,
            "dinner": self.dinner,
        }


@dataclass
class WeeklyPlan:
    """The single unarchived draft: exactly seven DayPlans."""
    days: List[DayPlan] = field(default_factory=list)

    def __post_init__(self):
        if len(self.days) != PLAN_LENGTH_DAYS:
            raise MalformedRecord(
                f"A weekly plan needs exactly {PLAN_LENGTH_DAYS} days, got {len(self.days)}"
            )

    @staticmethod
    def from_dict(data: Any) -> "WeeklyPlan":
        if isinstance(data, dict):
            days = data.get("days")
        else:
            days = data
        if not isinstance(days, list):
            raise MalformedRecord("Weekly plan 'days' must be a list")
        return WeeklyPlan([DayPlan.from_dict(d) for d in days])

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {"days": [d.to_dict() for d in self.days]}


# ISO date key -> DayPlan
Schedule = Dict[str, DayPlan]


def empty_day(key: str) -> DayPlan:
    return DayPlan(day=key)


def schedule_to_dict(schedule: Schedule) -> Dict[str, Dict[str, str]]:
    return {key: plan.to_dict() for key, plan in schedule.items()}
