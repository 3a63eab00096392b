"""
Learning summary for AI plan generation.
Digests a trailing window of the calendar into accepted meals per slot plus
a bounded recency sample used to avoid repeats.
"""
import calendar
import logging
from datetime import date
from typing import Dict, List, Optional

from mealsync.domain.LearningSummary import MealLearningSummary
from mealsync.domain.Plan import Schedule, iso
from mealsync.domain.Session import Session
from mealsync.utilities.config import LEARNING_MONTHS_BACK
from mealsync.utilities.constants import MEAL_SLOTS, RECENT_MEALS_CAP

logger = logging.getLogger(__name__)


def months_before(day: date, months: int) -> date:
    """Same day-of-month ``months`` calendar months earlier, clamped to month length."""
    total = day.year * 12 + (day.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def build_summary(schedule: Schedule, cutoff: str) -> MealLearningSummary:
    """Summarize every entry dated on or after ``cutoff`` (ISO key)."""
    window = sorted((key for key in schedule if key >= cutoff), reverse=True)
    if not window:
        return MealLearningSummary()

    accepted: Dict[str, Dict[str, None]] = {slot: {} for slot in MEAL_SLOTS}
    recent: List[str] = []
    total = 0
    for key in window:
        day = schedule[key]
        for slot in MEAL_SLOTS:
            meal = day.meal(slot)
            if not meal:
                continue
            accepted[slot].setdefault(meal)  # ordered set
            if len(recent) < RECENT_MEALS_CAP:
                recent.append(meal)
            total += 1

    return MealLearningSummary(
        accepted_breakfasts=list(accepted["breakfast"]),
        accepted_lunches=list(accepted["lunch"]),
        accepted_dinners=list(accepted["dinner"]),
        recent_meals=recent,
        total_meal_count=total,
        oldest_date=window[-1],
        newest_date=window[0],
    )


class LearningSummaryAggregator:
    def __init__(self, schedule_repo):
        self.schedule_repo = schedule_repo

    async def summarize(self, session: Session, months_back: int = LEARNING_MONTHS_BACK,
                        today: Optional[date] = None) -> MealLearningSummary:
        if months_back < 0:
            raise ValueError("months_back cannot be negative")
        cutoff = iso(months_before(today or date.today(), months_back))
        try:
            schedule = await self.schedule_repo.get(session, start=cutoff)
        except Exception as e:
            # advisory context only; generation proceeds without it
            logger.warning(f"Learning summary unavailable, using empty summary: {e}")
            return MealLearningSummary()
        return build_summary(schedule, cutoff)
