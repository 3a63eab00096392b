"""AI plan generation seam.

The core never builds prompts or parses model output. It hands the active
profile's preferences and the learning summary to a ``PlanGenerator`` and
stores what comes back as the new draft.
"""
import logging
from typing import Optional, Protocol

from mealsync.domain.LearningSummary import MealLearningSummary
from mealsync.domain.Plan import WeeklyPlan
from mealsync.domain.Preferences import UserPreferences
from mealsync.domain.Session import Session
from mealsync.logic.session.workspace import resolve_active_id
from mealsync.utilities.errors import NoMatchingEntity

logger = logging.getLogger(__name__)


class PlanGenerator(Protocol):
    async def generate(self, preferences: UserPreferences,
                       summary: Optional[MealLearningSummary] = None) -> WeeklyPlan: ...


async def generate_draft(ctx, session: Session, generator: PlanGenerator,
                         use_history: bool = True) -> WeeklyPlan:
    """Generate a week for the active profile and save it as the current draft."""
    profiles = await ctx.profiles.list(session)
    profile_id = resolve_active_id(ctx.profiles.get_active_id(session), profiles)
    if profile_id is None:
        raise NoMatchingEntity("No preference profile to generate a plan for")
    profile = next(p for p in profiles if p.id == profile_id)

    summary = await ctx.learning.summarize(session) if use_history else None
    if summary is not None and summary.is_empty:
        summary = None
    plan = await generator.generate(profile.preferences, summary)
    await ctx.plans.save(session, plan, profile_id)
    logger.info(f"Saved generated draft for profile {profile_id}")
    return plan
