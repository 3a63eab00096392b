"""Start-up load of everything the UI shows for a session.

Read failures degrade to the entity's default and are reported in
``Workspace.errors``. The only write is creating the default profile for a
brand new user, and a failure there propagates.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mealsync.domain.MealHistory import MealHistoryEntry
from mealsync.domain.Plan import Schedule, WeeklyPlan
from mealsync.domain.Preferences import PreferenceProfile
from mealsync.domain.Session import Session
from mealsync.domain.Settings import UserSettings
from mealsync.utilities.errors import MealSyncError

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    profiles: List[PreferenceProfile] = field(default_factory=list)
    active_profile_id: Optional[str] = None
    plan: Optional[WeeklyPlan] = None
    schedule: Schedule = field(default_factory=dict)
    history: List[MealHistoryEntry] = field(default_factory=list)
    settings: UserSettings = field(default_factory=UserSettings)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def active_profile(self) -> Optional[PreferenceProfile]:
        for profile in self.profiles:
            if profile.id == self.active_profile_id:
                return profile
        return None


def resolve_active_id(saved_id: Optional[str], profiles: List[PreferenceProfile]) -> Optional[str]:
    if saved_id and any(p.id == saved_id for p in profiles):
        return saved_id
    return profiles[0].id if profiles else None


async def load_workspace(ctx, session: Session) -> Workspace:
    ws = Workspace()

    async def _read(name, call, default):
        try:
            return await call
        except MealSyncError as e:
            logger.warning(f"Could not load {name}, using default: {e}")
            ws.errors[name] = str(e)
            return default

    profiles = await _read("profiles", ctx.profiles.list(session), None)
    if profiles == []:
        profiles = [await ctx.profiles.create_default(session)]
    ws.profiles = profiles or []

    saved_id = ctx.profiles.get_active_id(session)
    ws.active_profile_id = resolve_active_id(saved_id, ws.profiles)
    if ws.active_profile_id and ws.active_profile_id != saved_id:
        ctx.profiles.set_active_id(session, ws.active_profile_id)
    ws.plan = await _read("plan", ctx.plans.get_current(session), None)
    ws.schedule = await _read("schedule", ctx.schedule.get(session), {})
    ws.history = await _read("history", ctx.history.get(session), [])
    ws.settings = await _read("settings", ctx.settings.get(session), UserSettings(api_key_secret=ctx.settings.get_api_key()))
    return ws
