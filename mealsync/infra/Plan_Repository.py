"""Weekly draft plan persistence: at most one current, unarchived plan per user."""
import logging
from typing import Optional

from mealsync.domain.Plan import WeeklyPlan
from mealsync.domain.Session import Session
from mealsync.infra.dual_mode import DualModeRepository, LocalBackend, RemoteBackend
from mealsync.infra.paths import PLAN_KEY
from mealsync.infra.remote_store import eq
from mealsync.utilities.errors import MalformedRecord, NotFound

logger = logging.getLogger(__name__)

LOCAL_PLAN_ID = "local"


class LocalPlanStore(LocalBackend):
    async def get_current(self, session: Session) -> Optional[WeeklyPlan]:
        raw = self.storage.get_item(PLAN_KEY)
        if raw is None:
            return None
        try:
            return WeeklyPlan.from_dict(raw)
        except MalformedRecord as e:
            logger.warning(f"Ignoring unreadable local draft plan: {e}")
            return None

    async def save(self, session: Session, plan: WeeklyPlan, profile_id: Optional[str] = None) -> str:
        self.storage.set_item(PLAN_KEY, plan.to_dict())
        return LOCAL_PLAN_ID

    async def clear(self, session: Session) -> None:
        self.storage.remove_item(PLAN_KEY)


class RemotePlanStore(RemoteBackend):
    TABLE = "weekly_plans"

    async def get_current(self, session: Session) -> Optional[WeeklyPlan]:
        try:
            row = await self.store.select(
                session, self.TABLE,
                filters=[("is_current", eq("true"))],
                order="created_at.desc", limit=1, single=True,
            )
        except NotFound:
            # zero rows is "no draft", not a failure
            return None
        if not isinstance(row, dict):
            raise MalformedRecord("weekly_plans row is not an object")
        return WeeklyPlan.from_dict(row.get("days"))

    async def save(self, session: Session, plan: WeeklyPlan, profile_id: Optional[str] = None) -> str:
        await self.clear(session)
        rows = await self.store.insert(session, self.TABLE, {
            "profile_id": profile_id,
            "days": plan.to_dict()["days"],
            "is_current": True,
        })
        if not rows or "id" not in rows[0]:
            raise MalformedRecord("Remote store returned no id for the saved plan")
        return str(rows[0]["id"])

    async def clear(self, session: Session) -> None:
        await self.store.update(session, self.TABLE, {"is_current": False},
                                filters=[("is_current", eq("true"))])


class WeeklyPlanRepository(DualModeRepository):
    def __init__(self, storage, remote_store, resolver):
        super().__init__(LocalPlanStore(storage), RemotePlanStore(remote_store), resolver)

    async def get_current(self, session: Session) -> Optional[WeeklyPlan]:
        return await self.backend(session).get_current(session)

    async def save(self, session: Session, plan: WeeklyPlan, profile_id: Optional[str] = None) -> str:
        return await self.backend(session).save(session, plan, profile_id)

    async def clear(self, session: Session) -> None:
        await self.backend(session).clear(session)
