"""Calendar routes: schedule reads/edits, archiving and the learning summary."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mealsync.api.dependencies import get_ctx, get_session, get_verified_session
from mealsync.context import AppContext
from mealsync.domain.Plan import schedule_to_dict
from mealsync.domain.Session import Session
from mealsync.events.web_observers import get_events
from mealsync.logic.calendar.archive import find_conflicts, target_dates
from mealsync.utilities.config import LEARNING_MONTHS_BACK
from mealsync.utilities.errors import NotFound
from mealsync.utilities.validators import ArchiveRequest, DayPlanInput, MealTransferRequest

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/schedule")
async def read_schedule(start: Optional[str] = None, end: Optional[str] = None,
                        session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    schedule = await ctx.schedule.get(session, start, end)
    return {"schedule": schedule_to_dict(schedule), "count": len(schedule)}


@router.put("/schedule/{date}")
async def write_schedule_day(date: str, body: DayPlanInput,
                             session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    stored = await ctx.schedule.upsert_day(session, date, body.to_domain())
    return stored.to_dict()


@router.post("/schedule/transfer")
async def transfer_meal(body: MealTransferRequest,
                        session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    """Copy (or move) one meal between calendar cells."""
    days = await ctx.schedule.transfer_meal(
        session, body.source_date, body.source_slot, body.target_date, body.target_slot, move=body.move
    )
    return {"days": [d.to_dict() for d in days]}


@router.post("/archive")
async def archive_plan(body: ArchiveRequest,
                       session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    if body.plan is not None:
        plan = body.plan.to_domain()
    else:
        plan = await ctx.plans.get_current(session)
        if plan is None:
            raise NotFound("There is no draft plan to archive")
    result = await ctx.archive.archive(session, plan, body.start_date, body.overwrite)
    return {"start_date": result.start_date, "written": result.written, "preserved": result.preserved}


@router.post("/archive/revert")
async def revert_archive(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    reverted = await ctx.archive.revert(session)
    if not reverted:
        raise NotFound("Nothing to revert")
    return {"reverted": True}


@router.get("/archive/conflicts")
async def archive_conflicts(start_date: str,
                            session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    keys = target_dates(start_date)
    schedule = await ctx.schedule.get(session, keys[0], keys[-1])
    return {"start_date": keys[0], "conflicts": find_conflicts(schedule, keys[0])}


@router.get("/learning-summary")
async def learning_summary(months_back: int = Query(LEARNING_MONTHS_BACK, ge=0, le=24),
                           session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    summary = await ctx.learning.summarize(session, months_back)
    return summary.to_dict()


@router.get("/events")
async def schedule_events(since: Optional[int] = None, session: Session = Depends(get_verified_session)):
    """Polling fallback for clients that cannot hold a change subscription."""
    return get_events(session.user_id, since)
