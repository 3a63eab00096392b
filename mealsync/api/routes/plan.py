import logging

from fastapi import APIRouter, Depends, Response

from mealsync.api.dependencies import get_ctx, get_session
from mealsync.context import AppContext
from mealsync.domain.Session import Session
from mealsync.logic.calendar.week import load_week
from mealsync.utilities.validators import LoadWeekRequest, WeeklyPlanInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/plan")
async def read_plan(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    plan = await ctx.plans.get_current(session)
    return {"plan": plan.to_dict() if plan else None}


@router.put("/plan")
async def write_plan(body: WeeklyPlanInput,
                     session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    plan_id = await ctx.plans.save(session, body.to_domain(), body.profile_id)
    return {"id": plan_id}


@router.delete("/plan", status_code=204)
async def clear_plan(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    await ctx.plans.clear(session)
    return Response(status_code=204)


@router.post("/plan/load-week")
async def load_week_into_plan(body: LoadWeekRequest,
                              session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    """Turn the calendar week around ``date`` back into the draft."""
    week = await load_week(ctx.schedule, session, body.date)
    plan_id = None
    if body.save:
        plan_id = await ctx.plans.save(session, week.plan, ctx.profiles.get_active_id(session))
    return {
        "start_date": week.start_date,
        "end_date": week.end_date,
        "label": week.label,
        "plan": week.plan.to_dict(),
        "id": plan_id,
    }
