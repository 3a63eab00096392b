from typing import Optional

from fastapi import APIRouter, Depends, Query

from mealsync.api.dependencies import get_ctx, get_session
from mealsync.context import AppContext
from mealsync.domain.Plan import schedule_to_dict
from mealsync.domain.Session import Session
from mealsync.logic.session.workspace import load_workspace
from mealsync.utilities.constants import MEAL_HISTORY_DEFAULT_LIMIT

router = APIRouter(prefix="/api")


@router.get("/meal-history")
async def meal_history(limit: int = Query(MEAL_HISTORY_DEFAULT_LIMIT, ge=1, le=1000),
                       session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    source = ctx.history.source(session)
    entries = await source.get(session, limit)
    return {"entries": [e.to_dict() for e in entries], "authoritative": source.authoritative}


@router.get("/workspace")
async def workspace(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    """Everything the planner shows on start-up, with per-entity load errors."""
    ws = await load_workspace(ctx, session)
    active: Optional[dict] = ws.active_profile.to_dict() if ws.active_profile else None
    return {
        "profiles": [p.to_dict() for p in ws.profiles],
        "active_profile": active,
        "plan": ws.plan.to_dict() if ws.plan else None,
        "schedule": schedule_to_dict(ws.schedule),
        "history": [e.to_dict() for e in ws.history],
        "settings": {**ws.settings.synced_dict(), "hasApiKey": bool(ws.settings.api_key_secret)},
        "errors": ws.errors,
    }
