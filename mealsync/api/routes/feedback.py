from fastapi import APIRouter, Depends, Response

from mealsync.api.dependencies import get_ctx, get_session
from mealsync.context import AppContext
from mealsync.domain.Session import Session
from mealsync.utilities.constants import ANON_USER_ID
from mealsync.utilities.validators import FeedbackInput

router = APIRouter(prefix="/api")


@router.post("/feedback", status_code=204)
async def submit_feedback(body: FeedbackInput,
                          session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    if body.anonymous:
        session = Session(ANON_USER_ID)
    await ctx.feedback.submit(session, body.to_domain())
    return Response(status_code=204)
