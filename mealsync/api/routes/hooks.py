"""Receiver for the remote store's database webhooks.

The remote store POSTs a row-change payload for every write to
``scheduled_meals``; each one is turned into a ``schedule.changed`` event
for the row's owner on the in-process bus.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from mealsync.events.Event_Bus import publish_schedule_change
from mealsync.utilities.config import WEBHOOK_SECRET
from mealsync.utilities.validators import RowChangePayload

router = APIRouter(prefix="/hooks")
logger = logging.getLogger(__name__)

SCHEDULE_TABLE = "scheduled_meals"


def _authorized(secret: Optional[str]) -> bool:
    if not WEBHOOK_SECRET:
        return True
    return hmac.compare_digest(secret or "", WEBHOOK_SECRET)


@router.post("/scheduled-meals", status_code=202)
async def scheduled_meals_changed(payload: RowChangePayload,
                                  x_webhook_secret: Optional[str] = Header(None)):
    if not _authorized(x_webhook_secret):
        logger.warning("Rejected webhook call with a bad secret")
        raise HTTPException(status_code=401, detail="Invalid webhook secret")
    if payload.table != SCHEDULE_TABLE:
        raise HTTPException(status_code=422, detail=f"Unexpected table '{payload.table}'")
    owner = payload.owner()
    if not owner:
        raise HTTPException(status_code=422, detail="Change payload carries no owner")
    logger.debug(f"{payload.type} on {SCHEDULE_TABLE} for {owner}")
    publish_schedule_change(owner, payload.type, payload.date())
    return {"status": "accepted"}
