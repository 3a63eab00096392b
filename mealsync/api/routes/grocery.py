import logging

from fastapi import APIRouter, Depends, Response

from mealsync.api.dependencies import get_ctx, get_session
from mealsync.context import AppContext
from mealsync.domain.Session import Session
from mealsync.utilities.validators import GroceryHistoryInput

router = APIRouter(prefix="/api/grocery-history")
logger = logging.getLogger(__name__)


@router.get("")
async def list_grocery_history(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    lists = await ctx.grocery.history(session)
    return {"lists": [gl.to_dict() for gl in lists], "count": len(lists)}


@router.post("", status_code=201)
async def save_grocery_list(body: GroceryHistoryInput,
                            session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    saved = await ctx.grocery.save_to_history(
        session, [i.to_domain() for i in body.items], body.date_range, body.name
    )
    return saved.to_dict()


@router.delete("/{list_id}", status_code=204)
async def delete_grocery_list(list_id: str,
                              session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    await ctx.grocery.delete(session, list_id)
    return Response(status_code=204)
