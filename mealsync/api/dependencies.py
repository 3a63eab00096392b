"""Request-scoped dependencies shared by the routers."""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from mealsync.context import AppContext, get_context
from mealsync.domain.Session import Session
from mealsync.utilities.constants import LOCAL_USER_ID
from mealsync.utilities.errors import PermissionDenied


def get_session(x_user_id: Optional[str] = Header(None),
                authorization: Optional[str] = Header(None),
                x_profile_id: Optional[str] = Header(None)) -> Session:
    """Identity of the caller; no header means the anonymous local user.

    A signed-in identity must come with its bearer token.
    """
    user_id = (x_user_id or "").strip() or LOCAL_USER_ID
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    if user_id != LOCAL_USER_ID and token is None:
        raise HTTPException(status_code=401, detail="Bearer token required for a signed-in user")
    return Session(user_id=user_id, access_token=token,
                   active_profile_id=(x_profile_id or "").strip() or None)


def get_ctx() -> AppContext:
    return get_context()


async def get_verified_session(session: Session = Depends(get_session),
                               ctx: AppContext = Depends(get_ctx)) -> Session:
    """Session whose token the remote store's auth endpoint has confirmed.

    Needed where no row-level security stands between the caller and the data.
    """
    if session.is_local:
        return session
    if ctx.remote is None:
        raise PermissionDenied("Signed-in identities cannot be verified without a remote store")
    user = await ctx.remote.get_user(session)
    if str(user.get("id")) != session.user_id:
        raise PermissionDenied("Access token does not belong to the requested user")
    return session
