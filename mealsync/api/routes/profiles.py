"""Preference profiles, synced settings and the device-local API key."""
import logging
import uuid

from fastapi import APIRouter, Depends, Response

from mealsync.api.dependencies import get_ctx, get_session
from mealsync.context import AppContext
from mealsync.domain.Session import Session
from mealsync.utilities.validators import ApiKeyInput, ProfileInput, SettingsInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/profiles")
async def list_profiles(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    profiles = await ctx.profiles.list(session)
    return {"profiles": [p.to_dict() for p in profiles], "active_id": ctx.profiles.get_active_id(session)}


@router.post("/profiles", status_code=201)
async def create_profile(body: ProfileInput,
                         session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    saved = await ctx.profiles.save(session, body.to_domain(str(uuid.uuid4())))
    return saved.to_dict()


@router.put("/profiles/{profile_id}")
async def update_profile(profile_id: str, body: ProfileInput,
                         session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    existing = await ctx.profiles.get(session, profile_id)
    profile = body.to_domain(profile_id)
    profile.is_default = existing.is_default
    saved = await ctx.profiles.save(session, profile)
    return saved.to_dict()


@router.delete("/profiles/{profile_id}", status_code=204)
async def delete_profile(profile_id: str,
                         session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    await ctx.profiles.delete(session, profile_id)
    return Response(status_code=204)


@router.put("/profiles/{profile_id}/active")
async def activate_profile(profile_id: str,
                           session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    await ctx.profiles.get(session, profile_id)
    ctx.profiles.set_active_id(session, profile_id)
    return {"active_id": profile_id}


@router.get("/settings")
async def read_settings(session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    settings = await ctx.settings.get(session)
    # the key itself is never echoed back
    return {**settings.synced_dict(), "hasApiKey": bool(settings.api_key_secret)}


@router.put("/settings")
async def write_settings(body: SettingsInput,
                         session: Session = Depends(get_session), ctx: AppContext = Depends(get_ctx)):
    await ctx.settings.save(session, body.cook_name, body.cook_contact_number)
    settings = await ctx.settings.get(session)
    return {**settings.synced_dict(), "hasApiKey": bool(settings.api_key_secret)}


@router.put("/settings/api-key", status_code=204)
async def write_api_key(body: ApiKeyInput, ctx: AppContext = Depends(get_ctx)):
    ctx.settings.set_api_key(body.api_key.strip())
    return Response(status_code=204)
