from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from mealsync.context import get_context
from mealsync.events.web_observers import start as start_event_observers
from mealsync.utilities.errors import (
    InvalidDateRange,
    MalformedRecord,
    MealSyncError,
    NoMatchingEntity,
    NotFound,
    PermissionDenied,
    StorageUnavailable,
)

# Routers
from mealsync.api.routes import feedback, grocery, hooks, plan, profiles, schedule, workspace

# Logging
logger = logging.getLogger("mealsync_app")

# Storage error -> HTTP status
STATUS_BY_ERROR = (
    (StorageUnavailable, 503),
    (NotFound, 404),
    (NoMatchingEntity, 404),
    (PermissionDenied, 403),
    (MalformedRecord, 422),
    (InvalidDateRange, 422),
)

# Initialize FastAPI app
app = FastAPI(title="Meal Planner Sync API")

# Include routers
app.include_router(schedule.router)
app.include_router(plan.router)
app.include_router(grocery.router)
app.include_router(profiles.router)
app.include_router(workspace.router)
app.include_router(feedback.router)
app.include_router(hooks.router)


def status_for(exc: MealSyncError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


@app.exception_handler(MealSyncError)
async def _storage_error_handler(request: Request, exc: MealSyncError):
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status}: {exc}")
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for polling clients when the app starts."""
    start_event_observers()
    logger.info("Web observers for schedule events started")


@app.on_event("shutdown")
async def _close_remote_store():
    await get_context().aclose()


@app.get("/health")
def health():
    ctx = get_context()
    return {"status": "ok", "remote_configured": ctx.resolver.remote_configured}
