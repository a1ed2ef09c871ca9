"""API v1 sub-application implementation."""

from fastapi import FastAPI

from cfp.api.common.exception_handlers import register_exception_handlers
from cfp.api.common.routers import activities, auth, health
from cfp.config import settings

# Create sub-application (v1)
app_v1 = FastAPI(
    title=settings.APP_NAME,
    description="Administration of call-for-proposals activities with multilingual "
    "content, GitHub sign-in and permission-based access control.",
    version="1.0.0",
    root_path="/api/v1",
    responses={
        500: {
            "description": "Internal Server Error - an unexpected issue occurred that prevented the request from being completed"
        },
        503: {"description": "Service Unavailable - database unreachable"},
    },
)

# Registered on the sub-application too so tests can call app_v1 directly
register_exception_handlers(app_v1)

# Sort alphabetically
app_v1.include_router(activities.router, prefix="")
app_v1.include_router(auth.router, prefix="/auth")
app_v1.include_router(health.router, prefix="")

__all__ = ["app_v1"]
