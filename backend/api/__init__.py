"""
API module for Campaign Dispatch application.
Contains FastAPI route definitions for all endpoints.
"""

from fastapi import APIRouter

from .assistants import router as assistants_router
from .calls import router as calls_router
from .campaigns import router as campaigns_router
from .session import router as session_router
from .healthcheck import router as healthcheck_router

# Create a main API router
api_router = APIRouter()

api_router.include_router(assistants_router, prefix="/assistants", tags=["Assistants"])
api_router.include_router(calls_router, prefix="/calls", tags=["Calls"])
api_router.include_router(campaigns_router, prefix="/campaigns", tags=["Campaigns"])
api_router.include_router(session_router, tags=["Session"])

# Export all routers for use in app.py
__all__ = [
    "api_router",
    "assistants_router",
    "calls_router",
    "campaigns_router",
    "session_router",
    "healthcheck_router"
]
