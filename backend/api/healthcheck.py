"""
Health check and status endpoints for Campaign Dispatch application.
"""
from fastapi import APIRouter, Depends
from datetime import datetime
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backend.core.logging import get_logger
from backend.core.config import settings
from backend.db.session import get_db

# Initialize logger
logger = get_logger(__name__)

# Create router
router = APIRouter()

@router.get("/healthcheck", tags=["Health"])
async def healthcheck():
    """
    Health check endpoint to verify the API is running.

    Returns:
        Status information about the application
    """
    return {
        "status": "ok",
        "version": settings.VERSION,
        "timestamp": datetime.now().isoformat(),
        "environment": "development" if settings.DEBUG else "production"
    }

@router.get("/status", tags=["Health"])
async def status(db = Depends(get_db)):
    """
    Extended status endpoint that checks database connectivity.
    """
    db_status = "ok"
    try:
        db.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error(f"Database connection error: {str(e)}")
        db_status = "error"

    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "version": settings.VERSION,
        "timestamp": datetime.now().isoformat(),
        "components": {
            "database": db_status,
            "provider": "configured" if settings.VAPI_API_KEY else "not_configured",
            "workflow": settings.call_webhook_url,
        }
    }
