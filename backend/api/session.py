"""
Session API endpoints for Campaign Dispatch application.
"""

from fastapi import APIRouter, Depends, status

from backend.core.dependencies import get_current_owner_id
from backend.core.logging import get_logger
from backend.services.session_state import session_registry

# Initialize logger
logger = get_logger(__name__)

# Create router
router = APIRouter()

@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(owner_id: str = Depends(get_current_owner_id)):
    """
    Logout: drop the cached assistant selection of the current user.
    """
    session_registry.end_session(owner_id)
    logger.info(f"Session ended for {owner_id}")
