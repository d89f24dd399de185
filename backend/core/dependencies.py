"""
FastAPI dependencies for Campaign Dispatch application.
Contains reusable dependency functions that can be used across API endpoints.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from backend.core.logging import get_logger
from backend.db.session import get_db
from backend.services.assistant_service import AssistantService
from backend.services.campaign_service import CampaignService
from backend.services.dispatch_service import DispatchService
from backend.services.identity_resolver import IdentityResolver
from backend.services.notification_service import NotificationService
from backend.services.session_state import SelectionCache, session_registry
from backend.services.vapi_service import VapiService, get_vapi_service

# Initialize logger
logger = get_logger(__name__)

async def get_current_owner_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id")
) -> str:
    """
    Get the owner id of the current session.

    Authentication happens upstream; the gateway forwards the user id
    in the X-User-Id header.

    Raises:
        HTTPException: If the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request without X-User-Id header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User is not authenticated"
        )
    return x_user_id.strip()

def get_selection(owner_id: str = Depends(get_current_owner_id)) -> SelectionCache:
    return session_registry.selection_for(owner_id)

def get_notifier() -> NotificationService:
    """One collector per request, shared by every service the request builds"""
    return NotificationService()

def get_vapi() -> VapiService:
    return get_vapi_service()

def get_identity_resolver(
    db: Session = Depends(get_db),
    vapi: VapiService = Depends(get_vapi),
    selection: SelectionCache = Depends(get_selection),
) -> IdentityResolver:
    return IdentityResolver(vapi, db=db, selection=selection)

def get_dispatch_service(
    resolver: IdentityResolver = Depends(get_identity_resolver),
    notifier: NotificationService = Depends(get_notifier),
) -> DispatchService:
    return DispatchService(resolver, notifier=notifier)

def get_assistant_service(
    db: Session = Depends(get_db),
    vapi: VapiService = Depends(get_vapi),
    selection: SelectionCache = Depends(get_selection),
    notifier: NotificationService = Depends(get_notifier),
) -> AssistantService:
    return AssistantService(db, vapi, selection, notifier=notifier)

def get_campaign_service(
    db: Session = Depends(get_db),
    dispatcher: DispatchService = Depends(get_dispatch_service),
    selection: SelectionCache = Depends(get_selection),
) -> CampaignService:
    return CampaignService(db, dispatcher, selection)
