"""
Call API endpoints for Campaign Dispatch application.
Manual calls and the process-wide call settings.
"""

from fastapi import APIRouter, Depends

from backend.core.dependencies import get_campaign_service, get_current_owner_id, get_notifier
from backend.core.logging import get_logger
from backend.schemas.dispatch import CallRequest, CallResponse, CallSettings
from backend.services.campaign_service import CampaignService
from backend.services.notification_service import NotificationService
from backend.services.session_state import call_settings_store
from backend.utils.error_handling import handle_exception

# Initialize logger
logger = get_logger(__name__)

# Create router
router = APIRouter()

@router.post("/", response_model=CallResponse)
async def make_call(
    call: CallRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: CampaignService = Depends(get_campaign_service),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Place a single call with the selected assistant.

    A rejected or unreachable workflow gives success=False, not an HTTP error.
    """
    try:
        response = await service.make_call(owner_id, call)
        response.notifications = notifier.drain()
        return response
    except Exception as e:
        raise handle_exception(e, "Failed to start call")

@router.get("/settings", response_model=CallSettings)
async def get_call_settings(owner_id: str = Depends(get_current_owner_id)):
    return call_settings_store.get()

@router.put("/settings", response_model=CallSettings)
async def update_call_settings(
    call_settings: CallSettings,
    owner_id: str = Depends(get_current_owner_id)
):
    """
    Override the model and voice sent with every action.
    Omitted fields keep their current value.
    """
    updated = call_settings_store.update(model=call_settings.model, voice=call_settings.voice)
    logger.info(f"Call settings updated by {owner_id}: {updated.dict()}")
    return updated
