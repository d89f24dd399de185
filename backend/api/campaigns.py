"""
Campaign API endpoints for Campaign Dispatch application.
"""

from fastapi import APIRouter, Depends, status, Path

from backend.core.dependencies import get_campaign_service, get_current_owner_id, get_notifier
from backend.core.logging import get_logger
from backend.schemas.campaign import CampaignActionResponse, CampaignCreate
from backend.services.campaign_service import CampaignService
from backend.services.notification_service import NotificationService
from backend.utils.error_handling import handle_exception

# Initialize logger
logger = get_logger(__name__)

# Create router
router = APIRouter()

@router.post("/", response_model=CampaignActionResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    campaign_data: CampaignCreate,
    owner_id: str = Depends(get_current_owner_id),
    service: CampaignService = Depends(get_campaign_service),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Create a draft campaign for a client group.

    Args:
        campaign_data: Campaign creation data
        owner_id: Current user ID

    Returns:
        CampaignActionResponse with the campaign and the dispatch outcome
    """
    try:
        response = await service.create_campaign(owner_id, campaign_data)
        response.notifications = notifier.drain()
        return response
    except Exception as e:
        raise handle_exception(e, "Failed to create campaign")

@router.post("/{campaign_id}/start", response_model=CampaignActionResponse)
async def start_campaign(
    campaign_id: int = Path(..., description="The ID of the campaign to start"),
    owner_id: str = Depends(get_current_owner_id),
    service: CampaignService = Depends(get_campaign_service),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Start a campaign and call every client of its group.
    """
    try:
        response = await service.start_campaign(owner_id, campaign_id)
        response.notifications = notifier.drain()
        return response
    except Exception as e:
        raise handle_exception(e, "Failed to start campaign")

@router.post("/{campaign_id}/pause", response_model=CampaignActionResponse)
async def pause_campaign(
    campaign_id: int = Path(..., description="The ID of the campaign to pause"),
    owner_id: str = Depends(get_current_owner_id),
    service: CampaignService = Depends(get_campaign_service),
    notifier: NotificationService = Depends(get_notifier)
):
    try:
        response = await service.pause_campaign(owner_id, campaign_id)
        response.notifications = notifier.drain()
        return response
    except Exception as e:
        raise handle_exception(e, "Failed to pause campaign")

@router.post("/{campaign_id}/stop", response_model=CampaignActionResponse)
async def stop_campaign(
    campaign_id: int = Path(..., description="The ID of the campaign to stop"),
    owner_id: str = Depends(get_current_owner_id),
    service: CampaignService = Depends(get_campaign_service),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Stop a campaign. It stays stopped locally even if the call system
    could not be notified.
    """
    try:
        response = await service.stop_campaign(owner_id, campaign_id)
        response.notifications = notifier.drain()
        return response
    except Exception as e:
        raise handle_exception(e, "Failed to stop campaign")
