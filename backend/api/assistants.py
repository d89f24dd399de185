"""
Assistant API endpoints for Campaign Dispatch application.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Path
from typing import List

from backend.core.dependencies import (
    get_assistant_service,
    get_current_owner_id,
    get_identity_resolver,
    get_notifier
)
from backend.core.logging import get_logger
from backend.schemas.assistant import (
    AssistantActionResponse, AssistantCreate, AssistantRecord, ResolveRequest
)
from backend.schemas.dispatch import Resolution, ResolutionHints
from backend.services.assistant_service import AssistantService
from backend.services.identity_resolver import IdentityResolver
from backend.services.notification_service import NotificationService
from backend.utils.error_handling import handle_exception

# Initialize logger
logger = get_logger(__name__)

# Create router
router = APIRouter()

@router.get("/", response_model=List[AssistantRecord])
async def get_assistants(
    owner_id: str = Depends(get_current_owner_id),
    service: AssistantService = Depends(get_assistant_service)
):
    """
    Get all assistants of the current user, local and provider records merged.

    Returns:
        List of AssistantRecord objects
    """
    try:
        return await service.get_all_assistants(owner_id)
    except Exception as e:
        raise handle_exception(e, "Failed to retrieve assistants")

@router.get("/remote", response_model=List[AssistantRecord])
async def get_remote_assistants(
    owner_id: str = Depends(get_current_owner_id),
    service: AssistantService = Depends(get_assistant_service)
):
    """
    Get the provider's assistants without touching the local store.
    """
    try:
        return await service.get_remote_assistants()
    except Exception as e:
        raise handle_exception(e, "Failed to retrieve provider assistants")

@router.get("/selected", response_model=AssistantRecord)
async def get_selected_assistant(
    owner_id: str = Depends(get_current_owner_id),
    service: AssistantService = Depends(get_assistant_service)
):
    selected = service.get_selected()
    if not selected:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No assistant selected"
        )
    return selected

@router.post("/", response_model=AssistantActionResponse, status_code=status.HTTP_201_CREATED)
async def create_assistant(
    assistant_data: AssistantCreate,
    owner_id: str = Depends(get_current_owner_id),
    service: AssistantService = Depends(get_assistant_service),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Create a new assistant through the provider workflow.

    Args:
        assistant_data: Assistant creation data
        owner_id: Current user ID

    Returns:
        AssistantActionResponse with the pending assistant record
    """
    try:
        record = await service.create_assistant(owner_id, assistant_data)
        return AssistantActionResponse(assistant=record, notifications=notifier.drain())
    except Exception as e:
        raise handle_exception(e, "Failed to create assistant")

@router.post("/resolve", response_model=Resolution)
async def resolve_assistant(
    request: ResolveRequest,
    owner_id: str = Depends(get_current_owner_id),
    resolver: IdentityResolver = Depends(get_identity_resolver)
):
    """
    Resolve the provider assistant id that an action would use.
    """
    try:
        hints = ResolutionHints(owner_id=owner_id, **request.dict())
        return await resolver.resolve(hints)
    except Exception as e:
        raise handle_exception(e, "Failed to resolve assistant")

@router.post("/{local_id}/select", response_model=AssistantActionResponse)
async def select_assistant(
    local_id: str = Path(..., description="Local ID of the assistant to select"),
    owner_id: str = Depends(get_current_owner_id),
    service: AssistantService = Depends(get_assistant_service),
    notifier: NotificationService = Depends(get_notifier)
):
    try:
        record = service.select_assistant(owner_id, local_id)
        return AssistantActionResponse(assistant=record, notifications=notifier.drain())
    except Exception as e:
        raise handle_exception(e, "Failed to select assistant")

@router.delete("/{local_id}", response_model=AssistantActionResponse)
async def delete_assistant(
    local_id: str = Path(..., description="Local ID of the assistant to delete"),
    owner_id: str = Depends(get_current_owner_id),
    service: AssistantService = Depends(get_assistant_service),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Delete an assistant on the provider and locally.

    A provider failure does not block the local deletion.
    """
    try:
        await service.delete_assistant(owner_id, local_id)
        return AssistantActionResponse(success=True, notifications=notifier.drain())
    except Exception as e:
        raise handle_exception(e, "Failed to delete assistant")
