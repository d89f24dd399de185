"""
Pydantic schema models for Campaign Dispatch application.
These schemas are used for request/response validation and for the
outbound payloads.
"""

from .assistant import (
    AssistantStatus, AssistantRecord, RemoteAssistant,
    AssistantCreate, AssistantCreationResult, ResolveRequest,
    AssistantActionResponse
)
from .dispatch import (
    ActionType, ResolutionSource, ResolutionHints, Resolution,
    CallConfig, AdditionalData, ActionPayload, DispatchContext,
    Notification, DispatchResult, CallSettings, CallRequest, CallResponse
)
from .campaign import CampaignCreate, CampaignResponse, CampaignActionResponse

# Export all schemas
__all__ = [
    # Assistant schemas
    "AssistantStatus", "AssistantRecord", "RemoteAssistant",
    "AssistantCreate", "AssistantCreationResult", "ResolveRequest",
    "AssistantActionResponse",

    # Dispatch schemas
    "ActionType", "ResolutionSource", "ResolutionHints", "Resolution",
    "CallConfig", "AdditionalData", "ActionPayload", "DispatchContext",
    "Notification", "DispatchResult", "CallSettings", "CallRequest", "CallResponse",

    # Campaign schemas
    "CampaignCreate", "CampaignResponse", "CampaignActionResponse",
]
