"""
Dispatch schemas for Campaign Dispatch application.
Describes the outbound action payload sent to the workflow endpoint and
the identity resolution that feeds it.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Union


class ActionType(str, Enum):
    """Actions understood by the workflow endpoint"""
    CREATE_ASSISTANT = "create_assistant"
    INITIATE_CALL = "initiate_call"
    START_CAMPAIGN = "start_campaign"
    PAUSE_CAMPAIGN = "pause_campaign"
    STOP_CAMPAIGN = "stop_campaign"
    CREATE_CAMPAIGN = "create_campaign"


class ResolutionSource(str, Enum):
    """Which cascade step produced the assistant id"""
    EXPLICIT = "explicit"
    NAME_MATCH = "name_match"
    LOCAL_RECORD = "local_record"
    CACHED_SELECTION = "cached_selection"
    CATALOG_SCAN = "catalog_scan"
    FALLBACK = "fallback"


class ResolutionHints(BaseModel):
    """Whatever partial identity information the caller has"""
    name: Optional[str] = None
    local_id: Optional[str] = None
    remote_id: Optional[str] = None
    owner_id: Optional[str] = None


class Resolution(BaseModel):
    """A confirmed remote assistant id plus how it was found"""
    remote_id: str
    source: ResolutionSource
    local_id: Optional[str] = None
    name: Optional[str] = None
    degraded: bool = False


class CallConfig(BaseModel):
    """Model/voice configuration attached to every dispatch"""
    model: str
    voice: str


class AdditionalData(BaseModel):
    """
    Structured replacement for the open additional_data bag.

    Wire names are kept as the workflow expects them. schema_version is
    bumped whenever a field changes meaning; consumers ignore unknown
    fields, so new optional fields stay backward compatible.
    """
    # Resolved identity
    vapi_assistant_id: Optional[str] = None
    assistant_id: Optional[str] = None
    assistant_name: Optional[str] = None
    id_type: Optional[str] = None
    resolution_source: Optional[ResolutionSource] = None
    resolution_degraded: Optional[bool] = None

    # Campaign context
    campaign_name: Optional[str] = None
    client_count: Optional[int] = None
    progress: Optional[Union[int, float]] = None
    completed_calls: Optional[int] = None
    ai_profile: Optional[str] = None
    client_group: Optional[str] = None
    vapi_caller_id: Optional[str] = None
    source: Optional[str] = None

    # Diagnostics
    timestamp: Optional[str] = None
    client_version: Optional[str] = None
    schema_version: Optional[int] = None

    class Config:
        use_enum_values = True


class ActionPayload(BaseModel):
    """Outbound message POSTed to the workflow endpoint"""
    action: ActionType
    campaign_id: Optional[int] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    user_id: Optional[str] = Field(None, description="Owner of the action")
    additional_data: AdditionalData = Field(default_factory=AdditionalData)
    provider: Optional[str] = None
    call: Optional[CallConfig] = None

    class Config:
        use_enum_values = True


class DispatchContext(BaseModel):
    """Everything a UI action knows when it asks for a dispatch"""
    campaign_id: Optional[int] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    owner_id: Optional[str] = None
    hints: ResolutionHints = Field(default_factory=ResolutionHints)
    data: AdditionalData = Field(default_factory=AdditionalData)


class Notification(BaseModel):
    """User-facing message produced while handling an action"""
    level: str
    message: str


class DispatchResult(BaseModel):
    """Outcome of a dispatch"""
    accepted: bool
    action: ActionType
    resolution: Optional[Resolution] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    class Config:
        use_enum_values = True


class CallSettings(BaseModel):
    """Process-wide model/voice override"""
    model: Optional[str] = None
    voice: Optional[str] = None


class CallRequest(BaseModel):
    """Manual call request"""
    client_id: int
    client_phone: str = Field(..., min_length=3)
    campaign_id: int


class CallResponse(BaseModel):
    """Manual call response"""
    success: bool
    message: str
    dispatch: DispatchResult
    notifications: List[Notification] = []
