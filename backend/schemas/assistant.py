"""
Assistant schemas for Campaign Dispatch application.
Defines the canonical assistant record, the provider's representation and
request/response bodies for the assistant endpoints.
"""

from enum import Enum
from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any, List
from datetime import datetime

from backend.schemas.dispatch import Notification


class AssistantStatus(str, Enum):
    """Lifecycle status of an assistant"""
    READY = "ready"
    PENDING = "pending"
    FAILED = "failed"


class AssistantRecord(BaseModel):
    """
    Canonical identity unit shared by the local store and the provider.

    A record is identified by remote_id when present, else by local_id.
    """
    local_id: Optional[str] = Field(None, description="ID assigned by the local store")
    remote_id: Optional[str] = Field(None, description="ID assigned by the remote provider")
    name: str = Field("", description="Display name")
    status: AssistantStatus = Field(AssistantStatus.READY, description="Lifecycle status")
    system_prompt: Optional[str] = None
    first_message: Optional[str] = None
    model: Optional[Any] = None
    voice: Optional[Any] = None
    owner_id: Optional[str] = Field(None, description="User who owns the record")
    created_at: Optional[datetime] = None

    @validator("remote_id", "local_id", pre=True)
    def empty_id_is_none(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    @validator("status", pre=True)
    def default_status(cls, v):
        return v or AssistantStatus.READY

    class Config:
        from_attributes = True
        use_enum_values = True


class RemoteAssistant(BaseModel):
    """Assistant as returned by the provider's API"""
    id: str
    name: str = ""
    status: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    instructions: Optional[str] = None
    first_message: Optional[str] = Field(None, alias="firstMessage")
    model: Optional[Any] = None
    voice: Optional[Any] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @validator("name", pre=True)
    def none_name_is_empty(cls, v):
        return v or ""

    @property
    def owner_tag(self) -> Optional[str]:
        if not self.metadata:
            return None
        owner = self.metadata.get("user_id")
        return str(owner) if owner else None

    class Config:
        populate_by_name = True
        extra = "ignore"


class AssistantCreate(BaseModel):
    """Schema for creating a new assistant"""
    name: str = Field(..., min_length=1, description="Assistant name")
    first_message: str = Field(..., description="First message spoken by the assistant")
    system_prompt: str = Field(..., description="System prompt for the assistant")


class AssistantCreationResult(BaseModel):
    """Outcome of the remote creation workflow"""
    remote_id: Optional[str] = None
    acknowledged_only: bool = False
    message: Optional[str] = None


class ResolveRequest(BaseModel):
    """Identity hints accepted by the resolve endpoint"""
    name: Optional[str] = None
    local_id: Optional[str] = None
    remote_id: Optional[str] = None


class AssistantActionResponse(BaseModel):
    """Result of an assistant mutation"""
    success: bool = True
    assistant: Optional[AssistantRecord] = None
    notifications: List[Notification] = []
