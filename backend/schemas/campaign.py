"""
Campaign schemas for Campaign Dispatch application.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from backend.schemas.dispatch import DispatchResult, Notification


class CampaignCreate(BaseModel):
    """Schema for creating a new campaign"""
    name: str = Field(..., min_length=1, description="Campaign name")
    client_group_id: int = Field(..., description="Client group to call")
    assistant_local_id: Optional[str] = Field(None, description="Local id of the assistant to use")


class CampaignResponse(BaseModel):
    """Schema for campaign response"""
    id: int
    name: str
    status: str
    user_id: Optional[str] = None
    client_group_id: Optional[int] = None
    total_calls: int = 0
    answered_calls: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class CampaignActionResponse(BaseModel):
    """Result of a campaign control action"""
    campaign: CampaignResponse
    dispatch: DispatchResult
    successful_calls: Optional[int] = None
    failed_calls: Optional[int] = None
    notifications: List[Notification] = []
