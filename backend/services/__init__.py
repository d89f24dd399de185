"""
Service module for Campaign Dispatch application.
Contains the identity resolution and dispatch logic that sits between the
API endpoints, the local store and the remote provider.
"""

from .http_client import TimeoutBoundedClient
from .vapi_service import VapiService, get_vapi_service
from .identity_resolver import IdentityResolver
from .dispatch_service import DispatchService
from .notification_service import NotificationService
from .assistant_service import AssistantService
from .campaign_service import CampaignService

# Export services
__all__ = [
    "TimeoutBoundedClient",
    "VapiService",
    "get_vapi_service",
    "IdentityResolver",
    "DispatchService",
    "NotificationService",
    "AssistantService",
    "CampaignService",
]
