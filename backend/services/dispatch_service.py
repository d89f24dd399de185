"""
Dispatch service for Campaign Dispatch application.
Builds the outbound action payload and sends it to the workflow endpoint.
"""

import json
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from backend.core.config import settings
from backend.core.exceptions import NetworkError, NoIdentityResolved, RequestTimeoutError
from backend.core.logging import get_context_logger, get_logger
from backend.schemas.dispatch import (
    ActionPayload,
    ActionType,
    DispatchContext,
    DispatchResult,
    Resolution,
    ResolutionHints,
)
from backend.services.http_client import TimeoutBoundedClient, bearer_headers
from backend.services.identity_resolver import IdentityResolver
from backend.services.notification_service import NotificationService
from backend.services.session_state import CallSettingsStore, call_settings_store

logger = get_logger(__name__)

# Fields each action must carry, as (payload attributes, additional_data attributes)
REQUIRED_FIELDS: Dict[ActionType, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    ActionType.INITIATE_CALL: (("campaign_id", "client_id", "client_phone"), ()),
    ActionType.START_CAMPAIGN: (("campaign_id",), ("client_count",)),
    ActionType.PAUSE_CAMPAIGN: (("campaign_id",), ("progress",)),
    ActionType.STOP_CAMPAIGN: (("campaign_id",), ()),
    ActionType.CREATE_CAMPAIGN: (("campaign_id",), ("client_count",)),
}

# Actions routed by the provider's telephony through the caller identity
CALLER_TAGGED_ACTIONS = {ActionType.START_CAMPAIGN, ActionType.CREATE_CAMPAIGN}


def check_required_fields(action: ActionType, context: DispatchContext) -> None:
    """
    Raises:
        ValueError: a field the action requires is missing
    """
    if action not in REQUIRED_FIELDS:
        # create_assistant goes through VapiService.create
        raise ValueError(f"Action {action.value} is not sent through the workflow dispatcher")

    top_level, additional = REQUIRED_FIELDS[action]
    missing = [f for f in top_level if getattr(context, f) in (None, "")]
    missing += [f"additional_data.{f}" for f in additional if getattr(context.data, f) is None]
    if missing:
        raise ValueError(f"{action.value} requires {', '.join(missing)}")


class DispatchService:
    """
    Resolves identity, assembles the payload and POSTs it once.

    A non-2xx answer, a timeout or a network failure gives accepted=False
    and a warning notification. Nothing is retried; callers decide whether
    local state still advances.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        notifier: Optional[NotificationService] = None,
        client: Optional[TimeoutBoundedClient] = None,
        call_settings: Optional[CallSettingsStore] = None,
        webhook_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        self.resolver = resolver
        self.notifier = notifier or NotificationService()
        self.client = client or TimeoutBoundedClient()
        self.call_settings = call_settings or call_settings_store
        self.webhook_url = webhook_url or settings.call_webhook_url
        self.api_key = api_key if api_key is not None else settings.VAPI_API_KEY

    async def build_payload(
        self, action: ActionType, context: DispatchContext
    ) -> Tuple[ActionPayload, Resolution]:
        """
        Resolve the assistant and assemble the payload for action.

        Raises:
            ValueError: required fields are missing
            NoIdentityResolved: no assistant id could be produced
        """
        check_required_fields(action, context)

        hints = context.hints
        if context.owner_id and not hints.owner_id:
            hints = hints.copy(update={"owner_id": context.owner_id})

        resolution = await self.resolver.resolve(hints)

        identity = {
            "vapi_assistant_id": resolution.remote_id,
            "assistant_id": resolution.local_id or context.data.assistant_id,
            "assistant_name": resolution.name or context.data.assistant_name,
            "id_type": settings.PROVIDER_NAME,
            "resolution_source": resolution.source,
            "resolution_degraded": resolution.degraded,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "client_version": settings.CLIENT_VERSION,
            "schema_version": settings.PAYLOAD_SCHEMA_VERSION,
        }
        if action in CALLER_TAGGED_ACTIONS and not context.data.vapi_caller_id:
            identity["vapi_caller_id"] = settings.CALLER_ID

        payload = ActionPayload(
            action=action,
            campaign_id=context.campaign_id,
            client_id=context.client_id,
            client_name=context.client_name,
            client_phone=context.client_phone,
            user_id=context.owner_id,
            additional_data=context.data.copy(update=identity),
            provider=settings.PROVIDER_NAME,
            call=self.call_settings.call_config(),
        )
        return payload, resolution

    async def dispatch(self, action: ActionType, context: DispatchContext) -> DispatchResult:
        """
        Send one action to the workflow endpoint.

        Raises:
            ValueError: required fields are missing
        """
        log = get_context_logger(__name__, {"action": action.value, "campaign_id": context.campaign_id})

        try:
            payload, resolution = await self.build_payload(action, context)
        except NoIdentityResolved as e:
            self.notifier.error(
                "No assistant selected or the id is invalid. Please create or select an assistant."
            )
            return DispatchResult(accepted=False, action=action, error=str(e))

        if resolution.degraded:
            log.warning(f"Dispatching {action.value} with the fallback assistant")

        body = json.loads(payload.json(exclude_none=True))
        log.info(f"Dispatching {action.value} with assistant {resolution.remote_id}")

        try:
            response = await self.client.send(
                "POST", self.webhook_url, json=body, headers=bearer_headers(self.api_key)
            )
        except RequestTimeoutError as e:
            self.notifier.warning("Timed out while contacting the call server. Check your connection.")
            return DispatchResult(accepted=False, action=action, resolution=resolution, error=str(e))
        except NetworkError as e:
            self.notifier.warning(f"Could not reach the call server: {e}")
            return DispatchResult(accepted=False, action=action, resolution=resolution, error=str(e))

        if not response.is_success:
            log.error(f"Workflow rejected {action.value}: {response.status_code} - {response.text[:200]}")
            self.notifier.warning(
                f"Call server rejected {action.value} ({response.status_code}): {response.reason_phrase}"
            )
            return DispatchResult(
                accepted=False,
                action=action,
                resolution=resolution,
                status_code=response.status_code,
                error=response.text[:200],
            )

        log.info(f"Workflow accepted {action.value}")
        return DispatchResult(
            accepted=True, action=action, resolution=resolution, status_code=response.status_code
        )
