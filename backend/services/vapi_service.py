"""
Vapi service for Campaign Dispatch application.
Lists, fetches, creates and deletes assistants held by the remote
voice-assistant provider.

Listing, fetching and deleting fail open (empty list, None, False) so that
callers can fall back to the local store. Creation is the one operation
whose failure is raised, because the user has to see it.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from backend.core.config import settings
from backend.core.exceptions import DispatchError, RemoteRejected
from backend.core.logging import get_logger
from backend.schemas.assistant import AssistantCreationResult, RemoteAssistant
from backend.services.http_client import TimeoutBoundedClient, bearer_headers

logger = get_logger(__name__)


class VapiService:
    """Client for the provider's assistant API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        create_url: Optional[str] = None,
        client: Optional[TimeoutBoundedClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.VAPI_API_KEY
        self.base_url = (base_url or settings.VAPI_API_URL).rstrip("/")
        self.create_url = create_url or settings.create_assistant_webhook_url
        self.client = client or TimeoutBoundedClient()

        if not self.api_key:
            logger.warning("VAPI_API_KEY is not set - provider calls will be rejected")

    @property
    def headers(self) -> Dict[str, str]:
        return bearer_headers(self.api_key)

    async def list_all(self) -> List[RemoteAssistant]:
        """
        All assistants visible to the API key, in provider order.
        Any failure yields an empty list.
        """
        url = f"{self.base_url}/assistant"
        try:
            response = await self.client.send("GET", url, headers=self.headers)
        except DispatchError as e:
            logger.warning(f"Could not list provider assistants: {e}")
            return []

        if not response.is_success:
            logger.warning(
                f"Could not list provider assistants: {response.status_code} - {response.text[:200]}"
            )
            return []

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Provider returned a non-JSON assistant list")
            return []

        if not isinstance(payload, list):
            logger.warning(f"Unexpected assistant list shape: {type(payload).__name__}")
            return []

        assistants = []
        for item in payload:
            try:
                assistants.append(RemoteAssistant.parse_obj(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed provider assistant: {e}")

        logger.info(f"Retrieved {len(assistants)} assistants from provider")
        return assistants

    async def get_by_id(self, remote_id: str) -> Optional[RemoteAssistant]:
        """
        One assistant by provider id, or None on any failure.
        """
        if not remote_id:
            return None

        url = f"{self.base_url}/assistant/{remote_id}"
        try:
            response = await self.client.send("GET", url, headers=self.headers)
        except DispatchError as e:
            logger.warning(f"Could not fetch provider assistant {remote_id}: {e}")
            return None

        if not response.is_success:
            logger.info(f"Provider assistant {remote_id} not available: {response.status_code}")
            return None

        try:
            return RemoteAssistant.parse_obj(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed provider assistant {remote_id}: {e}")
            return None

    async def create(
        self,
        name: str,
        first_message: str,
        prompt: str,
        owner_metadata: Dict[str, Any],
    ) -> AssistantCreationResult:
        """
        Start the remote creation workflow.

        The workflow either returns the new assistant (with an id) or only
        acknowledges that creation started, in which case the caller has to
        stand in a placeholder id.

        Raises:
            RemoteRejected: non-2xx status, or a 2xx without id or acknowledgement
            RequestTimeoutError, NetworkError: transport failures
        """
        metadata = {
            "created_at": datetime.now(timezone.utc).isoformat(),
            "client_version": settings.CLIENT_VERSION,
            **owner_metadata,
        }
        body = {
            "name": name,
            "firstMessage": first_message,
            "instructions": prompt,
            "metadata": metadata,
        }

        logger.info(f"Requesting assistant creation: {name}")
        response = await self.client.send("POST", self.create_url, json=body, headers=self.headers)

        if not response.is_success:
            logger.error(f"Assistant creation rejected: {response.status_code} - {response.text[:200]}")
            raise RemoteRejected(response.status_code, response.text)

        try:
            result = response.json()
        except ValueError:
            result = {}

        if isinstance(result, dict) and result.get("id"):
            logger.info(f"Assistant created with provider id {result['id']}")
            return AssistantCreationResult(remote_id=str(result["id"]))

        message = result.get("message") if isinstance(result, dict) else None
        if message and "started" in str(message):
            logger.info("Creation workflow acknowledged without an id")
            return AssistantCreationResult(acknowledged_only=True, message=str(message))

        logger.error(f"Creation workflow returned no usable id: {result}")
        raise RemoteRejected(response.status_code, "Assistant was created but no valid id was returned")

    async def delete_by_id(self, remote_id: str) -> bool:
        """
        Delete an assistant on the provider. Returns False on any failure.
        """
        if not remote_id:
            return False

        url = f"{self.base_url}/assistant/{remote_id}"
        try:
            response = await self.client.send("DELETE", url, headers=self.headers)
        except DispatchError as e:
            logger.error(f"Error deleting provider assistant {remote_id}: {e}")
            return False

        if not response.is_success:
            logger.error(f"Provider refused to delete {remote_id}: {response.status_code}")
            return False

        logger.info(f"Provider assistant {remote_id} deleted")
        return True


def placeholder_remote_id() -> str:
    """Stand-in remote id used until the creation workflow confirms one"""
    return str(uuid.uuid4())


_service_instance: Optional[VapiService] = None


def get_vapi_service() -> VapiService:
    """Shared provider client"""
    global _service_instance

    if _service_instance is None:
        _service_instance = VapiService()

    return _service_instance
