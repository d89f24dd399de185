"""
Outbound HTTP client with a fixed deadline per request.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from backend.core.config import settings
from backend.core.exceptions import NetworkError, RequestTimeoutError
from backend.core.logging import get_logger

logger = get_logger(__name__)


class TimeoutBoundedClient:
    """
    Sends one HTTP request and gives up when the deadline expires.

    The deadline covers the whole exchange (connect, send, receive). On
    expiry the in-flight request is cancelled and RequestTimeoutError is
    raised. Every other transport failure becomes NetworkError. No retries
    happen here; callers decide what a failure means.
    """

    def __init__(
        self,
        timeout_ms: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_ms = timeout_ms or settings.FETCH_TIMEOUT_MS
        self._transport = transport

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout_ms: Optional[int] = None,
    ) -> httpx.Response:
        """
        Send a request and return the response, whatever its status.

        Raises:
            RequestTimeoutError: the deadline expired
            NetworkError: any other transport failure
        """
        deadline_ms = timeout_ms or self.timeout_ms
        deadline = deadline_ms / 1000

        async with httpx.AsyncClient(timeout=deadline, transport=self._transport) as client:
            try:
                response = await asyncio.wait_for(
                    client.request(method, url, json=json, headers=headers),
                    timeout=deadline,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                logger.warning(f"{method} {url} timed out after {deadline_ms} ms")
                raise RequestTimeoutError(url, deadline_ms)
            except httpx.HTTPError as e:
                logger.warning(f"{method} {url} failed: {e}")
                raise NetworkError(f"{method} {url} failed: {e}", cause=e) from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response


def bearer_headers(api_key: str) -> Dict[str, str]:
    """Headers used for both the provider API and the workflow endpoint"""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
