"""
Error kinds raised by the dispatch core.
"""

from typing import Optional


class DispatchError(Exception):
    """Base class for dispatch core errors"""


class NetworkError(DispatchError):
    """Transport failure while talking to the provider or the workflow endpoint"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class RequestTimeoutError(DispatchError, TimeoutError):
    """The outbound request did not finish before its deadline"""

    def __init__(self, url: str, timeout_ms: int):
        super().__init__(f"Request to {url} timed out after {timeout_ms} ms")
        self.url = url
        self.timeout_ms = timeout_ms


class RemoteRejected(DispatchError):
    """The remote side answered with a non-2xx status"""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Remote rejected request ({status_code}): {body[:200]}")
        self.status_code = status_code
        self.body = body


class NoIdentityResolved(DispatchError):
    """Every resolution strategy failed and no fallback id is configured"""


class LocalStoreError(DispatchError):
    """The local assistant/campaign store failed"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
