"""
Error handling utilities for Campaign Dispatch application.
"""

import traceback
import sys
from typing import Dict, Any, Optional
from fastapi import HTTPException, status

from backend.core.exceptions import (
    DispatchError,
    LocalStoreError,
    NetworkError,
    NoIdentityResolved,
    RemoteRejected,
    RequestTimeoutError,
)
from backend.core.logging import get_logger

logger = get_logger(__name__)

# Order matters: RequestTimeoutError must be checked before its TimeoutError base
STATUS_CODE_MAPPING = [
    (RequestTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (RemoteRejected, status.HTTP_502_BAD_GATEWAY),
    (NetworkError, status.HTTP_502_BAD_GATEWAY),
    (NoIdentityResolved, status.HTTP_409_CONFLICT),
    (LocalStoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ValueError, status.HTTP_422_UNPROCESSABLE_ENTITY),
]

def status_code_for(exception: Exception, default: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> int:
    """HTTP status matching an error kind"""
    for exc_type, code in STATUS_CODE_MAPPING:
        if isinstance(exception, exc_type):
            return code
    return default

def handle_exception(
    exception: Exception,
    log_message: str = "An error occurred",
    status_code: Optional[int] = None,
    detail: Optional[str] = None
) -> HTTPException:
    """
    Handle exception and generate appropriate HTTPException

    Args:
        exception: The exception that occurred
        log_message: Message to log
        status_code: HTTP status code to return, derived from the error kind when omitted
        detail: Detail message for the client

    Returns:
        HTTPException to raise
    """
    # If it's already an HTTPException, just return it
    if isinstance(exception, HTTPException):
        return exception

    log_exception(exception, log_message)

    if status_code is None:
        status_code = status_code_for(exception)

    # Internal store errors are not shown verbatim
    if detail is None:
        if isinstance(exception, LocalStoreError):
            detail = log_message
        else:
            detail = str(exception) or "An internal server error occurred"

    return HTTPException(
        status_code=status_code,
        detail=detail
    )

def log_exception(
    exception: Exception,
    message: str = "An error occurred"
) -> None:
    """
    Log exception with formatted traceback

    Args:
        exception: The exception to log
        message: Additional message
    """
    exc_type, exc_value, exc_traceback = sys.exc_info()

    # Expected dispatch failures don't need a traceback
    if isinstance(exception, DispatchError) and not isinstance(exception, LocalStoreError):
        logger.error(f"{message}: {str(exception)}")
        return

    formatted_exception = traceback.format_exception(exc_type, exc_value, exc_traceback)
    exception_string = "".join(formatted_exception)
    logger.error(f"{message}: {str(exception)}\n{exception_string}")

def format_exception_for_client(
    exception: Exception,
    include_traceback: bool = False
) -> Dict[str, Any]:
    """
    Format exception for client response

    Args:
        exception: The exception to format
        include_traceback: Whether to include traceback (for development only)

    Returns:
        Formatted exception as dictionary
    """
    result = {
        "error": str(exception) or "An error occurred",
        "error_type": exception.__class__.__name__,
        "code": get_error_code(exception),
    }

    if include_traceback:
        exc_type, exc_value, exc_traceback = sys.exc_info()
        if exc_traceback:
            result["traceback"] = traceback.format_tb(exc_traceback)

    return result

def get_error_code(
    exception: Exception
) -> str:
    """
    Get standardized error code for an exception

    Args:
        exception: The exception

    Returns:
        Standardized error code
    """
    error_code_mapping = [
        (RequestTimeoutError, "timeout"),
        (RemoteRejected, "remote_rejected"),
        (NetworkError, "network_error"),
        (NoIdentityResolved, "no_identity_resolved"),
        (LocalStoreError, "local_store_error"),
        (ValueError, "invalid_value"),
        (TimeoutError, "timeout"),
        (ConnectionError, "connection_error"),
    ]

    if isinstance(exception, HTTPException):
        return f"http_{exception.status_code}"

    for exc_type, code in error_code_mapping:
        if isinstance(exception, exc_type):
            return code

    # Default to exception class name in snake_case
    class_name = exception.__class__.__name__
    return "".join(["_" + c.lower() if c.isupper() else c for c in class_name]).lstrip("_")
