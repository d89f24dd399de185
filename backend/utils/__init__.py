"""
Utility module for Campaign Dispatch application.
Contains helper functions and utilities used across the application.
"""

from .error_handling import (
    handle_exception,
    log_exception,
    format_exception_for_client,
    get_error_code,
    status_code_for
)

# Export all utility functions
__all__ = [
    "handle_exception",
    "log_exception",
    "format_exception_for_client",
    "get_error_code",
    "status_code_for"
]
