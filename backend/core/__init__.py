"""
Core module initialization.
This module contains core functionality for the Campaign Dispatch application.
"""

from .config import settings
from .logging import get_logger, setup_logging

# Export only specific items from this module
__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
]
