"""
Logging configuration for Campaign Dispatch application.
Sets up structured logging with consistent format.
"""

import logging
import sys
import time
import os
from typing import Dict, Any
import traceback
import json

from backend.core.config import settings

# Constants
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

FORCE_DEBUG = os.getenv('FORCE_DEBUG', 'False').lower() == 'true'
LOG_LEVEL = logging.DEBUG if (settings.DEBUG or FORCE_DEBUG) else logging.INFO

class JsonFormatter(logging.Formatter):
    """
    Custom formatter for JSON structured logging
    """
    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if available
        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        # Add extra fields if available
        if hasattr(record, "extra") and record.extra:
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)

def setup_logging(force_debug: bool = False):
    """
    Configure the logging system for the application

    Args:
        force_debug: Force DEBUG level regardless of settings
    """
    effective_log_level = logging.DEBUG if (force_debug or FORCE_DEBUG or settings.DEBUG) else logging.INFO

    # Reset root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(effective_log_level)

    # Console handler (human-readable format)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(effective_log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    # File handler (JSON format for processing)
    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        log_file = os.path.join(settings.LOG_DIR, f"campaign_dispatch_{time.strftime('%Y%m%d')}.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(effective_log_level)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    # httpx logs every request at info level
    logging.getLogger("httpx").setLevel(logging.WARNING)

    level_name = logging.getLevelName(effective_log_level)
    root_logger.info(
        f"Logging system initialized. Application: {settings.APP_NAME}, "
        f"Version: {settings.VERSION}, Level: {level_name}, "
        f"Environment: {'Development' if settings.DEBUG else 'Production'}"
    )

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name

    Args:
        name: The name for the logger

    Returns:
        Logger instance
    """
    return logging.getLogger(name)

class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter for adding context information to logs
    """
    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).update(self.extra)
        return msg, kwargs

def get_context_logger(name: str, context: Dict[str, Any]) -> LoggerAdapter:
    """
    Get a logger with context information

    Args:
        name: The name for the logger
        context: Dictionary of context information to include in logs

    Returns:
        LoggerAdapter instance
    """
    logger = get_logger(name)
    return LoggerAdapter(logger, {"extra": context})
