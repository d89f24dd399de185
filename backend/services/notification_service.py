"""
Notification service for Campaign Dispatch application.
Collects the user-facing messages produced while an action runs so the API
can return them with the response.
"""

from typing import List

from backend.core.logging import get_logger
from backend.schemas.dispatch import Notification

logger = get_logger(__name__)

class NotificationService:
    """Per-request collector of user-facing notifications"""

    def __init__(self):
        self.messages: List[Notification] = []

    def success(self, message: str) -> None:
        logger.info(f"[notify] {message}")
        self.messages.append(Notification(level="success", message=message))

    def warning(self, message: str) -> None:
        logger.warning(f"[notify] {message}")
        self.messages.append(Notification(level="warning", message=message))

    def error(self, message: str) -> None:
        logger.error(f"[notify] {message}")
        self.messages.append(Notification(level="error", message=message))

    def drain(self) -> List[Notification]:
        """Return the collected messages and start over"""
        messages, self.messages = self.messages, []
        return messages
