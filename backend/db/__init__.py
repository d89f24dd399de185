"""
Database module initialization.
Holds the session factory and the repositories for the local store.
"""

from backend.db.session import get_db, SessionLocal, engine
from backend.db.repositories import (
    assistant_repository,
    campaign_repository,
    client_group_repository,
)

__all__ = [
    "get_db",
    "SessionLocal",
    "engine",
    "assistant_repository",
    "campaign_repository",
    "client_group_repository",
]
