"""
Database models module for Campaign Dispatch application.
This module contains SQLAlchemy ORM models that represent database tables.
"""

from .base import Base, create_tables
from .assistant import Assistant
from .campaign import Campaign, Client, ClientGroup, client_group_members

# Export specific models
__all__ = [
    "Base",
    "create_tables",
    "Assistant",
    "Campaign",
    "Client",
    "ClientGroup",
    "client_group_members",
]
