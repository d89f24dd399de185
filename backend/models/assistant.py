"""
Assistant models for Campaign Dispatch application.
"""

import uuid
from sqlalchemy import Column, String, DateTime, JSON, func

from backend.models.base import Base, BaseModel

class Assistant(Base, BaseModel):
    """
    Local record of a voice assistant.

    assistant_id holds the provider's id; it may be a locally generated
    placeholder while the creation workflow is still running.
    """
    __tablename__ = "assistants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assistant_id = Column(String, nullable=True, unique=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    system_prompt = Column(String, nullable=True)
    first_message = Column(String, nullable=True)
    model = Column(JSON, nullable=True)
    voice = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
