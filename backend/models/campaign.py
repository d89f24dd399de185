"""
Campaign and client models for Campaign Dispatch application.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table, func
from sqlalchemy.orm import relationship

from backend.models.base import Base, BaseModel

client_group_members = Table(
    "client_group_members",
    Base.metadata,
    Column("client_id", Integer, ForeignKey("clients.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", Integer, ForeignKey("client_groups.id", ondelete="CASCADE"), primary_key=True),
)

class Client(Base, BaseModel):
    """A person to be called"""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    status = Column(String(20), default="pending", nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    groups = relationship("ClientGroup", secondary=client_group_members, back_populates="clients")

class ClientGroup(Base, BaseModel):
    """Named set of clients targeted by a campaign"""
    __tablename__ = "client_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    clients = relationship("Client", secondary=client_group_members, back_populates="groups")

class Campaign(Base, BaseModel):
    """
    Outbound call campaign.

    status moves draft -> active -> paused/stopped; the local value is the
    source of truth for the dashboard even when the workflow endpoint is down.
    """
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    status = Column(String(20), default="draft", nullable=False)
    client_group_id = Column(Integer, ForeignKey("client_groups.id", ondelete="SET NULL"), nullable=True)
    assistant_id = Column(String(36), nullable=True)
    total_calls = Column(Integer, default=0, nullable=False)
    answered_calls = Column(Integer, default=0, nullable=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    client_group = relationship("ClientGroup")

    @property
    def progress(self) -> int:
        if not self.total_calls:
            return 0
        return round((self.answered_calls or 0) / self.total_calls * 100)
