"""Shared test fixtures for the Campaign Dispatch test suite."""

import json
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.models import Assistant, Base, Campaign, Client, ClientGroup
from backend.services.http_client import TimeoutBoundedClient
from backend.services.notification_service import NotificationService
from backend.services.session_state import (
    CallSettingsStore,
    InMemoryKeyValueStore,
    SelectionCache,
)

OWNER_ID = "user-1"
OTHER_OWNER_ID = "user-2"


# =============================================================================
# Local store
# =============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def make_assistant(db_session: Session) -> Callable[..., Assistant]:
    """Factory for local assistant rows."""

    def _make(**overrides: Any) -> Assistant:
        values = {
            "name": "Sales Bot",
            "user_id": OWNER_ID,
            "status": "ready",
            "assistant_id": None,
        }
        values.update(overrides)
        assistant = Assistant(**values)
        db_session.add(assistant)
        db_session.commit()
        db_session.refresh(assistant)
        return assistant

    return _make


@pytest.fixture
def make_campaign(db_session: Session) -> Callable[..., Campaign]:
    """Factory for a campaign targeting a fresh client group.

    Usage:
        campaign = make_campaign(phones=["+100", None])
    """

    def _make(phones: list[str | None] | None = None, **overrides: Any) -> Campaign:
        phones = ["+15550001", "+15550002"] if phones is None else phones
        owner = overrides.get("user_id", OWNER_ID)

        group = ClientGroup(name="Leads", user_id=owner)
        for i, phone in enumerate(phones):
            group.clients.append(Client(name=f"Client {i + 1}", phone=phone, user_id=owner))
        db_session.add(group)
        db_session.commit()

        values = {
            "name": "Spring outreach",
            "user_id": owner,
            "status": "draft",
            "client_group_id": group.id,
            "total_calls": len(phones),
            "answered_calls": 0,
        }
        values.update(overrides)
        campaign = Campaign(**values)
        db_session.add(campaign)
        db_session.commit()
        db_session.refresh(campaign)
        return campaign

    return _make


# =============================================================================
# Session state
# =============================================================================


@pytest.fixture
def selection() -> SelectionCache:
    return SelectionCache(InMemoryKeyValueStore())


@pytest.fixture
def call_settings() -> CallSettingsStore:
    return CallSettingsStore()


@pytest.fixture
def notifier() -> NotificationService:
    return NotificationService()


# =============================================================================
# Outbound HTTP
# =============================================================================


class RecordingHandler:
    """MockTransport handler that records requests and answers from a script.

    Each response is either an httpx.Response, an exception to raise, or a
    callable taking the request.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            # Fresh copy so one scripted reply can answer several requests
            return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)
        if callable(reply):
            reply = reply(request)
            if not isinstance(reply, httpx.Response):
                reply = await reply
        return reply

    def bodies(self) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture
def make_client() -> Callable[..., tuple[TimeoutBoundedClient, RecordingHandler]]:
    """Factory for a TimeoutBoundedClient backed by httpx.MockTransport."""

    def _make(*responses: Any, timeout_ms: int = 1000) -> tuple[TimeoutBoundedClient, RecordingHandler]:
        handler = RecordingHandler(*responses)
        client = TimeoutBoundedClient(timeout_ms=timeout_ms, transport=httpx.MockTransport(handler))
        return client, handler

    return _make
