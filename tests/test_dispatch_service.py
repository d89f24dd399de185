"""Tests for DispatchService."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from backend.core.config import settings
from backend.core.exceptions import NoIdentityResolved
from backend.schemas.dispatch import (
    ActionType, AdditionalData, DispatchContext, Resolution, ResolutionHints, ResolutionSource
)
from backend.services.dispatch_service import DispatchService

WEBHOOK_URL = "https://hooks.test/collowop"


@pytest.fixture
def resolver():
    mock = AsyncMock()
    mock.resolve = AsyncMock(return_value=Resolution(
        remote_id="R-sales",
        source=ResolutionSource.NAME_MATCH,
        local_id="L1",
        name="Sales Bot",
    ))
    return mock


@pytest.fixture
def make_dispatcher(resolver, notifier, call_settings, make_client):
    def _make(*responses, timeout_ms=1000):
        client, handler = make_client(*responses, timeout_ms=timeout_ms)
        dispatcher = DispatchService(
            resolver,
            notifier=notifier,
            client=client,
            call_settings=call_settings,
            webhook_url=WEBHOOK_URL,
            api_key="test-key",
        )
        return dispatcher, handler

    return _make


def call_context(**overrides):
    values = {
        "campaign_id": 7,
        "client_id": 3,
        "client_name": "Ann",
        "client_phone": "+15550001",
        "owner_id": "user-1",
        "hints": ResolutionHints(name="Sales Bot"),
        "data": AdditionalData(source="manual_call"),
    }
    values.update(overrides)
    return DispatchContext(**values)


async def test_payload_carries_resolved_identity(make_dispatcher, resolver):
    dispatcher, handler = make_dispatcher(httpx.Response(200, json={"ok": True}))

    result = await dispatcher.dispatch(ActionType.INITIATE_CALL, call_context())

    assert result.accepted is True
    assert result.resolution.remote_id == "R-sales"
    assert len(handler.requests) == 1

    request = handler.requests[0]
    assert str(request.url) == WEBHOOK_URL
    assert request.headers["Authorization"] == "Bearer test-key"

    body = handler.bodies()[0]
    assert body["action"] == "initiate_call"
    assert body["campaign_id"] == 7
    assert body["client_id"] == 3
    assert body["client_phone"] == "+15550001"
    assert body["user_id"] == "user-1"
    assert body["provider"] == "vapi"
    assert body["call"] == {"model": settings.DEFAULT_MODEL, "voice": settings.DEFAULT_VOICE}

    data = body["additional_data"]
    assert data["vapi_assistant_id"] == "R-sales"
    assert data["assistant_id"] == "L1"
    assert data["assistant_name"] == "Sales Bot"
    assert data["id_type"] == "vapi"
    assert data["resolution_source"] == "name_match"
    assert data["source"] == "manual_call"
    assert data["client_version"] == settings.CLIENT_VERSION
    assert data["schema_version"] == settings.PAYLOAD_SCHEMA_VERSION
    assert "timestamp" in data
    assert "vapi_caller_id" not in data

    hints = resolver.resolve.await_args.args[0]
    assert hints.owner_id == "user-1"
    assert hints.name == "Sales Bot"


async def test_campaign_start_is_tagged_with_caller_id(make_dispatcher):
    dispatcher, handler = make_dispatcher(httpx.Response(200))

    await dispatcher.dispatch(ActionType.START_CAMPAIGN, DispatchContext(
        campaign_id=7,
        owner_id="user-1",
        data=AdditionalData(client_count=12, campaign_name="Spring outreach"),
    ))

    data = handler.bodies()[0]["additional_data"]
    assert data["vapi_caller_id"] == settings.CALLER_ID
    assert data["client_count"] == 12


async def test_call_settings_override_is_sent(make_dispatcher, call_settings):
    call_settings.update(model="gpt-custom")
    dispatcher, handler = make_dispatcher(httpx.Response(200))

    await dispatcher.dispatch(ActionType.INITIATE_CALL, call_context())

    assert handler.bodies()[0]["call"] == {"model": "gpt-custom", "voice": settings.DEFAULT_VOICE}


async def test_timeout_is_not_accepted_and_not_retried(make_dispatcher, notifier):
    async def slow(request):
        await asyncio.sleep(1)
        return httpx.Response(200)

    dispatcher, handler = make_dispatcher(slow, timeout_ms=20)

    result = await dispatcher.dispatch(ActionType.STOP_CAMPAIGN, DispatchContext(campaign_id=7))

    assert result.accepted is False
    assert result.resolution.remote_id == "R-sales"
    assert len(handler.requests) == 1
    assert [n.level for n in notifier.messages] == ["warning"]


async def test_network_error_is_not_accepted(make_dispatcher, notifier):
    dispatcher, _ = make_dispatcher(httpx.ConnectError("refused"))

    result = await dispatcher.dispatch(ActionType.STOP_CAMPAIGN, DispatchContext(campaign_id=7))

    assert result.accepted is False
    assert notifier.messages[0].level == "warning"


async def test_non_success_status_is_reported(make_dispatcher, notifier):
    dispatcher, _ = make_dispatcher(httpx.Response(500, text="workflow crashed"))

    result = await dispatcher.dispatch(ActionType.INITIATE_CALL, call_context())

    assert result.accepted is False
    assert result.status_code == 500
    assert "workflow crashed" in result.error
    assert notifier.messages[0].level == "warning"


async def test_unresolved_identity_sends_nothing(make_dispatcher, resolver, notifier):
    resolver.resolve.side_effect = NoIdentityResolved("nothing")
    dispatcher, handler = make_dispatcher(httpx.Response(200))

    result = await dispatcher.dispatch(ActionType.INITIATE_CALL, call_context())

    assert result.accepted is False
    assert result.resolution is None
    assert handler.requests == []
    assert notifier.messages[0].level == "error"


@pytest.mark.parametrize("action, context", [
    (ActionType.INITIATE_CALL, call_context(client_phone=None)),
    (ActionType.INITIATE_CALL, call_context(client_id=None)),
    (ActionType.PAUSE_CAMPAIGN, DispatchContext(campaign_id=7)),
    (ActionType.START_CAMPAIGN, DispatchContext(campaign_id=7)),
    (ActionType.STOP_CAMPAIGN, DispatchContext()),
    (ActionType.CREATE_ASSISTANT, DispatchContext(campaign_id=7)),
])
async def test_missing_required_fields_raise(make_dispatcher, action, context):
    dispatcher, handler = make_dispatcher(httpx.Response(200))

    with pytest.raises(ValueError):
        await dispatcher.dispatch(action, context)

    assert handler.requests == []
