"""Tests for VapiService.

Tests cover:
- fail-open listing, fetching and deletion
- the creation workflow (id, acknowledgement only, rejection)
"""

import httpx
import pytest

from backend.core.exceptions import RemoteRejected, RequestTimeoutError
from backend.services.vapi_service import VapiService, placeholder_remote_id

BASE_URL = "https://provider.test"
CREATE_URL = "https://hooks.test/createassistant"


@pytest.fixture
def make_service(make_client):
    def _make(*responses, timeout_ms=1000):
        client, handler = make_client(*responses, timeout_ms=timeout_ms)
        service = VapiService(api_key="test-key", base_url=BASE_URL, create_url=CREATE_URL, client=client)
        return service, handler

    return _make


# =============================================================================
# list_all / get_by_id
# =============================================================================


async def test_list_all_parses_assistants(make_service):
    service, handler = make_service(httpx.Response(200, json=[
        {"id": "a1", "name": "Sales Bot", "status": "ready", "metadata": {"user_id": "user-1"}},
        {"id": "a2", "name": None, "firstMessage": "Hi!"},
    ]))

    assistants = await service.list_all()

    assert [a.id for a in assistants] == ["a1", "a2"]
    assert assistants[0].owner_tag == "user-1"
    assert assistants[1].name == ""
    assert assistants[1].first_message == "Hi!"
    assert str(handler.requests[0].url) == f"{BASE_URL}/assistant"
    assert handler.requests[0].headers["Authorization"] == "Bearer test-key"


async def test_list_all_skips_malformed_items(make_service):
    service, _ = make_service(httpx.Response(200, json=[{"name": "no id"}, {"id": "a1"}]))

    assistants = await service.list_all()

    assert [a.id for a in assistants] == ["a1"]


@pytest.mark.parametrize("response", [
    httpx.Response(500, text="boom"),
    httpx.Response(200, json={"error": "not a list"}),
    httpx.Response(200, text="<html>"),
    httpx.ConnectError("refused"),
])
async def test_list_all_fails_open(make_service, response):
    service, _ = make_service(response)

    assert await service.list_all() == []


async def test_list_all_times_out_to_empty_list(make_service):
    async def slow(request):
        import asyncio
        await asyncio.sleep(1)
        return httpx.Response(200, json=[])

    service, _ = make_service(slow, timeout_ms=20)

    assert await service.list_all() == []


async def test_get_by_id_returns_none_when_unknown(make_service):
    service, handler = make_service(httpx.Response(404, json={"message": "Not Found"}))

    assert await service.get_by_id("missing") is None
    assert str(handler.requests[0].url) == f"{BASE_URL}/assistant/missing"


async def test_get_by_id_returns_assistant(make_service):
    service, _ = make_service(httpx.Response(200, json={"id": "a1", "name": "Sales Bot"}))

    assistant = await service.get_by_id("a1")

    assert assistant.id == "a1"
    assert assistant.name == "Sales Bot"


async def test_get_by_id_without_id_makes_no_request(make_service):
    service, handler = make_service(httpx.Response(200, json={}))

    assert await service.get_by_id("") is None
    assert handler.requests == []


# =============================================================================
# create
# =============================================================================


async def test_create_returns_remote_id(make_service):
    service, handler = make_service(httpx.Response(200, json={"id": "new-remote"}))

    result = await service.create(
        name="Sales Bot",
        first_message="Hello!",
        prompt="Be brief.",
        owner_metadata={"user_id": "user-1"},
    )

    assert result.remote_id == "new-remote"
    assert result.acknowledged_only is False

    body = handler.bodies()[0]
    assert str(handler.requests[0].url) == CREATE_URL
    assert body["name"] == "Sales Bot"
    assert body["firstMessage"] == "Hello!"
    assert body["instructions"] == "Be brief."
    assert body["metadata"]["user_id"] == "user-1"
    assert body["metadata"]["client_version"] == "1.3.0"
    assert "created_at" in body["metadata"]


async def test_create_acknowledged_without_id(make_service):
    service, _ = make_service(httpx.Response(200, json={"message": "Workflow was started"}))

    result = await service.create("Sales Bot", "Hello!", "Be brief.", {"user_id": "user-1"})

    assert result.acknowledged_only is True
    assert result.remote_id is None
    assert result.message == "Workflow was started"


async def test_create_success_without_id_is_rejected(make_service):
    service, _ = make_service(httpx.Response(200, json={"message": "ok"}))

    with pytest.raises(RemoteRejected):
        await service.create("Sales Bot", "Hello!", "Be brief.", {"user_id": "user-1"})


async def test_create_non_success_is_rejected(make_service):
    service, _ = make_service(httpx.Response(500, text="workflow crashed"))

    with pytest.raises(RemoteRejected) as exc_info:
        await service.create("Sales Bot", "Hello!", "Be brief.", {"user_id": "user-1"})

    assert exc_info.value.status_code == 500
    assert "workflow crashed" in exc_info.value.body


async def test_create_timeout_propagates(make_service):
    async def slow(request):
        import asyncio
        await asyncio.sleep(1)
        return httpx.Response(200, json={"id": "late"})

    service, _ = make_service(slow, timeout_ms=20)

    with pytest.raises(RequestTimeoutError):
        await service.create("Sales Bot", "Hello!", "Be brief.", {"user_id": "user-1"})


# =============================================================================
# delete_by_id
# =============================================================================


async def test_delete_by_id_success(make_service):
    service, handler = make_service(httpx.Response(200, json={"id": "a1"}))

    assert await service.delete_by_id("a1") is True
    assert handler.requests[0].method == "DELETE"
    assert str(handler.requests[0].url) == f"{BASE_URL}/assistant/a1"


@pytest.mark.parametrize("response", [
    httpx.Response(404, text="gone"),
    httpx.ConnectError("refused"),
])
async def test_delete_by_id_fails_open(make_service, response):
    service, _ = make_service(response)

    assert await service.delete_by_id("a1") is False


def test_placeholder_ids_are_unique():
    assert placeholder_remote_id() != placeholder_remote_id()
