"""Tests for AssistantService."""

import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from backend.core.exceptions import RemoteRejected
from backend.db.repositories import assistant_repository
from backend.models import Assistant
from backend.schemas.assistant import AssistantCreate, AssistantCreationResult, RemoteAssistant
from backend.services.assistant_service import AssistantService

from conftest import OTHER_OWNER_ID, OWNER_ID


@pytest.fixture
def vapi():
    mock = AsyncMock()
    mock.list_all = AsyncMock(return_value=[])
    mock.delete_by_id = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def service(db_session, vapi, selection, notifier):
    return AssistantService(db_session, vapi, selection, notifier=notifier)


@pytest.fixture
def new_assistant():
    return AssistantCreate(name="Sales Bot", first_message="Hello!", system_prompt="Be brief.")


# =============================================================================
# create_assistant
# =============================================================================


async def test_create_stores_pending_record_and_selects_it(service, vapi, selection, notifier, new_assistant):
    vapi.create = AsyncMock(return_value=AssistantCreationResult(remote_id="R-new"))

    record = await service.create_assistant(OWNER_ID, new_assistant)

    assert record.remote_id == "R-new"
    assert record.status == "pending"
    assert record.owner_id == OWNER_ID
    assert selection.get().local_id == record.local_id
    assert notifier.messages[-1].level == "success"
    vapi.create.assert_awaited_once_with(
        name="Sales Bot",
        first_message="Hello!",
        prompt="Be brief.",
        owner_metadata={"user_id": OWNER_ID},
    )


async def test_create_acknowledged_only_uses_placeholder(service, vapi, db_session, new_assistant):
    vapi.create = AsyncMock(return_value=AssistantCreationResult(acknowledged_only=True, message="started"))

    record = await service.create_assistant(OWNER_ID, new_assistant)

    assert uuid.UUID(record.remote_id)
    stored = assistant_repository.get_by_remote_id(db_session, remote_id=record.remote_id)
    assert stored is not None
    assert stored.status == "pending"


async def test_create_failure_is_raised_and_nothing_stored(service, vapi, db_session, notifier, new_assistant):
    vapi.create = AsyncMock(side_effect=RemoteRejected(500, "boom"))

    with pytest.raises(RemoteRejected):
        await service.create_assistant(OWNER_ID, new_assistant)

    assert db_session.query(Assistant).count() == 0
    assert notifier.messages[-1].level == "error"


# =============================================================================
# delete_assistant
# =============================================================================


async def test_delete_continues_when_provider_fails(service, vapi, db_session, selection, make_assistant):
    assistant = make_assistant(assistant_id="R1")
    selection.set(assistant_repository.to_record(assistant))
    vapi.delete_by_id.return_value = False

    assert await service.delete_assistant(OWNER_ID, assistant.id) is True

    vapi.delete_by_id.assert_awaited_once_with("R1")
    assert assistant_repository.get(db_session, assistant.id) is None
    assert selection.get() is None


async def test_delete_keeps_other_selection(service, selection, make_assistant):
    kept = make_assistant(name="Keeper", assistant_id="R-keep")
    doomed = make_assistant(name="Doomed", assistant_id="R-doomed")
    selection.set(assistant_repository.to_record(kept))

    await service.delete_assistant(OWNER_ID, doomed.id)

    assert selection.get().local_id == kept.id


async def test_delete_without_remote_id_skips_provider(service, vapi, make_assistant):
    assistant = make_assistant(assistant_id=None)

    await service.delete_assistant(OWNER_ID, assistant.id)

    vapi.delete_by_id.assert_not_called()


async def test_delete_foreign_assistant_is_not_found(service, vapi, make_assistant):
    assistant = make_assistant(user_id=OTHER_OWNER_ID, assistant_id="R1")

    with pytest.raises(HTTPException) as exc_info:
        await service.delete_assistant(OWNER_ID, assistant.id)

    assert exc_info.value.status_code == 404
    vapi.delete_by_id.assert_not_called()


# =============================================================================
# get_all_assistants / select
# =============================================================================


async def test_get_all_returns_local_when_provider_empty(service, make_assistant):
    make_assistant(assistant_id="R1")

    records = await service.get_all_assistants(OWNER_ID)

    assert [r.remote_id for r in records] == ["R1"]


async def test_get_all_merges_and_caches_owned_remote(service, vapi, db_session, make_assistant):
    make_assistant(assistant_id="R1", status="pending")
    vapi.list_all.return_value = [
        RemoteAssistant(id="R1", name="Sales Bot", status="ready", metadata={"user_id": OWNER_ID}),
        RemoteAssistant(id="R2", name="Support", status="ready", metadata={"user_id": OWNER_ID}),
        RemoteAssistant(id="R3", name="Not mine", metadata={"user_id": OTHER_OWNER_ID}),
        RemoteAssistant(id="R4", name="Untagged"),
    ]

    records = await service.get_all_assistants(OWNER_ID)

    assert [r.remote_id for r in records] == ["R1", "R2"]
    assert records[0].status == "ready"
    cached = assistant_repository.get_by_remote_id(db_session, remote_id="R2")
    assert cached is not None
    assert cached.user_id == OWNER_ID
    assert assistant_repository.get_by_remote_id(db_session, remote_id="R3") is None


async def test_get_all_does_not_take_over_another_users_row(service, vapi, db_session, make_assistant):
    make_assistant(assistant_id="R1", name="Mine")
    vapi.list_all.return_value = [
        RemoteAssistant(id="R1", name="Renamed", status="ready", metadata={"user_id": OTHER_OWNER_ID}),
    ]

    await service.get_all_assistants(OTHER_OWNER_ID)

    row = assistant_repository.get_by_remote_id(db_session, remote_id="R1")
    assert row.user_id == OWNER_ID
    assert row.name == "Mine"


async def test_select_assistant_sets_selection(service, selection, make_assistant):
    assistant = make_assistant(assistant_id="R1")

    record = service.select_assistant(OWNER_ID, assistant.id)

    assert record.local_id == assistant.id
    assert service.get_selected().remote_id == "R1"


def test_select_foreign_assistant_is_not_found(service, make_assistant):
    assistant = make_assistant(user_id=OTHER_OWNER_ID)

    with pytest.raises(HTTPException):
        service.select_assistant(OWNER_ID, assistant.id)
