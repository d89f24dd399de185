"""
Merges the local and remote assistant catalogs into one list.

The join key is remote_id: it is the only id guaranteed unique on both
sides once the provider has confirmed an assistant. Names are never used
to join here.
"""

from typing import Iterable, List, Optional

from backend.core.config import settings
from backend.core.logging import get_logger
from backend.schemas.assistant import AssistantRecord, AssistantStatus, RemoteAssistant

logger = get_logger(__name__)

VALID_STATUSES = {s.value for s in AssistantStatus}


def normalize_status(status: Optional[str]) -> str:
    """Map anything outside ready/pending/failed to ready"""
    if status in VALID_STATUSES:
        return status
    return AssistantStatus.READY.value


def map_remote_assistant(assistant: RemoteAssistant) -> AssistantRecord:
    """Translate a provider assistant into the canonical record"""
    return AssistantRecord(
        local_id=None,
        remote_id=assistant.id,
        name=assistant.name,
        status=normalize_status(assistant.status),
        system_prompt=assistant.instructions,
        first_message=assistant.first_message,
        model=assistant.model,
        voice=assistant.voice,
        owner_id=assistant.owner_tag,
        created_at=assistant.created_at,
    )


def filter_by_owner(
    remote: Iterable[RemoteAssistant],
    owner_id: str,
    scoping: Optional[str] = None,
) -> List[RemoteAssistant]:
    """
    Keep the provider assistants that belong to owner_id.

    Assistants tagged with another owner are always dropped. Untagged ones
    are dropped in strict mode and kept in permissive mode, where every
    owner can see them.
    """
    scoping = scoping or settings.REMOTE_OWNER_SCOPING
    kept = []
    untagged = 0

    for assistant in remote:
        tag = assistant.owner_tag
        if tag is None:
            untagged += 1
            if scoping == "permissive":
                kept.append(assistant)
        elif tag == str(owner_id):
            kept.append(assistant)

    if untagged and scoping == "permissive":
        logger.warning(
            f"{untagged} provider assistants carry no owner tag and are visible to every owner"
        )
    elif untagged:
        logger.info(f"Ignored {untagged} provider assistants without an owner tag")

    return kept


def merge(
    local_records: List[AssistantRecord],
    remote_records: Iterable[RemoteAssistant],
    owner_id: Optional[str] = None,
    scoping: Optional[str] = None,
) -> List[AssistantRecord]:
    """
    Merge local and remote assistants.

    Local order is kept, remote-only records follow in provider order. A
    local record sharing a remote_id with a provider record takes the
    provider's normalized status and nothing else. Inputs are not mutated,
    so merging the same inputs twice gives the same output.
    """
    if owner_id is not None:
        remote_records = filter_by_owner(remote_records, owner_id, scoping)

    combined = [record.copy() for record in local_records]
    index = {record.remote_id: i for i, record in enumerate(combined) if record.remote_id}
    appended = 0

    for remote in remote_records:
        mapped = map_remote_assistant(remote)
        position = index.get(mapped.remote_id)

        if position is None:
            index[mapped.remote_id] = len(combined)
            combined.append(mapped)
            appended += 1
        elif combined[position].status != mapped.status:
            combined[position] = combined[position].copy(update={"status": mapped.status})

    logger.info(
        f"Merged {len(combined)} assistants ({len(local_records)} local + {appended} remote-only)"
    )
    return combined
