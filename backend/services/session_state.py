"""
Session-scoped state touched by the dispatch core.

SelectionCache holds the most recently chosen assistant, CallSettingsStore
holds the process-wide model/voice override. Both sit on a small key-value
store. Writes only come from user-driven actions and last write wins, so
no locking is done.
"""

import json
from collections import OrderedDict
from typing import Dict, Optional

from pydantic import ValidationError

from backend.core.config import settings
from backend.core.logging import get_logger
from backend.schemas.assistant import AssistantRecord
from backend.schemas.dispatch import CallConfig, CallSettings

logger = get_logger(__name__)

SELECTED_ASSISTANT_KEY = "selected_assistant"
CALL_SETTINGS_KEY = "call_settings"


class InMemoryKeyValueStore:
    """Process-local string store"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class SelectionCache:
    """The last selected or created assistant, serialized under a fixed key"""

    def __init__(self, store: InMemoryKeyValueStore):
        self.store = store

    def get(self) -> Optional[AssistantRecord]:
        raw = self.store.get(SELECTED_ASSISTANT_KEY)
        if not raw:
            return None
        try:
            return AssistantRecord.parse_raw(raw)
        except ValidationError as e:
            logger.error(f"Discarding unreadable cached selection: {e}")
            self.store.delete(SELECTED_ASSISTANT_KEY)
            return None

    def set(self, record: AssistantRecord) -> None:
        self.store.set(SELECTED_ASSISTANT_KEY, record.json())
        logger.info(f"Selected assistant {record.name} ({record.local_id or record.remote_id})")

    def clear(self) -> None:
        self.store.delete(SELECTED_ASSISTANT_KEY)

    def clear_if_selected(self, local_id: str) -> bool:
        """Drop the selection when it points at local_id"""
        current = self.get()
        if current and current.local_id == str(local_id):
            self.clear()
            logger.info(f"Cleared cached selection for deleted assistant {local_id}")
            return True
        return False


class SessionStateRegistry:
    """
    One key-value store per owner session.

    A store is created the first time an owner acts and dropped on logout.
    At most max_owners stores are kept; past that the least recently used
    one is evicted, which loses that owner's cached selection.
    """

    def __init__(self, max_owners: Optional[int] = None):
        self.max_owners = max_owners or settings.SESSION_STATE_MAX_OWNERS
        self._stores: "OrderedDict[str, InMemoryKeyValueStore]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._stores)

    def store_for(self, owner_id: str) -> InMemoryKeyValueStore:
        if owner_id in self._stores:
            self._stores.move_to_end(owner_id)
            return self._stores[owner_id]

        self._stores[owner_id] = InMemoryKeyValueStore()
        while len(self._stores) > self.max_owners:
            evicted, _ = self._stores.popitem(last=False)
            logger.info(f"Evicted session state of {evicted}")
        return self._stores[owner_id]

    def selection_for(self, owner_id: str) -> SelectionCache:
        return SelectionCache(self.store_for(owner_id))

    def end_session(self, owner_id: str) -> None:
        store = self._stores.pop(owner_id, None)
        if store:
            store.clear()
            logger.info(f"Session state cleared for {owner_id}")


class CallSettingsStore:
    """Process-wide model/voice override with configured defaults"""

    def __init__(self, store: Optional[InMemoryKeyValueStore] = None):
        self.store = store or InMemoryKeyValueStore()

    def get(self) -> CallSettings:
        raw = self.store.get(CALL_SETTINGS_KEY)
        if not raw:
            return CallSettings()
        try:
            return CallSettings.parse_obj(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.error(f"Ignoring unreadable call settings: {e}")
            return CallSettings()

    def update(self, model: Optional[str] = None, voice: Optional[str] = None) -> CallSettings:
        current = self.get()
        updated = CallSettings(
            model=model if model is not None else current.model,
            voice=voice if voice is not None else current.voice,
        )
        self.store.set(CALL_SETTINGS_KEY, updated.json())
        return updated

    def call_config(self) -> CallConfig:
        """Effective configuration, defaults filled in"""
        current = self.get()
        return CallConfig(
            model=current.model or settings.DEFAULT_MODEL,
            voice=current.voice or settings.DEFAULT_VOICE,
        )


session_registry = SessionStateRegistry()
call_settings_store = CallSettingsStore()
