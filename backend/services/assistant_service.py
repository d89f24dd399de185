"""
Assistant service for Campaign Dispatch application.
Handles the assistant catalog across the local store and the provider.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from backend.core.exceptions import DispatchError, LocalStoreError
from backend.core.logging import get_logger
from backend.db.repositories import AssistantRepository, assistant_repository
from backend.schemas.assistant import AssistantCreate, AssistantRecord, AssistantStatus
from backend.services import catalog_reconciler
from backend.services.notification_service import NotificationService
from backend.services.session_state import SelectionCache
from backend.services.vapi_service import VapiService, placeholder_remote_id

logger = get_logger(__name__)

class AssistantService:
    """Service for assistant operations"""

    def __init__(
        self,
        db: Session,
        vapi: VapiService,
        selection: SelectionCache,
        notifier: Optional[NotificationService] = None,
        repository: AssistantRepository = assistant_repository,
    ):
        self.db = db
        self.vapi = vapi
        self.selection = selection
        self.notifier = notifier or NotificationService()
        self.repository = repository

    async def get_all_assistants(self, owner_id: str) -> List[AssistantRecord]:
        """
        Local and provider assistants of the owner, merged by remote id.

        Provider assistants tagged with the owner are cached locally. When
        the provider is unreachable the local list is returned as is.

        Args:
            owner_id: User ID

        Returns:
            List of assistant records
        """
        local = self.repository.list_records(self.db, user_id=owner_id)
        logger.info(f"Found {len(local)} local assistants for user {owner_id}")

        remote = await self.vapi.list_all()
        if not remote:
            return local

        owned = catalog_reconciler.filter_by_owner(remote, owner_id)
        logger.info(f"Filtered {len(owned)} provider assistants for user {owner_id}")

        combined = catalog_reconciler.merge(local, owned)
        self._cache_remote(owned, owner_id)
        return combined

    async def get_remote_assistants(self) -> List[AssistantRecord]:
        """
        Every assistant the provider key can see, statuses normalized.
        """
        return [catalog_reconciler.map_remote_assistant(a) for a in await self.vapi.list_all()]

    async def create_assistant(self, owner_id: str, assistant_data: AssistantCreate) -> AssistantRecord:
        """
        Create an assistant through the provider workflow and store it locally.

        The local record starts as pending. When the workflow only
        acknowledges, a placeholder stands in for the remote id until
        reconciliation confirms it.

        Raises:
            RemoteRejected, RequestTimeoutError, NetworkError: the workflow failed
            LocalStoreError: the local record could not be saved
        """
        try:
            result = await self.vapi.create(
                name=assistant_data.name,
                first_message=assistant_data.first_message,
                prompt=assistant_data.system_prompt,
                owner_metadata={"user_id": owner_id},
            )
        except DispatchError as e:
            self.notifier.error(f"Error creating assistant: {e}")
            raise

        remote_id = result.remote_id
        if result.acknowledged_only:
            remote_id = placeholder_remote_id()
            logger.info(f"Workflow only acknowledged, using placeholder id {remote_id}")

        try:
            saved = self.repository.create(self.db, obj_in={
                "name": assistant_data.name,
                "assistant_id": remote_id,
                "system_prompt": assistant_data.system_prompt,
                "first_message": assistant_data.first_message,
                "user_id": owner_id,
                "status": AssistantStatus.PENDING.value,
            })
        except LocalStoreError as e:
            self.notifier.error(f"Error saving assistant: {e}")
            raise

        record = self.repository.to_record(saved)
        self.selection.set(record)
        self.notifier.success(f'Assistant "{assistant_data.name}" is being created! This can take a few minutes.')
        return record

    async def delete_assistant(self, owner_id: str, local_id: str) -> bool:
        """
        Delete on the provider first, then locally.

        A provider failure is logged and the local deletion still happens.

        Raises:
            HTTPException: assistant not found for this owner
            LocalStoreError: local deletion failed
        """
        assistant = self._get_owned(owner_id, local_id)

        if assistant.assistant_id:
            if not await self.vapi.delete_by_id(assistant.assistant_id):
                logger.warning(
                    f"Provider deletion of {assistant.assistant_id} failed, continuing with local deletion"
                )

        self.repository.remove(self.db, id=local_id)
        self.selection.clear_if_selected(local_id)

        logger.info(f"Assistant {local_id} deleted")
        self.notifier.success("Assistant deleted successfully")
        return True

    def select_assistant(self, owner_id: str, local_id: str) -> AssistantRecord:
        """
        Make an assistant the cached selection.
        """
        record = self.repository.to_record(self._get_owned(owner_id, local_id))
        self.selection.set(record)
        return record

    def get_selected(self) -> Optional[AssistantRecord]:
        return self.selection.get()

    def _get_owned(self, owner_id: str, local_id: str):
        assistant = self.repository.get(self.db, local_id)
        if not assistant or assistant.user_id != owner_id:
            logger.warning(f"Assistant not found: {local_id} for user {owner_id}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Assistant not found"
            )
        return assistant

    def _cache_remote(self, owned, owner_id: str) -> None:
        for remote in owned:
            if remote.owner_tag != str(owner_id):
                continue
            record = catalog_reconciler.map_remote_assistant(remote)
            try:
                self.repository.upsert_by_remote_id(self.db, record=record, user_id=owner_id)
            except LocalStoreError as e:
                logger.error(f"Error caching provider assistant {remote.id}: {e}")
