"""
Repositories for the local store.
Concrete CRUD operations for the project's models.
"""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.logging import get_logger
from backend.db.base import CRUDBase
from backend.models.assistant import Assistant
from backend.models.campaign import Campaign, Client, ClientGroup
from backend.schemas.assistant import AssistantRecord

logger = get_logger(__name__)


class AssistantRepository(CRUDBase[Assistant]):
    """
    Local catalog of assistants.
    """

    @staticmethod
    def to_record(assistant: Assistant) -> AssistantRecord:
        """
        Translate a row into the canonical record. A missing status is read
        as ready.
        """
        return AssistantRecord(
            local_id=assistant.id,
            remote_id=assistant.assistant_id,
            name=assistant.name,
            status=assistant.status or "ready",
            system_prompt=assistant.system_prompt,
            first_message=assistant.first_message,
            model=assistant.model,
            voice=assistant.voice,
            owner_id=assistant.user_id,
            created_at=assistant.created_at,
        )

    def list_for_owner(self, db: Session, *, user_id: str) -> List[Assistant]:
        """
        Assistants owned by the user, newest first.
        """
        try:
            return (
                db.query(Assistant)
                .filter(Assistant.user_id == user_id)
                .order_by(Assistant.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail(db, "list", e) from e

    def list_records(self, db: Session, *, user_id: str) -> List[AssistantRecord]:
        return [self.to_record(a) for a in self.list_for_owner(db, user_id=user_id)]

    def get_record(self, db: Session, local_id: str) -> Optional[AssistantRecord]:
        assistant = self.get(db, local_id)
        return self.to_record(assistant) if assistant else None

    def get_by_remote_id(self, db: Session, *, remote_id: str) -> Optional[Assistant]:
        try:
            return db.query(Assistant).filter(Assistant.assistant_id == remote_id).first()
        except SQLAlchemyError as e:
            raise self._fail(db, "get", e) from e

    def upsert_by_remote_id(self, db: Session, *, record: AssistantRecord, user_id: str) -> Optional[Assistant]:
        """
        Insert or refresh the local copy of a provider assistant, keyed by
        its remote id.

        A row already owned by another user is left untouched and None is
        returned.
        """
        values = {
            "name": record.name,
            "user_id": user_id,
            "status": record.status,
            "system_prompt": record.system_prompt,
            "first_message": record.first_message,
            "model": record.model,
            "voice": record.voice,
        }
        existing = self.get_by_remote_id(db, remote_id=record.remote_id)
        if existing:
            if existing.user_id and existing.user_id != str(user_id):
                logger.warning(
                    f"Provider assistant {record.remote_id} is stored for user {existing.user_id}, "
                    f"not caching it for {user_id}"
                )
                return None
            return self.update(db, db_obj=existing, obj_in=values)
        values["assistant_id"] = record.remote_id
        if record.created_at:
            values["created_at"] = record.created_at
        return self.create(db, obj_in=values)


class CampaignRepository(CRUDBase[Campaign]):
    """
    Local campaign state.
    """

    def get_for_owner(self, db: Session, *, campaign_id: int, user_id: str) -> Optional[Campaign]:
        try:
            return (
                db.query(Campaign)
                .filter(Campaign.id == campaign_id, Campaign.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail(db, "get", e) from e


class ClientGroupRepository(CRUDBase[ClientGroup]):
    """
    Client groups and their members.
    """

    def get_for_owner(self, db: Session, *, group_id: int, user_id: str) -> Optional[ClientGroup]:
        try:
            return (
                db.query(ClientGroup)
                .filter(ClientGroup.id == group_id, ClientGroup.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail(db, "get", e) from e

    def get_clients(self, db: Session, *, group_id: int) -> List[Client]:
        """
        Members of a group in insertion order.
        """
        try:
            return (
                db.query(Client)
                .join(Client.groups)
                .filter(ClientGroup.id == group_id)
                .order_by(Client.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail(db, "list", e) from e


assistant_repository = AssistantRepository(Assistant)
campaign_repository = CampaignRepository(Campaign)
client_group_repository = ClientGroupRepository(ClientGroup)
