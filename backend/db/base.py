"""
Generic CRUD helpers for the local store.
Every SQLAlchemy failure is rolled back and re-raised as LocalStoreError.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.exceptions import LocalStoreError
from backend.core.logging import get_logger
from backend.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """
    Base class for CRUD operations.
    """

    def __init__(self, model: Type[ModelType]):
        """
        Args:
            model (Type[ModelType]): SQLAlchemy model class
        """
        self.model = model

    def _fail(self, db: Session, operation: str, error: SQLAlchemyError) -> LocalStoreError:
        db.rollback()
        logger.error(f"{self.model.__name__} {operation} failed: {error}")
        return LocalStoreError(f"{self.model.__name__} {operation} failed", cause=error)

    def get(self, db: Session, id: Union[int, str]) -> Optional[ModelType]:
        """
        Get an object by primary key.

        Returns:
            Optional[ModelType]: The object or None
        """
        try:
            return db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            raise self._fail(db, "get", e) from e

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """
        Get several objects with pagination.
        """
        try:
            return db.query(self.model).offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            raise self._fail(db, "list", e) from e

    def create(self, db: Session, *, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new object from a dict of column values.
        """
        try:
            db_obj = self.model(**obj_in)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            raise self._fail(db, "create", e) from e

    def update(self, db: Session, *, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Update an existing object with the given column values.
        """
        try:
            for field, value in obj_in.items():
                setattr(db_obj, field, value)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            raise self._fail(db, "update", e) from e

    def remove(self, db: Session, *, id: Union[int, str]) -> Optional[ModelType]:
        """
        Delete an object by primary key.

        Returns:
            Optional[ModelType]: The deleted object, or None if it did not exist
        """
        try:
            obj = db.query(self.model).filter(self.model.id == id).first()
            if obj:
                db.delete(obj)
                db.commit()
            return obj
        except SQLAlchemyError as e:
            raise self._fail(db, "delete", e) from e
