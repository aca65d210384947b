"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

import logging
from typing import Generic, TypeVar, Optional, List, Type
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.exc import DataError, IntegrityError, TimeoutError as PoolCheckoutTimeout
from abc import ABC

from app.exceptions import ConflictError, PoolTimeoutError, ServiceValidationError

ModelType = TypeVar("ModelType")

logger = logging.getLogger("kitchen.repositories")

# SQLSTATE codes reported by PostgreSQL drivers
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell uniqueness violations apart from check/foreign-key failures."""
    orig = exc.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    text = str(orig).lower()
    return "unique constraint" in text or "duplicate key" in text


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common operations.
    All repositories should inherit from this class.
    """

    conflict_message = "Record already exists"

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by ID, or None if not found"""
        return self.db.get(self.model, entity_id)

    def list_all(self) -> List[ModelType]:
        """Get all entities, newest first"""
        stmt = select(self.model).order_by(self.model.created_at.desc())
        return list(self.db.scalars(stmt))

    def create(self, entity: ModelType) -> ModelType:
        """
        Insert a new entity in its own transaction.

        Raises:
            ConflictError: a uniqueness constraint was violated
            ServiceValidationError: any other constraint was violated, or a value
                does not fit its column
            PoolTimeoutError: no connection was available in time
        """
        try:
            self.db.add(entity)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                logger.info(
                    "create_conflict model=%s error=%s", self.model.__name__, exc.orig
                )
                raise ConflictError(self.conflict_message) from exc
            raise ServiceValidationError(
                f"Invalid {self.model.__name__} data", details={"error": str(exc.orig)}
            ) from exc
        except DataError as exc:
            self.db.rollback()
            logger.info("create_rejected model=%s error=%s", self.model.__name__, exc.orig)
            raise ServiceValidationError(
                f"Invalid {self.model.__name__} data", details={"error": str(exc.orig)}
            ) from exc
        except PoolCheckoutTimeout as exc:
            self.db.rollback()
            raise PoolTimeoutError() from exc
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: UUID) -> bool:
        """Delete entity by ID"""
        entity = self.get_by_id(entity_id)
        if entity:
            self.db.delete(entity)
            self.db.commit()
            return True
        return False
