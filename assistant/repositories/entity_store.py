"""
Row persistence for all entities. DB is the only source of truth.
Every call commits (or rolls back) on its own, so each insert/update is atomic per row
and the returned object is refreshed from the database.
"""
import logging
from typing import Any, TypeVar

from sqlalchemy import asc, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from assistant.errors import NotFound, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityStore:
    """Thin session wrapper used by the services; routers never touch it directly."""

    def __init__(self, db: Session):
        self._db = db

    @property
    def session(self) -> Session:
        return self._db

    def insert(self, entity: T) -> T:
        """Add one row and commit. Returns the refreshed row."""
        try:
            self._db.add(entity)
            self._db.commit()
            self._db.refresh(entity)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Insert into %s failed", type(entity).__tablename__)
            raise PersistenceError(f"Could not insert {type(entity).__name__}") from e
        return entity

    def find(self, model: type[T], entity_id: str) -> T | None:
        try:
            return self._db.get(model, entity_id)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Could not load {model.__name__} {entity_id}") from e

    def get(self, model: type[T], entity_id: str) -> T:
        """Load by primary key or raise NotFound."""
        row = self.find(model, entity_id)
        if row is None:
            raise NotFound(model.__name__, entity_id)
        return row

    def list_by_owner(
        self,
        model: type[T],
        owner_field: str,
        owner_id: str,
        order_by: str = "created_at",
        direction: str = "asc",
    ) -> list[T]:
        """All rows whose `owner_field` equals owner_id, sorted by one column."""
        column = getattr(model, order_by)
        ordering = desc(column) if direction == "desc" else asc(column)
        try:
            return (
                self._db.query(model)
                .filter(getattr(model, owner_field) == owner_id)
                .order_by(ordering)
                .all()
            )
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Could not list {model.__name__} for {owner_id}") from e

    def newest_by_owner(self, model: type[T], owner_field: str, owner_id: str, order_by: str = "created_at") -> T | None:
        """Row with the greatest `order_by` value for this owner, or None."""
        try:
            return (
                self._db.query(model)
                .filter(getattr(model, owner_field) == owner_id)
                .order_by(desc(getattr(model, order_by)))
                .first()
            )
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Could not load newest {model.__name__} for {owner_id}") from e

    def update(self, model: type[T], entity_id: str, **patch: Any) -> T:
        """Apply patch to one row and commit. NotFound if the row is gone."""
        row = self.get(model, entity_id)
        try:
            for key, value in patch.items():
                setattr(row, key, value)
            self._db.commit()
            self._db.refresh(row)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Update of %s %s failed", model.__tablename__, entity_id)
            raise PersistenceError(f"Could not update {model.__name__} {entity_id}") from e
        return row
