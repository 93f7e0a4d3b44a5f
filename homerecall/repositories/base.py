"""Base repositories with common CRUD operations and owner scoping."""
from dataclasses import dataclass, field
from typing import TypeVar, Generic, Type, Optional, List, Dict, Any
from uuid import UUID
from datetime import datetime

from sqlalchemy.orm import Session, Query

from homerecall.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
ItemType = TypeVar("ItemType")


@dataclass
class Page(Generic[ItemType]):
    """One page of a listing; has_more is decided by fetching one extra row."""
    items: List[ItemType] = field(default_factory=list)
    has_more: bool = False
    limit: int = 20
    offset: int = 0


def paginate(query: Query, limit: int, offset: int) -> Page:
    """
    Apply limit/offset and report whether another page exists.

    Requests ``limit + 1`` rows instead of running a separate count query.
    """
    rows = query.offset(offset).limit(limit + 1).all()
    return Page(items=rows[:limit], has_more=len(rows) > limit, limit=limit, offset=offset)


class BaseRepository(Generic[ModelType]):
    """Base repository with common database operations."""

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create new record.

        Args:
            obj_in: Dictionary with object data

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def get(self, id: UUID, include_deleted: bool = False) -> Optional[ModelType]:
        """Get record by ID, ignoring soft-deleted rows unless asked."""
        query = self.db.query(self.model).filter(self.model.id == id)

        if hasattr(self.model, 'deleted_at') and not include_deleted:
            query = query.filter(self.model.deleted_at.is_(None))

        return query.first()

    def apply_updates(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """Set fields on an instance and commit."""
        for field_name, value in obj_in.items():
            if hasattr(db_obj, field_name):
                setattr(db_obj, field_name, value)

        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def hard_delete(self, db_obj: ModelType) -> None:
        self.db.delete(db_obj)
        self.db.commit()

    def get_by_field(
        self,
        field_name: str,
        field_value: Any,
        include_deleted: bool = False
    ) -> Optional[ModelType]:
        """
        Get record by specific field value.

        Args:
            field_name: Name of the field to filter by
            field_value: Value to match
            include_deleted: Whether to include soft-deleted records

        Returns:
            Model instance or None if not found
        """
        if not hasattr(self.model, field_name):
            return None

        query = self.db.query(self.model).filter(
            getattr(self.model, field_name) == field_value
        )

        if hasattr(self.model, 'deleted_at') and not include_deleted:
            query = query.filter(self.model.deleted_at.is_(None))

        return query.first()

    def commit(self) -> None:
        """Commit current transaction."""
        self.db.commit()

    def rollback(self) -> None:
        """Rollback current transaction."""
        self.db.rollback()


class OwnedRepository(BaseRepository[ModelType]):
    """
    Repository whose rows belong to an owner.

    All owner-facing reads and writes go through ``owned_query`` so a caller
    can never reach another owner's row. A row owned by someone else is
    reported exactly like a missing row.
    """

    owner_column = 'owner_id'

    def owned_query(self, owner_id: UUID, include_deleted: bool = False) -> Query:
        query = self.db.query(self.model).filter(
            getattr(self.model, self.owner_column) == owner_id
        )
        if hasattr(self.model, 'deleted_at') and not include_deleted:
            query = query.filter(self.model.deleted_at.is_(None))
        return query

    def deleted_query(self, owner_id: UUID) -> Query:
        return self.owned_query(owner_id, include_deleted=True).filter(
            self.model.deleted_at.isnot(None)
        )

    def get_owned(
        self,
        owner_id: UUID,
        id: UUID,
        include_deleted: bool = False
    ) -> Optional[ModelType]:
        return self.owned_query(owner_id, include_deleted).filter(self.model.id == id).first()

    def update_owned(
        self,
        owner_id: UUID,
        id: UUID,
        obj_in: Dict[str, Any]
    ) -> Optional[ModelType]:
        db_obj = self.get_owned(owner_id, id)
        if not db_obj:
            return None
        return self.apply_updates(db_obj, obj_in)

    def _set_deleted_at(self, query: Query, value: Optional[datetime]) -> bool:
        # updated_at is written back as itself so the onupdate hook does not
        # fire; deleting and restoring leaves every other field untouched
        values = {self.model.deleted_at: value}
        if hasattr(self.model, 'updated_at'):
            values[self.model.updated_at] = self.model.updated_at

        changed = query.update(values, synchronize_session=False)
        self.db.commit()
        return changed == 1

    def soft_delete(self, owner_id: UUID, id: UUID) -> bool:
        """
        Mark an active row deleted.

        Returns:
            True if a row was marked, False if not found
        """
        query = self.owned_query(owner_id).filter(self.model.id == id)
        return self._set_deleted_at(query, datetime.utcnow())

    def restore(self, owner_id: UUID, id: UUID) -> bool:
        """
        Clear the deletion marker of a soft-deleted row.

        Returns:
            True if restored, False if not found or not deleted
        """
        query = self.deleted_query(owner_id).filter(self.model.id == id)
        return self._set_deleted_at(query, None)
