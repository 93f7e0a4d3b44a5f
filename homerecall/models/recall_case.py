"""Recall case model."""
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
import uuid

from homerecall.db.base import Base
from .base import TimestampMixin, SoftDeleteMixin


class RecallCase(Base, TimestampMixin, SoftDeleteMixin):
    """A job or matter that field logs are filed under."""

    __tablename__ = 'recall_cases'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    owner_id = Column(Uuid, nullable=False, index=True)

    title = Column(String(200), nullable=False)
    client_name = Column(String(100), nullable=True)
    location_text = Column(String(200), nullable=True)

    logs = relationship(
        'RecallLog',
        back_populates='case',
        order_by='RecallLog.created_at',
        cascade='all, delete-orphan',
    )

    def __repr__(self) -> str:
        return f'<RecallCase(id={self.id}, title={self.title})>'
