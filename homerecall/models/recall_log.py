"""Recall log model."""
from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from homerecall.db.base import Base
from .base import TimestampMixin


class RecallLog(Base, TimestampMixin):
    """Timestamped entry in a case with a note and photos."""

    __tablename__ = 'recall_logs'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    case_id = Column(Uuid, ForeignKey('recall_cases.id', ondelete='CASCADE'), nullable=False, index=True)
    owner_id = Column(Uuid, nullable=False, index=True)

    log_type = Column(String(32), nullable=False)
    note = Column(Text, nullable=False, default='')

    case = relationship('RecallCase', back_populates='logs')
    photos = relationship(
        'RecallPhoto',
        back_populates='log',
        order_by='RecallPhoto.created_at',
        cascade='all, delete-orphan',
    )

    def __repr__(self) -> str:
        return f'<RecallLog(id={self.id}, type={self.log_type})>'
