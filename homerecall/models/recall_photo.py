"""Recall photo model."""
from datetime import datetime
from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from homerecall.db.base import Base


class RecallPhoto(Base):
    """Metadata for a photo blob stored under a log's storage prefix."""

    __tablename__ = 'recall_photos'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    log_id = Column(Uuid, ForeignKey('recall_logs.id', ondelete='CASCADE'), nullable=False, index=True)
    owner_id = Column(Uuid, nullable=False, index=True)

    # Blank or null means orphaned: never rendered, only offered for cleanup
    storage_path = Column(String(512), nullable=True, unique=True, index=True)
    original_filename = Column(String(255), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    log = relationship('RecallLog', back_populates='photos')

    @property
    def is_orphaned(self) -> bool:
        return not (self.storage_path and self.storage_path.strip())

    def __repr__(self) -> str:
        return f'<RecallPhoto(id={self.id}, path={self.storage_path})>'
