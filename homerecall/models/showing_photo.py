"""Showing photo model."""
from datetime import datetime
from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from homerecall.db.base import Base


class ShowingPhoto(Base):
    """Photo a buyer attached to their showing feedback."""

    __tablename__ = 'showing_photos'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    showing_id = Column(Uuid, ForeignKey('showings.id', ondelete='CASCADE'), nullable=False, index=True)

    storage_path = Column(String(512), nullable=True, unique=True, index=True)
    original_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(100), nullable=True)

    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    showing = relationship('Showing', back_populates='photos')

    @property
    def is_orphaned(self) -> bool:
        return not (self.storage_path and self.storage_path.strip())

    def __repr__(self) -> str:
        return f'<ShowingPhoto(id={self.id}, path={self.storage_path})>'
