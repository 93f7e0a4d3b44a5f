"""Showing model."""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Uuid
from sqlalchemy.orm import relationship
import uuid

from homerecall.db.base import Base
from .base import TimestampMixin, SoftDeleteMixin
from .enums import FeedbackStatus


class Showing(Base, TimestampMixin, SoftDeleteMixin):
    """A property showing with a public link for buyer feedback."""

    __tablename__ = 'showings'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    agent_id = Column(Uuid, nullable=False, index=True)

    # Capability for the buyer; immutable once issued
    public_token = Column(String(64), unique=True, nullable=False, index=True)

    # Buyer
    buyer_name = Column(String(255), nullable=False)
    buyer_phone = Column(String(20), nullable=False)
    buyer_email = Column(String(255), nullable=True)

    # Property
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(10), nullable=False)
    showing_datetime = Column(DateTime, nullable=False)

    # Feedback
    feedback_status = Column(SQLEnum(FeedbackStatus), nullable=True)
    feedback_note = Column(String(280), nullable=True)
    feedback_submitted_at = Column(DateTime, nullable=True)

    photos = relationship(
        'ShowingPhoto',
        back_populates='showing',
        order_by='ShowingPhoto.uploaded_at',
        cascade='all, delete-orphan',
    )

    def __repr__(self) -> str:
        return f'<Showing(id={self.id}, address={self.address})>'
