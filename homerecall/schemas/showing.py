"""Showing, feedback and SMS schemas."""
import re
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from homerecall.models.enums import FeedbackStatus

ZIP_PATTERN = re.compile(r'^\d{5}(-?\d{4})?$')
STATE_PATTERN = re.compile(r'^[A-Z]{2}$')


def _required(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValueError('Missing required fields')
    return str(value).strip()


class ShowingCreate(BaseModel):
    """Schema for creating a showing."""
    buyer_name: str = Field(..., max_length=255)
    buyer_phone: str = Field(..., max_length=20)
    buyer_email: Optional[str] = Field(None, max_length=255)
    address: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str
    zip: str
    showing_datetime: datetime

    @field_validator('buyer_name', 'buyer_phone', 'address', 'city', 'state', 'zip', mode='before')
    @classmethod
    def validate_required(cls, v):
        return _required(v)

    @field_validator('buyer_phone')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Basic E.164 check: leading '+' and at least 10 characters."""
        if not v.startswith('+') or len(v) < 10:
            raise ValueError('Phone must be in E.164 format (e.g., +1234567890)')
        return v

    @field_validator('buyer_email', mode='before')
    @classmethod
    def validate_email(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator('state')
    @classmethod
    def validate_state(cls, v: str) -> str:
        v = v.upper()
        if not STATE_PATTERN.match(v):
            raise ValueError('State must be a 2-letter code')
        return v

    @field_validator('zip')
    @classmethod
    def validate_zip(cls, v: str) -> str:
        if not ZIP_PATTERN.match(v):
            raise ValueError('ZIP code must be 5 or 9 digits')
        return v

    @field_validator('showing_datetime', mode='before')
    @classmethod
    def validate_datetime_present(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError('Missing required fields')
        return v

    @field_validator('showing_datetime')
    @classmethod
    def normalize_datetime(cls, v: datetime) -> datetime:
        """Store as naive UTC."""
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class ShowingPhotoResponse(BaseModel):
    """Showing photo with a signed URL when one could be minted."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    original_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_at: datetime
    url: Optional[str] = None


class ShowingResponse(BaseModel):
    """Showing as seen by its agent."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    agent_id: UUID
    public_token: str
    buyer_name: str
    buyer_phone: str
    buyer_email: Optional[str] = None
    address: str
    city: str
    state: str
    zip: str
    showing_datetime: datetime
    feedback_status: Optional[FeedbackStatus] = None
    feedback_note: Optional[str] = None
    feedback_submitted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class ShowingCreateResponse(BaseModel):
    showing: ShowingResponse
    public_url: str = Field(..., serialization_alias='publicUrl')


class ShowingDetailResponse(ShowingResponse):
    """Showing with feedback photos and its public link."""
    photos: List[ShowingPhotoResponse] = []
    public_url: str = Field('', serialization_alias='publicUrl')


class ShowingListResponse(BaseModel):
    """One page of showings."""
    items: List[ShowingResponse]
    has_more: bool
    limit: int
    offset: int


class PublicShowingResponse(BaseModel):
    """What a buyer sees behind the public link."""
    model_config = ConfigDict(from_attributes=True)

    buyer_name: str
    address: str
    city: str
    state: str
    zip: str
    showing_datetime: datetime
    feedback_status: Optional[FeedbackStatus] = None
    feedback_note: Optional[str] = None
    feedback_submitted_at: Optional[datetime] = None
    photos: List[ShowingPhotoResponse] = []


class FeedbackRequest(BaseModel):
    """Buyer feedback submitted through the public link."""
    status: FeedbackStatus
    note: Optional[str] = Field(None, max_length=280)

    @field_validator('note')
    @classmethod
    def strip_note(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class FeedbackResponse(BaseModel):
    success: bool = True


class SmsSendRequest(BaseModel):
    """Request to text the public feedback link to a showing's buyer."""
    model_config = ConfigDict(populate_by_name=True)

    showing_id: UUID = Field(..., alias='showingId')
    message: Optional[str] = Field(None, max_length=300)


class SmsSendResponse(BaseModel):
    success: bool = True
    message_sid: str = Field(..., serialization_alias='messageSid')
    to: str
