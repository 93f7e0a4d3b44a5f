"""Recall case, log and photo schemas."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from homerecall.models.enums import DEFAULT_NEW_LOG_TYPE


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip() or None


class CaseCreate(BaseModel):
    """Schema for creating a case."""
    title: str = Field(..., min_length=1, max_length=200)
    client_name: Optional[str] = Field(None, max_length=100)
    location_text: Optional[str] = Field(None, max_length=200)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Title is required')
        return v

    @field_validator('client_name', 'location_text')
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class CaseUpdate(BaseModel):
    """Schema for updating a case. Only provided fields change."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    client_name: Optional[str] = Field(None, max_length=100)
    location_text: Optional[str] = Field(None, max_length=200)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError('Title is required')
        return v

    @field_validator('client_name', 'location_text')
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class CaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    title: str
    client_name: Optional[str] = None
    location_text: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class CaseSummaryResponse(CaseResponse):
    """Case with aggregate counts for listings."""
    log_count: int = 0
    photo_count: int = 0


class CaseListResponse(BaseModel):
    """One page of cases."""
    items: List[CaseSummaryResponse]
    has_more: bool
    limit: int
    offset: int


class PhotoResponse(BaseModel):
    """Recall photo with a signed URL when one could be minted."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    log_id: UUID
    original_filename: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    created_at: datetime
    url: Optional[str] = None


class LogCreate(BaseModel):
    """Schema for creating a log under a case."""
    log_type: str = Field(DEFAULT_NEW_LOG_TYPE, max_length=32)
    note: str = Field('', max_length=1000)

    @field_validator('note')
    @classmethod
    def strip_note(cls, v: str) -> str:
        return v.strip()


class LogUpdate(BaseModel):
    log_type: Optional[str] = Field(None, max_length=32)
    note: Optional[str] = Field(None, max_length=1000)

    @field_validator('note')
    @classmethod
    def strip_note(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None


class LogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    case_id: UUID
    owner_id: UUID
    log_type: str
    note: str
    created_at: datetime
    updated_at: datetime


class LogWithPhotosResponse(LogResponse):
    photos: List[PhotoResponse] = []


class LogDetailResponse(LogWithPhotosResponse):
    """Log with its visible photos; orphaned records are listed apart for cleanup."""
    case_title: Optional[str] = None
    orphaned_photos: List[PhotoResponse] = []
    trash_session_id: Optional[str] = None


class LogSearchResult(LogResponse):
    photo_count: int = 0
    case_title: Optional[str] = None
    client_name: Optional[str] = None


class CaseDetailResponse(CaseResponse):
    logs: List[LogWithPhotosResponse] = []
    log_count: int = 0
    photo_count: int = 0
