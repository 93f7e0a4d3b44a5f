"""Upload, trash and export request/response schemas."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from homerecall.schemas.case import PhotoResponse
from homerecall.schemas.showing import ShowingPhotoResponse


class FileRejectionResponse(BaseModel):
    filename: str
    reason: str


class RecallUploadResponse(BaseModel):
    """Result of uploading photos to a log."""
    uploaded: int
    photos: List[PhotoResponse]
    rejected: List[FileRejectionResponse] = []


class ShowingUploadResponse(BaseModel):
    """Result of a buyer uploading photos to a showing."""
    uploaded: int
    photos: List[ShowingPhotoResponse]
    rejected: List[FileRejectionResponse] = []


class TrashStageRequest(BaseModel):
    photo_id: UUID
    session_id: Optional[str] = Field(None, max_length=64, description="Existing trash session; a new one is opened when omitted")


class StagedPhotoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    log_id: UUID
    original_filename: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    created_at: Optional[datetime] = None


class TrashResponse(BaseModel):
    session_id: str
    photos: List[StagedPhotoResponse]


class EmptyTrashResponse(BaseModel):
    session_id: str
    destroyed: int


class ExportZipRequest(BaseModel):
    """Optional photo selection for ZIP exports; all photos when omitted."""
    photo_ids: Optional[List[UUID]] = Field(None, max_length=1000)


class PurgeResponse(BaseModel):
    removed: int
