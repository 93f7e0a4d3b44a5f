"""Public, token-addressed showing endpoints for buyers (no login)."""
import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from homerecall.api.deps import get_db, get_showing_gateway
from homerecall.api.responses import signed_photo_responses
from homerecall.core.exceptions import NotFoundError
from homerecall.repositories.photo_repo import ShowingPhotoRepository
from homerecall.repositories.showing_repo import ShowingRepository
from homerecall.schemas.showing import (
    FeedbackRequest,
    FeedbackResponse,
    PublicShowingResponse,
    ShowingPhotoResponse,
)
from homerecall.schemas.upload import FileRejectionResponse, ShowingUploadResponse
from homerecall.services.storage.object_store import ObjectStoreGateway, showing_prefix
from homerecall.services import uploads

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_LINK = 'Invalid showing link'


@router.get('/{token}', response_model=PublicShowingResponse)
def get_public_showing(
    token: str,
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_showing_gateway)
):
    showing = ShowingRepository(db).get_by_token(token)
    if not showing:
        raise NotFoundError(INVALID_LINK)

    photos = ShowingPhotoRepository(db).list_for_showing(showing.id)
    return PublicShowingResponse(
        **PublicShowingResponse.model_validate(showing).model_dump(exclude={'photos'}),
        photos=signed_photo_responses(photos, gateway, ShowingPhotoResponse)
    )


@router.post('/{token}/feedback', response_model=FeedbackResponse)
def submit_feedback(
    token: str,
    feedback: FeedbackRequest,
    db: Session = Depends(get_db)
):
    """Record or overwrite the buyer's feedback."""
    if not ShowingRepository(db).submit_feedback(token, feedback.status, feedback.note):
        raise NotFoundError(INVALID_LINK)
    return FeedbackResponse(success=True)


@router.post('/{token}/photos', response_model=ShowingUploadResponse)
async def upload_feedback_photos(
    token: str,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_showing_gateway)
):
    """
    Attach photos to a showing's feedback.

    Up to 10 JPEG or PNG files of at most 10MB each across all submissions.
    Files are uploaded concurrently.
    """
    showing = ShowingRepository(db).get_by_token(token)
    if not showing:
        raise NotFoundError(INVALID_LINK)

    photo_repo = ShowingPhotoRepository(db)
    existing = [p for p in photo_repo.list_for_showing(showing.id) if not p.is_orphaned]

    batch = [
        uploads.UploadFile(
            filename=f.filename or 'photo.jpg',
            content=await f.read(),
            content_type=f.content_type or ''
        )
        for f in files
    ]

    def write_record(upload: uploads.UploadFile, path: str):
        return photo_repo.create_photo(
            showing_id=showing.id,
            storage_path=path,
            original_name=upload.filename,
            file_size=upload.size,
            mime_type=upload.content_type
        )

    target = uploads.UploadTarget(
        prefix=showing_prefix(showing.id),
        record_writer=write_record,
        existing_count=len(existing)
    )
    result = await uploads.UploadOrchestrator(gateway).upload_batch(batch, target)

    return ShowingUploadResponse(
        uploaded=len(result.records),
        photos=signed_photo_responses(result.records, gateway, ShowingPhotoResponse),
        rejected=[FileRejectionResponse(filename=r.filename, reason=r.reason) for r in result.rejections]
    )
