"""Recall log API endpoints."""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from homerecall.api.deps import get_current_owner, get_db, get_recall_gateway, get_trash_sessions
from homerecall.api.responses import artifact_response, signed_photo_responses
from homerecall.core.exceptions import NotFoundError
from homerecall.models.enums import LOG_DETAIL_TYPES
from homerecall.repositories.log_repo import RecallLogRepository
from homerecall.repositories.photo_repo import RecallPhotoRepository
from homerecall.schemas.case import (
    LogDetailResponse,
    LogResponse,
    LogSearchResult,
    LogUpdate,
    PhotoResponse,
)
from homerecall.schemas.upload import ExportZipRequest, FileRejectionResponse, RecallUploadResponse
from homerecall.services import uploads
from homerecall.services.export import ExportService
from homerecall.services.lifecycle import LifecycleManager, TrashSessions
from homerecall.services.storage.object_store import ObjectStoreGateway, recall_log_prefix
from homerecall.utils.validators import validate_log_type

logger = logging.getLogger(__name__)

router = APIRouter()


def get_log_or_404(db: Session, owner_id: UUID, log_id: UUID):
    log = RecallLogRepository(db).get_with_photos(owner_id, log_id)
    if not log:
        raise NotFoundError('Log not found')
    return log


@router.get('/search', response_model=List[LogSearchResult])
def search_logs(
    q: Optional[str] = Query(None, max_length=200, description='Matches note text'),
    case_id: Optional[UUID] = Query(None),
    log_type: Optional[str] = Query(None, max_length=32),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    results = RecallLogRepository(db).search_logs(owner_id, query=q, case_id=case_id, log_type=log_type)
    return [
        LogSearchResult(
            **LogResponse.model_validate(item.log).model_dump(),
            photo_count=item.photo_count,
            case_title=item.case_title,
            client_name=item.client_name
        )
        for item in results
    ]


@router.get('/{log_id}', response_model=LogDetailResponse)
def get_log(
    log_id: UUID,
    trash_session: Optional[str] = Query(None, description='Hide photos staged in this trash session'),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway),
    trash_sessions: TrashSessions = Depends(get_trash_sessions)
):
    """
    Log with signed photo URLs.

    Orphaned photo records are returned separately for cleanup and never
    rendered. Photos staged in the given trash session are hidden.
    """
    log = get_log_or_404(db, owner_id, log_id)

    photos = list(log.photos)
    trash = trash_sessions.find(owner_id, trash_session)
    if trash is not None:
        photos = trash.visible(photos)

    return LogDetailResponse(
        **LogResponse.model_validate(log).model_dump(),
        photos=signed_photo_responses(photos, gateway, PhotoResponse),
        orphaned_photos=[PhotoResponse.model_validate(p) for p in log.photos if p.is_orphaned],
        case_title=log.case.title if log.case else None,
        trash_session_id=trash.session_id if trash is not None else None
    )


@router.patch('/{log_id}', response_model=LogResponse)
def update_log(
    log_id: UUID,
    log_in: LogUpdate,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    updates = {k: v for k, v in log_in.model_dump(exclude_unset=True).items() if v is not None}
    if 'log_type' in updates:
        validate_log_type(updates['log_type'], LOG_DETAIL_TYPES)

    log = RecallLogRepository(db).update_log(owner_id, log_id, updates)
    if not log:
        raise NotFoundError('Log not found')
    return log


@router.delete('/{log_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_log(
    log_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """Permanently delete a log with all its photos."""
    LifecycleManager(db, gateway).delete_log(owner_id, log_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post('/{log_id}/photos', response_model=RecallUploadResponse)
async def upload_log_photos(
    log_id: UUID,
    files: List[UploadFile] = File(...),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """
    Upload photos to a log.

    Up to 8 images of at most 5MB each per log. Files are uploaded one after
    another; each is recorded as soon as its blob is stored.
    """
    log = get_log_or_404(db, owner_id, log_id)
    photo_repo = RecallPhotoRepository(db)

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
            owner_id=owner_id,
            log_id=log.id,
            storage_path=path,
            original_filename=upload.filename,
            file_size=upload.size,
            mime_type=upload.content_type
        )

    target = uploads.UploadTarget(
        prefix=recall_log_prefix(log.case_id, log.id),
        record_writer=write_record,
        existing_count=len([p for p in log.photos if not p.is_orphaned])
    )
    result = await uploads.UploadOrchestrator(gateway).upload_batch(batch, target, max_concurrency=1)

    return RecallUploadResponse(
        uploaded=len(result.records),
        photos=signed_photo_responses(result.records, gateway, PhotoResponse),
        rejected=[FileRejectionResponse(filename=r.filename, reason=r.reason) for r in result.rejections]
    )


@router.post('/{log_id}/export/zip')
def export_log_zip(
    log_id: UUID,
    selection: Optional[ExportZipRequest] = Body(None),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    log = get_log_or_404(db, owner_id, log_id)
    selected_ids = selection.photo_ids if selection else None
    case_name = log.case.title if log.case else None
    return artifact_response(ExportService(gateway).export_log_zip(log, case_name, selected_ids))
