"""Recall photo endpoints: direct delete, download, orphan cleanup and trash."""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from homerecall.api.deps import get_current_owner, get_db, get_recall_gateway, get_trash_sessions
from homerecall.api.responses import artifact_response
from homerecall.core.exceptions import NotFoundError
from homerecall.repositories.photo_repo import RecallPhotoRepository
from homerecall.schemas.case import PhotoResponse
from homerecall.schemas.upload import (
    EmptyTrashResponse,
    PurgeResponse,
    StagedPhotoResponse,
    TrashResponse,
    TrashStageRequest,
)
from homerecall.services.export import ExportService
from homerecall.services.lifecycle import LifecycleManager, PhotoTrash, TrashSessions
from homerecall.services.storage.object_store import ObjectStoreGateway

logger = logging.getLogger(__name__)

router = APIRouter()


def build_trash_response(trash: PhotoTrash) -> TrashResponse:
    return TrashResponse(
        session_id=trash.session_id,
        photos=[StagedPhotoResponse.model_validate(p) for p in trash.items()]
    )


@router.get('/orphaned', response_model=List[PhotoResponse])
def list_orphaned_photos(
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    """Photo records with no storage path."""
    return RecallPhotoRepository(db).list_orphaned(owner_id)


@router.delete('/orphaned', response_model=PurgeResponse)
def purge_orphaned_photos(
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    removed = LifecycleManager(db, gateway).purge_orphans(owner_id)
    return PurgeResponse(removed=removed)


@router.post('/trash', response_model=TrashResponse)
def stage_photo(
    request: TrashStageRequest,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    trash_sessions: TrashSessions = Depends(get_trash_sessions)
):
    """
    Move a photo to trash.

    Nothing is deleted: the photo is only hidden from log views that pass
    the returned session id, until the trash is emptied.
    """
    photo = RecallPhotoRepository(db).get_owned(owner_id, request.photo_id)
    if not photo:
        raise NotFoundError('Photo not found')

    trash = trash_sessions.open(owner_id, request.session_id)
    trash.remove(photo)
    return build_trash_response(trash)


@router.get('/trash/{session_id}', response_model=TrashResponse)
def get_trash(
    session_id: str,
    owner_id: UUID = Depends(get_current_owner),
    trash_sessions: TrashSessions = Depends(get_trash_sessions)
):
    return build_trash_response(trash_sessions.get(owner_id, session_id))


@router.post('/trash/{session_id}/restore/{photo_id}', response_model=StagedPhotoResponse)
def restore_photo(
    session_id: str,
    photo_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    trash_sessions: TrashSessions = Depends(get_trash_sessions)
):
    trash = trash_sessions.get(owner_id, session_id)
    staged = trash.restore(photo_id)
    trash_sessions.release(trash)
    return StagedPhotoResponse.model_validate(staged)


@router.post('/trash/{session_id}/empty', response_model=EmptyTrashResponse)
def empty_trash(
    session_id: str,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway),
    trash_sessions: TrashSessions = Depends(get_trash_sessions)
):
    """Permanently delete every photo in the trash (blob and record)."""
    trash = trash_sessions.get(owner_id, session_id)
    destroyed = LifecycleManager(db, gateway).empty_trash(owner_id, trash)
    trash_sessions.release(trash)
    return EmptyTrashResponse(session_id=session_id, destroyed=destroyed)


@router.get('/{photo_id}/download')
def download_photo(
    photo_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    photo = RecallPhotoRepository(db).get_owned(owner_id, photo_id)
    if not photo:
        raise NotFoundError('Photo not found')
    return artifact_response(ExportService(gateway).download_single_photo(photo))


@router.delete('/{photo_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_photo(
    photo_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """Permanently delete a photo (blob and record) without going through trash."""
    LifecycleManager(db, gateway).delete_photo(owner_id, photo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
