"""Recall case API endpoints."""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from homerecall.api.deps import get_current_owner, get_db, get_recall_gateway
from homerecall.api.responses import artifact_response, signed_photo_responses
from homerecall.core.exceptions import NotFoundError
from homerecall.models.enums import NEW_LOG_TYPES
from homerecall.repositories.case_repo import CaseWithCounts, RecallCaseRepository
from homerecall.repositories.log_repo import RecallLogRepository
from homerecall.repositories.photo_repo import RecallPhotoRepository
from homerecall.schemas.case import (
    CaseCreate,
    CaseDetailResponse,
    CaseListResponse,
    CaseResponse,
    CaseSummaryResponse,
    CaseUpdate,
    LogCreate,
    LogResponse,
    LogWithPhotosResponse,
    PhotoResponse,
)
from homerecall.schemas.upload import ExportZipRequest, PurgeResponse
from homerecall.services.export import ExportService
from homerecall.services.lifecycle import LifecycleManager
from homerecall.services.storage.object_store import ObjectStoreGateway
from homerecall.utils.validators import validate_log_type

logger = logging.getLogger(__name__)

router = APIRouter()


def build_case_summary(item: CaseWithCounts) -> CaseSummaryResponse:
    return CaseSummaryResponse(
        **CaseResponse.model_validate(item.case).model_dump(),
        log_count=item.log_count,
        photo_count=item.photo_count
    )


def get_case_or_404(repo: RecallCaseRepository, owner_id: UUID, case_id: UUID):
    case = repo.get_detail(owner_id, case_id)
    if not case:
        raise NotFoundError('Case not found')
    return case


@router.get('', response_model=CaseListResponse)
def list_cases(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    """Active cases, most recently updated first, with log and photo counts."""
    page = RecallCaseRepository(db).list_active(owner_id, limit=limit, offset=offset)
    return CaseListResponse(
        items=[build_case_summary(item) for item in page.items],
        has_more=page.has_more,
        limit=page.limit,
        offset=page.offset
    )


@router.get('/deleted', response_model=List[CaseSummaryResponse])
def list_deleted_cases(
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    return [build_case_summary(item) for item in RecallCaseRepository(db).list_deleted(owner_id)]


@router.get('/search', response_model=List[CaseSummaryResponse])
def search_cases(
    q: Optional[str] = Query(None, max_length=200, description='Matches title or client name'),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    return [build_case_summary(item) for item in RecallCaseRepository(db).search(owner_id, q)]


@router.post('', response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
def create_case(
    case_in: CaseCreate,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    case = RecallCaseRepository(db).create_case(
        owner_id,
        title=case_in.title,
        client_name=case_in.client_name,
        location_text=case_in.location_text
    )
    logger.info(f"Created case {case.id} for owner {owner_id}")
    return case


@router.get('/{case_id}', response_model=CaseDetailResponse)
def get_case(
    case_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """Case with its logs in creation order and signed URLs for every photo."""
    case = get_case_or_404(RecallCaseRepository(db), owner_id, case_id)

    logs = []
    photo_count = 0
    for log in case.logs:
        photos = signed_photo_responses(log.photos, gateway, PhotoResponse)
        photo_count += len(photos)
        logs.append(LogWithPhotosResponse(
            **LogResponse.model_validate(log).model_dump(),
            photos=photos
        ))

    return CaseDetailResponse(
        **CaseResponse.model_validate(case).model_dump(),
        logs=logs,
        log_count=len(logs),
        photo_count=photo_count
    )


@router.patch('/{case_id}', response_model=CaseResponse)
def update_case(
    case_id: UUID,
    case_in: CaseUpdate,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    updates = case_in.model_dump(exclude_unset=True)
    if 'title' in updates and updates['title'] is None:
        del updates['title']

    case = RecallCaseRepository(db).update_case(owner_id, case_id, updates)
    if not case:
        raise NotFoundError('Case not found')
    return case


@router.delete('/{case_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_case(
    case_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    """Soft delete; logs, photos and blobs stay intact until restored."""
    if not RecallCaseRepository(db).soft_delete(owner_id, case_id):
        raise NotFoundError('Case not found')
    logger.info(f"Soft-deleted case {case_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post('/{case_id}/restore', response_model=CaseResponse)
def restore_case(
    case_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    case_repo = RecallCaseRepository(db)
    if not case_repo.restore(owner_id, case_id):
        raise NotFoundError('Case not found')
    logger.info(f"Restored case {case_id}")
    return case_repo.get_active(owner_id, case_id)


@router.post('/{case_id}/purge-storage', response_model=PurgeResponse)
def purge_case_storage(
    case_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """Remove the stored photos of a deleted case."""
    removed = LifecycleManager(db, gateway).purge_case_storage(owner_id, case_id)
    return PurgeResponse(removed=removed)


@router.get('/{case_id}/photos', response_model=List[PhotoResponse])
def list_case_photos(
    case_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """Every photo in the case, newest first."""
    if not RecallCaseRepository(db).get_active(owner_id, case_id):
        raise NotFoundError('Case not found')

    photos = RecallPhotoRepository(db).list_for_case(owner_id, case_id)
    return signed_photo_responses(photos, gateway, PhotoResponse)


@router.post('/{case_id}/logs', response_model=LogResponse, status_code=status.HTTP_201_CREATED)
def create_log(
    case_id: UUID,
    log_in: LogCreate,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    log_type = validate_log_type(log_in.log_type, NEW_LOG_TYPES)

    log = RecallLogRepository(db).create_log(owner_id, case_id, log_type, log_in.note)
    if not log:
        raise NotFoundError('Case not found')
    return log


@router.get('/{case_id}/export/pdf')
def export_case_pdf(
    case_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    case = get_case_or_404(RecallCaseRepository(db), owner_id, case_id)
    return artifact_response(ExportService(gateway).export_pdf(case, case.logs))


@router.post('/{case_id}/export/zip')
def export_case_zip(
    case_id: UUID,
    selection: Optional[ExportZipRequest] = Body(None),
    owner_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_recall_gateway)
):
    """ZIP of the case's photos, one folder per log, plus case_summary.txt."""
    case = get_case_or_404(RecallCaseRepository(db), owner_id, case_id)
    selected_ids = selection.photo_ids if selection else None
    return artifact_response(ExportService(gateway).export_case_zip(case, case.logs, selected_ids))
