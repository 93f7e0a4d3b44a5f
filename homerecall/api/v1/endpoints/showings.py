"""Showing API endpoints for agents."""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homerecall.api.deps import get_current_owner, get_db, get_settings, get_showing_gateway
from homerecall.api.responses import signed_photo_responses
from homerecall.app.config import Settings
from homerecall.core.exceptions import AppError, NotFoundError
from homerecall.repositories.photo_repo import ShowingPhotoRepository
from homerecall.repositories.showing_repo import ShowingRepository
from homerecall.schemas.showing import (
    ShowingCreate,
    ShowingCreateResponse,
    ShowingDetailResponse,
    ShowingListResponse,
    ShowingPhotoResponse,
    ShowingResponse,
)
from homerecall.services.storage.object_store import ObjectStoreGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('', response_model=ShowingCreateResponse, status_code=status.HTTP_201_CREATED)
def create_showing(
    showing_in: ShowingCreate,
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Create a showing and issue its public feedback link.

    The returned publicUrl is the only credential the buyer needs.
    """
    showing_repo = ShowingRepository(db)

    try:
        showing = showing_repo.create_showing(agent_id, showing_in.model_dump())
    except SQLAlchemyError as e:
        showing_repo.rollback()
        logger.error(f"Database error creating showing for agent {agent_id}: {e}")
        raise AppError('Failed to create showing')

    logger.info(f"Created showing {showing.id} for agent {agent_id}")
    return ShowingCreateResponse(
        showing=ShowingResponse.model_validate(showing),
        public_url=settings.public_feedback_url(showing.public_token)
    )


@router.get('', response_model=ShowingListResponse)
def list_showings(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    page = ShowingRepository(db).list_for_agent(agent_id, limit=limit, offset=offset)
    return ShowingListResponse(
        items=[ShowingResponse.model_validate(s) for s in page.items],
        has_more=page.has_more,
        limit=page.limit,
        offset=page.offset
    )


@router.get('/deleted', response_model=List[ShowingResponse])
def list_deleted_showings(
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    return ShowingRepository(db).list_deleted(agent_id)


@router.get('/{showing_id}', response_model=ShowingDetailResponse)
def get_showing(
    showing_id: UUID,
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    gateway: ObjectStoreGateway = Depends(get_showing_gateway),
    settings: Settings = Depends(get_settings)
):
    """Showing with buyer feedback and signed URLs for the feedback photos."""
    showing = ShowingRepository(db).get_owned(agent_id, showing_id)
    if not showing:
        raise NotFoundError('Showing not found')

    photos = ShowingPhotoRepository(db).list_for_showing(showing.id)
    return ShowingDetailResponse(
        **ShowingResponse.model_validate(showing).model_dump(),
        photos=signed_photo_responses(photos, gateway, ShowingPhotoResponse),
        public_url=settings.public_feedback_url(showing.public_token)
    )


@router.delete('/{showing_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_showing(
    showing_id: UUID,
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    """Soft delete; the showing can be restored."""
    if not ShowingRepository(db).soft_delete(agent_id, showing_id):
        raise NotFoundError('Showing not found')
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post('/{showing_id}/restore', response_model=ShowingResponse)
def restore_showing(
    showing_id: UUID,
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db)
):
    showing_repo = ShowingRepository(db)
    if not showing_repo.restore(agent_id, showing_id):
        raise NotFoundError('Showing not found')
    return showing_repo.get_owned(agent_id, showing_id)
