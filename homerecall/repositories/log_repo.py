"""Recall log repository."""
from dataclasses import dataclass
from typing import Optional, List, Dict
from uuid import UUID

from sqlalchemy import func, desc
from sqlalchemy.orm import Session, selectinload, joinedload

from homerecall.repositories.base import OwnedRepository
from homerecall.models.recall_case import RecallCase
from homerecall.models.recall_log import RecallLog
from homerecall.models.recall_photo import RecallPhoto

SEARCH_LIMIT = 100


@dataclass
class LogWithCount:
    log: RecallLog
    photo_count: int = 0
    case_title: Optional[str] = None
    client_name: Optional[str] = None


class RecallLogRepository(OwnedRepository[RecallLog]):
    """Repository for recall logs."""

    def __init__(self, db: Session):
        super().__init__(RecallLog, db)

    def create_log(
        self,
        owner_id: UUID,
        case_id: UUID,
        log_type: str,
        note: str = ''
    ) -> Optional[RecallLog]:
        """
        Create a log under one of the owner's active cases.

        Returns:
            Created RecallLog, or None if the case is missing or not owned
        """
        case = self.db.query(RecallCase).filter(
            RecallCase.id == case_id,
            RecallCase.owner_id == owner_id,
            RecallCase.deleted_at.is_(None)
        ).first()
        if not case:
            return None

        return self.create({
            'case_id': case_id,
            'owner_id': owner_id,
            'log_type': log_type,
            'note': note,
        })

    def get_with_photos(self, owner_id: UUID, log_id: UUID) -> Optional[RecallLog]:
        """Get a log with its photos and parent case loaded."""
        return self.owned_query(owner_id).options(
            selectinload(RecallLog.photos),
            joinedload(RecallLog.case),
        ).filter(RecallLog.id == log_id).first()

    def update_log(self, owner_id: UUID, log_id: UUID, updates: Dict) -> Optional[RecallLog]:
        return self.update_owned(owner_id, log_id, updates)

    def delete_log(self, log: RecallLog) -> None:
        """Delete the log row. Photo blobs must already be gone."""
        self.hard_delete(log)

    def list_for_case(self, owner_id: UUID, case_id: UUID) -> List[RecallLog]:
        return self.owned_query(owner_id).options(
            selectinload(RecallLog.photos)
        ).filter(
            RecallLog.case_id == case_id
        ).order_by(RecallLog.created_at).all()

    def search_logs(
        self,
        owner_id: UUID,
        query: Optional[str] = None,
        case_id: Optional[UUID] = None,
        log_type: Optional[str] = None
    ) -> List[LogWithCount]:
        """
        Search the owner's logs by note text, newest first.

        Logs of soft-deleted cases are left out.

        Args:
            owner_id: Caller's owner UUID
            query: Case-insensitive substring of the note
            case_id: Restrict to one case
            log_type: Restrict to one log type

        Returns:
            Up to 100 LogWithCount entries
        """
        q = self.owned_query(owner_id).join(
            RecallCase, RecallCase.id == RecallLog.case_id
        ).filter(RecallCase.deleted_at.is_(None)).options(joinedload(RecallLog.case))

        if case_id:
            q = q.filter(RecallLog.case_id == case_id)
        if log_type:
            q = q.filter(RecallLog.log_type == log_type)
        if query:
            q = q.filter(RecallLog.note.ilike(f'%{query}%'))

        logs = q.order_by(desc(RecallLog.created_at)).limit(SEARCH_LIMIT).all()
        if not logs:
            return []

        photo_counts = dict(
            self.db.query(RecallPhoto.log_id, func.count(RecallPhoto.id))
            .filter(RecallPhoto.log_id.in_([log.id for log in logs]))
            .group_by(RecallPhoto.log_id)
            .all()
        )

        return [
            LogWithCount(
                log=log,
                photo_count=photo_counts.get(log.id, 0),
                case_title=log.case.title if log.case else None,
                client_name=log.case.client_name if log.case else None,
            )
            for log in logs
        ]
