"""Recall case repository."""
from dataclasses import dataclass
from typing import Optional, List, Dict
from uuid import UUID

from sqlalchemy import func, or_, desc
from sqlalchemy.orm import Session, selectinload

from homerecall.repositories.base import OwnedRepository, Page, paginate
from homerecall.models.recall_case import RecallCase
from homerecall.models.recall_log import RecallLog
from homerecall.models.recall_photo import RecallPhoto

SEARCH_LIMIT = 50
DELETED_LIST_LIMIT = 50


@dataclass
class CaseWithCounts:
    case: RecallCase
    log_count: int = 0
    photo_count: int = 0


class RecallCaseRepository(OwnedRepository[RecallCase]):
    """Repository for recall cases."""

    def __init__(self, db: Session):
        super().__init__(RecallCase, db)

    def create_case(
        self,
        owner_id: UUID,
        title: str,
        client_name: Optional[str] = None,
        location_text: Optional[str] = None
    ) -> RecallCase:
        return self.create({
            'owner_id': owner_id,
            'title': title,
            'client_name': client_name,
            'location_text': location_text,
        })

    def get_active(self, owner_id: UUID, case_id: UUID) -> Optional[RecallCase]:
        return self.get_owned(owner_id, case_id)

    def get_detail(self, owner_id: UUID, case_id: UUID) -> Optional[RecallCase]:
        """
        Get an active case with its logs and their photos loaded.

        Args:
            owner_id: Caller's owner UUID
            case_id: Case UUID

        Returns:
            RecallCase or None if missing, deleted or not owned
        """
        return self.owned_query(owner_id).options(
            selectinload(RecallCase.logs).selectinload(RecallLog.photos)
        ).filter(RecallCase.id == case_id).first()

    def update_case(self, owner_id: UUID, case_id: UUID, updates: Dict) -> Optional[RecallCase]:
        return self.update_owned(owner_id, case_id, updates)

    def _counts(self, case_ids: List[UUID]) -> Dict[UUID, tuple]:
        """Log and photo counts per case, two grouped queries in total."""
        if not case_ids:
            return {}

        log_counts = dict(
            self.db.query(RecallLog.case_id, func.count(RecallLog.id))
            .filter(RecallLog.case_id.in_(case_ids))
            .group_by(RecallLog.case_id)
            .all()
        )
        photo_counts = dict(
            self.db.query(RecallLog.case_id, func.count(RecallPhoto.id))
            .join(RecallPhoto, RecallPhoto.log_id == RecallLog.id)
            .filter(RecallLog.case_id.in_(case_ids))
            .group_by(RecallLog.case_id)
            .all()
        )
        return {
            case_id: (log_counts.get(case_id, 0), photo_counts.get(case_id, 0))
            for case_id in case_ids
        }

    def _with_counts(self, cases: List[RecallCase]) -> List[CaseWithCounts]:
        counts = self._counts([c.id for c in cases])
        return [
            CaseWithCounts(case=c, log_count=counts[c.id][0], photo_count=counts[c.id][1])
            for c in cases
        ]

    def list_active(self, owner_id: UUID, limit: int = 20, offset: int = 0) -> Page[CaseWithCounts]:
        """
        List the owner's active cases, most recently updated first.

        Args:
            owner_id: Caller's owner UUID
            limit: Page size
            offset: Rows to skip

        Returns:
            Page of CaseWithCounts
        """
        query = self.owned_query(owner_id).order_by(desc(RecallCase.updated_at))
        page = paginate(query, limit, offset)
        page.items = self._with_counts(page.items)
        return page

    def list_deleted(self, owner_id: UUID, limit: int = DELETED_LIST_LIMIT) -> List[CaseWithCounts]:
        cases = self.deleted_query(owner_id).order_by(desc(RecallCase.deleted_at)).limit(limit).all()
        return self._with_counts(cases)

    def search(self, owner_id: UUID, query: Optional[str] = None) -> List[CaseWithCounts]:
        """Case-insensitive substring search over title and client name."""
        q = self.owned_query(owner_id)
        if query:
            pattern = f'%{query}%'
            q = q.filter(or_(
                RecallCase.title.ilike(pattern),
                RecallCase.client_name.ilike(pattern),
            ))

        cases = q.order_by(desc(RecallCase.updated_at)).limit(SEARCH_LIMIT).all()
        return self._with_counts(cases)
