"""Showing repository."""
from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID
import logging

from sqlalchemy import update, desc
from sqlalchemy.orm import Session

from homerecall.core.security import generate_public_token
from homerecall.repositories.base import OwnedRepository, Page, paginate
from homerecall.models.enums import FeedbackStatus
from homerecall.models.showing import Showing

logger = logging.getLogger(__name__)


class ShowingRepository(OwnedRepository[Showing]):
    """Repository for showings, owned by the agent who created them."""

    owner_column = 'agent_id'

    def __init__(self, db: Session):
        super().__init__(Showing, db)

    def create_showing(self, agent_id: UUID, showing_data: Dict[str, Any]) -> Showing:
        """
        Create a showing with a fresh public token.

        Args:
            agent_id: Agent UUID
            showing_data: Validated buyer and property fields

        Returns:
            Created Showing instance
        """
        public_token = generate_public_token()
        while self.get_by_field('public_token', public_token, include_deleted=True):
            public_token = generate_public_token()

        showing_dict = dict(showing_data)
        showing_dict['agent_id'] = agent_id
        showing_dict['public_token'] = public_token
        return self.create(showing_dict)

    def get_by_token(self, public_token: str) -> Optional[Showing]:
        """Public read: the token is the only credential."""
        if not public_token:
            return None
        return self.get_by_field('public_token', public_token)

    def list_for_agent(self, agent_id: UUID, limit: int = 20, offset: int = 0) -> Page[Showing]:
        query = self.owned_query(agent_id).order_by(desc(Showing.showing_datetime))
        return paginate(query, limit, offset)

    def list_deleted(self, agent_id: UUID, limit: int = 50) -> List[Showing]:
        return self.deleted_query(agent_id).order_by(desc(Showing.deleted_at)).limit(limit).all()

    def submit_feedback(
        self,
        public_token: str,
        status: FeedbackStatus,
        note: Optional[str] = None
    ) -> bool:
        """
        Record buyer feedback for the showing behind a public token.

        A single UPDATE keyed by the token, committed only if it touched
        exactly one row. Re-submission overwrites the previous feedback.

        Args:
            public_token: Token from the public link
            status: Feedback status
            note: Optional free-text note

        Returns:
            True if feedback was stored, False if the token is invalid
        """
        if not public_token:
            return False

        stmt = (
            update(Showing)
            .where(Showing.public_token == public_token, Showing.deleted_at.is_(None))
            .values(
                feedback_status=status,
                feedback_note=note,
                feedback_submitted_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            if result.rowcount != 1:
                self.db.rollback()
                logger.info(f"Feedback rejected for token {public_token[:8]}...: {result.rowcount} rows matched")
                return False
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.expire_all()
        return True
