"""Photo repositories for recall logs and showings."""
from typing import Optional, List
from uuid import UUID

from sqlalchemy import func, or_, desc
from sqlalchemy.orm import Session

from homerecall.repositories.base import BaseRepository, OwnedRepository
from homerecall.models.recall_log import RecallLog
from homerecall.models.recall_photo import RecallPhoto
from homerecall.models.showing_photo import ShowingPhoto


class RecallPhotoRepository(OwnedRepository[RecallPhoto]):
    """Repository for recall photo records."""

    def __init__(self, db: Session):
        super().__init__(RecallPhoto, db)

    def create_photo(
        self,
        owner_id: UUID,
        log_id: UUID,
        storage_path: str,
        original_filename: Optional[str] = None,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None
    ) -> RecallPhoto:
        """
        Create new photo record.

        Args:
            owner_id: Owner UUID
            log_id: Owning log UUID
            storage_path: Object key inside the recall bucket
            original_filename: Name the file was uploaded with
            file_size: Size in bytes
            mime_type: Content type

        Returns:
            Created RecallPhoto instance
        """
        return self.create({
            'owner_id': owner_id,
            'log_id': log_id,
            'storage_path': storage_path,
            'original_filename': original_filename,
            'file_size': file_size,
            'mime_type': mime_type,
        })

    def list_for_log(self, owner_id: UUID, log_id: UUID) -> List[RecallPhoto]:
        return self.owned_query(owner_id).filter(
            RecallPhoto.log_id == log_id
        ).order_by(RecallPhoto.created_at).all()

    def list_for_case(self, owner_id: UUID, case_id: UUID) -> List[RecallPhoto]:
        return self.owned_query(owner_id).join(
            RecallLog, RecallLog.id == RecallPhoto.log_id
        ).filter(
            RecallLog.case_id == case_id
        ).order_by(desc(RecallPhoto.created_at)).all()

    def list_orphaned(self, owner_id: UUID) -> List[RecallPhoto]:
        """Photo rows with no usable storage path."""
        return self.owned_query(owner_id).filter(or_(
            RecallPhoto.storage_path.is_(None),
            func.trim(RecallPhoto.storage_path) == '',
        )).all()

    def delete_photo(self, photo: RecallPhoto) -> None:
        self.hard_delete(photo)


class ShowingPhotoRepository(BaseRepository[ShowingPhoto]):
    """
    Repository for showing photo records.

    Rows are reached through their showing, which is either owner-checked or
    token-checked by the caller.
    """

    def __init__(self, db: Session):
        super().__init__(ShowingPhoto, db)

    def create_photo(
        self,
        showing_id: UUID,
        storage_path: str,
        original_name: str,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None
    ) -> ShowingPhoto:
        return self.create({
            'showing_id': showing_id,
            'storage_path': storage_path,
            'original_name': original_name,
            'file_size': file_size,
            'mime_type': mime_type,
        })

    def list_for_showing(self, showing_id: UUID) -> List[ShowingPhoto]:
        return self.db.query(ShowingPhoto).filter(
            ShowingPhoto.showing_id == showing_id
        ).order_by(ShowingPhoto.uploaded_at).all()
