"""Photo trash staging and permanent deletion of photos, logs and case storage."""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
from uuid import UUID
import time
import uuid
import logging

from sqlalchemy.orm import Session

from homerecall.core.exceptions import NotFoundError, ValidationError
from homerecall.models.enums import PhotoState
from homerecall.models.recall_photo import RecallPhoto
from homerecall.repositories.case_repo import RecallCaseRepository
from homerecall.repositories.log_repo import RecallLogRepository
from homerecall.repositories.photo_repo import RecallPhotoRepository
from homerecall.services.storage.object_store import ObjectStoreGateway, recall_case_prefix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedPhoto:
    """Snapshot of a photo record taken when it was moved to trash."""
    id: UUID
    log_id: UUID
    owner_id: UUID
    storage_path: Optional[str]
    original_filename: Optional[str]
    file_size: Optional[int]
    mime_type: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_photo(cls, photo: RecallPhoto) -> 'StagedPhoto':
        return cls(
            id=photo.id,
            log_id=photo.log_id,
            owner_id=photo.owner_id,
            storage_path=photo.storage_path,
            original_filename=photo.original_filename,
            file_size=photo.file_size,
            mime_type=photo.mime_type,
            created_at=photo.created_at,
        )


class PhotoTrash:
    """
    In-memory staging area for photos the user removed from a log.

    Nothing here touches storage or the database. A staged photo's blob and
    row stay live until ``empty`` runs; dropping the trash (or restarting the
    process) simply forgets the staging.
    """

    def __init__(self, session_id: str, owner_id: UUID):
        self.session_id = session_id
        self.owner_id = owner_id
        self._staged: Dict[UUID, StagedPhoto] = {}

    def __len__(self) -> int:
        return len(self._staged)

    def __contains__(self, photo_id: UUID) -> bool:
        return photo_id in self._staged

    def state_of(self, photo_id: UUID) -> PhotoState:
        return PhotoState.CLIENT_TRASHED if photo_id in self._staged else PhotoState.ACTIVE

    def remove(self, photo: RecallPhoto) -> StagedPhoto:
        """Stage a photo. Staging an already staged photo is a no-op."""
        if photo.owner_id != self.owner_id:
            raise NotFoundError("Photo not found")

        staged = self._staged.get(photo.id)
        if staged is None:
            staged = StagedPhoto.from_photo(photo)
            self._staged[photo.id] = staged
        return staged

    def restore(self, photo_id: UUID) -> StagedPhoto:
        """Take a photo back out of trash and return the record it was staged as."""
        staged = self._staged.pop(photo_id, None)
        if staged is None:
            raise NotFoundError("Photo is not in trash")
        return staged

    def visible(self, photos: List[RecallPhoto]) -> List[RecallPhoto]:
        return [p for p in photos if p.id not in self._staged]

    def items(self) -> List[StagedPhoto]:
        return list(self._staged.values())

    def empty(self, purge: Callable[[StagedPhoto], None]) -> int:
        """
        Permanently destroy every staged photo.

        Stops at the first failure; photos purged so far leave the trash and
        the rest stay staged.

        Returns:
            Number of photos destroyed
        """
        destroyed = 0
        for photo_id, staged in list(self._staged.items()):
            purge(staged)
            del self._staged[photo_id]
            destroyed += 1
        return destroyed


class TrashSessions:
    """
    Registry of trash areas keyed by owner and a client-held session id.

    A session that sits idle longer than ``idle_seconds`` is forgotten on the
    next sweep, exactly as if the client had dropped its id.
    """

    def __init__(self, idle_seconds: int = 3600, clock: Callable[[], float] = time.monotonic):
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: Dict[Tuple[UUID, str], PhotoTrash] = {}
        self._touched: Dict[Tuple[UUID, str], float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _touch(self, key: Tuple[UUID, str]) -> None:
        self._touched[key] = self._clock()

    def sweep(self) -> int:
        """Drop idle sessions. Returns how many were dropped."""
        cutoff = self._clock() - self.idle_seconds
        expired = [key for key, touched in self._touched.items() if touched <= cutoff]
        for key in expired:
            self._sessions.pop(key, None)
            self._touched.pop(key, None)
        if expired:
            logger.info(f"Dropped {len(expired)} idle trash session(s)")
        return len(expired)

    def open(self, owner_id: UUID, session_id: Optional[str] = None) -> PhotoTrash:
        """Return the owner's trash for a session id, creating it if needed."""
        self.sweep()
        session_id = session_id or uuid.uuid4().hex
        key = (owner_id, session_id)
        trash = self._sessions.setdefault(key, PhotoTrash(session_id, owner_id))
        self._touch(key)
        return trash

    def get(self, owner_id: UUID, session_id: str) -> PhotoTrash:
        trash = self.find(owner_id, session_id)
        if trash is None:
            raise NotFoundError("Trash session not found")
        return trash

    def find(self, owner_id: UUID, session_id: Optional[str]) -> Optional[PhotoTrash]:
        if not session_id:
            return None
        self.sweep()
        key = (owner_id, session_id)
        trash = self._sessions.get(key)
        if trash is not None:
            self._touch(key)
        return trash

    def discard(self, owner_id: UUID, session_id: str) -> None:
        self._sessions.pop((owner_id, session_id), None)
        self._touched.pop((owner_id, session_id), None)

    def release(self, trash: PhotoTrash) -> bool:
        """Forget a trash once nothing is staged in it."""
        if len(trash):
            return False
        self.discard(trash.owner_id, trash.session_id)
        return True


class LifecycleManager:
    """Permanent deletion paths for recall photos, logs and case storage."""

    def __init__(self, db: Session, gateway: ObjectStoreGateway):
        self.gateway = gateway
        self.cases = RecallCaseRepository(db)
        self.logs = RecallLogRepository(db)
        self.photos = RecallPhotoRepository(db)

    def _destroy(self, photo: RecallPhoto) -> None:
        # blob first: a failed blob delete keeps the row so it can be retried
        if not photo.is_orphaned:
            self.gateway.remove(photo.storage_path)
        self.photos.delete_photo(photo)
        logger.info(f"Destroyed photo {photo.id} ({photo.storage_path})")

    def delete_photo(self, owner_id: UUID, photo_id: UUID) -> None:
        """
        Destroy an active photo directly (blob and row).

        Raises:
            NotFoundError: Photo missing or not owned
            DeleteError: Blob removal failed; row is kept
        """
        photo = self.photos.get_owned(owner_id, photo_id)
        if not photo:
            raise NotFoundError("Photo not found")
        self._destroy(photo)

    def purge_staged(self, owner_id: UUID, staged: StagedPhoto) -> None:
        """Destroy a photo staged in trash. A row already gone only needs its blob removed."""
        photo = self.photos.get_owned(owner_id, staged.id)
        if photo is None:
            logger.info(f"Staged photo {staged.id} already deleted, removing blob only")
            if staged.storage_path and staged.storage_path.strip():
                self.gateway.remove(staged.storage_path)
            return
        self._destroy(photo)

    def empty_trash(self, owner_id: UUID, trash: PhotoTrash) -> int:
        if trash.owner_id != owner_id:
            raise NotFoundError("Trash session not found")
        destroyed = trash.empty(lambda staged: self.purge_staged(owner_id, staged))
        logger.info(f"Emptied trash {trash.session_id}: {destroyed} photo(s) destroyed")
        return destroyed

    def delete_log(self, owner_id: UUID, log_id: UUID) -> int:
        """
        Hard-delete a log: photo blobs, then photo rows, then the log row.

        Returns:
            Number of photos destroyed

        Raises:
            NotFoundError: Log missing or not owned
            DeleteError: Blob removal failed; nothing was deleted from the database
        """
        log = self.logs.get_with_photos(owner_id, log_id)
        if not log:
            raise NotFoundError("Log not found")

        photo_count = len(log.photos)
        paths = [p.storage_path for p in log.photos if not p.is_orphaned]
        self.gateway.remove_many(paths)

        for photo in list(log.photos):
            self.photos.delete_photo(photo)
        self.logs.delete_log(log)

        logger.info(f"Deleted log {log_id} with {photo_count} photo(s)")
        return photo_count

    def purge_case_storage(self, owner_id: UUID, case_id: UUID) -> int:
        """
        Remove every blob under a soft-deleted case's storage tree along with
        the photo rows that pointed into it. The case and its logs remain.

        Returns:
            Number of objects removed from storage
        """
        case = self.cases.get_owned(owner_id, case_id, include_deleted=True)
        if not case:
            raise NotFoundError("Case not found")
        if not case.is_deleted:
            raise ValidationError("Only deleted cases can have their storage purged")

        removed = self.gateway.remove_prefix(recall_case_prefix(case_id))
        for photo in self.photos.list_for_case(owner_id, case_id):
            self.photos.delete_photo(photo)

        logger.info(f"Purged storage for case {case_id}: {removed} object(s)")
        return removed

    def purge_orphans(self, owner_id: UUID) -> int:
        """Delete photo rows that have no storage path. Returns the number deleted."""
        orphans = self.photos.list_orphaned(owner_id)
        for photo in orphans:
            self.photos.delete_photo(photo)
        if orphans:
            logger.info(f"Removed {len(orphans)} orphaned photo record(s) for owner {owner_id}")
        return len(orphans)
