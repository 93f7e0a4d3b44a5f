"""
Unit tests for photo trash staging and permanent deletion
"""
import uuid

import pytest

from homerecall.core.exceptions import DeleteError, NotFoundError, ValidationError
from homerecall.models import RecallLog, RecallPhoto
from homerecall.models.enums import PhotoState
from homerecall.repositories.case_repo import RecallCaseRepository
from homerecall.services.lifecycle import LifecycleManager, PhotoTrash, TrashSessions


@pytest.fixture
def log_with_photos(make_case, make_log, make_photo):
    case = make_case()
    log = make_log(case)
    photos = [make_photo(log, filename=f"{i}.jpg") for i in range(3)]
    return case, log, photos


@pytest.mark.unit
class TestPhotoTrash:

    def test_remove_hides_photo_without_side_effects(self, log_with_photos, owner_id, db_session, s3_client):
        _, log, photos = log_with_photos
        trash = PhotoTrash("session-1", owner_id)
        blobs_before = list(s3_client.objects)

        trash.remove(photos[0])

        assert trash.state_of(photos[0].id) == PhotoState.CLIENT_TRASHED
        assert trash.state_of(photos[1].id) == PhotoState.ACTIVE
        assert [p.id for p in trash.visible(photos)] == [photos[1].id, photos[2].id]
        assert db_session.get(RecallPhoto, photos[0].id) is not None
        assert list(s3_client.objects) == blobs_before

    def test_restore_returns_identical_record(self, log_with_photos, owner_id):
        _, _, photos = log_with_photos
        trash = PhotoTrash("session-1", owner_id)
        staged = trash.remove(photos[0])

        restored = trash.restore(photos[0].id)

        assert restored == staged
        assert restored.id == photos[0].id
        assert restored.storage_path == photos[0].storage_path
        assert restored.original_filename == photos[0].original_filename
        assert photos[0].id not in trash
        assert trash.visible(photos) == photos

    def test_restore_unknown_photo(self, owner_id):
        with pytest.raises(NotFoundError) as exc:
            PhotoTrash("s", owner_id).restore(uuid.uuid4())
        assert exc.value.message == "Photo is not in trash"

    def test_staging_twice_is_a_noop(self, log_with_photos, owner_id):
        _, _, photos = log_with_photos
        trash = PhotoTrash("s", owner_id)
        trash.remove(photos[0])
        trash.remove(photos[0])
        assert len(trash) == 1

    def test_other_owner_photo_cannot_be_staged(self, log_with_photos, other_owner_id):
        _, _, photos = log_with_photos
        with pytest.raises(NotFoundError):
            PhotoTrash("s", other_owner_id).remove(photos[0])


@pytest.mark.unit
class TestTrashSessions:

    def test_open_reuses_session(self, owner_id):
        sessions = TrashSessions()
        first = sessions.open(owner_id)
        assert sessions.open(owner_id, first.session_id) is first
        assert sessions.get(owner_id, first.session_id) is first

    def test_sessions_are_scoped_to_owner(self, owner_id, other_owner_id):
        sessions = TrashSessions()
        trash = sessions.open(owner_id, "shared-id")

        with pytest.raises(NotFoundError):
            sessions.get(other_owner_id, "shared-id")
        assert sessions.find(other_owner_id, "shared-id") is None
        assert sessions.find(owner_id, "shared-id") is trash
        assert sessions.find(owner_id, None) is None

    def test_discard(self, owner_id):
        sessions = TrashSessions()
        sessions.open(owner_id, "s")
        sessions.discard(owner_id, "s")
        with pytest.raises(NotFoundError):
            sessions.get(owner_id, "s")

    def test_idle_sessions_are_dropped(self, owner_id):
        now = [0.0]
        sessions = TrashSessions(idle_seconds=60, clock=lambda: now[0])
        for _ in range(1000):
            sessions.open(owner_id)
        kept = sessions.open(owner_id, "active")
        assert len(sessions) == 1001

        now[0] = 30.0
        sessions.get(owner_id, "active")
        now[0] = 61.0

        assert sessions.sweep() == 1000
        assert len(sessions) == 1
        assert sessions.get(owner_id, "active") is kept

    def test_idle_session_is_not_found(self, owner_id):
        now = [0.0]
        sessions = TrashSessions(idle_seconds=60, clock=lambda: now[0])
        sessions.open(owner_id, "s")

        now[0] = 120.0

        assert sessions.find(owner_id, "s") is None
        with pytest.raises(NotFoundError):
            sessions.get(owner_id, "s")

    def test_release_drops_only_empty_trash(self, log_with_photos, owner_id):
        _, _, photos = log_with_photos
        sessions = TrashSessions()
        trash = sessions.open(owner_id, "s")
        trash.remove(photos[0])

        assert sessions.release(trash) is False
        assert sessions.get(owner_id, "s") is trash

        trash.restore(photos[0].id)

        assert sessions.release(trash) is True
        assert len(sessions) == 0


@pytest.mark.unit
class TestLifecycleManager:

    def test_empty_trash_destroys_only_staged(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        _, log, photos = log_with_photos
        trash = PhotoTrash("s", owner_id)
        trash.remove(photos[0])
        trash.remove(photos[1])
        trash.restore(photos[1].id)
        staged_path = photos[0].storage_path
        kept_paths = {photos[1].storage_path, photos[2].storage_path}

        destroyed = LifecycleManager(db_session, recall_gateway).empty_trash(owner_id, trash)

        assert destroyed == 1
        assert len(trash) == 0
        assert db_session.get(RecallPhoto, photos[0].id) is None
        assert set(s3_client.keys(recall_gateway.bucket_name)) == kept_paths
        assert staged_path not in s3_client.keys(recall_gateway.bucket_name)

    def test_failed_blob_delete_keeps_row_and_staging(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        _, _, photos = log_with_photos
        trash = PhotoTrash("s", owner_id)
        trash.remove(photos[0])
        s3_client.failing_keys.add(photos[0].storage_path)

        with pytest.raises(DeleteError):
            LifecycleManager(db_session, recall_gateway).empty_trash(owner_id, trash)

        assert db_session.get(RecallPhoto, photos[0].id) is not None
        assert photos[0].id in trash

    def test_purge_staged_row_already_gone(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        _, _, photos = log_with_photos
        trash = PhotoTrash("s", owner_id)
        staged = trash.remove(photos[0])
        db_session.delete(photos[0])
        db_session.commit()

        LifecycleManager(db_session, recall_gateway).purge_staged(owner_id, staged)

        assert staged.storage_path not in s3_client.keys(recall_gateway.bucket_name)

    def test_empty_trash_of_other_owner(self, owner_id, other_owner_id, db_session, recall_gateway):
        trash = PhotoTrash("s", owner_id)
        with pytest.raises(NotFoundError):
            LifecycleManager(db_session, recall_gateway).empty_trash(other_owner_id, trash)

    def test_delete_photo_removes_blob_then_row(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        _, _, photos = log_with_photos
        path = photos[0].storage_path

        LifecycleManager(db_session, recall_gateway).delete_photo(owner_id, photos[0].id)

        assert db_session.get(RecallPhoto, photos[0].id) is None
        assert path not in s3_client.keys(recall_gateway.bucket_name)

    def test_delete_photo_not_owned(self, log_with_photos, other_owner_id, db_session, recall_gateway):
        _, _, photos = log_with_photos
        with pytest.raises(NotFoundError):
            LifecycleManager(db_session, recall_gateway).delete_photo(other_owner_id, photos[0].id)

    def test_delete_orphaned_photo_skips_storage(self, make_case, make_log, make_photo, owner_id, db_session, recall_gateway, mocker):
        log = make_log(make_case())
        orphan = make_photo(log, orphaned=True)
        spy = mocker.spy(recall_gateway, "remove")

        LifecycleManager(db_session, recall_gateway).delete_photo(owner_id, orphan.id)

        spy.assert_not_called()
        assert db_session.get(RecallPhoto, orphan.id) is None

    def test_delete_log_cascades(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        _, log, photos = log_with_photos
        log_id = log.id
        photo_ids = [p.id for p in photos]

        count = LifecycleManager(db_session, recall_gateway).delete_log(owner_id, log_id)

        assert count == 3
        assert db_session.get(RecallLog, log_id) is None
        assert all(db_session.get(RecallPhoto, pid) is None for pid in photo_ids)
        assert s3_client.keys(recall_gateway.bucket_name) == []

    def test_delete_log_blob_failure_keeps_everything(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        _, log, photos = log_with_photos
        s3_client.failing_keys.add(photos[1].storage_path)

        with pytest.raises(DeleteError):
            LifecycleManager(db_session, recall_gateway).delete_log(owner_id, log.id)

        assert db_session.get(RecallLog, log.id) is not None
        assert len(db_session.query(RecallPhoto).filter(RecallPhoto.log_id == log.id).all()) == 3

    def test_purge_case_storage_requires_deleted_case(self, log_with_photos, owner_id, db_session, recall_gateway):
        case, _, _ = log_with_photos
        with pytest.raises(ValidationError):
            LifecycleManager(db_session, recall_gateway).purge_case_storage(owner_id, case.id)

    def test_purge_case_storage(self, log_with_photos, owner_id, db_session, recall_gateway, s3_client):
        case, log, _ = log_with_photos
        RecallCaseRepository(db_session).soft_delete(owner_id, case.id)

        removed = LifecycleManager(db_session, recall_gateway).purge_case_storage(owner_id, case.id)

        assert removed == 3
        assert s3_client.keys(recall_gateway.bucket_name) == []
        assert db_session.query(RecallPhoto).count() == 0
        assert db_session.get(RecallLog, log.id) is not None

    def test_purge_orphans(self, make_case, make_log, make_photo, owner_id, db_session, recall_gateway):
        log = make_log(make_case())
        make_photo(log)
        make_photo(log, orphaned=True)
        make_photo(log, orphaned=True)

        assert LifecycleManager(db_session, recall_gateway).purge_orphans(owner_id) == 2
        assert db_session.query(RecallPhoto).count() == 1
