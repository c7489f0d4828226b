import pytest

from screenclip.capture.models import RecordedClip
from screenclip.clips.models import ProcessingStatus, Visibility
from screenclip.errors import EmailDispatchFailed, StorageUnavailable, ValidationError
from screenclip.notify.trigger import NotificationTrigger
from screenclip.storage.local import LocalObjectStorage
from screenclip.upload.client import UploadClient
from screenclip.workflow import UploadWorkflow

CLIP = RecordedClip(data=b"recorded-screen", mime_type="video/webm;codecs=vp8,opus")


@pytest.fixture
def workflow(store, storage, email):
    trigger = NotificationTrigger(store, email, storage)
    return UploadWorkflow(UploadClient(storage), store, storage, trigger)


def test_full_sequence(workflow, store, storage, email):
    result = workflow.run("user-1", CLIP, "Bug repro", Visibility.UNLISTED, owner_email="a@example.com")

    record = store.get(result.record.id)
    assert record.processing_status == ProcessingStatus.COMPLETED
    assert record.storage_reference == result.stored.path
    assert record.visibility == Visibility.UNLISTED
    assert storage.download(record.storage_reference) == CLIP.data
    assert len(email.sent) == 1
    assert result.notification.link in email.sent[0].html


def test_without_email_stops_after_persisting(workflow, store, email):
    result = workflow.run("user-1", CLIP, "Quiet")

    assert result.notification is None
    assert store.get(result.record.id).processing_status == ProcessingStatus.PENDING
    assert email.sent == []


def test_upload_failure_leaves_no_record(store, tmp_path, email):
    class FullDisk(LocalObjectStorage):
        def upload(self, path, data, content_type):
            raise StorageUnavailable("disk full")

    storage = FullDisk(str(tmp_path))
    workflow = UploadWorkflow(UploadClient(storage), store, storage)

    with pytest.raises(StorageUnavailable):
        workflow.run("user-1", CLIP, "Lost")

    assert store.list_for_owner("user-1") == []


def test_empty_title_is_rejected_before_upload(workflow, store):
    with pytest.raises(ValidationError):
        workflow.run("user-1", CLIP, " ")
    assert store.list_for_owner("user-1") == []


def test_notification_failure_leaves_persisted_record(store, storage, failing_email):
    trigger = NotificationTrigger(store, failing_email, storage)
    workflow = UploadWorkflow(UploadClient(storage), store, storage, trigger)

    with pytest.raises(EmailDispatchFailed):
        workflow.run("user-1", CLIP, "Half done", owner_email="a@example.com")

    [record] = store.list_for_owner("user-1")
    assert record.processing_status == ProcessingStatus.COMPLETED


def test_delete_removes_record_then_object(workflow, store, storage):
    result = workflow.run("user-1", CLIP, "Temp")

    workflow.delete_clip(result.record.id, actor_id="user-1")

    assert store.list_for_owner("user-1") == []
    assert not storage.exists(result.stored.path)


def test_delete_logs_orphan_when_object_removal_fails(store, tmp_path, caplog):
    class StickyStorage(LocalObjectStorage):
        def remove(self, path):
            raise StorageUnavailable("bucket offline")

    storage = StickyStorage(str(tmp_path))
    workflow = UploadWorkflow(UploadClient(storage), store, storage)
    result = workflow.run("user-1", CLIP, "Sticky")

    workflow.delete_clip(result.record.id, actor_id="user-1")

    assert store.list_for_owner("user-1") == []
    assert "Orphaned storage object" in caplog.text
