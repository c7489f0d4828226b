"""Upload workflow: upload -> create record -> mark processing -> notify.

Strictly sequential and never retried. A failure before the record is
created leaves nothing behind in the store; a failure after that leaves the
record with whatever status it had reached. Either way the caller restarts
the whole sequence.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from screenclip.capture.models import RecordedClip
from screenclip.clips.models import ClipRecord, ProcessingStatus, Visibility
from screenclip.clips.store import ClipStore
from screenclip.errors import ScreenClipError, ValidationError
from screenclip.notify.transcode import compressed_key
from screenclip.notify.trigger import NotificationTrigger, TriggerResult
from screenclip.storage.base import ObjectStorage, StoredObject
from screenclip.upload.client import UploadClient

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    stored: StoredObject
    record: ClipRecord
    notification: Optional[TriggerResult] = None


class UploadWorkflow:
    def __init__(
        self,
        uploader: UploadClient,
        store: ClipStore,
        storage: ObjectStorage,
        trigger: Optional[NotificationTrigger] = None,
    ):
        self._uploader = uploader
        self._store = store
        self._storage = storage
        self._trigger = trigger

    def run(
        self,
        owner_id: str,
        clip: RecordedClip,
        title: str,
        visibility: Visibility = Visibility.PRIVATE,
        owner_email: Optional[str] = None,
        suggested_name: Optional[str] = None,
        transcode: bool = False,
    ) -> WorkflowResult:
        """Run the sequence for a finalized clip.

        The notification step only runs when ``owner_email`` is given and a
        trigger is configured.
        """
        if not title or not title.strip():
            # Checked up front so a bad title never leaves an orphaned upload.
            raise ValidationError("Title must not be empty")

        stored = self._uploader.upload(owner_id, clip, suggested_name or title)
        record = self._store.create(
            owner_id=owner_id,
            title=title,
            storage_reference=stored.path,
            visibility=visibility,
            status=ProcessingStatus.PENDING,
        )
        logger.info("Created clip %s for owner %s at %s", record.id, owner_id, stored.path)

        if not owner_email or self._trigger is None:
            return WorkflowResult(stored=stored, record=record)

        record = self._store.update(record.id, {"processing_status": ProcessingStatus.PROCESSING})
        notification = self._trigger.trigger(record.id, owner_email, stored.path, transcode=transcode)
        return WorkflowResult(stored=stored, record=notification.record, notification=notification)

    def delete_clip(self, clip_id: str, actor_id: Optional[str]) -> ClipRecord:
        """Delete the row, then its object.

        Not atomic. The row goes first so no record ever points at missing
        bytes; if the object removal then fails it is logged as orphaned.
        """
        record = self._store.delete(clip_id, actor_id=actor_id)
        # A transcode whose status update failed can leave a compressed copy behind.
        paths = [record.storage_reference]
        if record.storage_reference != compressed_key(record):
            paths.append(compressed_key(record))
        for path in paths:
            try:
                self._storage.remove(path)
            except ScreenClipError as e:
                logger.warning("Orphaned storage object %s (clip %s deleted): %s", path, clip_id, e)
        return record
