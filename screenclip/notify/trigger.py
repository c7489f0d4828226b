"""Mark a clip completed and email its owner.

The status update and the email are two independent remote calls. If the
update commits and the email then fails, the clip stays ``completed`` and
no email is ever sent; nothing here retries just the email.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from screenclip.clips.models import ClipRecord, ProcessingStatus
from screenclip.clips.store import ClipStore
from screenclip.errors import (
    EmailDispatchFailed,
    MissingFields,
    ScreenClipError,
    StoreUpdateFailed,
)
from screenclip.notify.email import EmailSender, clip_ready_email
from screenclip.notify.transcode import Transcoder, compressed_key
from screenclip.storage.base import ObjectStorage

logger = logging.getLogger(__name__)


def is_url(reference: str) -> bool:
    return reference.startswith(("http://", "https://"))


@dataclass
class TriggerResult:
    record: ClipRecord
    link: str
    transcoded: bool = False


class NotificationTrigger:
    def __init__(
        self,
        store: ClipStore,
        email: EmailSender,
        storage: ObjectStorage,
        transcoder: Optional[Transcoder] = None,
        link_ttl_seconds: int = 3600,
    ):
        self._store = store
        self._email = email
        self._storage = storage
        self._transcoder = transcoder
        self._link_ttl = link_ttl_seconds

    def resolve_link(self, reference: str) -> str:
        """URLs pass through; bucket paths become signed URLs."""
        if is_url(reference):
            return reference
        return self._storage.signed_url(reference, self._link_ttl)

    def trigger(
        self,
        video_id: str,
        owner_email: str,
        viewable_reference: str,
        transcode: bool = False,
    ) -> TriggerResult:
        missing = [
            name for name, value in (
                ("video_id", video_id),
                ("user_email", owner_email),
                ("viewable_reference", viewable_reference),
            )
            if not value
        ]
        if missing:
            raise MissingFields(f"Missing {', '.join(missing)}")

        patch = {"processing_status": ProcessingStatus.COMPLETED}
        reference = viewable_reference
        original = None

        if transcode and self._transcoder is not None:
            # TranscodeError propagates with the record untouched.
            record = self._load(video_id)
            if record.storage_reference == compressed_key(record):
                logger.info("Clip %s is already transcoded", video_id)
                reference = record.storage_reference
            else:
                replacement = self._transcoder.transcode(record)
                patch["storage_reference"] = replacement.path
                reference = replacement.path
                original = record.storage_reference
        elif transcode:
            logger.info("Transcoding unavailable, marking clip %s complete as uploaded", video_id)

        link = self.resolve_link(reference)

        try:
            record = self._store.update(video_id, patch)
        except ScreenClipError as e:
            logger.error("Status update failed for clip %s: %s", video_id, e)
            raise StoreUpdateFailed(f"Failed to update video status: {e}") from e

        if original is not None and original != reference:
            self._discard(original, video_id)

        try:
            self._email.send(clip_ready_email(owner_email, link))
        except EmailDispatchFailed:
            logger.error("Clip %s is completed but its notification email failed", video_id)
            raise
        except Exception as e:
            logger.error("Clip %s is completed but its notification email failed: %s", video_id, e)
            raise EmailDispatchFailed(f"Email send failed: {e}") from e

        logger.info("Notified %s that clip %s is ready: %s", owner_email, video_id, link)
        return TriggerResult(record=record, link=link, transcoded=original is not None)

    def _discard(self, path: str, video_id: str) -> None:
        """Drop the pre-transcode original once the record points at the copy."""
        try:
            self._storage.remove(path)
        except ScreenClipError as e:
            logger.warning("Orphaned original %s for clip %s: %s", path, video_id, e)

    def _load(self, video_id: str) -> ClipRecord:
        try:
            return self._store.get(video_id)
        except ScreenClipError as e:
            raise StoreUpdateFailed(f"Failed to update video status: {e}") from e
