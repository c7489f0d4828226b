"""Upload a finalized clip to object storage."""

import logging
import re
import time
import uuid
from typing import Callable, Optional

from screenclip.capture.models import RecordedClip
from screenclip.errors import Unauthenticated
from screenclip.storage.base import ObjectStorage, StoredObject

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """'My Demo (final).webm' -> 'my-demo-final'"""
    stem = name.rsplit(".", 1)[0] if "." in name else name
    slug = _UNSAFE.sub("-", stem.lower()).strip("-")
    return slug[:64] or "recording"


def build_storage_key(owner_id: str, suggested_name: str, extension: str, millis: int,
                      nonce: str = "") -> str:
    # <owner>/<unix-millis>-<nonce>-<slug><ext>: owner prefix keeps users apart,
    # timestamp plus nonce keeps one owner's uploads apart.
    stamp = f"{millis}-{nonce}" if nonce else str(millis)
    return f"{owner_id}/{stamp}-{slugify(suggested_name)}{extension}"


def _nonce() -> str:
    return uuid.uuid4().hex[:8]


class UploadClient:
    """Persists recorded clips. No retries: failures go straight to the caller."""

    def __init__(self, storage: ObjectStorage, clock: Optional[Callable[[], float]] = None,
                 nonce: Optional[Callable[[], str]] = None):
        self._storage = storage
        self._clock = clock or time.time
        self._nonce = nonce or _nonce

    def upload(self, owner_id: str, clip: RecordedClip, suggested_name: str = "recording") -> StoredObject:
        if not owner_id:
            raise Unauthenticated("An authenticated owner is required to upload")

        millis = int(self._clock() * 1000)
        path = build_storage_key(owner_id, suggested_name, clip.extension, millis, self._nonce())

        logger.info("Uploading %d bytes (%s) to %s", clip.size, clip.content_type, path)
        self._storage.upload(path, clip.data, clip.content_type)
        return StoredObject(path=path, content_type=clip.content_type, size=clip.size)
