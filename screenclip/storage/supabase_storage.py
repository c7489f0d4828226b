"""Supabase Storage bucket adapter."""

import logging

from supabase import Client

from screenclip.errors import NotFound, QuotaExceeded, StorageUnavailable
from screenclip.storage.base import ObjectStorage

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("413", "payload too large", "maximum allowed size", "quota", "exceeded")


def _classify(exc: Exception, action: str, path: str) -> Exception:
    """Map a storage client exception onto our taxonomy."""
    detail = exc.args[0] if exc.args else exc
    if isinstance(detail, dict):
        text = " ".join(str(v) for v in detail.values()).lower()
    else:
        text = str(detail).lower()

    if any(marker in text for marker in _QUOTA_MARKERS):
        return QuotaExceeded(f"Storage rejected {path}: {detail}")
    if action == "download" and ("404" in text or "not found" in text):
        return NotFound(f"Object not found: {path}")
    return StorageUnavailable(f"Storage {action} failed for {path}: {detail}")


class SupabaseObjectStorage(ObjectStorage):
    def __init__(self, client: Client, bucket: str = "videos"):
        self._client = client
        self._bucket_name = bucket

    @property
    def _bucket(self):
        return self._client.storage.from_(self._bucket_name)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            self._bucket.upload(
                path,
                data,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except Exception as exc:
            logger.error("Upload of %s to bucket %s failed: %s", path, self._bucket_name, exc)
            raise _classify(exc, "upload", path) from exc

    def download(self, path: str) -> bytes:
        try:
            return self._bucket.download(path)
        except Exception as exc:
            raise _classify(exc, "download", path) from exc

    def remove(self, path: str) -> None:
        try:
            self._bucket.remove([path])
        except Exception as exc:
            raise _classify(exc, "remove", path) from exc

    def public_url(self, path: str) -> str:
        return self._bucket.get_public_url(path)

    def signed_url(self, path: str, expires_in: int) -> str:
        try:
            response = self._bucket.create_signed_url(path, expires_in)
        except Exception as exc:
            raise _classify(exc, "sign", path) from exc
        # storage3 has spelled this key both ways across releases
        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise StorageUnavailable(f"No signed URL returned for {path}")
        return url
