"""Local disk object storage for development and tests."""

import os
import time
from typing import Optional

from screenclip.errors import NotFound, QuotaExceeded, StorageUnavailable
from screenclip.storage.base import ObjectStorage


class LocalObjectStorage(ObjectStorage):
    """Stores clips as files under ``base_dir``, one file per object path."""

    def __init__(
        self,
        base_dir: str,
        public_base_url: str = "http://localhost:8000/files",
        max_object_bytes: Optional[int] = None,
    ):
        self._base_dir = os.path.abspath(base_dir)
        os.makedirs(self._base_dir, exist_ok=True)
        self._public_base_url = public_base_url.rstrip("/")
        self._max_object_bytes = max_object_bytes

    def _full_path(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self._base_dir, path))
        if not full.startswith(self._base_dir + os.sep):
            raise StorageUnavailable(f"Invalid object path: {path}")
        return full

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        if self._max_object_bytes is not None and len(data) > self._max_object_bytes:
            raise QuotaExceeded(
                f"Object of {len(data)} bytes exceeds the {self._max_object_bytes} byte limit"
            )
        full = self._full_path(path)
        if os.path.exists(full):
            raise StorageUnavailable(f"Object already exists: {path}")
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as dst:
                dst.write(data)
        except OSError as exc:
            raise StorageUnavailable(f"Failed to write {path}: {exc}") from exc

    def download(self, path: str) -> bytes:
        full = self._full_path(path)
        if not os.path.exists(full):
            raise NotFound(f"Object not found: {path}")
        with open(full, "rb") as src:
            return src.read()

    def remove(self, path: str) -> None:
        full = self._full_path(path)
        try:
            os.remove(full)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageUnavailable(f"Failed to remove {path}: {exc}") from exc

    def exists(self, path: str) -> bool:
        return os.path.exists(self._full_path(path))

    def public_url(self, path: str) -> str:
        return f"{self._public_base_url}/{path}"

    def signed_url(self, path: str, expires_in: int) -> str:
        expires_at = int(time.time()) + expires_in
        return f"{self._public_base_url}/{path}?expires={expires_at}"
