"""Object storage interface and stored-object descriptor."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredObject:
    """Where a clip's bytes landed. ``path`` is bucket-relative, never a URL."""
    path: str
    content_type: str
    size: int


class ObjectStorage(ABC):
    """Abstract interface for clip storage (Supabase bucket or local disk)."""

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store ``data`` at ``path``. Never overwrites an existing object.

        Raises StorageUnavailable or QuotaExceeded.
        """
        ...

    @abstractmethod
    def download(self, path: str) -> bytes:
        ...

    @abstractmethod
    def remove(self, path: str) -> None:
        ...

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Durable URL. Callers must check visibility first."""
        ...

    @abstractmethod
    def signed_url(self, path: str, expires_in: int) -> str:
        """Time-limited URL valid for ``expires_in`` seconds."""
        ...
