"""Metadata store interface and in-memory implementation."""

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from screenclip.clips.models import (
    MUTABLE_FIELDS,
    ClipRecord,
    ProcessingStatus,
    Visibility,
    can_transition,
)
from screenclip.errors import (
    Forbidden,
    NotFound,
    StatusRegression,
    Unauthenticated,
    ValidationError,
)


def validate_new_clip(owner_id: Optional[str], title: str, storage_reference: str) -> None:
    if not owner_id:
        raise Unauthenticated("No authenticated owner for this clip")
    if not title or not title.strip():
        raise ValidationError("Title must not be empty")
    if not storage_reference:
        raise ValidationError("A storage reference is required")


def normalize_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    """Reject unknown fields and coerce enum values."""
    unknown = set(patch) - MUTABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    if not patch:
        raise ValidationError("Nothing to update")

    clean = dict(patch)
    try:
        if "visibility" in clean:
            clean["visibility"] = Visibility(clean["visibility"])
        if "processing_status" in clean:
            clean["processing_status"] = ProcessingStatus(clean["processing_status"])
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    if "title" in clean and (not clean["title"] or not str(clean["title"]).strip()):
        raise ValidationError("Title must not be empty")
    if "storage_reference" in clean and not clean["storage_reference"]:
        raise ValidationError("storage_reference must not be empty")
    return clean


def check_owner(record: ClipRecord, actor_id: Optional[str]) -> None:
    """actor_id=None is the service role and may touch any record."""
    if actor_id is not None and actor_id != record.owner_id:
        raise Forbidden("You do not own this clip")


def check_transition(record: ClipRecord, patch: Dict[str, Any]) -> None:
    new_status = patch.get("processing_status")
    if new_status is not None and not can_transition(record.processing_status, new_status):
        raise StatusRegression(
            f"Cannot move clip {record.id} from {record.processing_status.value} to {new_status.value}"
        )


class ClipStore(ABC):
    """Abstract interface for clip metadata persistence."""

    @abstractmethod
    def create(
        self,
        owner_id: str,
        title: str,
        storage_reference: str,
        visibility: Visibility = Visibility.PRIVATE,
        status: ProcessingStatus = ProcessingStatus.PENDING,
    ) -> ClipRecord:
        ...

    @abstractmethod
    def get(self, clip_id: str) -> ClipRecord:
        """Raises NotFound."""
        ...

    @abstractmethod
    def list_for_owner(self, owner_id: str) -> List[ClipRecord]:
        """Newest first."""
        ...

    @abstractmethod
    def update(self, clip_id: str, patch: Dict[str, Any], actor_id: Optional[str] = None) -> ClipRecord:
        ...

    @abstractmethod
    def delete(self, clip_id: str, actor_id: Optional[str] = None) -> ClipRecord:
        """Remove the row. The referenced storage object is the caller's job."""
        ...


class InMemoryClipStore(ClipStore):
    """Process-local store for development and tests."""

    def __init__(self):
        self._records: Dict[str, ClipRecord] = {}
        self._lock = threading.Lock()

    def create(self, owner_id, title, storage_reference, visibility=Visibility.PRIVATE,
               status=ProcessingStatus.PENDING) -> ClipRecord:
        validate_new_clip(owner_id, title, storage_reference)
        record = ClipRecord(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            title=title.strip(),
            storage_reference=storage_reference,
            visibility=Visibility(visibility),
            processing_status=ProcessingStatus(status),
        )
        with self._lock:
            self._records[record.id] = record
        return record.model_copy()

    def get(self, clip_id: str) -> ClipRecord:
        with self._lock:
            record = self._records.get(clip_id)
        if record is None:
            raise NotFound(f"Clip {clip_id} not found")
        return record.model_copy()

    def list_for_owner(self, owner_id: str) -> List[ClipRecord]:
        with self._lock:
            # Newest insert first so equal timestamps still come out newest-first
            records = reversed(list(self._records.values()))
            owned = [r.model_copy() for r in records if r.owner_id == owner_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    def update(self, clip_id, patch, actor_id=None) -> ClipRecord:
        clean = normalize_patch(patch)
        with self._lock:
            record = self._records.get(clip_id)
            if record is None:
                raise NotFound(f"Clip {clip_id} not found")
            check_owner(record, actor_id)
            check_transition(record, clean)
            updated = record.model_copy(
                update={**clean, "updated_at": datetime.now(timezone.utc)}
            )
            self._records[clip_id] = updated
        return updated.model_copy()

    def delete(self, clip_id, actor_id=None) -> ClipRecord:
        with self._lock:
            record = self._records.get(clip_id)
            if record is None:
                raise NotFound(f"Clip {clip_id} not found")
            check_owner(record, actor_id)
            del self._records[clip_id]
        return record
