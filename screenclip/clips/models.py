"""Clip record data model."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, Field


class Visibility(str, Enum):
    PRIVATE = "private"
    UNLISTED = "unlisted"
    PUBLIC = "public"


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# Forward-only: completed and failed are terminal.
_NEXT_STATUSES: Dict[ProcessingStatus, FrozenSet[ProcessingStatus]] = {
    ProcessingStatus.PENDING: frozenset({
        ProcessingStatus.PROCESSING,
        ProcessingStatus.COMPLETED,
        ProcessingStatus.FAILED,
    }),
    ProcessingStatus.PROCESSING: frozenset({
        ProcessingStatus.COMPLETED,
        ProcessingStatus.FAILED,
    }),
    ProcessingStatus.COMPLETED: frozenset(),
    ProcessingStatus.FAILED: frozenset(),
}


def can_transition(current: ProcessingStatus, new: ProcessingStatus) -> bool:
    """Same-state writes are allowed (no-ops); everything else must move forward."""
    return new == current or new in _NEXT_STATUSES[current]


def allowed_prior_statuses(new: ProcessingStatus) -> FrozenSet[ProcessingStatus]:
    return frozenset(s for s in ProcessingStatus if can_transition(s, new))


# Fields a patch may touch. owner_id, id and timestamps are store-managed.
MUTABLE_FIELDS = frozenset({"title", "visibility", "processing_status", "storage_reference"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClipRecord(BaseModel):
    """Metadata for one screen recording."""
    id: str
    owner_id: str
    title: str
    storage_reference: str
    visibility: Visibility = Visibility.PRIVATE
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def shareable(self) -> bool:
        return self.visibility != Visibility.PRIVATE


class ClipView(BaseModel):
    """What the API returns for a record."""
    id: str
    title: str
    visibility: Visibility
    processing_status: ProcessingStatus
    storage_reference: str
    created_at: datetime
    updated_at: datetime
    playback_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: ClipRecord, playback_url: Optional[str] = None) -> "ClipView":
        return cls(
            id=record.id,
            title=record.title,
            visibility=record.visibility,
            processing_status=record.processing_status,
            storage_reference=record.storage_reference,
            created_at=record.created_at,
            updated_at=record.updated_at,
            playback_url=playback_url,
        )
