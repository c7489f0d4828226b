"""Capture data types."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CaptureState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPING = "stopping"
    FINALIZED = "finalized"
    ERROR = "error"


class EventKind(str, Enum):
    CHUNK = "chunk"
    STOPPED = "stopped"
    ERRORED = "errored"


@dataclass
class CaptureEvent:
    kind: EventKind
    data: bytes = b""
    error: Optional[Exception] = None

    @property
    def terminal(self) -> bool:
        return self.kind != EventKind.CHUNK


# Descending preference; the first type the device supports wins.
MIME_PREFERENCES = (
    "video/webm;codecs=vp9,opus",
    "video/webm;codecs=vp8,opus",
    "video/webm",
    "video/mp4;codecs=avc1,mp4a",
    "video/mp4",
)

_EXTENSIONS = {
    "video/webm": ".webm",
    "video/mp4": ".mp4",
}


def base_content_type(mime_type: str) -> str:
    """Strip codec parameters: 'video/webm;codecs=vp9' -> 'video/webm'."""
    return mime_type.split(";", 1)[0].strip().lower()


def extension_for(mime_type: str) -> str:
    return _EXTENSIONS.get(base_content_type(mime_type), ".bin")


@dataclass(frozen=True)
class RecordedClip:
    """A finalized recording, tagged with the negotiated media type."""
    data: bytes
    mime_type: str

    @property
    def content_type(self) -> str:
        return base_content_type(self.mime_type)

    @property
    def extension(self) -> str:
        return extension_for(self.mime_type)

    @property
    def size(self) -> int:
        return len(self.data)
