"""Capture device interface.

A device wraps whatever actually grabs the screen (a browser bridge, an
ffmpeg grabber, a test double). The session only ever talks to it through
these four abstractions.
"""

from abc import ABC, abstractmethod
from typing import Callable, List

from screenclip.capture.models import CaptureEvent


class MediaTrack(ABC):
    """One acquired device track (screen video or system/mic audio)."""

    kind: str = "video"

    @abstractmethod
    def stop(self) -> None:
        """Release the underlying device. Must be safe to call twice."""
        ...


class MediaStream:
    """A user-granted bundle of tracks."""

    def __init__(self, tracks: List[MediaTrack]):
        self.tracks = list(tracks)

    def stop_all(self) -> None:
        for track in self.tracks:
            track.stop()


# fn(event): called by the device for every chunk and for the terminal event
EventSink = Callable[[CaptureEvent], None]


class RecorderHandle(ABC):
    """A running encoder attached to a stream."""

    @abstractmethod
    def stop(self) -> None:
        """Flush any pending data, then emit exactly one STOPPED event."""
        ...


class CaptureDevice(ABC):
    """Abstract interface for screen capture sources."""

    @abstractmethod
    def has_display_capture(self) -> bool:
        """Whether this platform can capture the screen at all."""
        ...

    @abstractmethod
    def is_type_supported(self, mime_type: str) -> bool:
        ...

    @abstractmethod
    def request_stream(self, video: bool = True, audio: bool = True) -> MediaStream:
        """Ask the user for a capture stream.

        Raises PermissionDenied if the user declines.
        """
        ...

    @abstractmethod
    def start_recorder(
        self,
        stream: MediaStream,
        mime_type: str,
        timeslice_ms: int,
        sink: EventSink,
    ) -> RecorderHandle:
        """Start encoding ``stream`` as ``mime_type``, emitting a chunk every timeslice."""
        ...
