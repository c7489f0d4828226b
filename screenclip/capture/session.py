"""Screen capture session.

Owns one device stream from ``start()`` until ``stop()`` (or ``close()``)
and turns the device's chunk events into a single ``RecordedClip``.

Device callbacks may arrive from any thread. They are serialized through
one lock-guarded event log, so a consumer always sees a linear history of
CHUNK events followed by exactly one terminal event (STOPPED or ERRORED).
Anything the device emits after the terminal event is dropped.
"""

import logging
import threading
from typing import List, Optional, Sequence

from screenclip.capture.device import CaptureDevice, MediaStream, RecorderHandle
from screenclip.capture.models import (
    MIME_PREFERENCES,
    CaptureEvent,
    CaptureState,
    EventKind,
    RecordedClip,
)
from screenclip.errors import (
    CaptureStateError,
    CaptureUnsupported,
    EmptyRecording,
    NoSupportedFormat,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMESLICE_MS = 1000


def negotiate_mime_type(device: CaptureDevice, preferences: Sequence[str] = MIME_PREFERENCES) -> str:
    """Return the first preferred type the device can encode."""
    for mime_type in preferences:
        if device.is_type_supported(mime_type):
            return mime_type
    raise NoSupportedFormat(
        f"None of the recording formats are supported: {', '.join(preferences)}"
    )


class CaptureSession:
    """idle -> recording -> stopping -> finalized (idle -> error during start)."""

    def __init__(
        self,
        device: CaptureDevice,
        preferences: Sequence[str] = MIME_PREFERENCES,
        timeslice_ms: int = DEFAULT_TIMESLICE_MS,
    ):
        self._device = device
        self._preferences = tuple(preferences)
        self._timeslice_ms = timeslice_ms

        self._state = CaptureState.IDLE
        self._lock = threading.Lock()
        self._stream: Optional[MediaStream] = None
        self._recorder: Optional[RecorderHandle] = None
        self._mime_type: Optional[str] = None
        self._chunks: List[bytes] = []
        self._drained = 0
        self._history: List[EventKind] = []
        self._terminal: Optional[CaptureEvent] = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def mime_type(self) -> Optional[str]:
        return self._mime_type

    @property
    def history(self) -> List[EventKind]:
        """Kinds of every accepted event, in arrival order."""
        with self._lock:
            return list(self._history)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> str:
        """Acquire the stream and begin buffering. Returns the negotiated type."""
        if self._state != CaptureState.IDLE:
            raise CaptureStateError(f"Cannot start a session that is {self._state.value}")

        if not self._device.has_display_capture():
            self._state = CaptureState.ERROR
            raise CaptureUnsupported("Screen capture is not supported on this platform")

        try:
            self._stream = self._device.request_stream(video=True, audio=True)
            mime_type = negotiate_mime_type(self._device, self._preferences)
            self._recorder = self._device.start_recorder(
                self._stream, mime_type, self._timeslice_ms, self._deliver
            )
        except Exception:
            self._state = CaptureState.ERROR
            self._release_tracks()
            raise

        self._mime_type = mime_type
        self._state = CaptureState.RECORDING
        logger.info("Capture started as %s (timeslice %d ms)", mime_type, self._timeslice_ms)
        return mime_type

    def stop(self) -> RecordedClip:
        """Finalize the recorder, release the device and build the clip."""
        if self._state != CaptureState.RECORDING:
            raise CaptureStateError(f"Cannot stop a session that is {self._state.value}")

        self._state = CaptureState.STOPPING
        try:
            if self._terminal is None and self._recorder is not None:
                self._recorder.stop()
        finally:
            self._release_tracks()
            # The device owes us a terminal event; close the log if it never came.
            self._deliver(CaptureEvent(EventKind.STOPPED))
            self._state = CaptureState.FINALIZED

        if self._terminal is not None and self._terminal.kind == EventKind.ERRORED:
            logger.warning("Recorder reported an error before stop: %s", self._terminal.error)

        with self._lock:
            data = b"".join(self._chunks)
        if not data:
            raise EmptyRecording("No data was captured")

        logger.info("Capture finalized: %d bytes in %d chunks", len(data), len(self._chunks))
        return RecordedClip(data=data, mime_type=self._mime_type)

    def close(self) -> None:
        """Teardown: release the device no matter what state we are in."""
        if self._state == CaptureState.RECORDING:
            self._state = CaptureState.STOPPING
            try:
                if self._terminal is None and self._recorder is not None:
                    self._recorder.stop()
            finally:
                self._release_tracks()
                self._state = CaptureState.FINALIZED
        else:
            self._release_tracks()

    def __enter__(self) -> "CaptureSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Event queue
    # ------------------------------------------------------------------

    def drain(self) -> List[bytes]:
        """Chunks received since the previous drain.

        The session keeps every chunk for the final clip; draining only
        advances the consumer's read position.
        """
        with self._lock:
            pending = self._chunks[self._drained:]
            self._drained = len(self._chunks)
        return pending

    def _deliver(self, event: CaptureEvent) -> None:
        with self._lock:
            if self._terminal is not None:
                logger.debug("Dropping %s event after terminal event", event.kind.value)
                return
            if event.data:
                self._chunks.append(event.data)
                self._history.append(EventKind.CHUNK)
            if event.terminal:
                self._terminal = event
                self._history.append(event.kind)

    def _release_tracks(self) -> None:
        if self._stream is not None:
            self._stream.stop_all()
