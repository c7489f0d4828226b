"""Best-effort re-encode of an uploaded clip to H.264/AAC MP4."""

import logging
import os
import shutil
import tempfile

import ffmpeg

from screenclip.clips.models import ClipRecord
from screenclip.errors import ScreenClipError, TranscodeError
from screenclip.storage.base import ObjectStorage, StoredObject

logger = logging.getLogger(__name__)


def compressed_key(record: ClipRecord) -> str:
    return f"{record.owner_id}/compressed-{record.id}.mp4"


def ffmpeg_available() -> bool:
    return shutil.which("ffmpeg") is not None


class Transcoder:
    def __init__(self, storage: ObjectStorage, video_codec: str = "libx264",
                 audio_codec: str = "aac", crf: int = 28):
        self._storage = storage
        self.video_codec = video_codec
        self.audio_codec = audio_codec
        self.crf = crf

    def transcode(self, record: ClipRecord) -> StoredObject:
        """Download, re-encode, re-upload. Returns the replacement object.

        The original object is left in place; the caller swaps the reference.
        Any copy left at the compressed key by an earlier attempt is replaced.
        """
        try:
            source = self._storage.download(record.storage_reference)
        except ScreenClipError as e:
            raise TranscodeError(f"Could not fetch {record.storage_reference}: {e}") from e

        with tempfile.TemporaryDirectory(prefix="screenclip_") as work_dir:
            src_ext = os.path.splitext(record.storage_reference)[1] or ".webm"
            src_path = os.path.join(work_dir, f"input{src_ext}")
            dst_path = os.path.join(work_dir, "output.mp4")
            with open(src_path, "wb") as f:
                f.write(source)

            try:
                (
                    ffmpeg
                    .input(src_path)
                    .output(
                        dst_path,
                        vcodec=self.video_codec,
                        acodec=self.audio_codec,
                        crf=self.crf,
                        preset="veryfast",
                        movflags="+faststart",
                    )
                    .run(overwrite_output=True, quiet=True)
                )
            except ffmpeg.Error as e:
                stderr = e.stderr.decode(errors="replace") if e.stderr else str(e)
                logger.error("ffmpeg failed for clip %s: %s", record.id, stderr)
                raise TranscodeError(f"Transcoding failed for clip {record.id}") from e

            with open(dst_path, "rb") as f:
                encoded = f.read()

        key = compressed_key(record)
        try:
            # A failed earlier attempt may have left a copy behind.
            self._storage.remove(key)
            self._storage.upload(key, encoded, "video/mp4")
        except ScreenClipError as e:
            raise TranscodeError(f"Could not upload transcoded clip: {e}") from e

        logger.info("Transcoded clip %s: %d -> %d bytes", record.id, len(source), len(encoded))
        return StoredObject(path=key, content_type="video/mp4", size=len(encoded))
