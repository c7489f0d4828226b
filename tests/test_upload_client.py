import pytest

from screenclip.capture.models import RecordedClip
from screenclip.errors import QuotaExceeded, StorageUnavailable, Unauthenticated
from screenclip.storage.base import ObjectStorage
from screenclip.storage.local import LocalObjectStorage
from screenclip.upload.client import UploadClient, build_storage_key, slugify


class BrokenStorage(ObjectStorage):
    def upload(self, path, data, content_type):
        raise StorageUnavailable("connection refused")

    def download(self, path):
        raise NotImplementedError

    def remove(self, path):
        raise NotImplementedError

    def public_url(self, path):
        raise NotImplementedError

    def signed_url(self, path, expires_in):
        raise NotImplementedError


def test_upload_round_trips_bytes(storage):
    clip = RecordedClip(data=b"\x1aE\xdf\xa3webm-payload", mime_type="video/webm;codecs=vp9,opus")
    uploader = UploadClient(storage, clock=lambda: 1700000000.5, nonce=lambda: "a1b2c3d4")

    stored = uploader.upload("user-1", clip, "My Demo (final).webm")

    assert stored.path == "user-1/1700000000500-a1b2c3d4-my-demo-final.webm"
    assert stored.content_type == "video/webm"
    assert stored.size == len(clip.data)
    assert storage.download(stored.path) == clip.data


def test_keys_are_namespaced_per_owner_and_disambiguated_by_time(storage):
    ticks = iter([1.0, 2.0])
    uploader = UploadClient(storage, clock=lambda: next(ticks))
    clip = RecordedClip(data=b"x", mime_type="video/mp4")

    first = uploader.upload("user-1", clip, "demo")
    second = uploader.upload("user-1", clip, "demo")

    assert first.path != second.path
    assert first.path.startswith("user-1/")
    assert first.path.endswith(".mp4")


def test_same_millisecond_uploads_get_distinct_keys(storage):
    uploader = UploadClient(storage, clock=lambda: 1700000000.0)
    clip = RecordedClip(data=b"x", mime_type="video/webm")

    first = uploader.upload("user-1", clip, "demo")
    second = uploader.upload("user-1", clip, "demo")

    assert first.path != second.path
    assert storage.download(first.path) == storage.download(second.path) == b"x"


def test_upload_without_owner_is_rejected(storage):
    with pytest.raises(Unauthenticated):
        UploadClient(storage).upload("", RecordedClip(b"x", "video/webm"))


def test_storage_failures_surface_without_retry():
    with pytest.raises(StorageUnavailable):
        UploadClient(BrokenStorage()).upload("user-1", RecordedClip(b"x", "video/webm"))


def test_quota_is_reported_separately(tmp_path):
    storage = LocalObjectStorage(str(tmp_path), max_object_bytes=4)
    with pytest.raises(QuotaExceeded):
        UploadClient(storage).upload("user-1", RecordedClip(b"too large", "video/webm"))


def test_slugify_falls_back_for_unusable_names():
    assert slugify("!!!.webm") == "recording"
    assert build_storage_key("u", "Clip 1", ".webm", 5) == "u/5-clip-1.webm"
    assert build_storage_key("u", "Clip 1", ".webm", 5, "ff00") == "u/5-ff00-clip-1.webm"


def test_local_storage_refuses_paths_outside_its_root(storage):
    with pytest.raises(StorageUnavailable):
        storage.upload("../escape.webm", b"x", "video/webm")
