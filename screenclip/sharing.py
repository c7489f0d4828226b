"""Share links and embed snippets, gated on clip visibility."""

from screenclip.clips.models import ClipRecord, Visibility
from screenclip.errors import ConfigurationError, PrivateClip
from screenclip.storage.base import ObjectStorage


def share_link(record: ClipRecord, storage: ObjectStorage, ttl_seconds: int = 3600) -> str:
    """Public clips get a durable URL, unlisted clips a signed one, private clips nothing."""
    if record.visibility == Visibility.PRIVATE:
        raise PrivateClip("This video is private. Make it public or unlisted to share.")
    if record.visibility == Visibility.UNLISTED:
        return storage.signed_url(record.storage_reference, ttl_seconds)
    return storage.public_url(record.storage_reference)


def embed_url(record: ClipRecord, site_url: str) -> str:
    if not site_url:
        raise ConfigurationError("Site URL configuration missing")
    return f"{site_url.rstrip('/')}/embed/{record.id}"


def embed_code(record: ClipRecord, site_url: str, width: int = 640, height: int = 360) -> str:
    if record.visibility == Visibility.PRIVATE:
        raise PrivateClip("This video is private. Make it public or unlisted to embed.")
    return (
        f'<iframe src="{embed_url(record, site_url)}" width="{width}" height="{height}" '
        'frameborder="0" allowfullscreen></iframe>'
    )
