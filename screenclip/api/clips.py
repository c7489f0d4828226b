"""Owner-facing clip API.

  POST   /api/clips                      upload a recorded clip, create its record
  GET    /api/clips                      the caller's clips, newest first
  GET    /api/clips/{id}                 one clip
  PATCH  /api/clips/{id}                 rename / change visibility
  DELETE /api/clips/{id}                 delete record, then object
  POST   /api/clips/{id}/share-link      public or signed link (never for private)
  GET    /api/clips/{id}/embed-code      iframe snippet (never for private)
  GET    /api/embed/{id}                 public playback info for the embed page
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from screenclip.auth.dependencies import get_current_user
from screenclip.auth.supabase_auth import AuthUser
from screenclip.capture.models import MIME_PREFERENCES, RecordedClip, base_content_type
from screenclip.clips.models import ClipRecord, ClipView, Visibility
from screenclip.errors import NotFound, QuotaExceeded, ValidationError
from screenclip.services import Services, get_services
from screenclip.sharing import embed_code, share_link

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_ACCEPTED_TYPES = {base_content_type(t) for t in MIME_PREFERENCES}
_CHUNK_BYTES = 1024 * 1024


class ClipPatch(BaseModel):
    title: Optional[str] = None
    visibility: Optional[Visibility] = None

    model_config = {"extra": "forbid"}


def _owned(services: Services, clip_id: str, user: AuthUser) -> ClipRecord:
    store, _ = services.require_backend()
    record = store.get(clip_id)
    # Same answer for "missing" and "not yours" so ids cannot be enumerated.
    if record.owner_id != user.id:
        raise NotFound("Video not found or you do not have permission to access it.")
    return record


@router.post("/clips", status_code=201)
async def upload_clip(
    file: UploadFile = File(...),
    title: str = Form(...),
    visibility: Visibility = Form(Visibility.PRIVATE),
    notify: bool = Form(False),
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Run the upload workflow for a clip recorded in the browser."""
    content_type = base_content_type(file.content_type or "")
    if content_type not in _ACCEPTED_TYPES:
        raise ValidationError(f"Unsupported recording type '{file.content_type}'")

    limit = services.settings.max_upload_bytes
    chunks = []
    total = 0
    while True:
        chunk = await file.read(_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise QuotaExceeded(f"File too large (max {limit // (1024 * 1024)} MB)")
        chunks.append(chunk)

    if total == 0:
        raise ValidationError("Recording is empty")

    clip = RecordedClip(data=b"".join(chunks), mime_type=file.content_type)
    workflow = services.workflow(notify=notify and bool(user.email))
    result = await run_in_threadpool(
        workflow.run,
        owner_id=user.id,
        clip=clip,
        title=title,
        visibility=visibility,
        owner_email=user.email if notify else None,
        suggested_name=file.filename or title,
        transcode=services.settings.transcode_enabled,
    )

    return {
        "clip": ClipView.from_record(result.record).model_dump(mode="json"),
        "storage_path": result.stored.path,
        "notified": result.notification is not None,
    }


@router.get("/clips")
def list_clips(user: AuthUser = Depends(get_current_user), services: Services = Depends(get_services)):
    store, _ = services.require_backend()
    return [ClipView.from_record(r).model_dump(mode="json") for r in store.list_for_owner(user.id)]


@router.get("/clips/{clip_id}")
def get_clip(clip_id: str, user: AuthUser = Depends(get_current_user),
             services: Services = Depends(get_services)):
    record = _owned(services, clip_id, user)
    return ClipView.from_record(record).model_dump(mode="json")


@router.patch("/clips/{clip_id}")
def update_clip(clip_id: str, patch: ClipPatch, user: AuthUser = Depends(get_current_user),
                services: Services = Depends(get_services)):
    """Owners may only rename and change visibility; status is server-managed."""
    store, _ = services.require_backend()
    changes = patch.model_dump(exclude_none=True)
    record = store.update(clip_id, changes, actor_id=user.id)
    return ClipView.from_record(record).model_dump(mode="json")


@router.delete("/clips/{clip_id}")
def delete_clip(clip_id: str, user: AuthUser = Depends(get_current_user),
                services: Services = Depends(get_services)):
    record = services.workflow().delete_clip(clip_id, actor_id=user.id)
    return {"deleted": record.id}


@router.post("/clips/{clip_id}/share-link")
def create_share_link(clip_id: str, user: AuthUser = Depends(get_current_user),
                      services: Services = Depends(get_services)):
    record = _owned(services, clip_id, user)
    ttl = services.settings.share_link_ttl_seconds
    url = share_link(record, services.storage, ttl_seconds=ttl)
    return {
        "url": url,
        "visibility": record.visibility.value,
        "expires_in": ttl if record.visibility == Visibility.UNLISTED else None,
    }


@router.get("/clips/{clip_id}/embed-code")
def get_embed_code(clip_id: str, user: AuthUser = Depends(get_current_user),
                   services: Services = Depends(get_services)):
    record = _owned(services, clip_id, user)
    return {"embed_code": embed_code(record, services.settings.public_site_url)}


@router.get("/embed/{clip_id}")
def embed_view(clip_id: str, services: Services = Depends(get_services)):
    """Playback info for the public embed page. Private clips are refused."""
    store, storage = services.require_backend()
    record = store.get(clip_id)
    url = share_link(record, storage, ttl_seconds=services.settings.share_link_ttl_seconds)
    return {"id": record.id, "title": record.title, "playback_url": url}
