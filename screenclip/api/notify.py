"""Post-upload notification endpoints.

  POST /api/send-upload-email          mark completed, email the owner
  POST /functions/v1/process-video     same, with optional transcode first

Both check request fields before configuration and configuration before
touching the store, so a 400 never has side effects.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from screenclip.errors import ScreenClipError, ValidationError
from screenclip.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()
functions_router = APIRouter(prefix="/functions/v1")


class SendUploadEmailRequest(BaseModel):
    video_id: Optional[str] = None
    user_email: Optional[str] = None
    file_url: Optional[str] = None
    file_path: Optional[str] = None

    model_config = {"extra": "ignore"}


class ProcessVideoRequest(BaseModel):
    video_id: Optional[str] = None
    user_email: Optional[str] = None
    file_url: Optional[str] = None

    model_config = {"extra": "ignore"}


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


def _run_trigger(services: Services, video_id: str, user_email: str,
                 reference: str, transcode: bool) -> Optional[JSONResponse]:
    problems = services.notification_config_errors()
    if problems:
        logger.error("Notification configuration incomplete: %s", "; ".join(problems))
        return _error(500, problems[0])

    try:
        services.trigger().trigger(video_id, user_email, reference, transcode=transcode)
    except ScreenClipError as e:
        logger.error("Notification for video %s failed: %s", video_id, e.message)
        # Only request validation is the caller's fault; everything else is a 500.
        return _error(400 if isinstance(e, ValidationError) else 500, e.message)
    return None


@router.post("/api/send-upload-email")
def send_upload_email(payload: SendUploadEmailRequest, services: Services = Depends(get_services)):
    """Mark a video completed and email its owner a link to it."""
    reference = payload.file_url or payload.file_path
    if not payload.video_id or not payload.user_email or not reference:
        logger.error(
            "Missing required fields: video_id=%s user_email=%s file=%s",
            bool(payload.video_id), bool(payload.user_email), bool(reference),
        )
        return _error(400, "Missing video_id, user_email, or file_url/file_path")

    failure = _run_trigger(services, payload.video_id, payload.user_email, reference, transcode=False)
    if failure is not None:
        return failure
    return {"message": "Email sent successfully"}


@functions_router.post("/process-video")
def process_video(payload: ProcessVideoRequest, services: Services = Depends(get_services)):
    """Serverless-style processing hook: optional transcode, then notify."""
    if not payload.video_id or not payload.user_email or not payload.file_url:
        return _error(400, "Missing video_id, user_email, or file_url")

    failure = _run_trigger(
        services,
        payload.video_id,
        payload.user_email,
        payload.file_url,
        transcode=services.settings.transcode_enabled,
    )
    if failure is not None:
        return failure
    return {"message": "Video processed and email sent."}
