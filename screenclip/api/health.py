"""Health check endpoint."""

import platform
import sys

from fastapi import APIRouter, Depends

from screenclip.notify.transcode import ffmpeg_available
from screenclip.services import Services, get_services

router = APIRouter()


@router.get("/health")
async def health_check(services: Services = Depends(get_services)):
    """Service health and which backends are wired."""
    settings = services.settings
    return {
        "status": "healthy",
        "storage_backend": settings.storage_backend,
        "store_ready": services.store is not None,
        "email_provider": settings.email_provider if services.email is not None else None,
        "transcoding": services.transcoder is not None,
        "ffmpeg_available": ffmpeg_available(),
        "notification_config_errors": services.notification_config_errors(),
        "python_version": sys.version,
        "platform": platform.platform(),
    }
