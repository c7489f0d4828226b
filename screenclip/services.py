"""Process-wide service container.

Built once in the FastAPI lifespan from ``Settings`` and stored on
``app.state``. Routes get it through ``Depends(get_services)``.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from fastapi import Request

from screenclip.auth.supabase_auth import LocalAuthenticator, SupabaseAuthenticator
from screenclip.clips.store import ClipStore, InMemoryClipStore
from screenclip.clips.supabase_store import SupabaseClipStore
from screenclip.config import Settings
from screenclip.db.supabase_client import build_supabase
from screenclip.errors import ConfigurationError
from screenclip.notify.email import (
    EmailSender,
    LogEmailSender,
    ResendEmailSender,
    SendGridEmailSender,
)
from screenclip.notify.transcode import Transcoder, ffmpeg_available
from screenclip.notify.trigger import NotificationTrigger
from screenclip.storage.base import ObjectStorage
from screenclip.storage.local import LocalObjectStorage
from screenclip.storage.supabase_storage import SupabaseObjectStorage
from screenclip.upload.client import UploadClient
from screenclip.workflow import UploadWorkflow

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: Optional[ClipStore]
    storage: Optional[ObjectStorage]
    email: Optional[EmailSender]
    transcoder: Optional[Transcoder] = None
    auth: Optional[Union[SupabaseAuthenticator, LocalAuthenticator]] = None

    def notification_config_errors(self) -> List[str]:
        """Human-readable reasons the notify route cannot run, in check order."""
        errors = []
        if self.store is None or self.storage is None:
            errors.append("Supabase configuration missing")
        if self.email is None:
            errors.append("Email service configuration missing")
        if not self.settings.email_from and not isinstance(self.email, LogEmailSender):
            errors.append("Email sender configuration missing")
        if not self.settings.public_site_url:
            errors.append("Site URL configuration missing")
        return errors

    def require_backend(self):
        if self.store is None or self.storage is None:
            raise ConfigurationError("Supabase configuration missing")
        return self.store, self.storage

    def trigger(self) -> NotificationTrigger:
        problems = self.notification_config_errors()
        if problems:
            raise ConfigurationError(problems[0])
        return NotificationTrigger(
            store=self.store,
            email=self.email,
            storage=self.storage,
            transcoder=self.transcoder,
            link_ttl_seconds=self.settings.share_link_ttl_seconds,
        )

    def workflow(self, notify: bool = False) -> UploadWorkflow:
        store, storage = self.require_backend()
        return UploadWorkflow(
            uploader=UploadClient(storage),
            store=store,
            storage=storage,
            trigger=self.trigger() if notify else None,
        )


def build_email_sender(settings: Settings) -> Optional[EmailSender]:
    provider = settings.email_provider.lower()
    if provider == "log":
        return LogEmailSender()
    if provider not in ("resend", "sendgrid"):
        logger.error("Unknown EMAIL_PROVIDER '%s'; email is disabled", settings.email_provider)
        return None
    if not settings.email_api_key:
        return None
    if provider == "sendgrid":
        return SendGridEmailSender(
            settings.sendgrid_api_key, settings.email_from, settings.email_timeout_seconds
        )
    return ResendEmailSender(
        settings.resend_api_key, settings.email_from, settings.email_timeout_seconds
    )


def build_services(settings: Settings) -> Services:
    """Wire every adapter from settings. Missing config leaves a slot empty."""
    store = storage = auth = None

    if settings.storage_backend == "local":
        store = InMemoryClipStore()
        storage = LocalObjectStorage(
            settings.local_storage_dir,
            public_base_url=settings.local_public_base_url,
            max_object_bytes=settings.max_upload_bytes,
        )
        auth = LocalAuthenticator()
    elif settings.supabase_configured:
        client = build_supabase(settings)
        store = SupabaseClipStore(client, table=settings.videos_table)
        storage = SupabaseObjectStorage(client, bucket=settings.storage_bucket)
        auth = SupabaseAuthenticator(client)
    else:
        logger.warning("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not set; clip routes will return 500")

    transcoder = None
    if settings.transcode_enabled and storage is not None:
        if ffmpeg_available():
            transcoder = Transcoder(
                storage,
                video_codec=settings.transcode_video_codec,
                audio_codec=settings.transcode_audio_codec,
                crf=settings.transcode_crf,
            )
        else:
            logger.warning("TRANSCODE_ENABLED but ffmpeg is not on PATH; clips will not be transcoded")

    return Services(
        settings=settings,
        store=store,
        storage=storage,
        email=build_email_sender(settings),
        transcoder=transcoder,
        auth=auth,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
