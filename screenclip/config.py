"""Application configuration via environment variables."""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_anon_key: str = ""

    # Metadata store / object storage
    storage_backend: str = "supabase"  # "supabase" or "local"
    storage_bucket: str = "videos"
    videos_table: str = "videos"
    local_storage_dir: str = "./data/clips"
    local_public_base_url: str = "http://localhost:8000/files"
    max_upload_bytes: int = 500 * 1024 * 1024

    # Email
    email_provider: str = "resend"  # "resend", "sendgrid" or "log"
    resend_api_key: str = ""
    sendgrid_api_key: str = ""
    email_from: str = ""
    email_timeout_seconds: float = 10.0

    # Links
    public_site_url: str = ""
    share_link_ttl_seconds: int = 3600

    # Transcoding (only when ffmpeg is on PATH)
    transcode_enabled: bool = False
    transcode_video_codec: str = "libx264"
    transcode_audio_codec: str = "aac"
    transcode_crf: int = 28

    # Server
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000"]
    port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def email_api_key(self) -> str:
        if self.email_provider == "sendgrid":
            return self.sendgrid_api_key
        if self.email_provider == "resend":
            return self.resend_api_key
        return ""
