import pytest
from fastapi.testclient import TestClient

from screenclip.auth.dependencies import get_current_user
from screenclip.auth.supabase_auth import AuthUser
from screenclip.clips.store import InMemoryClipStore
from screenclip.config import Settings
from screenclip.errors import EmailDispatchFailed
from screenclip.main import create_app
from screenclip.notify.email import EmailSender
from screenclip.services import Services
from screenclip.storage.local import LocalObjectStorage

OWNER = AuthUser(id="user-1", email="a@example.com")


class RecordingEmailSender(EmailSender):
    def __init__(self):
        self.sent = []
        self.fail_with = None

    def send(self, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        storage_backend="local",
        local_storage_dir=str(tmp_path / "objects"),
        local_public_base_url="https://files.test",
        email_provider="resend",
        resend_api_key="re_test",
        email_from="Screen Recorder <noreply@example.com>",
        public_site_url="https://clips.example.com",
    )


@pytest.fixture
def store():
    return InMemoryClipStore()


@pytest.fixture
def storage(settings):
    return LocalObjectStorage(settings.local_storage_dir, public_base_url=settings.local_public_base_url)


@pytest.fixture
def email():
    return RecordingEmailSender()


@pytest.fixture
def failing_email(email):
    email.fail_with = EmailDispatchFailed("Email provider returned 500")
    return email


@pytest.fixture
def services(settings, store, storage, email):
    return Services(settings=settings, store=store, storage=storage, email=email)


@pytest.fixture
def app(services):
    app = create_app(services=services)
    app.dependency_overrides[get_current_user] = lambda: OWNER
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def stored_clip(store, storage):
    """A pending clip whose bytes are already in storage."""
    storage.upload("user-1/1700000000000-demo.webm", b"webm-bytes", "video/webm")
    return store.create("user-1", "Demo", "user-1/1700000000000-demo.webm")
