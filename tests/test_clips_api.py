from fastapi.testclient import TestClient

from screenclip.auth.dependencies import get_current_user
from screenclip.auth.supabase_auth import AuthUser
from screenclip.clips.models import ProcessingStatus
from screenclip.main import create_app
from screenclip.services import build_services

OTHER = AuthUser(id="user-2", email="b@example.com")


def _upload(client, title="Demo", visibility="private", notify=False, content_type="video/webm"):
    return client.post(
        "/api/clips",
        files={"file": ("recording.webm", b"screen-bytes", content_type)},
        data={"title": title, "visibility": visibility, "notify": str(notify).lower()},
    )


def test_upload_creates_record_after_object(client, store, storage, email):
    response = _upload(client)

    assert response.status_code == 201
    body = response.json()
    assert body["storage_path"].startswith("user-1/")
    assert body["clip"]["processing_status"] == "pending"
    assert storage.download(body["storage_path"]) == b"screen-bytes"
    assert store.get(body["clip"]["id"]).storage_reference == body["storage_path"]
    assert email.sent == []


def test_upload_with_notify_runs_whole_workflow(client, store, email):
    response = _upload(client, notify=True)

    assert response.status_code == 201
    body = response.json()
    assert body["notified"] is True
    assert store.get(body["clip"]["id"]).processing_status == ProcessingStatus.COMPLETED
    assert [m.to for m in email.sent] == ["a@example.com"]


def test_upload_rejects_non_video(client, store):
    response = _upload(client, content_type="image/png")

    assert response.status_code == 400
    assert store.list_for_owner("user-1") == []


def test_upload_too_large(client, services, store):
    services.settings.max_upload_bytes = 4

    response = _upload(client)

    assert response.status_code == 413
    assert store.list_for_owner("user-1") == []


def test_list_and_rename(client, stored_clip):
    response = client.patch(f"/api/clips/{stored_clip.id}", json={"title": "Renamed"})
    assert response.status_code == 200

    listed = client.get("/api/clips").json()
    assert [c["title"] for c in listed] == ["Renamed"]


def test_owner_cannot_patch_status(client, stored_clip):
    response = client.patch(f"/api/clips/{stored_clip.id}", json={"processing_status": "completed"})
    assert response.status_code == 400


def test_private_clip_has_no_share_link_or_embed(client, stored_clip):
    response = client.post(f"/api/clips/{stored_clip.id}/share-link")
    assert response.status_code == 403
    assert "private" in response.json()["error"]

    assert client.get(f"/api/clips/{stored_clip.id}/embed-code").status_code == 403
    assert client.get(f"/api/embed/{stored_clip.id}").status_code == 403


def test_public_and_unlisted_share_links(client, stored_clip):
    client.patch(f"/api/clips/{stored_clip.id}", json={"visibility": "public"})
    public = client.post(f"/api/clips/{stored_clip.id}/share-link").json()
    assert public["url"] == f"https://files.test/{stored_clip.storage_reference}"
    assert public["expires_in"] is None

    client.patch(f"/api/clips/{stored_clip.id}", json={"visibility": "unlisted"})
    unlisted = client.post(f"/api/clips/{stored_clip.id}/share-link").json()
    assert "?expires=" in unlisted["url"]
    assert unlisted["expires_in"] == 3600


def test_embed_code_and_view(client, stored_clip):
    client.patch(f"/api/clips/{stored_clip.id}", json={"visibility": "public"})

    snippet = client.get(f"/api/clips/{stored_clip.id}/embed-code").json()["embed_code"]
    assert f'src="https://clips.example.com/embed/{stored_clip.id}"' in snippet
    assert 'width="640" height="360"' in snippet

    view = client.get(f"/api/embed/{stored_clip.id}").json()
    assert view["title"] == "Demo"


def test_other_users_cannot_see_or_touch_clip(app, client, stored_clip):
    app.dependency_overrides[get_current_user] = lambda: OTHER

    assert client.get(f"/api/clips/{stored_clip.id}").status_code == 404
    assert client.patch(f"/api/clips/{stored_clip.id}", json={"title": "x"}).status_code == 403
    assert client.delete(f"/api/clips/{stored_clip.id}").status_code == 403
    assert client.get("/api/clips").json() == []


def test_delete_removes_record_and_object(client, store, storage, stored_clip):
    response = client.delete(f"/api/clips/{stored_clip.id}")

    assert response.status_code == 200
    assert store.list_for_owner("user-1") == []
    assert not storage.exists(stored_clip.storage_reference)


def test_missing_token_is_401(services):
    client = TestClient(create_app(services=services))
    response = client.get("/api/clips")

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication is not configured"}


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["notification_config_errors"] == []


def test_local_backend_serves_clip_routes_and_files(settings):
    settings.local_public_base_url = "http://localhost:8000/files"
    settings.email_provider = "log"
    local = TestClient(create_app(services=build_services(settings)))
    headers = {"Authorization": "Bearer dev-user"}

    assert local.get("/api/clips").status_code == 401

    response = local.post(
        "/api/clips",
        files={"file": ("recording.webm", b"screen-bytes", "video/webm")},
        data={"title": "Local demo", "visibility": "public"},
        headers=headers,
    )
    assert response.status_code == 201
    path = response.json()["storage_path"]
    assert path.startswith("dev-user/")

    [clip] = local.get("/api/clips", headers=headers).json()
    assert clip["title"] == "Local demo"

    link = local.post(f"/api/clips/{clip['id']}/share-link", headers=headers).json()["url"]
    assert link == f"http://localhost:8000/files/{path}"
    assert local.get(f"/files/{path}").content == b"screen-bytes"
