from fastapi.testclient import TestClient

from screenclip.clips.models import ProcessingStatus
from screenclip.main import create_app
from screenclip.services import Services


def _body(video_id, **overrides):
    body = {"video_id": video_id, "user_email": "a@example.com", "file_url": "https://store/x.webm"}
    body.update(overrides)
    return body


def test_success(client, store, email, stored_clip):
    response = client.post("/api/send-upload-email", json=_body(stored_clip.id))

    assert response.status_code == 200
    assert response.json() == {"message": "Email sent successfully"}
    assert store.get(stored_clip.id).processing_status == ProcessingStatus.COMPLETED
    assert len(email.sent) == 1
    assert email.sent[0].to == "a@example.com"
    assert "https://store/x.webm" in email.sent[0].html


def test_file_path_is_resolved_to_a_viewable_link(client, email, stored_clip):
    body = _body(stored_clip.id, file_url=None, file_path=stored_clip.storage_reference)

    response = client.post("/api/send-upload-email", json=body)

    assert response.status_code == 200
    assert f"https://files.test/{stored_clip.storage_reference}?expires=" in email.sent[0].html


def test_missing_fields_have_no_side_effects(client, store, email, stored_clip):
    for missing in ("video_id", "user_email"):
        body = _body(stored_clip.id)
        del body[missing]
        response = client.post("/api/send-upload-email", json=body)

        assert response.status_code == 400
        assert "error" in response.json()

    response = client.post("/api/send-upload-email", json=_body(stored_clip.id, file_url=None))
    assert response.status_code == 400

    assert store.get(stored_clip.id).processing_status == ProcessingStatus.PENDING
    assert email.sent == []


def test_malformed_json_is_a_client_error(client):
    response = client.post(
        "/api/send-upload-email", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert "error" in response.json()


def test_unknown_video_is_500_with_no_email(client, email):
    response = client.post("/api/send-upload-email", json=_body("v-unknown"))

    assert response.status_code == 500
    assert response.json()["error"].startswith("Failed to update video status")
    assert email.sent == []


def test_email_failure_is_500_but_status_stays_completed(client, store, failing_email, stored_clip):
    response = client.post("/api/send-upload-email", json=_body(stored_clip.id))

    assert response.status_code == 500
    assert "error" in response.json()
    assert store.get(stored_clip.id).processing_status == ProcessingStatus.COMPLETED


def test_missing_configuration_is_500_not_400(settings, store, storage, stored_clip):
    cases = [
        (dict(store=None, storage=None, email=object()), {}, "Supabase configuration missing"),
        (dict(store=store, storage=storage, email=None), {}, "Email service configuration missing"),
        (dict(store=store, storage=storage, email=object()), {"email_from": ""},
         "Email sender configuration missing"),
        (dict(store=store, storage=storage, email=object()), {"public_site_url": ""},
         "Site URL configuration missing"),
    ]
    for wiring, setting_changes, message in cases:
        services = Services(settings=settings.model_copy(update=setting_changes), **wiring)
        client = TestClient(create_app(services=services))

        response = client.post("/api/send-upload-email", json=_body(stored_clip.id))

        assert response.status_code == 500
        assert response.json() == {"error": message}

    assert store.get(stored_clip.id).processing_status == ProcessingStatus.PENDING


def test_process_video_function(client, store, email, stored_clip):
    response = client.post("/functions/v1/process-video", json=_body(stored_clip.id))

    assert response.status_code == 200
    assert response.json() == {"message": "Video processed and email sent."}
    assert store.get(stored_clip.id).processing_status == ProcessingStatus.COMPLETED
    assert len(email.sent) == 1


def test_process_video_requires_file_url(client, email, stored_clip):
    response = client.post("/functions/v1/process-video", json=_body(stored_clip.id, file_url=None))
    assert response.status_code == 400
    assert email.sent == []
