from __future__ import annotations

from fastapi.testclient import TestClient

from app.main import app


client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert isinstance(generated, str)
    assert len(generated) > 0

    duration = resp.headers.get("X-Request-Duration-ms")
    assert duration is not None


def test_request_id_is_echoed_in_error_body():
    resp = client.get("/api/send", headers={"X-Request-ID": "req-405"})

    assert resp.status_code == 405
    assert resp.headers.get("X-Request-ID") == "req-405"
    assert resp.json()["request_id"] == "req-405"


def test_default_app_without_secrets_reports_misconfiguration():
    resp = client.post(
        "/api/send",
        json={"message": "hello"},
        headers={"X-Forwarded-For": "198.51.100.250"},
    )

    assert resp.status_code == 500
    assert resp.json()["error"] == "Server not configured"
