"""Tests for GET /health and the shared error envelope on unknown routes."""

from fastapi.testclient import TestClient


def test_health_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["components"] == {"app": "ok", "database": "ok"}
    assert data["version"]


def test_health_degraded_when_store_unreachable(client: TestClient, stores, monkeypatch) -> None:
    _credential_store, catalog = stores
    monkeypatch.setattr(catalog, "ping", lambda: False)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["components"]["database"] == "error"


def test_health_needs_no_session(client: TestClient) -> None:
    client.cookies.set("token", "garbage")
    assert client.get("/health").status_code == 200


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    resp = client.get("/no-such-route")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "http_404"
