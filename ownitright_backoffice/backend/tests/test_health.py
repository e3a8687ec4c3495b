# backend/tests/test_health.py
from __future__ import annotations


def test_health_reports_registry_configuration(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["rera_registry_configured"] is False
    assert r.headers.get("X-Request-ID")


def test_request_id_is_echoed(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
