# backend/tests/test_admin_roles.py
from __future__ import annotations

from app.auth import issue_token
from app.models import AdminUser

from conftest import ADMIN_HEADERS, EDITOR_HEADERS, VIEWER_HEADERS

NEW_PROPERTY = {
    "name": "Godrej Park Retreat",
    "type": "plot",
    "developer": "Godrej Properties",
    "status": "active",
    "area": "Sarjapur Road",
    "zone": "south",
    "address": "Sarjapur Road, South Bengaluru, Karnataka",
    "price": 95,
}


def test_missing_identity_is_401(client):
    assert client.get("/api/properties").status_code == 401


def test_viewer_reads_but_cannot_write(client):
    assert client.get("/api/properties", headers=VIEWER_HEADERS).status_code == 200
    assert client.post("/api/properties", json=NEW_PROPERTY, headers=VIEWER_HEADERS).status_code == 403


def test_editor_writes_but_cannot_delete(client):
    r = client.post("/api/properties", json=NEW_PROPERTY, headers=EDITOR_HEADERS)
    assert r.status_code == 200
    pid = r.json()["id"]

    assert client.delete(f"/api/properties/{pid}", headers=EDITOR_HEADERS).status_code == 403
    assert client.delete(f"/api/properties/{pid}", headers=ADMIN_HEADERS).status_code == 200


def test_bearer_token_identifies_the_admin(client, db):
    user = AdminUser(email="ops@ownitright.test", display_name="ops", role="editor")
    db.add(user)
    db.commit()
    db.refresh(user)

    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {issue_token(user)}"})
    assert r.status_code == 200
    assert r.json() == {"user_id": user.id, "email": "ops@ownitright.test", "role": "editor"}


def test_tampered_token_is_rejected(client, db):
    user = AdminUser(email="ops@ownitright.test", display_name="ops", role="admin")
    db.add(user)
    db.commit()
    db.refresh(user)

    token = issue_token(user)
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token[:-2]}xx"})
    assert r.status_code == 401
