# backend/tests/test_rera_bulk_verify.py
from __future__ import annotations

from datetime import datetime

import pytest

from app.models import ReraRecord
from app.routers.rera import get_rera_client, get_rera_sleep

from conftest import EDITOR_HEADERS, FakeReraClient, RecordingSleep, registry_project

GOOD = "PRM/KA/RERA/1251/309/AG/2020-21"
BAD = "PRM/KA/RERA/1251/310/AG/2021-22"


@pytest.fixture
def registry(app):
    fake = FakeReraClient(
        projects={GOOD: registry_project("Prestige Lakeside Habitat")},
        errors={BAD: "RERA API request failed: 500 Internal Server Error"},
    )
    sleep = RecordingSleep()
    app.dependency_overrides[get_rera_client] = lambda: fake
    app.dependency_overrides[get_rera_sleep] = lambda: sleep
    yield fake, sleep
    app.dependency_overrides.clear()


def test_bulk_text_is_trimmed_deduped_and_throttled(client, registry):
    fake, sleep = registry
    text = f"  {GOOD}  \n\n{BAD}\n   \n{GOOD}\n"

    r = client.post("/api/rera-data/bulk-verify", json={"text": text}, headers=EDITOR_HEADERS)
    assert r.status_code == 200, r.text
    body = r.json()

    assert fake.calls == [GOOD, BAD]
    assert body["total"] == 2
    assert body["succeeded"] == 1
    assert body["failed"] == 1
    assert "1 succeeded, 1 failed" in body["message"]

    ok, bad = body["results"]
    assert ok["rera_id"] == GOOD and ok["success"] is True
    assert ok["data"]["project_name"] == "Prestige Lakeside Habitat"
    assert ok["data"]["verification_status"] == "verified"
    assert bad["rera_id"] == BAD and bad["success"] is False
    assert "500" in bad["error"]

    # one pause between the two requests, none after the last
    assert sleep.calls == [1.0]


def test_bulk_without_dedupe_keeps_repeats(client, registry):
    fake, _ = registry
    r = client.post(
        "/api/rera-data/bulk-verify",
        json={"rera_ids": [GOOD, " ", GOOD], "dedupe": False},
        headers=EDITOR_HEADERS,
    )
    assert r.status_code == 200
    assert fake.calls == [GOOD, GOOD]
    assert r.json()["total"] == 2


def test_empty_bulk_input_is_rejected(client, registry):
    fake, sleep = registry
    r = client.post("/api/rera-data/bulk-verify", json={"text": "\n  \n"}, headers=EDITOR_HEADERS)
    assert r.status_code == 422
    assert fake.calls == []
    assert sleep.calls == []


def test_failed_sync_marks_existing_record_failed(client, db, registry):
    db.add(
        ReraRecord(
            rera_id=BAD,
            project_name="Brigade Woods",
            verification_status="verified",
            last_verified_at=datetime.utcnow(),
        )
    )
    db.commit()

    client.post("/api/rera-data/bulk-verify", json={"rera_ids": [BAD]}, headers=EDITOR_HEADERS)

    db.expire_all()
    row = db.query(ReraRecord).filter(ReraRecord.rera_id == BAD).one()
    assert row.verification_status == "failed"
    assert "500" in row.sync_failure_reason
    assert row.last_sync_at is not None
    # unknown ids never get a record
    assert db.query(ReraRecord).count() == 1
