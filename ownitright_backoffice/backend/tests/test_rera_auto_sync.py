# backend/tests/test_rera_auto_sync.py
from __future__ import annotations

from datetime import datetime, timedelta

from app.models import Property, ReraRecord
from app.routers.rera import get_rera_client, get_rera_sleep
from app.services.rera_sync import ReraSyncService

from conftest import ADMIN_HEADERS, EDITOR_HEADERS, FakeReraClient, RecordingSleep, registry_project


def _record(db, rera_id: str, *, status: str = "verified", age_days: int = 0, **kw) -> ReraRecord:
    row = ReraRecord(
        rera_id=rera_id,
        verification_status=status,
        last_verified_at=datetime.utcnow() - timedelta(days=age_days),
        **kw,
    )
    db.add(row)
    db.commit()
    return row


def test_auto_sync_targets(db, make_property):
    unapproved = make_property(name="Unapproved", rera_number="RERA-1", rera_approved=False)
    fresh = make_property(name="Fresh", rera_number="RERA-2", rera_approved=True)
    no_record = make_property(name="No record", rera_number="RERA-3", rera_approved=True)
    stale = make_property(name="Stale", rera_number="RERA-4", rera_approved=True)
    failed = make_property(name="Failed", rera_number="RERA-5", rera_approved=True)
    make_property(name="No rera number")
    make_property(name="Blank rera number", rera_number="   ")

    _record(db, "RERA-2")
    _record(db, "RERA-4", age_days=45)
    _record(db, "RERA-5", status="failed")

    svc = ReraSyncService(db, client=FakeReraClient(), sleep=RecordingSleep())
    ids = [p.id for p in svc.auto_sync_targets()]
    assert ids == [unapproved.id, no_record.id, stale.id, failed.id]
    assert fresh.id not in ids


def test_auto_sync_records_per_item_outcomes(db, make_property):
    ok = make_property(name="Prestige Lakeside Habitat", rera_number="RERA-OK")
    make_property(name="Brigade Woods", rera_number="RERA-BAD")

    fake = FakeReraClient(
        projects={"RERA-OK": registry_project("Prestige Lakeside Habitat")},
        errors={"RERA-BAD": "RERA API request failed: 503 Service Unavailable"},
    )
    sleep = RecordingSleep()
    result = ReraSyncService(db, client=fake, sleep=sleep, delay_seconds=1.0).auto_sync()

    assert (result.total, result.succeeded, result.failed) == (2, 1, 1)
    assert result.message.startswith("Auto-sync completed")
    assert [i.property_name for i in result.items] == ["Prestige Lakeside Habitat", "Brigade Woods"]
    assert result.items[1].error.endswith("503 Service Unavailable")
    assert sleep.calls == [1.0]

    db.expire_all()
    p = db.get(Property, ok.id)
    assert p.rera_approved is True
    rec = db.query(ReraRecord).filter(ReraRecord.rera_id == "RERA-OK").one()
    assert rec.property_id == ok.id


def test_auto_sync_endpoint_runs_inline_and_needs_admin(app, client, make_property):
    make_property(rera_number="RERA-OK")
    app.dependency_overrides[get_rera_client] = lambda: FakeReraClient(
        projects={"RERA-OK": registry_project("Prestige Lakeside Habitat")}
    )
    app.dependency_overrides[get_rera_sleep] = lambda: RecordingSleep()
    try:
        assert client.post("/api/rera-data/auto-sync", headers=EDITOR_HEADERS).status_code == 403

        r = client.post("/api/rera-data/auto-sync", headers=ADMIN_HEADERS)
        assert r.status_code == 200
        body = r.json()
        assert body["queued"] is False
        assert body["summary"]["succeeded"] == 1
    finally:
        app.dependency_overrides.clear()


def test_mark_outdated_and_status_summary(client, db):
    _record(db, "R-1", compliance_status="active", project_status="under-construction")
    _record(db, "R-2", age_days=31, compliance_status="non-compliant", project_status="completed")
    _record(db, "R-3", status="failed", compliance_status="suspended", project_status="delayed")
    _record(db, "R-4", status="pending")

    r = client.post("/api/rera-data/mark-outdated", headers=EDITOR_HEADERS)
    assert r.json()["marked"] == 1

    summary = client.get("/api/rera-data/status-summary", headers=EDITOR_HEADERS).json()
    assert summary["total"] == 4
    assert summary["verified"] == 1
    assert summary["outdated"] == 1
    assert summary["failed"] == 1
    assert summary["pending"] == 1
    assert summary["by_compliance_status"] == {"active": 2, "non_compliant": 1, "suspended": 1, "cancelled": 0}
    assert summary["by_project_status"]["under_construction"] == 2
    assert summary["by_project_status"]["completed"] == 1

    filtered = client.get("/api/rera-data", params={"verification_status": "outdated"}, headers=EDITOR_HEADERS).json()
    assert [x["rera_id"] for x in filtered] == ["R-2"]
