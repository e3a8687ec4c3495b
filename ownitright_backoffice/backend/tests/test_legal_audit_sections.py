# backend/tests/test_legal_audit_sections.py
from __future__ import annotations

import pytest

from app.domain.legal_sections import MalformedSectionError, load_section
from app.models import LegalAuditReport
from app.schemas import TitleVerificationSection

from conftest import ADMIN_HEADERS, EDITOR_HEADERS


def _report_payload(property_id: int, **overrides) -> dict:
    payload = {
        "property_id": property_id,
        "report_title": "Title due diligence - Tower B",
        "lawyer_name": "K. Ramesh",
        "lawyer_bar_number": "KAR/1234/2009",
        "audit_date": "2026-09-01",
        "report_date": "2026-09-15",
        "status": "completed",
        "overall_score": 82,
        "risk_level": "low",
        "executive_summary": "Title is marketable.",
        "current_ownership": {"owner_name": "Prestige Estates", "previous_owners": ["BDA"]},
        "title_verification": {"title_deed_number": "BNG-2011-4471", "title_clarity": "clear"},
        "tax_compliance": {"khata_status": "a-khata", "survey_number": "112/3"},
    }
    payload.update(overrides)
    return payload


def test_report_round_trips_all_sections(client, make_property):
    prop = make_property()
    r = client.post("/api/legal-audit-reports", json=_report_payload(prop.id), headers=EDITOR_HEADERS)
    assert r.status_code == 201, r.text
    rid = r.json()["id"]

    body = client.get(f"/api/legal-audit-reports/{rid}", headers=EDITOR_HEADERS).json()
    assert body["property_name"] == prop.name
    assert body["audit_date"] == "2026-09-01"
    assert body["current_ownership"]["previous_owners"] == ["BDA"]
    assert body["title_verification"]["title_deed_number"] == "BNG-2011-4471"
    # sections not sent come back with their defaults
    assert body["litigation_history"] == {
        "pending_cases": [],
        "past_disputes": [],
        "court_orders": [],
        "legal_notices": [],
    }
    assert body["statutory_approvals"]["rera_registration"] is False


def test_put_rewrites_the_whole_record(client, make_property):
    prop = make_property()
    rid = client.post("/api/legal-audit-reports", json=_report_payload(prop.id), headers=EDITOR_HEADERS).json()["id"]

    replaced = _report_payload(
        prop.id,
        status="approved",
        current_ownership={"owner_name": "New Owner LLP"},
        title_verification={"title_clarity": "disputed", "title_defects": ["Missing link deed 1998"]},
    )
    r = client.put(f"/api/legal-audit-reports/{rid}", json=replaced, headers=EDITOR_HEADERS)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "approved"
    assert body["current_ownership"]["previous_owners"] == []
    assert body["title_verification"]["title_deed_number"] == ""
    assert body["title_verification"]["title_clarity"] == "disputed"


def test_malformed_stored_section_is_reported_not_swallowed(client, db, make_property):
    prop = make_property()
    rid = client.post("/api/legal-audit-reports", json=_report_payload(prop.id), headers=EDITOR_HEADERS).json()["id"]

    row = db.get(LegalAuditReport, rid)
    row.title_verification_json = "{not json"
    db.commit()

    r = client.get(f"/api/legal-audit-reports/{rid}", headers=EDITOR_HEADERS)
    assert r.status_code == 422
    assert "title_verification" in r.json()["detail"]


def test_list_keeps_reports_with_a_malformed_section(client, db, make_property):
    prop = make_property()
    good = client.post("/api/legal-audit-reports", json=_report_payload(prop.id), headers=EDITOR_HEADERS).json()["id"]
    bad = client.post("/api/legal-audit-reports", json=_report_payload(prop.id), headers=EDITOR_HEADERS).json()["id"]

    row = db.get(LegalAuditReport, bad)
    row.current_ownership_json = "{not json"
    db.commit()

    r = client.get("/api/legal-audit-reports", headers=EDITOR_HEADERS)
    assert r.status_code == 200, r.text
    by_id = {x["id"]: x for x in r.json()}
    assert set(by_id) == {good, bad}

    assert by_id[good]["section_errors"] == {}
    assert by_id[good]["current_ownership"]["owner_name"] == "Prestige Estates"

    assert list(by_id[bad]["section_errors"]) == ["current_ownership"]
    assert "invalid JSON" in by_id[bad]["section_errors"]["current_ownership"]
    assert by_id[bad]["current_ownership"]["owner_name"] == ""
    assert by_id[bad]["title_verification"]["title_deed_number"] == "BNG-2011-4471"

    # the single-report view still refuses to render it
    assert client.get(f"/api/legal-audit-reports/{bad}", headers=EDITOR_HEADERS).status_code == 422


def test_unknown_section_field_is_rejected_on_write(client, make_property):
    prop = make_property()
    payload = _report_payload(prop.id, compliance_status={"fire_noc": True})
    r = client.post("/api/legal-audit-reports", json=payload, headers=EDITOR_HEADERS)
    assert r.status_code == 422


def test_load_section_edge_cases():
    assert load_section("title_verification", None) == TitleVerificationSection()
    assert load_section("title_verification", "  ") == TitleVerificationSection()

    with pytest.raises(MalformedSectionError) as e:
        load_section("title_verification", "[1, 2]")
    assert e.value.section == "title_verification"

    with pytest.raises(MalformedSectionError):
        load_section("title_verification", '{"title_clarity": "maybe"}')


def test_report_stats(client, make_property):
    prop = make_property()
    client.post("/api/legal-audit-reports", json=_report_payload(prop.id, overall_score=80), headers=EDITOR_HEADERS)
    client.post(
        "/api/legal-audit-reports",
        json=_report_payload(prop.id, status="draft", overall_score=45, risk_level="high"),
        headers=EDITOR_HEADERS,
    )
    client.post(
        "/api/legal-audit-reports",
        json=_report_payload(prop.id, status="in-progress", overall_score=60, risk_level="critical"),
        headers=EDITOR_HEADERS,
    )

    stats = client.get("/api/legal-audit-reports-stats", headers=ADMIN_HEADERS).json()
    assert stats == {
        "total_reports": 3,
        "draft_reports": 1,
        "in_progress_reports": 1,
        "completed_reports": 1,
        "approved_reports": 0,
        "high_risk_reports": 2,
        "avg_score": 61.7,
    }
