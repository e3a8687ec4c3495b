# backend/tests/test_property_score_api.py
from __future__ import annotations

import logging

from app.domain.scoring import ALL_FIELD_KEYS, FIELD_BY_KEY
from app.models import Property, PropertyScore

from conftest import ADMIN_HEADERS, EDITOR_HEADERS

SCORES = {
    "transport_connectivity": 7,
    "infrastructure_development": 6,
    "social_infrastructure": 4,
    "employment_hubs": 4,
    "basic_amenities": 7,
    "lifestyle_amenities": 6,
    "modern_features": 4,
    "rera_compliance": 8,
    "title_clarity": 7,
    "approvals": 5,
    "price_competitiveness": 6,
    "appreciation_potential": 3,
    "rental_yield": 2,
    "track_record": 4,
    "financial_stability": 3,
    "customer_satisfaction": 2,
    "structural_quality": 4,
    "finishing_standards": 2,
    "maintenance_standards": 2,
}


def test_create_score_computes_totals_grade_and_legacy_fields(client, db, make_property):
    prop = make_property()

    r = client.post(
        "/api/property-scores",
        json={
            "property_id": prop.id,
            **SCORES,
            "key_strengths": ["Metro in 2 km", "  "],
            "field_notes": {"title_clarity": "Clean 30-year chain"},
        },
        headers=EDITOR_HEADERS,
    )
    assert r.status_code == 201, r.text
    body = r.json()

    assert body["location_score_total"] == 21
    assert body["amenities_score_total"] == 17
    assert body["legal_score_total"] == 20
    assert body["value_score_total"] == 11
    assert body["developer_score_total"] == 9
    assert body["construction_score_total"] == 8
    assert body["overall_score_total"] == 86
    assert body["overall_grade"] == "A"
    assert body["key_strengths"] == ["Metro in 2 km"]
    assert body["field_notes"] == {"title_clarity": "Clean 30-year chain"}
    assert body["scored_by"] == EDITOR_HEADERS["X-Admin-Email"]

    db.expire_all()
    p = db.get(Property, prop.id)
    assert (p.location_score, p.amenities_score, p.value_score) == (4, 4, 4)
    assert p.overall_score == "4.3"


def test_second_score_for_same_property_conflicts(client, make_property):
    prop = make_property()
    r1 = client.post("/api/property-scores", json={"property_id": prop.id}, headers=EDITOR_HEADERS)
    assert r1.status_code == 201

    r2 = client.post("/api/property-scores", json={"property_id": prop.id, **SCORES}, headers=EDITOR_HEADERS)
    assert r2.status_code == 409


def test_out_of_range_sub_score_is_rejected(client, make_property):
    prop = make_property()
    r = client.post(
        "/api/property-scores",
        json={"property_id": prop.id, "transport_connectivity": 9},
        headers=EDITOR_HEADERS,
    )
    assert r.status_code == 422
    assert "transport_connectivity" in r.json()["detail"]


def test_patch_merges_and_recomputes(client, make_property):
    prop = make_property()
    created = client.post(
        "/api/property-scores", json={"property_id": prop.id, **SCORES}, headers=EDITOR_HEADERS
    ).json()

    r = client.patch(
        f"/api/property-scores/{created['id']}",
        json={"track_record": 5, "recommendation_summary": "Buy"},
        headers=EDITOR_HEADERS,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["track_record"] == 5
    assert body["transport_connectivity"] == 7
    assert body["developer_score_total"] == 10
    assert body["overall_score_total"] == 87
    assert body["recommendation_summary"] == "Buy"


def test_delete_resets_legacy_fields(client, db, make_property):
    prop = make_property()
    created = client.post(
        "/api/property-scores", json={"property_id": prop.id, **SCORES}, headers=EDITOR_HEADERS
    ).json()

    r = client.delete(f"/api/property-scores/{created['id']}", headers=ADMIN_HEADERS)
    assert r.status_code == 200

    assert client.get(f"/api/property-scores/{created['id']}", headers=ADMIN_HEADERS).status_code == 404
    assert client.get(f"/api/properties/{prop.id}/score", headers=ADMIN_HEADERS).status_code == 404

    db.expire_all()
    p = db.get(Property, prop.id)
    assert (p.location_score, p.amenities_score, p.value_score, p.overall_score) == (0, 0, 0, "0.0")


def test_put_on_property_score_is_an_upsert(client, make_property):
    prop = make_property()

    r1 = client.put(f"/api/properties/{prop.id}/score", json={"approvals": 5}, headers=EDITOR_HEADERS)
    assert r1.status_code == 201
    r2 = client.put(f"/api/properties/{prop.id}/score", json={"approvals": 3}, headers=EDITOR_HEADERS)
    assert r2.status_code == 200

    assert r1.json()["id"] == r2.json()["id"]
    assert r2.json()["legal_score_total"] == 3
    assert len(client.get("/api/property-scores", headers=EDITOR_HEADERS).json()) == 1


def test_score_for_unknown_property_is_404(client):
    r = client.post("/api/property-scores", json={"property_id": 9999}, headers=EDITOR_HEADERS)
    assert r.status_code == 404


def test_full_marks_read_back_as_one_hundred(client, make_property):
    prop = make_property()
    full = {k: FIELD_BY_KEY[k].max for k in ALL_FIELD_KEYS}
    sid = client.post(
        "/api/property-scores", json={"property_id": prop.id, **full}, headers=EDITOR_HEADERS
    ).json()["id"]

    body = client.get(f"/api/property-scores/{sid}", headers=EDITOR_HEADERS).json()
    assert body["location_score_total"] == 25
    assert body["amenities_score_total"] == 20
    assert body["legal_score_total"] == 20
    assert body["value_score_total"] == 15
    assert body["developer_score_total"] == 10
    assert body["construction_score_total"] == 10
    assert body["overall_score_total"] == 100
    assert body["overall_grade"] == "A+"

    prop_body = client.get(f"/api/properties/{prop.id}", headers=EDITOR_HEADERS).json()
    assert prop_body["overall_score"] == "5.0"
    assert prop_body["location_score"] == 5


def test_unreadable_stored_lists_are_logged(client, db, make_property, caplog):
    prop = make_property()
    sid = client.post(
        "/api/property-scores",
        json={"property_id": prop.id, **SCORES, "key_strengths": ["Metro in 2 km"]},
        headers=EDITOR_HEADERS,
    ).json()["id"]

    row = db.get(PropertyScore, sid)
    row.key_strengths_json = "[not json"
    row.field_notes_json = '["a list, not a map"]'
    db.commit()

    with caplog.at_level(logging.WARNING, logger="app.schemas"):
        r = client.get(f"/api/property-scores/{sid}", headers=EDITOR_HEADERS)
    assert r.status_code == 200
    assert r.json()["key_strengths"] == []
    assert r.json()["field_notes"] == {}

    warned = [rec for rec in caplog.records if rec.name == "app.schemas"]
    assert {rec.getMessage() for rec in warned} == {
        "unreadable key_strengths_json on property score",
        "unreadable field_notes_json on property score",
    }
    assert all(rec.score_id == sid for rec in warned)
