# backend/tests/test_scoring_overview_actions.py
from __future__ import annotations

from conftest import ADMIN_HEADERS


def _row(client, property_id: int) -> dict:
    rows = client.get("/api/properties/scoring-overview", headers=ADMIN_HEADERS).json()
    return next(r for r in rows if r["property"]["id"] == property_id)


def test_add_then_edit_delete_actions_and_scored_count(client, make_property):
    prop = make_property()
    make_property(name="Brigade Woods", type="villa", developer="Brigade Group")

    row = _row(client, prop.id)
    assert row["score"] is None
    assert row["actions"] == ["add"]
    before = client.get("/api/property-scores/stats", headers=ADMIN_HEADERS).json()

    r = client.post("/api/property-scores", json={"property_id": prop.id, "rera_compliance": 8}, headers=ADMIN_HEADERS)
    assert r.status_code == 201

    row = _row(client, prop.id)
    assert row["score"]["id"] == r.json()["id"]
    assert row["actions"] == ["edit", "delete"]

    after = client.get("/api/property-scores/stats", headers=ADMIN_HEADERS).json()
    assert after["scored"] == before["scored"] + 1
    assert after["needs_scoring"] == before["needs_scoring"] - 1
    assert after["total_properties"] == 2
