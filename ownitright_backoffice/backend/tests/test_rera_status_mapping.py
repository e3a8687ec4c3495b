# backend/tests/test_rera_status_mapping.py
from __future__ import annotations

import pytest

from app.domain.rera_mapping import map_compliance_status, map_project_status, map_project_type


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, "residential"),
        ("Residential Apartment", "residential"),
        ("COMMERCIAL", "commercial"),
        ("Mixed Development", "mixed"),
        ("Plotted Development", "plotted-development"),
        ("Industrial", "other"),
    ],
)
def test_project_type(raw, expected):
    assert map_project_type(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", "under-construction"),
        ("Completed", "completed"),
        ("Ready to move", "completed"),
        ("Delayed", "delayed"),
        ("Registration Revoked", "cancelled"),
        ("Registered", "approved"),
        ("Ongoing", "under-construction"),
    ],
)
def test_project_status(raw, expected):
    assert map_project_status(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, "active"),
        ("Active", "active"),
        ("Compliant", "active"),
        ("Non-Compliant", "non-compliant"),
        ("Violation reported", "non-compliant"),
        ("Suspended", "suspended"),
        ("Cancelled", "cancelled"),
        ("unknown", "active"),
    ],
)
def test_compliance_status(raw, expected):
    assert map_compliance_status(raw) == expected
