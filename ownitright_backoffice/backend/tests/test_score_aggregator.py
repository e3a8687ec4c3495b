# backend/tests/test_score_aggregator.py
from __future__ import annotations

import pytest

from app.domain.scoring import (
    ALL_FIELD_KEYS,
    CATALOG,
    FIELD_BY_KEY,
    OVERALL_MAX,
    ScoreOutOfRangeError,
    UnknownScoreFieldError,
    category_total,
    category_totals,
    grade_for,
    legacy_projection,
    overall_total,
    round_half_up,
    summarize,
    validate_values,
)

CUTOFFS = [("A+", 90), ("A", 80), ("B+", 70), ("B", 60), ("C+", 50), ("C", 40)]


def _full() -> dict[str, int]:
    return {k: FIELD_BY_KEY[k].max for k in ALL_FIELD_KEYS}


def test_catalog_maxima_add_up_to_one_hundred():
    assert OVERALL_MAX == 100
    assert [c.max_total for c in CATALOG] == [25, 20, 20, 15, 10, 10]
    for c in CATALOG:
        assert sum(f.max for f in c.fields) == c.max_total
    assert len(ALL_FIELD_KEYS) == 19


def test_category_total_is_sum_of_its_fields_and_missing_counts_as_zero():
    values = {"transport_connectivity": 7, "infrastructure_development": 6, "social_infrastructure": None}
    assert category_total(values, "location") == 13
    assert category_total({}, "amenities") == 0


def test_overall_is_sum_of_categories():
    values = {"transport_connectivity": 5, "basic_amenities": 4, "rera_compliance": 8, "rental_yield": 2}
    totals = category_totals(values)
    assert overall_total(values) == sum(totals.values()) == 19


def test_full_marks_reach_one_hundred_and_top_grade():
    s = summarize(_full(), CUTOFFS)
    assert s.overall_total == 100
    assert s.grade == "A+"


def test_summarize_is_idempotent():
    values = _full()
    values["track_record"] = 2
    assert summarize(values, CUTOFFS) == summarize(dict(values), CUTOFFS)


@pytest.mark.parametrize(
    "total,grade",
    [(100, "A+"), (90, "A+"), (89, "A"), (80, "A"), (79, "B+"), (70, "B+"), (60, "B"), (55, "C+"), (40, "C"), (39, "D"), (0, "D")],
)
def test_grade_boundaries(total, grade):
    assert grade_for(total, CUTOFFS) == grade


def test_validate_values_rejects_out_of_range_and_unknown():
    validate_values({"transport_connectivity": 8, "approvals": 0, "modern_features": None})

    with pytest.raises(ScoreOutOfRangeError) as e:
        validate_values({"transport_connectivity": 9})
    assert e.value.max_value == 8

    with pytest.raises(ScoreOutOfRangeError):
        validate_values({"rental_yield": -1})

    with pytest.raises(UnknownScoreFieldError):
        validate_values({"parking": 3})


def test_legacy_projection_rounds_half_up():
    values = {
        "transport_connectivity": 7,
        "infrastructure_development": 6,
        "social_infrastructure": 4,
        "employment_hubs": 4,
        "basic_amenities": 5,
        "lifestyle_amenities": 5,
        "price_competitiveness": 6,
        "appreciation_potential": 3,
        "rental_yield": 2,
    }
    s = summarize(values, CUTOFFS)
    legacy = legacy_projection(s)

    assert legacy.location_score == 4  # 21 / 5 = 4.2
    assert legacy.amenities_score == 3  # 10 / 4 = 2.5
    assert legacy.value_score == 4  # 11 / 3 = 3.67
    assert legacy.overall_score == f"{s.overall_total / 20:.1f}"


def test_round_half_up_differs_from_builtin_round():
    assert round(70.5) == 70
    assert round_half_up(70.5) == 71
    assert round_half_up(2.5) == 3
    assert round_half_up(4.2) == 4
    assert round_half_up(62.25, 1) == 62.3
