# backend/app/domain/scoring.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional


class UnknownScoreFieldError(ValueError):
    pass


class ScoreOutOfRangeError(ValueError):
    def __init__(self, key: str, value: int, max_value: int):
        self.key = key
        self.value = value
        self.max_value = max_value
        super().__init__(f"{key}={value} is outside 0..{max_value}")


@dataclass(frozen=True)
class ScoreField:
    key: str
    label: str
    max: int
    description: str


@dataclass(frozen=True)
class ScoreCategory:
    key: str
    title: str
    max_total: int
    fields: tuple[ScoreField, ...]

    @property
    def field_keys(self) -> tuple[str, ...]:
        return tuple(f.key for f in self.fields)


CATALOG: tuple[ScoreCategory, ...] = (
    ScoreCategory(
        key="location",
        title="Location Score",
        max_total=25,
        fields=(
            ScoreField("transport_connectivity", "Transport Connectivity", 8, "Metro, bus routes, major roads access"),
            ScoreField("infrastructure_development", "Infrastructure Development", 7, "Upcoming projects, government investments"),
            ScoreField("social_infrastructure", "Social Infrastructure", 5, "Schools, hospitals, shopping centers"),
            ScoreField("employment_hubs", "Employment Hubs", 5, "IT parks, business districts proximity"),
        ),
    ),
    ScoreCategory(
        key="amenities",
        title="Amenities Score",
        max_total=20,
        fields=(
            ScoreField("basic_amenities", "Basic Amenities", 8, "Parking, security, power backup"),
            ScoreField("lifestyle_amenities", "Lifestyle Amenities", 7, "Gym, pool, clubhouse, gardens"),
            ScoreField("modern_features", "Modern Features", 5, "Smart home, eco-friendly features"),
        ),
    ),
    ScoreCategory(
        key="legal",
        title="Legal Score",
        max_total=20,
        fields=(
            ScoreField("rera_compliance", "RERA Compliance", 8, "Approved, registered, compliant"),
            ScoreField("title_clarity", "Title Clarity", 7, "Clear title, no disputes"),
            ScoreField("approvals", "Approvals", 5, "Building permits, clearances"),
        ),
    ),
    ScoreCategory(
        key="value",
        title="Value Score",
        max_total=15,
        fields=(
            ScoreField("price_competitiveness", "Price Competitiveness", 8, "Below/at/above area average"),
            ScoreField("appreciation_potential", "Appreciation Potential", 4, "Historical trends, future prospects"),
            ScoreField("rental_yield", "Rental Yield", 3, "Current rental market potential"),
        ),
    ),
    ScoreCategory(
        key="developer",
        title="Developer Score",
        max_total=10,
        fields=(
            ScoreField("track_record", "Track Record", 5, "Previous projects, delivery timeline"),
            ScoreField("financial_stability", "Financial Stability", 3, "Company rating, market presence"),
            ScoreField("customer_satisfaction", "Customer Satisfaction", 2, "Reviews, complaints, reputation"),
        ),
    ),
    ScoreCategory(
        key="construction",
        title="Construction Score",
        max_total=10,
        fields=(
            ScoreField("structural_quality", "Structural Quality", 5, "Foundation, materials, design"),
            ScoreField("finishing_standards", "Finishing Standards", 3, "Flooring, fixtures, paint quality"),
            ScoreField("maintenance_standards", "Maintenance Standards", 2, "Common areas, upkeep"),
        ),
    ),
)

CATEGORY_BY_KEY: dict[str, ScoreCategory] = {c.key: c for c in CATALOG}
FIELD_BY_KEY: dict[str, ScoreField] = {f.key: f for c in CATALOG for f in c.fields}
ALL_FIELD_KEYS: tuple[str, ...] = tuple(f.key for c in CATALOG for f in c.fields)
OVERALL_MAX = sum(c.max_total for c in CATALOG)


@dataclass(frozen=True)
class ScoreSummary:
    category_totals: dict[str, int]
    overall_total: int
    grade: str


@dataclass(frozen=True)
class LegacyScores:
    location_score: int
    amenities_score: int
    value_score: int
    overall_score: str


def _category(category: str) -> ScoreCategory:
    try:
        return CATEGORY_BY_KEY[category]
    except KeyError:
        raise UnknownScoreFieldError(f"unknown score category '{category}'")


def category_total(values: Mapping[str, Optional[int]], category: str) -> int:
    """Sum of the category's sub-criteria; a missing or null key counts as 0."""
    cat = _category(category)
    return sum(int(values.get(k) or 0) for k in cat.field_keys)


def category_totals(values: Mapping[str, Optional[int]]) -> dict[str, int]:
    return {c.key: category_total(values, c.key) for c in CATALOG}


def overall_total(values: Mapping[str, Optional[int]]) -> int:
    return sum(category_totals(values).values())


def validate_values(values: Mapping[str, Optional[int]]) -> None:
    """
    Reject unknown sub-criterion keys and values outside [0, max].

    The sums above never clamp; this is the gate that keeps
    overall_total within 0..100.
    """
    for key, raw in values.items():
        field = FIELD_BY_KEY.get(key)
        if field is None:
            raise UnknownScoreFieldError(f"unknown score field '{key}'")
        if raw is None:
            continue
        v = int(raw)
        if v < 0 or v > field.max:
            raise ScoreOutOfRangeError(key, v, field.max)


def grade_for(total: int, cutoffs: Iterable[tuple[str, int]], floor: str = "D") -> str:
    for grade, threshold in sorted(cutoffs, key=lambda x: x[1], reverse=True):
        if total >= threshold:
            return grade
    return floor


def grade_order(cutoffs: Iterable[tuple[str, int]], floor: str = "D") -> list[str]:
    ordered = [g for g, _ in sorted(cutoffs, key=lambda x: x[1], reverse=True)]
    if floor not in ordered:
        ordered.append(floor)
    return ordered


def summarize(values: Mapping[str, Optional[int]], cutoffs: Iterable[tuple[str, int]], floor: str = "D") -> ScoreSummary:
    totals = category_totals(values)
    overall = sum(totals.values())
    return ScoreSummary(category_totals=totals, overall_total=overall, grade=grade_for(overall, cutoffs, floor))


def round_half_up(x: float, digits: int = 0):
    """Halves round up (70.5 -> 71), unlike the builtin round()."""
    if digits == 0:
        return int(math.floor(x + 0.5))
    scale = 10 ** digits
    return math.floor(x * scale + 0.5) / scale


def legacy_projection(summary: ScoreSummary) -> LegacyScores:
    """1-5 scale values shown on listing cards."""
    t = summary.category_totals
    return LegacyScores(
        location_score=round_half_up(t["location"] / 5),
        amenities_score=round_half_up(t["amenities"] / 4),
        value_score=round_half_up(t["value"] / 3),
        overall_score=f"{summary.overall_total / 20:.1f}",
    )


def catalog_as_dicts() -> list[dict]:
    return [
        {
            "key": c.key,
            "title": c.title,
            "max_total": c.max_total,
            "fields": [{"key": f.key, "label": f.label, "max": f.max, "description": f.description} for f in c.fields],
        }
        for c in CATALOG
    ]
