# backend/app/services/property_scores.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Principal
from ..config import settings
from ..domain.audit import audit_write, row_snapshot
from ..domain.scoring import (
    ALL_FIELD_KEYS,
    FIELD_BY_KEY,
    ScoreSummary,
    UnknownScoreFieldError,
    grade_order,
    legacy_projection,
    round_half_up,
    summarize,
    validate_values,
)
from ..models import Property, PropertyScore
from ..schemas import PropertyScoreCreate, PropertyScoreUpdate

log = logging.getLogger(__name__)


class ScoreAlreadyExistsError(ValueError):
    def __init__(self, property_id: int, score_id: Optional[int] = None):
        self.property_id = property_id
        self.score_id = score_id
        super().__init__(f"property {property_id} already has a score")


@dataclass(frozen=True)
class ScoringRow:
    property: Property
    score: Optional[PropertyScore]

    @property
    def actions(self) -> list[str]:
        return ["edit", "delete"] if self.score is not None else ["add"]


def _clean_list(items: Optional[list[str]]) -> list[str]:
    return [s.strip() for s in (items or []) if s and s.strip()]


def _submitted_values(payload: PropertyScoreUpdate) -> dict[str, int]:
    data = payload.model_dump(include=set(ALL_FIELD_KEYS))
    return {k: v for k, v in data.items() if v is not None}


def _validate_notes(notes: Optional[dict[str, str]]) -> dict[str, str]:
    out: dict[str, str] = {}
    for k, v in (notes or {}).items():
        if k not in FIELD_BY_KEY:
            raise UnknownScoreFieldError(f"notes given for unknown score field '{k}'")
        if v and v.strip():
            out[k] = v.strip()
    return out


def row_values(row: PropertyScore) -> dict[str, int]:
    return {k: int(getattr(row, k) or 0) for k in ALL_FIELD_KEYS}


def recompute(row: PropertyScore) -> ScoreSummary:
    """Derive every total and the grade from the row's sub-criteria."""
    summary = summarize(row_values(row), settings.grade_table(), settings.grade_floor)
    t = summary.category_totals
    row.location_score_total = t["location"]
    row.amenities_score_total = t["amenities"]
    row.legal_score_total = t["legal"]
    row.value_score_total = t["value"]
    row.developer_score_total = t["developer"]
    row.construction_score_total = t["construction"]
    row.overall_score_total = summary.overall_total
    row.overall_grade = summary.grade
    return summary


def _project_onto_property(prop: Property, summary: Optional[ScoreSummary]) -> None:
    if summary is None:
        prop.location_score = 0
        prop.amenities_score = 0
        prop.value_score = 0
        prop.overall_score = "0.0"
    else:
        legacy = legacy_projection(summary)
        prop.location_score = legacy.location_score
        prop.amenities_score = legacy.amenities_score
        prop.value_score = legacy.value_score
        prop.overall_score = legacy.overall_score
    prop.updated_at = datetime.utcnow()


def _apply_payload(row: PropertyScore, payload: PropertyScoreUpdate) -> None:
    values = _submitted_values(payload)
    validate_values(values)
    for k, v in values.items():
        setattr(row, k, int(v))

    if payload.key_strengths is not None:
        row.key_strengths_json = json.dumps(_clean_list(payload.key_strengths))
    if payload.areas_of_concern is not None:
        row.areas_of_concern_json = json.dumps(_clean_list(payload.areas_of_concern))
    if payload.field_notes is not None:
        row.field_notes_json = json.dumps(_validate_notes(payload.field_notes), sort_keys=True)
    if payload.recommendation_summary is not None:
        row.recommendation_summary = payload.recommendation_summary
    if payload.scored_by is not None:
        row.scored_by = payload.scored_by


def get_score_for_property(db: Session, *, property_id: int) -> Optional[PropertyScore]:
    return db.scalar(select(PropertyScore).where(PropertyScore.property_id == property_id))


def create_score(db: Session, *, prop: Property, payload: PropertyScoreCreate, actor: Principal) -> PropertyScore:
    existing = get_score_for_property(db, property_id=prop.id)
    if existing is not None:
        raise ScoreAlreadyExistsError(prop.id, existing.id)

    now = datetime.utcnow()
    row = PropertyScore(property_id=prop.id, created_at=now, last_updated=now)
    for k in ALL_FIELD_KEYS:
        setattr(row, k, 0)
    row.key_strengths_json = "[]"
    row.areas_of_concern_json = "[]"
    row.field_notes_json = "{}"

    _apply_payload(row, payload)
    if not row.scored_by:
        row.scored_by = actor.email

    summary = recompute(row)
    _project_onto_property(prop, summary)

    db.add(row)
    db.add(prop)
    try:
        db.flush()
    except IntegrityError:
        # a concurrent create won the unique(property_id) race
        db.rollback()
        raise ScoreAlreadyExistsError(prop.id)

    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="property_score.create",
        entity_type="PropertyScore",
        entity_id=str(row.id),
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)

    log.info(
        "property scored",
        extra={"property_id": prop.id, "score_id": row.id, "admin_email": actor.email},
    )
    return row


def update_score(db: Session, *, row: PropertyScore, payload: PropertyScoreUpdate, actor: Principal) -> PropertyScore:
    before = row_snapshot(row)

    _apply_payload(row, payload)
    summary = recompute(row)
    row.last_updated = datetime.utcnow()

    prop = db.get(Property, row.property_id)
    if prop is not None:
        _project_onto_property(prop, summary)
        db.add(prop)

    db.add(row)
    db.flush()
    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="property_score.update",
        entity_type="PropertyScore",
        entity_id=str(row.id),
        before=before,
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)

    log.info(
        "property score updated",
        extra={"property_id": row.property_id, "score_id": row.id, "admin_email": actor.email},
    )
    return row


def upsert_score(
    db: Session, *, prop: Property, payload: PropertyScoreUpdate, actor: Principal
) -> tuple[PropertyScore, bool]:
    """
    Find the property's score and update it, else create one.

    Returns (row, created).
    """
    existing = get_score_for_property(db, property_id=prop.id)
    if existing is not None:
        return update_score(db, row=existing, payload=payload, actor=actor), False

    create_payload = PropertyScoreCreate(property_id=prop.id, **payload.model_dump(exclude_none=True))
    return create_score(db, prop=prop, payload=create_payload, actor=actor), True


def delete_score(db: Session, *, row: PropertyScore, actor: Principal) -> None:
    before = row_snapshot(row)
    prop = db.get(Property, row.property_id)
    if prop is not None:
        _project_onto_property(prop, None)
        prop.score = None
        db.add(prop)
    else:
        db.delete(row)

    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="property_score.delete",
        entity_type="PropertyScore",
        entity_id=str(before["id"]),
        before=before,
    )
    db.commit()

    log.info(
        "property score deleted",
        extra={"property_id": before["property_id"], "score_id": before["id"], "admin_email": actor.email},
    )


def scoring_overview(db: Session) -> list[ScoringRow]:
    props = db.scalars(select(Property).order_by(Property.id)).all()
    scores = {s.property_id: s for s in db.scalars(select(PropertyScore)).all()}
    return [ScoringRow(property=p, score=scores.get(p.id)) for p in props]


def score_stats(db: Session) -> dict[str, Any]:
    total_properties = len(db.scalars(select(Property.id)).all())
    scores = db.scalars(select(PropertyScore)).all()

    order = grade_order(settings.grade_table(), settings.grade_floor)
    distribution = {g: 0 for g in order}
    for s in scores:
        distribution[s.overall_grade] = distribution.get(s.overall_grade, 0) + 1

    avg = round_half_up(sum(s.overall_score_total for s in scores) / len(scores)) if scores else 0
    top_grade = order[0] if order else "A+"

    return {
        "total_properties": total_properties,
        "scored": len(scores),
        "needs_scoring": max(0, total_properties - len(scores)),
        "a_plus_count": distribution.get(top_grade, 0),
        "avg_score": int(avg),
        "grade_distribution": distribution,
    }
