# backend/app/routers/properties.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..auth import get_principal, require_admin, require_editor
from ..db import get_db
from ..domain.audit import audit_write, row_snapshot
from ..domain.scoring import ScoreOutOfRangeError, UnknownScoreFieldError
from ..models import Property, ReraRecord
from ..schemas import (
    PropertyCreate,
    PropertyOut,
    PropertyScoreOut,
    PropertyScoreUpdate,
    PropertyScoringRowOut,
    PropertyStatsOut,
    PropertyUpdate,
)
from ..services import property_scores as scores_svc
from ..services.dashboard_rollups import property_rollup_dict
from ..services.ownership import must_get_property

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("", response_model=list[PropertyOut])
def list_properties(
    status: Optional[str] = Query(default=None),
    zone: Optional[str] = Query(default=None),
    type: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    q = select(Property)
    if status:
        q = q.where(Property.status == status)
    if zone:
        q = q.where(Property.zone == zone)
    if type:
        q = q.where(Property.type == type)
    return list(db.scalars(q.order_by(Property.id)).all())


@router.post("", response_model=PropertyOut)
def create_property(payload: PropertyCreate, db: Session = Depends(get_db), p=Depends(require_editor)):
    now = datetime.utcnow()
    row = Property(**payload.model_dump(), created_at=now, updated_at=now)
    db.add(row)
    db.flush()
    audit_write(
        db,
        actor_user_id=p.user_id,
        action="property.create",
        entity_type="Property",
        entity_id=str(row.id),
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("/stats", response_model=PropertyStatsOut)
def property_stats(db: Session = Depends(get_db), p=Depends(get_principal)):
    return property_rollup_dict(db)


@router.get("/scoring-overview", response_model=list[PropertyScoringRowOut])
def scoring_overview(db: Session = Depends(get_db), p=Depends(get_principal)):
    """Every property with its score (or null) and the actions the admin table offers."""
    return [
        PropertyScoringRowOut(
            property=PropertyOut.model_validate(r.property),
            score=PropertyScoreOut.model_validate(r.score) if r.score is not None else None,
            actions=r.actions,
        )
        for r in scores_svc.scoring_overview(db)
    ]


@router.get("/{property_id}", response_model=PropertyOut)
def get_property(property_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_property(db, property_id=property_id)


@router.put("/{property_id}", response_model=PropertyOut)
def update_property(
    property_id: int,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_editor),
):
    row = must_get_property(db, property_id=property_id)
    before = row_snapshot(row)

    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(row, k, v)
    row.updated_at = datetime.utcnow()

    db.add(row)
    audit_write(
        db,
        actor_user_id=p.user_id,
        action="property.update",
        entity_type="Property",
        entity_id=str(row.id),
        before=before,
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{property_id}", response_model=dict)
def delete_property(property_id: int, db: Session = Depends(get_db), p=Depends(require_admin)):
    row = must_get_property(db, property_id=property_id)
    before = row_snapshot(row)

    # registry snapshots outlive the listing
    db.execute(update(ReraRecord).where(ReraRecord.property_id == row.id).values(property_id=None))
    db.delete(row)
    audit_write(
        db,
        actor_user_id=p.user_id,
        action="property.delete",
        entity_type="Property",
        entity_id=str(property_id),
        before=before,
    )
    db.commit()
    return {"ok": True, "id": property_id}


# -------------------- score, addressed by property --------------------

@router.get("/{property_id}/score", response_model=PropertyScoreOut)
def get_property_score(property_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_property(db, property_id=property_id)
    row = scores_svc.get_score_for_property(db, property_id=property_id)
    if row is None:
        raise HTTPException(status_code=404, detail="property has not been scored")
    return row


@router.put("/{property_id}/score", response_model=PropertyScoreOut)
def upsert_property_score(
    property_id: int,
    payload: PropertyScoreUpdate,
    response: Response,
    db: Session = Depends(get_db),
    p=Depends(require_editor),
):
    prop = must_get_property(db, property_id=property_id)
    try:
        row, created = scores_svc.upsert_score(db, prop=prop, payload=payload, actor=p)
    except (ScoreOutOfRangeError, UnknownScoreFieldError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except scores_svc.ScoreAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))

    response.status_code = 201 if created else 200
    return row
