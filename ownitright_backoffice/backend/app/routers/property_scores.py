# backend/app/routers/property_scores.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import get_principal, require_admin, require_editor
from ..db import get_db
from ..domain.scoring import ScoreOutOfRangeError, UnknownScoreFieldError, catalog_as_dicts
from ..models import PropertyScore
from ..schemas import PropertyScoreCreate, PropertyScoreOut, PropertyScoreUpdate, ScoreStatsOut
from ..services import property_scores as svc
from ..services.ownership import must_get_property, must_get_score

router = APIRouter(prefix="/property-scores", tags=["property-scores"])


@router.get("", response_model=list[PropertyScoreOut])
def list_scores(db: Session = Depends(get_db), p=Depends(get_principal)):
    return list(db.scalars(select(PropertyScore).order_by(PropertyScore.last_updated.desc())).all())


@router.get("/stats", response_model=ScoreStatsOut)
def score_stats(db: Session = Depends(get_db), p=Depends(get_principal)):
    return svc.score_stats(db)


@router.get("/catalog", response_model=list[dict])
def score_catalog(p=Depends(get_principal)):
    return catalog_as_dicts()


@router.get("/{score_id}", response_model=PropertyScoreOut)
def get_score(score_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_score(db, score_id=score_id)


@router.post("", response_model=PropertyScoreOut, status_code=201)
def create_score(payload: PropertyScoreCreate, db: Session = Depends(get_db), p=Depends(require_editor)):
    prop = must_get_property(db, property_id=payload.property_id)
    try:
        return svc.create_score(db, prop=prop, payload=payload, actor=p)
    except svc.ScoreAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (ScoreOutOfRangeError, UnknownScoreFieldError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.patch("/{score_id}", response_model=PropertyScoreOut)
def update_score(
    score_id: int,
    payload: PropertyScoreUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_editor),
):
    row = must_get_score(db, score_id=score_id)
    try:
        return svc.update_score(db, row=row, payload=payload, actor=p)
    except (ScoreOutOfRangeError, UnknownScoreFieldError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{score_id}", response_model=dict)
def delete_score(score_id: int, db: Session = Depends(get_db), p=Depends(require_admin)):
    row = must_get_score(db, score_id=score_id)
    svc.delete_score(db, row=row, actor=p)
    return {"ok": True, "id": score_id}
