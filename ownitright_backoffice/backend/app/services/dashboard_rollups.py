# backend/app/services/dashboard_rollups.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..domain.scoring import round_half_up
from ..models import Property


@dataclass(frozen=True)
class PropertyRollup:
    total_properties: int
    active_projects: int
    rera_approved: int
    avg_price: int


def property_rollup(db: Session) -> PropertyRollup:
    """
    Headline numbers for the properties dashboard.

    avg_price is in lakhs, rounded to the nearest whole lakh; 0 when there
    are no properties.
    """
    total = int(db.scalar(select(func.count(Property.id))) or 0)
    active = int(db.scalar(select(func.count(Property.id)).where(Property.status == "active")) or 0)
    approved = int(db.scalar(select(func.count(Property.id)).where(Property.rera_approved.is_(True))) or 0)
    avg = db.scalar(select(func.avg(Property.price)))

    return PropertyRollup(
        total_properties=total,
        active_projects=active,
        rera_approved=approved,
        avg_price=int(round_half_up(float(avg))) if avg is not None else 0,
    )


def property_rollup_dict(db: Session) -> dict[str, Any]:
    return asdict(property_rollup(db))
