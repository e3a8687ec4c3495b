# backend/app/services/ownership.py
from __future__ import annotations

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Customer, LegalAuditReport, Property, PropertyScore, ReraRecord


def must_get_property(db: Session, *, property_id: int) -> Property:
    row = db.scalar(select(Property).where(Property.id == property_id))
    if not row:
        raise HTTPException(status_code=404, detail="property not found")
    return row


def must_get_score(db: Session, *, score_id: int) -> PropertyScore:
    row = db.scalar(select(PropertyScore).where(PropertyScore.id == score_id))
    if not row:
        raise HTTPException(status_code=404, detail="property score not found")
    return row


def must_get_report(db: Session, *, report_id: int) -> LegalAuditReport:
    row = db.scalar(select(LegalAuditReport).where(LegalAuditReport.id == report_id))
    if not row:
        raise HTTPException(status_code=404, detail="legal audit report not found")
    return row


def must_get_customer(db: Session, *, customer_id: int) -> Customer:
    row = db.scalar(select(Customer).where(Customer.id == customer_id))
    if not row:
        raise HTTPException(status_code=404, detail="customer not found")
    return row


def must_get_rera_record(db: Session, *, rera_id: str) -> ReraRecord:
    row = db.scalar(select(ReraRecord).where(ReraRecord.rera_id == rera_id))
    if not row:
        raise HTTPException(status_code=404, detail="RERA record not found")
    return row
