# backend/app/routers/legal_audit_reports.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import get_principal, require_admin, require_editor
from ..db import get_db
from ..domain.legal_sections import MalformedSectionError
from ..models import LegalAuditReport
from ..schemas import (
    AssignCustomerIn,
    AssignmentBadgeOut,
    AssignmentOut,
    LegalAuditReportIn,
    LegalAuditReportOut,
    LegalAuditStatsOut,
    RemoveAssignmentOut,
)
from ..services import assignments as assign_svc
from ..services import legal_audit_reports as svc
from ..services.ownership import must_get_customer, must_get_property, must_get_report

router = APIRouter(tags=["legal-audit-reports"])


def _out(row: LegalAuditReport) -> LegalAuditReportOut:
    try:
        return svc.build_report_out(row)
    except MalformedSectionError as e:
        raise HTTPException(status_code=422, detail=f"report {row.id}: {e}")


@router.get("/legal-audit-reports", response_model=list[LegalAuditReportOut])
def list_reports(
    property_id: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    # malformed rows are listed with section_errors, not rejected
    rows = svc.list_reports(db, property_id=property_id, status=status)
    return [svc.build_report_out(r, collect_errors=True) for r in rows]


@router.get("/legal-audit-reports-stats", response_model=LegalAuditStatsOut)
def report_stats(db: Session = Depends(get_db), p=Depends(get_principal)):
    return svc.report_stats(db)


@router.post("/legal-audit-reports", response_model=LegalAuditReportOut, status_code=201)
def create_report(payload: LegalAuditReportIn, db: Session = Depends(get_db), p=Depends(require_editor)):
    must_get_property(db, property_id=payload.property_id)
    return _out(svc.create_report(db, payload=payload, actor=p))


@router.get("/legal-audit-reports/{report_id}", response_model=LegalAuditReportOut)
def get_report(report_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return _out(must_get_report(db, report_id=report_id))


@router.put("/legal-audit-reports/{report_id}", response_model=LegalAuditReportOut)
def replace_report(
    report_id: int,
    payload: LegalAuditReportIn,
    db: Session = Depends(get_db),
    p=Depends(require_editor),
):
    row = must_get_report(db, report_id=report_id)
    if payload.property_id != row.property_id:
        must_get_property(db, property_id=payload.property_id)
    return _out(svc.replace_report(db, row=row, payload=payload, actor=p))


@router.delete("/legal-audit-reports/{report_id}", response_model=dict)
def delete_report(report_id: int, db: Session = Depends(get_db), p=Depends(require_admin)):
    row = must_get_report(db, report_id=report_id)
    svc.delete_report(db, row=row, actor=p)
    return {"ok": True, "id": report_id}


# -------------------- customer assignments --------------------

@router.post("/legal-audit-reports/{report_id}/assign-customer", response_model=AssignmentOut)
def assign_customer(
    report_id: int,
    payload: AssignCustomerIn,
    db: Session = Depends(get_db),
    p=Depends(require_editor),
):
    report = must_get_report(db, report_id=report_id)
    if payload.customer_id is None:
        raise HTTPException(status_code=422, detail="Please select a customer")
    customer = must_get_customer(db, customer_id=payload.customer_id)

    return assign_svc.assign_customer(
        db,
        report=report,
        customer=customer,
        access_level=payload.access_level,
        assigned_by=payload.assigned_by,
        notes=payload.notes,
        actor=p,
    )


@router.delete(
    "/legal-audit-reports/{report_id}/remove-customer/{customer_id}",
    response_model=RemoveAssignmentOut,
)
def remove_customer(
    report_id: int,
    customer_id: int,
    db: Session = Depends(get_db),
    p=Depends(require_editor),
):
    report = must_get_report(db, report_id=report_id)
    removed = assign_svc.remove_customer(db, report=report, customer_id=customer_id, actor=p)
    return RemoveAssignmentOut(ok=True, removed=removed)


@router.get("/legal-audit-reports/{report_id}/assignments", response_model=list[AssignmentOut])
def list_assignments(report_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_report(db, report_id=report_id)
    return assign_svc.list_assignments(db, report_id=report_id)


@router.get("/legal-audit-reports/{report_id}/assignment-badge", response_model=AssignmentBadgeOut)
def assignment_badge(report_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_report(db, report_id=report_id)
    count = assign_svc.assignment_count(db, report_id=report_id)
    return AssignmentBadgeOut(report_id=report_id, count=count, label=assign_svc.badge_label(count))
