# backend/app/services/legal_audit_reports.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..auth import Principal
from ..domain.audit import audit_write, row_snapshot
from ..domain.legal_sections import (
    SECTIONS,
    load_all_sections,
    load_sections_collecting_errors,
    write_all_sections,
)
from ..domain.scoring import round_half_up
from ..models import LegalAuditReport
from ..schemas import LegalAuditReportIn, LegalAuditReportOut

log = logging.getLogger(__name__)

_SCALAR_FIELDS = (
    "property_id",
    "report_title",
    "lawyer_name",
    "lawyer_bar_number",
    "status",
    "overall_score",
    "risk_level",
    "executive_summary",
    "key_findings",
    "recommendations",
    "legal_conclusion",
)


def build_report_out(row: LegalAuditReport, *, collect_errors: bool = False) -> LegalAuditReportOut:
    """
    Raises MalformedSectionError when a stored section cannot be read back.

    With collect_errors the row is still built: broken sections show their
    defaults and are named in section_errors.
    """
    section_errors: dict[str, str] = {}
    if collect_errors:
        sections, section_errors = load_sections_collecting_errors(row)
        if section_errors:
            log.warning(
                "legal audit report has malformed sections: %s",
                ", ".join(sorted(section_errors)),
                extra={"report_id": row.id},
            )
    else:
        sections = load_all_sections(row)
    prop = row.property
    return LegalAuditReportOut(
        id=row.id,
        property_id=row.property_id,
        property_name=prop.name if prop is not None else None,
        report_title=row.report_title,
        lawyer_name=row.lawyer_name,
        lawyer_bar_number=row.lawyer_bar_number,
        audit_date=row.audit_date,
        report_date=row.report_date,
        status=row.status,
        overall_score=row.overall_score,
        risk_level=row.risk_level,
        executive_summary=row.executive_summary or "",
        key_findings=row.key_findings or "",
        recommendations=row.recommendations or "",
        legal_conclusion=row.legal_conclusion or "",
        created_at=row.created_at,
        updated_at=row.updated_at,
        section_errors=section_errors,
        **sections,
    )


def _apply(row: LegalAuditReport, payload: LegalAuditReportIn) -> None:
    for f in _SCALAR_FIELDS:
        setattr(row, f, getattr(payload, f))
    row.audit_date = payload.audit_date.isoformat()
    row.report_date = payload.report_date.isoformat()
    write_all_sections(row, {name: getattr(payload, name) for name in SECTIONS})


def list_reports(db: Session, *, property_id: Optional[int] = None, status: Optional[str] = None) -> list[LegalAuditReport]:
    q = select(LegalAuditReport).options(selectinload(LegalAuditReport.property))
    if property_id is not None:
        q = q.where(LegalAuditReport.property_id == property_id)
    if status:
        q = q.where(LegalAuditReport.status == status)
    q = q.order_by(LegalAuditReport.created_at.desc(), LegalAuditReport.id.desc())
    return list(db.scalars(q).all())


def create_report(db: Session, *, payload: LegalAuditReportIn, actor: Principal) -> LegalAuditReport:
    now = datetime.utcnow()
    row = LegalAuditReport(created_at=now, updated_at=now)
    _apply(row, payload)

    db.add(row)
    db.flush()
    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="legal_audit_report.create",
        entity_type="LegalAuditReport",
        entity_id=str(row.id),
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)

    log.info(
        "legal audit report created",
        extra={"report_id": row.id, "property_id": row.property_id, "admin_email": actor.email},
    )
    return row


def replace_report(db: Session, *, row: LegalAuditReport, payload: LegalAuditReportIn, actor: Principal) -> LegalAuditReport:
    """Whole-record write: every scalar and all six sections are replaced together."""
    before = row_snapshot(row)
    _apply(row, payload)
    row.updated_at = datetime.utcnow()

    db.add(row)
    db.flush()
    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="legal_audit_report.update",
        entity_type="LegalAuditReport",
        entity_id=str(row.id),
        before=before,
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)

    log.info("legal audit report updated", extra={"report_id": row.id, "admin_email": actor.email})
    return row


def delete_report(db: Session, *, row: LegalAuditReport, actor: Principal) -> None:
    before = row_snapshot(row)
    db.delete(row)
    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="legal_audit_report.delete",
        entity_type="LegalAuditReport",
        entity_id=str(before["id"]),
        before=before,
    )
    db.commit()
    log.info("legal audit report deleted", extra={"report_id": before["id"], "admin_email": actor.email})


def report_stats(db: Session) -> dict:
    rows = db.scalars(select(LegalAuditReport)).all()
    total = len(rows)

    def _count(status: str) -> int:
        return sum(1 for r in rows if r.status == status)

    avg = round_half_up(sum(r.overall_score for r in rows) / total, 1) if total else 0.0
    return {
        "total_reports": total,
        "draft_reports": _count("draft"),
        "in_progress_reports": _count("in-progress"),
        "completed_reports": _count("completed"),
        "approved_reports": _count("approved"),
        "high_risk_reports": sum(1 for r in rows if r.risk_level in ("high", "critical")),
        "avg_score": float(avg),
    }
