# backend/app/services/assignments.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..auth import Principal
from ..domain.audit import audit_write, row_snapshot
from ..models import Customer, LegalAuditReport, ReportCustomerAssignment

log = logging.getLogger(__name__)


class MissingCustomerError(ValueError):
    pass


def badge_label(count: int) -> str:
    if count <= 0:
        return "No assignments"
    return f"{count} assigned"


def _find(db: Session, *, report_id: int, customer_id: int) -> Optional[ReportCustomerAssignment]:
    return db.scalar(
        select(ReportCustomerAssignment).where(
            ReportCustomerAssignment.report_id == report_id,
            ReportCustomerAssignment.customer_id == customer_id,
        )
    )


def assign_customer(
    db: Session,
    *,
    report: LegalAuditReport,
    customer: Optional[Customer],
    access_level: str,
    assigned_by: Optional[str],
    notes: Optional[str],
    actor: Principal,
) -> ReportCustomerAssignment:
    """
    Grant a customer access to a report.

    Re-assigning an existing pair updates access_level / notes / assigned_by
    in place; a pair never appears twice.
    """
    if customer is None:
        raise MissingCustomerError("Please select a customer")

    report_id, customer_id = report.id, customer.id

    def _fill(r: ReportCustomerAssignment) -> None:
        r.access_level = access_level
        r.assigned_by = assigned_by or actor.email
        r.notes = notes

    row = _find(db, report_id=report_id, customer_id=customer_id)
    before = row_snapshot(row) if row is not None else None

    if row is None:
        row = ReportCustomerAssignment(
            report_id=report_id,
            customer_id=customer_id,
            created_at=datetime.utcnow(),
        )
        action = "report_assignment.create"
    else:
        action = "report_assignment.update"

    _fill(row)
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        # a concurrent assign inserted the pair first; update that row instead
        db.rollback()
        row = _find(db, report_id=report_id, customer_id=customer_id)
        if row is None:
            raise
        before = row_snapshot(row)
        action = "report_assignment.update"
        _fill(row)
        db.flush()

    audit_write(
        db,
        actor_user_id=actor.user_id,
        action=action,
        entity_type="ReportCustomerAssignment",
        entity_id=str(row.id),
        before=before,
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)

    log.info(
        "report assigned",
        extra={"report_id": report_id, "customer_id": customer_id, "admin_email": actor.email},
    )
    return row


def remove_customer(db: Session, *, report: LegalAuditReport, customer_id: int, actor: Principal) -> bool:
    """Returns False when there was nothing to remove."""
    row = _find(db, report_id=report.id, customer_id=customer_id)
    if row is None:
        return False

    before = row_snapshot(row)
    db.delete(row)
    audit_write(
        db,
        actor_user_id=actor.user_id,
        action="report_assignment.delete",
        entity_type="ReportCustomerAssignment",
        entity_id=str(before["id"]),
        before=before,
    )
    db.commit()

    log.info(
        "report unassigned",
        extra={"report_id": report.id, "customer_id": customer_id, "admin_email": actor.email},
    )
    return True


def list_assignments(db: Session, *, report_id: int) -> list[ReportCustomerAssignment]:
    return list(
        db.scalars(
            select(ReportCustomerAssignment)
            .options(selectinload(ReportCustomerAssignment.customer))
            .where(ReportCustomerAssignment.report_id == report_id)
            .order_by(ReportCustomerAssignment.created_at.desc(), ReportCustomerAssignment.id.desc())
        ).all()
    )


def assignment_count(db: Session, *, report_id: int) -> int:
    return int(
        db.scalar(
            select(func.count(ReportCustomerAssignment.id)).where(ReportCustomerAssignment.report_id == report_id)
        )
        or 0
    )
