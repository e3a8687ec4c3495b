# backend/app/services/rera_sync.py
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..clients.rera_registry import ReraRegistryClient, ReraRegistryError
from ..config import settings
from ..domain.audit import audit_write, row_snapshot
from ..domain.rera_mapping import (
    COMPLIANCE_STATUSES,
    PROJECT_STATUSES,
    map_compliance_status,
    map_project_status,
    map_project_type,
)
from ..models import Property, ReraRecord

log = logging.getLogger(__name__)

SleepFn = Callable[[float], None]


@dataclass(frozen=True)
class SyncOutcome:
    rera_id: str
    success: bool
    record: Optional[ReraRecord] = None
    property_id: Optional[int] = None
    property_name: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BatchResult:
    items: list[SyncOutcome] = field(default_factory=list)
    label: str = "Bulk verification"

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for i in self.items if i.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def message(self) -> str:
        return f"{self.label} completed: {self.succeeded} succeeded, {self.failed} failed"


def _text(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _int(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _float(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _apply_registry_data(row: ReraRecord, data: dict[str, Any]) -> None:
    row.project_name = _text(data.get("project_name"))
    row.promoter_name = _text(data.get("promoter_name"))
    row.location = _text(data.get("location"))
    row.district = _text(data.get("district"))
    row.state = _text(data.get("state")) or settings.rera_default_state
    row.project_type = map_project_type(data.get("project_type"))

    row.total_units = _int(data.get("total_units"))
    row.project_area = _text(data.get("project_area"))
    row.built_up_area = _text(data.get("built_up_area"))
    row.registration_date = _text(data.get("registration_date"))
    row.approval_date = _text(data.get("approval_date"))
    row.completion_date = _text(data.get("completion_date"))
    row.registration_valid_till = _text(data.get("registration_valid_till"))

    row.project_status = map_project_status(data.get("project_status"))
    row.compliance_status = map_compliance_status(data.get("compliance_status"))

    row.project_cost = _text(data.get("project_cost"))
    row.amount_collected = _text(data.get("amount_collected"))
    row.percentage_collected = _float(data.get("percentage_collected"))
    row.website = _text(data.get("website"))
    row.contact_phone = _text(data.get("contact_phone"))
    row.contact_email = _text(data.get("contact_email"))
    row.promoter_address = _text(data.get("promoter_address"))
    row.rera_portal_link = _text(data.get("rera_portal_link"))


class ReraSyncService:
    """
    Verifies RERA ids against the registry and keeps ReraRecord rows current.

    The registry client and the sleep used for inter-request throttling are
    injected so bulk runs can be driven without network or wall-clock waits.
    """

    def __init__(
        self,
        db: Session,
        *,
        client: Optional[ReraRegistryClient] = None,
        sleep: SleepFn = time.sleep,
        delay_seconds: Optional[float] = None,
        actor_user_id: Optional[int] = None,
    ) -> None:
        self.db = db
        self.actor_user_id = actor_user_id
        self.client = client or ReraRegistryClient()
        self.sleep = sleep
        self.delay_seconds = float(settings.rera_bulk_delay_seconds if delay_seconds is None else delay_seconds)

    # ---------------- lookups ----------------

    def get_record(self, rera_id: str) -> Optional[ReraRecord]:
        return self.db.scalar(select(ReraRecord).where(ReraRecord.rera_id == rera_id))

    def list_records(
        self,
        *,
        verification_status: Optional[str] = None,
        compliance_status: Optional[str] = None,
        project_status: Optional[str] = None,
    ) -> list[ReraRecord]:
        q = select(ReraRecord)
        if verification_status:
            q = q.where(ReraRecord.verification_status == verification_status)
        if compliance_status:
            q = q.where(ReraRecord.compliance_status == compliance_status)
        if project_status:
            q = q.where(ReraRecord.project_status == project_status)
        return list(self.db.scalars(q.order_by(ReraRecord.updated_at.desc(), ReraRecord.id.desc())).all())

    def records_for_property(self, property_id: int) -> list[ReraRecord]:
        return list(
            self.db.scalars(
                select(ReraRecord).where(ReraRecord.property_id == property_id).order_by(ReraRecord.id)
            ).all()
        )

    # ---------------- sync ----------------

    def sync(self, rera_id: str, *, property_id: Optional[int] = None) -> ReraRecord:
        """
        Fetch one id from the registry and upsert its record.

        On failure an existing record is flagged failed with the reason and
        the error is re-raised; no record is created for an id the registry
        never confirmed.
        """
        rera_id = (rera_id or "").strip()
        if not rera_id:
            raise ValueError("RERA ID is required")

        try:
            resp = self.client.verify(rera_id)
        except ReraRegistryError as e:
            self._mark_failed(rera_id, str(e))
            raise

        now = datetime.utcnow()
        row = self.get_record(rera_id)
        before = row_snapshot(row) if row is not None else None
        if row is None:
            row = ReraRecord(rera_id=rera_id, created_at=now)

        _apply_registry_data(row, resp.data or {})
        if property_id is not None:
            row.property_id = property_id
        row.verification_status = "verified"
        row.sync_failure_reason = None
        row.last_verified_at = now
        row.last_sync_at = now
        row.raw_api_response_json = json.dumps(resp.raw, sort_keys=True, default=str)
        row.updated_at = now
        self.db.add(row)

        if property_id is not None:
            prop = self.db.get(Property, property_id)
            if prop is not None:
                prop.rera_approved = row.compliance_status == "active"
                prop.rera_number = rera_id
                prop.updated_at = now
                self.db.add(prop)

        self.db.flush()
        audit_write(
            self.db,
            actor_user_id=self.actor_user_id,
            action="rera_record.sync",
            entity_type="ReraRecord",
            entity_id=rera_id,
            before=before,
            after=row_snapshot(row),
        )
        self.db.commit()
        self.db.refresh(row)
        return row

    def _mark_failed(self, rera_id: str, reason: str) -> None:
        row = self.get_record(rera_id)
        if row is None:
            return
        now = datetime.utcnow()
        row.verification_status = "failed"
        row.sync_failure_reason = reason
        row.last_sync_at = now
        row.updated_at = now
        self.db.add(row)
        self.db.commit()

    def verify_single(self, rera_id: str, *, property_id: Optional[int] = None) -> ReraRecord:
        row = self.sync(rera_id, property_id=property_id)
        log.info("rera verified", extra={"rera_id": row.rera_id, "property_id": property_id})
        return row

    def _run_one(self, rera_id: str, *, prop: Optional[Property] = None) -> SyncOutcome:
        property_id = prop.id if prop is not None else None
        property_name = prop.name if prop is not None else None
        try:
            row = self.sync(rera_id, property_id=property_id)
        except (ReraRegistryError, ValueError) as e:
            log.warning("rera sync failed", extra={"rera_id": rera_id, "property_id": property_id})
            return SyncOutcome(
                rera_id=rera_id,
                success=False,
                property_id=property_id,
                property_name=property_name,
                error=str(e),
            )

        log.info("rera synced", extra={"rera_id": rera_id, "property_id": property_id})
        return SyncOutcome(
            rera_id=rera_id,
            success=True,
            record=row,
            property_id=property_id,
            property_name=property_name,
        )

    def verify_bulk(self, rera_ids: list[str]) -> BatchResult:
        """Sequential; sleeps between items, never after the last one."""
        result = BatchResult(label="Bulk verification")
        for i, rera_id in enumerate(rera_ids):
            if i > 0 and self.delay_seconds > 0:
                self.sleep(self.delay_seconds)
            result.items.append(self._run_one(rera_id))
        log.info(result.message)
        return result

    # ---------------- auto sync ----------------

    def _is_stale(self, row: ReraRecord, now: datetime) -> bool:
        if row.last_verified_at is None:
            return True
        return row.last_verified_at < now - timedelta(days=int(settings.rera_stale_after_days))

    def auto_sync_targets(self) -> list[Property]:
        """
        Properties carrying a RERA number that are not yet approved, or whose
        record is missing, failed, outdated or past the staleness window.
        """
        now = datetime.utcnow()
        props = self.db.scalars(
            select(Property).where(Property.rera_number.is_not(None)).order_by(Property.id)
        ).all()

        out: list[Property] = []
        for p in props:
            rera_id = (p.rera_number or "").strip()
            if not rera_id:
                continue
            if not p.rera_approved:
                out.append(p)
                continue
            row = self.get_record(rera_id)
            if row is None or row.verification_status in ("failed", "outdated", "pending") or self._is_stale(row, now):
                out.append(p)
        return out

    def auto_sync(self) -> BatchResult:
        result = BatchResult(label="Auto-sync")
        for i, prop in enumerate(self.auto_sync_targets()):
            if i > 0 and self.delay_seconds > 0:
                self.sleep(self.delay_seconds)
            result.items.append(self._run_one((prop.rera_number or "").strip(), prop=prop))
        log.info(result.message)
        return result

    # ---------------- maintenance ----------------

    def delete_record(self, row: ReraRecord) -> None:
        before = row_snapshot(row)
        self.db.delete(row)
        audit_write(
            self.db,
            actor_user_id=self.actor_user_id,
            action="rera_record.delete",
            entity_type="ReraRecord",
            entity_id=before["rera_id"],
            before=before,
        )
        self.db.commit()

    def mark_outdated(self) -> int:
        """Flag verified records older than the staleness window; returns how many."""
        now = datetime.utcnow()
        cutoff = now - timedelta(days=int(settings.rera_stale_after_days))
        rows = self.db.scalars(
            select(ReraRecord).where(
                ReraRecord.verification_status == "verified",
                ReraRecord.last_verified_at.is_not(None),
                ReraRecord.last_verified_at < cutoff,
            )
        ).all()
        for r in rows:
            r.verification_status = "outdated"
            r.updated_at = now
            self.db.add(r)
            audit_write(
                self.db,
                actor_user_id=self.actor_user_id,
                action="rera_record.mark_outdated",
                entity_type="ReraRecord",
                entity_id=r.rera_id,
                after={"verification_status": "outdated"},
            )
        self.db.commit()
        if rows:
            log.info("rera records marked outdated", extra={"rera_id": ",".join(r.rera_id for r in rows)})
        return len(rows)

    def status_summary(self) -> dict[str, Any]:
        rows = self.db.scalars(select(ReraRecord)).all()

        def _count(attr: str, value: str) -> int:
            return sum(1 for r in rows if getattr(r, attr) == value)

        return {
            "total": len(rows),
            "verified": _count("verification_status", "verified"),
            "pending": _count("verification_status", "pending"),
            "failed": _count("verification_status", "failed"),
            "outdated": _count("verification_status", "outdated"),
            "by_compliance_status": {
                s.replace("-", "_"): _count("compliance_status", s) for s in COMPLIANCE_STATUSES
            },
            "by_project_status": {s.replace("-", "_"): _count("project_status", s) for s in PROJECT_STATUSES},
        }
