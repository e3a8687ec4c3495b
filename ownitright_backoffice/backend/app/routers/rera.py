# backend/app/routers/rera.py
from __future__ import annotations

import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import get_principal, require_admin, require_editor
from ..clients.rera_registry import ReraNotConfiguredError, ReraRegistryClient, ReraRegistryError
from ..config import settings
from ..db import get_db
from ..domain.rera_mapping import normalize_rera_ids, parse_rera_ids
from ..schemas import (
    AutoSyncOut,
    ReraBatchItemOut,
    ReraBatchOut,
    ReraBulkVerifyIn,
    ReraRecordOut,
    ReraStatusSummaryOut,
    ReraVerifyIn,
    ReraVerifyOut,
)
from ..services.ownership import must_get_property, must_get_rera_record
from ..services.rera_sync import BatchResult, ReraSyncService, SleepFn

router = APIRouter(prefix="/rera-data", tags=["rera"])


def get_rera_client() -> ReraRegistryClient:
    return ReraRegistryClient()


def get_rera_sleep() -> SleepFn:
    return time.sleep


def get_rera_service(
    db: Session = Depends(get_db),
    client: ReraRegistryClient = Depends(get_rera_client),
    sleep: SleepFn = Depends(get_rera_sleep),
    p=Depends(get_principal),
) -> ReraSyncService:
    return ReraSyncService(db, client=client, sleep=sleep, actor_user_id=p.user_id)


def batch_out(result: BatchResult) -> ReraBatchOut:
    return ReraBatchOut(
        total=result.total,
        succeeded=result.succeeded,
        failed=result.failed,
        message=result.message,
        results=[
            ReraBatchItemOut(
                rera_id=i.rera_id,
                success=i.success,
                property_id=i.property_id,
                property_name=i.property_name,
                error=i.error,
                data=ReraRecordOut.model_validate(i.record) if i.record is not None else None,
            )
            for i in result.items
        ],
    )


@router.get("", response_model=list[ReraRecordOut])
def list_records(
    verification_status: Optional[str] = Query(default=None),
    compliance_status: Optional[str] = Query(default=None),
    project_status: Optional[str] = Query(default=None),
    svc: ReraSyncService = Depends(get_rera_service),
    p=Depends(get_principal),
):
    return svc.list_records(
        verification_status=verification_status,
        compliance_status=compliance_status,
        project_status=project_status,
    )


@router.get("/status-summary", response_model=ReraStatusSummaryOut)
def status_summary(svc: ReraSyncService = Depends(get_rera_service), p=Depends(get_principal)):
    return svc.status_summary()


@router.get("/property/{property_id}", response_model=list[ReraRecordOut])
def records_for_property(
    property_id: int,
    db: Session = Depends(get_db),
    svc: ReraSyncService = Depends(get_rera_service),
    p=Depends(get_principal),
):
    must_get_property(db, property_id=property_id)
    return svc.records_for_property(property_id)


@router.post("/verify", response_model=ReraVerifyOut)
def verify(
    payload: ReraVerifyIn,
    db: Session = Depends(get_db),
    svc: ReraSyncService = Depends(get_rera_service),
    p=Depends(require_editor),
):
    rera_id = (payload.rera_id or "").strip()
    if not rera_id:
        raise HTTPException(status_code=422, detail="Please enter a RERA ID to verify")
    if payload.property_id is not None:
        must_get_property(db, property_id=payload.property_id)

    try:
        row = svc.verify_single(rera_id, property_id=payload.property_id)
    except ReraNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ReraRegistryError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ReraVerifyOut(
        ok=True,
        message=f"RERA project {row.project_name or row.rera_id} has been verified and synced.",
        data=ReraRecordOut.model_validate(row),
    )


@router.post("/bulk-verify", response_model=ReraBatchOut)
def bulk_verify(
    payload: ReraBulkVerifyIn,
    svc: ReraSyncService = Depends(get_rera_service),
    p=Depends(require_editor),
):
    dedupe = settings.rera_bulk_dedupe if payload.dedupe is None else bool(payload.dedupe)
    if payload.rera_ids is not None:
        ids = normalize_rera_ids(payload.rera_ids, dedupe=dedupe)
    else:
        ids = parse_rera_ids(payload.text or "", dedupe=dedupe)

    if not ids:
        raise HTTPException(status_code=422, detail="Please enter at least one RERA ID")

    return batch_out(svc.verify_bulk(ids))


@router.post("/auto-sync", response_model=AutoSyncOut)
def auto_sync(svc: ReraSyncService = Depends(get_rera_service), p=Depends(require_admin)):
    if settings.rera_auto_sync_mode == "celery":
        from ..workers.rera_tasks import auto_sync_rera

        res = auto_sync_rera.delay()
        return AutoSyncOut(queued=True, message="Auto-sync queued", task_id=str(res.id))

    summary = batch_out(svc.auto_sync())
    return AutoSyncOut(queued=False, message=summary.message, summary=summary)


@router.post("/mark-outdated", response_model=dict)
def mark_outdated(svc: ReraSyncService = Depends(get_rera_service), p=Depends(require_editor)):
    n = svc.mark_outdated()
    return {"ok": True, "marked": n, "stale_after_days": settings.rera_stale_after_days}


# rera ids carry slashes (PRM/KA/RERA/...), so these take the rest of the path
@router.get("/{rera_id:path}", response_model=ReraRecordOut)
def get_record(rera_id: str, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_rera_record(db, rera_id=rera_id)


@router.delete("/{rera_id:path}", response_model=dict)
def delete_record(
    rera_id: str,
    db: Session = Depends(get_db),
    svc: ReraSyncService = Depends(get_rera_service),
    p=Depends(require_admin),
):
    row = must_get_rera_record(db, rera_id=rera_id)
    svc.delete_record(row)
    return {"ok": True, "rera_id": rera_id}
