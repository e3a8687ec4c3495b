# backend/app/routers/customers.py
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import get_principal, require_editor
from ..db import get_db
from ..domain.audit import audit_write, row_snapshot
from ..models import Customer
from ..schemas import CustomerCreate, CustomerOut
from ..services.ownership import must_get_customer

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=list[CustomerOut])
def list_customers(db: Session = Depends(get_db), p=Depends(get_principal)):
    return list(db.scalars(select(Customer).order_by(Customer.name, Customer.id)).all())


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db), p=Depends(require_editor)):
    email = payload.email.strip().lower()
    if db.scalar(select(Customer).where(Customer.email == email)) is not None:
        raise HTTPException(status_code=409, detail="customer email already exists")

    row = Customer(name=payload.name.strip(), email=email, phone=payload.phone, created_at=datetime.utcnow())
    db.add(row)
    db.flush()
    audit_write(
        db,
        actor_user_id=p.user_id,
        action="customer.create",
        entity_type="Customer",
        entity_id=str(row.id),
        after=row_snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_customer(db, customer_id=customer_id)
