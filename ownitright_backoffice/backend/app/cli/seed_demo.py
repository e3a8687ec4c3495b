# backend/app/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.auth import issue_token
from app.db import SessionLocal, init_db
from app.models import AdminUser, Customer, Property


@dataclass(frozen=True)
class SeedResult:
    admin_email: str
    admin_token: str
    property_ids: list[int]
    customer_ids: list[int]


SAMPLE_PROPERTIES = [
    {
        "name": "Prestige Lakeside Habitat",
        "type": "apartment",
        "developer": "Prestige Group",
        "status": "active",
        "area": "Varthur",
        "zone": "east",
        "address": "Varthur, East Bengaluru, Karnataka",
        "price": 145,
        "bedrooms": "3-bhk",
        "possession_date": "2025-12",
        "rera_number": "PRM/KA/RERA/1251/309/AG/2020-21",
    },
    {
        "name": "Brigade Woods",
        "type": "villa",
        "developer": "Brigade Group",
        "status": "pre-launch",
        "area": "Whitefield",
        "zone": "east",
        "address": "Whitefield, East Bengaluru, Karnataka",
        "price": 320,
        "bedrooms": "4-bhk",
        "possession_date": "2027-03",
        "rera_number": "PRM/KA/RERA/1251/310/AG/2021-22",
    },
    {
        "name": "Godrej Park Retreat",
        "type": "plot",
        "developer": "Godrej Properties",
        "status": "active",
        "area": "Sarjapur Road",
        "zone": "south",
        "address": "Sarjapur Road, South Bengaluru, Karnataka",
        "price": 95,
        "rera_number": "PRM/KA/RERA/1251/311/AG/2020-21",
    },
    {
        "name": "Sobha Neopolis",
        "type": "apartment",
        "developer": "Sobha Limited",
        "status": "under-construction",
        "area": "Panathur",
        "zone": "east",
        "address": "Panathur Road, East Bengaluru, Karnataka",
        "price": 180,
        "bedrooms": "3-bhk",
        "possession_date": "2026-09",
        "rera_number": "PRM/KA/RERA/1251/312/AG/2023-24",
    },
    {
        "name": "Ozone Urbana Prime",
        "type": "villa",
        "developer": "Ozone Group",
        "status": "completed",
        "area": "Devanahalli",
        "zone": "north",
        "address": "Devanahalli, North Bengaluru, Karnataka",
        "price": 260,
        "bedrooms": "4-bhk",
        "rera_number": "PRM/KA/RERA/1251/313/AG/2021-22",
    },
]

SAMPLE_CUSTOMERS = [
    ("Ananya Rao", "ananya.rao@example.com", "+91 98450 11111"),
    ("Vikram Shetty", "vikram.shetty@example.com", "+91 98450 22222"),
]


def _get_or_create_admin(db: Session, email: str, display_name: str) -> AdminUser:
    row = db.query(AdminUser).filter(AdminUser.email == email).one_or_none()
    if row:
        return row
    row = AdminUser(email=email, display_name=display_name, role="admin", created_at=datetime.utcnow())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_customer(db: Session, name: str, email: str, phone: str) -> Customer:
    row = db.query(Customer).filter(Customer.email == email).one_or_none()
    if row:
        return row
    row = Customer(name=name, email=email, phone=phone, created_at=datetime.utcnow())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_property(db: Session, data: dict) -> Property:
    # rera number doubles as the natural key for seeded listings
    row = db.query(Property).filter(Property.rera_number == data["rera_number"]).one_or_none()
    if row:
        return row
    now = datetime.utcnow()
    row = Property(**data, rera_approved=False, created_at=now, updated_at=now)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def seed_demo(
    *,
    admin_email: str = "admin@ownitright.local",
    admin_name: str = "Admin",
    create_sample_properties: bool = True,
) -> SeedResult:
    init_db()
    db = SessionLocal()
    try:
        admin = _get_or_create_admin(db, admin_email.strip().lower(), admin_name)
        customers = [_get_or_create_customer(db, *c) for c in SAMPLE_CUSTOMERS]
        props = [_get_or_create_property(db, p) for p in SAMPLE_PROPERTIES] if create_sample_properties else []

        return SeedResult(
            admin_email=admin.email,
            admin_token=issue_token(admin),
            property_ids=[p.id for p in props],
            customer_ids=[c.id for c in customers],
        )
    finally:
        db.close()
