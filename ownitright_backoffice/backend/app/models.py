# backend/app/models.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


# -----------------------------
# Admin users + audit trail
# -----------------------------
class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="admin")  # viewer|editor|admin
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("admin_users.id"), nullable=True)

    action: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(80), nullable=False, index=True)

    before_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    after_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Core domain: Properties / Scores
# -----------------------------
class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="apartment")  # apartment|villa|plot
    developer: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="active")

    area: Mapped[str] = mapped_column(String(120), nullable=False)
    zone: Mapped[str] = mapped_column(String(20), nullable=False)  # north|south|east|west|central
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    built_up_area: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    land_area: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # lakhs
    bedrooms: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    possession_date: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)  # YYYY-MM

    rera_number: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    rera_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # 1-5 projections of the PropertyScore, kept for listing cards
    location_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amenities_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    value_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overall_score: Mapped[str] = mapped_column(String(6), nullable=False, default="0.0")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    score: Mapped[Optional["PropertyScore"]] = relationship(
        back_populates="property", uselist=False, cascade="all, delete-orphan"
    )
    legal_audit_reports: Mapped[List["LegalAuditReport"]] = relationship(
        back_populates="property", cascade="all, delete-orphan"
    )


class PropertyScore(Base):
    __tablename__ = "property_scores"
    __table_args__ = (UniqueConstraint("property_id", name="uq_property_scores_property"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)

    # location (25)
    transport_connectivity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    infrastructure_development: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    social_infrastructure: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    employment_hubs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # amenities (20)
    basic_amenities: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lifestyle_amenities: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    modern_features: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # legal (20)
    rera_compliance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title_clarity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    approvals: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # value (15)
    price_competitiveness: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    appreciation_potential: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rental_yield: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # developer (10)
    track_record: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    financial_stability: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    customer_satisfaction: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # construction (10)
    structural_quality: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    finishing_standards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    maintenance_standards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    location_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amenities_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    legal_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    value_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    developer_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    construction_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overall_score_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overall_grade: Mapped[str] = mapped_column(String(3), nullable=False, default="D")

    key_strengths_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    areas_of_concern_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    field_notes_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recommendation_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    scored_by: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    last_updated: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="score")


# -----------------------------
# Legal audit reports + customers
# -----------------------------
class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    assignments: Mapped[List["ReportCustomerAssignment"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan"
    )


class LegalAuditReport(Base):
    __tablename__ = "legal_audit_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)

    report_title: Mapped[str] = mapped_column(String(255), nullable=False)
    lawyer_name: Mapped[str] = mapped_column(String(160), nullable=False)
    lawyer_bar_number: Mapped[str] = mapped_column(String(80), nullable=False)
    audit_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    report_date: Mapped[str] = mapped_column(String(10), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    overall_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    risk_level: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")

    executive_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    key_findings: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    legal_conclusion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    current_ownership_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    title_verification_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    statutory_approvals_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tax_compliance_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    litigation_history_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    compliance_status_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="legal_audit_reports")
    assignments: Mapped[List["ReportCustomerAssignment"]] = relationship(
        back_populates="report", cascade="all, delete-orphan"
    )


class ReportCustomerAssignment(Base):
    __tablename__ = "report_customer_assignments"
    __table_args__ = (UniqueConstraint("report_id", "customer_id", name="uq_report_assignments_report_customer"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    report_id: Mapped[int] = mapped_column(ForeignKey("legal_audit_reports.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)

    access_level: Mapped[str] = mapped_column(String(20), nullable=False, default="view")  # view|download|full
    assigned_by: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    report: Mapped["LegalAuditReport"] = relationship(back_populates="assignments")
    customer: Mapped["Customer"] = relationship(back_populates="assignments")


# -----------------------------
# RERA registry snapshots
# -----------------------------
class ReraRecord(Base):
    __tablename__ = "rera_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    rera_id: Mapped[str] = mapped_column(String(120), nullable=False, unique=True, index=True)
    property_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True
    )

    project_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    promoter_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    district: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    project_type: Mapped[str] = mapped_column(String(30), nullable=False, default="residential")

    total_units: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    project_area: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    built_up_area: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    registration_date: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    approval_date: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    completion_date: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    registration_valid_till: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    project_status: Mapped[str] = mapped_column(String(30), nullable=False, default="under-construction")
    compliance_status: Mapped[str] = mapped_column(String(30), nullable=False, default="active")
    verification_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)

    project_cost: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    amount_collected: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    percentage_collected: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    promoter_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rera_portal_link: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    last_verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    sync_failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    raw_api_response_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
