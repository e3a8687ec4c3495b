# backend/app/schemas.py
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Literal, Optional, List

from pydantic import BaseModel, Field, ConfigDict, model_validator

log = logging.getLogger(__name__)

PropertyType = Literal["apartment", "villa", "plot"]
PropertyStatus = Literal["pre-launch", "active", "under-construction", "completed", "sold-out"]
Zone = Literal["north", "south", "east", "west", "central"]
Bedrooms = Literal["1-bhk", "2-bhk", "3-bhk", "4-bhk", "5-bhk"]

ReportStatus = Literal["draft", "in-progress", "completed", "approved"]
RiskLevel = Literal["low", "medium", "high", "critical"]
AccessLevel = Literal["view", "download", "full"]


def _json_column(raw: Any, kind: type, *, column: str, score_id: Any) -> Any:
    """Decode a JSON list/dict column; unreadable content is logged and served empty."""
    if isinstance(raw, kind):
        return raw
    if not raw:
        return kind()
    try:
        v = json.loads(raw)
    except (TypeError, ValueError):
        v = None
    if not isinstance(v, kind):
        log.warning("unreadable %s on property score", column, extra={"score_id": score_id})
        return kind()
    return v


# -------------------- Properties --------------------

class PropertyCreate(BaseModel):
    name: str = Field(min_length=1)
    type: PropertyType
    developer: str = Field(min_length=1)
    status: PropertyStatus
    area: str = Field(min_length=1)
    zone: Zone
    address: str = Field(min_length=1)
    built_up_area: Optional[int] = Field(default=None, ge=0)
    land_area: Optional[int] = Field(default=None, ge=0)
    price: int = Field(ge=0)
    bedrooms: Optional[Bedrooms] = None
    possession_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}$")
    rera_number: Optional[str] = None
    rera_approved: bool = False


# omitted on update is fine; an explicit null can't be stored in these columns
_PROPERTY_REQUIRED = ("name", "type", "developer", "status", "area", "zone", "address", "price", "rera_approved")


class PropertyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[PropertyType] = None
    developer: Optional[str] = Field(default=None, min_length=1)
    status: Optional[PropertyStatus] = None
    area: Optional[str] = Field(default=None, min_length=1)
    zone: Optional[Zone] = None
    address: Optional[str] = Field(default=None, min_length=1)
    built_up_area: Optional[int] = Field(default=None, ge=0)
    land_area: Optional[int] = Field(default=None, ge=0)
    price: Optional[int] = Field(default=None, ge=0)
    bedrooms: Optional[Bedrooms] = None
    possession_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}$")
    rera_number: Optional[str] = None
    rera_approved: Optional[bool] = None

    @model_validator(mode="after")
    def _no_null_required(self) -> "PropertyUpdate":
        nulled = [k for k in _PROPERTY_REQUIRED if k in self.model_fields_set and getattr(self, k) is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


class PropertyOut(PropertyCreate):
    id: int
    location_score: int = 0
    amenities_score: int = 0
    value_score: int = 0
    overall_score: str = "0.0"
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyStatsOut(BaseModel):
    total_properties: int
    active_projects: int
    rera_approved: int
    avg_price: int


# -------------------- Property scores --------------------

class ScoreValues(BaseModel):
    """
    The 19 sub-criteria of the scoring rubric.

    Bounds are checked by domain.scoring.validate_values so the error names
    the field and its maximum.
    """

    transport_connectivity: Optional[int] = None
    infrastructure_development: Optional[int] = None
    social_infrastructure: Optional[int] = None
    employment_hubs: Optional[int] = None

    basic_amenities: Optional[int] = None
    lifestyle_amenities: Optional[int] = None
    modern_features: Optional[int] = None

    rera_compliance: Optional[int] = None
    title_clarity: Optional[int] = None
    approvals: Optional[int] = None

    price_competitiveness: Optional[int] = None
    appreciation_potential: Optional[int] = None
    rental_yield: Optional[int] = None

    track_record: Optional[int] = None
    financial_stability: Optional[int] = None
    customer_satisfaction: Optional[int] = None

    structural_quality: Optional[int] = None
    finishing_standards: Optional[int] = None
    maintenance_standards: Optional[int] = None


class PropertyScoreUpdate(ScoreValues):
    key_strengths: Optional[List[str]] = None
    areas_of_concern: Optional[List[str]] = None
    field_notes: Optional[dict[str, str]] = None
    recommendation_summary: Optional[str] = None
    scored_by: Optional[str] = None


class PropertyScoreCreate(PropertyScoreUpdate):
    property_id: int


class PropertyScoreOut(BaseModel):
    id: int
    property_id: int

    transport_connectivity: int
    infrastructure_development: int
    social_infrastructure: int
    employment_hubs: int
    basic_amenities: int
    lifestyle_amenities: int
    modern_features: int
    rera_compliance: int
    title_clarity: int
    approvals: int
    price_competitiveness: int
    appreciation_potential: int
    rental_yield: int
    track_record: int
    financial_stability: int
    customer_satisfaction: int
    structural_quality: int
    finishing_standards: int
    maintenance_standards: int

    location_score_total: int
    amenities_score_total: int
    legal_score_total: int
    value_score_total: int
    developer_score_total: int
    construction_score_total: int
    overall_score_total: int
    overall_grade: str

    key_strengths: List[str] = Field(default_factory=list)
    areas_of_concern: List[str] = Field(default_factory=list)
    field_notes: dict[str, str] = Field(default_factory=dict)
    recommendation_summary: Optional[str] = None
    scored_by: Optional[str] = None

    created_at: datetime
    last_updated: datetime

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _decode_json_columns(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data

        out = {k: getattr(data, k) for k in cls.model_fields if hasattr(data, k)}
        sid = getattr(data, "id", None)
        for name, kind in (("key_strengths", list), ("areas_of_concern", list), ("field_notes", dict)):
            column = f"{name}_json"
            out[name] = _json_column(getattr(data, column, None), kind, column=column, score_id=sid)
        return out


class ScoreStatsOut(BaseModel):
    total_properties: int
    scored: int
    needs_scoring: int
    a_plus_count: int
    avg_score: int
    grade_distribution: dict[str, int]


class PropertyScoringRowOut(BaseModel):
    property: PropertyOut
    score: Optional[PropertyScoreOut] = None
    actions: List[str]


# -------------------- Legal audit report sections --------------------

class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CurrentOwnershipSection(_Section):
    owner_name: str = ""
    ownership_type: str = ""
    acquisition_date: str = ""
    acquisition_mode: str = ""
    previous_owners: List[str] = Field(default_factory=list)


class TitleVerificationSection(_Section):
    title_deed_number: str = ""
    registration_date: str = ""
    registrar_office: str = ""
    title_clarity: Literal["clear", "disputed", "encumbered", "unclear"] = "clear"
    encumbrances: List[str] = Field(default_factory=list)
    title_defects: List[str] = Field(default_factory=list)


class StatutoryApprovalsSection(_Section):
    rera_registration: bool = False
    rera_number: str = ""
    plan_approval: bool = False
    approval_number: str = ""
    completion_certificate: bool = False
    occupancy_certificate: bool = False
    environment_clearance: bool = False


class TaxComplianceSection(_Section):
    property_tax_status: Literal["current", "arrears", "disputed"] = "current"
    khata_status: Literal["a-khata", "b-khata", "revenue-records", "disputed"] = "a-khata"
    survey_number: str = ""
    dc_conversion: bool = False
    land_revenue_paid: bool = False


class LitigationHistorySection(_Section):
    pending_cases: List[str] = Field(default_factory=list)
    past_disputes: List[str] = Field(default_factory=list)
    court_orders: List[str] = Field(default_factory=list)
    legal_notices: List[str] = Field(default_factory=list)


class ComplianceStatusSection(_Section):
    municipal_compliance: bool = False
    fire_noc_status: bool = False
    pollution_clearance: bool = False
    water_connection_legal: bool = False
    electricity_connection_legal: bool = False


# -------------------- Legal audit reports --------------------

class LegalAuditReportIn(BaseModel):
    property_id: int
    report_title: str = Field(min_length=1)
    lawyer_name: str = Field(min_length=1)
    lawyer_bar_number: str = Field(min_length=1)
    audit_date: date
    report_date: date
    status: ReportStatus = "draft"
    overall_score: int = Field(default=0, ge=0, le=100)
    risk_level: RiskLevel = "medium"

    executive_summary: str = ""
    key_findings: str = ""
    recommendations: str = ""
    legal_conclusion: str = ""

    current_ownership: CurrentOwnershipSection = Field(default_factory=CurrentOwnershipSection)
    title_verification: TitleVerificationSection = Field(default_factory=TitleVerificationSection)
    statutory_approvals: StatutoryApprovalsSection = Field(default_factory=StatutoryApprovalsSection)
    tax_compliance: TaxComplianceSection = Field(default_factory=TaxComplianceSection)
    litigation_history: LitigationHistorySection = Field(default_factory=LitigationHistorySection)
    compliance_status: ComplianceStatusSection = Field(default_factory=ComplianceStatusSection)


class LegalAuditReportOut(LegalAuditReportIn):
    id: int
    property_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    # list rows only: section name -> why it could not be read (defaults are shown instead)
    section_errors: dict[str, str] = Field(default_factory=dict)


class LegalAuditStatsOut(BaseModel):
    total_reports: int
    draft_reports: int
    in_progress_reports: int
    completed_reports: int
    approved_reports: int
    high_risk_reports: int
    avg_score: float


# -------------------- Customers / assignments --------------------

class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: Optional[str] = None


class CustomerOut(CustomerCreate):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AssignCustomerIn(BaseModel):
    # optional so an unselected customer gets a readable 422 instead of a schema error
    customer_id: Optional[int] = None
    access_level: AccessLevel = "view"
    assigned_by: Optional[str] = None
    notes: Optional[str] = None


class AssignmentOut(BaseModel):
    id: int
    report_id: int
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    access_level: str
    assigned_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _flatten_customer(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        out = {k: getattr(data, k) for k in cls.model_fields if hasattr(data, k)}
        customer = getattr(data, "customer", None)
        if customer is not None:
            out["customer_name"] = customer.name
            out["customer_email"] = customer.email
        return out


class RemoveAssignmentOut(BaseModel):
    ok: bool = True
    removed: bool


class AssignmentBadgeOut(BaseModel):
    report_id: int
    count: int
    label: str


# -------------------- RERA --------------------

class ReraVerifyIn(BaseModel):
    rera_id: str
    property_id: Optional[int] = None


class ReraBulkVerifyIn(BaseModel):
    """Either an explicit list or the raw newline-delimited text box."""

    rera_ids: Optional[List[str]] = None
    text: Optional[str] = None
    dedupe: Optional[bool] = None


class ReraRecordOut(BaseModel):
    id: int
    rera_id: str
    property_id: Optional[int] = None
    project_name: Optional[str] = None
    promoter_name: Optional[str] = None
    location: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    project_type: str
    total_units: Optional[int] = None
    project_area: Optional[str] = None
    built_up_area: Optional[str] = None
    registration_date: Optional[str] = None
    approval_date: Optional[str] = None
    completion_date: Optional[str] = None
    registration_valid_till: Optional[str] = None
    project_status: str
    compliance_status: str
    verification_status: str
    project_cost: Optional[str] = None
    amount_collected: Optional[str] = None
    percentage_collected: Optional[float] = None
    website: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    promoter_address: Optional[str] = None
    rera_portal_link: Optional[str] = None
    last_verified_at: Optional[datetime] = None
    last_sync_at: Optional[datetime] = None
    sync_failure_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReraVerifyOut(BaseModel):
    ok: bool = True
    message: str
    data: ReraRecordOut


class ReraBatchItemOut(BaseModel):
    rera_id: str
    success: bool
    property_id: Optional[int] = None
    property_name: Optional[str] = None
    error: Optional[str] = None
    data: Optional[ReraRecordOut] = None


class ReraBatchOut(BaseModel):
    total: int
    succeeded: int
    failed: int
    message: str
    results: List[ReraBatchItemOut]


class AutoSyncOut(BaseModel):
    queued: bool
    message: str
    task_id: Optional[str] = None
    summary: Optional[ReraBatchOut] = None


class ReraStatusSummaryOut(BaseModel):
    total: int
    verified: int
    pending: int
    failed: int
    outdated: int
    by_compliance_status: dict[str, int]
    by_project_status: dict[str, int]


# -------------------- Audit / auth --------------------

class AuditEventOut(BaseModel):
    id: int
    actor_user_id: Optional[int] = None
    action: str
    entity_type: str
    entity_id: str
    before_json: Optional[str] = None
    after_json: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PrincipalOut(BaseModel):
    user_id: int
    email: str
    role: str
