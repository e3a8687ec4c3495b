"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

SCORE_FIELDS = (
    "transport_connectivity",
    "infrastructure_development",
    "social_infrastructure",
    "employment_hubs",
    "basic_amenities",
    "lifestyle_amenities",
    "modern_features",
    "rera_compliance",
    "title_clarity",
    "approvals",
    "price_competitiveness",
    "appreciation_potential",
    "rental_yield",
    "track_record",
    "financial_stability",
    "customer_satisfaction",
    "structural_quality",
    "finishing_standards",
    "maintenance_standards",
)

SCORE_TOTALS = (
    "location_score_total",
    "amenities_score_total",
    "legal_score_total",
    "value_score_total",
    "developer_score_total",
    "construction_score_total",
    "overall_score_total",
)

LEGAL_SECTIONS = (
    "current_ownership_json",
    "title_verification_json",
    "statutory_approvals_json",
    "tax_compliance_json",
    "litigation_history_json",
    "compliance_status_json",
)


def _int_zero(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default="0")


def upgrade():
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("display_name", sa.String(length=160), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="admin"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_admin_users_email"),
    )
    op.create_index("ix_admin_users_email", "admin_users", ["email"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("admin_users.id"), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=80), nullable=False),
        sa.Column("before_json", sa.Text(), nullable=True),
        sa.Column("after_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_entity_type", "audit_events", ["entity_type"])
    op.create_index("ix_audit_events_entity_id", "audit_events", ["entity_id"])

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="apartment"),
        sa.Column("developer", sa.String(length=200), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="active"),
        sa.Column("area", sa.String(length=120), nullable=False),
        sa.Column("zone", sa.String(length=20), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("built_up_area", sa.Integer(), nullable=True),
        sa.Column("land_area", sa.Integer(), nullable=True),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("bedrooms", sa.String(length=10), nullable=True),
        sa.Column("possession_date", sa.String(length=7), nullable=True),
        sa.Column("rera_number", sa.String(length=120), nullable=True),
        sa.Column("rera_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _int_zero("location_score"),
        _int_zero("amenities_score"),
        _int_zero("value_score"),
        sa.Column("overall_score", sa.String(length=6), nullable=False, server_default="0.0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_properties_rera_number", "properties", ["rera_number"])

    op.create_table(
        "property_scores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        *[_int_zero(f) for f in SCORE_FIELDS],
        *[_int_zero(f) for f in SCORE_TOTALS],
        sa.Column("overall_grade", sa.String(length=3), nullable=False, server_default="D"),
        sa.Column("key_strengths_json", sa.Text(), nullable=True),
        sa.Column("areas_of_concern_json", sa.Text(), nullable=True),
        sa.Column("field_notes_json", sa.Text(), nullable=True),
        sa.Column("recommendation_summary", sa.Text(), nullable=True),
        sa.Column("scored_by", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("property_id", name="uq_property_scores_property"),
    )
    op.create_index("ix_property_scores_property_id", "property_scores", ["property_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_customers_email"),
    )
    op.create_index("ix_customers_email", "customers", ["email"])

    op.create_table(
        "legal_audit_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("report_title", sa.String(length=255), nullable=False),
        sa.Column("lawyer_name", sa.String(length=160), nullable=False),
        sa.Column("lawyer_bar_number", sa.String(length=80), nullable=False),
        sa.Column("audit_date", sa.String(length=10), nullable=False),
        sa.Column("report_date", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        _int_zero("overall_score"),
        sa.Column("risk_level", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("executive_summary", sa.Text(), nullable=True),
        sa.Column("key_findings", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("legal_conclusion", sa.Text(), nullable=True),
        *[sa.Column(c, sa.Text(), nullable=True) for c in LEGAL_SECTIONS],
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_legal_audit_reports_property_id", "legal_audit_reports", ["property_id"])

    op.create_table(
        "report_customer_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "report_id", sa.Integer(), sa.ForeignKey("legal_audit_reports.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("access_level", sa.String(length=20), nullable=False, server_default="view"),
        sa.Column("assigned_by", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("report_id", "customer_id", name="uq_report_assignments_report_customer"),
    )
    op.create_index("ix_report_customer_assignments_report_id", "report_customer_assignments", ["report_id"])
    op.create_index("ix_report_customer_assignments_customer_id", "report_customer_assignments", ["customer_id"])

    op.create_table(
        "rera_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("rera_id", sa.String(length=120), nullable=False),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("project_name", sa.String(length=255), nullable=True),
        sa.Column("promoter_name", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("district", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("project_type", sa.String(length=30), nullable=False, server_default="residential"),
        sa.Column("total_units", sa.Integer(), nullable=True),
        sa.Column("project_area", sa.String(length=80), nullable=True),
        sa.Column("built_up_area", sa.String(length=80), nullable=True),
        sa.Column("registration_date", sa.String(length=20), nullable=True),
        sa.Column("approval_date", sa.String(length=20), nullable=True),
        sa.Column("completion_date", sa.String(length=20), nullable=True),
        sa.Column("registration_valid_till", sa.String(length=20), nullable=True),
        sa.Column("project_status", sa.String(length=30), nullable=False, server_default="under-construction"),
        sa.Column("compliance_status", sa.String(length=30), nullable=False, server_default="active"),
        sa.Column("verification_status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("project_cost", sa.String(length=80), nullable=True),
        sa.Column("amount_collected", sa.String(length=80), nullable=True),
        sa.Column("percentage_collected", sa.Float(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=40), nullable=True),
        sa.Column("contact_email", sa.String(length=200), nullable=True),
        sa.Column("promoter_address", sa.Text(), nullable=True),
        sa.Column("rera_portal_link", sa.String(length=255), nullable=True),
        sa.Column("last_verified_at", sa.DateTime(), nullable=True),
        sa.Column("last_sync_at", sa.DateTime(), nullable=True),
        sa.Column("sync_failure_reason", sa.Text(), nullable=True),
        sa.Column("raw_api_response_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("rera_id", name="uq_rera_records_rera_id"),
    )
    op.create_index("ix_rera_records_rera_id", "rera_records", ["rera_id"])
    op.create_index("ix_rera_records_property_id", "rera_records", ["property_id"])
    op.create_index("ix_rera_records_verification_status", "rera_records", ["verification_status"])


def downgrade():
    op.drop_table("rera_records")
    op.drop_table("report_customer_assignments")
    op.drop_table("legal_audit_reports")
    op.drop_table("customers")
    op.drop_table("property_scores")
    op.drop_table("properties")
    op.drop_table("audit_events")
    op.drop_table("admin_users")
