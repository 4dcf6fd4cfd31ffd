"""Create rental lifecycle tables

Revision ID: 20260201_000001
Revises:
Create Date: 2026-02-01

Users, properties, tenancies, monthly rent obligations with their
hash-chained payment ledger, maintenance requests, bookings and the audit
trail. On PostgreSQL, exclusion constraints additionally stop two active
tenancies (or two confirmed bookings) of one unit from overlapping.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20260201_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name, *values):
    return sa.Enum(*values, name=name, create_constraint=True)


TENANT_STATUS = ("active", "ended", "evicted")
RENT_PAYMENT_STATUS = ("pending", "partial", "paid", "late", "waived")
PAYMENT_METHOD = ("mpesa", "bank_transfer", "cash", "card", "credit")
MAINTENANCE_STATUS = (
    "pending", "assigned", "scheduled", "in_progress", "pending_parts", "completed", "cancelled",
)
MAINTENANCE_PRIORITY = ("low", "medium", "high", "emergency")
MAINTENANCE_CATEGORY = (
    "plumbing", "electrical", "hvac", "appliance", "structural", "pest_control", "other",
)
BOOKING_STATUS = ("pending", "confirmed", "cancelled", "completed")

ENUM_NAMES = (
    "tenant_status", "rent_payment_status", "payment_method", "maintenance_status",
    "maintenance_priority", "maintenance_category", "booking_status",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"], name="fk_properties_landlord_id"),
    )
    op.create_index("ix_properties_landlord_id", "properties", ["landlord_id"])

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("tenant_name", sa.String(200), nullable=True),
        sa.Column("tenant_email", sa.String(255), nullable=True),
        sa.Column("tenant_phone", sa.String(50), nullable=True),
        sa.Column("emergency_contact_name", sa.String(200), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(50), nullable=True),
        sa.Column("emergency_contact_relationship", sa.String(100), nullable=True),
        sa.Column("lease_start_date", sa.Date(), nullable=False),
        sa.Column("lease_end_date", sa.Date(), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(12, 2), nullable=False),
        sa.Column("rent_due_day", sa.Integer(), nullable=False),
        sa.Column("grace_period_days", sa.Integer(), nullable=False),
        sa.Column("late_fee_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", _enum("tenant_status", *TENANT_STATUS), nullable=False),
        sa.Column("is_late_on_rent", sa.Boolean(), nullable=False),
        sa.Column("move_in_date", sa.Date(), nullable=True),
        sa.Column("move_in_condition_notes", sa.Text(), nullable=True),
        sa.Column("move_in_photos", sa.JSON(), nullable=False),
        sa.Column("move_out_date", sa.Date(), nullable=True),
        sa.Column("move_out_condition_notes", sa.Text(), nullable=True),
        sa.Column("move_out_photos", sa.JSON(), nullable=False),
        sa.Column("security_deposit_returned", sa.Numeric(12, 2), nullable=True),
        sa.Column("eviction_reason", sa.Text(), nullable=True),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], name="fk_tenants_property_id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"], name="fk_tenants_landlord_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_tenants_user_id"),
        sa.CheckConstraint("lease_end_date > lease_start_date", name="ck_tenants_lease_dates"),
        sa.CheckConstraint("monthly_rent > 0", name="ck_tenants_monthly_rent_positive"),
    )
    op.create_index("ix_tenants_property_id", "tenants", ["property_id"])
    op.create_index("ix_tenants_landlord_id", "tenants", ["landlord_id"])
    op.create_index("ix_tenants_user_id", "tenants", ["user_id"])
    op.create_index("ix_tenants_status", "tenants", ["status"])

    op.create_table(
        "rent_payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("payment_month", sa.Date(), nullable=False),
        sa.Column("amount_due", sa.Numeric(12, 2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(12, 2), nullable=False),
        sa.Column("late_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("payment_method", _enum("payment_method", *PAYMENT_METHOD), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("settled_on", sa.Date(), nullable=True),
        sa.Column("status", _enum("rent_payment_status", *RENT_PAYMENT_STATUS), nullable=False),
        sa.Column("is_late", sa.Boolean(), nullable=False),
        sa.Column("waived_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], name="fk_rent_payments_tenant_id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], name="fk_rent_payments_property_id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"], name="fk_rent_payments_landlord_id"),
        sa.UniqueConstraint("tenant_id", "payment_month", name="uq_rent_payments_tenant_month"),
    )
    op.create_index("ix_rent_payments_tenant_id", "rent_payments", ["tenant_id"])
    op.create_index("ix_rent_payments_property_id", "rent_payments", ["property_id"])
    op.create_index("ix_rent_payments_landlord_id", "rent_payments", ["landlord_id"])
    op.create_index("ix_rent_payments_payment_month", "rent_payments", ["payment_month"])
    op.create_index("ix_rent_payments_due_date", "rent_payments", ["due_date"])
    op.create_index("ix_rent_payments_status", "rent_payments", ["status"])

    op.create_table(
        "payment_ledger",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("rent_payment_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("transaction_ref", sa.String(255), nullable=True),
        sa.Column("paid_on", sa.Date(), nullable=False),
        sa.Column("transaction_hash", sa.String(64), nullable=False),
        sa.Column("previous_hash", sa.String(64), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["rent_payment_id"],
            ["rent_payments.id"],
            name="fk_payment_ledger_rent_payment_id",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], name="fk_payment_ledger_tenant_id"),
        sa.UniqueConstraint("tenant_id", "previous_hash", name="uq_payment_ledger_tenant_previous_hash"),
    )
    op.create_index("ix_payment_ledger_rent_payment_id", "payment_ledger", ["rent_payment_id"])
    op.create_index("ix_payment_ledger_tenant_id", "payment_ledger", ["tenant_id"])
    op.create_index("ix_payment_ledger_transaction_hash", "payment_ledger", ["transaction_hash"], unique=True)

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", _enum("maintenance_category", *MAINTENANCE_CATEGORY), nullable=False),
        sa.Column("priority", _enum("maintenance_priority", *MAINTENANCE_PRIORITY), nullable=False),
        sa.Column("status", _enum("maintenance_status", *MAINTENANCE_STATUS), nullable=False),
        sa.Column("assigned_to", sa.String(200), nullable=True),
        sa.Column("assigned_contact", sa.String(100), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("estimated_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("actual_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], name="fk_maintenance_requests_property_id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], name="fk_maintenance_requests_tenant_id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"], name="fk_maintenance_requests_landlord_id"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_maintenance_requests_created_by"),
        sa.CheckConstraint(
            "(status = 'completed' AND completed_at IS NOT NULL) "
            "OR (status <> 'completed' AND completed_at IS NULL)",
            name="ck_maintenance_requests_completed_at",
        ),
    )
    op.create_index("ix_maintenance_requests_property_id", "maintenance_requests", ["property_id"])
    op.create_index("ix_maintenance_requests_tenant_id", "maintenance_requests", ["tenant_id"])
    op.create_index("ix_maintenance_requests_landlord_id", "maintenance_requests", ["landlord_id"])
    op.create_index("ix_maintenance_requests_priority", "maintenance_requests", ["priority"])
    op.create_index("ix_maintenance_requests_status", "maintenance_requests", ["status"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("guest_id", sa.Integer(), nullable=False),
        sa.Column("host_id", sa.Integer(), nullable=False),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("total_months", sa.Integer(), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("monthly_rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("service_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", _enum("booking_status", *BOOKING_STATUS), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancellation_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], name="fk_bookings_property_id"),
        sa.ForeignKeyConstraint(["guest_id"], ["users.id"], name="fk_bookings_guest_id"),
        sa.ForeignKeyConstraint(["host_id"], ["users.id"], name="fk_bookings_host_id"),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
    )
    op.create_index("ix_bookings_property_id", "bookings", ["property_id"])
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_host_id", "bookings", ["host_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])

    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            "ALTER TABLE tenants ADD CONSTRAINT ex_tenants_active_overlap "
            "EXCLUDE USING gist (property_id WITH =, daterange(lease_start_date, lease_end_date) WITH &&) "
            "WHERE (status = 'active')"
        )
        op.execute(
            "ALTER TABLE bookings ADD CONSTRAINT ex_bookings_confirmed_overlap "
            "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out) WITH &&) "
            "WHERE (status = 'confirmed')"
        )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("bookings")
    op.drop_table("maintenance_requests")
    op.drop_table("payment_ledger")
    op.drop_table("rent_payments")
    op.drop_table("tenants")
    op.drop_table("properties")
    op.drop_table("users")

    if op.get_bind().dialect.name == "postgresql":
        for name in ENUM_NAMES:
            op.execute(f"DROP TYPE IF EXISTS {name}")
