"""001 – Time-off ledger schema.

Creates the policy catalog, the directory mirror, the request ledger with
its append-only status history, and the audit trail.

Revision ID: 001_timeoff_ledger_schema
Revises:
Create Date: 2026-10-17 10:00:00.000000+00:00
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_timeoff_ledger_schema"
down_revision = None
branch_labels = None
depends_on = None

_POLICY_KIND = sa.Enum("UNLIMITED", "FIXED", "ACCRUAL", name="time_off_policy_kind")
_TIMEOFF_TYPE = sa.Enum(
    "PTO", "SICK", "PERSONAL", "UNPAID", "JURY_DUTY", "PARENTAL_LEAVE",
    name="time_off_type",
)
_TIMEOFF_STATUS = sa.Enum(
    "REQUESTED", "APPROVED", "DENIED", "CANCELLED", name="time_off_status",
)


def upgrade() -> None:
    # ══════════════════════════════════════════════════════════════════
    # 1. time_off_policies
    # ══════════════════════════════════════════════════════════════════
    op.create_table(
        "time_off_policies",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("kind", _POLICY_KIND, nullable=False),
        sa.Column("annual_allowance_days", sa.Integer),
        sa.Column("description", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "annual_allowance_days IS NULL OR annual_allowance_days >= 0",
            name="ck_policy_allowance_non_negative",
        ),
    )

    # ══════════════════════════════════════════════════════════════════
    # 2. employees
    # ══════════════════════════════════════════════════════════════════
    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("department", sa.String(100)),
        sa.Column("title", sa.String(150)),
        sa.Column("policy_id", sa.Uuid, sa.ForeignKey("time_off_policies.id")),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_employees_department", "employees", ["department"])

    # ══════════════════════════════════════════════════════════════════
    # 3. time_off_requests
    # ══════════════════════════════════════════════════════════════════
    op.create_table(
        "time_off_requests",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("employee_id", sa.Uuid, sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("policy_id", sa.Uuid, sa.ForeignKey("time_off_policies.id")),
        sa.Column("type", _TIMEOFF_TYPE, nullable=False),
        sa.Column("status", _TIMEOFF_STATUS, nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("reason", sa.Text),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("decided_by", sa.Uuid, sa.ForeignKey("employees.id")),
        sa.Column("decided_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("end_date >= start_date", name="ck_request_date_order"),
    )
    op.create_index(
        "ix_time_off_requests_employee_dates",
        "time_off_requests",
        ["employee_id", "start_date"],
    )
    op.create_index("ix_time_off_requests_status", "time_off_requests", ["status"])

    # ══════════════════════════════════════════════════════════════════
    # 4. time_off_status_changes
    # ══════════════════════════════════════════════════════════════════
    op.create_table(
        "time_off_status_changes",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "request_id", sa.Uuid, sa.ForeignKey("time_off_requests.id"), nullable=False,
        ),
        sa.Column("from_status", _TIMEOFF_STATUS),
        sa.Column("to_status", _TIMEOFF_STATUS, nullable=False),
        sa.Column("actor_id", sa.Uuid, sa.ForeignKey("employees.id")),
        sa.Column("note", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_time_off_status_changes_request_id",
        "time_off_status_changes",
        ["request_id"],
    )

    # ══════════════════════════════════════════════════════════════════
    # 5. audit_trail
    # ══════════════════════════════════════════════════════════════════
    op.create_table(
        "audit_trail",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("actor_id", sa.Uuid, sa.ForeignKey("employees.id")),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Uuid, nullable=False),
        sa.Column("old_values", sa.JSON),
        sa.Column("new_values", sa.JSON),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_trail_entity", "audit_trail", ["entity_type", "entity_id"])
    op.create_index("ix_audit_trail_created_at", "audit_trail", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_trail")
    op.drop_table("time_off_status_changes")
    op.drop_table("time_off_requests")
    op.drop_table("employees")
    op.drop_table("time_off_policies")

    bind = op.get_bind()
    for enum_type in (_TIMEOFF_STATUS, _TIMEOFF_TYPE, _POLICY_KIND):
        enum_type.drop(bind, checkfirst=True)
