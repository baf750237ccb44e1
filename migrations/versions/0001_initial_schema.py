"""Initial schema: modules, permissions, counters, audit trail, entities.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "modules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_modules_key", "modules", ["key"], unique=True)
    op.create_index("ix_modules_is_active", "modules", ["is_active"])

    op.create_table(
        "permissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "AUDITOR", "STAFF", name="role_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("module_key", sa.String(100), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("role", "module_key", name="uq_permission_role_module"),
    )
    op.create_index("ix_permissions_role", "permissions", ["role"])
    op.create_index("ix_permissions_module_key", "permissions", ["module_key"])

    op.create_table(
        "sequence_counters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sequence_counters_key", "sequence_counters", ["key"], unique=True)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_user_id", sa.String(64), nullable=True),
        sa.Column("actor_username", sa.String(150), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("module", sa.String(100), nullable=False),
        sa.Column(
            "status",
            sa.Enum("SUCCESS", "FAIL", name="audit_status_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("entity_type", sa.String(100), nullable=True),
        sa.Column("entity_id", sa.String(100), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("ip", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_log_actor_user_id", "audit_log", ["actor_user_id"])
    op.create_index("ix_audit_log_actor_username", "audit_log", ["actor_username"])
    op.create_index("ix_audit_log_action", "audit_log", ["action"])
    op.create_index("ix_audit_log_module", "audit_log", ["module"])
    op.create_index("ix_audit_log_status", "audit_log", ["status"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_log_module_created", "audit_log", ["module", "created_at"])
    op.create_index("ix_audit_log_actor_created", "audit_log", ["actor_user_id", "created_at"])
    op.create_index("ix_audit_log_entity_created", "audit_log", ["entity_id", "created_at"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.String(20), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_employees_employee_id", "employees", ["employee_id"], unique=True)
    op.create_index("ix_employees_full_name", "employees", ["full_name"])

    op.create_table(
        "assets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("asset_tag", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("serial_number", sa.String(100), nullable=True),
        sa.Column(
            "status",
            sa.Enum("active", "in-repair", "retired", name="asset_status_enum",
                    create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "assignee_type",
            sa.Enum("employee", "external", name="assignee_type_enum",
                    create_constraint=True),
            nullable=True,
        ),
        sa.Column("assignee_employee_id", sa.Integer(), sa.ForeignKey("employees.id"),
                  nullable=True),
        sa.Column("assignee_name", sa.String(200), nullable=True),
        sa.Column("assigned_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_assets_asset_tag", "assets", ["asset_tag"], unique=True)

    op.create_table(
        "fingerprint_enrollments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("doc_number", sa.String(30), nullable=False),
        sa.Column(
            "assignee_type",
            sa.Enum("employee", "external", name="enrollment_assignee_type_enum",
                    create_constraint=True),
            nullable=False,
        ),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=True),
        sa.Column("external_full_name", sa.String(200), nullable=True),
        sa.Column("attendance_employee_no", sa.String(50), nullable=False),
        sa.Column(
            "status",
            sa.Enum("assigned", "pending_hr_signature", "signed", "cancelled",
                    name="enrollment_status_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("hr_signer_name", sa.String(200), nullable=True),
        sa.Column("hr_signed_at", sa.DateTime(), nullable=True),
        sa.Column("it_remarks", sa.Text(), nullable=True),
        sa.Column("created_by_username", sa.String(150), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_fingerprint_enrollments_doc_number", "fingerprint_enrollments",
                    ["doc_number"], unique=True)
    op.create_index("ix_fingerprint_enrollments_employee_id", "fingerprint_enrollments",
                    ["employee_id"])

    op.create_table(
        "asset_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("asset_id", sa.Integer(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column(
            "type",
            sa.Enum("ASSIGN", "UNASSIGN", "STATUS_CHANGE", "UPDATE_DETAILS",
                    name="asset_event_type_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("actor_user_id", sa.String(64), nullable=True),
        sa.Column("actor_username", sa.String(150), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_asset_events_asset_id", "asset_events", ["asset_id"])
    op.create_index("ix_asset_events_type", "asset_events", ["type"])
    op.create_index("ix_asset_events_actor_user_id", "asset_events", ["actor_user_id"])
    op.create_index("ix_asset_events_asset_created", "asset_events", ["asset_id", "created_at"])

    op.create_table(
        "fingerprint_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("enrollment_id", sa.Integer(),
                  sa.ForeignKey("fingerprint_enrollments.id"), nullable=False),
        sa.Column(
            "type",
            sa.Enum("CREATE", "STATUS_CHANGE", "PRINT", "UPDATE",
                    name="fingerprint_event_type_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("actor_user_id", sa.String(64), nullable=True),
        sa.Column("actor_username", sa.String(150), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_fingerprint_events_enrollment_id", "fingerprint_events",
                    ["enrollment_id"])
    op.create_index("ix_fingerprint_events_type", "fingerprint_events", ["type"])
    op.create_index("ix_fingerprint_events_actor_user_id", "fingerprint_events",
                    ["actor_user_id"])
    op.create_index("ix_fingerprint_events_enrollment_created", "fingerprint_events",
                    ["enrollment_id", "created_at"])


def downgrade() -> None:
    op.drop_table("fingerprint_events")
    op.drop_table("asset_events")
    op.drop_table("fingerprint_enrollments")
    op.drop_table("assets")
    op.drop_table("employees")
    op.drop_table("audit_log")
    op.drop_table("sequence_counters")
    op.drop_table("permissions")
    op.drop_table("modules")
