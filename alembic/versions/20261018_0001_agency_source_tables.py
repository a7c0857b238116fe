"""agency source tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role = postgresql.ENUM("admin", "employee", "freelancer", "client", name="user_role", create_type=False)
project_status = postgresql.ENUM(
    "planned", "active", "on_hold", "completed", "cancelled", name="project_status", create_type=False
)
task_status = postgresql.ENUM("todo", "in_progress", "review", "done", name="task_status", create_type=False)
time_status = postgresql.ENUM("draft", "submitted", "approved", "rejected", name="time_status", create_type=False)
doc_type = postgresql.ENUM("quote", "invoice", "credit_note", name="doc_type", create_type=False)
doc_status = postgresql.ENUM(
    "draft", "sent", "approved", "paid", "overdue", "cancelled", name="doc_status", create_type=False
)
service_category_enum = postgresql.ENUM(
    "CONSULTING",
    "CREATION",
    "PRODUCTION",
    "MANAGEMENT",
    "LOGISTICS",
    name="service_category_enum",
    create_type=False,
)

ENUM_TYPES = (user_role, project_status, task_status, time_status, doc_type, doc_status, service_category_enum)


def upgrade() -> None:
    for enum_type in ENUM_TYPES:
        enum_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="employee"),
        sa.Column("weekly_hours", sa.Numeric(6, 2), nullable=True, server_default="40"),
        sa.Column("billable_hourly_rate", sa.Numeric(12, 2), nullable=True, server_default="0"),
        sa.Column("internal_cost_per_hour", sa.Numeric(12, 2), nullable=True, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("weekly_hours >= 0", name="ck_profiles_weekly_hours_non_negative"),
        sa.CheckConstraint("billable_hourly_rate >= 0", name="ck_profiles_billable_rate_non_negative"),
        sa.CheckConstraint("internal_cost_per_hour >= 0", name="ck_profiles_internal_cost_non_negative"),
    )

    op.create_table(
        "service_modules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("category", service_category_enum, nullable=False),
        sa.Column("service_module", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("category", "service_module", name="uq_service_modules_category_name"),
    )

    op.create_table(
        "seniority_levels",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("level_name", sa.String(length=128), nullable=False, unique=True),
        sa.Column("level_order", sa.Integer(), nullable=False, unique=True),
    )

    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", project_status, nullable=False, server_default="planned"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("budget_total", sa.Numeric(14, 2), nullable=True, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "project_members",
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), primary_key=True),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id"), primary_key=True),
        sa.Column("role", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_project_members_profile_id", "project_members", ["profile_id"])

    op.create_table(
        "tasks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", task_status, nullable=False, server_default="todo"),
        sa.Column("assigned_to", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column(
            "service_module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("service_modules.id"),
            nullable=True,
        ),
        sa.Column(
            "seniority_level_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("seniority_levels.id"),
            nullable=True,
        ),
        sa.Column("estimated_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("estimated_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_assigned_to", "tasks", ["assigned_to"])
    op.create_index("ix_tasks_service_module_id", "tasks", ["service_module_id"])

    op.create_table(
        "time_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("task_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("tasks.id"), nullable=True),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("billable", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("status", time_status, nullable=False, server_default="submitted"),
        sa.CheckConstraint(
            "duration_minutes IS NULL OR duration_minutes >= 0",
            name="ck_time_entries_duration_non_negative",
        ),
    )
    op.create_index("ix_time_entries_project_id", "time_entries", ["project_id"])
    op.create_index("ix_time_entries_task_id", "time_entries", ["task_id"])
    op.create_index("ix_time_entries_profile_id", "time_entries", ["profile_id"])

    op.create_table(
        "costs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("amount >= 0", name="ck_costs_amount_non_negative"),
    )
    op.create_index("ix_costs_project_id", "costs", ["project_id"])

    op.create_table(
        "financial_documents",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("type", doc_type, nullable=False),
        sa.Column("status", doc_status, nullable=False, server_default="draft"),
        sa.Column("document_number", sa.String(length=128), nullable=True),
        sa.Column("date_issued", sa.Date(), nullable=True),
    )
    op.create_index(
        "ix_financial_documents_project_status", "financial_documents", ["project_id", "status"]
    )

    op.create_table(
        "financial_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "document_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("financial_documents.id"),
            nullable=False,
        ),
        sa.Column("position_title", sa.String(length=255), nullable=False),
        sa.Column(
            "service_module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("service_modules.id"),
            nullable=True,
        ),
        sa.Column(
            "seniority_level_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("seniority_levels.id"),
            nullable=True,
        ),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=True),
    )
    op.create_index("ix_financial_items_document_id", "financial_items", ["document_id"])
    op.create_index("ix_financial_items_service_module_id", "financial_items", ["service_module_id"])


def downgrade() -> None:
    op.drop_index("ix_financial_items_service_module_id", table_name="financial_items")
    op.drop_index("ix_financial_items_document_id", table_name="financial_items")
    op.drop_table("financial_items")

    op.drop_index("ix_financial_documents_project_status", table_name="financial_documents")
    op.drop_table("financial_documents")

    op.drop_index("ix_costs_project_id", table_name="costs")
    op.drop_table("costs")

    op.drop_index("ix_time_entries_profile_id", table_name="time_entries")
    op.drop_index("ix_time_entries_task_id", table_name="time_entries")
    op.drop_index("ix_time_entries_project_id", table_name="time_entries")
    op.drop_table("time_entries")

    op.drop_index("ix_tasks_service_module_id", table_name="tasks")
    op.drop_index("ix_tasks_assigned_to", table_name="tasks")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_project_members_profile_id", table_name="project_members")
    op.drop_table("project_members")

    op.drop_table("projects")
    op.drop_table("seniority_levels")
    op.drop_table("service_modules")
    op.drop_table("profiles")

    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(op.get_bind(), checkfirst=True)
