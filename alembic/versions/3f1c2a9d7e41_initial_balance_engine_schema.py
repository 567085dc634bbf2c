"""initial_balance_engine_schema

Revision ID: 3f1c2a9d7e41
Revises:
Create Date: 2026-10-19 09:12:37.418205

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e41'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TRANSACTION_TYPES = (
    "EARNED",
    "COMPENSATION",
    "CORRECTION",
    "CARRYOVER",
    "VACATION_CREDIT",
    "SICK_CREDIT",
    "OVERTIME_COMP_CREDIT",
    "SPECIAL_CREDIT",
    "UNPAID_ADJUSTMENT",
)
REFERENCE_TYPES = ("TIME_ENTRY", "ABSENCE", "MANUAL", "SYSTEM")
ABSENCE_TYPES = ("VACATION", "SICK", "UNPAID", "OVERTIME_COMP")
ABSENCE_STATUSES = ("PENDING", "APPROVED", "REJECTED")
WORK_LOCATIONS = ("OFFICE", "HOMEOFFICE", "FIELD")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("weekly_hours", sa.Float(), nullable=False),
        sa.Column("work_schedule", sa.JSON(), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("vacation_days_per_year", sa.Float(), nullable=False),
        sa.Column("holiday_region", sa.String(10), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "time_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("break_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column(
            "location",
            sa.Enum(*WORK_LOCATIONS, name="worklocation"),
            nullable=False,
        ),
        sa.Column("activity", sa.String(200), nullable=True),
        sa.Column("project", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["employees.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_time_entries_user_date", "time_entries", ["user_id", "date"])

    # Ledger: integer key keeps insertion order within a day
    op.create_table(
        "overtime_transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "type",
            sa.Enum(*TRANSACTION_TYPES, name="transactiontype"),
            nullable=False,
        ),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "reference_type",
            sa.Enum(*REFERENCE_TYPES, name="referencetype"),
            nullable=True,
        ),
        sa.Column("reference_id", sa.Uuid(), nullable=True),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("balance_before", sa.Float(), nullable=False, server_default="0"),
        sa.Column("balance_after", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_overtime_transactions_user_date",
        "overtime_transactions",
        ["user_id", "date"],
    )
    op.create_index(
        "ix_overtime_transactions_reference",
        "overtime_transactions",
        ["reference_type", "reference_id"],
    )

    op.create_table(
        "overtime_balance",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("target_hours", sa.Float(), nullable=False),
        sa.Column("actual_hours", sa.Float(), nullable=False),
        sa.Column(
            "computed_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "month", name="uq_overtime_balance_user_month"),
    )

    op.create_table(
        "vacation_balance",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("entitlement", sa.Float(), nullable=False, server_default="0"),
        sa.Column("carryover", sa.Float(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["employees.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "year", name="uq_vacation_balance_user_year"),
    )

    op.create_table(
        "absence_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.Enum(*ABSENCE_TYPES, name="absencetype"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days_required", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(*ABSENCE_STATUSES, name="absencestatus"),
            nullable=False,
        ),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("admin_note", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.String(100), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_by", sa.String(100), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["employees.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_absence_requests_user_dates",
        "absence_requests",
        ["user_id", "start_date", "end_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_absence_requests_user_dates", table_name="absence_requests")
    op.drop_table("absence_requests")
    op.drop_table("vacation_balance")
    op.drop_table("overtime_balance")
    op.drop_index(
        "ix_overtime_transactions_reference", table_name="overtime_transactions"
    )
    op.drop_index(
        "ix_overtime_transactions_user_date", table_name="overtime_transactions"
    )
    op.drop_table("overtime_transactions")
    op.drop_index("ix_time_entries_user_date", table_name="time_entries")
    op.drop_table("time_entries")
    op.drop_table("employees")
