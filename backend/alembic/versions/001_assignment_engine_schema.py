# backend/alembic/versions/001_assignment_engine_schema.py
"""Assignment engine schema - purchases, sessions, zones, schedule ledger, calendar

Revision ID: 001_assignment_engine_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000

Creates every table the auto trainer assignment engine writes. The
schedule_slots unique constraint is the double-booking guard and must keep
its name; the engine recognises violations by it.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_assignment_engine_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create assignment engine tables."""
    print("Creating assignment engine schema...")

    op.create_table(
        "zones",
        sa.Column("id", sa.String(26), nullable=False),
        # NULL = company-operated
        sa.Column("operator_franchise_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("center_lat", sa.Float(), nullable=False),
        sa.Column("center_lng", sa.Float(), nullable=False),
        sa.Column("radius_km", sa.Float(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("radius_km >= 0", name="ck_zones_radius_non_negative"),
    )
    op.create_index("ix_zones_operator_franchise_id", "zones", ["operator_franchise_id"])
    op.create_index("ix_zones_center", "zones", ["center_lat", "center_lng"])
    # Name uniqueness is scoped per operator kind
    op.create_index(
        "uq_zones_company_name",
        "zones",
        ["name"],
        unique=True,
        postgresql_where=sa.text("operator_franchise_id IS NULL"),
        sqlite_where=sa.text("operator_franchise_id IS NULL"),
    )
    op.create_index(
        "uq_zones_franchise_name",
        "zones",
        ["operator_franchise_id", "name"],
        unique=True,
        postgresql_where=sa.text("operator_franchise_id IS NOT NULL"),
        sqlite_where=sa.text("operator_franchise_id IS NOT NULL"),
    )

    op.create_table(
        "course_purchases",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("external_booking_id", sa.String(64), nullable=False),
        sa.Column("course_id", sa.String(64), nullable=False),
        sa.Column("class_type", sa.String(20), nullable=False),
        sa.Column("total_sessions", sa.Integer(), nullable=False),
        sa.Column("delivery_mode", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("preferred_time_slot", sa.String(5), nullable=False),
        sa.Column("student_latitude", sa.Float(), nullable=False),
        sa.Column("student_longitude", sa.Float(), nullable=False),
        sa.Column("students", sa.JSON(), nullable=False),
        sa.Column("operator_franchise_id", sa.String(64), nullable=True),
        sa.Column("zone_id", sa.String(26), nullable=True),
        sa.Column("assigned_trainer_id", sa.String(64), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="WAITLISTED"),
        sa.Column("status_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_booking_id", name="uq_course_purchases_external_booking_id"),
        sa.CheckConstraint(
            "class_type IN ('ONE_ON_ONE', 'ONE_ON_TWO', 'ONE_ON_THREE', 'HYBRID')",
            name="ck_course_purchases_class_type",
        ),
        sa.CheckConstraint(
            "delivery_mode IN ('WEEKDAY_DAILY', 'SUNDAY_ONLY')",
            name="ck_course_purchases_delivery_mode",
        ),
        sa.CheckConstraint(
            "status IN ('ASSIGNED', 'WAITLISTED', 'SERVICE_NOT_AVAILABLE', 'INVALID_PURCHASE')",
            name="ck_course_purchases_status",
        ),
    )
    op.create_index("ix_course_purchases_course_id", "course_purchases", ["course_id"])
    op.create_index("ix_course_purchases_status", "course_purchases", ["status"])
    op.create_index("ix_course_purchases_trainer", "course_purchases", ["assigned_trainer_id"])

    op.create_table(
        "purchase_sessions",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("purchase_id", sa.String(26), nullable=False),
        sa.Column("booking_id", sa.String(64), nullable=False),
        sa.Column("session_number", sa.Integer(), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("session_time", sa.String(5), nullable=False),
        sa.Column("session_type", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("booking_metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["purchase_id"], ["course_purchases.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("purchase_id", "session_number", name="uq_purchase_sessions_number"),
        sa.CheckConstraint(
            "session_type IN ('online', 'offline')", name="ck_purchase_sessions_session_type"
        ),
        sa.CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled', 'rescheduled')",
            name="ck_purchase_sessions_status",
        ),
        sa.CheckConstraint("session_number >= 1", name="ck_purchase_sessions_number_positive"),
    )
    op.create_index("ix_purchase_sessions_booking_id", "purchase_sessions", ["booking_id"])
    op.create_index("ix_purchase_sessions_date", "purchase_sessions", ["session_date"])

    op.create_table(
        "schedule_slots",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("trainer_id", sa.String(64), nullable=False),
        sa.Column("booking_id", sa.String(64), nullable=True),
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("timeslot", sa.String(5), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "trainer_id", "slot_date", "timeslot", name="uq_schedule_slots_trainer_date_timeslot"
        ),
        sa.CheckConstraint(
            "status IN ('available', 'booked', 'blocked')", name="ck_schedule_slots_status"
        ),
    )
    op.create_index("ix_schedule_slots_trainer_id", "schedule_slots", ["trainer_id"])
    op.create_index("ix_schedule_slots_booking", "schedule_slots", ["booking_id"])
    op.create_index("ix_schedule_slots_slot_date", "schedule_slots", ["slot_date"])

    op.create_table(
        "calendar_entries",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("purchase_session_id", sa.String(26), nullable=False),
        sa.Column("purchase_id", sa.String(26), nullable=False),
        sa.Column("trainer_id", sa.String(64), nullable=False),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("course_id", sa.String(64), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.String(5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("session_type", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("student_latitude", sa.Float(), nullable=False),
        sa.Column("student_longitude", sa.Float(), nullable=False),
        sa.Column("booking_metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("purchase_session_id", name="uq_calendar_entries_purchase_session"),
    )
    op.create_index("ix_calendar_entries_purchase_id", "calendar_entries", ["purchase_id"])
    op.create_index("ix_calendar_entries_trainer_id", "calendar_entries", ["trainer_id"])
    op.create_index("ix_calendar_entries_student_id", "calendar_entries", ["student_id"])

    print("Assignment engine schema created successfully!")


def downgrade() -> None:
    """Drop assignment engine tables."""
    print("Dropping assignment engine schema...")

    op.drop_table("calendar_entries")
    op.drop_table("schedule_slots")
    op.drop_table("purchase_sessions")
    op.drop_table("course_purchases")
    op.drop_index("uq_zones_franchise_name", table_name="zones")
    op.drop_index("uq_zones_company_name", table_name="zones")
    op.drop_table("zones")
