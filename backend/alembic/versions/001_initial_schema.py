"""Initial schema - speakers, events, capacity, waitlist, audit.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, updated: bool = False) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "specialties",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "speakers",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("nit", sa.String(20), nullable=True),
        sa.Column("cui", sa.String(20), nullable=True),
        sa.Column("rtu", sa.String(50), nullable=True),
        sa.Column("profile_image", sa.String(500), nullable=True),
        sa.Column("short_bio", sa.String(200), nullable=True),
        sa.Column("full_bio", sa.Text, nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
        sa.Column("twitter_url", sa.String(500), nullable=True),
        sa.Column("website_url", sa.String(500), nullable=True),
        sa.Column("base_rate", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("rate_type", sa.String(10), nullable=False, server_default="hourly"),
        sa.Column("modalities", sa.JSON, nullable=False),
        sa.Column("languages", sa.JSON, nullable=False),
        sa.Column("cv_file", sa.String(500), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default="national"),
        sa.Column("rating", sa.Numeric(3, 2), nullable=False, server_default="0"),
        sa.Column("total_events", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.Integer, nullable=True),
        sa.Column("created_by", sa.Integer, nullable=False),
        sa.Column("updated_by", sa.Integer, nullable=True),
        *_timestamps(updated=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_speakers_email", "speakers", ["email"])

    op.create_table(
        "speaker_specialties",
        sa.Column("speaker_id", sa.Integer, sa.ForeignKey("speakers.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("specialty_id", sa.Integer, sa.ForeignKey("specialties.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "speaker_availability_blocks",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("speaker_id", sa.Integer, sa.ForeignKey("speakers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.Column("is_recurring", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("recurrence_pattern", sa.String(10), nullable=True),
        sa.Column("created_by", sa.Integer, nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_speaker_availability_blocks_speaker_id",
        "speaker_availability_blocks", ["speaker_id"],
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("short_description", sa.String(200), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("virtual_location", sa.String(500), nullable=True),
        sa.Column("is_virtual", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="GTQ"),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column("min_age", sa.Integer, nullable=True),
        sa.Column("max_age", sa.Integer, nullable=True),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("requirements", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("created_by", sa.Integer, nullable=False),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index("ix_events_start_date", "events", ["start_date"])

    op.create_table(
        "speaker_events",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("speaker_id", sa.Integer, sa.ForeignKey("speakers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="keynote_speaker"),
        sa.Column("participation_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("participation_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer, nullable=True),
        sa.Column("modality", sa.String(10), nullable=False, server_default="presential"),
        sa.Column("order", sa.Integer, nullable=False, server_default="1"),
        sa.Column("status", sa.String(20), nullable=False, server_default="tentative"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        sa.Column("created_by", sa.Integer, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("speaker_id", "event_id", name="uq_speaker_event"),
    )
    op.create_index("ix_speaker_events_speaker_id", "speaker_events", ["speaker_id"])
    op.create_index("ix_speaker_events_event_id", "speaker_events", ["event_id"])

    op.create_table(
        "speaker_evaluations",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("speaker_id", sa.Integer, sa.ForeignKey("speakers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("evaluator_id", sa.Integer, nullable=False),
        sa.Column("evaluator_type", sa.String(20), nullable=False, server_default="organizer"),
        sa.Column("overall_rating", sa.Numeric(3, 2), nullable=False),
        sa.Column("criteria_ratings", sa.JSON, nullable=True),
        sa.Column("comments", sa.Text, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("evaluation_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_speaker_evaluations_speaker_id", "speaker_evaluations", ["speaker_id"])

    op.create_table(
        "event_registrations",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("lock_id", sa.Uuid, nullable=True),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_event_registrations_event_id", "event_registrations", ["event_id"])
    op.create_index("ix_event_registrations_user_id", "event_registrations", ["user_id"])

    op.create_table(
        "event_capacities",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("total_capacity", sa.Integer, nullable=False),
        sa.Column("overbooking_percentage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("overbooking_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("waitlist_enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("lock_timeout_minutes", sa.Integer, nullable=False, server_default="15"),
        sa.Column("alert_thresholds", sa.JSON, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Integer, nullable=False),
        *_timestamps(updated=True),
    )

    op.create_table(
        "capacity_locks",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("access_type_id", sa.Integer, nullable=True),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="LOCKED"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("released_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "registration_id", sa.Integer,
            sa.ForeignKey("event_registrations.id", ondelete="SET NULL"), nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_capacity_locks_event_id", "capacity_locks", ["event_id"])
    op.create_index("ix_capacity_locks_status", "capacity_locks", ["status"])

    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("access_type_id", sa.Integer, nullable=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="ACTIVE"),
        sa.Column("notified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_waitlist_entries_event_id", "waitlist_entries", ["event_id"])
    op.create_index("ix_waitlist_entries_user_id", "waitlist_entries", ["user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource", sa.String(50), nullable=False),
        sa.Column("resource_id", sa.String(100), nullable=True),
        sa.Column("old_values", sa.JSON, nullable=True),
        sa.Column("new_values", sa.JSON, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("severity", sa.String(10), nullable=False, server_default="low"),
        sa.Column("status", sa.String(10), nullable=False, server_default="success"),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("waitlist_entries")
    op.drop_table("capacity_locks")
    op.drop_table("event_capacities")
    op.drop_table("event_registrations")
    op.drop_table("speaker_evaluations")
    op.drop_table("speaker_events")
    op.drop_table("events")
    op.drop_table("speaker_availability_blocks")
    op.drop_table("speaker_specialties")
    op.drop_table("speakers")
    op.drop_table("specialties")
