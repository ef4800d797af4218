"""Initial schema: users, spaces, space calendars and bookings.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'client'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('client', 'owner', 'admin')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "spaces",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("price_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("price_unit", sa.String(10), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("price_amount >= 0", name="check_space_price_non_negative"),
        sa.CheckConstraint("price_unit IN ('hour', 'day', 'event')", name="check_space_price_unit"),
    )
    op.create_index("ix_spaces_id", "spaces", ["id"])
    op.create_index("ix_spaces_owner_id", "spaces", ["owner_id"])
    # Public listing: active spaces, newest first
    op.create_index("ix_spaces_active_created", "spaces", ["is_active", "created_at"])

    # One row per booked space; booking creation compare-and-swaps `version`
    op.create_table(
        "space_calendars",
        sa.Column("space_id", sa.Integer(), sa.ForeignKey("spaces.id"), primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("space_id", sa.Integer(), sa.ForeignKey("spaces.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_email", sa.String(255), nullable=False),
        sa.Column("client_phone", sa.String(32), nullable=False),
        sa.Column("booking_kind", sa.String(20), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_in_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("slot_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("slot_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attendee_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("event_type", sa.String(100), nullable=True),
        sa.Column("special_requests", sa.String(1000), nullable=True),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("payment_reference", sa.String(100), nullable=True),
        sa.Column("payment_transaction_id", sa.String(100), nullable=True),
        sa.Column("payment_provider", sa.String(20), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.CheckConstraint("slot_start < slot_end", name="check_booking_slot_order"),
        sa.CheckConstraint("total_price >= 0", name="check_booking_price_non_negative"),
        sa.CheckConstraint("attendee_count >= 1", name="check_booking_attendees_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'declined', 'cancelled', 'completed')",
            name="check_booking_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'completed', 'failed', 'cancelled')",
            name="check_booking_payment_status",
        ),
        sa.CheckConstraint(
            "(booking_kind = 'single' AND event_date IS NOT NULL"
            " AND check_in_date IS NULL AND check_out_date IS NULL)"
            " OR (booking_kind = 'multi_night' AND event_date IS NULL"
            " AND start_time IS NULL AND end_time IS NULL"
            " AND check_in_date IS NOT NULL AND check_out_date IS NOT NULL)",
            name="check_booking_kind_fields",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_space_id", "bookings", ["space_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    # Conflict detection scans one space's bookings by window
    op.create_index("ix_bookings_space_slot", "bookings", ["space_id", "slot_start", "slot_end"])
    op.create_index("ix_bookings_user_slot", "bookings", ["user_id", "slot_start"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("space_calendars")
    op.drop_table("spaces")
    op.drop_table("users")
