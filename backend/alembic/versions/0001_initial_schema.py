"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-03-01 00:00:00
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "business",
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.Text()),
        sa.Column("timezone", sa.Text(), nullable=False, server_default=sa.text("'America/New_York'")),
        sa.Column("min_notice_hours", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_advance_days", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("buffer_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("slot_duration", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("cancellation_policy", sa.Text()),
        sa.Column("cancellation_hours", sa.Integer()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "services",
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("price", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "customers",
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.Text()),
        sa.Column("no_show_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("business_id", "phone"),
    )

    op.create_table(
        "availability",
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("is_available", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "blocked_dates",
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("start_time", sa.Text()),
        sa.Column("end_time", sa.Text()),
        sa.Column("reason", sa.Text()),
    )

    op.create_table(
        "bookings",
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id", ondelete="CASCADE"), nullable=False),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("payment_amount", sa.Float()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("cancelled_at", sa.DateTime()),
        sa.Column("cancelled_by", sa.Text()),
        sa.Column("cancellation_reason", sa.Text()),
    )
    op.create_index("ix_bookings_start_time", "bookings", ["start_time"])
    op.create_index("ix_bookings_end_time", "bookings", ["end_time"])
    op.create_index("ix_bookings_status", "bookings", ["status"])


def downgrade():
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_end_time", table_name="bookings")
    op.drop_index("ix_bookings_start_time", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("blocked_dates")
    op.drop_table("availability")
    op.drop_table("customers")
    op.drop_table("services")
    op.drop_table("business")
