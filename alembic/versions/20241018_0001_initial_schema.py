"""Initial database schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20241018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create tables for devices, alerts, device settings and analytics."""

    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("device_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("location", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="online"),
        sa.Column("battery", sa.Integer(), nullable=False),
        sa.Column("signal_strength", sa.Integer(), nullable=False),
        sa.Column("connectivity", sa.String(length=32), nullable=False, server_default="LoRa"),
        sa.Column("last_ping", sa.DateTime(timezone=True), nullable=True),
        sa.Column("alerts_count", sa.Integer(), nullable=False),
        sa.Column("uptime_percentage", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("device_id", name="uq_devices_device_id"),
    )

    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("alert_id", sa.String(length=64), nullable=False),
        sa.Column("device_id", sa.String(length=64), nullable=False),
        sa.Column("alert_type", sa.String(length=32), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("location", sa.JSON(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("audio_url", sa.String(length=512), nullable=True),
        sa.Column("photo_url", sa.String(length=512), nullable=True),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("alert_id", name="uq_alerts_alert_id"),
    )
    op.create_index("ix_alerts_created_at", "alerts", ["created_at"])

    op.create_table(
        "device_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("device_id", sa.String(length=64), nullable=False),
        sa.Column("ping_interval", sa.Integer(), nullable=True),
        sa.Column("battery_threshold", sa.Integer(), nullable=True),
        sa.Column("connectivity", sa.String(length=32), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("device_id", name="uq_device_settings_device_id"),
    )

    op.create_table(
        "analytics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("gunshots", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("chainsaws", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("vehicles", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("animal_distress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("incidents", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", name="uq_analytics_date"),
    )


def downgrade() -> None:
    """Drop all wildwatch tables."""

    op.drop_table("analytics")
    op.drop_table("device_settings")
    op.drop_index("ix_alerts_created_at", table_name="alerts")
    op.drop_table("alerts")
    op.drop_table("devices")
