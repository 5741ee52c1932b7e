"""Database models for devices, alerts, device settings and analytics."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    JSON,
    String,
    Text,
    func,
)
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Device(Base):
    """A field sensor reporting status to the dashboard."""

    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    location: Mapped[dict[str, Any] | None] = mapped_column(
        MutableDict.as_mutable(JSON)
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="online", server_default="online"
    )
    battery: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    signal_strength: Mapped[int] = mapped_column(Integer, nullable=False, default=95)
    connectivity: Mapped[str] = mapped_column(
        String(32), nullable=False, default="LoRa", server_default="LoRa"
    )
    last_ping: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    alerts_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    uptime_percentage: Mapped[float] = mapped_column(
        Float, nullable=False, default=100.0
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )


class Alert(Base):
    """An acoustic or visual detection raised by a sensor."""

    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    alert_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    # Weak reference: alerts may arrive for devices that were never registered.
    device_id: Mapped[str] = mapped_column(String(64), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(32), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    location: Mapped[dict[str, Any] | None] = mapped_column(
        MutableDict.as_mutable(JSON)
    )
    description: Mapped[str | None] = mapped_column(Text)
    audio_url: Mapped[str | None] = mapped_column(String(512))
    photo_url: Mapped[str | None] = mapped_column(String(512))
    resolved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )


class DeviceSettings(Base):
    """Per-device configuration pushed from the settings page."""

    __tablename__ = "device_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    ping_interval: Mapped[int | None] = mapped_column(Integer)
    battery_threshold: Mapped[int | None] = mapped_column(Integer)
    connectivity: Mapped[str | None] = mapped_column(String(32))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )


class AnalyticsDay(Base):
    """Daily alert tallies used by the analytics endpoints."""

    __tablename__ = "analytics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, unique=True, nullable=False)
    gunshots: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    chainsaws: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    vehicles: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    animal_distress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    incidents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
