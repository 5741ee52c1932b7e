"""Coerce untrusted API payloads into well-formed client records.

Every function here accepts arbitrary input and never raises. Fields that
are missing, of the wrong type or out of range are replaced by defaults so
that downstream rendering can rely on the record shape.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from .models import Alert, AlertLocation, Device, DeviceLocation

DEVICE_STATUSES = frozenset({"online", "offline", "maintenance"})
ALERT_TYPES = frozenset({"gunshot", "chainsaw", "vehicle", "animal_distress"})
SEVERITIES = frozenset({"High", "Medium", "Low"})

EPOCH_ISO = "1970-01-01T00:00:00.000Z"


def to_number(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default``."""

    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _percentage(value: Any, default: float = 0.0) -> float:
    return clamp(to_number(value, default), 0.0, 100.0)


def _count(value: Any) -> int:
    return int(max(0.0, to_number(value, 0.0)))


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _choice(value: Any, allowed: frozenset[str], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _timestamp(value: Any) -> str:
    return value if isinstance(value, str) and value.strip() else EPOCH_ISO


def _device_location(raw: Any) -> DeviceLocation:
    defaults = DeviceLocation()
    if not isinstance(raw, Mapping):
        return defaults
    return DeviceLocation(
        lat=clamp(to_number(raw.get("lat"), defaults.lat), -90.0, 90.0),
        lng=clamp(to_number(raw.get("lng"), defaults.lng), -180.0, 180.0),
        zone=_text(raw.get("zone"), defaults.zone),
    )


def _alert_location(raw: Any) -> AlertLocation:
    defaults = AlertLocation()
    if not isinstance(raw, Mapping):
        return defaults
    return AlertLocation(
        lat=clamp(to_number(raw.get("lat"), defaults.lat), -90.0, 90.0),
        lng=clamp(to_number(raw.get("lng"), defaults.lng), -180.0, 180.0),
        name=_text(raw.get("name"), defaults.name),
    )


def _optional_url(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def normalize_device(raw: Any, index: int = 0) -> Device:
    """Build a :class:`Device` from any value; ``index`` seeds fallback ids."""

    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    status = data.get("status")
    return Device(
        id=int(to_number(data.get("id"), index + 1)),
        device_id=_text(data.get("device_id"), f"UNKNOWN-{index + 1}"),
        name=_text(data.get("name"), "Unnamed Device"),
        location=_device_location(data.get("location")),
        status=_choice(status, DEVICE_STATUSES, "offline"),
        battery=round(_percentage(data.get("battery"))),
        signal_strength=round(_percentage(data.get("signal_strength"))),
        connectivity=_text(data.get("connectivity"), "Unknown"),
        last_ping=_timestamp(data.get("last_ping")),
        alerts_count=_count(data.get("alerts_count")),
        uptime_percentage=round(_percentage(data.get("uptime_percentage")), 2),
        created_at=_timestamp(data.get("created_at")),
        updated_at=_timestamp(data.get("updated_at")),
    )


def normalize_alert(raw: Any, index: int = 0) -> Alert:
    """Build an :class:`Alert` from any value; ``index`` seeds fallback ids."""

    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    alert_type = data.get("alert_type")
    severity = data.get("severity")
    timestamp = _timestamp(data.get("timestamp"))
    return Alert(
        id=int(to_number(data.get("id"), index + 1)),
        alert_id=_text(data.get("alert_id"), f"ALERT-{index + 1}"),
        device_id=_text(data.get("device_id"), "UNKNOWN"),
        alert_type=_choice(alert_type, ALERT_TYPES, "animal_distress"),
        severity=_choice(severity, SEVERITIES, "Low"),
        location=_alert_location(data.get("location")),
        description=data.get("description") if isinstance(data.get("description"), str) else "",
        audio_url=_optional_url(data.get("audio_url")),
        photo_url=_optional_url(data.get("photo_url")),
        resolved=data.get("resolved") is True,
        timestamp=timestamp,
        created_at=_timestamp(data.get("created_at", timestamp)),
    )


def normalize_devices(payload: Any) -> list[Device]:
    if not isinstance(payload, list):
        return []
    return [normalize_device(item, index) for index, item in enumerate(payload)]


def normalize_alerts(payload: Any) -> list[Alert]:
    if not isinstance(payload, list):
        return []
    return [normalize_alert(item, index) for index, item in enumerate(payload)]


__all__ = [
    "ALERT_TYPES",
    "DEVICE_STATUSES",
    "EPOCH_ISO",
    "SEVERITIES",
    "clamp",
    "normalize_alert",
    "normalize_alerts",
    "normalize_device",
    "normalize_devices",
    "to_number",
]
