"""Normalized records consumed by the dashboard client."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(slots=True)
class DeviceLocation:
    lat: float = 11.7
    lng: float = 76.58
    zone: str = "Unknown Zone"


@dataclass(slots=True)
class AlertLocation:
    lat: float = 0.0
    lng: float = 0.0
    name: str = "Unknown Location"


@dataclass(slots=True)
class Device:
    """A sensor as the dashboard sees it, with every field in range."""

    id: int
    device_id: str
    name: str
    location: DeviceLocation = field(default_factory=DeviceLocation)
    status: str = "offline"
    battery: int = 0
    signal_strength: int = 0
    connectivity: str = "Unknown"
    last_ping: str = ""
    alerts_count: int = 0
    uptime_percentage: float = 0.0
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Alert:
    """A detection event raised by a sensor."""

    id: int
    alert_id: str
    device_id: str
    alert_type: str = "animal_distress"
    severity: str = "Low"
    location: AlertLocation = field(default_factory=AlertLocation)
    description: str = ""
    audio_url: Optional[str] = None
    photo_url: Optional[str] = None
    resolved: bool = False
    timestamp: str = ""
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["Alert", "AlertLocation", "Device", "DeviceLocation"]
