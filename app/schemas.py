"""Request and response schemas for the Wildwatch API."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DeviceStatus = Literal["online", "offline", "maintenance"]
AlertType = Literal["gunshot", "chainsaw", "vehicle", "animal_distress"]
Severity = Literal["High", "Medium", "Low"]

DEFAULT_DEVICE_LOCATION: dict[str, Any] = {
    "lat": 11.7,
    "lng": 76.58,
    "zone": "New Device Zone",
}
DEFAULT_ALERT_LOCATION: dict[str, Any] = {
    "lat": 0.0,
    "lng": 0.0,
    "name": "Unknown Location",
}


def _finite(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _location_or_default(
    value: Any, defaults: Mapping[str, Any], label: str
) -> dict[str, Any]:
    """Default a location field by field; non-mappings fall back wholesale."""

    if not isinstance(value, Mapping):
        return dict(defaults)
    label_value = value.get(label)
    return {
        "lat": min(90.0, max(-90.0, _finite(value.get("lat"), defaults["lat"]))),
        "lng": min(180.0, max(-180.0, _finite(value.get("lng"), defaults["lng"]))),
        label: str(label_value).strip() if label_value else defaults[label],
    }


def _required_text(value: Any, field_name: str) -> str:
    if value is None:
        raise ValueError(f"{field_name} is required")
    text = str(value).strip()
    if not text:
        raise ValueError(f"{field_name} cannot be empty")
    return text


class DeviceLocation(BaseModel):
    lat: float
    lng: float
    zone: str


class AlertLocation(BaseModel):
    lat: float
    lng: float
    name: str


class DeviceCreate(BaseModel):
    """Payload for registering a sensor."""

    device_id: str
    name: str
    location: DeviceLocation = Field(
        default_factory=lambda: DeviceLocation(**DEFAULT_DEVICE_LOCATION)
    )
    connectivity: str = "LoRa"

    @field_validator("device_id", "name", mode="before")
    @classmethod
    def validate_required_text(cls, value: Any, info) -> str:
        return _required_text(value, info.field_name)

    @field_validator("location", mode="before")
    @classmethod
    def default_location(cls, value: Any) -> dict[str, Any]:
        return _location_or_default(value, DEFAULT_DEVICE_LOCATION, "zone")

    @field_validator("connectivity", mode="before")
    @classmethod
    def default_connectivity(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        return text or "LoRa"


class DeviceSettingsUpdate(BaseModel):
    ping_interval: Optional[int] = Field(default=None, ge=1)
    battery_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    connectivity: Optional[str] = None


class DeviceHealth(BaseModel):
    total_devices: int
    online_devices: int
    offline_devices: int
    average_battery: int
    average_uptime: float
    last_updated: datetime


class AlertCreate(BaseModel):
    """Payload for recording an alert raised by a sensor."""

    alert_id: str
    device_id: str
    alert_type: AlertType
    severity: Severity
    location: AlertLocation = Field(
        default_factory=lambda: AlertLocation(**DEFAULT_ALERT_LOCATION)
    )
    description: str = ""
    audio_url: Optional[str] = None
    photo_url: Optional[str] = None
    timestamp: Optional[datetime] = None
    resolved: bool = False

    @field_validator("alert_id", "device_id", mode="before")
    @classmethod
    def validate_required_text(cls, value: Any, info) -> str:
        return _required_text(value, info.field_name)

    @field_validator("location", mode="before")
    @classmethod
    def default_location(cls, value: Any) -> dict[str, Any]:
        return _location_or_default(value, DEFAULT_ALERT_LOCATION, "name")


class AlertResponseRequest(BaseModel):
    alert_id: str
    action: str = "respond"
    timestamp: Optional[str] = None
    location: Optional[str] = None
    alert_type: Optional[str] = None

    @field_validator("alert_id", mode="before")
    @classmethod
    def validate_alert_id(cls, value: Any) -> str:
        return _required_text(value, "alert_id")


class AlertResponseReceipt(BaseModel):
    success: bool = True
    message: str = "Response team dispatched successfully"
    alert_id: str
    action: str
    timestamp: Optional[str] = None
    location: Optional[str] = None
    alert_type: Optional[str] = None
    response_id: str
    estimated_arrival: datetime


class PhotoUploadResult(BaseModel):
    success: bool = True
    photo_url: str
    mock: Optional[bool] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeeklyAlertPoint(_CamelModel):
    day: str
    gunshots: int = 0
    chainsaws: int = 0
    vehicles: int = 0
    total: int = 0


class MonthlyTrendPoint(_CamelModel):
    month: str
    alerts: int = 0
    incidents: int = 0


class AlertTypeSlice(_CamelModel):
    name: str
    value: int
    color: str


class AnalyticsSummary(_CamelModel):
    total_alerts: int
    avg_daily_alerts: float
    peak_day: str
    response_rate: int
    online_devices: int
    total_devices: int
    network_health: int


class AnalyticsReport(_CamelModel):
    weekly_alerts: list[WeeklyAlertPoint]
    monthly_trend: list[MonthlyTrendPoint]
    alert_types: list[AlertTypeSlice]
    summary: AnalyticsSummary
