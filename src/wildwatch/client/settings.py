"""Dashboard preferences persisted as a local JSON document."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

SETTINGS_PATH_ENV = "WILDWATCH_SETTINGS_PATH"
DEFAULT_SETTINGS_PATH = Path("~/.wildwatch/settings.json")


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotificationSettings(_Section):
    email: bool = True
    sms: bool = False
    auto_response: bool = True
    high_threshold: str = "gunshot"
    response_time: int = Field(default=15, ge=1)


class SecuritySettings(_Section):
    maintenance_mode: bool = False
    session_timeout: str = "8"
    password_policy: str = "standard"


class DeviceDefaults(_Section):
    ping_interval: int = Field(default=5, ge=1)
    battery_threshold: int = Field(default=20, ge=0, le=100)
    connectivity: str = "lora"


class EmergencyContacts(_Section):
    forest_officer: str = "+91-XXXXXXXXXX"
    ranger_station: str = "+91-XXXXXXXXXX"
    emergency_services: str = "100"


class GeographicSettings(_Section):
    center_lat: float = Field(default=11.7, ge=-90, le=90)
    center_lng: float = Field(default=76.58, ge=-180, le=180)
    coverage_radius: float = Field(default=25, gt=0)
    emergency_contacts: EmergencyContacts = Field(default_factory=EmergencyContacts)


class DashboardSettings(_Section):
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    devices: DeviceDefaults = Field(default_factory=DeviceDefaults)
    geographic: GeographicSettings = Field(default_factory=GeographicSettings)

    def device_settings_payload(self) -> dict[str, Any]:
        """Body for ``PUT /devices/{id}/settings`` built from device defaults."""

        return self.devices.model_dump()

    @property
    def map_center(self) -> tuple[float, float]:
        return (self.geographic.center_lat, self.geographic.center_lng)


def resolve_settings_path(explicit: Path | None = None) -> Path:
    if explicit is not None:
        return explicit.expanduser()
    env_path = os.environ.get(SETTINGS_PATH_ENV)
    return Path(env_path).expanduser() if env_path else DEFAULT_SETTINGS_PATH.expanduser()


class LocalSettingsStore:
    """Load and save :class:`DashboardSettings`; the last write wins."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = resolve_settings_path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> DashboardSettings:
        if not self._path.exists():
            return DashboardSettings()
        try:
            return DashboardSettings.model_validate_json(self._path.read_text("utf-8"))
        except (OSError, UnicodeDecodeError, PydanticValidationError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return DashboardSettings()

    def save(self, settings: DashboardSettings) -> Path:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        document = settings.model_dump_json(by_alias=True, indent=2)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved dashboard settings to %s", self._path)
        return self._path


__all__ = [
    "DashboardSettings",
    "DeviceDefaults",
    "EmergencyContacts",
    "GeographicSettings",
    "LocalSettingsStore",
    "NotificationSettings",
    "SecuritySettings",
    "resolve_settings_path",
]
