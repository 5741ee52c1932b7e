"""Client library used by the Wildwatch dashboard."""

from .map import LiveMapReconciler, MapSurface, MarkerSpec, ReconcileReport
from .models import Alert, AlertLocation, Device, DeviceLocation
from .normalize import normalize_alert, normalize_alerts, normalize_device, normalize_devices
from .poller import RefreshPoller
from .responses import (
    ActionState,
    AlertResponseOrchestrator,
    Notification,
    PhotoOutcome,
    ResponseOutcome,
)
from .service import DataService, Loaded, load_with_fallback, user_message
from .settings import DashboardSettings, LocalSettingsStore

__all__ = [
    "ActionState",
    "Alert",
    "AlertLocation",
    "AlertResponseOrchestrator",
    "DashboardSettings",
    "DataService",
    "Device",
    "DeviceLocation",
    "LiveMapReconciler",
    "Loaded",
    "LocalSettingsStore",
    "MapSurface",
    "MarkerSpec",
    "Notification",
    "PhotoOutcome",
    "ReconcileReport",
    "RefreshPoller",
    "ResponseOutcome",
    "load_with_fallback",
    "normalize_alert",
    "normalize_alerts",
    "normalize_device",
    "normalize_devices",
    "user_message",
]
