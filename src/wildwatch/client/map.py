"""Keyed reconciliation of device and alert markers onto a map surface."""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from .models import Alert, Device

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (11.7, 76.58)
DEFAULT_ZOOM = 12

DEVICE_LAYER = 0
ALERT_LAYER = 1

STATUS_COLORS = {"online": "green", "maintenance": "orange", "offline": "red"}
SEVERITY_COLORS = {"High": "red", "Medium": "orange", "Low": "gold"}

MarkerKey = tuple[str, str]


class MapSurface(Protocol):
    """Drawing surface the reconciler renders into."""

    def add_marker(self, key: MarkerKey, spec: "MarkerSpec") -> Any: ...

    def update_marker(self, handle: Any, spec: "MarkerSpec") -> None: ...

    def remove_marker(self, handle: Any) -> None: ...

    def set_view(self, center: tuple[float, float], zoom: int) -> None: ...

    def destroy(self) -> None: ...


@dataclass(frozen=True, slots=True)
class MarkerSpec:
    """Everything needed to draw one marker."""

    lat: float
    lng: float
    color: str
    popup: str
    layer: int


@dataclass(slots=True)
class ReconcileReport:
    added: list[MarkerKey] = field(default_factory=list)
    updated: list[MarkerKey] = field(default_factory=list)
    removed: list[MarkerKey] = field(default_factory=list)
    unchanged: list[MarkerKey] = field(default_factory=list)

    @property
    def touched(self) -> int:
        return len(self.added) + len(self.updated) + len(self.removed)


def _title(alert_type: str) -> str:
    return alert_type.replace("_", " ").capitalize()


def device_popup(device: Device) -> str:
    e = html.escape
    return (
        '<div class="device-popup">'
        f"<strong>{e(device.device_id)}</strong><br/>"
        f"{e(device.name)}<br/>"
        f"Status: {e(device.status)}<br/>"
        f"Battery: {device.battery}%<br/>"
        f"Signal: {device.signal_strength}%<br/>"
        f"Alerts: {device.alerts_count}"
        "</div>"
    )


def alert_popup(alert: Alert) -> str:
    e = html.escape
    return (
        '<div class="alert-popup">'
        f"<strong>{e(_title(alert.alert_type))} Alert</strong><br/>"
        f"{e(alert.severity)} Priority<br/>"
        f"Location: {e(alert.location.name)}<br/>"
        f"Time: {e(alert.timestamp)}<br/>"
        f"Device: {e(alert.device_id)}<br/>"
        f"<em>{e(alert.description)}</em>"
        "</div>"
    )


def device_marker(device: Device) -> MarkerSpec:
    return MarkerSpec(
        lat=device.location.lat,
        lng=device.location.lng,
        color=STATUS_COLORS.get(device.status, STATUS_COLORS["offline"]),
        popup=device_popup(device),
        layer=DEVICE_LAYER,
    )


def alert_marker(alert: Alert) -> MarkerSpec:
    return MarkerSpec(
        lat=alert.location.lat,
        lng=alert.location.lng,
        color=SEVERITY_COLORS.get(alert.severity, SEVERITY_COLORS["Low"]),
        popup=alert_popup(alert),
        layer=ALERT_LAYER,
    )


class LiveMapReconciler:
    """Keep a :class:`MapSurface` in step with device and alert snapshots.

    Markers are keyed by ``("device", device_id)`` and ``("alert", alert_id)``
    so repeated snapshots only touch the markers whose rendering changed.
    """

    def __init__(
        self,
        center: tuple[float, float] = DEFAULT_CENTER,
        zoom: int = DEFAULT_ZOOM,
    ) -> None:
        self._center = center
        self._zoom = zoom
        self._surface: MapSurface | None = None
        self._markers: dict[MarkerKey, tuple[Any, MarkerSpec]] = {}
        self._unmounted = False

    @property
    def mounted(self) -> bool:
        return self._surface is not None

    @property
    def keys(self) -> set[MarkerKey]:
        return set(self._markers)

    def mount(self, factory: Callable[[], MapSurface]) -> None:
        if self._surface is not None:
            return
        if self._unmounted:
            raise RuntimeError("Map reconciler cannot be mounted again after unmount")
        self._surface = factory()
        self._surface.set_view(self._center, self._zoom)

    def unmount(self) -> None:
        surface = self._surface
        if surface is None:
            return
        self._surface = None
        self._unmounted = True
        for handle, _ in self._markers.values():
            surface.remove_marker(handle)
        self._markers.clear()
        surface.destroy()

    def reconcile(
        self,
        devices: Iterable[Device],
        alerts: Iterable[Alert],
        show_alerts: bool = True,
    ) -> ReconcileReport:
        surface = self._surface
        if surface is None:
            raise RuntimeError("Map surface is not mounted")

        desired: dict[MarkerKey, MarkerSpec] = {}
        for device in devices:
            desired[("device", device.device_id)] = device_marker(device)
        if show_alerts:
            for alert in alerts:
                desired[("alert", alert.alert_id)] = alert_marker(alert)

        report = ReconcileReport()
        for key in [key for key in self._markers if key not in desired]:
            handle, _ = self._markers.pop(key)
            surface.remove_marker(handle)
            report.removed.append(key)

        # Devices first so alert markers are drawn above them.
        for key, spec in sorted(desired.items(), key=lambda item: item[1].layer):
            current = self._markers.get(key)
            if current is None:
                self._markers[key] = (surface.add_marker(key, spec), spec)
                report.added.append(key)
            elif current[1] != spec:
                surface.update_marker(current[0], spec)
                self._markers[key] = (current[0], spec)
                report.updated.append(key)
            else:
                report.unchanged.append(key)

        if report.touched:
            logger.debug(
                "Map reconciled: %d added, %d updated, %d removed",
                len(report.added),
                len(report.updated),
                len(report.removed),
            )
        return report


__all__ = [
    "ALERT_LAYER",
    "DEVICE_LAYER",
    "LiveMapReconciler",
    "MapSurface",
    "MarkerSpec",
    "ReconcileReport",
    "SEVERITY_COLORS",
    "STATUS_COLORS",
    "alert_marker",
    "alert_popup",
    "device_marker",
    "device_popup",
]
