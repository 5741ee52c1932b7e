"""In-memory dataset used while the persistent store is unavailable."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .seeds import SEED_ALERTS, SEED_ANALYTICS, SEED_DEVICES


def _plain(value: Any) -> Any:
    """Return ``value`` with datetimes rendered as ISO strings."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


class FallbackDataset:
    """Process-lifetime collections of devices and alerts.

    Each application instance owns one dataset, created at startup and seeded
    from :mod:`wildwatch.storage.seeds`. Readers receive copies; the
    collections only change through the insert and update methods, which do
    not await and therefore never interleave on the event loop.
    """

    def __init__(
        self,
        *,
        devices: Iterable[Mapping[str, Any]] | None = None,
        alerts: Iterable[Mapping[str, Any]] | None = None,
        analytics: Mapping[str, Any] | None = None,
    ) -> None:
        self._devices: list[dict[str, Any]] = [
            copy.deepcopy(dict(record))
            for record in (SEED_DEVICES if devices is None else devices)
        ]
        self._alerts: list[dict[str, Any]] = [
            copy.deepcopy(dict(record))
            for record in (SEED_ALERTS if alerts is None else alerts)
        ]
        self._analytics = copy.deepcopy(
            dict(SEED_ANALYTICS if analytics is None else analytics)
        )

    def list_devices(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._devices)

    def list_alerts(self) -> list[dict[str, Any]]:
        """Return alerts newest first, matching the store's ordering."""

        ordered = sorted(
            self._alerts, key=lambda record: str(record.get("created_at") or ""), reverse=True
        )
        return copy.deepcopy(ordered)

    def next_id(self, entity: str) -> int:
        if entity == "devices":
            return len(self._devices) + 1
        if entity == "alerts":
            return len(self._alerts) + 1
        raise ValueError(f"unknown entity {entity!r}")

    def insert_device(self, record: Mapping[str, Any]) -> dict[str, Any]:
        stored = _plain(dict(record))
        stored.setdefault("id", self.next_id("devices"))
        self._devices.append(stored)
        return copy.deepcopy(stored)

    def insert_alert(self, record: Mapping[str, Any]) -> dict[str, Any]:
        stored = _plain(dict(record))
        stored.setdefault("id", self.next_id("alerts"))
        self._alerts.append(stored)
        return copy.deepcopy(stored)

    def find_alert(self, alert_id: str) -> dict[str, Any] | None:
        for record in self._alerts:
            if record.get("alert_id") == alert_id:
                return copy.deepcopy(record)
        return None

    def update_alert(
        self, alert_id: str, patch: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Patch the alert in place; ``None`` when no alert has that id."""

        for record in self._alerts:
            if record.get("alert_id") == alert_id:
                record.update(_plain(dict(patch)))
                return copy.deepcopy(record)
        return None

    def analytics(self) -> dict[str, Any]:
        return copy.deepcopy(self._analytics)


__all__ = ["FallbackDataset"]
