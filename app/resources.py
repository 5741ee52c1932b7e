"""Resource handlers coordinating the store gateway with the fallback dataset."""

from __future__ import annotations

import asyncio
import logging
import math
from collections import Counter, OrderedDict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from wildwatch.errors import ConfigurationError, RecordNotFoundError, StoreError
from wildwatch.storage import FallbackDataset, Filter, Order, PersistenceGateway
from wildwatch.storage.seeds import SEED_ANALYTICS

from .schemas import (
    AlertCreate,
    AlertResponseReceipt,
    AlertResponseRequest,
    AlertTypeSlice,
    AnalyticsReport,
    AnalyticsSummary,
    DeviceCreate,
    DeviceHealth,
    DeviceSettingsUpdate,
    MonthlyTrendPoint,
    PhotoUploadResult,
    WeeklyAlertPoint,
)

logger = logging.getLogger(__name__)

SOURCE_STORE = "store"
SOURCE_FALLBACK = "fallback"

RESPONSE_ETA = timedelta(minutes=15)

ALERT_TYPE_LABELS: dict[str, tuple[str, str]] = {
    "vehicle": ("Vehicle Movement", "#8B5CF6"),
    "gunshot": ("Gunshots", "#EF4444"),
    "chainsaw": ("Chainsaw Activity", "#F59E0B"),
    "animal_distress": ("Animal Distress", "#10B981"),
}


@dataclass(frozen=True, slots=True)
class ReadResult:
    """Records returned by a read together with the tier that served them."""

    records: list[dict[str, Any]]
    source: str


def _number(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _parse_day(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def summarize_health(
    devices: Iterable[Mapping[str, Any]], now: datetime
) -> DeviceHealth:
    """Aggregate device health; the denominator never drops below one."""

    records = list(devices)
    total = max(len(records), 1)
    online = sum(1 for record in records if record.get("status") == "online")
    battery = sum(_number(record.get("battery")) for record in records) / total
    uptime = sum(_number(record.get("uptime_percentage")) for record in records) / total
    return DeviceHealth(
        total_devices=total,
        online_devices=online,
        offline_devices=total - online,
        average_battery=round(battery),
        average_uptime=round(uptime, 2),
        last_updated=now,
    )


def weekly_points(rows: Iterable[Mapping[str, Any]]) -> list[WeeklyAlertPoint]:
    points = []
    for row in rows:
        day = _parse_day(row.get("date"))
        gunshots = int(_number(row.get("gunshots")))
        chainsaws = int(_number(row.get("chainsaws")))
        vehicles = int(_number(row.get("vehicles")))
        points.append(
            WeeklyAlertPoint(
                day=day.strftime("%a") if day else "?",
                gunshots=gunshots,
                chainsaws=chainsaws,
                vehicles=vehicles,
                total=gunshots + chainsaws + vehicles,
            )
        )
    return points


def monthly_points(rows: Iterable[Mapping[str, Any]]) -> list[MonthlyTrendPoint]:
    """Fold daily rows into per-month totals, preserving date order."""

    months: OrderedDict[tuple[int, int], MonthlyTrendPoint] = OrderedDict()
    for row in rows:
        day = _parse_day(row.get("date"))
        if day is None:
            continue
        point = months.setdefault(
            (day.year, day.month), MonthlyTrendPoint(month=day.strftime("%b"))
        )
        point.alerts += sum(
            int(_number(row.get(name)))
            for name in ("gunshots", "chainsaws", "vehicles", "animal_distress")
        )
        point.incidents += int(_number(row.get("incidents")))
    return list(months.values())


def alert_type_slices(rows: Iterable[Mapping[str, Any]]) -> list[AlertTypeSlice]:
    counts = Counter(str(row.get("alert_type")) for row in rows)
    slices = []
    for alert_type, count in counts.most_common():
        name, color = ALERT_TYPE_LABELS.get(
            alert_type, (alert_type.replace("_", " ").title(), "#6B7280")
        )
        slices.append(AlertTypeSlice(name=name, value=count, color=color))
    return slices


def build_summary(
    weekly: list[WeeklyAlertPoint],
    alerts: list[Mapping[str, Any]] | None,
    devices: list[Mapping[str, Any]],
) -> AnalyticsSummary:
    mock = SEED_ANALYTICS["summary"]
    total_alerts = sum(point.total for point in weekly)
    peak = max(weekly, key=lambda point: point.total) if weekly else None
    if alerts:
        resolved = sum(1 for row in alerts if row.get("resolved"))
        response_rate = round(100 * resolved / len(alerts))
    else:
        response_rate = mock["responseRate"]
    online = sum(1 for row in devices if row.get("status") == "online")
    total_devices = len(devices)
    return AnalyticsSummary(
        total_alerts=total_alerts,
        avg_daily_alerts=round(total_alerts / 7, 1),
        peak_day=peak.day if peak else mock["peakDay"],
        response_rate=response_rate,
        online_devices=online,
        total_devices=total_devices,
        network_health=round(100 * online / max(total_devices, 1)),
    )


class _Resource:
    """Gateway-first, fallback-second read orchestration."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        fallback: FallbackDataset,
        *,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._gateway = gateway
        self._fallback = fallback
        self._now = now or (lambda: datetime.now(UTC))

    async def _read(
        self,
        entity: str,
        fallback_reader: Callable[[], list[dict[str, Any]]],
        order: Order | None = None,
    ) -> ReadResult:
        if not self._gateway.configured:
            logger.info("Store not configured; serving in-memory %s", entity)
            return ReadResult(fallback_reader(), SOURCE_FALLBACK)
        try:
            rows = await self._gateway.query(entity, order=order)
        except StoreError as exc:
            logger.error(
                "Store query for %s failed, falling back to in-memory data: %s",
                entity,
                exc,
            )
            return ReadResult(fallback_reader(), SOURCE_FALLBACK)
        return ReadResult(rows, SOURCE_STORE)

    async def _sample(
        self, entity: str, filters: Iterable[Filter] = (), **kwargs: Any
    ) -> list[dict[str, Any]] | None:
        """Run an analytics query, returning ``None`` when it failed."""

        try:
            return await self._gateway.query(entity, filters, **kwargs)
        except StoreError as exc:
            logger.warning("Analytics query on %s failed: %s", entity, exc)
            return None


class DeviceResource(_Resource):
    """Reads, registrations, settings and health for sensors."""

    async def list_devices(self) -> ReadResult:
        return await self._read("devices", self._fallback.list_devices)

    async def create_device(self, payload: DeviceCreate) -> list[dict[str, Any]]:
        now = self._now()
        record = {
            "device_id": payload.device_id,
            "name": payload.name,
            "location": payload.location.model_dump(),
            "status": "online",
            "battery": 100,
            "signal_strength": 95,
            "connectivity": payload.connectivity,
            "last_ping": now,
            "alerts_count": 0,
            "uptime_percentage": 100.0,
        }

        if not self._gateway.configured:
            stored = self._fallback.insert_device(
                {
                    "id": self._fallback.next_id("devices"),
                    **record,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            logger.info("Added device %s (%s) to in-memory dataset", payload.device_id, payload.name)
            return [stored]

        rows = await self._gateway.insert("devices", [record])
        logger.info("Registered device %s in store", payload.device_id)
        return rows

    async def update_settings(
        self, device_id: str, payload: DeviceSettingsUpdate
    ) -> dict[str, Any] | list[dict[str, Any]]:
        settings = payload.model_dump()
        if not self._gateway.configured:
            logger.info("Updated device %s settings (not persisted): %s", device_id, settings)
            return {
                "message": "Device settings updated successfully",
                "settings": settings,
            }

        return await self._gateway.upsert(
            "device_settings",
            {"device_id": device_id, **settings, "updated_at": self._now()},
            conflict="device_id",
        )

    async def health(self) -> tuple[DeviceHealth, str]:
        devices = self._fallback.list_devices()
        source = SOURCE_FALLBACK
        if self._gateway.configured:
            try:
                rows = await self._gateway.query("devices")
            except StoreError as exc:
                logger.warning(
                    "Failed to fetch device health data, falling back: %s", exc
                )
            else:
                if rows:
                    devices, source = rows, SOURCE_STORE
        return summarize_health(devices, self._now()), source


class AlertResource(_Resource):
    """Alert reads, creation, responses and photo links."""

    async def list_alerts(self) -> ReadResult:
        return await self._read(
            "alerts",
            self._fallback.list_alerts,
            order=Order("created_at", descending=True),
        )

    async def create_alert(self, payload: AlertCreate) -> list[dict[str, Any]]:
        if not self._gateway.configured:
            raise ConfigurationError(
                "Database not configured. Please set up store credentials."
            )
        record = payload.model_dump()
        record["location"] = payload.location.model_dump()
        record["timestamp"] = payload.timestamp or self._now()
        return await self._gateway.insert("alerts", [record])

    async def respond(self, payload: AlertResponseRequest) -> AlertResponseReceipt:
        logger.info(
            "Alert response: %s for %s at %s (%s)",
            payload.action,
            payload.alert_type,
            payload.location,
            payload.alert_id,
        )
        patch = {"resolved": True}
        if self._gateway.configured:
            try:
                await self._gateway.update("alerts", {"alert_id": payload.alert_id}, patch)
            except RecordNotFoundError:
                logger.warning("Responded to alert %s which is not in the store", payload.alert_id)
        elif self._fallback.update_alert(payload.alert_id, patch) is None:
            logger.warning("Responded to alert %s which is not in the in-memory dataset", payload.alert_id)

        now = self._now()
        return AlertResponseReceipt(
            alert_id=payload.alert_id,
            action=payload.action,
            timestamp=payload.timestamp,
            location=payload.location,
            alert_type=payload.alert_type,
            response_id=f"RESP-{int(now.timestamp() * 1000)}",
            estimated_arrival=now + RESPONSE_ETA,
        )

    async def attach_photo(self, alert_id: str, photo_url: str) -> PhotoUploadResult:
        """Link ``photo_url`` to the alert whose natural key is ``alert_id``."""

        if self._gateway.configured:
            row = await self._gateway.update(
                "alerts", {"alert_id": alert_id}, {"photo_url": photo_url}
            )
            return PhotoUploadResult(photo_url=row.get("photo_url") or photo_url)

        if self._fallback.update_alert(alert_id, {"photo_url": photo_url}) is None:
            now = self._now()
            self._fallback.insert_alert(
                {
                    "id": self._fallback.next_id("alerts"),
                    "alert_id": alert_id,
                    "device_id": "UNKNOWN",
                    "alert_type": "animal_distress",
                    "severity": "Low",
                    "location": {"lat": 0, "lng": 0, "name": "Unknown Location"},
                    "description": "Photo received",
                    "audio_url": "",
                    "timestamp": now,
                    "resolved": False,
                    "created_at": now,
                    "photo_url": photo_url,
                }
            )
            logger.info("Synthesized alert %s for an unmatched photo", alert_id)
        return PhotoUploadResult(photo_url=photo_url, mock=True)


class AnalyticsResource(_Resource):
    """Read-only aggregates; each sub-object falls back independently."""

    def _mock_report(self) -> AnalyticsReport:
        return AnalyticsReport.model_validate(self._fallback.analytics())

    async def report(self) -> tuple[AnalyticsReport, str]:
        mock = self._mock_report()
        if not self._gateway.configured:
            logger.info("Store not configured; serving mock analytics")
            return mock, SOURCE_FALLBACK

        now = self._now()
        weekly_rows, monthly_rows, alert_rows, device_rows = await asyncio.gather(
            self._sample("analytics", [Filter("date", "gte", (now - timedelta(days=7)).date())]),
            self._sample("analytics", order=Order("date")),
            self._sample(
                "alerts",
                [Filter("created_at", "gte", now - timedelta(days=30))],
                columns=("alert_type", "resolved"),
            ),
            self._sample("devices", columns=("status",)),
        )

        weekly = weekly_points(weekly_rows) if weekly_rows else mock.weekly_alerts
        report = AnalyticsReport(
            weekly_alerts=weekly,
            monthly_trend=monthly_points(monthly_rows) if monthly_rows else mock.monthly_trend,
            alert_types=alert_type_slices(alert_rows) if alert_rows else mock.alert_types,
            summary=(
                build_summary(weekly, alert_rows, device_rows)
                if device_rows
                else mock.summary
            ),
        )
        return report, SOURCE_STORE

    async def summary(self) -> tuple[AnalyticsSummary, str]:
        mock = self._mock_report()
        if not self._gateway.configured:
            logger.info("Store not configured; serving mock analytics summary")
            return mock.summary, SOURCE_FALLBACK

        now = self._now()
        weekly_rows, alert_rows, device_rows = await asyncio.gather(
            self._sample("analytics", [Filter("date", "gte", (now - timedelta(days=7)).date())]),
            self._sample(
                "alerts",
                [Filter("created_at", "gte", now - timedelta(days=30))],
                columns=("alert_type", "resolved"),
            ),
            self._sample("devices", columns=("status",)),
        )
        if not device_rows:
            return mock.summary, SOURCE_FALLBACK
        weekly = weekly_points(weekly_rows) if weekly_rows else mock.weekly_alerts
        return build_summary(weekly, alert_rows, device_rows), SOURCE_STORE


__all__ = [
    "AlertResource",
    "AnalyticsResource",
    "DeviceResource",
    "ReadResult",
    "SOURCE_FALLBACK",
    "SOURCE_STORE",
    "summarize_health",
]
