"""Dependencies resolving handlers from the application state."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from ..resources import AlertResource, AnalyticsResource, DeviceResource
from ..uploads import MediaIngestor

DATA_SOURCE_HEADER = "X-Data-Source"


def _from_state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(
            f"{name} dependency has not been configured on the application state."
        )
    return value


def get_device_resource(request: Request) -> DeviceResource:
    return _from_state(request, "devices")


def get_alert_resource(request: Request) -> AlertResource:
    return _from_state(request, "alerts")


def get_analytics_resource(request: Request) -> AnalyticsResource:
    return _from_state(request, "analytics")


def get_media_ingestor(request: Request) -> MediaIngestor:
    return _from_state(request, "media")
