"""Client-side stand-ins shown when the backend cannot be reached at all."""

from __future__ import annotations

import copy
from typing import Any

from wildwatch.storage.seeds import SEED_ALERTS, SEED_ANALYTICS, SEED_DEVICES

from .models import Alert, Device
from .normalize import normalize_alerts, normalize_devices


def mock_devices() -> list[Device]:
    return normalize_devices(list(SEED_DEVICES))


def mock_alerts() -> list[Alert]:
    return normalize_alerts(list(SEED_ALERTS))


def mock_analytics() -> dict[str, Any]:
    return copy.deepcopy(SEED_ANALYTICS)


__all__ = ["mock_alerts", "mock_analytics", "mock_devices"]
