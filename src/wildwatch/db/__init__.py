"""Database setup for Wildwatch."""

from .base import Base
from .models import Alert, AnalyticsDay, Device, DeviceSettings
from .session import create_engine, get_sessionmaker, init_db, session_scope

__all__ = [
    "Alert",
    "AnalyticsDay",
    "Base",
    "Device",
    "DeviceSettings",
    "create_engine",
    "get_sessionmaker",
    "init_db",
    "session_scope",
]
