"""Declarative base shared by every mapped table."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.orm import DeclarativeBase


def _serialize(value: Any) -> Any:
    """Render column values as JSON-friendly primitives."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return dict(value)
    return value


class Base(DeclarativeBase):
    """Base class for the wildwatch ORM models."""

    def to_dict(self) -> dict[str, Any]:
        """Return the row as a plain dictionary keyed by column name."""

        return {
            column.key: _serialize(getattr(self, column.key))
            for column in self.__mapper__.column_attrs
        }
