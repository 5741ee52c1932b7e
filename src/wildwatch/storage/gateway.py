"""Persistence gateway wrapping the relational store."""

from __future__ import annotations

import logging
import operator
import os
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Callable

from alembic.util import CommandError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..db import Alert, AnalyticsDay, Base, Device, DeviceSettings
from ..db.session import create_engine, get_sessionmaker, init_db, session_scope
from ..errors import ConfigurationError, RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)

STORE_URL_ENV = "WILDWATCH_STORE_URL"
STORE_KEY_ENV = "WILDWATCH_STORE_KEY"

ENTITIES: dict[str, type[Base]] = {
    "devices": Device,
    "alerts": Alert,
    "device_settings": DeviceSettings,
    "analytics": AnalyticsDay,
}

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "eq": operator.eq,
    "gte": operator.ge,
    "lte": operator.le,
}


@dataclass(frozen=True, slots=True)
class Filter:
    """A single ``column <op> value`` predicate."""

    column: str
    op: str
    value: Any


@dataclass(frozen=True, slots=True)
class Order:
    """Ordering applied to a query."""

    column: str
    descending: bool = False


def _model_for(entity: str) -> type[Base]:
    try:
        return ENTITIES[entity]
    except KeyError:
        raise ValueError(f"unknown entity {entity!r}") from None


def _column(model: type[Base], name: str) -> Any:
    column = getattr(model, name, None)
    if column is None:
        raise ValueError(f"{model.__tablename__} has no column {name!r}")
    return column


class PersistenceGateway:
    """Facade over the external store.

    The gateway is *configured* when it holds an engine. That is decided once,
    at construction, from two credentials: the store URL and its access key.
    Every data operation on an unconfigured gateway raises
    :class:`ConfigurationError`; every failure of a configured one surfaces as
    :class:`StoreError`.
    """

    def __init__(
        self,
        *,
        engine: AsyncEngine | None = None,
        db_url: str | None = None,
        key: str | None = None,
    ) -> None:
        if engine is None and db_url and key:
            engine = create_engine(db_url, key=key)
        self.engine = engine
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_env(cls) -> "PersistenceGateway":
        """Build a gateway from ``WILDWATCH_STORE_URL`` and ``WILDWATCH_STORE_KEY``."""

        db_url = os.environ.get(STORE_URL_ENV, "").strip()
        key = os.environ.get(STORE_KEY_ENV, "").strip()
        if not db_url or not key:
            logger.warning(
                "Store credentials not found; set %s and %s to enable persistence",
                STORE_URL_ENV,
                STORE_KEY_ENV,
            )
        return cls(db_url=db_url or None, key=key or None)

    @property
    def configured(self) -> bool:
        return self.engine is not None

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self.engine is None:
            raise ConfigurationError("persistent store is not configured")
        if self._sessionmaker is None:
            self._sessionmaker = get_sessionmaker(self.engine)
        return self._sessionmaker

    @asynccontextmanager
    async def _guard(self, operation: str, entity: str) -> AsyncIterator[None]:
        """Translate driver and I/O failures into :class:`StoreError`."""

        if self.engine is None:
            raise ConfigurationError("persistent store is not configured")
        try:
            yield
        except StoreError:
            raise
        except (SQLAlchemyError, CommandError, OSError, ValueError, TypeError) as exc:
            raise StoreError(
                f"{operation} on {entity} failed: {exc}",
                operation=operation,
                entity=entity,
            ) from exc

    async def initialize(self) -> None:
        """Apply database migrations."""

        async with self._guard("migrate", "schema"):
            await init_db(self.engine)

    async def close(self) -> None:
        """Dispose of the underlying connection pool."""

        if self.engine is not None:
            await self.engine.dispose()

    async def __aenter__(self) -> "PersistenceGateway":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def query(
        self,
        entity: str,
        filters: Iterable[Filter] = (),
        order: Order | None = None,
        columns: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows of ``entity`` matching every filter."""

        model = _model_for(entity)
        async with self._guard("query", entity):
            statement = select(model)
            for item in filters:
                compare = _OPERATORS.get(item.op)
                if compare is None:
                    raise ValueError(f"unsupported filter operator {item.op!r}")
                statement = statement.where(
                    compare(_column(model, item.column), item.value)
                )
            if order is not None:
                column = _column(model, order.column)
                statement = statement.order_by(
                    column.desc() if order.descending else column.asc()
                )

            async with self.sessionmaker() as session:
                result = await session.execute(statement)
                rows = [record.to_dict() for record in result.scalars().all()]

        if columns:
            return [{name: row.get(name) for name in columns} for row in rows]
        return rows

    async def insert(
        self, entity: str, records: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert ``records`` and return them as stored."""

        model = _model_for(entity)
        async with self._guard("insert", entity):
            async with session_scope(self.sessionmaker) as session:
                instances = [model(**dict(record)) for record in records]
                session.add_all(instances)
                await session.flush()
                for instance in instances:
                    await session.refresh(instance)
                return [instance.to_dict() for instance in instances]

    async def update(
        self, entity: str, key: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Patch the single row whose natural key matches ``key``."""

        model = _model_for(entity)
        async with self._guard("update", entity):
            async with session_scope(self.sessionmaker) as session:
                statement = select(model)
                for name, value in key.items():
                    statement = statement.where(_column(model, name) == value)
                result = await session.execute(statement)
                record = result.scalars().first()
                if record is None:
                    raise RecordNotFoundError(
                        f"no {entity} row matches {dict(key)!r}",
                        operation="update",
                        entity=entity,
                    )
                for name, value in patch.items():
                    setattr(record, name, value)
                await session.flush()
                await session.refresh(record)
                return record.to_dict()

    async def upsert(
        self, entity: str, record: Mapping[str, Any], *, conflict: str
    ) -> list[dict[str, Any]]:
        """Replace the row sharing ``record[conflict]``, or insert a new one."""

        model = _model_for(entity)
        async with self._guard("upsert", entity):
            async with session_scope(self.sessionmaker) as session:
                statement = select(model).where(
                    _column(model, conflict) == record[conflict]
                )
                result = await session.execute(statement)
                existing = result.scalars().first()
                if existing is None:
                    existing = model(**dict(record))
                    session.add(existing)
                else:
                    for name, value in record.items():
                        setattr(existing, name, value)
                await session.flush()
                await session.refresh(existing)
                return [existing.to_dict()]


__all__ = ["ENTITIES", "Filter", "Order", "PersistenceGateway"]
