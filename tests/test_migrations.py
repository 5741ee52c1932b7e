"""Tests for the schema produced by the Alembic migrations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from wildwatch.db import create_engine, init_db

UNIQUE_KEYS = {
    "devices": ["device_id"],
    "alerts": ["alert_id"],
    "device_settings": ["device_id"],
    "analytics": ["date"],
}


@pytest_asyncio.fixture
async def migrated_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'schema.db'}")
    try:
        await init_db(engine)
        yield engine
    finally:
        await engine.dispose()


async def _inspect(engine: AsyncEngine, method: str, *args):
    async with engine.connect() as conn:
        return await conn.run_sync(
            lambda sync_conn: getattr(sa.inspect(sync_conn), method)(*args)
        )


@pytest.mark.asyncio
@pytest.mark.parametrize(("table", "columns"), sorted(UNIQUE_KEYS.items()))
async def test_business_keys_are_unique(
    migrated_engine: AsyncEngine, table: str, columns: list[str]
) -> None:
    constraints = await _inspect(migrated_engine, "get_unique_constraints", table)

    assert columns in [constraint["column_names"] for constraint in constraints]


@pytest.mark.asyncio
async def test_analytics_date_is_a_calendar_date(migrated_engine: AsyncEngine) -> None:
    columns = {
        column["name"]: column
        for column in await _inspect(migrated_engine, "get_columns", "analytics")
    }

    assert isinstance(columns["date"]["type"], sa.Date)
    assert not isinstance(columns["date"]["type"], sa.DateTime)
    assert columns["date"]["nullable"] is False


@pytest.mark.asyncio
async def test_alerts_are_indexed_by_creation_time(migrated_engine: AsyncEngine) -> None:
    indexes = await _inspect(migrated_engine, "get_indexes", "alerts")

    assert {"name": "ix_alerts_created_at", "columns": ["created_at"]} in [
        {"name": index["name"], "columns": index["column_names"]} for index in indexes
    ]


@pytest.mark.asyncio
async def test_duplicate_alert_id_is_rejected(migrated_engine: AsyncEngine) -> None:
    insert = sa.text(
        "INSERT INTO alerts (alert_id, device_id, alert_type, severity, timestamp) "
        "VALUES ('ALT-1', 'SEN-001', 'gunshot', 'High', '2024-01-15 14:23:45')"
    )
    async with migrated_engine.begin() as conn:
        await conn.execute(insert)

    with pytest.raises(IntegrityError):
        async with migrated_engine.begin() as conn:
            await conn.execute(insert)


@pytest.mark.asyncio
async def test_init_db_is_idempotent(migrated_engine: AsyncEngine) -> None:
    await init_db(migrated_engine)

    async with migrated_engine.connect() as conn:
        revision = (
            await conn.execute(sa.text("SELECT version_num FROM alembic_version"))
        ).scalar_one()

    assert revision == "20241018_0001"
