"""Shared pytest fixtures for API and client tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from app.uploads import MediaIngestor
from wildwatch.storage import FallbackDataset, PersistenceGateway


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables from leaking into tests."""

    for name in (
        "WILDWATCH_STORE_URL",
        "WILDWATCH_STORE_KEY",
        "WILDWATCH_ENV",
        "WILDWATCH_UPLOAD_ROOT",
        "WILDWATCH_API_URL",
        "WILDWATCH_SETTINGS_PATH",
        "WILDWATCH_CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def upload_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def fallback() -> FallbackDataset:
    return FallbackDataset()


@pytest.fixture()
def client(upload_root: Path, fallback: FallbackDataset) -> Iterator[TestClient]:
    """Provide a TestClient for an app without store credentials."""

    app = create_app(
        gateway=PersistenceGateway(), fallback=fallback, media=MediaIngestor(upload_root)
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def broken_client(tmp_path: Path, upload_root: Path) -> Iterator[TestClient]:
    """Provide a TestClient whose store is configured but unreachable."""

    db_url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'store.db'}"
    gateway = PersistenceGateway(db_url=db_url, key="test-key")
    app = create_app(
        gateway=gateway, fallback=FallbackDataset(), media=MediaIngestor(upload_root)
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def store_gateway(tmp_path: Path) -> AsyncIterator[PersistenceGateway]:
    """Provide a migrated SQLite-backed gateway."""

    db_url = f"sqlite+aiosqlite:///{tmp_path / 'store.db'}"
    gateway = PersistenceGateway(db_url=db_url, key="test-key")
    await gateway.initialize()
    try:
        yield gateway
    finally:
        await gateway.close()


@pytest.fixture()
def store_app(store_gateway: PersistenceGateway, upload_root: Path) -> FastAPI:
    return create_app(
        gateway=store_gateway, fallback=FallbackDataset(), media=MediaIngestor(upload_root)
    )


@pytest_asyncio.fixture()
async def store_api(store_app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client bound to the store-backed app on the test's event loop."""

    transport = httpx.ASGITransport(app=store_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as api:
        yield api
