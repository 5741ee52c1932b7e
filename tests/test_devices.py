"""Tests for the device endpoints."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from app.uploads import MediaIngestor
from wildwatch.storage import FallbackDataset, PersistenceGateway


def test_list_devices_serves_seed_data_without_store(client: TestClient) -> None:
    response = client.get("/api/devices")

    assert response.status_code == 200
    assert response.headers["X-Data-Source"] == "fallback"
    assert [device["device_id"] for device in response.json()] == [
        "SEN-001",
        "SEN-004",
        "SEN-007",
    ]


def test_created_device_appears_once_in_listing(client: TestClient) -> None:
    """A registered device is listed exactly once with fresh defaults."""

    created = client.post("/api/devices", json={"device_id": "SEN-099", "name": "Test"})
    assert created.status_code == 201
    body = created.json()
    assert isinstance(body, list) and len(body) == 1
    assert body[0]["id"] == 4

    listed = client.get("/api/devices").json()
    matches = [device for device in listed if device["device_id"] == "SEN-099"]
    assert len(matches) == 1
    device = matches[0]
    assert device["status"] == "online"
    assert device["battery"] == 100
    assert device["signal_strength"] == 95
    assert device["alerts_count"] == 0
    assert device["uptime_percentage"] == 100.0
    assert device["connectivity"] == "LoRa"
    assert device["location"] == {"lat": 11.7, "lng": 76.58, "zone": "New Device Zone"}


def test_partial_location_is_defaulted_field_by_field(client: TestClient) -> None:
    response = client.post(
        "/api/devices",
        json={
            "device_id": "SEN-100",
            "name": "River Bend",
            "location": {"lat": 11.65, "lng": "not-a-number"},
            "connectivity": "GSM",
        },
    )

    assert response.status_code == 201
    device = response.json()[0]
    assert device["location"] == {"lat": 11.65, "lng": 76.58, "zone": "New Device Zone"}
    assert device["connectivity"] == "GSM"


@pytest.mark.parametrize(
    "payload",
    [
        {"device_id": "", "name": "Test"},
        {"device_id": "   ", "name": "Test"},
        {"device_id": "SEN-101", "name": "  "},
        {"name": "Test"},
        {"device_id": "SEN-101"},
    ],
)
def test_blank_identity_is_rejected_without_store(
    client: TestClient, payload: dict
) -> None:
    response = client.post("/api/devices", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()
    assert len(client.get("/api/devices").json()) == 3


@pytest.mark.asyncio
async def test_blank_identity_is_rejected_with_store(store_api: httpx.AsyncClient) -> None:
    response = await store_api.post("/api/devices", json={"device_id": " ", "name": "Test"})

    assert response.status_code == 400
    listed = await store_api.get("/api/devices")
    assert listed.json() == []


@pytest.mark.asyncio
async def test_store_backed_device_lifecycle(store_api: httpx.AsyncClient) -> None:
    empty = await store_api.get("/api/devices")
    assert empty.status_code == 200
    assert empty.headers["X-Data-Source"] == "store"
    assert empty.json() == []

    created = await store_api.post(
        "/api/devices", json={"device_id": "SEN-200", "name": "Ridge Camera"}
    )
    assert created.status_code == 201
    stored = created.json()[0]
    assert stored["device_id"] == "SEN-200"
    assert stored["status"] == "online"
    assert stored["created_at"].endswith("+00:00")

    listed = await store_api.get("/api/devices")
    assert [device["device_id"] for device in listed.json()] == ["SEN-200"]


def test_settings_are_echoed_without_store(client: TestClient) -> None:
    payload = {"ping_interval": 10, "battery_threshold": 25, "connectivity": "GSM"}

    response = client.put("/api/devices/SEN-001/settings", json=payload)

    assert response.status_code == 200
    assert response.json() == {
        "message": "Device settings updated successfully",
        "settings": payload,
    }


def test_settings_reject_out_of_range_values(client: TestClient) -> None:
    response = client.put(
        "/api/devices/SEN-001/settings", json={"battery_threshold": 150}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_settings_upsert_keeps_one_row_per_device(
    store_api: httpx.AsyncClient, store_gateway: PersistenceGateway
) -> None:
    first = await store_api.put(
        "/api/devices/SEN-001/settings",
        json={"ping_interval": 5, "battery_threshold": 20, "connectivity": "LoRa"},
    )
    second = await store_api.put(
        "/api/devices/SEN-001/settings",
        json={"ping_interval": 15, "battery_threshold": 30, "connectivity": "GSM"},
    )

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()[0]["ping_interval"] == 15

    rows = await store_gateway.query("device_settings")
    assert len(rows) == 1
    assert rows[0]["connectivity"] == "GSM"


def test_health_counts_online_devices(client: TestClient) -> None:
    response = client.get("/api/devices/health")

    assert response.status_code == 200
    health = response.json()
    assert health["total_devices"] == 3
    assert health["online_devices"] == 2
    assert health["offline_devices"] == 1
    assert health["average_battery"] == round((85 + 72 + 15) / 3)
    assert health["average_uptime"] == round((99.2 + 95.8 + 67.3) / 3, 2)
    assert "last_updated" in health


def test_health_over_no_devices_does_not_divide_by_zero(tmp_path) -> None:
    app = create_app(
        gateway=PersistenceGateway(),
        fallback=FallbackDataset(devices=[]),
        media=MediaIngestor(tmp_path / "uploads"),
    )
    with TestClient(app) as test_client:
        health = test_client.get("/api/devices/health").json()

    assert health["total_devices"] == 1
    assert health["online_devices"] == 0
    assert health["offline_devices"] == 1
    assert health["average_battery"] == 0
    assert health["average_uptime"] == 0


@pytest.mark.asyncio
async def test_health_falls_back_when_store_is_empty(store_api: httpx.AsyncClient) -> None:
    response = await store_api.get("/api/devices/health")

    assert response.status_code == 200
    assert response.headers["X-Data-Source"] == "fallback"
    assert response.json()["online_devices"] == 2


def test_broken_store_degrades_reads_and_fails_writes(broken_client: TestClient) -> None:
    listed = broken_client.get("/api/devices")
    assert listed.status_code == 200
    assert listed.headers["X-Data-Source"] == "fallback"
    assert len(listed.json()) == 3

    health = broken_client.get("/api/devices/health")
    assert health.status_code == 200

    created = broken_client.post(
        "/api/devices", json={"device_id": "SEN-300", "name": "Unreachable"}
    )
    assert created.status_code == 500
    body = created.json()
    assert body["error"] == "Store operation failed"
    assert body["message"] == "Something went wrong"

    settings = broken_client.put(
        "/api/devices/SEN-001/settings", json={"ping_interval": 5}
    )
    assert settings.status_code == 500

    relisted = broken_client.get("/api/devices").json()
    assert "SEN-300" not in {device["device_id"] for device in relisted}


def test_store_error_detail_is_exposed_in_development(
    broken_client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WILDWATCH_ENV", "development")

    response = broken_client.post(
        "/api/devices", json={"device_id": "SEN-301", "name": "Unreachable"}
    )

    assert response.status_code == 500
    assert "insert on devices failed" in response.json()["message"]
