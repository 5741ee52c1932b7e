"""Tests for alert photo ingestion."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from app.uploads import MediaIngestor, make_filename, public_url
from wildwatch.errors import UploadRejectedError
from wildwatch.storage import FallbackDataset, PersistenceGateway

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _stored_files(upload_root: Path) -> list[Path]:
    directory = upload_root / "alerts"
    return sorted(directory.iterdir()) if directory.exists() else []


def test_photo_for_known_alert_updates_fallback(
    client: TestClient, upload_root: Path
) -> None:
    response = client.post(
        "/api/alerts/ALT-002/photo",
        files={"photo": ("trap-cam.PNG", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["mock"] is True
    assert body["photo_url"].startswith("/uploads/alerts/")
    assert body["photo_url"].endswith(".png")

    files = _stored_files(upload_root)
    assert len(files) == 1
    assert files[0].read_bytes() == PNG_BYTES

    alerts = {alert["alert_id"]: alert for alert in client.get("/api/alerts").json()}
    assert alerts["ALT-002"]["photo_url"] == body["photo_url"]

    served = client.get(body["photo_url"])
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_photo_for_unknown_alert_synthesizes_record(client: TestClient) -> None:
    response = client.post(
        "/api/alerts/ALT-900/photo",
        files={"photo": ("capture.jpg", PNG_BYTES, "image/jpeg")},
    )

    assert response.status_code == 200
    photo_url = response.json()["photo_url"]

    alerts = client.get("/api/alerts").json()
    synthesized = [alert for alert in alerts if alert["alert_id"] == "ALT-900"]
    assert len(synthesized) == 1
    record = synthesized[0]
    assert record["photo_url"] == photo_url
    assert record["device_id"] == "UNKNOWN"
    assert record["alert_type"] == "animal_distress"
    assert record["severity"] == "Low"
    assert record["location"] == {"lat": 0, "lng": 0, "name": "Unknown Location"}
    assert record["description"] == "Photo received"
    assert record["resolved"] is False
    assert alerts[0]["alert_id"] == "ALT-900"


def test_non_image_upload_is_rejected_before_writing(
    client: TestClient, upload_root: Path
) -> None:
    response = client.post(
        "/api/alerts/ALT-001/photo",
        files={"photo": ("notes.txt", b"not an image", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Only image uploads are allowed"
    assert _stored_files(upload_root) == []


def test_oversize_upload_is_rejected(tmp_path: Path) -> None:
    upload_root = tmp_path / "uploads"
    app = create_app(
        gateway=PersistenceGateway(),
        fallback=FallbackDataset(),
        media=MediaIngestor(upload_root, max_bytes=16),
    )
    with TestClient(app) as test_client:
        response = test_client.post(
            "/api/alerts/ALT-001/photo",
            files={"photo": ("big.jpg", b"\xff" * 17, "image/jpeg")},
        )

    assert response.status_code == 400
    assert _stored_files(upload_root) == []


def test_missing_photo_is_rejected(client: TestClient) -> None:
    response = client.post("/api/alerts/ALT-001/photo", data={"note": "no file"})

    assert response.status_code == 400
    assert response.json()["error"] == "Photo file is required"


def test_blank_alert_id_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/alerts/%20/photo",
        files={"photo": ("capture.jpg", PNG_BYTES, "image/jpeg")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Alert ID is required"


@pytest.mark.asyncio
async def test_photo_updates_store_alert(store_api: httpx.AsyncClient) -> None:
    await store_api.post(
        "/api/alerts",
        json={
            "alert_id": "ALT-100",
            "device_id": "SEN-001",
            "alert_type": "chainsaw",
            "severity": "High",
        },
    )

    response = await store_api.post(
        "/api/alerts/ALT-100/photo",
        files={"photo": ("capture.webp", PNG_BYTES, "image/webp")},
    )

    assert response.status_code == 200
    body = response.json()
    assert "mock" not in body
    listed = (await store_api.get("/api/alerts")).json()
    assert listed[0]["photo_url"] == body["photo_url"]


@pytest.mark.asyncio
async def test_store_failure_discards_written_photo(
    store_api: httpx.AsyncClient, upload_root: Path
) -> None:
    response = await store_api.post(
        "/api/alerts/ALT-404/photo",
        files={"photo": ("capture.jpg", PNG_BYTES, "image/jpeg")},
    )

    assert response.status_code == 500
    assert _stored_files(upload_root) == []


class _ExplodingDataset(FallbackDataset):
    def update_alert(self, alert_id, patch):
        raise RuntimeError("dataset corrupted")


def test_unexpected_failure_discards_written_photo(upload_root: Path) -> None:
    app = create_app(
        gateway=PersistenceGateway(),
        fallback=_ExplodingDataset(),
        media=MediaIngestor(upload_root),
    )

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post(
            "/api/alerts/ALT-001/photo",
            files={"photo": ("capture.jpg", PNG_BYTES, "image/jpeg")},
        )

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
    assert _stored_files(upload_root) == []


@pytest.mark.parametrize(
    ("original", "suffix"),
    [
        ("photo.PNG", ".png"),
        ("archive.tar.gz", ".gz"),
        ("no-extension", ".jpg"),
        (None, ".jpg"),
        ("odd.ex$e", ".jpg"),
    ],
)
def test_make_filename_keeps_sane_suffix(original: str | None, suffix: str) -> None:
    name = make_filename(original)

    stem, _, _ = name.partition(".")
    timestamp, _, random_part = stem.partition("-")
    assert name.endswith(suffix)
    assert timestamp.isdigit()
    assert 0 <= int(random_part) <= 999_999


def test_public_url_uses_uploads_prefix() -> None:
    assert public_url("alerts", "1-2.jpg") == "/uploads/alerts/1-2.jpg"


def test_validate_rejects_empty_payload(tmp_path: Path) -> None:
    ingestor = MediaIngestor(tmp_path)

    with pytest.raises(UploadRejectedError):
        ingestor.validate("image/png", 0)


def test_upload_root_honors_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WILDWATCH_UPLOAD_ROOT", str(tmp_path / "media"))

    assert MediaIngestor().root == tmp_path / "media"
