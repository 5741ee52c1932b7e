"""Tests for the alert response orchestrator."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from wildwatch.client.mocks import mock_alerts
from wildwatch.client.responses import (
    ActionState,
    AlertResponseOrchestrator,
    Notification,
)
from wildwatch.errors import NetworkError, ResponseError


class FakeService:
    """Stand-in for :class:`DataService` recording dispatches."""

    def __init__(self, *, fail_with: BaseException | None = None) -> None:
        self.fail_with = fail_with
        self.dispatched: list[str] = []
        self.uploads: list[str] = []
        self.gate: asyncio.Event | None = None

    async def respond_to_alert(self, alert_id: str, **kwargs: Any) -> dict[str, Any]:
        self.dispatched.append(alert_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return {"success": True, "alert_id": alert_id, "response_id": "RESP-1"}

    async def upload_alert_photo(
        self, alert_id: str, filename: str, content: bytes, content_type: str
    ) -> dict[str, Any]:
        self.uploads.append(alert_id)
        if self.fail_with is not None:
            raise self.fail_with
        return {"success": True, "photo_url": f"/uploads/alerts/{filename}"}


async def _no_sleep(delay: float) -> None:
    return None


def _orchestrator(service: FakeService, **kwargs: Any) -> AlertResponseOrchestrator:
    return AlertResponseOrchestrator(service, mock_alerts(), sleep=_no_sleep, **kwargs)


@pytest.mark.asyncio
async def test_successful_response_resolves_alert_and_notifies() -> None:
    service = FakeService()
    received: list[Notification] = []
    orchestrator = _orchestrator(service, notify=received.append)

    outcome = await orchestrator.respond("ALT-001")

    assert outcome is not None
    assert outcome.success is True
    assert outcome.confirmed is True
    assert outcome.receipt["response_id"] == "RESP-1"
    assert orchestrator.get("ALT-001").resolved is True
    assert received[0].title == "Alert Response Initiated"
    assert "Core Area Sector 7" in received[0].description
    assert orchestrator.state("ALT-001") is ActionState.IDLE


@pytest.mark.asyncio
async def test_respond_twice_dispatches_once() -> None:
    service = FakeService()
    orchestrator = _orchestrator(service)

    first = await orchestrator.respond("ALT-002")
    second = await orchestrator.respond("ALT-002")

    assert first is not None
    assert second is None
    assert service.dispatched == ["ALT-002"]


@pytest.mark.asyncio
async def test_concurrent_respond_is_refused_while_in_flight() -> None:
    service = FakeService()
    service.gate = asyncio.Event()
    orchestrator = _orchestrator(service)

    pending = asyncio.create_task(orchestrator.respond("ALT-001"))
    await asyncio.sleep(0)

    assert orchestrator.state("ALT-001") is ActionState.IN_FLIGHT
    assert orchestrator.can_respond("ALT-001") is False
    assert await orchestrator.respond("ALT-001") is None

    service.gate.set()
    outcome = await pending

    assert outcome is not None and outcome.success
    assert service.dispatched == ["ALT-001"]


@pytest.mark.asyncio
async def test_resolved_and_unknown_alerts_are_refused() -> None:
    service = FakeService()
    orchestrator = _orchestrator(service)

    assert orchestrator.can_respond("ALT-003") is False
    assert await orchestrator.respond("ALT-003") is None
    assert await orchestrator.respond("ALT-404") is None
    assert service.dispatched == []


@pytest.mark.asyncio
async def test_unreachable_backend_records_response_locally() -> None:
    delays: list[float] = []

    async def record_sleep(delay: float) -> None:
        delays.append(delay)

    service = FakeService(fail_with=NetworkError("connection refused"))
    orchestrator = AlertResponseOrchestrator(
        service, mock_alerts(), sleep=record_sleep, local_delay=0.5
    )

    outcome = await orchestrator.respond("ALT-001")

    assert outcome is not None
    assert outcome.success is True
    assert outcome.confirmed is False
    assert outcome.notification.title == "Response Recorded Locally"
    assert outcome.notification.description.startswith("Monitoring service unreachable")
    assert delays == [0.5]
    assert orchestrator.get("ALT-001").resolved is True


@pytest.mark.asyncio
async def test_server_error_is_not_reported_as_unreachable() -> None:
    service = FakeService(fail_with=ResponseError("Store operation failed", status_code=500))
    orchestrator = _orchestrator(service)

    outcome = await orchestrator.respond("ALT-001")

    assert outcome is not None
    assert outcome.confirmed is False
    assert outcome.notification.title == "Response Recorded Locally"
    assert "unreachable" not in outcome.notification.description
    assert "did not confirm" in outcome.notification.description


@pytest.mark.asyncio
async def test_unexpected_failure_leaves_alert_unchanged() -> None:
    service = FakeService(fail_with=RuntimeError("boom"))
    orchestrator = _orchestrator(service)

    outcome = await orchestrator.respond("ALT-001")

    assert outcome is not None
    assert outcome.success is False
    assert outcome.notification.variant == "destructive"
    assert orchestrator.get("ALT-001").resolved is False
    assert orchestrator.can_respond("ALT-001") is True


@pytest.mark.asyncio
async def test_local_resolution_survives_non_authoritative_refresh() -> None:
    orchestrator = _orchestrator(FakeService())
    await orchestrator.respond("ALT-001")

    orchestrator.sync(mock_alerts(), authoritative=False)
    assert orchestrator.get("ALT-001").resolved is True

    orchestrator.sync(mock_alerts(), authoritative=True)
    assert orchestrator.get("ALT-001").resolved is False


@pytest.mark.asyncio
async def test_photo_upload_sets_url_and_notifies() -> None:
    service = FakeService()
    orchestrator = _orchestrator(service)

    outcome = await orchestrator.upload_photo("ALT-004", "trap.jpg", b"\xff\xd8")

    assert outcome is not None and outcome.success
    assert orchestrator.get("ALT-004").photo_url == "/uploads/alerts/trap.jpg"
    assert outcome.notification.title == "Photo Received"
    assert orchestrator.state("ALT-004", "upload_photo") is ActionState.IDLE


@pytest.mark.asyncio
async def test_photo_upload_failure_reports_user_message() -> None:
    service = FakeService(fail_with=ResponseError("Only image uploads are allowed", status_code=400))
    orchestrator = _orchestrator(service)

    outcome = await orchestrator.upload_photo("ALT-004", "notes.txt", b"text", "text/plain")

    assert outcome is not None
    assert outcome.success is False
    assert outcome.notification.title == "Photo Upload Failed"
    assert orchestrator.get("ALT-004").photo_url == "/placeholder.svg"


def test_photo_alerts_lists_newest_first() -> None:
    alerts = mock_alerts()
    alerts[1].photo_url = None
    orchestrator = AlertResponseOrchestrator(FakeService(), alerts)

    listed = orchestrator.photo_alerts(limit=2)

    assert [alert.alert_id for alert in listed] == ["ALT-001", "ALT-003"]


def test_orchestrator_keeps_its_own_copies() -> None:
    alerts = mock_alerts()
    orchestrator = AlertResponseOrchestrator(FakeService(), alerts)

    alerts[0].resolved = True

    assert orchestrator.get("ALT-001").resolved is False
