"""Track respond and photo-upload actions against the alert collection."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Optional

from wildwatch.errors import FetchError, NetworkError

from .models import Alert
from .service import DataService, user_message

logger = logging.getLogger(__name__)

RESPOND = "respond"
UPLOAD_PHOTO = "upload_photo"
LOCAL_RESPONSE_DELAY = 1.0


class ActionState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    description: str
    variant: str = "default"


@dataclass(frozen=True, slots=True)
class ResponseOutcome:
    """Result of :meth:`AlertResponseOrchestrator.respond`.

    ``confirmed`` is ``False`` when the backend could not be reached and the
    response was only recorded locally.
    """

    alert_id: str
    success: bool
    confirmed: bool
    notification: Notification
    receipt: Optional[dict[str, Any]] = None


@dataclass(frozen=True, slots=True)
class PhotoOutcome:
    alert_id: str
    success: bool
    notification: Notification
    photo_url: Optional[str] = None


class AlertResponseOrchestrator:
    """Own the alert collection and the per-alert action state.

    Parameters
    ----------
    service:
        Client used for the respond and photo endpoints.
    alerts:
        Initial collection; later replaced through :meth:`sync`.
    notify:
        Optional callback receiving every :class:`Notification`.
    local_delay:
        Seconds to wait before recording a response locally when the
        respond call fails to reach or be accepted by the backend.
    """

    def __init__(
        self,
        service: DataService,
        alerts: Iterable[Alert] = (),
        *,
        notify: Callable[[Notification], None] | None = None,
        local_delay: float = LOCAL_RESPONSE_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._service = service
        self._notify = notify
        self._local_delay = local_delay
        self._sleep = sleep
        self._alerts: dict[str, Alert] = {}
        self._in_flight: set[tuple[str, str]] = set()
        self._locally_resolved: set[str] = set()
        self.notifications: list[Notification] = []
        self.sync(alerts, authoritative=True)

    @property
    def alerts(self) -> list[Alert]:
        return list(self._alerts.values())

    def get(self, alert_id: str) -> Alert | None:
        return self._alerts.get(alert_id)

    def state(self, alert_id: str, action: str = RESPOND) -> ActionState:
        if (alert_id, action) in self._in_flight:
            return ActionState.IN_FLIGHT
        return ActionState.IDLE

    def can_respond(self, alert_id: str) -> bool:
        alert = self._alerts.get(alert_id)
        return (
            alert is not None
            and not alert.resolved
            and self.state(alert_id, RESPOND) is ActionState.IDLE
        )

    def sync(self, alerts: Iterable[Alert], authoritative: bool) -> None:
        """Replace the collection with a refreshed snapshot.

        Alerts resolved locally stay resolved unless ``authoritative`` says
        the snapshot came from the persistent store.
        """

        fresh: dict[str, Alert] = {}
        for alert in alerts:
            alert = dataclasses.replace(alert)
            if not authoritative and alert.alert_id in self._locally_resolved:
                alert.resolved = True
            fresh[alert.alert_id] = alert
        if authoritative:
            self._locally_resolved.clear()
        self._alerts = fresh

    def photo_alerts(self, limit: int = 6) -> list[Alert]:
        with_photos = [alert for alert in self._alerts.values() if alert.photo_url]
        with_photos.sort(key=lambda alert: alert.timestamp, reverse=True)
        return with_photos[:limit]

    def _emit(self, notification: Notification) -> Notification:
        self.notifications.append(notification)
        if self._notify is not None:
            self._notify(notification)
        return notification

    async def respond(self, alert_id: str) -> ResponseOutcome | None:
        """Dispatch a response team; ``None`` when the action is not allowed."""

        if not self.can_respond(alert_id):
            return None
        alert = self._alerts[alert_id]
        location = alert.location.name
        alert_type = alert.alert_type

        self._in_flight.add((alert_id, RESPOND))
        try:
            try:
                receipt = await self._service.respond_to_alert(
                    alert_id,
                    timestamp=datetime.now(UTC).isoformat(),
                    location=location,
                    alert_type=alert_type,
                )
                confirmed = True
                failure = None
            except FetchError as exc:
                logger.warning("Respond call failed, recording locally: %s", exc)
                failure = exc
                await self._sleep(self._local_delay)
                receipt = None
                confirmed = False
        except Exception:
            logger.exception("Failed to respond to alert %s", alert_id)
            notification = self._emit(
                Notification(
                    "Response Failed",
                    "Failed to dispatch response team. Please try again.",
                    "destructive",
                )
            )
            return ResponseOutcome(alert_id, False, False, notification)
        finally:
            self._in_flight.discard((alert_id, RESPOND))

        current = self._alerts.get(alert_id)
        if current is not None:
            current.resolved = True
        self._locally_resolved.add(alert_id)

        if confirmed:
            notification = Notification(
                "Alert Response Initiated",
                f"Response team dispatched to {location} for {alert_type} alert",
            )
        else:
            if isinstance(failure, NetworkError):
                reason = "Monitoring service unreachable"
            else:
                reason = "Monitoring service did not confirm the dispatch"
            notification = Notification(
                "Response Recorded Locally",
                f"{reason}; response to {location} recorded on this device only",
            )
        self._emit(notification)
        return ResponseOutcome(alert_id, True, confirmed, notification, receipt)

    async def upload_photo(
        self,
        alert_id: str,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
    ) -> PhotoOutcome | None:
        """Attach a photo; ``None`` when an upload for the alert is running."""

        key = (alert_id, UPLOAD_PHOTO)
        if key in self._in_flight:
            return None
        self._in_flight.add(key)
        try:
            body = await self._service.upload_alert_photo(
                alert_id, filename, content, content_type
            )
        except FetchError as exc:
            logger.warning("Photo upload for %s failed: %s", alert_id, exc)
            notification = self._emit(
                Notification(
                    "Photo Upload Failed",
                    user_message(exc, "upload photo"),
                    "destructive",
                )
            )
            return PhotoOutcome(alert_id, False, notification)
        finally:
            self._in_flight.discard(key)

        photo_url = body.get("photo_url") if isinstance(body, dict) else None
        current = self._alerts.get(alert_id)
        if current is not None and photo_url:
            current.photo_url = photo_url
        notification = self._emit(
            Notification("Photo Received", "Latest image attached to the alert.")
        )
        return PhotoOutcome(alert_id, True, notification, photo_url)


__all__ = [
    "ActionState",
    "AlertResponseOrchestrator",
    "LOCAL_RESPONSE_DELAY",
    "Notification",
    "PhotoOutcome",
    "RESPOND",
    "ResponseOutcome",
    "UPLOAD_PHOTO",
]
