"""HTTP client used by the dashboard for every backend call."""

from __future__ import annotations

import inspect
import logging
import os
from urllib.parse import quote
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

import httpx

from wildwatch.errors import FetchError, NetworkError, ResponseError, expose_details

from .models import Alert, Device
from .normalize import normalize_alerts, normalize_devices

logger = logging.getLogger(__name__)

API_URL_ENV = "WILDWATCH_API_URL"
DEFAULT_API_URL = "http://localhost:4000/api"
DATA_SOURCE_HEADER = "X-Data-Source"

T = TypeVar("T")


def resolve_api_url(explicit: str | None = None) -> str:
    return (explicit or os.environ.get(API_URL_ENV) or DEFAULT_API_URL).rstrip("/")


class DataService:
    """Single entry point for backend requests.

    Responses are decoded and normalized here so callers only ever see
    :class:`Device` and :class:`Alert` records. Failures surface as
    :class:`~wildwatch.errors.FetchError` subclasses.

    Parameters
    ----------
    base_url:
        API root, ``WILDWATCH_API_URL`` or ``http://localhost:4000/api`` when
        omitted.
    transport:
        Optional httpx transport, e.g. :class:`httpx.ASGITransport` in tests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=resolve_api_url(base_url) + "/", transport=transport
        )
        self.last_source: Optional[str] = None

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "DataService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _send(
        self, method: str, url: str | httpx.URL, **kwargs: Any
    ) -> tuple[Any, httpx.Response]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError(f"Unable to reach the server: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None
            decodable = False
        else:
            decodable = True

        if not response.is_success:
            message = None
            if isinstance(body, Mapping):
                message = body.get("error")
            raise ResponseError(
                str(message or f"HTTP error! status: {response.status_code}"),
                status_code=response.status_code,
            )
        if not decodable:
            raise ResponseError(
                "Response body is not valid JSON", status_code=response.status_code
            )
        return body, response

    async def _list(self, path: str) -> Any:
        body, response = await self._send("GET", path)
        self.last_source = response.headers.get(DATA_SOURCE_HEADER)
        return body

    async def get_devices(self) -> list[Device]:
        return normalize_devices(await self._list("devices"))

    async def add_device(
        self,
        device_id: str,
        name: str,
        *,
        location: Mapping[str, Any] | None = None,
        connectivity: str | None = None,
    ) -> list[Device]:
        payload: dict[str, Any] = {"device_id": device_id, "name": name}
        if location is not None:
            payload["location"] = dict(location)
        if connectivity is not None:
            payload["connectivity"] = connectivity
        body, _ = await self._send("POST", "devices", json=payload)
        return normalize_devices(body)

    async def update_device_settings(
        self, device_id: str, settings: Mapping[str, Any]
    ) -> Any:
        body, _ = await self._send(
            "PUT", f"devices/{quote(device_id, safe='')}/settings", json=dict(settings)
        )
        return body

    async def get_device_health(self) -> dict[str, Any]:
        body, response = await self._send("GET", "devices/health")
        self.last_source = response.headers.get(DATA_SOURCE_HEADER)
        return body

    async def get_alerts(self) -> list[Alert]:
        return normalize_alerts(await self._list("alerts"))

    async def create_alert(self, payload: Mapping[str, Any]) -> list[Alert]:
        body, _ = await self._send("POST", "alerts", json=dict(payload))
        return normalize_alerts(body)

    async def respond_to_alert(
        self,
        alert_id: str,
        *,
        action: str = "respond",
        timestamp: str | None = None,
        location: str | None = None,
        alert_type: str | None = None,
    ) -> dict[str, Any]:
        payload = {
            "alert_id": alert_id,
            "action": action,
            "timestamp": timestamp,
            "location": location,
            "alert_type": alert_type,
        }
        body, _ = await self._send("POST", "alerts/respond", json=payload)
        return body

    async def upload_alert_photo(
        self,
        alert_id: str,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
    ) -> dict[str, Any]:
        files = {"photo": (filename, content, content_type)}
        body, _ = await self._send(
            "POST", f"alerts/{quote(alert_id, safe='')}/photo", files=files
        )
        return body

    async def get_analytics(self) -> dict[str, Any]:
        body, response = await self._send("GET", "analytics")
        self.last_source = response.headers.get(DATA_SOURCE_HEADER)
        return body

    async def get_analytics_summary(self) -> dict[str, Any]:
        body, _ = await self._send("GET", "analytics/summary")
        return body

    async def health_check(self) -> dict[str, Any]:
        """Query the service banner served at the server root."""

        body, _ = await self._send("GET", self._client.base_url.copy_with(path="/"))
        return body


@dataclass(frozen=True, slots=True)
class Loaded(Generic[T]):
    """Result of :func:`load_with_fallback`."""

    value: T
    from_mock: bool = False
    error: Optional[FetchError] = None


async def load_with_fallback(
    fetch: Callable[[], Awaitable[T]], fallback: Callable[[], T] | T
) -> Loaded[T]:
    """Run ``fetch``; on :class:`FetchError` substitute ``fallback``.

    ``fallback`` may be a value or a zero-argument callable producing one,
    such as :func:`wildwatch.client.mocks.mock_alerts`.
    """

    try:
        return Loaded(await fetch())
    except FetchError as exc:
        logger.warning("Backend unavailable, using local data: %s", exc)
        value = fallback() if callable(fallback) else fallback
        if inspect.isawaitable(value):
            value = await value
        return Loaded(value, from_mock=True, error=exc)


def user_message(exc: BaseException, action: str = "load data") -> str:
    """Return a short sentence describing ``exc`` for display."""

    if isinstance(exc, NetworkError):
        message = f"Failed to {action}. The monitoring service is unreachable."
    elif isinstance(exc, ResponseError):
        message = f"Failed to {action}. The server rejected the request."
    else:
        message = f"Failed to {action}. Please try again."
    if expose_details():
        message = f"{message} ({exc})"
    return message


__all__ = [
    "DEFAULT_API_URL",
    "DataService",
    "Loaded",
    "load_with_fallback",
    "resolve_api_url",
    "user_message",
]
