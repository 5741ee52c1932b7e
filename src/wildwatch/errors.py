"""Exception taxonomy shared by the backend and the client library."""

from __future__ import annotations

import os


class WildwatchError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(WildwatchError):
    """Raised when the persistent store credentials are absent."""


class StoreError(WildwatchError):
    """Raised when a call to the persistent store fails."""

    def __init__(self, message: str, *, operation: str = "", entity: str = "") -> None:
        super().__init__(message)
        self.operation = operation
        self.entity = entity


class RecordNotFoundError(StoreError):
    """Raised when a single-row update matched nothing."""


class ValidationError(WildwatchError):
    """Raised when caller-supplied data violates a required-field or type rule."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UploadRejectedError(ValidationError):
    """Raised for uploads that are not images or exceed the size limit."""


class FetchError(WildwatchError):
    """Raised by the client when a request does not produce usable data."""


class NetworkError(FetchError):
    """The request never reached the server or the server was unreachable."""


class ResponseError(FetchError):
    """The server answered with a non-2xx status or an undecodable body."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def expose_details() -> bool:
    """Return ``True`` when error payloads may carry internal detail."""

    return os.environ.get("WILDWATCH_ENV", "production").lower() == "development"


__all__ = [
    "ConfigurationError",
    "FetchError",
    "NetworkError",
    "RecordNotFoundError",
    "ResponseError",
    "StoreError",
    "UploadRejectedError",
    "ValidationError",
    "WildwatchError",
    "expose_details",
]
