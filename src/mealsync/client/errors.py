"""Errors raised by remote list services."""

from __future__ import annotations

from typing import Optional


class RemoteError(Exception):
    """Base class for every failure reported by a remote list service."""


class UnauthorizedError(RemoteError):
    """The server rejected the credentials; local knowledge should be treated as stale."""

    def __init__(self, message: str = "Unauthorized. Please log in again.") -> None:
        super().__init__(message)


class RequestFailedError(RemoteError):
    """Transport failure, timeout or unexpected HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidResponseError(RemoteError):
    """The server answered with something other than the expected payload."""


class DecodingError(RemoteError):
    """The response body could not be decoded into the expected model."""


__all__ = [
    "RemoteError",
    "UnauthorizedError",
    "RequestFailedError",
    "InvalidResponseError",
    "DecodingError",
]
