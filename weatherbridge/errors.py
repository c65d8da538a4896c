"""Error taxonomy for the weather bridge.

Every error is scoped to a single pipeline run; only
:class:`ConfigurationError` is expected to stop the process, and only at
startup.
"""
from __future__ import annotations

from typing import Optional


class BridgeError(RuntimeError):
    """Base bridge error."""


class ConfigurationError(BridgeError):
    """Raised when the environment carries an unusable setting."""


class LocationError(BridgeError):
    """Raised when the host cannot produce a position fix."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"location error ({code}): {message}")
        self.code = code
        self.message = message


class NetworkError(BridgeError):
    """Transport failure or non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuotaExceeded(NetworkError):
    """Raised when a provider reports a quota/usage limit issue."""


class ParseError(BridgeError):
    """The response body is not the JSON document we expect."""


class ProviderError(BridgeError):
    """The response parsed but expected fields are absent."""


class RelayError(BridgeError):
    """The device channel rejected an outbound message."""


__all__ = [
    "BridgeError",
    "ConfigurationError",
    "LocationError",
    "NetworkError",
    "ParseError",
    "ProviderError",
    "QuotaExceeded",
    "RelayError",
]
