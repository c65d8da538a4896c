"""Location providers standing in for the host's geolocation capability."""
from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from .cache import LocationFixCache
from .entities import Coordinates
from .errors import LocationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationOptions:
    timeout_ms: int = 15000
    maximum_age_ms: int = 60000


class LocationProvider(Protocol):
    """Produces the device position.

    The returned future resolves once, either with :class:`Coordinates` or
    with a :class:`LocationError`.
    """

    def get_location(self) -> "Future[Coordinates]":
        ...


def _resolved(coordinates: Coordinates) -> "Future[Coordinates]":
    future: "Future[Coordinates]" = Future()
    future.set_result(coordinates)
    return future


def _failed(error: LocationError) -> "Future[Coordinates]":
    future: "Future[Coordinates]" = Future()
    future.set_exception(error)
    return future


class StaticLocationProvider:
    """Serve a configured position; ``None`` means location sharing is off."""

    def __init__(self, coordinates: Optional[Coordinates]) -> None:
        self.coordinates = coordinates

    def get_location(self) -> "Future[Coordinates]":
        if self.coordinates is None:
            return _failed(LocationError(LocationError.PERMISSION_DENIED, "location sharing is disabled"))
        return _resolved(self.coordinates)


class IpGeolocationProvider:
    """Resolve the position from the public address of the phone.

    Speaks the ip-api.com JSON shape (``status``, ``lat``, ``lon``,
    ``message``). A fix younger than ``maximum_age_ms`` is reused without a
    request.
    """

    base_url = "http://ip-api.com/json/"

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        options: Optional[LocationOptions] = None,
        cache: Optional[LocationFixCache] = None,
        time_func=time.monotonic,
    ) -> None:
        self.base_url = base_url or self.base_url
        self.session = session or requests.Session()
        self.options = options or LocationOptions()
        self.cache = cache or LocationFixCache(time_func=time_func)
        self._log = logging.getLogger(self.__class__.__name__)

    def get_location(self) -> "Future[Coordinates]":
        cached = self.cache.get(self.options.maximum_age_ms / 1000)
        if cached is not None:
            return _resolved(cached)
        try:
            coordinates = self._locate()
        except LocationError as exc:
            return _failed(exc)
        self.cache.set(coordinates)
        return _resolved(coordinates)

    def _locate(self) -> Coordinates:
        try:
            response = self.session.get(self.base_url, timeout=self.options.timeout_ms / 1000)
        except requests.Timeout as exc:
            self._log.warning("Geolocation lookup timed out")
            raise LocationError(LocationError.TIMEOUT, "timed out waiting for a position") from exc
        except requests.RequestException as exc:
            self._log.warning("Geolocation lookup failed: %s", exc)
            raise LocationError(LocationError.POSITION_UNAVAILABLE, "geolocation service unreachable") from exc

        if response.status_code >= 400:
            raise LocationError(LocationError.POSITION_UNAVAILABLE, f"geolocation service returned {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise LocationError(LocationError.POSITION_UNAVAILABLE, "invalid geolocation response") from exc
        if not isinstance(data, dict) or data.get("status", "success") != "success":
            message = data.get("message") if isinstance(data, dict) else None
            raise LocationError(LocationError.POSITION_UNAVAILABLE, message or "position unavailable")
        try:
            return Coordinates(latitude=float(data["lat"]), longitude=float(data["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise LocationError(LocationError.POSITION_UNAVAILABLE, "geolocation response lacks coordinates") from exc


__all__ = ["IpGeolocationProvider", "LocationOptions", "LocationProvider", "StaticLocationProvider"]
