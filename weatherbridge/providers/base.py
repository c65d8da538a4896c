from __future__ import annotations

import json
import logging
import time
from decimal import ROUND_HALF_EVEN
from typing import Any, Optional

from ..entities import FORECAST_LAYOUT, Coordinates, MessageLayout, WeatherSample
from ..errors import ParseError, ProviderError
from ..http import HttpClient
from ..units import kelvin_to_celsius


class WeatherProvider:
    """Base class for providers that turn coordinates into a :class:`WeatherSample`."""

    name = "base"
    requires_api_key = False
    default_layout: MessageLayout = FORECAST_LAYOUT

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        *,
        rounding: str = ROUND_HALF_EVEN,
        time_func=time.time,
    ) -> None:
        self.http = http or HttpClient()
        self.rounding = rounding
        self._time_func = time_func
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch_weather(self, coordinates: Coordinates, api_key: Optional[str] = None) -> WeatherSample:
        raise NotImplementedError

    # helpers ------------------------------------------------------------
    def _now(self) -> int:
        return int(self._time_func())

    def _get_json(self, url: str, params: dict) -> dict:
        body = self.http.fetch(url, params=params)
        try:
            data = json.loads(body)
        except ValueError as exc:
            self._log.error("Failed to decode JSON", exc_info=exc)
            raise ParseError("invalid json") from exc
        if not isinstance(data, dict):
            raise ParseError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def _celsius(self, kelvin: Any) -> int:
        if isinstance(kelvin, bool) or not isinstance(kelvin, (int, float, str)):
            raise ProviderError(f"temperature is not numeric: {kelvin!r}")
        try:
            return kelvin_to_celsius(kelvin, self.rounding)
        except (ArithmeticError, ValueError) as exc:
            raise ProviderError(f"temperature is not numeric: {kelvin!r}") from exc


def dig(payload: Any, *path: Any) -> Any:
    """Walk ``path`` through nested dicts/lists, raising :class:`ProviderError` on a gap."""
    value = payload
    for step in path:
        try:
            value = value[step]
        except (KeyError, IndexError, TypeError):
            raise ProviderError("missing field " + ".".join(str(part) for part in path)) from None
    if value is None:
        raise ProviderError("missing field " + ".".join(str(part) for part in path))
    return value


__all__ = ["WeatherProvider", "dig"]
