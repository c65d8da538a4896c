"""OpenWeather providers: keyless forecast list and keyed current conditions."""
from __future__ import annotations

from typing import Optional, Sequence

from .base import WeatherProvider, dig
from ..entities import CURRENT_LAYOUT, FORECAST_LAYOUT, Coordinates, WeatherSample
from ..errors import ProviderError


def select_forecast_slot(timestamps: Sequence[int], now: int) -> int:
    """Return the index of the first slot at or after ``now``.

    Slots are assumed to be in ascending order. When every slot is already in
    the past the first slot is used anyway.
    """
    for index, timestamp in enumerate(timestamps):
        if timestamp >= now:
            return index
    return 0


class OpenWeatherForecastProvider(WeatherProvider):
    """Pick the next upcoming slot from the 3-hourly forecast list."""

    name = "openweather-forecast"
    base_url = "http://api.openweathermap.org/data/2.5/forecast"
    default_layout = FORECAST_LAYOUT

    def __init__(self, base_url: Optional[str] = None, *, count: int = 10, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url
        self.count = count

    def fetch_weather(self, coordinates: Coordinates, api_key: Optional[str] = None) -> WeatherSample:
        params = {
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "cnt": self.count,
            "mode": "json",
        }
        if api_key:
            params["appid"] = api_key
        data = self._get_json(self.base_url, params)

        slots = data.get("list")
        if not isinstance(slots, list) or not slots:
            raise ProviderError("missing forecast list")
        timestamps = [_epoch(dig(slot, "dt"), "dt") for slot in slots]

        now = self._now()
        offset = select_forecast_slot(timestamps, now)
        for index, timestamp in enumerate(timestamps):
            self._log.debug("%s list: %s", index, timestamp)
        slot = slots[offset]
        slot_time = timestamps[offset]

        sample = WeatherSample(
            temperature_c=self._celsius(dig(slot, "main", "temp")),
            location_name=str(dig(data, "city", "name")),
            description=str(dig(slot, "weather", 0, "description")),
            forecast_offset_seconds=slot_time - now,
            forecast_epoch=slot_time,
        )
        self._log.info(
            "It is %s degrees in %s => %s seconds. %s",
            sample.temperature_c,
            sample.location_name,
            sample.forecast_offset_seconds,
            sample.description,
        )
        return sample


class OpenWeatherCurrentProvider(WeatherProvider):
    """Current conditions at the nearest station; needs a device-supplied key."""

    name = "openweather-current"
    base_url = "http://api.openweathermap.org/data/2.5/weather"
    requires_api_key = True
    default_layout = CURRENT_LAYOUT

    def __init__(self, base_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url

    def fetch_weather(self, coordinates: Coordinates, api_key: Optional[str] = None) -> WeatherSample:
        if not api_key:
            raise ProviderError("an API key is required for current conditions")
        params = {"lat": coordinates.latitude, "lon": coordinates.longitude, "appid": api_key}
        data = self._get_json(self.base_url, params)

        observed = data.get("dt")
        offset = epoch = None
        if observed is not None:
            epoch = _epoch(observed, "dt")
            offset = epoch - self._now()
        sample = WeatherSample(
            temperature_c=self._celsius(dig(data, "main", "temp")),
            location_name=str(dig(data, "name")),
            description=str(dig(data, "weather", 0, "description")),
            forecast_offset_seconds=offset,
            forecast_epoch=epoch,
            wind_speed_ms=_whole(dig(data, "wind", "speed"), "wind.speed"),
            wind_bearing_deg=_whole(dig(data, "wind", "deg"), "wind.deg"),
        )
        self._log.info(
            "It is %s degrees in %s, wind %s m/s from %s. %s",
            sample.temperature_c,
            sample.location_name,
            sample.wind_speed_ms,
            sample.wind_bearing_deg,
            sample.description,
        )
        return sample


def _epoch(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ProviderError(f"{field} is not a timestamp: {value!r}")
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        raise ProviderError(f"{field} is not a timestamp: {value!r}") from None


def _whole(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ProviderError(f"{field} is not numeric: {value!r}")
    try:
        return int(round(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        raise ProviderError(f"{field} is not numeric: {value!r}") from None


__all__ = ["OpenWeatherCurrentProvider", "OpenWeatherForecastProvider", "select_forecast_slot"]
