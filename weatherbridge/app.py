"""Wire settings into a ready-to-run bridge."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import requests

from .channel import DeviceChannel
from .entities import LAYOUTS, Coordinates, MessageLayout
from .errors import ConfigurationError
from .http import HttpClient, RequestConfig
from .location import IpGeolocationProvider, LocationOptions, LocationProvider, StaticLocationProvider
from .providers import OpenWeatherCurrentProvider, OpenWeatherForecastProvider, WeatherProvider, build_provider
from .relay import MessageRelay
from .services.bridge import WeatherBridge
from .settings import BridgeSettings
from .units import rounding_mode


def build_weather_provider(settings: BridgeSettings, session: Optional[requests.Session] = None) -> WeatherProvider:
    http = HttpClient(
        session=session,
        config=RequestConfig(timeout=settings.http_timeout, validate_status=settings.validate_status),
    )
    kwargs = {"http": http, "rounding": rounding_mode(settings.temperature_rounding)}
    if settings.provider == OpenWeatherForecastProvider.name:
        kwargs.update(base_url=settings.forecast_url, count=settings.forecast_count)
    elif settings.provider == OpenWeatherCurrentProvider.name:
        kwargs.update(base_url=settings.current_url)
    return build_provider(settings.provider, **kwargs)


def build_location_provider(settings: BridgeSettings, session: Optional[requests.Session] = None) -> LocationProvider:
    if settings.location == "static":
        if settings.latitude is None or settings.longitude is None:
            return StaticLocationProvider(None)
        return StaticLocationProvider(Coordinates(latitude=settings.latitude, longitude=settings.longitude))
    return IpGeolocationProvider(
        settings.location_url,
        session=session,
        options=LocationOptions(
            timeout_ms=settings.location_timeout_ms,
            maximum_age_ms=settings.location_max_age_ms,
        ),
    )


def resolve_layout(settings: BridgeSettings, provider: WeatherProvider) -> MessageLayout:
    if settings.message_layout is None:
        return provider.default_layout
    try:
        return LAYOUTS[settings.message_layout]
    except KeyError:
        raise ConfigurationError(f"Unknown message layout: {settings.message_layout}") from None


def build_bridge(settings: BridgeSettings, channel: DeviceChannel) -> WeatherBridge:
    provider = build_weather_provider(settings)
    return WeatherBridge(
        location_provider=build_location_provider(settings),
        weather_provider=provider,
        relay=MessageRelay(channel),
        layout=resolve_layout(settings, provider),
        executor=ThreadPoolExecutor(max_workers=settings.max_workers, thread_name_prefix="weather-bridge"),
    )


__all__ = ["build_bridge", "build_location_provider", "build_weather_provider", "resolve_layout"]
