from __future__ import annotations

from typing import Dict, Type

from .base import WeatherProvider
from .openweather import OpenWeatherCurrentProvider, OpenWeatherForecastProvider, select_forecast_slot
from ..errors import ConfigurationError

PROVIDERS: Dict[str, Type[WeatherProvider]] = {
    OpenWeatherForecastProvider.name: OpenWeatherForecastProvider,
    OpenWeatherCurrentProvider.name: OpenWeatherCurrentProvider,
}


def build_provider(name: str, **kwargs) -> WeatherProvider:
    """Instantiate the provider registered under ``name``."""
    try:
        provider_cls = PROVIDERS[name]
    except KeyError:
        raise ConfigurationError(f"Unknown weather provider: {name}") from None
    return provider_cls(**kwargs)


__all__ = [
    "OpenWeatherCurrentProvider",
    "OpenWeatherForecastProvider",
    "PROVIDERS",
    "WeatherProvider",
    "build_provider",
    "select_forecast_slot",
]
