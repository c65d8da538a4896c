from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationFix:
    """A position reading together with the monotonic time it was taken."""

    coordinates: Coordinates
    acquired_at: float


@dataclass(frozen=True)
class WeatherSample:
    """Scalar fields extracted from a single provider response.

    Temperature is whole degrees Celsius, converted from Kelvin. The forecast
    fields are only populated by forecast-list providers and the wind fields
    only by current-conditions providers.
    """

    temperature_c: int
    location_name: str
    description: str
    forecast_offset_seconds: Optional[int] = None
    forecast_epoch: Optional[int] = None
    wind_speed_ms: Optional[int] = None
    wind_bearing_deg: Optional[int] = None


@dataclass(frozen=True)
class RequestContext:
    """Per-run inputs captured by value when a trigger fires."""

    trigger: str
    api_key: Optional[str] = None


class PipelineOutcome(str, enum.Enum):
    RELAYED = "relayed"
    DEGRADED = "degraded"
    ABORTED = "aborted"


Scalar = Union[int, str]
OutboundMessage = Dict[Union[int, str], Scalar]


@dataclass(frozen=True)
class MessageLayout:
    """Static key contract between the bridge and the device renderer.

    ``fields[i]`` names the :class:`WeatherSample` attribute sent under key ``i``.
    """

    name: str
    fields: Tuple[str, ...]


FORECAST_LAYOUT = MessageLayout(
    name="forecast",
    fields=("temperature_c", "location_name", "description", "forecast_offset_seconds"),
)
FORECAST_EPOCH_LAYOUT = MessageLayout(
    name="forecast-epoch",
    fields=("temperature_c", "location_name", "description", "forecast_epoch"),
)
CURRENT_LAYOUT = MessageLayout(
    name="current",
    fields=("temperature_c", "location_name", "description", "wind_speed_ms", "wind_bearing_deg"),
)

LAYOUTS: Dict[str, MessageLayout] = {
    layout.name: layout for layout in (FORECAST_LAYOUT, FORECAST_EPOCH_LAYOUT, CURRENT_LAYOUT)
}

LOCATION_UNAVAILABLE_MESSAGE: OutboundMessage = {"city": "Loc Unavailable", "temperature": "N/A"}


__all__ = [
    "Coordinates",
    "CURRENT_LAYOUT",
    "FORECAST_EPOCH_LAYOUT",
    "FORECAST_LAYOUT",
    "LAYOUTS",
    "LOCATION_UNAVAILABLE_MESSAGE",
    "LocationFix",
    "MessageLayout",
    "OutboundMessage",
    "PipelineOutcome",
    "RequestContext",
    "WeatherSample",
]
