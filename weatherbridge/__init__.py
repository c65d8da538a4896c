"""Phone-side bridge relaying local weather to a wrist-worn device."""
from __future__ import annotations

from .entities import Coordinates, OutboundMessage, PipelineOutcome, RequestContext, WeatherSample
from .errors import (
    BridgeError,
    ConfigurationError,
    LocationError,
    NetworkError,
    ParseError,
    ProviderError,
    QuotaExceeded,
    RelayError,
)
from .services.bridge import WeatherBridge

__all__ = [
    "BridgeError",
    "ConfigurationError",
    "Coordinates",
    "LocationError",
    "NetworkError",
    "OutboundMessage",
    "ParseError",
    "PipelineOutcome",
    "ProviderError",
    "QuotaExceeded",
    "RelayError",
    "RequestContext",
    "WeatherBridge",
    "WeatherSample",
]
