"""Environment driven settings for the bridge."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from .errors import ConfigurationError
from .units import ROUNDING_MODES


def env(name: str, default: Optional[str] = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ConfigurationError(f"Environment variable {name} is required")
    return value


def env_int(name: str, default: int) -> int:
    raw = env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer, got {raw!r}") from None


def env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be a number, got {raw!r}") from None


def env_flag(name: str, default: bool) -> bool:
    return os.environ.get(name, "1" if default else "0") == "1"


@dataclass
class MQTTConfig:
    host: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    keepalive: int = 60
    client_id: str = field(default_factory=lambda: f"weather-bridge-{uuid4().hex[:8]}")
    qos: int = 1

    @classmethod
    def from_env(cls) -> "MQTTConfig":
        return cls(
            host=env("MQTT_HOST", "localhost"),
            port=env_int("MQTT_PORT", 1883),
            username=os.environ.get("MQTT_USERNAME"),
            password=os.environ.get("MQTT_PASSWORD"),
            keepalive=env_int("MQTT_KEEPALIVE", 60),
            client_id=env("MQTT_CLIENT_ID", f"weather-bridge-{uuid4().hex[:8]}"),
            qos=env_int("MQTT_QOS", 1),
        )


@dataclass
class BridgeSettings:
    provider: str = "openweather-forecast"
    message_layout: Optional[str] = None
    forecast_url: Optional[str] = None
    current_url: Optional[str] = None
    forecast_count: int = 10
    http_timeout: float = 10.0
    validate_status: bool = True
    temperature_rounding: str = "half_even"
    location: str = "ip"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_url: Optional[str] = None
    location_timeout_ms: int = 15000
    location_max_age_ms: int = 60000
    max_workers: int = 4
    device_id: str = "watch"
    mqtt: MQTTConfig = field(default_factory=MQTTConfig)

    def __post_init__(self) -> None:
        if self.temperature_rounding not in ROUNDING_MODES:
            raise ConfigurationError(f"Unknown rounding policy: {self.temperature_rounding}")
        if self.location not in ("ip", "static"):
            raise ConfigurationError(f"Unknown location source: {self.location}")
        if self.http_timeout <= 0:
            raise ConfigurationError("HTTP timeout must be positive")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

    @classmethod
    def from_env(cls) -> "BridgeSettings":
        return cls(
            provider=env("BRIDGE_PROVIDER", "openweather-forecast"),
            message_layout=os.environ.get("BRIDGE_MESSAGE_LAYOUT") or None,
            forecast_url=os.environ.get("BRIDGE_FORECAST_URL") or None,
            current_url=os.environ.get("BRIDGE_CURRENT_URL") or None,
            forecast_count=env_int("BRIDGE_FORECAST_COUNT", 10),
            http_timeout=env_float("BRIDGE_HTTP_TIMEOUT", 10.0),
            validate_status=env_flag("BRIDGE_VALIDATE_STATUS", True),
            temperature_rounding=env("BRIDGE_TEMPERATURE_ROUNDING", "half_even"),
            location=env("BRIDGE_LOCATION", "ip"),
            latitude=env_float("BRIDGE_LATITUDE"),
            longitude=env_float("BRIDGE_LONGITUDE"),
            location_url=os.environ.get("BRIDGE_LOCATION_URL") or None,
            location_timeout_ms=env_int("BRIDGE_LOCATION_TIMEOUT_MS", 15000),
            location_max_age_ms=env_int("BRIDGE_LOCATION_MAX_AGE_MS", 60000),
            max_workers=env_int("BRIDGE_MAX_WORKERS", 4),
            device_id=env("BRIDGE_DEVICE_ID", "watch"),
            mqtt=MQTTConfig.from_env(),
        )


__all__ = ["BridgeSettings", "MQTTConfig", "env", "env_flag", "env_float", "env_int"]
