"""Command line entry points: a one-shot fetch and the long-running MQTT host."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .app import build_weather_provider, resolve_layout
from .channel import encode_message
from .entities import Coordinates, WeatherSample
from .errors import BridgeError
from .relay import build_message
from .settings import BridgeSettings


def _stub_sample() -> WeatherSample:
    return WeatherSample(
        temperature_c=11,
        location_name="Test City",
        description="clear sky",
        forecast_offset_seconds=0,
        forecast_epoch=0,
        wind_speed_ms=3,
        wind_bearing_deg=180,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weather-bridge", description="Phone-side weather relay for a watch")
    subcommands = parser.add_subparsers(dest="command", required=True)

    fetch = subcommands.add_parser("fetch", help="Fetch weather once and print the device message")
    fetch.add_argument("--lat", type=float, help="Latitude")
    fetch.add_argument("--lon", type=float, help="Longitude")
    fetch.add_argument("--api-key", dest="api_key", help="Provider key, as the device would supply it")
    fetch.add_argument("--provider", help="Override BRIDGE_PROVIDER")
    fetch.add_argument("--city", type=str, help="City name (only city=test stub is supported)")

    subcommands.add_parser("run", help="Connect to MQTT and serve device triggers")
    return parser


def fetch_command(args: argparse.Namespace, settings: BridgeSettings) -> int:
    if args.provider:
        settings.provider = args.provider
    provider = build_weather_provider(settings)
    layout = resolve_layout(settings, provider)

    if args.city:
        if args.city != "test":
            print("error: only city=test stub is supported", file=sys.stderr)
            return 1
        sample = _stub_sample()
    else:
        if args.lat is None or args.lon is None:
            print("error: --lat and --lon are required unless using city=test", file=sys.stderr)
            return 1
        coordinates = Coordinates(latitude=args.lat, longitude=args.lon)
        sample = provider.fetch_weather(coordinates, api_key=args.api_key)

    print(encode_message(build_message(sample, layout)).decode("utf-8"))
    return 0


def run_command(settings: BridgeSettings) -> int:
    from .host import MqttBridgeHost

    MqttBridgeHost(settings).serve_forever()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        settings = BridgeSettings.from_env()
        if args.command == "fetch":
            return fetch_command(args, settings)
        return run_command(settings)
    except BridgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
