from __future__ import annotations

import pytest
import requests

from weatherbridge.cache import LocationFixCache
from weatherbridge.entities import Coordinates
from weatherbridge.errors import LocationError
from weatherbridge.location import IpGeolocationProvider, LocationOptions, StaticLocationProvider


GEO_URL = "https://geo.test/json/"


def make_provider(clock, **options) -> IpGeolocationProvider:
    return IpGeolocationProvider(GEO_URL, options=LocationOptions(**options), time_func=clock)


def test_static_provider_resolves_configured_position():
    coordinates = Coordinates(latitude=51.5, longitude=-0.12)

    assert StaticLocationProvider(coordinates).get_location().result() == coordinates


def test_static_provider_without_position_is_permission_denied():
    future = StaticLocationProvider(None).get_location()

    with pytest.raises(LocationError) as excinfo:
        future.result()

    assert excinfo.value.code == LocationError.PERMISSION_DENIED


def test_ip_provider_resolves_position(requests_mock, clock):
    requests_mock.get(GEO_URL, json={"status": "success", "lat": 51.5, "lon": -0.12, "city": "London"})

    coordinates = make_provider(clock).get_location().result()

    assert coordinates == Coordinates(latitude=51.5, longitude=-0.12)


def test_ip_provider_applies_timeout(requests_mock, clock):
    requests_mock.get(GEO_URL, json={"status": "success", "lat": 1, "lon": 2})

    make_provider(clock, timeout_ms=2500).get_location().result()

    assert requests_mock.last_request.timeout == 2.5


def test_ip_provider_reuses_recent_fix(requests_mock, clock):
    requests_mock.get(GEO_URL, json={"status": "success", "lat": 51.5, "lon": -0.12})
    provider = make_provider(clock)

    provider.get_location().result()
    clock.advance(59)
    provider.get_location().result()

    assert requests_mock.call_count == 1


def test_ip_provider_refreshes_stale_fix(requests_mock, clock):
    requests_mock.get(GEO_URL, json={"status": "success", "lat": 51.5, "lon": -0.12})
    provider = make_provider(clock, maximum_age_ms=60000)

    provider.get_location().result()
    clock.advance(61)
    provider.get_location().result()

    assert requests_mock.call_count == 2


def test_ip_provider_timeout(requests_mock, clock):
    requests_mock.get(GEO_URL, exc=requests.exceptions.ReadTimeout)

    with pytest.raises(LocationError) as excinfo:
        make_provider(clock).get_location().result()

    assert excinfo.value.code == LocationError.TIMEOUT


def test_ip_provider_reports_service_failure(requests_mock, clock):
    requests_mock.get(GEO_URL, json={"status": "fail", "message": "private range"})

    with pytest.raises(LocationError) as excinfo:
        make_provider(clock).get_location().result()

    assert excinfo.value.code == LocationError.POSITION_UNAVAILABLE
    assert excinfo.value.message == "private range"


def test_ip_provider_error_status(requests_mock, clock):
    requests_mock.get(GEO_URL, status_code=500, text="oops")

    with pytest.raises(LocationError) as excinfo:
        make_provider(clock).get_location().result()

    assert excinfo.value.code == LocationError.POSITION_UNAVAILABLE


def test_failed_lookup_is_not_cached(requests_mock, clock):
    requests_mock.get(
        GEO_URL,
        [
            {"exc": requests.exceptions.ConnectionError},
            {"json": {"status": "success", "lat": 10, "lon": 20}},
        ],
    )
    provider = make_provider(clock)

    with pytest.raises(LocationError):
        provider.get_location().result()
    assert provider.get_location().result() == Coordinates(latitude=10.0, longitude=20.0)


def test_fix_cache_expiry(clock):
    cache = LocationFixCache(time_func=clock)
    coordinates = Coordinates(latitude=1.0, longitude=2.0)

    assert cache.get(60) is None
    cache.set(coordinates)
    clock.advance(60)
    assert cache.get(60) == coordinates
    clock.advance(1)
    assert cache.get(60) is None

    cache.set(coordinates)
    cache.clear()
    assert cache.get(60) is None
