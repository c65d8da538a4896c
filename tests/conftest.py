from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import List

import pytest

from requests_mock import Mocker

from weatherbridge.entities import OutboundMessage
from weatherbridge.errors import RelayError


NOW = 1_700_000_000


class TimeController:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class RecordingChannel:
    """Device channel stub that keeps every message it is handed."""

    def __init__(self, fail: bool = False, raise_on_send: bool = False) -> None:
        self.messages: List[OutboundMessage] = []
        self.fail = fail
        self.raise_on_send = raise_on_send

    @property
    def calls(self) -> int:
        return len(self.messages)

    def send(self, message: OutboundMessage) -> "Future[None]":
        self.messages.append(message)
        if self.raise_on_send:
            raise ConnectionError("channel closed")
        future: "Future[None]" = Future()
        if self.fail:
            future.set_exception(RelayError("watch not connected"))
        else:
            future.set_result(None)
        return future


def forecast_payload(slots, city: str = "London") -> dict:
    return {
        "cod": "200",
        "cnt": len(slots),
        "list": [
            {
                "dt": dt,
                "main": {"temp": temp},
                "weather": [{"id": 800, "main": "Clear", "description": description}],
            }
            for dt, temp, description in slots
        ],
        "city": {"id": 2643743, "name": city},
    }


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def clock():
    return TimeController(NOW)


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)
