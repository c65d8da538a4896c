"""Device message channels."""
from __future__ import annotations

import json
import logging
import sys
import threading
from concurrent.futures import Future
from typing import Dict, List, Protocol, Set, TextIO

import paho.mqtt.client as mqtt

from .entities import OutboundMessage
from .errors import RelayError


logger = logging.getLogger(__name__)

MESSAGE_TOPIC = "weather-bridge/{device}/message"


class DeviceChannel(Protocol):
    """Accepts a flat key/value message; the future settles on delivery or rejection."""

    def send(self, message: OutboundMessage) -> "Future[None]":
        ...


def encode_message(message: OutboundMessage) -> bytes:
    return json.dumps({str(key): value for key, value in message.items()}).encode("utf-8")


class MqttDeviceChannel:
    """Publish messages for the device on its MQTT topic.

    A send settles when the broker acknowledges the publish (``on_publish``),
    or fails immediately when paho refuses to queue it. Sends still waiting
    for an acknowledgement fail when the connection drops, and at most
    ``max_pending`` are held; beyond that the oldest is failed.
    """

    def __init__(self, client: mqtt.Client, device_id: str, qos: int = 1, max_pending: int = 32) -> None:
        self.client = client
        self.topic = MESSAGE_TOPIC.format(device=device_id)
        self.qos = qos
        self.max_pending = max_pending
        self._pending: Dict[int, "Future[None]"] = {}
        self._acknowledged: Set[int] = set()
        self._lock = threading.RLock()
        self.client.on_publish = self._on_publish
        self.client.on_disconnect = self._on_disconnect

    def send(self, message: OutboundMessage) -> "Future[None]":
        future: "Future[None]" = Future()
        overflow: List["Future[None]"] = []
        with self._lock:
            info = self.client.publish(self.topic, encode_message(message), qos=self.qos)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                future.set_exception(RelayError(f"publish failed: {mqtt.error_string(info.rc)}"))
                return future
            if info.mid in self._acknowledged:
                self._acknowledged.discard(info.mid)
                future.set_result(None)
            else:
                self._pending[info.mid] = future
                overflow = self._drain(len(self._pending) - self.max_pending)
        for stale in overflow:
            stale.set_exception(RelayError("dropped: too many unacknowledged messages"))
        return future

    # paho callback (VERSION2 signature)
    def _on_publish(self, client, userdata, mid, reason_code=None, properties=None):  # type: ignore[override]
        with self._lock:
            future = self._pending.pop(mid, None)
            if future is None:
                # Acknowledged before send() registered the message id.
                self._acknowledged.add(mid)
                return
        if reason_code is not None and getattr(reason_code, "is_failure", False):
            future.set_exception(RelayError(f"publish rejected: {reason_code}"))
        else:
            future.set_result(None)

    def _on_disconnect(self, client, userdata, disconnect_flags=None, reason_code=None, properties=None):  # type: ignore[override]
        with self._lock:
            abandoned = self._drain(len(self._pending))
            self._acknowledged.clear()
        for future in abandoned:
            future.set_exception(RelayError(f"disconnected before acknowledgement: {reason_code}"))

    def _drain(self, count: int) -> List["Future[None]"]:
        drained: List["Future[None]"] = []
        for mid in list(self._pending)[: max(count, 0)]:
            drained.append(self._pending.pop(mid))
        return drained


class LoggingChannel:
    """Write each message as a JSON line; used when no device is attached."""

    def __init__(self, stream: TextIO = sys.stdout) -> None:
        self.stream = stream

    def send(self, message: OutboundMessage) -> "Future[None]":
        future: "Future[None]" = Future()
        self.stream.write(encode_message(message).decode("utf-8") + "\n")
        self.stream.flush()
        future.set_result(None)
        return future


__all__ = ["DeviceChannel", "LoggingChannel", "MESSAGE_TOPIC", "MqttDeviceChannel", "encode_message"]
