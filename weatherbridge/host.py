"""MQTT host: delivers device triggers to the bridge and carries its messages back."""
from __future__ import annotations

import logging
import signal
from typing import Callable, Dict, Optional

import paho.mqtt.client as mqtt

from .app import build_bridge
from .channel import DeviceChannel, MqttDeviceChannel
from .dispatcher import EventDispatcher
from .services.bridge import WeatherBridge
from .settings import BridgeSettings

logger = logging.getLogger(__name__)

READY_TOPIC = "weather-bridge/{device}/ready"
REFRESH_TOPIC = "weather-bridge/{device}/refresh"

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)

BridgeFactory = Callable[[BridgeSettings, DeviceChannel], WeatherBridge]


class MqttBridgeHost:
    """Subscribes to the device trigger topics and dispatches them to the bridge."""

    def __init__(
        self,
        settings: Optional[BridgeSettings] = None,
        *,
        client: Optional[mqtt.Client] = None,
        bridge_factory: BridgeFactory = build_bridge,
    ) -> None:
        self.settings = settings or BridgeSettings.from_env()
        self.config = self.settings.mqtt
        self.client = client or mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=self.config.client_id)
        if self.config.username:
            self.client.username_pw_set(self.config.username, self.config.password)
        self.channel = MqttDeviceChannel(self.client, self.settings.device_id, qos=self.config.qos)
        self.bridge = bridge_factory(self.settings, self.channel)
        self.dispatcher = EventDispatcher().bind(self.bridge)
        device = self.settings.device_id
        self.topics: Dict[str, str] = {
            READY_TOPIC.format(device=device): EventDispatcher.READY,
            REFRESH_TOPIC.format(device=device): EventDispatcher.APP_MESSAGE,
        }
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

    # -- MQTT callbacks -------------------------------------------------
    def _on_connect(self, client, userdata, flags, reason_code, properties=None):  # type: ignore[override]
        if reason_code != 0:
            logger.error("Failed to connect to MQTT broker: rc=%s", reason_code)
            return
        for topic in self.topics:
            logger.info("Connected to MQTT broker, subscribing to %s", topic)
            client.subscribe(topic, qos=self.config.qos)
        # The bridge is up: push a first reading without waiting for the device.
        self.dispatcher.dispatch(EventDispatcher.READY)

    def _on_message(self, client, userdata, msg):  # type: ignore[override]
        event = self.topics.get(msg.topic)
        if event is None:
            logger.warning("Ignoring message on unexpected topic %s", msg.topic)
            return
        try:
            self.dispatcher.dispatch(event, msg.payload)
        except ValueError as exc:
            logger.warning("Dropping invalid trigger from topic %s: %s", msg.topic, exc)
        except Exception:  # pragma: no cover - logged for visibility
            logger.exception("Failed to dispatch trigger from topic %s", msg.topic)

    # -- Public API -----------------------------------------------------
    def serve_forever(self) -> None:
        """Serve device triggers until SIGINT/SIGTERM or :meth:`stop`.

        Signal handlers are only in place while serving; in-flight runs are
        left to finish on the bridge executor.
        """
        previous = {signum: signal.signal(signum, self._on_signal) for signum in STOP_SIGNALS}
        try:
            self.client.connect(self.config.host, self.config.port, self.config.keepalive)
            logger.info(
                "Serving device %s through %s:%s", self.settings.device_id, self.config.host, self.config.port
            )
            self.client.loop_forever()
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)
            self.bridge.shutdown(wait=False)
            logger.info("Bridge host stopped")

    def stop(self) -> None:
        """Disconnect from the broker, which ends :meth:`serve_forever`."""
        self.client.disconnect()

    def _on_signal(self, signum, frame):
        logger.info("Received signal %s, disconnecting", signum)
        self.stop()


__all__ = ["MqttBridgeHost", "READY_TOPIC", "REFRESH_TOPIC"]
