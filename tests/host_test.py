from __future__ import annotations

import signal
from types import SimpleNamespace

import paho.mqtt.client as mqtt

from weatherbridge.channel import MqttDeviceChannel
from weatherbridge.host import MqttBridgeHost
from weatherbridge.schemas import decode_trigger_payload
from weatherbridge.settings import BridgeSettings, MQTTConfig


class FakeClient:
    def __init__(self) -> None:
        self.subscriptions = []
        self.credentials = None
        self.on_connect = None
        self.on_message = None
        self.on_publish = None

    def username_pw_set(self, username, password=None):
        self.credentials = (username, password)

    def subscribe(self, topic, qos=0):
        self.subscriptions.append((topic, qos))

    def publish(self, topic, payload, qos=0):
        return SimpleNamespace(rc=mqtt.MQTT_ERR_SUCCESS, mid=1)


class FakeBridge:
    def __init__(self, settings, channel) -> None:
        self.channel = channel
        self.triggers = []
        self.stopped = False

    def on_ready(self):
        self.triggers.append(("ready", None))

    def on_refresh_requested(self, payload=None):
        self.triggers.append(("refresh", decode_trigger_payload(payload).api_key))

    def shutdown(self, wait=True):
        self.stopped = True


def make_host(**mqtt_overrides):
    settings = BridgeSettings(device_id="pebble", mqtt=MQTTConfig(**mqtt_overrides))
    client = FakeClient()
    host = MqttBridgeHost(settings, client=client, bridge_factory=FakeBridge)
    return host, client


def message(topic, payload=b""):
    return SimpleNamespace(topic=topic, payload=payload)


def test_host_wires_channel_and_callbacks():
    host, client = make_host(username="bridge", password="secret")

    assert isinstance(host.bridge.channel, MqttDeviceChannel)
    assert host.bridge.channel.topic == "weather-bridge/pebble/message"
    assert client.credentials == ("bridge", "secret")
    assert client.on_connect == host._on_connect
    assert client.on_message == host._on_message


def test_connect_subscribes_and_fires_ready():
    host, client = make_host(qos=1)

    host._on_connect(client, None, {}, 0, None)

    assert sorted(client.subscriptions) == [
        ("weather-bridge/pebble/ready", 1),
        ("weather-bridge/pebble/refresh", 1),
    ]
    assert host.bridge.triggers == [("ready", None)]


def test_failed_connect_does_not_subscribe():
    host, client = make_host()

    host._on_connect(client, None, {}, 5, None)

    assert client.subscriptions == []
    assert host.bridge.triggers == []


def test_refresh_topic_carries_key_to_bridge():
    host, client = make_host()

    host._on_message(client, None, message("weather-bridge/pebble/refresh", b'{"apiKey": "k-1"}'))
    host._on_message(client, None, message("weather-bridge/pebble/ready"))

    assert host.bridge.triggers == [("refresh", "k-1"), ("ready", None)]


def test_invalid_trigger_payload_is_dropped(caplog):
    host, client = make_host()

    host._on_message(client, None, message("weather-bridge/pebble/refresh", b"{broken"))

    assert host.bridge.triggers == []
    assert "Dropping invalid trigger" in caplog.text


def test_unexpected_topic_is_ignored():
    host, client = make_host()

    host._on_message(client, None, message("weather-bridge/other/refresh", b"{}"))

    assert host.bridge.triggers == []


def test_stop_disconnects_from_broker():
    host, client = make_host()
    client.disconnect = lambda: setattr(client, "disconnected", True)

    host.stop()

    assert client.disconnected is True
    assert host.bridge.stopped is False


def test_serve_forever_restores_signals_and_shuts_down_bridge():
    host, client = make_host(host="broker.test", port=1884, keepalive=30)
    calls = []
    client.connect = lambda host_name, port, keepalive: calls.append(("connect", host_name, port, keepalive))

    def loop_forever():
        calls.append(("loop", signal.getsignal(signal.SIGTERM) == host._on_signal))

    client.loop_forever = loop_forever
    before = signal.getsignal(signal.SIGTERM)

    host.serve_forever()

    assert calls == [("connect", "broker.test", 1884, 30), ("loop", True)]
    assert signal.getsignal(signal.SIGTERM) == before
    assert host.bridge.stopped is True


def test_signal_disconnects_client():
    host, client = make_host()
    client.disconnect = lambda: setattr(client, "disconnected", True)

    host._on_signal(signal.SIGTERM, None)

    assert client.disconnected is True
