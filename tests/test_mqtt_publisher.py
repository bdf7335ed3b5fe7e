"""Tests for the MQTT publisher of decoded messages."""

from __future__ import annotations

import json
import types

import pytest

import ogn_aprs.telemetry.mqtt_publisher as mp
from ogn_aprs.aprs.parser import parse_line

FLARM_LINE = (
    "FLRDDE626>APRS,qAS,EGHL:/074548h5111.32N/00102.04W'086/007/A=000607 "
    "id0ADDE626 -019fpm +0.0rot 5.5dB 3e -4.3kHz"
)


class MockClient:
    def __init__(self, behavior=None):
        self.on_connect = None
        self.on_disconnect = None
        self._connect_calls = 0
        self._publish_calls = []
        self._behavior = behavior or {}
        self.loop_running = False

    def connect(self, host, port):
        self._connect_calls += 1
        if self._behavior.get("refuse"):
            raise ConnectionRefusedError("simulated connect failure")
        if callable(self.on_connect):
            self.on_connect(self, None, None, self._behavior.get("rc", 0))

    def loop_start(self):
        self.loop_running = True

    def loop_stop(self):
        self.loop_running = False

    def disconnect(self):
        return None

    def publish(self, topic, body):
        self._publish_calls.append((topic, body))


def _install(monkeypatch, mock: MockClient) -> None:
    monkeypatch.setattr(mp._time, "sleep", lambda _seconds: None)
    monkeypatch.setattr(mp, "mqtt", types.SimpleNamespace(Client=lambda *args: mock))


def test_publish_message_when_connected(monkeypatch) -> None:
    mock = MockClient()
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883, topic_prefix="ogn/")
    pub.connect()
    pub.publish_message(parse_line(FLARM_LINE))

    assert pub.connected
    assert pub.published == 1
    topic, body = mock._publish_calls[0]
    assert topic == "ogn/FLRDDE626"
    record = json.loads(body)
    assert record["address"] == "DDE626"
    assert record["type"] == "TRAFFIC_REPORT"


def test_unknown_messages_are_not_published(monkeypatch) -> None:
    mock = MockClient()
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883)
    pub.connect()
    pub.publish_message(parse_line("INVALID MESSAGE FORMAT"))

    assert mock._publish_calls == []


def test_comment_topic_falls_back_to_type(monkeypatch) -> None:
    _install(monkeypatch, MockClient())

    pub = mp.MqttPublisher(host="fake", port=1883)

    assert pub.topic_for(parse_line("# aprsc 2.0.14")) == "ogn/comment"


def test_buffer_while_broker_unreachable(monkeypatch) -> None:
    mock = MockClient(behavior={"refuse": True})
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883, max_buffer_size=3)
    pub.connect()
    for i in range(5):
        pub.publish("ogn/test", {"msg": i})

    assert not pub.connected
    assert mock._publish_calls == []
    assert pub.published == 0

    # broker comes back; the newest three payloads are flushed in order
    pub._on_connect(mock, None, None, 0)  # type: ignore[attr-defined]

    msgs = [json.loads(body)["msg"] for _, body in mock._publish_calls]
    assert msgs == [2, 3, 4]
    assert pub.published == 3


def test_disconnect_resumes_buffering(monkeypatch) -> None:
    mock = MockClient()
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883)
    pub.connect()
    pub._on_disconnect(mock, None, None, 0, None)  # type: ignore[attr-defined]
    pub.publish("ogn/test", {"msg": 1})

    assert mock._publish_calls == []
    assert not pub.connected


def test_publish_flushes_payloads_left_in_buffer(monkeypatch) -> None:
    mock = MockClient()
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883)
    pub.connect()
    # queued by a publish that saw the flag just before on_connect drained
    pub._buffer.append(("ogn/test", json.dumps({"msg": 1})))  # type: ignore[attr-defined]
    pub.publish("ogn/test", {"msg": 2})

    msgs = [json.loads(body)["msg"] for _, body in mock._publish_calls]
    assert msgs == [1, 2]
    assert pub.published == 2
    assert not pub._buffer  # type: ignore[attr-defined]


def test_lock_released_after_callbacks(monkeypatch) -> None:
    mock = MockClient()
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883)
    pub.connect()
    pub._on_disconnect(mock, None, None, 0, None)  # type: ignore[attr-defined]
    pub._on_connect(mock, None, None, 0)  # type: ignore[attr-defined]

    assert pub._lock.acquire(blocking=False)  # type: ignore[attr-defined]
    pub._lock.release()  # type: ignore[attr-defined]


def test_connect_refused_by_broker_rc(monkeypatch) -> None:
    mock = MockClient(behavior={"rc": 5})
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883)
    pub.connect()

    assert not pub.connected


def test_close_stops_loop(monkeypatch) -> None:
    mock = MockClient()
    _install(monkeypatch, mock)

    pub = mp.MqttPublisher(host="fake", port=1883)
    pub.connect()
    assert mock.loop_running
    pub.close()

    assert not mock.loop_running


def test_missing_paho_raises(monkeypatch) -> None:
    monkeypatch.setattr(mp, "mqtt", None)

    with pytest.raises(ImportError):
        mp.MqttPublisher(host="fake", port=1883)
