"""MQTT publisher for decoded OGN messages, using paho-mqtt.

The import of ``paho.mqtt.client`` is optional; constructing a publisher
without it raises ImportError, so the decoder itself carries no hard
dependency on a message bus.
"""

from __future__ import annotations

import json
import logging
import threading
import time as _time
from collections import deque
from typing import Any, Optional

from ..aprs.message import OgnMessage, OgnMessageType
from ..formatters import message_to_dict

try:
    import paho.mqtt.client as mqtt  # type: ignore[import]
except ImportError:  # pragma: no cover - optional dependency
    mqtt = None  # type: ignore[assignment]


LOG = logging.getLogger(__name__)

DEFAULT_TOPIC_PREFIX = "ogn"


class MqttPublisher:
    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 1883,
        topic_prefix: str = DEFAULT_TOPIC_PREFIX,
        max_buffer_size: int = 1000,
    ) -> None:
        if mqtt is None:
            raise ImportError("paho-mqtt is required for MqttPublisher")
        self._host = host
        self._port = port
        self._topic_prefix = topic_prefix.rstrip("/")
        self._client = _create_client()
        self._connected = False
        # paho callbacks run on its network thread; guards _connected and _buffer
        self._lock = threading.Lock()
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        # payloads held while the broker is unreachable; oldest dropped first
        self._buffer: deque[tuple[str, str]] = deque(maxlen=max_buffer_size)
        self.published = 0

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        LOG.debug("Connecting to MQTT broker %s:%s", self._host, self._port)
        self._client.loop_start()
        try:
            self._client.connect(self._host, self._port)
        except OSError as exc:
            LOG.warning("MQTT connect to %s:%s failed: %s; buffering messages", self._host, self._port, exc)
            return
        # on_connect fires from the network loop; give it a moment
        _time.sleep(0.1)

    def topic_for(self, message: OgnMessage) -> str:
        source = message.source_id or message.type.value
        return f"{self._topic_prefix}/{source}"

    def publish_message(self, message: OgnMessage) -> None:
        if message.type is OgnMessageType.UNKNOWN:
            return
        self.publish(self.topic_for(message), message_to_dict(message))

    def publish(self, topic: str, payload: dict) -> None:
        body = json.dumps(payload, default=str)
        with self._lock:
            if not self._connected:
                if len(self._buffer) == self._buffer.maxlen:
                    LOG.debug("MQTT buffer full (%d messages); dropping oldest", self._buffer.maxlen)
                self._buffer.append((topic, body))
                return
            # keep ordering if anything was queued while the flag flipped
            self._drain_buffer()
            self._client.publish(topic, body)
            self.published += 1

    def close(self) -> None:
        try:
            self._client.loop_stop()
            self._client.disconnect()
        except OSError:  # pragma: no cover - best-effort cleanup
            LOG.exception("Failed to disconnect MQTT client")

    def _on_connect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, *_: Any) -> None:
        if reason_code == 0:
            LOG.info("MQTT connected to %s:%s", self._host, self._port)
            with self._lock:
                self._connected = True
                self._drain_buffer()
        else:
            LOG.warning("MQTT connect returned rc=%s", reason_code)

    def _on_disconnect(self, client: Any, userdata: Any, *args: Any) -> None:
        # callback API v1 passes (rc), v2 passes (flags, reason_code, properties)
        LOG.info("MQTT disconnected from %s:%s", self._host, self._port)
        with self._lock:
            self._connected = False

    def _drain_buffer(self) -> None:
        if not self._buffer:
            return
        LOG.info("Flushing %d buffered MQTT messages", len(self._buffer))
        while self._buffer:
            topic, body = self._buffer.popleft()
            self._client.publish(topic, body)
            self.published += 1


def _create_client() -> Any:
    api_version: Optional[Any] = getattr(mqtt, "CallbackAPIVersion", None)
    if api_version is not None:
        return mqtt.Client(api_version.VERSION2)
    return mqtt.Client()


__all__ = ["MqttPublisher", "DEFAULT_TOPIC_PREFIX"]
