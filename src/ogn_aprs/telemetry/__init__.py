"""Telemetry sinks for decoded messages (MQTT)."""

from .mqtt_publisher import MqttPublisher

__all__ = ["MqttPublisher"]
