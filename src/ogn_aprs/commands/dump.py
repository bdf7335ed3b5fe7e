"""Runtime command implementation for the live OGN feed dumper."""

from __future__ import annotations

import logging
import time
from argparse import Namespace
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from ogn_aprs import __version__ as _SOFTWARE_VERSION
from ogn_aprs import config as config_module
from ogn_aprs.aprs.aprsis_client import (
    APRSISClient,
    APRSISClientError,
    APRSISConfig,
    random_callsign,
)
from ogn_aprs.aprs.message import OgnMessageType
from ogn_aprs.aprs.parser import parse_line
from ogn_aprs.formatters import get_formatter
from ogn_aprs.telemetry.mqtt_publisher import MqttPublisher

_SOFTWARE_NAME = "ogn-aprs"
STATS_INTERVAL = 60.0

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def run_dump(args: Namespace) -> int:
    """Stream the OGN feed around a position and print formatted messages."""
    try:
        dump_config = resolve_dump_config(args)
    except FileNotFoundError as exc:
        logger.error("Config not found at %s", exc.filename)
        return 1
    except ValueError as exc:
        logger.error("Config invalid: %s", exc)
        return 1

    if dump_config.latitude is None or dump_config.longitude is None:
        logger.error("--lat and --lon are required (or set [filter] latitude/longitude in the config)")
        logger.error("Example: ogn-aprs dump --lat 48.3537 --lon 11.7860")
        return 2
    logger.debug("Configuration:\n%s", config_module.config_summary(dump_config))

    formatter = get_formatter(dump_config.output)

    publisher: Optional[MqttPublisher] = None
    if dump_config.mqtt_host:
        try:
            publisher = MqttPublisher(
                host=dump_config.mqtt_host,
                port=dump_config.mqtt_port,
                topic_prefix=dump_config.mqtt_topic,
            )
        except ImportError as exc:
            logger.error("MQTT output requested but unavailable: %s", exc)
            return 1
        publisher.connect()

    aprs_config = APRSISConfig(
        callsign=dump_config.callsign or random_callsign(),
        latitude=dump_config.latitude,
        longitude=dump_config.longitude,
        radius_km=dump_config.radius_km,
        host=dump_config.server,
        port=dump_config.port,
        software_name=_SOFTWARE_NAME,
        software_version=_SOFTWARE_VERSION,
    )
    logger.info(
        "ogn-aprs v%s: connecting to %s:%s (filter %.4f,%.4f r=%skm)",
        _SOFTWARE_VERSION,
        aprs_config.host,
        aprs_config.port,
        aprs_config.latitude,
        aprs_config.longitude,
        aprs_config.radius_km,
    )

    client = APRSISClient(aprs_config)
    try:
        client.connect()
    except APRSISClientError as exc:
        logger.error("%s", exc)
        if publisher is not None:
            publisher.close()
        return 1

    counts: Counter[OgnMessageType] = Counter()
    max_lines = getattr(args, "max_lines", None)
    next_stats_report = time.monotonic() + STATS_INTERVAL
    exit_code = 0

    try:
        for line in client.lines():
            message = parse_line(line)
            counts[message.type] += 1

            output = formatter.format(message)
            if output:
                print(output, flush=True)
            if publisher is not None:
                publisher.publish_message(message)

            if max_lines and sum(counts.values()) >= max_lines:
                break
            if time.monotonic() >= next_stats_report:
                timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
                logger.info("[stats %s] %s", timestamp, _format_counts(counts))
                next_stats_report = time.monotonic() + STATS_INTERVAL
    except APRSISClientError as exc:
        logger.error("APRS-IS connection lost: %s", exc)
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Stopping dumper...")
    finally:
        client.close()
        if publisher is not None:
            publisher.close()

    logger.info("Lines processed: %s (%s)", sum(counts.values()), _format_counts(counts))
    return exit_code


def resolve_dump_config(args: Namespace) -> config_module.DumpConfig:
    """Merge the config file (when present), environment and command-line overrides."""
    explicit = getattr(args, "config", None)
    config_path = config_module.resolve_config_path(explicit)
    if explicit or config_path.exists():
        dump_config = config_module.load_config(config_path)
    else:
        dump_config = config_module.env_config()

    overrides = {
        "server": getattr(args, "server", None),
        "port": getattr(args, "port", None),
        "latitude": getattr(args, "lat", None),
        "longitude": getattr(args, "lon", None),
        "radius_km": getattr(args, "radius", None),
        "callsign": getattr(args, "callsign", None),
        "output": getattr(args, "format", None),
        "mqtt_host": getattr(args, "mqtt_host", None),
        "mqtt_port": getattr(args, "mqtt_port", None),
        "mqtt_topic": getattr(args, "mqtt_topic", None),
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(dump_config, name, value)
    return dump_config


def _format_counts(counts: Counter[OgnMessageType]) -> str:
    return " ".join(f"{kind.value}={counts[kind]}" for kind in OgnMessageType)
