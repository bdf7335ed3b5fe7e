"""Output formatters that re-render decoded messages for downstream tools."""

from __future__ import annotations

import json
import math
from dataclasses import fields
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Protocol

from .aprs.message import OgnMessage, OgnMessageType
from .timeutils import utc_now

FORMATTER_NAMES = ("ogn", "sbs1", "json")

_METERS_TO_FEET = 3.28084
_MPS_TO_FPM = 196.85


class OutputFormatter(Protocol):
    """Render a message; an empty string means "skip this message"."""

    def format(self, message: OgnMessage) -> str:  # pragma: no cover - interface
        ...


class OgnFormatter:
    """Pass the raw APRS-IS sentence through unchanged."""

    def format(self, message: OgnMessage) -> str:
        return message.sentence


class SBS1Formatter:
    """SBS-1 BaseStation format as produced by dump1090.

    Only traffic reports with a position are emitted, as a single
    ``MSG,8`` (all data) line. Field order: type, transmission type,
    session, aircraft, hex ident, flight, date/time generated, date/time
    logged, callsign, altitude (ft), ground speed (kt), track, latitude,
    longitude, vertical rate (fpm), squawk, alert, emergency, SPI, on ground.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or utc_now

    def format(self, message: OgnMessage) -> str:
        if message.type is not OgnMessageType.TRAFFIC_REPORT:
            return ""
        if not message.has_position:
            return ""

        now = self._clock()
        date_text = now.strftime("%Y/%m/%d")
        time_text = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"

        hex_ident = message.address.upper().rjust(6, "0")
        callsign = message.flight_number or hex_ident
        altitude = ""
        if not math.isnan(message.altitude):
            altitude = str(int(message.altitude * _METERS_TO_FEET))
        vertical_rate = int(message.vertical_speed * _MPS_TO_FPM)

        return (
            f"MSG,8,111,11111,{hex_ident},111111,"
            f"{date_text},{time_text},{date_text},{time_text},"
            f"{callsign},{altitude},{int(message.speed)},{int(message.course)},"
            f"{message.latitude:.6f},{message.longitude:.6f},{vertical_rate},,,,,"
        )


class JsonFormatter:
    """One JSON object per decoded message."""

    def __init__(self, include_unknown: bool = False) -> None:
        self._include_unknown = include_unknown

    def format(self, message: OgnMessage) -> str:
        if message.type is OgnMessageType.UNKNOWN and not self._include_unknown:
            return ""
        return json.dumps(message_to_dict(message), sort_keys=False)


def message_to_dict(message: OgnMessage) -> dict[str, Any]:
    """Convert a message to JSON-friendly values (enum names, NaN as None)."""
    result: dict[str, Any] = {}
    for field in fields(message):
        value = getattr(message, field.name)
        if isinstance(value, Enum):
            value = value.name
        elif isinstance(value, float) and math.isnan(value):
            value = None
        result[field.name] = value
    return result


def get_formatter(name: str, *, include_unknown: bool = False) -> OutputFormatter:
    key = name.strip().lower()
    if key == "ogn":
        return OgnFormatter()
    if key == "sbs1":
        return SBS1Formatter()
    if key == "json":
        return JsonFormatter(include_unknown=include_unknown)
    raise ValueError(f"Unknown output format {name!r}; expected one of {', '.join(FORMATTER_NAMES)}")
