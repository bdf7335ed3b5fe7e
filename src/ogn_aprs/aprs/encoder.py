"""Builders for the lines a client sends to an OGN APRS-IS server."""

from __future__ import annotations

import math
from datetime import datetime

from ..timeutils import utc_hhmmss
from .coordinates import format_latitude, format_longitude
from .message import OgnAircraftType
from .tables import AIRCRAFT_TYPE_MAP, UNKNOWN_AIRCRAFT_SYMBOL

METERS_TO_FEET = 3.28084
_PASSCODE_CHARS = 6


def calculate_passcode(callsign: str) -> str:
    """Return the OGN login passcode for ``callsign``.

    This is the sum of the character codes of the first six characters
    modulo 10000, e.g. ``"ENR12345"`` gives ``"379"``. It is not the
    amateur-radio APRS-IS hash; OGN servers accept it for read-only logins.
    """
    total = sum(ord(char) for char in callsign[:_PASSCODE_CHARS])
    return str(total % 10000)


def format_filter(latitude: float, longitude: float, radius_km: int) -> str:
    """Return a range filter such as ``filter r/-48.0000/7.8512/99 t/o``."""
    return f"filter r/{latitude:.4f}/{longitude:.4f}/{int(radius_km)} t/o"


def format_login_string(
    callsign: str,
    latitude: float,
    longitude: float,
    radius_km: int,
    app_name: str,
    app_version: str,
) -> str:
    passcode = calculate_passcode(callsign)
    filter_text = format_filter(latitude, longitude, radius_km)
    return f"user {callsign} pass {passcode} vers {app_name} {app_version} {filter_text}\n"


def format_filter_command(latitude: float, longitude: float, radius_km: int) -> str:
    """Return the server command that replaces the filter of a live session."""
    return f"# {format_filter(latitude, longitude, radius_km)}\n"


def symbol_for_aircraft_type(aircraft_type: OgnAircraftType) -> str:
    """Return the two character APRS symbol announced for ``aircraft_type``.

    Several symbols may map to one type; the first table entry wins. Types
    without any symbol fall back to the powered aircraft symbol.
    """
    for symbol, candidate in AIRCRAFT_TYPE_MAP.items():
        if candidate is aircraft_type:
            return symbol
    return UNKNOWN_AIRCRAFT_SYMBOL


def format_position_report(
    callsign: str,
    latitude: float,
    longitude: float,
    altitude_m: float,
    course: float,
    speed: float,
    aircraft_type: OgnAircraftType,
    *,
    now: datetime | None = None,
) -> str:
    """Return an APRS position report for our own aircraft.

    e.g. ``ENR12345>APRS,TCPIP*: /074548h5111.32N/00102.04W'086/007/A=000607``

    A record without a position cannot be reported: a NaN or infinite
    ``latitude``/``longitude`` raises ``ValueError``. Missing altitude,
    course or speed (NaN, as left by the parser) are sent as zero.
    """
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ValueError(f"Position report needs a finite position, got {latitude}, {longitude}")
    symbol = symbol_for_aircraft_type(aircraft_type)
    altitude_feet = _whole(altitude_m * METERS_TO_FEET)
    return (
        f"{callsign}>APRS,TCPIP*: /{utc_hhmmss(now)}h"
        f"{format_latitude(latitude)}{symbol[0]}"
        f"{format_longitude(longitude)}{symbol[1]}"
        f"{_whole(course):03d}/{_whole(speed):03d}/A={altitude_feet:06d}\n"
    )


def _whole(value: float) -> int:
    return int(value) if math.isfinite(value) else 0
