"""NMEA style degrees/minutes coordinates used in APRS position reports."""

from __future__ import annotations

import math

from .numeric import parse_decimal

_MIN_LATITUDE_LENGTH = 7  # "DDMM.mm"
_MIN_LONGITUDE_LENGTH = 8  # "DDDMM.mm"

# One "!Wxy!" digit adds a thousandth of a minute.
_ENHANCEMENT_STEP = 0.001 / 60


def decode_latitude(text: str, direction: str, enhancement: str = "") -> float:
    """Decode ``"5111.32"``/``"N"`` into signed decimal degrees.

    Returns NaN if any part of the input fails to parse.
    """
    value = _decode(text, 2, _MIN_LATITUDE_LENGTH, enhancement)
    return -value if direction == "S" else value


def decode_longitude(text: str, direction: str, enhancement: str = "") -> float:
    """Decode ``"00102.04"``/``"W"`` into signed decimal degrees.

    Returns NaN if any part of the input fails to parse.
    """
    value = _decode(text, 3, _MIN_LONGITUDE_LENGTH, enhancement)
    return -value if direction == "W" else value


def format_latitude(latitude: float) -> str:
    """Render decimal degrees as ``DDMM.mmN`` or ``DDMM.mmS``."""
    direction = "N" if latitude >= 0 else "S"
    degrees, minutes = _split(latitude)
    return f"{degrees:02d}{minutes:05.2f}{direction}"


def format_longitude(longitude: float) -> str:
    """Render decimal degrees as ``DDDMM.mmE`` or ``DDDMM.mmW``."""
    direction = "E" if longitude >= 0 else "W"
    degrees, minutes = _split(longitude)
    return f"{degrees:03d}{minutes:05.2f}{direction}"


def _decode(text: str, degree_digits: int, min_length: int, enhancement: str) -> float:
    if len(text) < min_length:
        return math.nan
    degrees = parse_decimal(text[:degree_digits])
    if degrees is None:
        return math.nan
    minutes = parse_decimal(text[degree_digits:])
    if minutes is None:
        return math.nan
    value = degrees + minutes / 60.0
    if len(enhancement) == 1 and "0" <= enhancement <= "9":
        value += int(enhancement) * _ENHANCEMENT_STEP
    return value


def _split(value: float) -> tuple[int, float]:
    if not math.isfinite(value):
        raise ValueError(f"Cannot format a non-finite coordinate: {value}")
    value = abs(value)
    degrees = int(value)
    return degrees, (value - degrees) * 60.0
