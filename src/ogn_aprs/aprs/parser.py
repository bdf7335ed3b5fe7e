"""Classifier and field decoder for OGN/APRS-IS lines.

Typical input::

    FLRDDE626>APRS,qAS,EGHL:/074548h5111.32N/00102.04W'086/007/A=000607 id0ADDE626 -019fpm +0.0rot 5.5dB 3e -4.3kHz

The parser never raises on malformed input. Structural problems leave the
record as ``OgnMessageType.UNKNOWN``; a sub-field that fails to decode keeps
its default while the remaining fields are still filled in.

See http://wiki.glidernet.org/wiki:ogn-flavoured-aprs and
http://wiki.glidernet.org/aprs-interaction-examples
"""

from __future__ import annotations

from typing import Callable

from .coordinates import decode_latitude, decode_longitude
from .message import OgnAddressType, OgnMessage, OgnMessageType, OgnSymbol
from .numeric import parse_hex, parse_int, parse_uint
from .tables import lookup_category, lookup_symbol

MIN_HEADER_LENGTH = 5
MIN_BODY_LENGTH = 5
MIN_APRS_PART_LENGTH = 30

# Offsets into the APRS part, e.g. "/074548h5111.32N/00102.04W'086/007/A=000607"
TIMESTAMP_START = 1  # "074548", hhmmss
TIMESTAMP_END = 7
LATITUDE_START = 8  # "5111.32"
LATITUDE_END = 15
LATITUDE_DIRECTION = 15  # N or S
SYMBOL_TABLE = 16  # "/" or "\"
LONGITUDE_START = 17  # "00102.04"
LONGITUDE_END = 25
LONGITUDE_DIRECTION = 25  # E or W
SYMBOL_CODE = 26  # "'" for a glider, "_" for a weather station

# "086/007" course/speed block right after the symbol code
COURSE_START = 27
SPEED_SEPARATOR = 30
SPEED_START = 31
MIN_COURSE_SPEED_LENGTH = 34

# Weather fields are searched from the "_" symbol code onwards.
WEATHER_START = SYMBOL_CODE

ALTITUDE_MARKER = "/A="
ALTITUDE_DIGITS = 6
PRECISION_MARKER = "!W"  # "!Wxy!" adds one digit to latitude (x) and longitude (y)

FEET_TO_METERS = 0.3048
FPM_TO_MPS = 0.00508

_STEALTH_BIT = 0x80000000
_NO_TRACKING_BIT = 0x40000000


def parse_line(line: str) -> OgnMessage:
    """Decode one line into a fresh :class:`OgnMessage`."""
    message = OgnMessage(sentence=line.rstrip("\r\n"))
    parse_aprsis_message(message)
    return message


def parse_aprsis_message(message: OgnMessage) -> None:
    """Populate ``message`` in place from ``message.sentence``.

    The record is expected to be fresh or freshly ``reset()``.
    """
    sentence = message.sentence.rstrip("\r\n")

    # Comments may contain colons, so check them before splitting.
    if sentence.startswith("#"):
        message.type = OgnMessageType.COMMENT
        return

    header, colon, body = sentence.partition(":")
    if not colon:
        message.type = OgnMessageType.UNKNOWN
        return
    if len(header) < MIN_HEADER_LENGTH or len(body) < MIN_BODY_LENGTH:
        message.type = OgnMessageType.UNKNOWN
        return

    if body[0] == "/":
        _parse_traffic_report(message, header, body)
    elif body[0] == ">":
        # Receiver status; the free text after ">" is not decoded.
        message.type = OgnMessageType.STATUS
    else:
        message.type = OgnMessageType.UNKNOWN


def _parse_traffic_report(message: OgnMessage, header: str, body: str) -> None:
    source_id, arrow, _ = header.partition(">")
    if not arrow:
        message.type = OgnMessageType.UNKNOWN
        return

    aprs_part, _, ogn_part = body.partition(" ")
    if not aprs_part.startswith("/") or len(aprs_part) < MIN_APRS_PART_LENGTH:
        message.type = OgnMessageType.UNKNOWN
        return

    message.type = OgnMessageType.TRAFFIC_REPORT
    message.source_id = source_id
    message.timestamp = aprs_part[TIMESTAMP_START:TIMESTAMP_END]

    lat_enhancement = ""
    lon_enhancement = ""
    precision_index = body.find(PRECISION_MARKER)
    if precision_index >= 0 and len(body) > precision_index + 4:
        lat_enhancement = body[precision_index + 2]
        lon_enhancement = body[precision_index + 3]

    message.latitude = decode_latitude(
        aprs_part[LATITUDE_START:LATITUDE_END],
        aprs_part[LATITUDE_DIRECTION],
        lat_enhancement,
    )
    message.longitude = decode_longitude(
        aprs_part[LONGITUDE_START:LONGITUDE_END],
        aprs_part[LONGITUDE_DIRECTION],
        lon_enhancement,
    )
    message.symbol = lookup_symbol(aprs_part[SYMBOL_TABLE], aprs_part[SYMBOL_CODE])

    if message.symbol is OgnSymbol.WEATHERSTATION:
        message.type = OgnMessageType.WEATHER
        _parse_weather_fields(message, aprs_part)
    else:
        _parse_motion_fields(message, aprs_part)

    if ogn_part:
        _parse_extension(message, ogn_part)

    if message.aircraft_id:
        _decode_aircraft_id(message)


def _parse_weather_fields(message: OgnMessage, aprs_part: str) -> None:
    # e.g. "/222245h4803.92N/00800.93E_292/005g010t030h01b65526"
    wind_direction = parse_uint(aprs_part[WEATHER_START + 1 : WEATHER_START + 4])
    if wind_direction is not None:
        message.wind_direction = wind_direction

    slash = aprs_part.find("/", WEATHER_START)
    if slash >= 0:
        wind_speed = parse_uint(aprs_part[slash + 1 : slash + 4])
        if wind_speed is not None:
            message.wind_speed = wind_speed

    gust = _weather_value(aprs_part, "g", 3)
    if gust is not None:
        message.wind_gust_speed = gust
    temperature = _weather_value(aprs_part, "t", 3)
    if temperature is not None:
        message.temperature = temperature
    humidity = _weather_value(aprs_part, "h", 2)
    if humidity is not None:
        message.humidity = humidity

    marker = aprs_part.find("b", WEATHER_START)
    if marker >= 0:
        pressure_text = aprs_part[marker + 1 :].split(" ", 1)[0]
        pressure_tenths = parse_uint(pressure_text)
        if pressure_tenths is not None:
            message.pressure = pressure_tenths / 10.0


def _weather_value(aprs_part: str, marker: str, width: int) -> int | None:
    index = aprs_part.find(marker, WEATHER_START)
    if index < 0:
        return None
    return parse_uint(aprs_part[index + 1 : index + 1 + width])


def _parse_motion_fields(message: OgnMessage, aprs_part: str) -> None:
    if len(aprs_part) >= MIN_COURSE_SPEED_LENGTH and aprs_part[SPEED_SEPARATOR] == "/":
        course = parse_int(aprs_part[COURSE_START:SPEED_SEPARATOR])
        speed = parse_int(aprs_part[SPEED_START : SPEED_START + 3])
        if course is not None:
            message.course = float(course)
        if speed is not None:
            message.speed = float(speed)

    marker = aprs_part.find(ALTITUDE_MARKER)
    if marker >= 0:
        start = marker + len(ALTITUDE_MARKER)
        altitude_feet = parse_int(aprs_part[start : start + ALTITUDE_DIGITS])
        if altitude_feet is not None:
            message.altitude = altitude_feet * FEET_TO_METERS


# --- OGN extension tokens -------------------------------------------------


def _set_aircraft_id(message: OgnMessage, token: str) -> None:
    message.aircraft_id = token[2:]


def _set_temperature(message: OgnMessage, token: str) -> None:
    value = parse_int(token[1:])
    if value is not None:
        message.temperature = value


def _set_humidity(message: OgnMessage, token: str) -> None:
    value = parse_uint(token[1:])
    if value is not None:
        message.humidity = value


def _set_pressure(message: OgnMessage, token: str) -> None:
    value = parse_uint(token[1:])
    if value is not None:
        message.pressure = value / 10.0


def _set_vertical_speed(message: OgnMessage, token: str) -> None:
    text = token[: token.find("f")]
    if text.startswith("+"):
        text = text[1:]
    value = parse_int(text)
    if value is not None:
        message.vertical_speed = value * FPM_TO_MPS


def _set_rotation_rate(message: OgnMessage, token: str) -> None:
    message.rotation_rate = token


def _set_signal_strength(message: OgnMessage, token: str) -> None:
    message.signal_strength = token


def _set_error_count(message: OgnMessage, token: str) -> None:
    message.error_count = token


def _set_frequency_offset(message: OgnMessage, token: str) -> None:
    message.frequency_offset = token


def _set_flight_level(message: OgnMessage, token: str) -> None:
    message.flight_level = token


def _set_flight_number(message: OgnMessage, token: str) -> None:
    message.flight_number = token[token.find(":") + 1 :]


def _set_squawk(message: OgnMessage, token: str) -> None:
    message.squawk = token[2:]


def _set_gps_info(message: OgnMessage, token: str) -> None:
    message.gps_info = token[4:]


TokenRule = tuple[Callable[[str], bool], Callable[[OgnMessage, str], None]]

# Evaluated top-down, first match wins. "t" before "fpm" means a token like
# "t12fpm" is a temperature, never a climb rate.
EXTENSION_RULES: tuple[TokenRule, ...] = (
    (lambda token: token.startswith("id"), _set_aircraft_id),
    (lambda token: token.startswith("t"), _set_temperature),
    (lambda token: token.startswith("h"), _set_humidity),
    (lambda token: token.startswith("b"), _set_pressure),
    (lambda token: token.endswith("fpm"), _set_vertical_speed),
    (lambda token: token.endswith("rot"), _set_rotation_rate),
    (lambda token: token.endswith("dB"), _set_signal_strength),
    (lambda token: token.endswith("e"), _set_error_count),
    (lambda token: token.endswith("kHz"), _set_frequency_offset),
    (lambda token: token.startswith("FL"), _set_flight_level),
    (lambda token: token.startswith("A") and len(token) > 2 and token[2] == ":", _set_flight_number),
    (lambda token: token.startswith("Sq"), _set_squawk),
    (lambda token: token.startswith("gps:"), _set_gps_info),
)


def _parse_extension(message: OgnMessage, ogn_part: str) -> None:
    for token in ogn_part.split(" "):
        if not token:
            continue
        for matches, apply in EXTENSION_RULES:
            if matches(token):
                apply(message, token)
                break


def _decode_aircraft_id(message: OgnMessage) -> None:
    # id "0ADDE626": STttttaa aaaaaaaa aaaaaaaa aaaaaaaa
    # S stealth, T no-tracking, tttt category, aa address type, then address
    code = parse_hex(message.aircraft_id)
    if code is None:
        return
    message.stealth_mode = bool(code & _STEALTH_BIT)
    message.no_tracking_flag = bool(code & _NO_TRACKING_BIT)
    message.aircraft_type = lookup_category((code >> 26) & 0xF)
    message.address_type = OgnAddressType((code >> 24) & 0x3)
    if len(message.aircraft_id) >= 8:
        message.address = message.aircraft_id[2:8]
