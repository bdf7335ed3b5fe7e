"""Decoded OGN/APRS-IS message record and its enumerations.

See http://wiki.glidernet.org/wiki:ogn-flavoured-aprs for the field
meanings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum, IntEnum


class OgnMessageType(Enum):
    UNKNOWN = "unknown"
    TRAFFIC_REPORT = "traffic_report"
    COMMENT = "comment"
    STATUS = "status"
    WEATHER = "weather"


class OgnAddressType(IntEnum):
    """Address type carried in bits 25..24 of the aircraft id."""

    UNKNOWN = 0
    ICAO = 1
    FLARM = 2
    OGN_TRACKER = 3


class OgnSymbol(Enum):
    """Map symbol announced by the APRS symbol table/code pair."""

    UNKNOWN = "unknown"
    GLIDER = "glider"
    HELICOPTER = "helicopter"
    PARACHUTE = "parachute"
    AIRCRAFT = "aircraft"
    JET = "jet"
    BALLOON = "balloon"
    STATIC_OBJECT = "static_object"
    UAV = "uav"
    WEATHERSTATION = "weatherstation"


class OgnAircraftType(Enum):
    """Aircraft type, modeled after the FLARM/NMEA list."""

    UNKNOWN = "unknown"
    AIRCRAFT = "aircraft"
    AIRSHIP = "airship"
    BALLOON = "balloon"
    COPTER = "copter"
    DRONE = "drone"
    GLIDER = "glider"
    HANG_GLIDER = "hang_glider"
    JET = "jet"
    PARAGLIDER = "paraglider"
    SKYDIVER = "skydiver"
    STATIC_OBSTACLE = "static_obstacle"
    TOW_PLANE = "tow_plane"


@dataclass(slots=True)
class OgnMessage:
    """One APRS-IS line and everything decoded from it.

    Text fields are slices of ``sentence`` and stay empty when the line
    does not carry them. ``latitude``, ``longitude`` and ``altitude`` are
    NaN unless decoded.
    """

    sentence: str = ""
    type: OgnMessageType = OgnMessageType.UNKNOWN

    source_id: str = ""  # e.g. "FLRDDE626"
    timestamp: str = ""  # hhmmss, not interpreted
    latitude: float = math.nan  # degrees, WGS84
    longitude: float = math.nan  # degrees, WGS84
    altitude: float = math.nan  # meters, MSL
    symbol: OgnSymbol = OgnSymbol.UNKNOWN

    course: float = 0.0  # degrees
    speed: float = 0.0  # knots
    aircraft_id: str = ""  # e.g. "0ADDE626"
    vertical_speed: float = 0.0  # m/s
    rotation_rate: str = ""  # e.g. "+0.0rot"
    signal_strength: str = ""  # e.g. "5.5dB"
    error_count: str = ""  # e.g. "3e"
    frequency_offset: str = ""  # e.g. "-4.3kHz"
    squawk: str = ""  # e.g. "2244"
    flight_level: str = ""  # e.g. "FL350.00"
    flight_number: str = ""  # e.g. "AXY547M"
    gps_info: str = ""  # e.g. "0.0"
    aircraft_type: OgnAircraftType = OgnAircraftType.UNKNOWN
    address_type: OgnAddressType = OgnAddressType.UNKNOWN
    address: str = ""  # e.g. "DDE626"
    stealth_mode: bool = False
    no_tracking_flag: bool = False

    wind_direction: int = 0  # degrees 0..359
    wind_speed: int = 0
    wind_gust_speed: int = 0
    temperature: int = 0
    humidity: int = 0  # percent
    pressure: float = 0.0  # hPa

    @property
    def has_position(self) -> bool:
        return not (math.isnan(self.latitude) or math.isnan(self.longitude))

    def reset(self) -> None:
        """Restore every field to its default so the record can be reused."""
        for field in fields(self):
            setattr(self, field.name, field.default)
