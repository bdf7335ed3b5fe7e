"""Static lookup tables of the OGN flavoured APRS dialect.

See http://wiki.glidernet.org/wiki:ogn-flavoured-aprs
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .message import OgnAircraftType, OgnSymbol

UNKNOWN_AIRCRAFT_SYMBOL = "\\^"

# Order matters: the position report encoder picks the first symbol whose
# aircraft type matches.
AIRCRAFT_TYPE_MAP: Mapping[str, OgnAircraftType] = MappingProxyType(
    {
        "/z": OgnAircraftType.UNKNOWN,
        "/'": OgnAircraftType.GLIDER,
        "/X": OgnAircraftType.COPTER,
        "/g": OgnAircraftType.PARAGLIDER,  # parachute, hang glider, paraglider
        "\\^": OgnAircraftType.AIRCRAFT,  # drop plane, powered aircraft
        "/^": OgnAircraftType.JET,
        "/O": OgnAircraftType.BALLOON,  # balloon, airship
        "\\n": OgnAircraftType.STATIC_OBSTACLE,
    }
)

APRS_SYMBOL_MAP: Mapping[str, OgnSymbol] = MappingProxyType(
    {
        "/z": OgnSymbol.UNKNOWN,
        "/'": OgnSymbol.GLIDER,
        "/X": OgnSymbol.HELICOPTER,
        "/g": OgnSymbol.PARACHUTE,
        "\\^": OgnSymbol.AIRCRAFT,
        "/^": OgnSymbol.JET,
        "/O": OgnSymbol.BALLOON,
        "\\n": OgnSymbol.STATIC_OBJECT,
        "/_": OgnSymbol.WEATHERSTATION,
    }
)

# 4-bit aircraft category from bits 29..26 of the aircraft id.
AIRCRAFT_CATEGORY_MAP: Mapping[int, OgnAircraftType] = MappingProxyType(
    {
        0x0: OgnAircraftType.UNKNOWN,  # reserved
        0x1: OgnAircraftType.GLIDER,  # glider, motor glider, TMG
        0x2: OgnAircraftType.TOW_PLANE,
        0x3: OgnAircraftType.COPTER,  # helicopter, gyrocopter, rotorcraft
        0x4: OgnAircraftType.SKYDIVER,
        0x5: OgnAircraftType.AIRCRAFT,  # drop plane for skydivers
        0x6: OgnAircraftType.HANG_GLIDER,
        0x7: OgnAircraftType.PARAGLIDER,
        0x8: OgnAircraftType.AIRCRAFT,  # reciprocating engine(s)
        0x9: OgnAircraftType.JET,  # jet/turboprop engine(s)
        0xA: OgnAircraftType.UNKNOWN,
        0xB: OgnAircraftType.BALLOON,
        0xC: OgnAircraftType.AIRSHIP,
        0xD: OgnAircraftType.DRONE,
        0xE: OgnAircraftType.UNKNOWN,  # reserved
        0xF: OgnAircraftType.STATIC_OBSTACLE,
    }
)


def lookup_symbol(symbol_table: str, symbol_code: str) -> OgnSymbol:
    return APRS_SYMBOL_MAP.get(symbol_table + symbol_code, OgnSymbol.UNKNOWN)


def lookup_category(category: int) -> OgnAircraftType:
    return AIRCRAFT_CATEGORY_MAP.get(category, OgnAircraftType.UNKNOWN)
