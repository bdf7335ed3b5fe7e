"""OGN flavoured APRS protocol: message decoding, encoders, and APRS-IS client."""

from .message import (  # noqa: F401
    OgnAddressType,
    OgnAircraftType,
    OgnMessage,
    OgnMessageType,
    OgnSymbol,
)
from .parser import parse_aprsis_message, parse_line  # noqa: F401
from .encoder import (  # noqa: F401
    calculate_passcode,
    format_filter_command,
    format_login_string,
    format_position_report,
    symbol_for_aircraft_type,
)
from .aprsis_client import (  # noqa: F401
    APRSISClient,
    APRSISClientError,
    APRSISConfig,
    random_callsign,
)

__all__ = [
    "OgnAddressType",
    "OgnAircraftType",
    "OgnMessage",
    "OgnMessageType",
    "OgnSymbol",
    "parse_aprsis_message",
    "parse_line",
    "calculate_passcode",
    "format_filter_command",
    "format_login_string",
    "format_position_report",
    "symbol_for_aircraft_type",
    "APRSISClient",
    "APRSISClientError",
    "APRSISConfig",
    "random_callsign",
]
