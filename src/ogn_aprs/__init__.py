"""ogn-aprs package.

Decoder and encoders for the Open Glider Network flavour of APRS-IS, plus
a small command-line dumper for the live feed.

``__version__`` is resolved before any submodule is imported so modules
that report the software version (the APRS-IS login line) can import it
without a circular import.
"""

from importlib import metadata as _metadata
from pathlib import Path as _Path

_DIST_NAME = "ogn-aprs"


def _source_tree_version() -> str:
    """Read ``[project] version`` when running from a checkout (src layout)."""
    pyproject = _Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        try:
            import tomllib as _toml
        except ModuleNotFoundError:  # pragma: no cover - Python < 3.11
            import tomli as _toml  # type: ignore[no-redef]
        with pyproject.open("rb") as handle:
            return str(_toml.load(handle)["project"]["version"])
    except (OSError, ValueError, KeyError):
        return "0.0.0"


# A checkout's pyproject wins over stale metadata from an older install.
if (_Path(__file__).resolve().parents[2] / "pyproject.toml").is_file():
    __version__ = _source_tree_version()
else:
    try:
        __version__ = _metadata.version(_DIST_NAME)
    except _metadata.PackageNotFoundError:
        __version__ = "0.0.0"

from .aprs import (  # noqa: E402
    OgnAddressType,
    OgnAircraftType,
    OgnMessage,
    OgnMessageType,
    OgnSymbol,
    format_filter_command,
    format_login_string,
    format_position_report,
    parse_aprsis_message,
    parse_line,
)

__all__ = [
    "OgnAddressType",
    "OgnAircraftType",
    "OgnMessage",
    "OgnMessageType",
    "OgnSymbol",
    "format_filter_command",
    "format_login_string",
    "format_position_report",
    "parse_aprsis_message",
    "parse_line",
    "__version__",
]
