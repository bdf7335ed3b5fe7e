"""Command-line interface entry points for the OGN APRS decoder."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from argparse import Namespace
from typing import Protocol

from ogn_aprs import __version__
from ogn_aprs import config as config_module
from ogn_aprs.commands import run_decode, run_dump
from ogn_aprs.formatters import FORMATTER_NAMES

LOG_LEVEL_ENV_VAR = "OGN_APRS_LOG_LEVEL"
LOG_FILENAME = "ogn-aprs.log"


class CommandHandler(Protocol):
    """A subcommand: takes the parsed namespace, returns the exit status."""

    def __call__(self, args: Namespace) -> int:  # pragma: no cover - typing hook
        ...


def build_parser(handlers: dict[str, CommandHandler] | None = None) -> argparse.ArgumentParser:
    """Build the ``ogn-aprs`` parser; ``handlers`` lets tests swap the subcommands."""

    handlers = handlers or _command_handlers()

    parser = argparse.ArgumentParser(
        prog="ogn-aprs",
        description="Decode the Open Glider Network APRS-IS feed",
    )
    parser.add_argument("--version", action="version", version=f"ogn-aprs {__version__}")
    parser.add_argument(
        "--log-level",
        help="Logging level (debug, info, warning, error or a number)",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write log records to the data directory",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    dump_parser = subparsers.add_parser(
        "dump", help="Connect to APRS-IS and print traffic around a position"
    )
    dump_parser.set_defaults(handler=handlers["dump"])
    dump_parser.add_argument(
        "--config",
        help="Path to configuration file (overrides default location)",
    )
    dump_parser.add_argument("--server", help="APRS-IS server hostname")
    dump_parser.add_argument("--port", type=int, help="APRS-IS server port")
    dump_parser.add_argument("--lat", type=float, help="Filter centre latitude (degrees)")
    dump_parser.add_argument("--lon", type=float, help="Filter centre longitude (degrees)")
    dump_parser.add_argument("--radius", type=int, help="Filter radius in km")
    dump_parser.add_argument(
        "--callsign",
        help="Login callsign (a random read-only callsign is used when omitted)",
    )
    dump_parser.add_argument(
        "--format",
        choices=FORMATTER_NAMES,
        help="Output format for decoded lines",
    )
    dump_parser.add_argument("--mqtt-host", help="Publish decoded records to this MQTT broker")
    dump_parser.add_argument("--mqtt-port", type=int, help="MQTT broker port")
    dump_parser.add_argument("--mqtt-topic", help="MQTT topic prefix")
    dump_parser.add_argument(
        "--max-lines",
        type=int,
        help="Stop after this many lines have been received",
    )

    decode_parser = subparsers.add_parser(
        "decode", help="Decode APRS-IS lines from a file or stdin"
    )
    decode_parser.set_defaults(handler=handlers["decode"])
    decode_parser.add_argument(
        "--input",
        help="File containing one APRS-IS line per row (default: stdin)",
    )
    decode_parser.add_argument(
        "--format",
        choices=FORMATTER_NAMES,
        default="json",
        help="Output format for decoded lines",
    )
    decode_parser.add_argument(
        "--include-unknown",
        action="store_true",
        help="Emit records that could not be classified (json format)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse ``argv``, set up logging and run the selected subcommand."""

    parser = build_parser()
    args = parser.parse_args(list(sys.argv[1:] if argv is None else argv))

    _configure_logging(getattr(args, "log_level", None), bool(getattr(args, "log_file", False)))

    return args.handler(args)


def _command_handlers() -> dict[str, CommandHandler]:
    return {
        "dump": run_dump,
        "decode": run_decode,
    }


_LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _resolve_log_level(candidate: str | None) -> int:
    """``--log-level`` wins over ``OGN_APRS_LOG_LEVEL``; unusable values fall through to INFO."""
    for raw in (candidate, os.getenv(LOG_LEVEL_ENV_VAR)):
        value = (raw or "").strip().lower()
        if value in _LOG_LEVELS:
            return _LOG_LEVELS[value]
        if value.isdigit():
            return int(value)
    return logging.INFO


def _configure_logging(level_name: str | None, log_to_file: bool = False) -> None:
    # stdout carries decoded data, so log records go to stderr
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [stream_handler]

    if log_to_file:
        log_dir = config_module.get_logs_dir()
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8")
        except OSError as exc:
            print(f"Unable to open log file in {log_dir}: {exc}", file=sys.stderr)
        else:
            file_formatter = logging.Formatter(
                "%(asctime)sZ %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%dT%H:%M:%S"
            )
            file_formatter.converter = time.gmtime
            file_handler.setFormatter(file_formatter)
            handlers.append(file_handler)

    logging.basicConfig(level=_resolve_log_level(level_name), handlers=handlers, force=True)


if __name__ == "__main__":  # pragma: no cover - direct CLI execution path
    raise SystemExit(main())
