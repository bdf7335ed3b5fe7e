"""Subcommand implementations for the ogn-aprs CLI."""

from .decode import run_decode
from .dump import run_dump

__all__ = ["run_decode", "run_dump"]
