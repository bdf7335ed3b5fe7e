"""Decode APRS-IS lines from a file or stdin without a network connection."""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from collections import Counter
from pathlib import Path
from typing import Iterable, TextIO

from ogn_aprs.aprs.message import OgnMessageType
from ogn_aprs.aprs.parser import parse_line
from ogn_aprs.formatters import OutputFormatter, get_formatter

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def run_decode(args: Namespace) -> int:
    """Parse every line of the input and print it in the selected format."""
    formatter = get_formatter(
        getattr(args, "format", None) or "json",
        include_unknown=bool(getattr(args, "include_unknown", False)),
    )
    input_path = getattr(args, "input", None)

    if input_path and input_path != "-":
        path = Path(input_path)
        try:
            # latin-1 accepts every byte, matching how the feed is read
            with path.open("r", encoding="latin-1") as handle:
                counts = decode_lines(handle, formatter, sys.stdout)
        except OSError as exc:
            logger.error("Unable to read %s: %s", path, exc)
            return 1
    else:
        counts = decode_lines(sys.stdin, formatter, sys.stdout)

    logger.info(
        "Decoded %s line(s): %s",
        sum(counts.values()),
        " ".join(f"{kind.value}={counts[kind]}" for kind in OgnMessageType),
    )
    return 0


def decode_lines(
    lines: Iterable[str], formatter: OutputFormatter, out: TextIO
) -> Counter[OgnMessageType]:
    counts: Counter[OgnMessageType] = Counter()
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            continue
        message = parse_line(line)
        counts[message.type] += 1
        output = formatter.format(message)
        if output:
            out.write(output + "\n")
    return counts
