"""Locale-independent decoding of numeric substrings.

The parsers consume the longest numeric prefix of their input and ignore
whatever follows it, so ``parse_uint("030h01")`` is ``30``. A missing
prefix, a value outside the 32-bit range or a decimal that overflows to
infinity yields ``None``. The decimal separator is always ``.``; the
process locale is never consulted.
"""

from __future__ import annotations

import math
import re

_UINT_RE = re.compile(r"[0-9]+")
_INT_RE = re.compile(r"-?[0-9]+")
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
_DECIMAL_RE = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")

_UINT32_MAX = 0xFFFFFFFF
_INT32_MIN = -0x80000000
_INT32_MAX = 0x7FFFFFFF


def parse_uint(text: str) -> int | None:
    match = _UINT_RE.match(text)
    if match is None:
        return None
    value = int(match.group(0))
    return value if value <= _UINT32_MAX else None


def parse_int(text: str) -> int | None:
    match = _INT_RE.match(text)
    if match is None:
        return None
    value = int(match.group(0))
    return value if _INT32_MIN <= value <= _INT32_MAX else None


def parse_hex(text: str) -> int | None:
    match = _HEX_RE.match(text)
    if match is None:
        return None
    value = int(match.group(0), 16)
    return value if value <= _UINT32_MAX else None


def parse_decimal(text: str) -> float | None:
    """Parse a decimal number such as ``"11.32"`` or ``"-4.3"``."""
    match = _DECIMAL_RE.match(text)
    if match is None:
        return None
    # float() on a regex-validated literal never looks at LC_NUMERIC.
    value = float(match.group(0))
    return value if math.isfinite(value) else None
