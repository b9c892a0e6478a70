"""
Filter value parsers.

Each parser turns one raw query-string value into a bound value or raises
``ValueError``. Bound values are restricted to :data:`FilterValue`.
"""

from __future__ import annotations

import datetime
import re
from typing import Callable, Union

FilterValue = Union[str, int, bool, datetime.datetime]
"""Closed set of values that can be bound to a filter placeholder."""

ParseFn = Callable[[str], FilterValue]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
# RFC 3339: date, upper-case "T", time with optional fraction, "Z" or offset.
_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------


def parse_string(raw: str) -> str:
    """Exact-match value; empty strings are rejected."""
    if raw == "":
        raise ValueError("empty value")
    return raw


def parse_like_string(raw: str) -> str:
    """Substring-match value wrapped in ``%`` wildcards."""
    return f"%{parse_string(raw)}%"


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def parse_int(raw: str) -> int:
    """
    Parse a base-10 integer with an optional sign.

    ``int()`` alone would also accept whitespace and underscores, which are
    not valid in a query value. Negative values pass through.
    """
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"invalid integer {raw!r}")
    n = int(raw)
    if not _INT64_MIN <= n <= _INT64_MAX:
        raise ValueError(f"integer {raw!r} out of range")
    return n


def parse_int64(raw: str) -> int:
    """Parse a signed 64-bit integer."""
    return parse_int(raw)


# ---------------------------------------------------------------------------
# Booleans and dates
# ---------------------------------------------------------------------------


def parse_bool(raw: str) -> bool:
    if raw in _TRUE_LITERALS:
        return True
    if raw in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean {raw!r}")


def parse_date(raw: str) -> datetime.datetime:
    """Parse a strict RFC 3339 timestamp into an aware ``datetime``."""
    m = _RFC3339_RE.fullmatch(raw)
    if not m:
        raise ValueError(f"invalid RFC 3339 timestamp {raw!r}")
    text = raw
    fraction = m.group(1)
    if fraction:
        # Python 3.10 fromisoformat() accepts 3 or 6 fractional digits only
        text = text.replace(fraction, "." + fraction[1:7].ljust(6, "0"), 1)
    # ... and understands "Z" only from 3.11 on
    return datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
