"""Common text parsing utilities for trade imports."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

import pandas as pd

from config import EPOCH

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_EPOCH_RE = re.compile(r"^\d{9,13}(\.\d+)?$")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%m/%d/%y",
)


def parse_number(s: Optional[str]) -> float:
    """Parse a number like '$1,234.50' or '12 shares' to float. Garbage -> 0."""
    if not s:
        return 0.0
    cleaned = _NON_NUMERIC_RE.sub("", s)
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def from_unix(ts: float) -> datetime:
    """Convert epoch seconds (or milliseconds) to a naive UTC datetime."""
    if ts > 1e11:
        ts = ts / 1000.0
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)


def parse_timestamp(s: Optional[str]) -> datetime:
    """Parse a date/time cell. Returns EPOCH when nothing recognizes it."""
    if not s or not s.strip():
        return EPOCH
    s = s.strip()

    if _EPOCH_RE.match(s):
        try:
            return from_unix(float(s))
        except (OverflowError, OSError, ValueError):
            return EPOCH

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue

    parsed = pd.to_datetime(s, errors="coerce", utc=True)
    if pd.isna(parsed):
        return EPOCH
    return parsed.tz_convert(None).to_pydatetime()


def split_delimited_line(line: str, delimiter: str) -> list[str]:
    """Split one line on ``delimiter``, honouring double-quoted fields.

    Quotes toggle quoting and are dropped; embedded quotes are not escaped.
    """
    cells: list[str] = []
    current = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
            continue
        if ch == delimiter and not in_quotes:
            cells.append("".join(current))
            current = []
            continue
        current.append(ch)
    cells.append("".join(current))
    return cells


def detect_delimiter(header_line: str) -> str:
    return "\t" if "\t" in header_line else ","
