"""
Timestamp conversion utilities for keyed-archive exports.

Formats supported:
- Cocoa: Seconds since 2001-01-01 (NSDate reference date, used by macOS apps)
- RFC 3339 / ISO 8601 UTC strings with a ``Z`` suffix (JSON output)
- Human readable ``YYYY-MM-DD HH:MM:SS UTC`` strings (HTML report)

Unlike lenient display helpers, the Cocoa conversion raises on bad input: a
timestamp that cannot be converted means the archive is not what we expect.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Union

# Constants for timestamp epoch calculations
COCOA_EPOCH_DIFF = 978307200     # Seconds between 1970-01-01 and 2001-01-01
COCOA_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})$"
)


def cocoa_to_datetime(seconds: Union[int, float]) -> datetime:
    """
    Convert a Cocoa timestamp to an aware UTC datetime.

    The integer part is taken with ``floor`` and the fractional remainder is
    kept at microsecond resolution, so ``31536000.5`` becomes
    ``2002-01-01T00:00:00.5Z`` rather than being rounded to whole seconds.

    Args:
        seconds: Cocoa timestamp (seconds since 2001-01-01 00:00:00 UTC)

    Returns:
        datetime in UTC

    Raises:
        TypeError: If ``seconds`` is not an int or float (bools are rejected)
        ValueError: If ``seconds`` is NaN, infinite or out of datetime range

    Example:
        >>> cocoa_to_datetime(0.0)
        datetime.datetime(2001, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise TypeError(f"Cocoa timestamp must be numeric, got {type(seconds).__name__}")
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise ValueError(f"Cocoa timestamp is not finite: {seconds!r}")

    whole = math.floor(seconds)
    micros = round((seconds - whole) * 1_000_000)
    if micros >= 1_000_000:
        whole += 1
        micros -= 1_000_000

    try:
        return COCOA_EPOCH + timedelta(seconds=whole, microseconds=micros)
    except OverflowError as exc:
        raise ValueError(f"Cocoa timestamp out of range: {seconds!r}") from exc


def format_rfc3339(dt: datetime) -> str:
    """
    Format an aware datetime as RFC 3339 in UTC.

    Fractional seconds are emitted only when present, with trailing zeros
    trimmed (``...T00:00:00.5Z``).
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if dt.microsecond:
        text += "." + f"{dt.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_rfc3339(text: str) -> datetime:
    """
    Parse an RFC 3339 timestamp produced by :func:`format_rfc3339`.

    Accepts ``Z`` or numeric offsets and 1-9 fractional digits (digits past
    microseconds are truncated).

    Raises:
        ValueError: If ``text`` is not an RFC 3339 timestamp
    """
    match = _RFC3339_RE.match(text or "")
    if not match:
        raise ValueError(f"Not an RFC 3339 timestamp: {text!r}")

    fraction = (match.group("fraction") or "").ljust(6, "0")[:6]
    offset = match.group("offset")
    if offset == "Z":
        offset = "+00:00"

    dt = datetime.fromisoformat(f"{match.group('base')}.{fraction}{offset}")
    return dt.astimezone(timezone.utc)


def format_display(dt: datetime) -> str:
    """Format a datetime for the HTML report, e.g. ``2024-01-15 10:30:45 UTC``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(DISPLAY_FORMAT)


def utc_now() -> datetime:
    """Current UTC time without microseconds."""
    return datetime.now(tz=timezone.utc).replace(microsecond=0)
