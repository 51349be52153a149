"""ranctl utility functions."""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Mapping
from typing import Any

_ESCAPE_RE = re.compile(r"\\([tn\\])")
_ESCAPES = {"t": "\t", "n": "\n", "\\": "\\"}


def utc_now() -> dt.datetime:
    """Return the current time as an aware UTC datetime."""
    return dt.datetime.now(dt.UTC)


def format_elapsed_time(seconds: float) -> str:
    """Format elapsed time in human-readable format.

    Args:
        seconds: Elapsed time in seconds (fractions are truncated)

    Returns:
        Formatted string like "1m25s", "45s", "1h05m30s" or "-2m03s"
    """
    total_seconds = int(seconds)
    sign = "-" if total_seconds < 0 else ""
    hours, remainder = divmod(abs(total_seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{sign}{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{sign}{minutes}m{secs:02d}s"
    return f"{sign}{secs}s"


def parse_timestamp(value: Any) -> dt.datetime | None:
    """Coerce a timestamp-like value into an aware UTC datetime.

    Accepts datetimes (naive values are taken as UTC), ISO-8601 strings,
    epoch seconds, protobuf-JSON style ``{"seconds": .., "nanos": ..}``
    mappings and objects exposing ``ToDatetime()``.

    Returns:
        The datetime, or None when the value is absent or the zero timestamp

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if value is None or value == "" or value == 0:
        return None
    if isinstance(value, bool):
        raise ValueError(f"not a timestamp: {value!r}")
    if isinstance(value, dt.datetime):
        if value.replace(tzinfo=None) == dt.datetime.min:
            return None
        parsed = value
    elif isinstance(value, int | float):
        parsed = dt.datetime.fromtimestamp(value, dt.UTC)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = dt.datetime.fromisoformat(text)
    elif isinstance(value, Mapping):
        seconds = int(value.get("seconds", 0) or 0)
        nanos = int(value.get("nanos", 0) or 0)
        if seconds == 0 and nanos == 0:
            return None
        parsed = dt.datetime.fromtimestamp(seconds, dt.UTC) + dt.timedelta(
            microseconds=nanos // 1000
        )
    elif callable(getattr(value, "ToDatetime", None)):
        seconds = getattr(value, "seconds", None)
        nanos = getattr(value, "nanos", None)
        if seconds == 0 and nanos == 0:
            return None
        parsed = value.ToDatetime()
    else:
        raise ValueError(f"not a timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def expand_escapes(text: str) -> str:
    r"""Expand ``\t``, ``\n`` and ``\\`` escape sequences typed on a shell."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], text)
