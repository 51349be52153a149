"""Helper functions callable from format templates."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from ..utils import format_elapsed_time, parse_timestamp, utc_now


def format_timestamp(value: Any) -> str:
    """Format a timestamp as an RFC 3339 UTC string truncated to seconds.

    Absent or zero timestamps render as an empty string.
    """
    ts = parse_timestamp(value)
    if ts is None:
        return ""
    return ts.replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_since(value: Any) -> str:
    """Return the age of a timestamp, e.g. "1h05m30s"."""
    ts = parse_timestamp(value)
    if ts is None:
        return ""
    return format_elapsed_time((utc_now() - ts).total_seconds())


DEFAULT_FUNCS: Mapping[str, Callable[..., Any]] = MappingProxyType(
    {
        "timestamp": format_timestamp,
        "since": format_since,
    }
)
