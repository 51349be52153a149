"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RenderArgs:
    """Arguments for render command."""

    path: str
    format: str
    no_headers: bool
    name_limit: int
    match: list[str]


@dataclass
class WatchArgs:
    """Arguments for watch command."""

    path: str
    format: str
    widths: str
    no_headers: bool
    no_replay: bool
    once: bool
    match: list[str]
    poll_interval: float


@dataclass
class DebugHeaderArgs:
    """Arguments for debug-header command."""

    format: str
    name_limit: int
