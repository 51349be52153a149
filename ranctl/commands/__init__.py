"""ranctl command implementations."""

from __future__ import annotations

from .render import cmd_debug_header, cmd_render
from .watch import cmd_watch

__all__ = [
    "cmd_debug_header",
    "cmd_render",
    "cmd_watch",
]
