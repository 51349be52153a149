"""
ranctl - command-line client for RAN controller backends.

Records returned by the controllers are rendered through format templates:
column-aligned tables for lists, fixed-width rows for streamed events, or
free-form text.
"""

from __future__ import annotations

from .cli import main
from .exceptions import FormatError, RanCtlError, UserError
from .format import Format

__all__ = [
    "Format",
    "FormatError",
    "RanCtlError",
    "UserError",
    "main",
]
