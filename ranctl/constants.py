"""ranctl constants."""

from __future__ import annotations

# Format marker for column-aligned output
TABLE_PREFIX = "table"

# Column writer settings (min cell width, padding, pad char)
TABWRITER_MIN_WIDTH = 0
TABWRITER_PADDING = 4
TABWRITER_PAD_CHAR = " "

# Fixed-width headers keep only the last path segment
FIXED_WIDTH_NAME_LIMIT = 1

# Text rendered for a None value inside an action
NIL_TEXT = "<nil>"

# Follow mode
DEFAULT_POLL_INTERVAL_S = 0.5

STDIN_PATH = "-"
