"""ranctl render commands."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from ..exceptions import FormatError, UserError
from ..format import Format
from ..records import load_records, parse_matches, record_matches

if TYPE_CHECKING:
    from ..cli_types import DebugHeaderArgs, RenderArgs

logger = logging.getLogger("ranctl")


def cmd_render(args: RenderArgs) -> None:
    """Render every record in a JSON/JSONL file with a format template."""
    fmt = Format(args.format)
    matches = parse_matches(args.match)
    records = load_records(args.path)
    if matches:
        records = [record for record in records if record_matches(record, matches)]
        logger.debug("%d record(s) after filtering", len(records))
    try:
        fmt.execute(sys.stdout, not args.no_headers, args.name_limit, records)
    except FormatError as exc:
        raise UserError(str(exc)) from exc


def cmd_debug_header(args: DebugHeaderArgs) -> None:
    """Print the header line synthesized from a format template."""
    try:
        print(Format(args.format).header(args.name_limit))
    except FormatError as exc:
        raise UserError(str(exc)) from exc
