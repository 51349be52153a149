"""ranctl watch command: fixed-width rendering of a followed JSONL event log."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import FormatError, TemplateExecutionError, UserError
from ..format import Format
from ..records import (
    iter_jsonl_records,
    parse_matches,
    parse_widths,
    record_matches,
    tail_jsonl_records,
)

if TYPE_CHECKING:
    from ..cli_types import WatchArgs

logger = logging.getLogger("ranctl")


def cmd_watch(args: WatchArgs) -> None:
    """Print one fixed-width row per record appended to a JSONL file."""
    fmt = Format(args.format)
    if not fmt.is_table:
        raise UserError("watch requires a table format (prefix the format with 'table')")
    widths = parse_widths(args.widths)
    matches = parse_matches(args.match)
    path = Path(args.path)

    # Rendering the header up front checks the widths against the format
    try:
        header = fmt.execute_fixed_width(widths, True)
    except FormatError as exc:
        raise UserError(str(exc)) from exc
    if not args.no_headers:
        print(header, flush=True)

    if args.once:
        records = [] if args.no_replay else iter_jsonl_records(path)
    else:
        records = tail_jsonl_records(
            path, start_at_end=args.no_replay, poll_interval_s=args.poll_interval
        )

    for record in records:
        if matches and not record_matches(record, matches):
            continue
        try:
            line = fmt.execute_fixed_width(widths, False, record)
        except TemplateExecutionError as exc:
            logger.warning("Skipping record: %s", exc)
            continue
        except FormatError as exc:
            raise UserError(str(exc)) from exc
        print(line, flush=True)
