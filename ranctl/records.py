"""Record sources: JSON / JSONL files, followed event logs, widths and filters."""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .constants import DEFAULT_POLL_INTERVAL_S, STDIN_PATH
from .exceptions import FieldResolutionError, UserError
from .format.resolver import resolve_path
from .format.template import to_text

logger = logging.getLogger("ranctl")


def read_text(path: str) -> str:
    """Read a file, or stdin when path is "-"."""
    if path == STDIN_PATH:
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise UserError(f"File not found: {path}") from exc
    except OSError as exc:
        raise UserError(f"Unable to read {path}: {exc}") from exc


def parse_records(text: str, *, source: str = "<input>") -> list[Any]:
    """Parse a JSON document or JSONL text into a list of records.

    A JSON array yields its elements, any other JSON value is a single
    record. Text that is not one JSON document is read as JSONL.
    """
    stripped = text.strip()
    if not stripped:
        return []
    try:
        document = json.loads(stripped)
    except json.JSONDecodeError:
        pass
    else:
        return document if isinstance(document, list) else [document]

    records = []
    for lineno, line in enumerate(stripped.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise UserError(f"{source}:{lineno}: invalid JSON: {exc.msg}") from exc
    return records


def load_records(path: str) -> list[Any]:
    """Load records from a JSON or JSONL file ("-" for stdin)."""
    records = parse_records(read_text(path), source=path)
    logger.debug("Loaded %d record(s) from %s", len(records), path)
    return records


def _decode_line(line: str, path: Path) -> Any | None:
    line = line.strip()
    if not line:
        return None
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        logger.warning("Skipping invalid JSON line in %s", path)
        return None


def iter_jsonl_records(path: Path) -> Iterable[Any]:
    """Yield JSONL records from a file, skipping blank and invalid lines."""
    try:
        with path.open("r", encoding="utf-8") as f:
            for line in f:
                record = _decode_line(line, path)
                if record is not None:
                    yield record
    except FileNotFoundError:
        return


def tail_jsonl_records(
    path: Path,
    *,
    start_at_end: bool = False,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
) -> Iterable[Any]:
    """Yield JSONL records as they are appended to a file.

    Waits for the file to appear, reopens it when it is replaced (inode
    change) and starts over when it is truncated.
    """
    file_obj = None
    inode = None
    position = 0

    try:
        while True:
            try:
                stat = path.stat()
            except FileNotFoundError:
                time.sleep(poll_interval_s)
                continue

            if inode != stat.st_ino:
                if file_obj:
                    file_obj.close()
                file_obj = path.open("r", encoding="utf-8")
                # Only the first open honours start_at_end; a rotated file is read in full
                position = stat.st_size if start_at_end and inode is None else 0
                inode = stat.st_ino
                file_obj.seek(position)
                logger.debug("Following %s from offset %d", path, position)
            elif stat.st_size < position:
                logger.debug("%s was truncated, reading from start", path)
                position = 0
                file_obj.seek(position)

            line = file_obj.readline()
            if not line or not line.endswith("\n"):
                # Partial line: wait for the writer to finish it
                file_obj.seek(position)
                time.sleep(poll_interval_s)
                continue

            position = file_obj.tell()
            record = _decode_line(line, path)
            if record is not None:
                yield record
    finally:
        if file_obj:
            file_obj.close()


def parse_widths(value: str) -> Any:
    """Parse a widths descriptor from JSON text, or from a file given as @PATH."""
    text = read_text(value[1:]) if value.startswith("@") else value
    try:
        widths = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UserError(f"Invalid widths JSON: {exc.msg}") from exc
    if not isinstance(widths, dict):
        raise UserError("Widths must be a JSON object mirroring the record fields")
    return widths


def parse_matches(values: Iterable[str]) -> list[tuple[tuple[str, ...], str]]:
    """Parse PATH=VALUE filters, e.g. "Status.State=ACTIVE"."""
    matches = []
    for value in values:
        if "=" not in value:
            raise UserError(f"Invalid match (expected PATH=VALUE): {value}")
        path, expected = value.split("=", 1)
        segments = tuple(s for s in path.strip().lstrip(".").split(".") if s)
        if not segments:
            raise UserError(f"Invalid match (empty field path): {value}")
        matches.append((segments, expected))
    return matches


def record_matches(record: Any, matches: list[tuple[tuple[str, ...], str]]) -> bool:
    """Return True if every filter's field renders to its expected text."""
    for path, expected in matches:
        try:
            actual = resolve_path(record, path)
        except FieldResolutionError:
            return False
        if to_text(actual) != expected:
            return False
    return True
