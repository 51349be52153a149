"""Record rendering through format templates."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, TextIO

from ..constants import FIXED_WIDTH_NAME_LIMIT, TABLE_PREFIX
from ..exceptions import (
    CellSplitError,
    FieldResolutionError,
    NotTabularError,
    ShapeMismatchError,
    WidthParseError,
)
from .funcs import DEFAULT_FUNCS
from .header import header_string
from .resolver import resolve_path
from .tabwriter import TabWriter
from .template import CompiledTemplate, compile_template, to_text

_WIDTH_RE = re.compile(r"-?\d+")


def trim_and_pad(s: str, width: int) -> str:
    """Return ``s`` cut or space-padded to exactly ``width`` characters."""
    if width <= 0:
        return ""
    return s[:width].ljust(width)


def iter_records(data: Any) -> Iterable[Any]:
    """Return the records held by ``data``.

    Lists, tuples and iterators are sequences of records; anything else
    (including strings and mappings) is a single record.
    """
    if isinstance(data, str | bytes | Mapping):
        return (data,)
    if isinstance(data, Sequence | Iterator):
        return data
    return (data,)


def _parse_width(cell: str) -> int:
    if not _WIDTH_RE.fullmatch(cell):
        raise WidthParseError(cell)
    return int(cell)


def _field_with_tab(template: CompiledTemplate, data: Any) -> str | None:
    for path in template.field_paths():
        try:
            value = resolve_path(data, path.segments)
        except FieldResolutionError:
            continue
        if "\t" in to_text(value):
            return str(path)
    return None


@dataclass(frozen=True)
class Format:
    """Output format: a template string, optionally prefixed with ``table``."""

    text: str
    funcs: Mapping[str, Callable[..., Any]] = field(
        default_factory=lambda: DEFAULT_FUNCS, repr=False
    )

    def __str__(self) -> str:
        return self.text

    @property
    def is_table(self) -> bool:
        """True if the format renders column-aligned output."""
        return self.text.startswith(TABLE_PREFIX)

    @cached_property
    def _template(self) -> CompiledTemplate:
        body = self.text[len(TABLE_PREFIX) :] if self.is_table else self.text
        return compile_template(body, self.funcs)

    def compile(self) -> CompiledTemplate:
        """Compile the template with the table prefix removed.

        The result is kept, so rows streamed through one format share it.
        """
        return self._template

    def header(self, name_limit: int = 0) -> str:
        """Return the header line for this format."""
        return header_string(self.compile(), name_limit)

    def execute(self, out: TextIO, with_headers: bool, name_limit: int, data: Any) -> None:
        """Render one record or a sequence of records to ``out``.

        Table formats go through a column writer so every column is sized
        from the whole data set; other formats are written line by line.

        Args:
            out: Text stream to write to
            with_headers: Emit the header line first (table formats only)
            name_limit: Keep only the last N field path segments in column
                names; 0 keeps the full path
            data: Record or sequence of records
        """
        template = self.compile()

        if not self.is_table:
            for record in iter_records(data):
                out.write(template.execute(record))
                out.write("\n")
            return

        writer = TabWriter(out)
        if with_headers:
            writer.write(header_string(template, name_limit))
            writer.write("\n")
        for record in iter_records(data):
            writer.write(template.execute(record))
            writer.write("\n")
        writer.flush()

    def execute_fixed_width(self, widths: Any, header: bool, data: Any = None) -> str:
        """Render a single row padded to fixed column widths.

        Used for streamed output, where column widths cannot be derived from
        the data because only one row is available at a time. The template is
        executed against ``widths`` (a value with the same field shape as the
        records, holding integer widths) so the width cells line up with the
        value cells when both are split on tabs.

        Args:
            widths: Widths descriptor
            header: Return the header row instead of rendering ``data``
            data: Record to render

        Returns:
            The row with trailing spaces removed, without a newline

        Raises:
            NotTabularError: If the format is not a table format
            ShapeMismatchError: If ``widths`` does not mirror the template
            WidthParseError: If a width cell is not an integer
            CellSplitError: If a value of ``data`` contains a tab
        """
        if not self.is_table:
            raise NotTabularError(self.text)

        template = self.compile()
        if header:
            tab_sep_output = header_string(template, FIXED_WIDTH_NAME_LIMIT)
        else:
            tab_sep_output = template.execute(data)

        try:
            tab_sep_widths = template.execute(widths, apply_funcs=False)
        except FieldResolutionError as exc:
            raise ShapeMismatchError(None, None, path=exc.path) from exc

        out_parts = tab_sep_output.split("\t")
        width_parts = tab_sep_widths.split("\t")
        if len(out_parts) != len(width_parts):
            if header or len(header_string(template).split("\t")) != len(width_parts):
                raise ShapeMismatchError(len(out_parts), len(width_parts))
            # Widths fit the format, so a value must have introduced the extra tab
            raise CellSplitError(
                _field_with_tab(template, data), len(out_parts), len(width_parts)
            )

        output = ""
        for out_part, width_part in zip(out_parts, width_parts, strict=True):
            output += trim_and_pad(out_part, _parse_width(width_part)) + " "
        return output.rstrip(" ")


def render(
    out: TextIO,
    fmt: str | Format,
    data: Any,
    *,
    with_headers: bool = True,
    name_limit: int = 0,
) -> None:
    """Render records to ``out`` with a format string."""
    if not isinstance(fmt, Format):
        fmt = Format(fmt)
    fmt.execute(out, with_headers, name_limit, data)


def render_fixed_width(
    fmt: str | Format, widths: Any, *, header: bool = False, data: Any = None
) -> str:
    """Render one fixed-width row (or the header row) with a format string."""
    if not isinstance(fmt, Format):
        fmt = Format(fmt)
    return fmt.execute_fixed_width(widths, header, data)
