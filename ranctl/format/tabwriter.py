"""Elastic tab-stop column writer.

Text written to the writer is split into lines and tab-terminated cells.
Adjacent lines that share a column form a block; every cell in a block is
padded to the widest cell of that block plus ``padding``. The final cell of a
line is not tab-terminated and is written unpadded.

Lines are buffered until ``flush()``, or until a line with no tab at all is
completed, which closes every open column block.
"""

from __future__ import annotations

from typing import TextIO

from ..constants import TABWRITER_MIN_WIDTH, TABWRITER_PAD_CHAR, TABWRITER_PADDING


class TabWriter:
    """Buffers tab-separated text and writes it column-aligned to ``out``."""

    def __init__(
        self,
        out: TextIO,
        *,
        min_width: int = TABWRITER_MIN_WIDTH,
        padding: int = TABWRITER_PADDING,
        pad_char: str = TABWRITER_PAD_CHAR,
    ) -> None:
        self.out = out
        self.min_width = min_width
        self.padding = padding
        self.pad_char = pad_char
        self._lines: list[list[str]] = []
        self._partial = ""

    def write(self, text: str) -> int:
        """Buffer text; complete lines without a tab flush the buffer."""
        *complete, self._partial = (self._partial + text).split("\n")
        for line in complete:
            cells = line.split("\t")
            self._lines.append(cells)
            if len(cells) == 1:
                self._write_lines(newline_last=True)
        return len(text)

    def flush(self) -> None:
        """Write all buffered text, including an unterminated last line."""
        if self._partial:
            self._lines.append(self._partial.split("\t"))
            self._partial = ""
            self._write_lines(newline_last=False)
        else:
            self._write_lines(newline_last=True)

    def _column_widths(self) -> list[list[int]]:
        lines = self._lines
        widths = [[0] * (len(cells) - 1) for cells in lines]
        columns = max((len(cells) - 1 for cells in lines), default=0)
        for column in range(columns):
            row = 0
            while row < len(lines):
                if len(lines[row]) - 1 <= column:
                    row += 1
                    continue
                block_start = row
                width = self.min_width
                while row < len(lines) and len(lines[row]) - 1 > column:
                    width = max(width, len(lines[row][column]) + self.padding)
                    row += 1
                for block_row in range(block_start, row):
                    widths[block_row][column] = width
        return widths

    def _write_lines(self, *, newline_last: bool) -> None:
        if not self._lines:
            return
        widths = self._column_widths()
        last = len(self._lines) - 1
        for index, (cells, line_widths) in enumerate(zip(self._lines, widths, strict=True)):
            parts = [
                cell + self.pad_char * (width - len(cell))
                for cell, width in zip(cells, line_widths, strict=False)
            ]
            parts.append(cells[-1])
            self.out.write("".join(parts))
            if index < last or newline_last:
                self.out.write("\n")
        self._lines = []
