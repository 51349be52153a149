"""ranctl exception classes."""

from __future__ import annotations


class RanCtlError(RuntimeError):
    """Base exception for ranctl errors."""


class UserError(RanCtlError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class FormatError(RanCtlError):
    """Base exception for output format (template) errors."""


class TemplateSyntaxError(FormatError):
    """Format string could not be compiled."""

    def __init__(self, fragment: str, reason: str):
        super().__init__(f"template: {reason}: {fragment!r}")
        self.fragment = fragment
        self.reason = reason


class TemplateExecutionError(FormatError):
    """Template failed while rendering a record."""


class FieldResolutionError(TemplateExecutionError):
    """A field path could not be resolved against a value."""

    def __init__(self, path: str, segment: str, value_type: str):
        super().__init__(f"can't evaluate field {segment} in type {value_type} (path .{path})")
        self.path = path
        self.segment = segment
        self.value_type = value_type


class NotTabularError(FormatError):
    """Fixed-width output was requested for a non-table format."""

    def __init__(self, fmt: str):
        super().__init__(f"fixed width is only available on table format: {fmt!r}")
        self.format = fmt


class ShapeMismatchError(FormatError):
    """Widths descriptor does not mirror the format's field paths."""

    def __init__(self, expected: int | None, actual: int | None, path: str | None = None):
        if path is not None:
            message = f"widths do not provide field .{path}"
        else:
            message = f"widths produced {actual} columns, expected {expected}"
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.path = path


class WidthParseError(FormatError):
    """A width cell is not an integer."""

    def __init__(self, cell: str):
        super().__init__(f"failed to parse width {cell!r}")
        self.cell = cell


class CellSplitError(TemplateExecutionError):
    """A rendered value contains a tab, so the row splits into extra cells."""

    def __init__(self, path: str | None, actual: int, expected: int):
        where = f"value of .{path}" if path is not None else "a rendered value"
        super().__init__(f"{where} contains a tab: row has {actual} cells, expected {expected}")
        self.path = path
        self.actual = actual
        self.expected = expected
