"""Template-driven rendering of records as tables or free-form text."""

from __future__ import annotations

from .formatter import (
    Format,
    iter_records,
    render,
    render_fixed_width,
    trim_and_pad,
)
from .funcs import DEFAULT_FUNCS
from .header import column_name, header_string
from .resolver import FieldResolver, resolve_path
from .tabwriter import TabWriter
from .template import CompiledTemplate, FieldPath, compile_template

__all__ = [
    "DEFAULT_FUNCS",
    "CompiledTemplate",
    "FieldPath",
    "FieldResolver",
    "Format",
    "TabWriter",
    "column_name",
    "compile_template",
    "header_string",
    "iter_records",
    "render",
    "render_fixed_width",
    "resolve_path",
    "trim_and_pad",
]
