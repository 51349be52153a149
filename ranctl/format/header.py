"""Column header synthesis from a compiled template."""

from __future__ import annotations

from jinja2 import nodes

from .template import CompiledTemplate, FieldPath, column_path


def column_name(path: FieldPath, name_limit: int = 0) -> str:
    """Return the upper-cased column name for a field path.

    Only the last ``name_limit`` segments are kept when ``name_limit > 0``.

    Example: Status.Detail.Code -> "CODE" (limit 1), "STATUS.DETAIL.CODE" (limit 0)
    """
    segments = path.segments
    if name_limit > 0:
        segments = segments[-name_limit:]
    return ".".join(segments).upper()


def header_string(template: CompiledTemplate, name_limit: int = 0) -> str:
    """Build a header line by replacing each action with its column name.

    Literal text (tabs, punctuation) is kept verbatim. Actions that read no
    field contribute nothing.
    """
    header = ""
    for node in template.nodes:
        if isinstance(node, nodes.TemplateData):
            header += node.data
            continue
        path = column_path(node)
        if path is not None:
            header += column_name(path, name_limit)
    return header
