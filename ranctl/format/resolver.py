"""Dotted field-path resolution against arbitrary record values."""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

from ..exceptions import FieldResolutionError

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@runtime_checkable
class FieldResolver(Protocol):
    """Protocol for values that resolve their own fields.

    ``resolve_field`` returns the named field's value, or raises KeyError or
    AttributeError when the field does not exist.
    """

    def resolve_field(self, name: str) -> Any: ...


@lru_cache(maxsize=256)
def field_name_candidates(name: str) -> tuple[str, ...]:
    """Return the spellings tried for a template field name, in order.

    Template fields are written Go-style (``CreatedAt``, ``ID``); records
    coming from JSON use lowerCamel and Python objects use snake_case.

    Example: "CreatedAt" -> ("CreatedAt", "created_at", "createdAt")
    """
    snake = _CAMEL_BOUNDARY_RE.sub("_", name).lower()
    lower_camel = name.lower() if name.isupper() else name[:1].lower() + name[1:]
    candidates: list[str] = []
    for candidate in (name, snake, lower_camel):
        if candidate not in candidates:
            candidates.append(candidate)
    return tuple(candidates)


MISSING = object()


def lookup_field(value: Any, name: str) -> Any:
    """Return the field ``name`` of ``value``, or MISSING if it has none."""
    if isinstance(value, FieldResolver):
        try:
            return value.resolve_field(name)
        except (KeyError, AttributeError):
            return MISSING
    for candidate in field_name_candidates(name):
        if isinstance(value, Mapping):
            if candidate in value:
                return value[candidate]
        elif not candidate.startswith("_"):
            found = getattr(value, candidate, MISSING)
            if found is not MISSING:
                return found
    return MISSING


def resolve_path(value: Any, path: tuple[str, ...] | list[str]) -> Any:
    """Resolve a field path against a value.

    Args:
        value: Record (mapping, object, or FieldResolver)
        path: Field names from outermost to innermost

    Returns:
        The resolved leaf value

    Raises:
        FieldResolutionError: If any segment is missing or a parent is None
    """
    current = value
    for segment in path:
        if current is None:
            raise FieldResolutionError(".".join(path), segment, "<nil>")
        found = lookup_field(current, segment)
        if found is MISSING:
            raise FieldResolutionError(".".join(path), segment, type(current).__name__)
        current = found
    return current
