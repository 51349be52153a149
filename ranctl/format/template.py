"""Format template compiler.

Templates use Go-style actions inside ``{{ }}``:

    table{{.ID}}\t{{.Status.State}}\t{{timestamp .Created}}\t{{.Updated | since}}

An action is a pipeline of commands separated by ``|``. A command is either a
single operand (a field path such as ``.Status.State``, the record itself
``.``, a quoted string or a number) or a helper function followed by operand
arguments. The value of a pipeline stage becomes the last argument of the
next stage. ``{{-`` and ``-}}`` trim surrounding whitespace and
``{{/* ... */}}`` is a comment. There is no control flow.

Templates are compiled with Jinja2: its lexer splits the text into data and
actions, each action is rewritten as a Jinja expression on the record ``r``
(``{{timestamp .Created}}`` becomes ``(r.Created)|timestamp``) and the
resulting node tree is compiled by the environment. Helpers are registered
as filters.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError, UndefinedError, nodes
from jinja2 import TemplateSyntaxError as JinjaSyntaxError
from jinja2.runtime import Undefined

from ..constants import NIL_TEXT
from ..exceptions import (
    FieldResolutionError,
    FormatError,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from .funcs import DEFAULT_FUNCS
from .resolver import MISSING, lookup_field, resolve_path

# Name the record is bound to inside compiled templates
RECORD_NAME = "r"

_KEYWORDS = frozenset(
    {"if", "else", "end", "range", "with", "define", "template", "block", "break", "continue"}
)
_BOOL_LITERALS = {"true": "true", "false": "false"}


@dataclass(frozen=True)
class FieldPath:
    """Dotted sequence of field names, e.g. ``Status.State``."""

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("FieldPath requires at least one segment")

    def __str__(self) -> str:
        return ".".join(self.segments)


def to_text(value: Any) -> str:
    """Return the text substituted for an action value."""
    if value is None:
        return NIL_TEXT
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


class FormatEnvironment(Environment):
    """Jinja environment with Go template delimiters and record field lookup.

    Only ``{{`` opens a tag: blocks use ``{{% %}}`` (never valid in a
    format) and comments use Go's ``{{/* */}}``.
    """

    def __init__(self, funcs: Mapping[str, Callable[..., Any]]) -> None:
        super().__init__(
            block_start_string="{{%",
            block_end_string="%}}",
            comment_start_string="{{/*",
            comment_end_string="*/}}",
            keep_trailing_newline=True,
            autoescape=False,
            undefined=StrictUndefined,
            finalize=to_text,
        )
        for name, func in funcs.items():
            self.filters[name] = _pipeline_call(name, func)

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Undefined):
            return obj
        found = lookup_field(obj, attribute)
        if found is MISSING:
            return self.undefined(obj=obj, name=attribute)
        return found


def _pipeline_call(name: str, func: Callable[..., Any]) -> Callable[..., Any]:
    """Adapt a helper to a filter: the piped value is passed as the last argument."""

    def call(value: Any, *args: Any) -> Any:
        try:
            return func(*args, value)
        except (UndefinedError, FormatError):
            raise
        except Exception as exc:
            raise TemplateExecutionError(f"error calling {name}: {exc}") from exc

    return call


def iter_field_paths(node: nodes.Node) -> Iterator[FieldPath]:
    """Yield each ``r.A.B`` chain under ``node`` in evaluation order."""
    if isinstance(node, nodes.Getattr):
        segments = []
        current: nodes.Node = node
        while isinstance(current, nodes.Getattr):
            segments.append(current.attr)
            current = current.node
        if isinstance(current, nodes.Name) and current.name == RECORD_NAME:
            yield FieldPath(tuple(reversed(segments)))
            return
    for child in node.iter_child_nodes():
        yield from iter_field_paths(child)


def column_path(node: nodes.Node) -> FieldPath | None:
    """Return the field an action's column is named after.

    This is the first field the action reads, i.e. the value its pipeline
    starts from. ``(r.Created)|timestamp`` -> ``Created``.
    """
    if isinstance(node, nodes.TemplateData):
        return None
    return next(iter_field_paths(node), None)


class CompiledTemplate:
    """Parsed format template, executable against any record shape.

    ``nodes`` holds the top-level output nodes in order: ``TemplateData`` for
    literal text and one expression node per action.
    """

    def __init__(
        self,
        source: str,
        output: tuple[nodes.Node, ...],
        template: Template,
        raw_template: Template,
    ) -> None:
        self.source = source
        self.nodes = output
        self._template = template
        self._raw_template = raw_template

    def __repr__(self) -> str:
        return f"CompiledTemplate({self.source!r})"

    def field_paths(self) -> list[FieldPath]:
        """Return the column field path of each action that has one, in order."""
        paths = (column_path(node) for node in self.nodes)
        return [path for path in paths if path is not None]

    def execute(self, data: Any, *, apply_funcs: bool = True) -> str:
        """Render the template against a value.

        Args:
            data: Record (or widths descriptor) to resolve field paths against
            apply_funcs: When False, actions that reference a field render the
                raw value of their column field instead of calling helpers

        Raises:
            FieldResolutionError: If a field path does not resolve
            TemplateExecutionError: If a helper function rejects its input
        """
        template = self._template if apply_funcs else self._raw_template
        try:
            return template.render({RECORD_NAME: data})
        except UndefinedError as exc:
            raise self._resolution_error(data, apply_funcs, exc) from exc
        except FormatError:
            raise
        except Exception as exc:
            raise TemplateExecutionError(f"error executing {self.source!r}: {exc}") from exc

    def _resolution_error(
        self, data: Any, apply_funcs: bool, exc: UndefinedError
    ) -> TemplateExecutionError:
        if apply_funcs:
            paths = [path for node in self.nodes for path in iter_field_paths(node)]
        else:
            paths = self.field_paths()
        for path in paths:
            try:
                resolve_path(data, path.segments)
            except FieldResolutionError as err:
                return err
        return TemplateExecutionError(str(exc))


@dataclass
class _Action:
    source: str
    tokens: list[tuple[str, str]]


def _split_source(text: str, env: Environment) -> list[str | _Action]:
    """Split a template into literal text and actions using the Jinja lexer.

    Trim markers are applied by the lexer; comments are dropped.
    """
    parts: list[str | _Action] = []
    action: _Action | None = None
    try:
        for _lineno, kind, value in env.lex(text):
            if action is not None:
                action.source += value
                if kind == "variable_end":
                    action.source = action.source.strip()
                    parts.append(action)
                    action = None
                else:
                    action.tokens.append((kind, value))
            elif kind == "data":
                if parts and isinstance(parts[-1], str):
                    parts[-1] += value
                else:
                    parts.append(value)
            elif kind == "variable_begin":
                action = _Action(value.strip(), [])
            elif not kind.startswith("comment"):
                raise TemplateSyntaxError(text, f"unexpected {value.strip()!r}")
    except JinjaSyntaxError as exc:
        raise TemplateSyntaxError(text, exc.message or "invalid template") from exc
    if action is not None:
        raise TemplateSyntaxError(action.source, "unclosed action")
    return parts


def _stages(action: _Action) -> list[list[tuple[str, str]]]:
    """Group an action's tokens into pipeline stages of operands."""
    tokens = action.tokens
    stages: list[list[tuple[str, str]]] = [[]]
    i = 0
    while i < len(tokens):
        kind, value = tokens[i]
        nxt = tokens[i + 1] if i + 1 < len(tokens) else ("", "")
        if kind == "whitespace":
            i += 1
        elif kind == "operator" and value == "|":
            stages.append([])
            i += 1
        elif kind == "operator" and value == "." and nxt[0] == "name":
            segments = []
            while tokens[i] == ("operator", ".") and tokens[i + 1][0] == "name":
                segments.append(tokens[i + 1][1])
                i += 2
                if i + 1 >= len(tokens):
                    break
            stages[-1].append(("field", f"{RECORD_NAME}.{'.'.join(segments)}"))
        elif kind == "operator" and value == ".":
            stages[-1].append(("dot", RECORD_NAME))
            i += 1
        elif kind == "operator" and value in ("+", "-") and nxt[0] in ("integer", "float"):
            stages[-1].append(("number", value + nxt[1]))
            i += 2
        elif kind in ("integer", "float"):
            stages[-1].append(("number", value))
            i += 1
        elif kind == "string" and value.startswith('"'):
            stages[-1].append(("string", value))
            i += 1
        elif kind == "name":
            stages[-1].append(("name", value))
            i += 1
        else:
            raise TemplateSyntaxError(action.source, f"unexpected {value!r} in command")
    return stages


def _translate(action: _Action, funcs: Mapping[str, Callable[..., Any]]) -> str:
    """Rewrite a Go-style action as a Jinja expression on the record."""
    stages = _stages(action)
    if stages == [[]]:
        raise TemplateSyntaxError(action.source, "missing value for command")

    expr: str | None = None
    for index, stage in enumerate(stages):
        if not stage:
            raise TemplateSyntaxError(action.source, "missing command in pipeline")
        kind, text = stage[0]
        if kind == "name" and text not in _BOOL_LITERALS:
            if text in _KEYWORDS:
                raise TemplateSyntaxError(action.source, f"unsupported keyword {text!r}")
            if text not in funcs:
                raise TemplateSyntaxError(action.source, f'function "{text}" not defined')
            args = []
            for arg_kind, arg_text in stage[1:]:
                if arg_kind == "name" and arg_text not in _BOOL_LITERALS:
                    raise TemplateSyntaxError(action.source, f"unexpected {arg_text!r} in operand")
                args.append(_BOOL_LITERALS.get(arg_text, arg_text))
            if expr is None:
                if not args:
                    raise TemplateSyntaxError(action.source, f"missing argument for {text}")
                expr = args.pop()
            call = f"{text}({', '.join(args)})" if args else text
            expr = f"({expr})|{call}"
            continue
        if len(stage) > 1:
            raise TemplateSyntaxError(
                action.source, f"can't give argument to non-function {text}"
            )
        if index > 0:
            raise TemplateSyntaxError(
                action.source, f"non executable command in pipeline stage {index + 1}"
            )
        expr = _BOOL_LITERALS.get(text, text)
    return expr


def _parse_expression(expr: str, source: str, env: Environment) -> nodes.Node:
    try:
        parsed = env.parse(f"{{{{ {expr} }}}}")
    except TemplateError as exc:
        raise TemplateSyntaxError(source, getattr(exc, "message", None) or str(exc)) from exc
    return parsed.body[0].nodes[0]


def _build(env: Environment, output: list[nodes.Node]) -> Template:
    body = [nodes.Output(output, lineno=1)] if output else []
    tree = nodes.Template(body, lineno=1)
    tree.set_environment(env)
    return env.from_string(tree)


def compile_template(
    text: str, funcs: Mapping[str, Callable[..., Any]] = DEFAULT_FUNCS
) -> CompiledTemplate:
    """Compile a format string (table prefix already stripped).

    Args:
        text: Template text
        funcs: Helper functions callable from actions

    Raises:
        TemplateSyntaxError: If the template is malformed
    """
    env = FormatEnvironment(funcs)
    output: list[nodes.Node] = []
    raw_output: list[nodes.Node] = []
    for part in _split_source(text, env):
        if isinstance(part, str):
            output.append(nodes.TemplateData(part, lineno=1))
            raw_output.append(nodes.TemplateData(part, lineno=1))
            continue
        expr = _translate(part, funcs)
        node = _parse_expression(expr, part.source, env)
        output.append(node)
        # Without helpers an action renders its column field as is
        path = column_path(node)
        raw_expr = f"{RECORD_NAME}.{path}" if path is not None else expr
        raw_output.append(_parse_expression(raw_expr, part.source, env))

    try:
        template = _build(env, output)
        raw_template = _build(env, raw_output)
    except TemplateError as exc:
        raise TemplateSyntaxError(text, getattr(exc, "message", None) or str(exc)) from exc
    return CompiledTemplate(text, tuple(output), template, raw_template)
