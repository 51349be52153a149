"""Tests for ranctl/format/template.py - template compilation and execution."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import pytest
from jinja2 import nodes
from ranctl.exceptions import (
    FieldResolutionError,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from ranctl.format.funcs import DEFAULT_FUNCS
from ranctl.format.template import FieldPath, column_path, compile_template, to_text


class State(enum.Enum):
    UP = 1
    DOWN = 2


@dataclass
class Status:
    state: State
    detail: str | None = None


@dataclass
class Node:
    id: str
    status: Status


class TestCompile:
    """Tests for parsing templates into nodes."""

    def test_text_and_actions(self):
        """Tabs between actions become text nodes."""
        tmpl = compile_template("{{.ID}}\t{{.Status}}")
        assert len(tmpl.nodes) == 3
        assert isinstance(tmpl.nodes[1], nodes.TemplateData)
        assert tmpl.nodes[1].data == "\t"

    def test_plain_text(self):
        """A template without actions is a single text node."""
        tmpl = compile_template("hello")
        assert len(tmpl.nodes) == 1
        assert tmpl.nodes[0].data == "hello"

    def test_empty_template(self):
        """An empty template has no nodes and renders nothing."""
        tmpl = compile_template("")
        assert tmpl.nodes == ()
        assert tmpl.execute({"ID": "x"}) == ""

    def test_field_paths(self):
        """field_paths lists the path referenced by each action."""
        tmpl = compile_template("{{.ID}}\t{{timestamp .Meta.Created}}\t{{.}}")
        assert tmpl.field_paths() == [FieldPath(("ID",)), FieldPath(("Meta", "Created"))]

    def test_column_path_is_pipeline_input(self):
        """An action's column is the field its pipeline starts from."""
        tmpl = compile_template("{{.Created | timestamp}}\t{{since .Updated}}")
        assert column_path(tmpl.nodes[0]) == FieldPath(("Created",))
        assert column_path(tmpl.nodes[2]) == FieldPath(("Updated",))

    def test_field_path_requires_segments(self):
        """FieldPath cannot be empty."""
        with pytest.raises(ValueError):
            FieldPath(())

    def test_field_path_str(self):
        """FieldPath renders as its dotted form."""
        assert str(FieldPath(("Status", "State"))) == "Status.State"

    def test_trim_markers(self):
        """{{- and -}} strip whitespace around the action."""
        tmpl = compile_template("a  {{- .ID -}}  b")
        assert tmpl.execute({"ID": "x"}) == "axb"

    def test_negative_number_is_not_trim_marker(self):
        """A minus sign after whitespace is part of a number."""
        tmpl = compile_template("a {{ -3 }}")
        assert tmpl.execute({}) == "a -3"

    def test_comment_is_dropped(self):
        """Comments produce no output."""
        tmpl = compile_template("a{{/* note */}}b")
        assert tmpl.execute({}) == "ab"

    def test_delimiter_inside_string(self):
        """A closing delimiter inside a quoted string does not end the action."""
        tmpl = compile_template('{{"}}"}}!')
        assert tmpl.execute({}) == "}}!"


class TestCompileErrors:
    """Tests for malformed templates."""

    @pytest.mark.parametrize(
        "text",
        [
            "{{.ID",
            "{{}}",
            "{{   }}",
            "{{nope .ID}}",
            "{{if .ID}}x{{end}}",
            "{{.A .B}}",
            "{{.A | .B}}",
            "{{.A | }}",
            "{{.A @}}",
            '{{"abc}}',
            "{{/* open }}",
            "{{`raw`}}",
            "{{'c'}}",
            "a {{% if x %}} b",
            "{{ (.A) }}",
        ],
    )
    def test_syntax_errors(self, text: str):
        """Malformed templates raise TemplateSyntaxError."""
        with pytest.raises(TemplateSyntaxError):
            compile_template(text)

    def test_unknown_function_reports_fragment(self):
        """The error carries the offending action."""
        with pytest.raises(TemplateSyntaxError) as excinfo:
            compile_template("{{.ID}}\t{{nope .ID}}")
        assert excinfo.value.fragment == "{{nope .ID}}"
        assert "nope" in str(excinfo.value)

    def test_unclosed_action_reports_rest(self):
        """An unclosed action reports the text from the opening delimiter."""
        with pytest.raises(TemplateSyntaxError) as excinfo:
            compile_template("ok {{.ID")
        assert excinfo.value.fragment == "{{.ID"
        assert excinfo.value.reason == "unclosed action"


class TestExecute:
    """Tests for executing compiled templates."""

    def test_mapping_record(self):
        tmpl = compile_template("{{.ID}}\t{{.Status}}")
        assert tmpl.execute({"ID": "a", "Status": "up"}) == "a\tup"

    def test_nested_path(self):
        tmpl = compile_template("{{.Status.State}}")
        assert tmpl.execute({"Status": {"State": "ACTIVE"}}) == "ACTIVE"

    def test_object_record_snake_case(self):
        """Go-style field names resolve against snake_case attributes."""
        tmpl = compile_template("{{.ID}} {{.Status.State}} {{.Status.Detail}}")
        record = Node(id="n1", status=Status(state=State.UP))
        assert tmpl.execute(record) == "n1 UP <nil>"

    def test_dot_renders_record(self):
        tmpl = compile_template("[{{.}}]")
        assert tmpl.execute("x") == "[x]"

    def test_literals(self):
        tmpl = compile_template('{{"hi"}} {{"a\\tb"}} {{42}} {{1.5}} {{2.0}} {{true}}')
        assert tmpl.execute({}) == "hi a\tb 42 1.5 2 true"

    def test_function_call_forms(self):
        """A helper can take its argument directly or from a pipeline."""
        record = {"Created": "2024-01-02T03:04:05.678Z"}
        direct = compile_template("{{timestamp .Created}}")
        piped = compile_template("{{.Created | timestamp}}")
        assert direct.execute(record) == "2024-01-02T03:04:05Z"
        assert piped.execute(record) == "2024-01-02T03:04:05Z"

    def test_custom_funcs(self):
        """An explicit function mapping replaces the default helpers."""
        tmpl = compile_template("{{upper .Name}}", funcs={"upper": str.upper})
        assert tmpl.execute({"Name": "cell"}) == "CELL"

    def test_custom_funcs_exclude_defaults(self):
        with pytest.raises(TemplateSyntaxError):
            compile_template("{{timestamp .X}}", funcs={"upper": str.upper})

    def test_missing_field(self):
        """Unresolved paths raise FieldResolutionError with the full path."""
        tmpl = compile_template("{{.Status.State}}")
        with pytest.raises(FieldResolutionError) as excinfo:
            tmpl.execute({"Status": {}})
        assert excinfo.value.path == "Status.State"
        assert excinfo.value.segment == "State"
        assert excinfo.value.value_type == "dict"

    def test_helper_domain_error(self):
        """A helper rejecting its input raises TemplateExecutionError."""
        tmpl = compile_template("{{timestamp .Created}}")
        with pytest.raises(TemplateExecutionError) as excinfo:
            tmpl.execute({"Created": "not a time"})
        assert "timestamp" in str(excinfo.value)

    def test_helper_wrong_arity(self):
        tmpl = compile_template('{{.Created | timestamp "extra"}}')
        with pytest.raises(TemplateExecutionError):
            tmpl.execute({"Created": "2024-01-02T03:04:05Z"})

    def test_pipeline_value_is_last_argument(self):
        """A piped value is appended after the explicit arguments."""
        funcs = {"join": lambda sep, value: f"{value}{sep}"}
        record = {"Name": "cell"}
        assert compile_template('{{join "!" .Name}}', funcs).execute(record) == "cell!"
        assert compile_template('{{.Name | join "!"}}', funcs).execute(record) == "cell!"

    def test_helper_unexpected_exception(self):
        """Any exception raised by a helper becomes TemplateExecutionError."""

        def lookup(value):
            return {"a": 1}[value]

        tmpl = compile_template("{{lookup .Key}}", funcs={"lookup": lookup})
        with pytest.raises(TemplateExecutionError, match="error calling lookup"):
            tmpl.execute({"Key": "missing"})

    def test_timestamp_object_failure(self):
        class BrokenTimestamp:
            seconds = 5
            nanos = 0

            def ToDatetime(self):  # noqa: N802
                raise RuntimeError("corrupt message")

        tmpl = compile_template("{{timestamp .Created}}")
        with pytest.raises(TemplateExecutionError, match="corrupt message"):
            tmpl.execute({"Created": BrokenTimestamp()})

    def test_missing_field_inside_helper(self):
        tmpl = compile_template("{{timestamp .Meta.Created}}")
        with pytest.raises(FieldResolutionError) as excinfo:
            tmpl.execute({"Meta": {}})
        assert excinfo.value.path == "Meta.Created"

    def test_nil_parent(self):
        tmpl = compile_template("{{.Status.State}}")
        with pytest.raises(FieldResolutionError) as excinfo:
            tmpl.execute({"Status": None})
        assert excinfo.value.value_type == "<nil>"

    def test_apply_funcs_false_renders_raw_field(self):
        """Without helpers, actions render the field they close over."""
        tmpl = compile_template("{{timestamp .Created}}\t{{.Updated | since}}")
        assert tmpl.execute({"Created": 20, "Updated": 13}, apply_funcs=False) == "20\t13"

    def test_execute_is_repeatable(self):
        tmpl = compile_template("{{.ID}}")
        assert tmpl.execute({"ID": "a"}) == tmpl.execute({"ID": "a"})


class TestToText:
    """Tests for natural text rendering of action values."""

    def test_none(self):
        assert to_text(None) == "<nil>"

    def test_bool(self):
        assert to_text(True) == "true"
        assert to_text(False) == "false"

    def test_enum(self):
        assert to_text(State.DOWN) == "DOWN"

    def test_numbers(self):
        assert to_text(3) == "3"
        assert to_text(2.5) == "2.5"

    def test_integral_floats(self):
        assert to_text(1.0) == "1"
        assert to_text(-4.0) == "-4"
        assert to_text(1e20) == "100000000000000000000"
        assert to_text(1e21) == "1e+21"


def test_default_funcs_are_read_only():
    """The default helper registry cannot be modified."""
    with pytest.raises(TypeError):
        DEFAULT_FUNCS["extra"] = str  # type: ignore[index]
    assert set(DEFAULT_FUNCS) == {"timestamp", "since"}
