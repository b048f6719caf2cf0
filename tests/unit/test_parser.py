"""Tests for the template parser: text, output tags, comments, errors."""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from rendergate.environment import ErrorCode, TemplateSyntaxError
from rendergate.nodes import (
    BinOp,
    CondExpr,
    Const,
    Data,
    Dict,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    Name,
    Output,
    UnaryOp,
)
from rendergate.parser import Parser

from ..strategies import identifier, plain_text


def _body(source: str) -> tuple:
    return tuple(Parser(source).parse().body)


def _expr(source: str):
    return Parser("{{ " + source + " }}").parse().body[0].expr


class TestStructure:
    def test_text_only(self) -> None:
        assert _body("Hello") == (Data(1, 0, "Hello"),)

    def test_empty_source(self) -> None:
        assert _body("") == ()

    def test_text_and_output(self) -> None:
        body = _body("Hello {{ name }}!")
        assert body[0] == Data(1, 0, "Hello ")
        assert body[1] == Output(1, 6, Name(1, 9, "name"))
        assert body[2] == Data(1, 16, "!")

    def test_comment_is_dropped(self) -> None:
        assert _body("a{# note #}b") == (Data(1, 0, "a"), Data(1, 11, "b"))

    def test_positions_across_lines(self) -> None:
        body = _body("line one\n  {{ x }}")
        assert body[1].lineno == 2
        assert body[1].col_offset == 2
        assert body[1].expr == Name(2, 5, "x")

    def test_single_braces_are_text(self) -> None:
        assert _body("a { b } c") == (Data(1, 0, "a { b } c"),)

    @given(text=plain_text)
    @settings(max_examples=200)
    def test_plain_text_is_one_data_node(self, text: str) -> None:
        assert _body(text) == (Data(1, 0, text),)

    @given(name=identifier)
    @settings(max_examples=200)
    def test_any_identifier_is_a_name(self, name: str) -> None:
        assert _expr(name).name == name


class TestExpressions:
    def test_constants(self) -> None:
        assert _expr('"x"').value == "x"
        assert _expr("-3").value == -3
        assert isinstance(_expr("-3"), Const)

    def test_attribute_and_subscript(self) -> None:
        expr = _expr('node.fields["title"]')
        assert isinstance(expr, Getitem)
        assert isinstance(expr.obj, Getattr)
        assert expr.obj.attr == "fields"

    def test_call_arguments(self) -> None:
        expr = _expr('path("foo", {"a": 1}, options=o, *rest, **kw)')
        assert isinstance(expr, FuncCall)
        assert expr.func == Name(1, 3, "path")
        assert len(expr.args) == 2
        assert isinstance(expr.args[1], Dict)
        assert set(expr.kwargs) == {"options"}
        assert expr.dyn_args.name == "rest"
        assert expr.dyn_kwargs.name == "kw"

    def test_dict_spread_has_none_key(self) -> None:
        expr = _expr('{"a": 1, **rest}')
        assert expr.keys[1] is None
        assert expr.values[1].name == "rest"

    def test_filter_chain(self) -> None:
        expr = _expr('title | escape("js") | upper')
        assert isinstance(expr, Filter)
        assert expr.name == "upper"
        assert expr.value.name == "escape"
        assert expr.value.args[0].value == "js"
        assert expr.value.value.name == "title"

    def test_operators(self) -> None:
        assert isinstance(_expr("a + 1"), BinOp)
        assert isinstance(_expr("not a"), UnaryOp)
        assert isinstance(_expr('"x" if a else "y"'), CondExpr)

    def test_closing_braces_inside_expression(self) -> None:
        expr = _expr('{"a": {"b": 1}}')
        assert isinstance(expr, Dict)
        assert _body('{{ "}}" }}tail')[-1] == Data(1, 10, "tail")


class TestErrors:
    def test_unclosed_output(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Parser("Hello {{ name", name="page.html").parse()
        assert exc_info.value.code is ErrorCode.UNCLOSED_TAG
        assert "page.html:1:6" in str(exc_info.value)

    def test_unclosed_comment(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Parser("{# never closed").parse()
        assert exc_info.value.code is ErrorCode.UNCLOSED_TAG

    def test_empty_expression(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="Empty expression"):
            Parser("{{ }}").parse()

    def test_invalid_expression(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Parser("{{ a + }}").parse()
        assert exc_info.value.code is ErrorCode.INVALID_EXPRESSION
        assert exc_info.value.format_compact().startswith("R-PAR-001: ")

    @pytest.mark.parametrize(
        "source",
        ["{{ items[1:2] }}", "{{ a == b }}", "{{ [x for x in y] }}", "{{ lambda: 1 }}"],
    )
    def test_unsupported_syntax(self, source: str) -> None:
        with pytest.raises(TemplateSyntaxError):
            Parser(source).parse()

    @pytest.mark.parametrize("source", ['{{ a | "x" }}', "{{ a | b.c }}", "{{ a | f(*xs) }}"])
    def test_invalid_filter(self, source: str) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Parser(source).parse()
        assert exc_info.value.code is ErrorCode.INVALID_FILTER

    def test_error_shows_source_line(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            Parser("ok\n{{ a + }}").parse()
        assert "  2 | {{ a + }}" in str(exc_info.value)
