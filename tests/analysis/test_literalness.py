"""Tests for the literal/dynamic lattice over expression nodes."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rendergate.analysis import Literalness, literalness
from rendergate.analysis.literalness import combine_literalness, is_literal
from rendergate.nodes import Expr
from rendergate.parser import Parser

from ..strategies import dynamic_expression, literal_expression

LITERAL = Literalness.LITERAL
DYNAMIC = Literalness.DYNAMIC


def _expr(source: str) -> Expr:
    return Parser("{{ " + source + " }}").parse().body[0].expr


class TestCombine:
    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            (LITERAL, LITERAL, LITERAL),
            (LITERAL, DYNAMIC, DYNAMIC),
            (DYNAMIC, LITERAL, DYNAMIC),
            (DYNAMIC, DYNAMIC, DYNAMIC),
        ],
    )
    def test_worst_case_wins(self, a: Literalness, b: Literalness, expected: Literalness) -> None:
        assert combine_literalness(a, b) is expected

    @given(
        a=st.sampled_from(list(Literalness)),
        b=st.sampled_from(list(Literalness)),
        c=st.sampled_from(list(Literalness)),
    )
    @settings(max_examples=50)
    def test_associative_and_commutative(
        self, a: Literalness, b: Literalness, c: Literalness
    ) -> None:
        assert combine_literalness(a, b) is combine_literalness(b, a)
        assert combine_literalness(combine_literalness(a, b), c) is combine_literalness(
            a, combine_literalness(b, c)
        )


class TestLiteralness:
    @pytest.mark.parametrize(
        "source",
        [
            '"text"',
            "42",
            "-1.5",
            "True",
            "None",
            "[]",
            "{}",
            '["a", 1, None]',
            '("a", ("b", 2))',
            '{"a": {"b": [1, 2, {"c": "d"}]}}',
        ],
    )
    def test_literal(self, source: str) -> None:
        assert literalness(_expr(source)) is LITERAL

    @pytest.mark.parametrize(
        "source",
        [
            "name",
            "node.id",
            "items[0]",
            "f()",
            '"a" + "b"',
            '"a"|upper',
            "-x",
            "not True",
            '"a" if x else "b"',
            "[1, x]",
            '{"a": [1, {"b": x}]}',
            '{x: "y"}',
            '{"a": 1, **rest}',
        ],
    )
    def test_dynamic(self, source: str) -> None:
        assert literalness(_expr(source)) is DYNAMIC

    def test_missing_node_is_dynamic(self) -> None:
        assert literalness(None) is DYNAMIC
        assert not is_literal(None)


class TestLiteralnessProperties:
    @given(source=literal_expression)
    @settings(max_examples=200)
    def test_literal_sources_are_literal(self, source: str) -> None:
        assert is_literal(_expr(source))

    @given(source=dynamic_expression)
    @settings(max_examples=200)
    def test_one_variable_anywhere_is_dynamic(self, source: str) -> None:
        assert not is_literal(_expr(source))
