"""Tests for the url()/path() call-site safety classifier.

A call is safe to print unescaped only when its route parameters are
absent or written out literally; anything that reads template data, and
anything the classifier does not recognize, goes through the escape gate.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from rendergate import Environment, RenderExtension, Renderer
from rendergate.analysis import is_url_generation_safe
from rendergate.analysis.url_safety import SAFE, UNSAFE
from rendergate.nodes import Const, FuncCall, Name
from rendergate.parser import Parser

from ..conftest import RecordingUrlGenerator
from ..strategies import dynamic_expression, literal_expression


def _call(source: str) -> FuncCall:
    """Parse ``{{ source }}`` and return the expression node."""
    return Parser("{{ " + source + " }}").parse().body[0].expr


class TestClassification:
    """Verdicts for the call shapes templates actually use."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ('path("foo")', SAFE),
            ('path("foo", {})', SAFE),
            ('path("foo", {"foo": "bar"})', SAFE),
            ('path("foo", {"foo": "bar", "page": 2})', SAFE),
            ('path("foo", {"foo": ["a", {"b": 1}]})', SAFE),
            ('path("foo", ["a", "b"])', SAFE),
            ('path("foo", ("a", 1))', SAFE),
            ('path("foo", parameters={"a": 1})', SAFE),
            ('url("foo", {"foo": "bar"}, {"absolute": True})', SAFE),
            ('url("foo", {"foo": "bar"}, options)', SAFE),
            ('path("foo", {"foo": foo})', UNSAFE),
            ('path("foo", {"foo": ["a", {"b": b}]})', UNSAFE),
            ('path("foo", {foo: "bar"})', UNSAFE),
            ('path("foo", {"foo": node.id})', UNSAFE),
            ('path("foo", {"foo": "bar"|upper})', UNSAFE),
            ('path("foo", {"a": 1, **extra})', UNSAFE),
            ('path("foo", foo)', UNSAFE),
            ('path("foo", "bar")', UNSAFE),
            ('path("foo", 1)', UNSAFE),
            ('path("foo", params.all)', UNSAFE),
            ('path("foo", {"a": 1}, parameters={"b": 2})', UNSAFE),
            ('path("foo", *args)', UNSAFE),
            ('path("foo", **kwargs)', UNSAFE),
            ('path("foo", {"a": 1}, **kwargs)', UNSAFE),
        ],
    )
    def test_verdict(self, source: str, expected: frozenset[str]) -> None:
        assert is_url_generation_safe(_call(source)) == expected

    def test_route_name_does_not_matter(self) -> None:
        """Only the parameters decide; a dynamic route name is still safe."""
        assert is_url_generation_safe(_call("path(route)")) == SAFE

    def test_unrecognized_node_is_unsafe(self) -> None:
        """Shapes the classifier cannot inspect are never trusted."""
        assert is_url_generation_safe(Name(1, 0, "path")) == UNSAFE
        assert is_url_generation_safe(Const(1, 0, "x")) == UNSAFE

    def test_never_raises_on_malformed_call(self) -> None:
        malformed = FuncCall(1, 0, Name(1, 0, "path"), args=None)  # type: ignore[arg-type]
        assert is_url_generation_safe(malformed) == UNSAFE


class TestClassificationProperties:
    """The verdict follows literalness of the parameters at any depth."""

    @given(parameters=literal_expression)
    @settings(max_examples=200)
    def test_literal_composites_are_safe(self, parameters: str) -> None:
        call = _call(f'path("route", {parameters})')
        expected = SAFE if parameters[0] in "[({" else UNSAFE
        assert is_url_generation_safe(call) == expected

    @given(parameters=dynamic_expression)
    @settings(max_examples=200)
    def test_any_variable_makes_call_unsafe(self, parameters: str) -> None:
        call = _call(f'path("route", {parameters})')
        assert is_url_generation_safe(call) == UNSAFE


class TestCompiledEscaping:
    """The verdict decides whether the generated URL is escaped on output."""

    @pytest.fixture
    def env(self) -> Environment:
        extension = RenderExtension(Renderer()).set_url_generator(RecordingUrlGenerator())
        return Environment(extensions=[extension])

    def test_literal_parameters_print_raw(self, env: Environment) -> None:
        html = env.from_string('{{ path("search", {"q": "a", "page": 2}) }}').render()
        assert html == "/search?q=a&page=2"

    def test_dynamic_parameters_are_escaped(self, env: Environment) -> None:
        html = env.from_string('{{ path("search", {"q": q, "page": 2}) }}').render(q="a")
        assert html == "/search?q=a&amp;page=2"

    def test_absolute_url(self, env: Environment) -> None:
        html = env.from_string('{{ url("front") }}').render()
        assert html == "http://example.com/front"
