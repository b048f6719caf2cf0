"""Output and structure nodes for the rendergate template AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rendergate.nodes.base import Node
from rendergate.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Output expression: {{ expr }}"""

    expr: Expr


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Raw text data between template constructs."""

    value: str


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node representing a complete template."""

    body: Sequence[Node]
