"""Literalness analysis for template expressions.

An expression is *literal* when its value is fully determined by the
template source: constants, and list/tuple/dict displays built only from
constants at every depth. Anything that reads template data (names,
attribute access, calls, filters, operators, ``**`` spreads) is *dynamic*.

Lattice: literal < dynamic. Combining takes the worst case, so a single
dynamic element anywhere makes the whole composite dynamic.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rendergate.nodes import Node


class Literalness(Enum):
    LITERAL = "literal"
    DYNAMIC = "dynamic"


def combine_literalness(a: Literalness, b: Literalness) -> Literalness:
    """Combine two levels (take worst case)."""
    if a is Literalness.DYNAMIC or b is Literalness.DYNAMIC:
        return Literalness.DYNAMIC
    return Literalness.LITERAL


def _combine_all(nodes: Iterable[Node | None]) -> Literalness:
    result = Literalness.LITERAL
    for node in nodes:
        result = combine_literalness(result, literalness(node))
        if result is Literalness.DYNAMIC:
            break
    return result


def literalness(node: Node | None) -> Literalness:
    """Tag an expression node as literal or dynamic.

    ``None`` stands for a missing dict key, i.e. a ``**spread`` entry,
    and is dynamic.

    Example:
        >>> literalness(Parser('{{ {"a": [1, 2]} }}').parse().body[0].expr)
        <Literalness.LITERAL: 'literal'>
    """
    if node is None:
        return Literalness.DYNAMIC

    node_type = type(node).__name__
    if node_type == "Const":
        return Literalness.LITERAL
    if node_type in ("List", "Tuple"):
        return _combine_all(node.items)  # type: ignore[attr-defined]
    if node_type == "Dict":
        return combine_literalness(
            _combine_all(node.keys),  # type: ignore[attr-defined]
            _combine_all(node.values),  # type: ignore[attr-defined]
        )
    return Literalness.DYNAMIC


def is_literal(node: Node | None) -> bool:
    return literalness(node) is Literalness.LITERAL
