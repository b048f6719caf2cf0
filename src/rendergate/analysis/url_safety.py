"""Compile-time escape decision for URL-generating function calls.

``url()`` and ``path()`` return strings built by the URL generator. When
every route parameter is written out literally in the template, nothing
user-controlled can reach the output and the call is safe to print
unescaped. As soon as any parameter comes from template data, the
output must go through the escape gate.

Verdicts:
    frozenset({"html"})   parameters absent, or a literal composite
    frozenset()           everything else (escape)

The classifier inspects syntax only. It never evaluates, never escapes,
and never raises: a shape it does not recognize is classified unsafe.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rendergate.analysis.literalness import is_literal
from rendergate.utils.constants import DEFAULT_STRATEGY

if TYPE_CHECKING:
    from rendergate.nodes import Expr, FuncCall

logger = logging.getLogger(__name__)

PARAMETERS_ARGUMENT = "parameters"
PARAMETERS_POSITION = 1

SAFE: frozenset[str] = frozenset({DEFAULT_STRATEGY})
UNSAFE: frozenset[str] = frozenset()

_COMPOSITES = frozenset({"Dict", "List", "Tuple"})


def _verdict(call: FuncCall) -> frozenset[str]:
    if call.dyn_args is not None or call.dyn_kwargs is not None:
        return UNSAFE

    keyword = call.kwargs.get(PARAMETERS_ARGUMENT)
    positional: Expr | None = (
        call.args[PARAMETERS_POSITION] if len(call.args) > PARAMETERS_POSITION else None
    )
    if keyword is not None and positional is not None:
        return UNSAFE

    parameters = keyword if keyword is not None else positional
    if parameters is None:
        return SAFE
    if type(parameters).__name__ in _COMPOSITES and is_literal(parameters):
        return SAFE
    return UNSAFE


def is_url_generation_safe(call: FuncCall) -> frozenset[str]:
    """Decide whether a ``url()``/``path()`` call site may print unescaped.

    ``parameters`` is the keyword argument of that name, else the second
    positional argument.

    Example:
        ``path("entity.node.canonical", {"node": 1})``   → {"html"}
        ``path("entity.node.canonical", {"node": nid})`` → {} (escape)
    """
    try:
        verdict = _verdict(call)
    except (AttributeError, IndexError, TypeError):
        verdict = UNSAFE
    logger.debug(
        "URL call at line %s classified %s",
        getattr(call, "lineno", "?"),
        "safe" if verdict else "unsafe",
    )
    return verdict
