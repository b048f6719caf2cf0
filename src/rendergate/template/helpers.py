"""Pure runtime helper functions injected into the template namespace.

These functions are called by compiled template code at render time.
None of them close over Environment state: they use only their
parameters and deferred imports.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rendergate.utils.constants import DEFAULT_STRATEGY
from rendergate.utils.html import Markup, get_escaper

# Static entries shared across all Template instances. Copied once per
# Template.__init__; read-only after module load.
STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": {},
    "_Markup": Markup,
}


def lookup_strict(ctx: dict[str, Any], var_name: str) -> Any:
    """Look up a variable in strict mode.

    Undefined variables raise UndefinedError with the template location
    and a "did you mean" suggestion drawn from the defined names.
    """
    from rendergate.environment.exceptions import UndefinedError, build_source_snippet
    from rendergate.render_context import get_render_context

    try:
        return ctx[var_name]
    except KeyError:
        render_ctx = get_render_context()
        template_name = render_ctx.template_name if render_ctx else None
        lineno = render_ctx.line if render_ctx else None
        source = render_ctx.source if render_ctx else None
        snippet = build_source_snippet(source, lineno) if source and lineno else None
        raise UndefinedError(
            var_name,
            template_name,
            lineno,
            available_names=frozenset(ctx.keys()),
            source_snippet=snippet,
        ) from None


def lookup_lenient(ctx: dict[str, Any], var_name: str) -> Any:
    """Look up a variable, resolving undefined names to None (prints as "")."""
    return ctx.get(var_name)


def safe_getattr(obj: Any, name: str) -> Any:
    """Get attribute with mapping fallback and None-safe handling.

    Resolution order:
    - Mappings: key first (user data, render node children), getattr
      fallback. Keeps ``items``/``keys``/``get`` from shadowing data.
    - Objects: getattr first, subscript fallback.

    Missing attributes and keys resolve to None.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        try:
            return obj[name]
        except KeyError:
            return getattr(obj, name, None)
    try:
        return getattr(obj, name)
    except AttributeError:
        try:
            return obj[name]
        except (KeyError, IndexError, TypeError):
            return None


def safe_getitem(obj: Any, key: Any) -> Any:
    """Subscript access that resolves missing keys and indexes to None."""
    if obj is None:
        return None
    try:
        return obj[key]
    except (KeyError, IndexError, TypeError):
        if isinstance(key, str) and not isinstance(obj, Mapping):
            return getattr(obj, key, None)
        return None


def str_safe(value: Any) -> str:
    """Convert value to string, treating None as empty string.

    Print hook used when no extension provides ``render_var``.
    """
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(value)


def default_escape(value: Any, strategy: str = DEFAULT_STRATEGY) -> str:
    """Escape gate used when no extension provides an ``escape`` filter.

    Safe markup passes through for html; everything else is converted
    with ``str()`` and escaped for the strategy.
    """
    if value is None:
        return ""
    if strategy == DEFAULT_STRATEGY and hasattr(value, "__html__"):
        return str(value.__html__())
    return get_escaper(strategy)(str(value))
