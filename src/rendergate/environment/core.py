"""rendergate Environment: central configuration and template management.

Configuration is passed as constructor keywords; there are no config
files and no environment variables.

Thread-Safety:
- Registries use copy-on-write: registering a function or filter builds
  a new dict, so templates compiled earlier keep a stable view
- Compiled templates are cached per (name, source) and invalidated when
  a registry changes, since escape decisions are made at compile time

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from rendergate.environment.registry import (
    CallableRegistry,
    SafetyCallback,
    TemplateCallable,
    as_template_callable,
)
from rendergate.template import Template
from rendergate.utils.constants import DEFAULT_STRATEGY, ESCAPE_STRATEGIES

logger = logging.getLogger(__name__)


class Extension(Protocol):
    """Anything that contributes template functions and filters."""

    def get_functions(self) -> Iterable[TemplateCallable]: ...

    def get_filters(self) -> Iterable[TemplateCallable]: ...


def _normalize_autoescape(autoescape: bool | str | None) -> str | None:
    if autoescape is True:
        return DEFAULT_STRATEGY
    if autoescape is False or autoescape is None:
        return None
    if autoescape not in ESCAPE_STRATEGIES:
        raise ValueError(
            f"Unknown autoescape strategy {autoescape!r}; "
            f"expected one of {', '.join(sorted(ESCAPE_STRATEGIES))}, True, False or None"
        )
    return autoescape


class Environment:
    """Central configuration for compiling and rendering templates.

    Args:
        autoescape: Escape strategy applied to every ``{{ }}`` not declared
            safe. ``True`` means "html"; ``False``/``None`` disables.
        strict_undefined: Raise UndefinedError for unknown names instead of
            resolving them to None
        extensions: Objects providing ``get_functions()``/``get_filters()``
        globals: Variables available in all templates

    Example:
            >>> env = Environment(extensions=[RenderExtension(Renderer())])
            >>> env.from_string("{{ x }}").render(x="<b>")
            '&lt;b&gt;'

    """

    def __init__(
        self,
        *,
        autoescape: bool | str | None = DEFAULT_STRATEGY,
        strict_undefined: bool = False,
        extensions: Iterable[Extension] = (),
        globals: dict[str, Any] | None = None,
    ):
        self.autoescape: str | None = _normalize_autoescape(autoescape)
        self.strict_undefined = strict_undefined
        self.globals: dict[str, Any] = dict(globals or {})

        self._functions: dict[str, TemplateCallable] = {}
        self._filters: dict[str, TemplateCallable] = {}
        self._cache: dict[tuple[str | None, str], Template] = {}
        self._cache_lock = threading.Lock()
        self.extensions: list[Extension] = []

        for extension in extensions:
            self.add_extension(extension)

    @property
    def functions(self) -> CallableRegistry:
        """Registered template functions (dict-like, copy-on-write)."""
        return CallableRegistry(self, "_functions")

    @property
    def filters(self) -> CallableRegistry:
        """Registered template filters (dict-like, copy-on-write)."""
        return CallableRegistry(self, "_filters")

    def add_function(
        self,
        name: str,
        func: Callable[..., Any],
        *,
        is_safe: Iterable[str] = (),
        is_safe_callback: SafetyCallback | None = None,
    ) -> None:
        """Register a template function.

        Args:
            name: Name used in templates
            func: The callable
            is_safe: Strategies the output never needs escaping for
            is_safe_callback: Per-call-site safety decision, receives the
                FuncCall node
        """
        self.functions[name] = as_template_callable(
            name, func, is_safe=is_safe, is_safe_callback=is_safe_callback
        )

    def add_filter(
        self,
        name: str,
        func: Callable[..., Any],
        *,
        is_safe: Iterable[str] = (),
        is_safe_callback: SafetyCallback | None = None,
    ) -> None:
        """Register a template filter. Safety arguments as in add_function()."""
        self.filters[name] = as_template_callable(
            name, func, is_safe=is_safe, is_safe_callback=is_safe_callback
        )

    def add_extension(self, extension: Extension) -> None:
        """Register every function and filter an extension provides.

        Later registrations replace earlier ones with the same name.
        """
        functions = list(extension.get_functions())
        filters = list(extension.get_filters())
        self.functions.update({entry.name: entry for entry in functions})
        self.filters.update({entry.name: entry for entry in filters})
        self.extensions.append(extension)
        logger.debug(
            "Registered %s: %d functions, %d filters",
            type(extension).__name__,
            len(functions),
            len(filters),
        )

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile a template from source, reusing a cached compile if present.

        Raises:
            TemplateSyntaxError: If the source does not parse or names an
                unknown filter
        """
        key = (name, source)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        template = self._compile(source, name, None)
        with self._cache_lock:
            self._cache[key] = template
        return template

    def _compile(self, source: str, name: str | None, filename: str | None) -> Template:
        from rendergate.compiler import Compiler
        from rendergate.parser import Parser

        ast = Parser(source, name).parse()
        code = Compiler(self).compile(ast, name=name, filename=filename, source=source)
        logger.debug("Compiled template %s", name or "<string>")
        return Template(self, code, name, filename, source)

    def clear_cache(self) -> None:
        """Drop all compiled templates."""
        with self._cache_lock:
            self._cache = {}

    def __repr__(self) -> str:
        return (
            f"<Environment autoescape={self.autoescape!r} "
            f"functions={len(self._functions)} filters={len(self._filters)}>"
        )
