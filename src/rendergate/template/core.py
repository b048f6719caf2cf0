"""rendergate Template: compiled template object ready for rendering.

The Template class wraps a compiled code object and provides the
``render()`` and ``render_with_metadata()`` API. Templates are immutable
and safe for concurrent rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _code: code object              # Compiled Python bytecode
    ├── _render_func: callable          # Extracted render() function
    └── _name, _filename, _source       # For error messages
    ```

Metadata:
Every render runs inside a RenderContext whose accumulator collects the
cache metadata and attachments bubbled by printed values.
``render_with_metadata()`` returns that accumulator alongside the text;
a template rendered while another render is active also bubbles into
the enclosing render.

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment → cache → Template``

"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

from rendergate.render.metadata import BubbleableMetadata, bubble
from rendergate.template.helpers import (
    STATIC_NAMESPACE,
    default_escape,
    lookup_lenient,
    lookup_strict,
    safe_getattr,
    safe_getitem,
    str_safe,
)
from rendergate.utils.constants import MARKUP
from rendergate.utils.html import Markup

if TYPE_CHECKING:
    import types

    from rendergate.environment import Environment
    from rendergate.render.element import RenderNode
    from rendergate.render_context import RenderContext


@dataclass(frozen=True, slots=True)
class RenderedOutput:
    """Rendered text plus the metadata bubbled while producing it.

    Attributes:
        content: Rendered template output (safe markup)
        metadata: Cache metadata and attachments of everything printed
    """

    content: Markup
    metadata: BubbleableMetadata

    def to_render_array(self) -> RenderNode:
        """Render node carrying ``#markup``, ``#cache`` and ``#attached``."""
        return self.metadata.apply_to({MARKUP: self.content})

    def __str__(self) -> str:
        return str(self.content)


class Template:
    """Compiled template ready for rendering.

    Wraps a compiled code object containing a ``render(ctx)`` function.

    Attributes:
        name: Template identifier (for error messages)
        filename: Source file path (for error messages)

    Error Enhancement:
        Runtime errors are caught and enhanced with template context:
            ```
            TemplateRuntimeError: 'int' object is not callable
              Location: article.html:15
            ```

    Example:
            >>> env = Environment(extensions=[RenderExtension(Renderer())])
            >>> t = env.from_string("Hello, {{ name }}!")
            >>> t.render(name="<World>")
            'Hello, &lt;World&gt;!'

    """

    __slots__ = (
        "_code",
        "_env_ref",
        "_filename",
        "_name",
        "_namespace",
        "_render_func",
        "_source",
    )

    def __init__(
        self,
        env: Environment,
        code: types.CodeType,
        name: str | None,
        filename: str | None,
        source: str | None = None,
    ):
        """Initialize template with compiled code.

        Args:
            env: Parent Environment (stored as weak reference)
            code: Compiled Python code object
            name: Template name (for error messages)
            filename: Source filename (for error messages)
            source: Template source for runtime error snippets
        """
        from rendergate.render_context import get_render_context_required

        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._code = code
        self._name = name
        self._filename = filename
        self._source = source

        escape_entry = env.filters.entry("escape")
        escape = (
            partial(escape_entry.callable, charset=None, autoescape=True)
            if escape_entry is not None
            else default_escape
        )
        render_var = env.functions.get("render_var") or str_safe

        namespace: dict[str, Any] = STATIC_NAMESPACE.copy()
        namespace.update(
            {
                "_escape": escape,
                "_render_var": render_var,
                "_lookup": lookup_strict if env.strict_undefined else lookup_lenient,
                "_getattr": safe_getattr,
                "_getitem": safe_getitem,
                "_functions": {name: entry.callable for name, entry in env.functions.items()},
                "_filters": {name: entry.callable for name, entry in env.filters.items()},
                "_get_render_ctx": get_render_context_required,
            }
        )
        exec(code, namespace)
        self._render_func = namespace.get("render")
        self._namespace = namespace

    @property
    def _env(self) -> Environment:
        """Get the Environment (dereferences weak reference)."""
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str | None:
        """Template name."""
        return self._name

    @property
    def filename(self) -> str | None:
        """Source filename."""
        return self._filename

    def _build_context(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
        ctx: dict[str, Any] = {}
        ctx.update(self._env.globals)
        if args:
            if len(args) == 1 and isinstance(args[0], dict):
                ctx.update(args[0])
            else:
                raise TypeError(
                    f"render() takes at most 1 positional argument (a dict), got {len(args)}"
                )
        ctx.update(kwargs)
        return ctx

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Render template with given context.

        Args:
            *args: Single dict of context variables
            **kwargs: Context variables as keyword arguments

        Returns:
            Rendered template as string

        Example:
            >>> t.render(name="World")
            'Hello, World!'
            >>> t.render({"name": "World"})
            'Hello, World!'
        """
        return self._render(self._build_context(args, kwargs), None)

    def render_with_metadata(self, *args: Any, **kwargs: Any) -> RenderedOutput:
        """Render template and return the text with its bubbled metadata.

        Example:
            >>> out = t.render_with_metadata(node={"#markup": "x", "#cache": {"tags": ["a"]}})
            >>> out.metadata.tags
            ('a',)
        """
        from rendergate.render_context import get_render_context

        parent = get_render_context()
        metadata = BubbleableMetadata()
        content = self._render(self._build_context(args, kwargs), metadata)
        if parent is not None:
            bubble(parent.metadata, metadata)
        return RenderedOutput(Markup(content), metadata)

    def _render(self, ctx: dict[str, Any], metadata: BubbleableMetadata | None) -> str:
        from rendergate.environment.exceptions import TemplateError
        from rendergate.render_context import render_context

        render_func = self._render_func
        if render_func is None:
            raise RuntimeError(f"Template '{self._name or '(inline)'}' not properly compiled")

        with render_context(
            template_name=self._name,
            filename=self._filename,
            source=self._source,
            metadata=metadata,
        ) as render_ctx:
            try:
                result: str = render_func(ctx)
                return result
            except TemplateError:
                raise
            except Exception as e:
                raise self._enhance_error(e, render_ctx) from e

    def _enhance_error(self, error: Exception, render_ctx: RenderContext) -> Exception:
        """Convert a generic exception into TemplateRuntimeError with location."""
        from rendergate.environment.exceptions import TemplateRuntimeError, build_source_snippet

        lineno = render_ctx.line
        error_str = str(error).strip()
        if not error_str:
            error_str = f"{type(error).__name__} (no details available)"
        elif not isinstance(error, (TypeError, ValueError, AttributeError)):
            error_str = f"{type(error).__name__}: {error_str}"

        snippet = None
        if self._source and lineno:
            snippet = build_source_snippet(self._source, lineno)

        return TemplateRuntimeError(
            error_str,
            template_name=render_ctx.template_name,
            lineno=lineno,
            source_snippet=snippet,
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
