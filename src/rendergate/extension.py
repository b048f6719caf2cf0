"""RenderExtension: the bridge between templates and the render pipeline.

Every value a template prints passes through one of two runtime hooks
chosen by the compiler:

- ``escape_filter`` (the escape gate) for output not declared safe
- ``render_var`` (the print hook) for output declared safe, or when
  autoescaping is off

Both dispatch on ``classify_value`` so that render nodes are evaluated
and their metadata bubbled, safe markup passes through untouched, and
everything else is converted to text and, at the gate, escaped.

Metadata destination:
    Bubbled metadata goes to the accumulator of the active
    RenderContext. Outside a render there is nowhere to bubble to, and
    the metadata is dropped with a debug record.

Example:
    >>> ext = RenderExtension(Renderer()).set_url_generator(router)
    >>> env = Environment(extensions=[ext])
    >>> env.from_string("{{ node }}").render_with_metadata(node=page).metadata.tags
    ('node:1',)

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

from rendergate.analysis import is_url_generation_safe
from rendergate.attribute import Attribute
from rendergate.environment.exceptions import ServiceNotConfiguredError, TemplateRuntimeError
from rendergate.environment.registry import TemplateCallable
from rendergate.nodes import Const, Expr
from rendergate.render.element import ValueKind, classify_value, is_printed
from rendergate.render.metadata import BubbleableMetadata, bubble
from rendergate.render.renderer import RenderTreeEvaluator
from rendergate.render_context import get_render_context
from rendergate.services import DateFormatter, ThemeManager, UrlGenerator
from rendergate.utils.constants import ATTACHED, DEFAULT_STRATEGY, MARKUP, PRINTED
from rendergate.utils.html import Markup, get_class, get_escaper, get_id

logger = logging.getLogger(__name__)


def escape_filter_is_safe(call: Expr) -> frozenset[str]:
    """The escape filter's output is safe for the strategy it escapes for.

    ``|escape`` → html; ``|escape("js")`` → js; a strategy that is not a
    literal string → nothing.
    """
    args = getattr(call, "args", ())
    strategy = args[0] if args else getattr(call, "kwargs", {}).get("strategy")
    if strategy is None:
        return frozenset({DEFAULT_STRATEGY})
    if isinstance(strategy, Const) and isinstance(strategy.value, str):
        return frozenset({strategy.value})
    return frozenset()


class RenderExtension:
    """Template functions and filters wired to a render-tree evaluator.

    Args:
        renderer: Evaluates render nodes (see RenderTreeEvaluator)

    Services are optional and set after construction; each setter
    returns ``self``. Calling a template function whose service is
    missing raises ServiceNotConfiguredError.
    """

    __slots__ = ("_date_formatter", "_renderer", "_theme_manager", "_url_generator")

    def __init__(self, renderer: RenderTreeEvaluator):
        self._renderer = renderer
        self._url_generator: UrlGenerator | None = None
        self._theme_manager: ThemeManager | None = None
        self._date_formatter: DateFormatter | None = None

    # -- wiring ------------------------------------------------------------

    def set_url_generator(self, url_generator: UrlGenerator) -> RenderExtension:
        self._url_generator = url_generator
        return self

    def set_theme_manager(self, theme_manager: ThemeManager) -> RenderExtension:
        self._theme_manager = theme_manager
        return self

    def set_date_formatter(self, date_formatter: DateFormatter) -> RenderExtension:
        self._date_formatter = date_formatter
        return self

    def get_functions(self) -> list[TemplateCallable]:
        return [
            TemplateCallable("render_var", self.render_var),
            TemplateCallable("url", self.get_url, is_safe_callback=is_url_generation_safe),
            TemplateCallable("path", self.get_path, is_safe_callback=is_url_generation_safe),
            TemplateCallable("active_theme", self.active_theme),
            TemplateCallable("active_theme_path", self.active_theme_path),
            TemplateCallable("create_attribute", self.create_attribute),
            TemplateCallable("attach_library", self.attach_library),
        ]

    def get_filters(self) -> list[TemplateCallable]:
        return [
            TemplateCallable("escape", self.escape_filter, is_safe_callback=escape_filter_is_safe),
            TemplateCallable("e", self.escape_filter, is_safe_callback=escape_filter_is_safe),
            TemplateCallable("safe_join", self.safe_join, is_safe=frozenset({DEFAULT_STRATEGY})),
            TemplateCallable("format_date", self.format_date),
            TemplateCallable("without", self.without),
            TemplateCallable("clean_class", self.clean_class),
            TemplateCallable("clean_id", self.clean_id),
            TemplateCallable("render", self.render_var),
        ]

    # -- metadata ----------------------------------------------------------

    @staticmethod
    def _bubble(metadata: BubbleableMetadata, source: Any) -> None:
        ctx = get_render_context()
        if ctx is None:
            logger.debug(
                "No active render context; metadata of %s dropped", type(source).__name__
            )
            return
        bubble(ctx.metadata, metadata)

    def bubble_arg_metadata(self, value: Any) -> None:
        """Bubble the metadata an object carries on itself.

        Renderables are skipped: their metadata lives in the render node
        they convert to and bubbles when that node is evaluated.
        """
        if hasattr(value, "to_renderable") or not hasattr(value, "get_bubbleable_metadata"):
            return
        self._bubble(BubbleableMetadata.from_object(value), value)

    # -- print hook --------------------------------------------------------

    def render_var(self, value: Any) -> str:
        """Convert any template value to output text.

        Render nodes are evaluated once; a node already ``#printed``
        returns its stored ``#markup``. Safe markup passes through.
        Sequence items go through the escape gate one by one and the
        joined result is safe markup. Other values are converted to
        text, unescaped.
        """
        kind = classify_value(value)

        if kind is ValueKind.EMPTY:
            return ""

        if kind is ValueKind.RENDERABLE:
            value = value.to_renderable()
            if not isinstance(value, Mapping):
                return self.render_var(value)
            kind = ValueKind.RENDER_NODE

        if kind is ValueKind.RENDER_NODE:
            return self._render_node(value)

        if kind is ValueKind.SAFE_MARKUP:
            self.bubble_arg_metadata(value)
            return value.__html__()

        if kind is ValueKind.SCALAR:
            return self._to_text(value)

        if kind is ValueKind.SEQUENCE:
            return Markup(
                "".join(self.escape_filter(item, DEFAULT_STRATEGY, None, True) for item in value)
            )

        self.bubble_arg_metadata(value)
        return self._to_text(value)

    def _render_node(self, node: Mapping[str, Any]) -> Markup:
        if is_printed(node):
            return Markup(node.get(MARKUP) or "")

        # A read-only node cannot carry #printed; the render context
        # remembers it instead.
        ctx = get_render_context()
        if isinstance(node, MutableMapping):
            target = node
        else:
            stored = ctx.printed_markup(node) if ctx is not None else None
            if stored is not None:
                return stored
            target = dict(node)
        target[PRINTED] = False
        result = self._renderer.evaluate(target)

        if isinstance(result, str):
            output = result
            metadata = BubbleableMetadata.from_render_array(target)
        else:
            output = result.markup
            metadata = result.metadata
        self._bubble(metadata, target)

        markup = Markup(output)
        target[MARKUP] = markup
        target[PRINTED] = True
        if target is not node and ctx is not None:
            ctx.mark_printed(node, markup)
        return markup

    @staticmethod
    def _to_text(value: Any) -> str:
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8", errors="replace")
        try:
            return str(value)
        except Exception as e:
            logger.warning(
                "Could not convert %s to text, printing nothing: %s", type(value).__name__, e
            )
            return ""

    # -- escape gate -------------------------------------------------------

    def escape_filter(
        self,
        value: Any,
        strategy: str = DEFAULT_STRATEGY,
        charset: str | None = None,
        autoescape: bool = False,
    ) -> str:
        """Escape a value for an output context unless it is already safe.

        Args:
            value: Any template value
            strategy: "html", "html_attr", "js", "css" or "url"
            charset: Accepted for hook compatibility; output is always str
            autoescape: True when called by the compiler-inserted gate

        Safe markup is returned unchanged for html and for autoescape.
        Render nodes and renderables are evaluated and their output is
        final. Sequences are escaped item by item. Everything else is
        converted to text and escaped for ``strategy``.
        """
        kind = classify_value(value)

        if kind is ValueKind.EMPTY:
            return ""

        self.bubble_arg_metadata(value)

        if kind is ValueKind.SAFE_MARKUP:
            if autoescape or strategy == DEFAULT_STRATEGY:
                return value.__html__()
            return get_escaper(strategy)(str(value))

        if kind in (ValueKind.RENDERABLE, ValueKind.RENDER_NODE):
            return self.render_var(value)

        if kind is ValueKind.SEQUENCE:
            return Markup(
                "".join(self.escape_filter(item, strategy, charset, autoescape) for item in value)
            )

        return get_escaper(strategy)(self._to_text(value))

    # -- filters -----------------------------------------------------------

    def safe_join(self, items: Any, separator: str = "") -> Markup:
        """Join items, escaping only those that are not already safe.

        The separator is inserted verbatim. Mappings contribute their
        values; any iterable works.

        Example:
            >>> ext.safe_join(["<em>x</em>", Markup("<b>y</b>")], "<br/>")
            Markup('&lt;em&gt;x&lt;/em&gt;<br/><b>y</b>')
        """
        if items is None:
            return Markup("")
        if isinstance(items, Mapping):
            items = items.values()
        elif isinstance(items, (str, bytes, bytearray)) or hasattr(items, "__html__") or not isinstance(
            items, Iterable
        ):
            items = [items]
        return Markup(
            str(separator).join(
                self.escape_filter(item, DEFAULT_STRATEGY, None, True) for item in items
            )
        )

    def format_date(
        self,
        timestamp: int | float | None,
        type: str = "medium",
        format: str = "",
        timezone: str | None = None,
        langcode: str | None = None,
    ) -> str:
        formatter = self._date_formatter
        if formatter is None:
            raise ServiceNotConfiguredError("date formatter", "set_date_formatter", "format_date")
        return formatter.format(timestamp, type, format, timezone, langcode)

    def without(self, element: Any, *keys: str) -> Any:
        """Copy of a render node, mapping or Attribute without the given keys.

        Example:
            {{ content|without("links", "comments") }}
        """
        if isinstance(element, Attribute):
            filtered = element.copy()
            filtered.remove_attribute(*keys)
            return filtered
        if isinstance(element, Mapping):
            return {key: value for key, value in element.items() if key not in keys}
        return element

    @staticmethod
    def clean_class(value: Any) -> str:
        return get_class(value)

    @staticmethod
    def clean_id(value: Any) -> str:
        return get_id(value)

    # -- functions ---------------------------------------------------------

    def _generate(
        self,
        caller: str,
        name: str,
        parameters: Mapping[str, Any] | None,
        options: Mapping[str, Any] | None,
        absolute: bool,
    ) -> str:
        generator = self._url_generator
        if generator is None:
            raise ServiceNotConfiguredError("url generator", "set_url_generator", caller)
        merged = dict(options or {})
        merged["absolute"] = absolute
        generated = generator.generate(name, parameters or {}, merged)
        if hasattr(generated, "get_bubbleable_metadata"):
            self._bubble(BubbleableMetadata.from_object(generated), generated)
        return str(generated)

    def get_path(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Relative path for a named route."""
        return self._generate("path", name, parameters, options, absolute=False)

    def get_url(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Absolute URL for a named route."""
        return self._generate("url", name, parameters, options, absolute=True)

    def _active_theme(self, caller: str) -> Any:
        manager = self._theme_manager
        if manager is None:
            raise ServiceNotConfiguredError("theme manager", "set_theme_manager", caller)
        return manager.get_active_theme()

    def active_theme(self) -> str:
        return self._active_theme("active_theme").name

    def active_theme_path(self) -> str:
        return self._active_theme("active_theme_path").path

    @staticmethod
    def create_attribute(attributes: Mapping[str, Any] | Attribute | None = None) -> Attribute:
        if isinstance(attributes, Attribute):
            return attributes.copy()
        return Attribute(attributes)

    def attach_library(self, library: str) -> str:
        """Attach an asset library to the page; prints nothing.

        Raises:
            TemplateRuntimeError: If ``library`` is not a string
        """
        if not isinstance(library, str):
            raise TemplateRuntimeError(
                f"attach_library() expects a library name string, got {type(library).__name__}",
                suggestion='Pass the library as "extension/name", e.g. attach_library("core/drupal")',
            )
        attached = BubbleableMetadata.from_render_array({ATTACHED: {"library": [library]}})
        self._bubble(attached, library)
        return ""
