"""Render-tree evaluation.

The resolver hands render nodes to an evaluator and receives the
rendered text together with the metadata collected from the whole
subtree. Any object with a matching ``evaluate()`` method can play that
role; ``Renderer`` is a small reference implementation.

Reference evaluation order for one node:
    1. ``#access`` False → no output (metadata still collected)
    2. ``#type`` → plugin expands the node before rendering
    3. ``#markup`` (trusted), then ``#plain_text`` (escaped), then children
    4. wrapped in ``#prefix`` / ``#suffix``

Children are marked ``#printed`` with their output stored in ``#markup``,
so a child printed again elsewhere reuses its text.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, NamedTuple, Protocol

from rendergate.render.cache import CacheMetadata
from rendergate.render.element import RenderNode, children, is_printed
from rendergate.render.metadata import BubbleableMetadata
from rendergate.utils.constants import (
    ACCESS,
    MARKUP,
    PLAIN_TEXT,
    PREFIX,
    PRINTED,
    SUFFIX,
    TYPE,
)
from rendergate.utils.html import Markup, html_escape

logger = logging.getLogger(__name__)

RenderPlugin = Callable[[RenderNode], RenderNode]


class RenderResult(NamedTuple):
    """Output of evaluating one render node."""

    markup: Markup
    cache: CacheMetadata
    attachments: dict[str, Any]

    @property
    def metadata(self) -> BubbleableMetadata:
        return BubbleableMetadata(self.cache, self.attachments)


class RenderTreeEvaluator(Protocol):
    """Evaluates a render node to text plus collected metadata.

    An evaluator may also return plain text, in which case only the
    node's own ``#cache`` and ``#attached`` are bubbled.
    """

    def evaluate(self, node: RenderNode) -> RenderResult | str: ...


class Renderer:
    """Reference render-tree evaluator.

    Args:
        plugins: ``#type`` name → callable returning the expanded node

    Example:
        >>> renderer = Renderer({"greeting": lambda n: {**n, "#markup": f"Hi {n['#name']}"}})
        >>> renderer.evaluate({"#type": "greeting", "#name": "Ada"}).markup
        Markup('Hi Ada')
    """

    __slots__ = ("_plugins",)

    def __init__(self, plugins: Mapping[str, RenderPlugin] | None = None) -> None:
        self._plugins: dict[str, RenderPlugin] = dict(plugins or {})

    def register(self, type_name: str, plugin: RenderPlugin) -> None:
        self._plugins[type_name] = plugin

    def evaluate(self, node: RenderNode) -> RenderResult:
        metadata = BubbleableMetadata()
        markup = self._render(node, metadata)
        return RenderResult(Markup(markup), metadata.cache, metadata.attachments)

    def _render(self, node: Mapping[str, Any], metadata: BubbleableMetadata) -> str:
        if node.get(ACCESS) is False:
            metadata.merge(BubbleableMetadata.from_render_array(node))
            return ""

        type_name = node.get(TYPE)
        if type_name is not None:
            plugin = self._plugins.get(type_name)
            if plugin is None:
                logger.warning("No render plugin for #type %r; rendering node as-is", type_name)
            else:
                node = plugin(dict(node))

        metadata.merge(BubbleableMetadata.from_render_array(node))

        parts: list[str] = []
        if node.get(MARKUP) is not None:
            parts.append(str(node[MARKUP]))
        if node.get(PLAIN_TEXT) is not None:
            parts.append(html_escape(str(node[PLAIN_TEXT])))

        for key, child in children(node):
            if not isinstance(child, Mapping):
                logger.debug("Skipping non-node child %r (%s)", key, type(child).__name__)
                continue
            if is_printed(child):
                parts.append(str(child.get(MARKUP) or ""))
                continue
            child_output = self._render(child, metadata)
            if isinstance(child, dict):
                child[MARKUP] = Markup(child_output)
                child[PRINTED] = True
            parts.append(child_output)

        return f"{node.get(PREFIX) or ''}{''.join(parts)}{node.get(SUFFIX) or ''}"
