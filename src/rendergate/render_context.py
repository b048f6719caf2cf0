"""RenderContext: per-render state isolated from user context.

Holds the response-wide metadata accumulator and the template location
used in error messages. The state lives in a ContextVar so that it is
owned by a single render invocation: created when the render starts,
discarded when it ends, and never shared between threads or tasks.

Nesting:
    A render started while another is active shares the outer render's
    accumulator and printed-node registry, so metadata from a template
    printed inside a render node plugin still reaches the enclosing
    response, and a node printed there is not evaluated again.

Example:
    with render_context() as ctx:
        html = extension.render_var({"#markup": "x", "#cache": {"tags": ["t"]}})
    ctx.metadata.tags  # ('t',)

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any

from rendergate.render.metadata import BubbleableMetadata
from rendergate.utils.html import Markup


@dataclass
class RenderContext:
    """Per-render state isolated from user context.

    Attributes:
        template_name: Current template name for error messages
        filename: Source file path for error messages
        source: Template source for runtime error snippets
        line: Current line number (updated during render by generated code)
        metadata: Cache metadata and attachments bubbled so far
        printed: Read-only render nodes printed so far, keyed by id
    """

    template_name: str | None = None
    filename: str | None = None
    source: str | None = None
    line: int = 0
    metadata: BubbleableMetadata = field(default_factory=BubbleableMetadata)
    printed: dict[int, tuple[Mapping[str, Any], Markup]] = field(default_factory=dict)

    def printed_markup(self, node: Mapping[str, Any]) -> Markup | None:
        """Stored output of a read-only node printed earlier in this render."""
        entry = self.printed.get(id(node))
        if entry is not None and entry[0] is node:
            return entry[1]
        return None

    def mark_printed(self, node: Mapping[str, Any], markup: Markup) -> None:
        # The node is held so its id cannot be reused during the render.
        self.printed[id(node)] = (node, markup)


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


def get_render_context_required() -> RenderContext:
    """Get current render context, raise if not in render.

    Raises:
        RuntimeError: If not in a render context
    """
    ctx = _render_context.get()
    if ctx is None:
        raise RuntimeError("Not in a render context")
    return ctx


@contextmanager
def render_context(
    template_name: str | None = None,
    filename: str | None = None,
    source: str | None = None,
    metadata: BubbleableMetadata | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Args:
        template_name: Template name for error messages
        filename: Source file path for error messages
        source: Template source for runtime error snippets
        metadata: Accumulator to collect into. Defaults to the enclosing
            render's accumulator, or a fresh one at the top level.

    Yields:
        The new RenderContext
    """
    parent = _render_context.get()
    if metadata is None:
        metadata = parent.metadata if parent is not None else BubbleableMetadata()
    ctx = RenderContext(
        template_name=template_name,
        filename=filename,
        source=source,
        metadata=metadata,
        printed=parent.printed if parent is not None else {},
    )
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
