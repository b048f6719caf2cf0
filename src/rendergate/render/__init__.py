"""Render-tree side of the bridge: nodes, cache metadata, bubbling, evaluation."""

from rendergate.render.cache import PERMANENT, UNCACHEABLE, CacheMetadata, merge_max_ages
from rendergate.render.element import (
    BubbleableDependency,
    Renderable,
    RenderNode,
    ValueKind,
    children,
    classify_value,
    is_printed,
    is_render_node,
)
from rendergate.render.link import GeneratedLink, GeneratedUrl
from rendergate.render.metadata import BubbleableMetadata, bubble, merge_attachments
from rendergate.render.renderer import Renderer, RenderResult, RenderTreeEvaluator

__all__ = [
    "PERMANENT",
    "UNCACHEABLE",
    "BubbleableDependency",
    "BubbleableMetadata",
    "CacheMetadata",
    "GeneratedLink",
    "GeneratedUrl",
    "RenderNode",
    "RenderResult",
    "RenderTreeEvaluator",
    "Renderable",
    "Renderer",
    "ValueKind",
    "bubble",
    "children",
    "classify_value",
    "is_printed",
    "is_render_node",
    "merge_attachments",
    "merge_max_ages",
]
