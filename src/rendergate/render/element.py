"""Render nodes and the value-kind dispatch used by the resolver.

A render node is a mapping whose ``#``-prefixed keys are properties and
whose other keys are child nodes:

    {
        "#markup": "<p>Hello</p>",
        "#cache": {"tags": ["node:1"]},
        "#attached": {"library": ["core/drupal"]},
        "footer": {"#plain_text": "Bye"},
    }

Template values come in a closed set of kinds. ``classify_value`` maps
any value to exactly one ``ValueKind`` using a fixed priority order, so
the escape gate and the resolver dispatch on an explicit discriminant
rather than scattered isinstance checks.

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from numbers import Number
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from rendergate.utils.constants import PRINTED, PROPERTY_PREFIX, WEIGHT

if TYPE_CHECKING:
    from rendergate.render.metadata import BubbleableMetadata

RenderNode = dict[str, Any]


@runtime_checkable
class Renderable(Protocol):
    """Object that can be converted to a render node."""

    def to_renderable(self) -> RenderNode: ...


@runtime_checkable
class BubbleableDependency(Protocol):
    """Object carrying its own cache metadata and attachments."""

    def get_bubbleable_metadata(self) -> BubbleableMetadata: ...


class ValueKind(Enum):
    """Discriminant for template values, in dispatch priority order."""

    EMPTY = "empty"
    RENDERABLE = "renderable"
    RENDER_NODE = "render_node"
    SAFE_MARKUP = "safe_markup"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    OBJECT = "object"


def classify_value(value: Any) -> ValueKind:
    """Return the kind of a template value.

    Priority:
        1. None, False, empty mapping, empty list/tuple → EMPTY
        2. ``to_renderable()`` → RENDERABLE
        3. Mapping → RENDER_NODE
        4. ``__html__()`` → SAFE_MARKUP (checked before str: Markup is a str)
        5. str, bytes, True, numbers → SCALAR (bytes decode as UTF-8)
        6. other iterables → SEQUENCE
        7. anything else → OBJECT
    """
    if value is None or value is False:
        return ValueKind.EMPTY
    if isinstance(value, (Mapping, list, tuple)) and not value:
        return ValueKind.EMPTY
    if hasattr(value, "to_renderable"):
        return ValueKind.RENDERABLE
    if isinstance(value, Mapping):
        return ValueKind.RENDER_NODE
    if hasattr(value, "__html__"):
        return ValueKind.SAFE_MARKUP
    if isinstance(value, (str, bytes, bytearray, Number)):
        return ValueKind.SCALAR
    if isinstance(value, Iterable):
        return ValueKind.SEQUENCE
    return ValueKind.OBJECT


def is_render_node(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_property(key: Any) -> bool:
    return isinstance(key, str) and key.startswith(PROPERTY_PREFIX)


def is_printed(node: Mapping[str, Any]) -> bool:
    return bool(node.get(PRINTED))


def children(node: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
    """Yield (key, child) pairs in render order.

    Children are non-property keys, ordered by ``#weight`` with insertion
    order breaking ties.
    """
    items = [(key, value) for key, value in node.items() if not is_property(key)]
    if any(isinstance(value, Mapping) and WEIGHT in value for _, value in items):
        items.sort(key=lambda item: _weight(item[1]))
    yield from items


def _weight(value: Any) -> float:
    if isinstance(value, Mapping):
        weight = value.get(WEIGHT, 0)
        if isinstance(weight, (int, float)):
            return weight
    return 0
