"""Bubbleable metadata: cacheability plus asset attachments.

While a page renders, every nested fragment contributes its cache
metadata and its ``#attached`` assets to the response. The
``BubbleableMetadata`` accumulator collects them; ``bubble()`` is the
single merge point used by the resolution path.

Merge rules:
    - contexts/tags: ordered set union
    - max-age: most restrictive wins, UNCACHEABLE is absorbing
    - attachments: per category, order preserved, duplicates dropped;
      mapping-valued categories (settings) merge recursively

The accumulator only ever grows: nothing here removes a tag, drops an
attachment, or loosens a max-age.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from rendergate.render.cache import CacheMetadata
from rendergate.utils.constants import ATTACHED

logger = logging.getLogger(__name__)


def _as_entries(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _merge_value(current: Any, incoming: Any) -> Any:
    if isinstance(current, Mapping) and isinstance(incoming, Mapping):
        result = dict(current)
        for key, value in incoming.items():
            result[key] = _merge_value(result[key], value) if key in result else value
        return result
    if isinstance(current, Mapping) or isinstance(incoming, Mapping):
        # Mixed shapes: the later value wins, like settings overrides
        return incoming
    merged = _as_entries(current)
    for entry in _as_entries(incoming):
        if entry not in merged:
            merged.append(entry)
    return merged


def merge_attachments(
    current: Mapping[str, Any], incoming: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge two ``#attached`` mappings category by category.

    Neither argument is modified.

    Example:
        >>> merge_attachments({"library": ["a/x"]}, {"library": ["a/x", "b/y"]})
        {'library': ['a/x', 'b/y']}
    """
    merged: dict[str, Any] = {}
    for category, value in current.items():
        merged[category] = _merge_value([] if not isinstance(value, Mapping) else {}, value)
    for category, value in incoming.items():
        if category in merged:
            merged[category] = _merge_value(merged[category], value)
        else:
            merged[category] = _merge_value(
                [] if not isinstance(value, Mapping) else {}, value
            )
    return merged


class BubbleableMetadata:
    """Mutable accumulator of cache metadata and attachments.

    One instance lives on each RenderContext and collects everything the
    rendered fragments bubble up. Merges happen in place and return
    ``self`` so calls can be chained.

    Example:
        >>> acc = BubbleableMetadata()
        >>> acc.add_cache_tags("node:1").add_attachments({"library": ["core/drupal"]})
        BubbleableMetadata(tags=('node:1',), contexts=(), max_age=None, attachments={'library': ['core/drupal']})
    """

    __slots__ = ("attachments", "cache")

    def __init__(
        self,
        cache: CacheMetadata | None = None,
        attachments: Mapping[str, Any] | None = None,
    ) -> None:
        self.cache: CacheMetadata = cache if cache is not None else CacheMetadata()
        self.attachments: dict[str, Any] = merge_attachments({}, attachments or {})

    @property
    def tags(self) -> tuple[str, ...]:
        return self.cache.tags

    @property
    def contexts(self) -> tuple[str, ...]:
        return self.cache.contexts

    @property
    def max_age(self) -> int | None:
        return self.cache.max_age

    def merge(self, other: BubbleableMetadata) -> BubbleableMetadata:
        """Merge another accumulator into this one (in place)."""
        self.cache = self.cache.merge(other.cache)
        if other.attachments:
            self.attachments = merge_attachments(self.attachments, other.attachments)
        return self

    def add_cache(self, cache: CacheMetadata) -> BubbleableMetadata:
        self.cache = self.cache.merge(cache)
        return self

    def add_cache_tags(self, *tags: str) -> BubbleableMetadata:
        self.cache = self.cache.add_tags(*tags)
        return self

    def add_cache_contexts(self, *contexts: str) -> BubbleableMetadata:
        self.cache = self.cache.add_contexts(*contexts)
        return self

    def merge_cache_max_age(self, max_age: int | None) -> BubbleableMetadata:
        self.cache = self.cache.with_max_age(max_age)
        return self

    def add_attachments(self, attachments: Mapping[str, Any]) -> BubbleableMetadata:
        self.attachments = merge_attachments(self.attachments, attachments)
        return self

    def copy(self) -> BubbleableMetadata:
        return BubbleableMetadata(self.cache, self.attachments)

    @classmethod
    def from_render_array(cls, node: Mapping[str, Any]) -> BubbleableMetadata:
        """Collect ``#cache`` and ``#attached`` from a render node."""
        return cls(CacheMetadata.from_render_array(node), node.get(ATTACHED) or {})

    @classmethod
    def from_object(cls, obj: Any) -> BubbleableMetadata:
        """Collect metadata from an object exposing ``get_bubbleable_metadata()``.

        Objects without it carry no metadata and yield an empty instance.
        """
        getter = getattr(obj, "get_bubbleable_metadata", None)
        if getter is None:
            return cls()
        return getter().copy()

    def apply_to(self, node: dict[str, Any]) -> dict[str, Any]:
        """Write ``#cache`` and ``#attached`` onto a render node."""
        self.cache.apply_to(node)
        node[ATTACHED] = merge_attachments({}, self.attachments)
        return node

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BubbleableMetadata):
            return NotImplemented
        return self.cache == other.cache and self.attachments == other.attachments

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"BubbleableMetadata(tags={self.tags!r}, contexts={self.contexts!r}, "
            f"max_age={self.max_age!r}, attachments={self.attachments!r})"
        )


def bubble(ambient: BubbleableMetadata, incoming: BubbleableMetadata) -> BubbleableMetadata:
    """Merge a resolved fragment's metadata into the ambient accumulator.

    Args:
        ambient: Response-wide accumulator (mutated)
        incoming: Metadata of the fragment that just resolved

    Returns:
        The ambient accumulator
    """
    if incoming.tags or incoming.contexts or incoming.attachments:
        logger.debug(
            "Bubbling tags=%s contexts=%s attachments=%s",
            incoming.tags,
            incoming.contexts,
            sorted(incoming.attachments),
        )
    return ambient.merge(incoming)
