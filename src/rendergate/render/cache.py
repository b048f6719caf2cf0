"""Cache metadata carried by render nodes.

A fragment's cacheability is a (contexts, tags, max-age) triple:

- **contexts**: request aspects the output varies by (``user.roles``)
- **tags**: invalidation keys (``node:5``)
- **max-age**: seconds the output may be reused

Merging two triples yields the metadata of a fragment containing both:
set union for contexts and tags, the more restrictive max-age.
``UNCACHEABLE`` absorbs everything it is merged with; ``PERMANENT`` is
the neutral element.

Example:
    >>> a = CacheMetadata(tags=("a",), max_age=100)
    >>> b = CacheMetadata(tags=("b",), max_age=UNCACHEABLE)
    >>> merged = a.merge(b)
    >>> merged.tags, merged.max_age
    (('a', 'b'), -1)

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from rendergate.utils.constants import CACHE, CACHE_CONTEXTS, CACHE_MAX_AGE, CACHE_TAGS

UNCACHEABLE: Final = -1
PERMANENT: Final = None


def merge_max_ages(a: int | None, b: int | None) -> int | None:
    """Return the more restrictive of two max-ages."""
    if a == UNCACHEABLE or b == UNCACHEABLE:
        return UNCACHEABLE
    if a is PERMANENT:
        return b
    if b is PERMANENT:
        return a
    return min(a, b)


def _ordered_union(first: Iterable[str], second: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys((*first, *second)))


def _validate_keys(kind: str, values: Iterable[Any]) -> tuple[str, ...]:
    if isinstance(values, str):
        raise ValueError(f"Cache {kind} must be a collection of strings, got {values!r}")
    result = tuple(dict.fromkeys(values))
    for value in result:
        if not isinstance(value, str):
            raise ValueError(f"Cache {kind} must be strings, got {type(value).__name__}")
    return result


@dataclass(frozen=True, slots=True, eq=False)
class CacheMetadata:
    """Immutable cacheability triple.

    Contexts and tags keep insertion order (first seen wins) so output
    built from them is deterministic; equality compares them as sets.

    Attributes:
        contexts: Cache contexts, de-duplicated
        tags: Cache tags, de-duplicated
        max_age: Seconds, ``PERMANENT`` (None) or ``UNCACHEABLE`` (-1)
    """

    contexts: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    max_age: int | None = PERMANENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "contexts", _validate_keys("contexts", self.contexts))
        object.__setattr__(self, "tags", _validate_keys("tags", self.tags))
        max_age = self.max_age
        if max_age is not PERMANENT:
            if isinstance(max_age, bool) or not isinstance(max_age, int):
                raise ValueError(f"max_age must be an int or None, got {max_age!r}")
            if max_age < UNCACHEABLE:
                raise ValueError(f"max_age must be >= -1, got {max_age}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CacheMetadata):
            return NotImplemented
        return (
            set(self.contexts) == set(other.contexts)
            and set(self.tags) == set(other.tags)
            and self.max_age == other.max_age
        )

    def __hash__(self) -> int:
        return hash((frozenset(self.contexts), frozenset(self.tags), self.max_age))

    @property
    def is_cacheable(self) -> bool:
        return self.max_age != UNCACHEABLE

    def merge(self, other: CacheMetadata) -> CacheMetadata:
        """Combine with another triple (union, union, most restrictive)."""
        if not other.contexts and not other.tags and other.max_age is PERMANENT:
            return self
        return CacheMetadata(
            contexts=_ordered_union(self.contexts, other.contexts),
            tags=_ordered_union(self.tags, other.tags),
            max_age=merge_max_ages(self.max_age, other.max_age),
        )

    def add_tags(self, *tags: str) -> CacheMetadata:
        return self.merge(CacheMetadata(tags=tags))

    def add_contexts(self, *contexts: str) -> CacheMetadata:
        return self.merge(CacheMetadata(contexts=contexts))

    def with_max_age(self, max_age: int | None) -> CacheMetadata:
        """Tighten max-age; a looser value than the current one is ignored."""
        return self.merge(CacheMetadata(max_age=max_age))

    @classmethod
    def from_render_array(cls, node: Mapping[str, Any]) -> CacheMetadata:
        """Read ``#cache`` from a render node.

        Accepts either a CacheMetadata instance or the mapping form
        ``{"contexts": [...], "tags": [...], "max-age": int}``.
        """
        data = node.get(CACHE)
        if data is None:
            return cls()
        if isinstance(data, CacheMetadata):
            return data
        return cls(
            contexts=tuple(data.get(CACHE_CONTEXTS, ())),
            tags=tuple(data.get(CACHE_TAGS, ())),
            max_age=data.get(CACHE_MAX_AGE, PERMANENT),
        )

    def apply_to(self, node: dict[str, Any]) -> dict[str, Any]:
        """Write this triple as the mapping form of ``#cache``."""
        node[CACHE] = {
            CACHE_CONTEXTS: list(self.contexts),
            CACHE_TAGS: list(self.tags),
            CACHE_MAX_AGE: self.max_age,
        }
        return node
