"""Generated links and URLs that carry their own bubbleable metadata.

A URL generator may need to report cacheability (e.g. a CSRF-protected
route varies per session) and attachments together with the string it
produced. These wrappers keep both; the escape gate bubbles the metadata
when the value is printed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rendergate.render.metadata import BubbleableMetadata
from rendergate.utils.html import Markup


class GeneratedUrl:
    """A generated URL string plus its metadata. Not markup: escaped on output."""

    __slots__ = ("_metadata", "_value")

    def __init__(self, value: str = "", metadata: BubbleableMetadata | None = None) -> None:
        self._value = value
        self._metadata = metadata if metadata is not None else BubbleableMetadata()

    def get_generated_url(self) -> str:
        return self._value

    def set_generated_url(self, value: str) -> GeneratedUrl:
        self._value = value
        return self

    def get_bubbleable_metadata(self) -> BubbleableMetadata:
        return self._metadata

    def add_cache_tags(self, tags: list[str] | tuple[str, ...]) -> GeneratedUrl:
        self._metadata.add_cache_tags(*tags)
        return self

    def add_cache_contexts(self, contexts: list[str] | tuple[str, ...]) -> GeneratedUrl:
        self._metadata.add_cache_contexts(*contexts)
        return self

    def merge_cache_max_age(self, max_age: int | None) -> GeneratedUrl:
        self._metadata.merge_cache_max_age(max_age)
        return self

    def add_attachments(self, attachments: Mapping[str, Any]) -> GeneratedUrl:
        self._metadata.add_attachments(attachments)
        return self

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class GeneratedLink(GeneratedUrl):
    """A generated ``<a>`` tag plus its metadata. Safe markup.

    Example:
        >>> link = GeneratedLink('<a href="/node/1">One</a>').add_cache_tags(["node:1"])
        >>> link.__html__()
        Markup('<a href="/node/1">One</a>')
    """

    __slots__ = ()

    def get_generated_link(self) -> str:
        return self._value

    def set_generated_link(self, value: str) -> GeneratedLink:
        self._value = value
        return self

    def __html__(self) -> Markup:
        return Markup(self._value)
