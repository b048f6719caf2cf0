"""Tests for cache metadata and the bubbleable accumulator."""

from __future__ import annotations

import pytest

from rendergate import PERMANENT, UNCACHEABLE, BubbleableMetadata, CacheMetadata, GeneratedUrl
from rendergate.render.cache import merge_max_ages
from rendergate.render.metadata import bubble, merge_attachments


class TestMaxAge:
    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            (PERMANENT, PERMANENT, PERMANENT),
            (PERMANENT, 60, 60),
            (60, PERMANENT, 60),
            (60, 3600, 60),
            (0, 3600, 0),
            (UNCACHEABLE, PERMANENT, UNCACHEABLE),
            (3600, UNCACHEABLE, UNCACHEABLE),
        ],
    )
    def test_most_restrictive_wins(
        self, a: int | None, b: int | None, expected: int | None
    ) -> None:
        assert merge_max_ages(a, b) == expected


class TestCacheMetadata:
    def test_merge(self) -> None:
        a = CacheMetadata(tags=("a",), max_age=100)
        b = CacheMetadata(tags=("b",), max_age=UNCACHEABLE)
        merged = a.merge(b)
        assert merged.tags == ("a", "b")
        assert merged.max_age == UNCACHEABLE
        assert not merged.is_cacheable

    def test_keys_are_deduplicated_in_order(self) -> None:
        meta = CacheMetadata(contexts=("user", "url", "user"))
        assert meta.contexts == ("user", "url")
        assert meta.add_contexts("url", "theme").contexts == ("user", "url", "theme")

    def test_equality_ignores_order(self) -> None:
        assert CacheMetadata(tags=("a", "b")) == CacheMetadata(tags=("b", "a"))
        assert hash(CacheMetadata(tags=("a", "b"))) == hash(CacheMetadata(tags=("b", "a")))

    def test_with_max_age_never_loosens(self) -> None:
        assert CacheMetadata(max_age=60).with_max_age(3600).max_age == 60
        assert CacheMetadata(max_age=60).with_max_age(PERMANENT).max_age == 60

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tags": "node:1"},
            {"tags": (1,)},
            {"max_age": -2},
            {"max_age": "60"},
            {"max_age": True},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            CacheMetadata(**kwargs)

    def test_from_render_array(self) -> None:
        node = {"#cache": {"tags": ["node:1"], "contexts": ["user"], "max-age": 30}}
        assert CacheMetadata.from_render_array(node) == CacheMetadata(("user",), ("node:1",), 30)
        assert CacheMetadata.from_render_array({}) == CacheMetadata()

    def test_apply_to(self) -> None:
        node = CacheMetadata(tags=("a",)).apply_to({})
        assert node == {"#cache": {"contexts": [], "tags": ["a"], "max-age": None}}


class TestAttachments:
    def test_libraries_are_deduplicated(self) -> None:
        merged = merge_attachments({"library": ["a/x"]}, {"library": ["a/x", "b/y"]})
        assert merged == {"library": ["a/x", "b/y"]}

    def test_settings_merge_recursively(self) -> None:
        merged = merge_attachments(
            {"settings": {"a": {"x": 1}}}, {"settings": {"a": {"y": 2}, "b": 3}}
        )
        assert merged == {"settings": {"a": {"x": 1, "y": 2}, "b": 3}}

    def test_inputs_are_not_modified(self) -> None:
        current = {"library": ["a/x"]}
        merge_attachments(current, {"library": ["b/y"]})
        assert current == {"library": ["a/x"]}


class TestBubbleableMetadata:
    def test_chained_builders(self) -> None:
        acc = BubbleableMetadata().add_cache_tags("node:1").add_cache_contexts("user")
        acc.merge_cache_max_age(60).add_attachments({"library": ["core/drupal"]})
        assert acc.tags == ("node:1",)
        assert acc.contexts == ("user",)
        assert acc.max_age == 60
        assert acc.attachments == {"library": ["core/drupal"]}

    def test_bubble_merges_into_ambient(self) -> None:
        ambient = BubbleableMetadata().add_cache_tags("a")
        incoming = BubbleableMetadata(CacheMetadata(tags=("b",), max_age=UNCACHEABLE))
        result = bubble(ambient, incoming)
        assert result is ambient
        assert ambient.tags == ("a", "b")
        assert ambient.max_age == UNCACHEABLE

    def test_from_render_array(self) -> None:
        node = {"#cache": {"tags": ["t"]}, "#attached": {"library": ["a/b"]}}
        meta = BubbleableMetadata.from_render_array(node)
        assert meta.tags == ("t",)
        assert meta.attachments == {"library": ["a/b"]}

    def test_from_object_copies(self) -> None:
        url = GeneratedUrl("/x").add_cache_tags(["t"])
        meta = BubbleableMetadata.from_object(url)
        meta.add_cache_tags("other")
        assert url.get_bubbleable_metadata().tags == ("t",)

    def test_from_plain_object_is_empty(self) -> None:
        assert BubbleableMetadata.from_object(object()) == BubbleableMetadata()

    def test_apply_to(self) -> None:
        node = BubbleableMetadata().add_cache_tags("t").add_attachments({"library": ["a/b"]})
        result = node.apply_to({"#markup": "x"})
        assert result["#cache"]["tags"] == ["t"]
        assert result["#attached"] == {"library": ["a/b"]}

    def test_repr(self) -> None:
        acc = BubbleableMetadata().add_cache_tags("node:1")
        assert repr(acc) == (
            "BubbleableMetadata(tags=('node:1',), contexts=(), max_age=None, attachments={})"
        )
