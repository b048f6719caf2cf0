"""Property-based tests for metadata merging and bubbling.

Uses hypothesis to verify the algebra the accumulator relies on:

- Merging is commutative and associative (as sets)
- The empty triple is neutral; UNCACHEABLE is absorbing
- Bubbling only ever grows the accumulator
- Rendering through a template never loses a node's metadata
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from rendergate import (
    UNCACHEABLE,
    BubbleableMetadata,
    CacheMetadata,
    Environment,
    RenderExtension,
    Renderer,
)
from rendergate.render.metadata import bubble

from .strategies import bubbleable_metadata, cache_metadata, html_hostile_text

_env = Environment(extensions=[RenderExtension(Renderer())])


class TestCacheMergeAlgebra:
    @given(a=cache_metadata, b=cache_metadata)
    @settings(max_examples=200)
    def test_commutative(self, a: CacheMetadata, b: CacheMetadata) -> None:
        assert a.merge(b) == b.merge(a)

    @given(a=cache_metadata, b=cache_metadata, c=cache_metadata)
    @settings(max_examples=200)
    def test_associative(self, a: CacheMetadata, b: CacheMetadata, c: CacheMetadata) -> None:
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    @given(a=cache_metadata)
    @settings(max_examples=100)
    def test_empty_is_neutral(self, a: CacheMetadata) -> None:
        assert a.merge(CacheMetadata()) == a
        assert CacheMetadata().merge(a) == a

    @given(a=cache_metadata)
    @settings(max_examples=100)
    def test_idempotent(self, a: CacheMetadata) -> None:
        assert a.merge(a) == a

    @given(a=cache_metadata)
    @settings(max_examples=100)
    def test_uncacheable_absorbs(self, a: CacheMetadata) -> None:
        assert a.merge(CacheMetadata(max_age=UNCACHEABLE)).max_age == UNCACHEABLE


class TestBubbleMonotonic:
    @given(ambient=bubbleable_metadata, incoming=bubbleable_metadata)
    @settings(max_examples=200)
    def test_bubble_only_grows(
        self, ambient: BubbleableMetadata, incoming: BubbleableMetadata
    ) -> None:
        before = ambient.copy()
        bubble(ambient, incoming)

        assert set(before.tags) <= set(ambient.tags)
        assert set(incoming.tags) <= set(ambient.tags)
        assert set(before.contexts) | set(incoming.contexts) == set(ambient.contexts)
        libraries = ambient.attachments.get("library", [])
        for meta in (before, incoming):
            for library in meta.attachments.get("library", []):
                assert library in libraries
        assert len(libraries) == len(set(libraries))

    @given(ambient=bubbleable_metadata, incoming=bubbleable_metadata)
    @settings(max_examples=200)
    def test_max_age_never_loosens(
        self, ambient: BubbleableMetadata, incoming: BubbleableMetadata
    ) -> None:
        before = ambient.max_age
        bubble(ambient, incoming)
        if before == UNCACHEABLE or incoming.max_age == UNCACHEABLE:
            assert ambient.max_age == UNCACHEABLE
        elif before is not None:
            assert ambient.max_age is not None
            assert ambient.max_age <= before


class TestTemplateBubbling:
    @given(nodes=st.lists(bubbleable_metadata, min_size=1, max_size=5))
    @settings(max_examples=100)
    def test_all_printed_nodes_reach_output(self, nodes: list[BubbleableMetadata]) -> None:
        values = [meta.apply_to({"#markup": str(i)}) for i, meta in enumerate(nodes)]
        out = _env.from_string("{{ items }}").render_with_metadata(items=values)

        expected = BubbleableMetadata()
        for meta in nodes:
            expected.merge(meta)
        assert out.metadata == expected
        assert str(out) == "".join(str(i) for i in range(len(nodes)))

    @given(text=html_hostile_text)
    @settings(max_examples=200)
    def test_plain_text_node_matches_escape_gate(self, text: str) -> None:
        via_node = _env.from_string("{{ n }}").render(n={"#plain_text": text})
        via_gate = _env.from_string("{{ t }}").render(t=text)
        assert via_node == via_gate
