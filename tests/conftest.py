"""Pytest configuration and fixtures for rendergate tests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from rendergate import (
    ActiveTheme,
    Environment,
    GeneratedUrl,
    RenderExtension,
    Renderer,
    render_context,
)


class RecordingUrlGenerator:
    """URL generator that records every call and builds ``/name?k=v`` paths."""

    def __init__(self, result: str | GeneratedUrl | None = None) -> None:
        self.calls: list[tuple[str, dict[str, Any], dict[str, Any]]] = []
        self._result = result

    def generate(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str | GeneratedUrl:
        self.calls.append((name, dict(parameters or {}), dict(options or {})))
        if self._result is not None:
            return self._result
        prefix = "http://example.com" if (options or {}).get("absolute") else ""
        query = "&".join(f"{key}={value}" for key, value in (parameters or {}).items())
        return f"{prefix}/{name}" + (f"?{query}" if query else "")


class StaticThemeManager:
    def __init__(self, theme: ActiveTheme) -> None:
        self.theme = theme

    def get_active_theme(self) -> ActiveTheme:
        return self.theme


@pytest.fixture
def renderer() -> Renderer:
    """Reference render-tree evaluator without plugins."""
    return Renderer()


@pytest.fixture
def url_generator() -> RecordingUrlGenerator:
    return RecordingUrlGenerator()


@pytest.fixture
def extension(renderer: Renderer, url_generator: RecordingUrlGenerator) -> RenderExtension:
    """RenderExtension wired to the reference renderer and a recording router."""
    return (
        RenderExtension(renderer)
        .set_url_generator(url_generator)
        .set_theme_manager(StaticThemeManager(ActiveTheme("test_theme", "foo/bar")))
    )


@pytest.fixture
def env(extension: RenderExtension) -> Environment:
    """Environment with html autoescaping and the render extension."""
    return Environment(extensions=[extension])


@pytest.fixture
def bare_env() -> Environment:
    """Environment without any extension (fallback escape and print hooks)."""
    return Environment()


@pytest.fixture
def accumulator():
    """Active render context; yields its metadata accumulator."""
    with render_context() as ctx:
        yield ctx.metadata


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )
