"""Narrow interfaces for the collaborators the extension delegates to.

Routing, theming and date formatting live outside this package. The
extension only needs one call from each, so each collaborator is a
small Protocol; any object with the matching method works.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from rendergate.render.link import GeneratedUrl


@runtime_checkable
class UrlGenerator(Protocol):
    """Builds URLs for named routes.

    ``options["absolute"]`` selects absolute URLs (``url()``) or paths
    (``path()``). The result may be a plain string or a GeneratedUrl
    carrying cache metadata.
    """

    def generate(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str | GeneratedUrl: ...


@dataclass(frozen=True, slots=True)
class ActiveTheme:
    """The theme used for the current request."""

    name: str
    path: str


@runtime_checkable
class ThemeManager(Protocol):
    def get_active_theme(self) -> ActiveTheme: ...


@runtime_checkable
class DateFormatter(Protocol):
    """Formats timestamps; ``type`` names a configured format ("medium", "html_date", ...)."""

    def format(
        self,
        timestamp: int | float,
        type: str = "medium",
        format: str = "",
        timezone: str | None = None,
        langcode: str | None = None,
    ) -> str: ...
