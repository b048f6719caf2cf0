"""rendergate: escape-safe bridge between templates and render trees.

Templates print values of many shapes: plain text, safe markup, render
nodes still to be evaluated, objects that carry cache metadata. rendergate
routes every printed value through a single gate that escapes exactly
what needs escaping, evaluates render nodes once, and bubbles their
cache tags, contexts, max-age and asset attachments into the response.

Quickstart:
    >>> from rendergate import Environment, RenderExtension, Renderer
    >>> env = Environment(extensions=[RenderExtension(Renderer())])
    >>> t = env.from_string("<p>{{ title }}</p>{{ body }}")
    >>> out = t.render_with_metadata(
    ...     title="<Tom & Jerry>",
    ...     body={"#markup": "<em>hi</em>", "#cache": {"tags": ["node:1"]}},
    ... )
    >>> str(out)
    '<p>&lt;Tom &amp; Jerry&gt;</p><em>hi</em>'
    >>> out.metadata.tags
    ('node:1',)

Architecture:
Template Source → Parser → rendergate AST → Compiler → Python AST → exec()

The compiler decides per ``{{ }}`` whether output goes through the
escape gate (``escape`` filter) or the print hook (``render_var``), using
the safety declarations of registered functions and filters. ``url()``
and ``path()`` are declared safe per call site: only when every route
parameter is a literal.

Errors:
Data problems degrade (unknown shapes print via ``str()``, undefined
names print nothing unless ``strict_undefined``). Integration faults
such as a missing URL generator raise ``ServiceNotConfiguredError``.

"""

from rendergate.analysis import Literalness, is_url_generation_safe, literalness
from rendergate.attribute import Attribute
from rendergate.environment import (
    Environment,
    ErrorCode,
    ServiceNotConfiguredError,
    TemplateCallable,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
)
from rendergate.extension import RenderExtension
from rendergate.render import (
    PERMANENT,
    UNCACHEABLE,
    BubbleableMetadata,
    CacheMetadata,
    GeneratedLink,
    GeneratedUrl,
    Renderer,
    RenderResult,
    ValueKind,
    classify_value,
)
from rendergate.render_context import RenderContext, get_render_context, render_context
from rendergate.services import ActiveTheme, DateFormatter, ThemeManager, UrlGenerator
from rendergate.template import RenderedOutput, Template
from rendergate.utils.html import Markup, html_escape

__version__ = "0.1.0"

__all__ = [
    "PERMANENT",
    "UNCACHEABLE",
    "ActiveTheme",
    "Attribute",
    "BubbleableMetadata",
    "CacheMetadata",
    "DateFormatter",
    "Environment",
    "ErrorCode",
    "GeneratedLink",
    "GeneratedUrl",
    "Literalness",
    "Markup",
    "RenderContext",
    "RenderExtension",
    "RenderResult",
    "RenderedOutput",
    "Renderer",
    "ServiceNotConfiguredError",
    "Template",
    "TemplateCallable",
    "TemplateError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "ThemeManager",
    "UndefinedError",
    "UrlGenerator",
    "ValueKind",
    "__version__",
    "classify_value",
    "get_render_context",
    "html_escape",
    "is_url_generation_safe",
    "literalness",
    "render_context",
]
