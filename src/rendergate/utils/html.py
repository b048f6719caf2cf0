"""HTML escaping, per-context escapers, and the Markup safe-string type.

Any object exposing ``__html__()`` is treated as already safe for HTML
output. ``Markup`` is the concrete ``str`` subclass carrying that promise;
operations that combine it with plain strings escape the plain side.

Escapers:
    html        ``& < > " '`` to entities (single ``str.translate`` pass)
    html_attr   everything outside ``[a-zA-Z0-9,.-_]`` to entities
    js          everything outside ``[a-zA-Z0-9,._]`` to ``\\uXXXX``
    css         everything outside ``[a-zA-Z0-9]`` to ``\\HEX ``
    url         percent-encoding, nothing kept as-is but unreserved chars

"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import quote

# Same entity set as htmlspecialchars(ENT_QUOTES)
_HTML_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)

_HTML_ATTR_NAMED = {'"': "quot", "&": "amp", "<": "lt", ">": "gt"}
_HTML_ATTR_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9,.\-_]")
_JS_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9,._]")
_CSS_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")

_CSS_IDENTIFIER_FILTER = str.maketrans({" ": "-", "_": "-", "/": "-", "[": "-", "]": ""})
_CSS_IDENTIFIER_INVALID_RE = re.compile(r"[^\-0-9A-Z_a-z\u00a1-\uffff]")
_ID_FILTER = str.maketrans({" ": "-", "_": "-", "[": "-", "]": ""})
_ID_INVALID_RE = re.compile(r"[^A-Za-z0-9\-_]")
_HYPHENS_RE = re.compile(r"-+")


def html_escape(value: Any) -> str:
    """Escape a value for HTML text and quoted attribute contexts.

    Values that implement ``__html__`` are returned as their safe text,
    everything else is converted with ``str()`` and escaped.

    Complexity: O(n) single pass via ``str.translate()``.
    """
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(value).translate(_HTML_ESCAPE_TABLE)


def escape_html_attr(value: str) -> str:
    """Escape for unquoted or quoted HTML attribute values."""

    def _replace(match: re.Match[str]) -> str:
        char = match.group(0)
        named = _HTML_ATTR_NAMED.get(char)
        if named is not None:
            return f"&{named};"
        code = ord(char)
        # Control characters other than tab/newline/return have no safe form
        if (code <= 0x1F and char not in "\t\n\r") or 0x7F <= code <= 0x9F:
            return "&#xFFFD;"
        return f"&#x{code:02X};"

    return _HTML_ATTR_UNSAFE_RE.sub(_replace, value)


def escape_js(value: str) -> str:
    """Escape for a JavaScript string literal."""

    def _replace(match: re.Match[str]) -> str:
        code = ord(match.group(0))
        if code < 0x10000:
            return f"\\u{code:04X}"
        # Astral plane: UTF-16 surrogate pair
        code -= 0x10000
        high = 0xD800 + (code >> 10)
        low = 0xDC00 + (code & 0x3FF)
        return f"\\u{high:04X}\\u{low:04X}"

    return _JS_UNSAFE_RE.sub(_replace, value)


def escape_css(value: str) -> str:
    """Escape for a CSS string or identifier."""
    return _CSS_UNSAFE_RE.sub(lambda m: f"\\{ord(m.group(0)):X} ", value)


def escape_url(value: str) -> str:
    """Percent-encode a URL component."""
    return quote(value, safe="")


ESCAPERS: dict[str, Callable[[str], str]] = {
    "html": html_escape,
    "html_attr": escape_html_attr,
    "js": escape_js,
    "css": escape_css,
    "url": escape_url,
}


def get_escaper(strategy: str) -> Callable[[str], str]:
    """Return the escaper for an output context.

    Raises:
        ValueError: If the strategy is unknown
    """
    try:
        return ESCAPERS[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown escape strategy {strategy!r}; "
            f"expected one of {', '.join(sorted(ESCAPERS))}"
        ) from None


class Markup(str):
    """A string that is already safe for HTML output.

    Example:
        >>> Markup("<em>hi</em>") + "<b>"
        Markup('<em>hi</em>&lt;b&gt;')
        >>> Markup.escape("<b>")
        Markup('&lt;b&gt;')
    """

    __slots__ = ()

    def __new__(cls, base: Any = "") -> Markup:
        if hasattr(base, "__html__"):
            base = base.__html__()
        return super().__new__(cls, base)

    def __html__(self) -> Markup:
        return self

    def __add__(self, other: Any) -> Markup:
        if isinstance(other, str) or hasattr(other, "__html__"):
            return self.__class__(str.__add__(self, html_escape(other)))
        return NotImplemented

    def __radd__(self, other: Any) -> Markup:
        if isinstance(other, str) or hasattr(other, "__html__"):
            return self.__class__(html_escape(other) + str(self))
        return NotImplemented

    def __mul__(self, count: Any) -> Markup:
        return self.__class__(str.__mul__(self, count))

    __rmul__ = __mul__

    def __mod__(self, arg: Any) -> Markup:
        if isinstance(arg, tuple):
            arg = tuple(_escape_argument(a) for a in arg)
        elif isinstance(arg, Mapping):
            arg = {k: _escape_argument(v) for k, v in arg.items()}
        else:
            arg = _escape_argument(arg)
        return self.__class__(str.__mod__(self, arg))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str.__repr__(self)})"

    def join(self, iterable: Iterable[Any]) -> Markup:
        return self.__class__(str.join(self, (html_escape(item) for item in iterable)))

    def format(self, *args: Any, **kwargs: Any) -> Markup:
        args = tuple(_escape_argument(a) for a in args)
        kwargs = {k: _escape_argument(v) for k, v in kwargs.items()}
        return self.__class__(str.format(self, *args, **kwargs))

    @classmethod
    def escape(cls, value: Any) -> Markup:
        """Escape a value unless it is already safe, returning Markup."""
        if hasattr(value, "__html__"):
            return cls(value)
        return cls(html_escape(value))


def _escape_argument(value: Any) -> Any:
    # Numbers keep their type so %d / {:.2f} still work
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return html_escape(value)


def clean_css_identifier(identifier: str) -> str:
    """Reduce free text to a valid CSS identifier.

    Valid characters are ``-``, ``_``, ASCII letters and digits, and
    code points from U+00A1 upward. Identifiers may not start with a
    digit, two hyphens, or a hyphen followed by a digit.
    """
    identifier = identifier.translate(_CSS_IDENTIFIER_FILTER)
    identifier = _CSS_IDENTIFIER_INVALID_RE.sub("", identifier)
    if identifier[:1].isdigit():
        identifier = "_" + identifier[1:]
    elif identifier.startswith("--") or (
        identifier.startswith("-") and identifier[1:2].isdigit()
    ):
        identifier = "__" + identifier[2:]
    return identifier


def get_class(value: Any) -> str:
    """Normalize a value for use as a CSS class token."""
    return clean_css_identifier(str(value).lower())


def get_id(value: Any) -> str:
    """Normalize a value for use as an HTML id."""
    identifier = str(value).lower().translate(_ID_FILTER)
    identifier = _ID_INVALID_RE.sub("", identifier)
    return _HYPHENS_RE.sub("-", identifier)
