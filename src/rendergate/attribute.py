"""Attribute: a mutable collection of HTML attributes for templates.

Templates build element attributes incrementally and print them inside
a tag:

    <div {{ create_attribute({"id": "main"}).add_class("wide") }}></div>

Values are stored normalized:
    - ``class`` is always a token list, de-duplicated in insertion order
    - lists/tuples/sets become token lists (space-joined on output)
    - ``True``/``False`` are boolean attributes (bare name / omitted)
    - ``None`` removes the attribute
    - everything else is stored as text

Names are checked on the way in: a name that could end the attribute
or the tag (whitespace, quotes, ">", "/", "=" or a control character)
raises ValueError.

Serialization is computed on every call, so it always reflects the
latest mutation. Values are HTML-escaped; the result is safe markup.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from rendergate.utils.constants import EVENT_HANDLER_ATTRS
from rendergate.utils.html import Markup, html_escape

AttributeValue = str | list[str] | bool

CLASS = "class"

_INVALID_NAME_CHARS = re.compile(r"[\s\"'>/=\x00-\x1f\x7f]")


def _tokens(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable):
        tokens: list[str] = []
        for item in value:
            tokens.extend(_tokens(item))
        return tokens
    return [str(value)]


def _unique(tokens: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(tokens))


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name or _INVALID_NAME_CHARS.search(name):
        raise ValueError(f"Invalid HTML attribute name: {name!r}")
    return name


class Attribute:
    """Ordered, mutable HTML attribute collection with a fluent API.

    Every mutator returns ``self``. camelCase aliases (``addClass``,
    ``removeClass``, ``setAttribute``, ``removeAttribute``) keep themes
    written against the Twig API working unchanged.

    Example:
        >>> attrs = Attribute({"class": ["a"], "data-x": "y"})
        >>> str(attrs.add_class("b"))
        'class="a b" data-x="y"'
    """

    __slots__ = ("_storage",)

    def __init__(self, attributes: Mapping[str, Any] | None = None):
        self._storage: dict[str, AttributeValue] = {}
        for name, value in (attributes or {}).items():
            self.set_attribute(name, value)

    @staticmethod
    def _normalize(name: str, value: Any) -> AttributeValue:
        if name == CLASS:
            return _unique(_tokens(value))
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple, set, frozenset)):
            return [str(item) for item in value]
        return str(value)

    # -- mutators ----------------------------------------------------------

    def set_attribute(self, name: str, value: Any) -> Attribute:
        if value is None:
            self._storage.pop(name, None)
            return self
        _check_name(name)
        if name.lower() in EVENT_HANDLER_ATTRS and not hasattr(value, "__html__"):
            warnings.warn(
                f"Setting event handler attribute '{name}' from a plain value. "
                "The value is HTML-escaped but not JavaScript-escaped; "
                "pass Markup if the script is trusted.",
                UserWarning,
                stacklevel=2,
            )
        self._storage[name] = self._normalize(name, value)
        return self

    def remove_attribute(self, *names: str | Iterable[str]) -> Attribute:
        for name in _tokens(names):
            self._storage.pop(name, None)
        return self

    def add_class(self, *classes: Any) -> Attribute:
        current = self._storage.get(CLASS)
        existing = current if isinstance(current, list) else []
        self._storage[CLASS] = _unique([*existing, *_tokens(classes)])
        return self

    def remove_class(self, *classes: Any) -> Attribute:
        current = self._storage.get(CLASS)
        if isinstance(current, list):
            removed = set(_tokens(classes))
            self._storage[CLASS] = [token for token in current if token not in removed]
        return self

    def merge(self, other: Attribute | Mapping[str, Any]) -> Attribute:
        """Merge another collection in: class tokens appended, other values replaced."""
        items = other.to_dict() if isinstance(other, Attribute) else dict(other)
        for name, value in items.items():
            if name == CLASS:
                self.add_class(value)
            else:
                self.set_attribute(name, value)
        return self

    # Twig-style aliases
    addClass = add_class
    removeClass = remove_class
    setAttribute = set_attribute
    removeAttribute = remove_attribute

    # -- queries -----------------------------------------------------------

    def has_class(self, name: str) -> bool:
        current = self._storage.get(CLASS)
        return isinstance(current, list) and name in current

    hasClass = has_class

    def has_attribute(self, name: str) -> bool:
        return name in self._storage

    def get_class(self) -> list[str]:
        current = self._storage.get(CLASS)
        return list(current) if isinstance(current, list) else []

    def to_dict(self) -> dict[str, AttributeValue]:
        """Plain copy of the stored attributes (lists copied)."""
        return {
            name: list(value) if isinstance(value, list) else value
            for name, value in self._storage.items()
        }

    def __getitem__(self, name: str) -> AttributeValue:
        return self._storage[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set_attribute(name, value)

    def __delitem__(self, name: str) -> None:
        del self._storage[name]

    def __contains__(self, name: object) -> bool:
        return name in self._storage

    def __iter__(self) -> Iterator[str]:
        return iter(self._storage)

    def __len__(self) -> int:
        return len(self._storage)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attribute):
            return NotImplemented
        return self._storage == other._storage

    __hash__ = None  # type: ignore[assignment]

    # -- output ------------------------------------------------------------

    def _render(self) -> str:
        parts: list[str] = []
        for name, value in self._storage.items():
            if value is True:
                parts.append(html_escape(name))
            elif value is False:
                continue
            elif isinstance(value, list):
                if value:
                    parts.append(f'{html_escape(name)}="{html_escape(" ".join(value))}"')
            else:
                parts.append(f'{html_escape(name)}="{html_escape(value)}"')
        return " ".join(parts)

    def __str__(self) -> str:
        return self._render()

    def __html__(self) -> Markup:
        return Markup(self._render())

    def copy(self) -> Attribute:
        clone = Attribute()
        clone._storage = self.to_dict()
        return clone

    __copy__ = copy

    def __repr__(self) -> str:
        return f"Attribute({self.to_dict()!r})"
