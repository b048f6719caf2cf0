"""Shared constants for rendergate.

Reserved render-node keys, escape strategy names, and attribute names
that deserve a second look when set from template data.
"""

from __future__ import annotations

# Render-node properties are prefixed so they never collide with child keys
PROPERTY_PREFIX = "#"

MARKUP = "#markup"
PLAIN_TEXT = "#plain_text"
TYPE = "#type"
CACHE = "#cache"
ATTACHED = "#attached"
PRINTED = "#printed"
PREFIX = "#prefix"
SUFFIX = "#suffix"
ACCESS = "#access"
WEIGHT = "#weight"

# Keys of the mapping form of #cache
CACHE_CONTEXTS = "contexts"
CACHE_TAGS = "tags"
CACHE_MAX_AGE = "max-age"

# Escape strategies understood by the escape gate
ESCAPE_STRATEGIES: frozenset[str] = frozenset({"html", "html_attr", "js", "css", "url"})
DEFAULT_STRATEGY = "html"

# is_safe marker meaning "safe for every strategy"
SAFE_FOR_ALL = "all"

# Event handler attributes that can execute JavaScript
# Source: WHATWG HTML Living Standard (common subset)
EVENT_HANDLER_ATTRS: frozenset[str] = frozenset(
    {
        "onabort", "onblur", "onchange", "onclick", "oncontextmenu", "oncopy",
        "oncut", "ondblclick", "ondrag", "ondrop", "onerror", "onfocus",
        "oninput", "onkeydown", "onkeypress", "onkeyup", "onload",
        "onmousedown", "onmouseenter", "onmouseleave", "onmousemove",
        "onmouseout", "onmouseover", "onmouseup", "onpaste", "onpointerdown",
        "onpointerup", "onreset", "onresize", "onscroll", "onselect",
        "onsubmit", "ontoggle", "ontouchstart", "ontouchend", "onunload",
        "onwheel",
    }
)
