"""Utility modules: HTML escaping and shared constants."""

from rendergate.utils.html import Markup, get_escaper, html_escape

__all__ = ["Markup", "get_escaper", "html_escape"]
