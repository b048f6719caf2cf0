"""Compiled templates and their runtime helpers."""

from rendergate.template.core import RenderedOutput, Template

__all__ = ["RenderedOutput", "Template"]
