"""rendergate environment: configuration, registries and errors.

Public API:
    Environment: compiles templates with the registered functions/filters
    TemplateCallable: a function or filter with its escape-safety metadata
    TemplateError and subclasses: the error hierarchy
"""

from rendergate.environment.core import Environment, Extension
from rendergate.environment.exceptions import (
    ErrorCode,
    ServiceNotConfiguredError,
    SourceSnippet,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from rendergate.environment.registry import CallableRegistry, TemplateCallable

__all__ = [
    "CallableRegistry",
    "Environment",
    "ErrorCode",
    "Extension",
    "ServiceNotConfiguredError",
    "SourceSnippet",
    "TemplateCallable",
    "TemplateError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
]
