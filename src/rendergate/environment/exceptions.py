"""Exceptions for the rendergate template bridge.

Exception Hierarchy:
TemplateError (base)
├── TemplateSyntaxError         # Parse/compile-time error in template source
├── TemplateRuntimeError        # Render-time error with context
├── UndefinedError              # Undefined variable access (strict mode)
└── ServiceNotConfiguredError   # External collaborator not wired

What is *not* an error:
- A call site the URL-safety classifier cannot understand: it is
  classified as unsafe and escaped.
- A value of an unsupported shape: it is printed via best-effort
  string conversion.
- Conflicting cache metadata: the merge rules decide.

Missing services are the opposite case: they are integration faults and
are raised to the operator instead of being papered over with defaults.

"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes.

    Format: R-{CATEGORY}-{NUMBER}
    Categories: PAR (parser/compiler), RUN (runtime), CFG (configuration)
    """

    # Parser errors (R-PAR-xxx)
    INVALID_EXPRESSION = "R-PAR-001"
    INVALID_FILTER = "R-PAR-002"
    UNCLOSED_TAG = "R-PAR-003"
    UNKNOWN_FILTER = "R-PAR-004"

    # Runtime errors (R-RUN-xxx)
    UNDEFINED_VARIABLE = "R-RUN-001"
    RUNTIME_ERROR = "R-RUN-002"

    # Configuration errors (R-CFG-xxx)
    SERVICE_NOT_CONFIGURED = "R-CFG-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'parser', 'configuration')."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "parser",
            "RUN": "runtime",
            "CFG": "configuration",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet with line numbers, marking the error line."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>3} | {content}")
        if self.column is not None:
            parts.append(f"   | {' ' * self.column}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all rendergate template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-screen summary prefixed with its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    When ``source`` and ``lineno`` are provided, the error message includes
    the offending line; ``col_offset`` adds a caret under the column.
    """

    code: ErrorCode | None = ErrorCode.INVALID_EXPRESSION

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"

        header = f"Syntax Error: {self.message}\n  --> {location}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                snippet = f"\n   |\n{self.lineno:>3} | {lines[self.lineno - 1]}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Attributes:
        message: Error description
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
        source_snippet: Source lines around the failing line
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {loc}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.suggestion:
            parts.append(f"\n  Suggestion: {self.suggestion}")

        return "\n".join(parts)


class UndefinedError(TemplateError):
    """Raised when accessing an undefined variable with ``strict_undefined``.

    If ``available_names`` is provided, a "Did you mean?" suggestion is
    included when a close match is found.
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        template: str | None = None,
        lineno: int | None = None,
        available_names: frozenset[str] | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.name = name
        self.template = template or "<template>"
        self.lineno = lineno
        self._available_names = available_names
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.template
        if self.lineno:
            location += f":{self.lineno}"
        msg = f"Undefined variable '{self.name}' in {location}"

        if self._available_names:
            matches = get_close_matches(self.name, self._available_names, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"

        if self.source_snippet:
            msg += "\n" + self.source_snippet.format()
        return msg


class ServiceNotConfiguredError(TemplateError):
    """An external collaborator was used before being wired in.

    Example:
        ServiceNotConfiguredError: url generator is not configured;
        call RenderExtension.set_url_generator() before rendering path()
    """

    code: ErrorCode | None = ErrorCode.SERVICE_NOT_CONFIGURED

    def __init__(self, service: str, setter: str, caller: str):
        self.service = service
        self.setter = setter
        self.caller = caller
        super().__init__(
            f"{service} is not configured; call RenderExtension.{setter}() "
            f"before rendering {caller}()"
        )
