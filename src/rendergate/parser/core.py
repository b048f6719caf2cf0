"""Template parser: source text → Template AST.

The template language is intentionally small:

    text                 → Data
    {{ expression }}     → Output
    {# comment #}        → dropped

Finding the end of an output tag:
    An expression may itself contain ``}}`` (nested dict displays, string
    literals), so each ``}}`` after the opening delimiter is tried in turn
    and the first candidate whose content parses as an expression wins.
    When none parses, the error of the first candidate is reported.

"""

from __future__ import annotations

from rendergate.environment.exceptions import ErrorCode, TemplateSyntaxError
from rendergate.nodes import Data, Node, Output, Template
from rendergate.parser.expressions import ExpressionParsingMixin

VARIABLE_START = "{{"
VARIABLE_END = "}}"
COMMENT_START = "{#"
COMMENT_END = "#}"


class Parser(ExpressionParsingMixin):
    """Parse template source into an immutable Template node.

    Example:
        >>> Parser("Hello {{ name }}!").parse().body
        (Data(lineno=1, col_offset=0, value='Hello '), Output(...), Data(...))

    """

    __slots__ = ("_expr_col", "_expr_line", "_name", "_source")

    def __init__(self, source: str, name: str | None = None):
        self._source = source
        self._name = name
        self._expr_line = 1
        self._expr_col = 0

    def parse(self) -> Template:
        source = self._source
        body: list[Node] = []
        pos = 0

        while pos < len(source):
            start = self._next_tag(pos)
            if start == -1:
                self._append_data(body, pos, len(source))
                break

            self._append_data(body, pos, start)
            if source.startswith(COMMENT_START, start):
                end = source.find(COMMENT_END, start + 2)
                if end == -1:
                    raise self._error(
                        "Unclosed comment; expected '#}'",
                        *self._location(start),
                        code=ErrorCode.UNCLOSED_TAG,
                    )
                pos = end + len(COMMENT_END)
            else:
                output, pos = self._parse_output(start)
                body.append(output)

        return Template(1, 0, tuple(body))

    def _next_tag(self, pos: int) -> int:
        candidates = [
            index
            for index in (
                self._source.find(VARIABLE_START, pos),
                self._source.find(COMMENT_START, pos),
            )
            if index != -1
        ]
        return min(candidates) if candidates else -1

    def _append_data(self, body: list[Node], start: int, end: int) -> None:
        if end > start:
            lineno, col = self._location(start)
            body.append(Data(lineno, col, self._source[start:end]))

    def _parse_output(self, start: int) -> tuple[Output, int]:
        source = self._source
        content_start = start + len(VARIABLE_START)
        tag_line, tag_col = self._location(start)

        first_error: TemplateSyntaxError | None = None
        end = source.find(VARIABLE_END, content_start)
        if end == -1:
            raise self._error(
                "Unclosed variable tag; expected '}}'",
                tag_line,
                tag_col,
                ErrorCode.UNCLOSED_TAG,
            )

        while end != -1:
            text = source[content_start:end]
            if text.strip():
                expr_start = content_start + len(text) - len(text.lstrip())
                lineno, col = self._location(expr_start)
                try:
                    expr = self._parse_expression(text.lstrip(), lineno, col)
                except TemplateSyntaxError as e:
                    if first_error is None:
                        first_error = e
                else:
                    return Output(tag_line, tag_col, expr), end + len(VARIABLE_END)
            elif first_error is None:
                first_error = self._error(
                    "Empty expression", tag_line, tag_col, ErrorCode.INVALID_EXPRESSION
                )
            end = source.find(VARIABLE_END, end + 1)

        assert first_error is not None
        raise first_error

    def _location(self, index: int) -> tuple[int, int]:
        """1-based line and 0-based column of a source offset."""
        lineno = self._source.count("\n", 0, index) + 1
        line_start = self._source.rfind("\n", 0, index) + 1
        return lineno, index - line_start

    def _error(
        self,
        message: str,
        lineno: int,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno=lineno,
            name=self._name,
            source=self._source,
            col_offset=col_offset,
            code=code,
        )
