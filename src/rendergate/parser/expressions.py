"""Expression parsing for the rendergate parser.

Expressions use Python expression syntax. The text between ``{{`` and
``}}`` is parsed with ``ast.parse(mode="eval")`` and the resulting Python
AST is translated into template nodes. The ``|`` operator is reserved for
filters:

    value | escape          → Filter(value, "escape")
    value | escape("js")    → Filter(value, "escape", [Const("js")])
    value | a | b           → Filter(Filter(value, "a"), "b")

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from rendergate.environment.exceptions import ErrorCode
from rendergate.nodes import (
    BinOp,
    CondExpr,
    Const,
    Dict,
    Expr,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    Tuple,
    UnaryOp,
)

if TYPE_CHECKING:
    from rendergate.environment.exceptions import TemplateSyntaxError

_BINARY_OPERATORS: dict[type[ast.operator], str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.FloorDiv: "//",
    ast.Mod: "%",
    ast.Pow: "**",
}

_UNARY_OPERATORS: dict[type[ast.unaryop], str] = {
    ast.USub: "-",
    ast.UAdd: "+",
    ast.Not: "not",
}


class ExpressionParsingMixin:
    """Mixin translating Python expression ASTs into template nodes.

    Positions are mapped back onto the template: the first line of an
    expression is offset by the column of the ``{{`` it sits in.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _expr_line: int
        _expr_col: int

        def _error(
            self,
            message: str,
            lineno: int,
            col_offset: int | None = None,
            code: ErrorCode | None = None,
        ) -> TemplateSyntaxError: ...

    def _parse_expression(self, text: str, lineno: int, col_offset: int) -> Expr:
        """Parse expression text found at (lineno, col_offset) of the template."""
        self._expr_line = lineno
        self._expr_col = col_offset
        try:
            tree = ast.parse(text.strip(), mode="eval")
        except SyntaxError as e:
            line = lineno + (e.lineno or 1) - 1
            raise self._error(
                f"Invalid expression: {e.msg}", line, code=ErrorCode.INVALID_EXPRESSION
            ) from None
        return self._convert(tree.body)

    def _position(self, node: ast.AST) -> tuple[int, int]:
        rel_line = getattr(node, "lineno", 1)
        rel_col = getattr(node, "col_offset", 0)
        if rel_line == 1:
            return self._expr_line, self._expr_col + rel_col
        return self._expr_line + rel_line - 1, rel_col

    def _convert(self, node: ast.expr) -> Expr:
        lineno, col = self._position(node)
        handler = getattr(self, f"_convert_{type(node).__name__}", None)
        if handler is None:
            raise self._error(
                f"Unsupported expression: {type(node).__name__}",
                lineno,
                col,
                ErrorCode.INVALID_EXPRESSION,
            )
        return handler(node, lineno, col)

    def _convert_Constant(self, node: ast.Constant, lineno: int, col: int) -> Expr:
        if not isinstance(node.value, (str, int, float, bool, type(None))):
            raise self._error(
                f"Unsupported constant: {node.value!r}", lineno, col, ErrorCode.INVALID_EXPRESSION
            )
        return Const(lineno, col, node.value)

    def _convert_Name(self, node: ast.Name, lineno: int, col: int) -> Expr:
        return Name(lineno, col, node.id)

    def _convert_List(self, node: ast.List, lineno: int, col: int) -> Expr:
        return List(lineno, col, tuple(self._convert(elt) for elt in node.elts))

    def _convert_Tuple(self, node: ast.Tuple, lineno: int, col: int) -> Expr:
        return Tuple(lineno, col, tuple(self._convert(elt) for elt in node.elts))

    def _convert_Dict(self, node: ast.Dict, lineno: int, col: int) -> Expr:
        keys = tuple(self._convert(key) if key is not None else None for key in node.keys)
        values = tuple(self._convert(value) for value in node.values)
        return Dict(lineno, col, keys, values)

    def _convert_Attribute(self, node: ast.Attribute, lineno: int, col: int) -> Expr:
        return Getattr(lineno, col, self._convert(node.value), node.attr)

    def _convert_Subscript(self, node: ast.Subscript, lineno: int, col: int) -> Expr:
        if isinstance(node.slice, ast.Slice):
            raise self._error("Slices are not supported", lineno, col, ErrorCode.INVALID_EXPRESSION)
        return Getitem(lineno, col, self._convert(node.value), self._convert(node.slice))

    def _convert_Call(self, node: ast.Call, lineno: int, col: int) -> Expr:
        args, kwargs, dyn_args, dyn_kwargs = self._call_arguments(node)
        return FuncCall(lineno, col, self._convert(node.func), args, kwargs, dyn_args, dyn_kwargs)

    def _call_arguments(
        self, node: ast.Call
    ) -> tuple[tuple[Expr, ...], dict[str, Expr], Expr | None, Expr | None]:
        args: list[Expr] = []
        dyn_args: Expr | None = None
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                dyn_args = self._convert(arg.value)
            else:
                args.append(self._convert(arg))

        kwargs: dict[str, Expr] = {}
        dyn_kwargs: Expr | None = None
        for keyword in node.keywords:
            if keyword.arg is None:
                dyn_kwargs = self._convert(keyword.value)
            else:
                kwargs[keyword.arg] = self._convert(keyword.value)

        return tuple(args), kwargs, dyn_args, dyn_kwargs

    def _convert_BinOp(self, node: ast.BinOp, lineno: int, col: int) -> Expr:
        if isinstance(node.op, ast.BitOr):
            return self._convert_filter(node, lineno, col)
        op = _BINARY_OPERATORS.get(type(node.op))
        if op is None:
            raise self._error(
                f"Unsupported operator: {type(node.op).__name__}",
                lineno,
                col,
                ErrorCode.INVALID_EXPRESSION,
            )
        return BinOp(lineno, col, op, self._convert(node.left), self._convert(node.right))

    def _convert_filter(self, node: ast.BinOp, lineno: int, col: int) -> Expr:
        value = self._convert(node.left)
        target = node.right
        if isinstance(target, ast.Name):
            return Filter(lineno, col, value, target.id)
        if isinstance(target, ast.Call) and isinstance(target.func, ast.Name):
            args, kwargs, dyn_args, dyn_kwargs = self._call_arguments(target)
            if dyn_args is not None or dyn_kwargs is not None:
                raise self._error(
                    "Filters do not accept *args or **kwargs",
                    lineno,
                    col,
                    ErrorCode.INVALID_FILTER,
                )
            return Filter(lineno, col, value, target.func.id, args, kwargs)
        target_line, target_col = self._position(target)
        raise self._error(
            "Expected a filter name after '|'", target_line, target_col, ErrorCode.INVALID_FILTER
        )

    def _convert_UnaryOp(self, node: ast.UnaryOp, lineno: int, col: int) -> Expr:
        op = _UNARY_OPERATORS.get(type(node.op))
        if op is None:
            raise self._error(
                f"Unsupported operator: {type(node.op).__name__}",
                lineno,
                col,
                ErrorCode.INVALID_EXPRESSION,
            )
        operand = self._convert(node.operand)
        # Negative number literals stay constants
        if (
            op in ("-", "+")
            and isinstance(operand, Const)
            and isinstance(operand.value, (int, float))
            and not isinstance(operand.value, bool)
        ):
            return Const(lineno, col, -operand.value if op == "-" else operand.value)
        return UnaryOp(lineno, col, op, operand)

    def _convert_IfExp(self, node: ast.IfExp, lineno: int, col: int) -> Expr:
        return CondExpr(
            lineno,
            col,
            self._convert(node.test),
            self._convert(node.body),
            self._convert(node.orelse),
        )
