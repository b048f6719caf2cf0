"""Expression compilation for the rendergate compiler.

Provides a mixin compiling template expression nodes to Python AST
expressions. Name resolution happens through runtime helpers so that the
generated code never touches the user's context dict directly:

    name            → _lookup(ctx, "name")
    obj.attr        → _getattr(obj, "attr")
    obj[key]        → _getitem(obj, key)
    fn(...)         → _functions["fn"](...)      (registered functions)
    value | f(...)  → _filters["f"](value, ...)

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rendergate.environment.exceptions import ErrorCode, TemplateSyntaxError

if TYPE_CHECKING:
    from rendergate.environment import Environment

_BINOP_MAP: dict[str, type[ast.operator]] = {
    "+": ast.Add,
    "-": ast.Sub,
    "*": ast.Mult,
    "/": ast.Div,
    "//": ast.FloorDiv,
    "%": ast.Mod,
    "**": ast.Pow,
}

_UNARYOP_MAP: dict[str, type[ast.unaryop]] = {
    "-": ast.USub,
    "+": ast.UAdd,
    "not": ast.Not,
}


def _load(id_: str) -> ast.Name:
    return ast.Name(id=id_, ctx=ast.Load())


def _call(func: ast.expr, *args: ast.expr) -> ast.Call:
    return ast.Call(func=func, args=list(args), keywords=[])


def _subscript(container: str, key: str) -> ast.Subscript:
    return ast.Subscript(value=_load(container), slice=ast.Constant(value=key), ctx=ast.Load())


class ExpressionCompilationMixin:
    """Mixin for compiling expressions.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _env: Environment
        _name: str | None
        _source: str | None

    def _compile_expr(self, node: Any) -> ast.expr:
        """Compile an expression node to a Python AST expression.

        Complexity: O(1) type dispatch per node.
        """
        handler: Callable[[Any], ast.expr] | None = getattr(
            self, f"_compile_{type(node).__name__.lower()}", None
        )
        if handler is None:
            raise TemplateSyntaxError(
                f"Cannot compile expression: {type(node).__name__}",
                lineno=getattr(node, "lineno", None),
                name=self._name,
                source=self._source,
            )
        return handler(node)

    def _compile_const(self, node: Any) -> ast.expr:
        return ast.Constant(value=node.value)

    def _compile_name(self, node: Any) -> ast.expr:
        return _call(_load("_lookup"), _load("ctx"), ast.Constant(value=node.name))

    def _compile_list(self, node: Any) -> ast.expr:
        return ast.List(elts=[self._compile_expr(item) for item in node.items], ctx=ast.Load())

    def _compile_tuple(self, node: Any) -> ast.expr:
        return ast.Tuple(elts=[self._compile_expr(item) for item in node.items], ctx=ast.Load())

    def _compile_dict(self, node: Any) -> ast.expr:
        return ast.Dict(
            keys=[self._compile_expr(key) if key is not None else None for key in node.keys],
            values=[self._compile_expr(value) for value in node.values],
        )

    def _compile_getattr(self, node: Any) -> ast.expr:
        return _call(_load("_getattr"), self._compile_expr(node.obj), ast.Constant(value=node.attr))

    def _compile_getitem(self, node: Any) -> ast.expr:
        return _call(
            _load("_getitem"), self._compile_expr(node.obj), self._compile_expr(node.key)
        )

    def _compile_arguments(self, node: Any) -> tuple[list[ast.expr], list[ast.keyword]]:
        args = [self._compile_expr(arg) for arg in node.args]
        keywords = [
            ast.keyword(arg=name, value=self._compile_expr(value))
            for name, value in node.kwargs.items()
        ]
        dyn_args = getattr(node, "dyn_args", None)
        if dyn_args is not None:
            args.append(ast.Starred(value=self._compile_expr(dyn_args), ctx=ast.Load()))
        dyn_kwargs = getattr(node, "dyn_kwargs", None)
        if dyn_kwargs is not None:
            keywords.append(ast.keyword(arg=None, value=self._compile_expr(dyn_kwargs)))
        return args, keywords

    def _compile_funccall(self, node: Any) -> ast.expr:
        func_node = node.func
        if type(func_node).__name__ == "Name" and func_node.name in self._env.functions:
            func: ast.expr = _subscript("_functions", func_node.name)
        else:
            func = self._compile_expr(func_node)
        args, keywords = self._compile_arguments(node)
        return ast.Call(func=func, args=args, keywords=keywords)

    def _compile_filter(self, node: Any) -> ast.expr:
        if node.name not in self._env.filters:
            raise TemplateSyntaxError(
                f"Unknown filter '{node.name}'",
                lineno=node.lineno,
                name=self._name,
                source=self._source,
                col_offset=node.col_offset,
                code=ErrorCode.UNKNOWN_FILTER,
            )
        args, keywords = self._compile_arguments(node)
        return ast.Call(
            func=_subscript("_filters", node.name),
            args=[self._compile_expr(node.value), *args],
            keywords=keywords,
        )

    def _compile_binop(self, node: Any) -> ast.expr:
        return ast.BinOp(
            left=self._compile_expr(node.left),
            op=_BINOP_MAP[node.op](),
            right=self._compile_expr(node.right),
        )

    def _compile_unaryop(self, node: Any) -> ast.expr:
        return ast.UnaryOp(op=_UNARYOP_MAP[node.op](), operand=self._compile_expr(node.operand))

    def _compile_condexpr(self, node: Any) -> ast.expr:
        return ast.IfExp(
            test=self._compile_expr(node.test),
            body=self._compile_expr(node.if_true),
            orelse=self._compile_expr(node.if_false),
        )
