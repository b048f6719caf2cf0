"""Compiler core: template AST → Python code object.

Design Principles:
1. **AST-to-AST**: Generate `ast.Module`, not source strings
2. **StringBuilder**: Output via `buf.append()`, join at end
3. **Compile-time escaping**: Every `{{ }}` is routed either through the
   escape gate or through the print hook, decided once per call site

Generated code:

    ```python
    def render(ctx):
        _e = _escape
        _s = _render_var
        buf = []
        _append = buf.append
        _append('Hello ')
        _get_render_ctx().line = 1
        _append(_e(_lookup(ctx, 'name'), 'html'))
        return ''.join(buf)
    ```

Escape decision for `{{ expr }}` under strategy S:
    - autoescape disabled             → _s(expr)
    - expr declared safe for S        → _s(expr)
    - otherwise                       → _e(expr, S)

Declared safe: constants; calls to functions and filters whose
registration declares S (or "all"), either statically through
``is_safe`` or per call site through ``is_safe_callback``; conditional
expressions whose branches are both safe.

"""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rendergate.compiler.expressions import ExpressionCompilationMixin

if TYPE_CHECKING:
    import types

    from rendergate.environment import Environment
    from rendergate.nodes import Expr, Node
    from rendergate.nodes import Template as TemplateNode

logger = logging.getLogger(__name__)


class Compiler(ExpressionCompilationMixin):
    """Compile a rendergate Template AST to a Python code object.

    The generated module defines ``render(ctx)``; the Template supplies
    the runtime helpers (``_escape``, ``_render_var``, ``_lookup``, ...)
    through the exec namespace.

    Attributes:
        _env: Parent Environment (function/filter registries, autoescape)
        _name: Template name for error messages
        _filename: Source file path for compile()
        _source: Template source for error messages

    Example:
            >>> env = Environment()
            >>> ast = Parser("Hello, {{ name }}!").parse()
            >>> code = Compiler(env).compile(ast, name="greeting.html")

    """

    __slots__ = ("_env", "_filename", "_name", "_node_dispatch", "_source", "_strategy")

    def __init__(self, env: Environment):
        self._env = env
        self._name: str | None = None
        self._filename: str | None = None
        self._source: str | None = None
        self._strategy: str | None = env.autoescape

    def compile(
        self,
        node: TemplateNode,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> types.CodeType:
        """Compile template AST to code object.

        Args:
            node: Root Template node
            name: Template name for error messages
            filename: Source filename for error messages
            source: Template source for error messages

        Returns:
            Compiled code object ready for exec()
        """
        self._name = name
        self._filename = filename
        self._source = source
        self._strategy = self._env.autoescape

        module = ast.Module(body=[self._make_render_function(node)], type_ignores=[])
        ast.fix_missing_locations(module)

        return compile(module, filename or name or "<template>", "exec")

    def _emit_output(self, value_expr: ast.expr) -> ast.stmt:
        """Generate output statement: _append(value)."""
        return ast.Expr(
            value=ast.Call(
                func=ast.Name(id="_append", ctx=ast.Load()),
                args=[value_expr],
                keywords=[],
            ),
        )

    def _make_render_function(self, node: TemplateNode) -> ast.FunctionDef:
        """Generate the render(ctx) function.

        Hot-path helpers are cached as locals (LOAD_FAST).
        """
        body: list[ast.stmt] = [
            # _e = _escape
            ast.Assign(
                targets=[ast.Name(id="_e", ctx=ast.Store())],
                value=ast.Name(id="_escape", ctx=ast.Load()),
            ),
            # _s = _render_var
            ast.Assign(
                targets=[ast.Name(id="_s", ctx=ast.Store())],
                value=ast.Name(id="_render_var", ctx=ast.Load()),
            ),
            # buf = []
            ast.Assign(
                targets=[ast.Name(id="buf", ctx=ast.Store())],
                value=ast.List(elts=[], ctx=ast.Load()),
            ),
            # _append = buf.append
            ast.Assign(
                targets=[ast.Name(id="_append", ctx=ast.Store())],
                value=ast.Attribute(
                    value=ast.Name(id="buf", ctx=ast.Load()),
                    attr="append",
                    ctx=ast.Load(),
                ),
            ),
        ]

        for child in node.body:
            body.extend(self._compile_node(child))

        # return ''.join(buf)
        body.append(
            ast.Return(
                value=ast.Call(
                    func=ast.Attribute(
                        value=ast.Constant(value=""),
                        attr="join",
                        ctx=ast.Load(),
                    ),
                    args=[ast.Name(id="buf", ctx=ast.Load())],
                    keywords=[],
                ),
            )
        )

        return ast.FunctionDef(
            name="render",
            args=ast.arguments(
                posonlyargs=[],
                args=[ast.arg(arg="ctx")],
                vararg=None,
                kwonlyargs=[],
                kw_defaults=[],
                kwarg=None,
                defaults=[],
            ),
            body=body,
            decorator_list=[],
            returns=None,
        )

    # Node types that can cause runtime errors and should track line numbers
    _LINE_TRACKED_NODES = frozenset({"Output"})

    def _make_line_marker(self, lineno: int) -> ast.stmt:
        """Generate RenderContext line update for error tracking.

        Generates: _get_render_ctx().line = lineno
        """
        return ast.Assign(
            targets=[
                ast.Attribute(
                    value=ast.Call(
                        func=ast.Name(id="_get_render_ctx", ctx=ast.Load()),
                        args=[],
                        keywords=[],
                    ),
                    attr="line",
                    ctx=ast.Store(),
                )
            ],
            value=ast.Constant(value=lineno),
        )

    def _compile_node(self, node: Node) -> list[ast.stmt]:
        """Compile a single AST node to Python statements.

        Complexity: O(1) type dispatch using class name lookup.
        """
        node_type = type(node).__name__

        stmts: list[ast.stmt] = []
        if node_type in self._LINE_TRACKED_NODES:
            stmts.append(self._make_line_marker(node.lineno))

        handler = self._get_node_dispatch().get(node_type)
        if handler:
            stmts.extend(handler(node))

        return stmts

    def _get_node_dispatch(self) -> dict[str, Callable[[Any], list[ast.stmt]]]:
        """Get node type dispatch table (cached on first call)."""
        if not hasattr(self, "_node_dispatch"):
            self._node_dispatch = {
                "Data": self._compile_data,
                "Output": self._compile_output,
            }
        return self._node_dispatch

    def _compile_data(self, node: Any) -> list[ast.stmt]:
        """Compile raw text data: _append("literal text")."""
        if not node.value:
            return []
        return [self._emit_output(ast.Constant(value=node.value))]

    def _compile_output(self, node: Any) -> list[ast.stmt]:
        """Compile {{ expression }} output.

        _append(_e(expr, strategy)) or _append(_s(expr))
        """
        expr = self._compile_expr(node.expr)

        if self._needs_escape(node.expr):
            assert self._strategy is not None
            expr = ast.Call(
                func=ast.Name(id="_e", ctx=ast.Load()),
                args=[expr, ast.Constant(value=self._strategy)],
                keywords=[],
            )
        else:
            expr = ast.Call(
                func=ast.Name(id="_s", ctx=ast.Load()),
                args=[expr],
                keywords=[],
            )

        return [self._emit_output(expr)]

    def _needs_escape(self, expr: Expr) -> bool:
        if self._strategy is None:
            return False
        safe = self._is_safe(expr, self._strategy)
        if safe:
            logger.debug(
                "%s:%s: output declared safe for %r, escape skipped",
                self._name or "<template>",
                expr.lineno,
                self._strategy,
            )
        return not safe

    def _is_safe(self, expr: Any, strategy: str) -> bool:
        """Whether ``expr`` is declared safe for ``strategy`` at compile time."""
        node_type = type(expr).__name__

        if node_type == "Const":
            return True

        if node_type == "CondExpr":
            return self._is_safe(expr.if_true, strategy) and self._is_safe(
                expr.if_false, strategy
            )

        if node_type == "FuncCall" and type(expr.func).__name__ == "Name":
            entry = self._env.functions.entry(expr.func.name)
            return entry is not None and entry.safe_for(strategy, expr)

        if node_type == "Filter":
            entry = self._env.filters.entry(expr.name)
            return entry is not None and entry.safe_for(strategy, expr)

        return False
