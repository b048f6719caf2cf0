"""Template compiler: rendergate AST → Python code objects.

The compiler also places the escape gate: every printed expression is
either escaped for the active strategy or handed to the print hook,
decided at compile time from the safety declarations of the functions
and filters involved.
"""

from rendergate.compiler.core import Compiler

__all__ = ["Compiler"]
