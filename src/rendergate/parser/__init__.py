"""Template parser.

Turns template source into an immutable Template AST. Expression text is
parsed with Python's own expression grammar and translated into template
nodes; see ``rendergate.parser.expressions``.
"""

from rendergate.parser.core import Parser

__all__ = ["Parser"]
