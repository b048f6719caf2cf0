"""Static analysis of template expressions.

Used by the compiler to decide, per call site, whether printed output
still needs escaping.
"""

from rendergate.analysis.literalness import (
    Literalness,
    combine_literalness,
    is_literal,
    literalness,
)
from rendergate.analysis.url_safety import is_url_generation_safe

__all__ = [
    "Literalness",
    "combine_literalness",
    "is_literal",
    "is_url_generation_safe",
    "literalness",
]
