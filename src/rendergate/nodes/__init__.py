"""Template AST nodes.

Immutable, frozen dataclasses produced by the parser and consumed by the
compiler and the analysis passes.

Expression nodes:
    Const, Name, List, Tuple, Dict, Getattr, Getitem, FuncCall, Filter,
    BinOp, UnaryOp, CondExpr

Template nodes:
    Template (root), Data (literal text), Output ({{ expr }})

"""

from rendergate.nodes.base import Node
from rendergate.nodes.expressions import (
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
from rendergate.nodes.output import Data, Output, Template

__all__ = [
    "BinOp",
    "CondExpr",
    "Const",
    "Data",
    "Dict",
    "Expr",
    "Filter",
    "FuncCall",
    "Getattr",
    "Getitem",
    "List",
    "Name",
    "Node",
    "Output",
    "Template",
    "Tuple",
    "UnaryOp",
]
