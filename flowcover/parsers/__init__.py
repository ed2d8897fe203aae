"""Statement trees and the Python front end that produces them."""

from .python_frontend import PythonFrontend, create_python_parser, parse_functions
from .statements import (
    BreakStatement,
    ContinueStatement,
    ExceptHandler,
    ForStatement,
    FunctionBody,
    IfStatement,
    MatchCase,
    MatchStatement,
    RaiseStatement,
    ReturnStatement,
    SimpleStatement,
    Statement,
    TryStatement,
    WhileStatement,
)

__all__ = [
    "BreakStatement",
    "ContinueStatement",
    "ExceptHandler",
    "ForStatement",
    "FunctionBody",
    "IfStatement",
    "MatchCase",
    "MatchStatement",
    "PythonFrontend",
    "RaiseStatement",
    "ReturnStatement",
    "SimpleStatement",
    "Statement",
    "TryStatement",
    "WhileStatement",
    "create_python_parser",
    "parse_functions",
]
