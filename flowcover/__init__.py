"""Control-flow graphs and coverage-criterion test targets for Python functions."""

from .analysis import CoverageAnalyzer, CoverageReport, Criterion, build_cfg
from .graph import ControlFlowGraph, FlowEdge, FlowNode
from .parsers import FunctionBody, PythonFrontend

__version__ = "0.1.0"

__all__ = [
    "ControlFlowGraph",
    "CoverageAnalyzer",
    "CoverageReport",
    "Criterion",
    "FlowEdge",
    "FlowNode",
    "FunctionBody",
    "PythonFrontend",
    "build_cfg",
]
