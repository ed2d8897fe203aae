"""Control-flow graph model."""

from .flow_graph import ControlFlowGraph
from .node_types import FlowEdge, FlowNode, NodeKind

__all__ = [
    "ControlFlowGraph",
    "FlowEdge",
    "FlowNode",
    "NodeKind",
]
