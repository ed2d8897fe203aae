"""Control-flow graph storage and lookup."""

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from .node_types import FlowEdge, FlowNode, NodeKind

NodeRef = FlowNode | int


def _node_id(node: NodeRef) -> int:
    return node if isinstance(node, int) else node.id


class ControlFlowGraph:
    """Nodes and edges of one function body.

    Node insertion order is the node numbering: ``nodes[i].id == i``. Lookups
    on nodes that are not part of the graph return empty results instead of
    raising.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.nodes: list[FlowNode] = []
        self._edges: dict[tuple[int, int], FlowEdge] = {}
        self._successors: dict[int, list[int]] = defaultdict(list)
        self._predecessors: dict[int, list[int]] = defaultdict(list)
        self._back_edges: set[tuple[int, int]] = set()
        self.exit_ids: set[int] = set()

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node: object) -> bool:
        if isinstance(node, FlowNode):
            return 0 <= node.id < len(self.nodes) and self.nodes[node.id] is node
        if isinstance(node, int):
            return 0 <= node < len(self.nodes)
        return False

    # -- construction -------------------------------------------------------

    def add_node(self, node: FlowNode) -> FlowNode:
        """Append a node. The caller guarantees its id is the next free one."""
        self.nodes.append(node)
        return node

    def new_node(
        self,
        label: str,
        kind: NodeKind = NodeKind.LINEAR,
        lines: Iterable[int] = (),
        origin: Any = None,
    ) -> FlowNode:
        """Allocate the next sequential id and append a node for it."""
        node = FlowNode.create(len(self.nodes), label, kind, frozenset(lines), origin)
        return self.add_node(node)

    def add_edge(self, source: NodeRef, target: NodeRef, back_edge: bool = False) -> None:
        """Insert ``source -> target``. Repeated pairs are no-ops."""
        pair = (_node_id(source), _node_id(target))
        if pair in self._edges:
            if back_edge and pair not in self._back_edges:
                self._back_edges.add(pair)
                self._edges[pair] = FlowEdge(pair[0], pair[1], back_edge=True)
            return
        if back_edge:
            self._back_edges.add(pair)
        self._edges[pair] = FlowEdge(pair[0], pair[1], back_edge=back_edge)
        self._successors[pair[0]].append(pair[1])
        self._predecessors[pair[1]].append(pair[0])

    def mark_exits(self, nodes: Iterable[NodeRef]) -> None:
        self.exit_ids.update(_node_id(n) for n in nodes)

    # -- queries ------------------------------------------------------------

    def node(self, node_id: int) -> FlowNode:
        return self.nodes[node_id]

    @property
    def edges(self) -> list[FlowEdge]:
        return list(self._edges.values())

    def edge_pairs(self) -> list[tuple[int, int]]:
        return list(self._edges)

    def has_edge(self, source: NodeRef, target: NodeRef) -> bool:
        return (_node_id(source), _node_id(target)) in self._edges

    def successors(self, node: NodeRef) -> list[FlowNode]:
        return [self.nodes[i] for i in self._successors.get(_node_id(node), [])]

    def predecessors(self, node: NodeRef) -> list[FlowNode]:
        return [self.nodes[i] for i in self._predecessors.get(_node_id(node), [])]

    def successor_ids(self, node: NodeRef) -> list[int]:
        return list(self._successors.get(_node_id(node), []))

    def in_degree(self, node: NodeRef) -> int:
        return len(self._predecessors.get(_node_id(node), []))

    def out_degree(self, node: NodeRef) -> int:
        return len(self._successors.get(_node_id(node), []))

    def is_back_edge(self, source: NodeRef, target: NodeRef) -> bool:
        return (_node_id(source), _node_id(target)) in self._back_edges

    def sources(self) -> list[FlowNode]:
        """Nodes with no incoming edge."""
        return [n for n in self.nodes if self.in_degree(n) == 0]

    def sinks(self) -> list[FlowNode]:
        """Nodes with no outgoing edge."""
        return [n for n in self.nodes if self.out_degree(n) == 0]

    def entry_nodes(self) -> list[FlowNode]:
        """Where path traversal starts.

        The first node is always an entry, followed by every other source.
        A body that opens with a loop puts node 0 on a cycle, and unreachable
        code such as the merge node of a ``match`` whose cases all return is
        a source of its own.
        """
        if not self.nodes:
            return []
        first = self.nodes[0]
        return [first] + [n for n in self.sources() if n is not first]

    def is_exit(self, node: NodeRef) -> bool:
        node_id = _node_id(node)
        return node_id in self.exit_ids or self.out_degree(node_id) == 0

    def exit_nodes(self) -> list[FlowNode]:
        return [n for n in self.nodes if self.is_exit(n)]

    def lines_of(self, path: Iterable[int]) -> set[int]:
        """Union of the source lines represented by the nodes of ``path``."""
        lines: set[int] = set()
        for node_id in path:
            lines.update(self.nodes[node_id].lines)
        return lines

    def describe_nodes(self) -> str:
        return ", ".join(n.display() for n in self.nodes)

    def describe_edges(self) -> str:
        return ", ".join(e.display() for e in self._edges.values())

    def to_dict(self) -> dict[str, Any]:
        """Plain data view, handy for JSON dumps and debugging."""
        return {
            "name": self.name,
            "nodes": [
                {
                    "id": n.id,
                    "label": n.label,
                    "kind": n.kind.value,
                    "lines": sorted(n.lines),
                }
                for n in self.nodes
            ],
            "edges": [
                {"from": e.source, "to": e.target, "back_edge": e.back_edge}
                for e in self._edges.values()
            ],
            "exits": sorted(self.exit_ids),
        }
