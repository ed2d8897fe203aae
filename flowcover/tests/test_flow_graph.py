"""Tests for the control-flow graph model."""

import gc

import pytest

from flowcover.graph import ControlFlowGraph, FlowEdge, FlowNode, NodeKind
from flowcover.parsers.statements import SimpleStatement


class TestFlowNode:
    """Test the FlowNode and FlowEdge types."""

    def test_identity_equality(self):
        """Test that nodes with equal fields are still distinct."""
        first = FlowNode(0, "x = 1")
        second = FlowNode(0, "x = 1")

        assert first != second
        assert first == first
        assert len({first, second}) == 2

    def test_display_and_name(self):
        """Test the single-line rendering of a node."""
        node = FlowNode(3, "a = 1\nb = 2")

        assert node.name == "n3"
        assert node.display() == "n3:a = 1 b = 2"

    def test_origin_is_weak(self):
        """Test that a node does not keep its statement alive."""
        stmt = SimpleStatement("x = 1", 2, 2)
        node = FlowNode.create(0, "x = 1", origin=stmt)

        assert node.origin is stmt

        del stmt
        gc.collect()
        assert node.origin is None

    def test_terminal_kinds(self):
        """Test which kinds end a path."""
        assert FlowNode(0, "return", NodeKind.RETURN).is_terminal
        assert FlowNode(0, "raise", NodeKind.RAISE).is_terminal
        assert not FlowNode(0, "break", NodeKind.BREAK).is_terminal

    def test_edge_equality_ignores_back_flag(self):
        """Test that edges compare by endpoints only."""
        assert FlowEdge(1, 2) == FlowEdge(1, 2, back_edge=True)
        assert FlowEdge(1, 2).pair == (1, 2)
        assert FlowEdge(1, 2).display() == "n1->n2"


class TestControlFlowGraph:
    """Test ControlFlowGraph storage and queries."""

    @pytest.fixture
    def diamond(self):
        """0 -> 1, 0 -> 2, 1 -> 3, 2 -> 3."""
        graph = ControlFlowGraph("diamond")
        nodes = [
            graph.new_node("cond", NodeKind.CONDITION, {1}),
            graph.new_node("left", lines={2}),
            graph.new_node("right", lines={4}),
            graph.new_node("join", lines={5, 6}),
        ]
        graph.add_edge(nodes[0], nodes[1])
        graph.add_edge(nodes[0], nodes[2])
        graph.add_edge(nodes[1], nodes[3])
        graph.add_edge(nodes[2], nodes[3])
        return graph

    def test_sequential_ids(self, diamond):
        """Test that node ids follow insertion order."""
        assert [n.id for n in diamond.nodes] == [0, 1, 2, 3]
        assert all(diamond.node(i) is n for i, n in enumerate(diamond.nodes))
        assert len(diamond) == 4

    def test_successor_order(self, diamond):
        """Test that successors keep edge insertion order."""
        assert [n.id for n in diamond.successors(0)] == [1, 2]
        assert [n.id for n in diamond.predecessors(3)] == [1, 2]
        assert diamond.successor_ids(1) == [3]

    def test_add_edge_is_idempotent(self, diamond):
        """Test that adding an existing edge changes nothing."""
        diamond.add_edge(0, 1)
        diamond.add_edge(diamond.node(0), diamond.node(1))

        assert len(diamond.edges) == 4
        assert diamond.out_degree(0) == 2
        assert diamond.in_degree(1) == 1

    def test_back_edge_flag(self):
        """Test that back edges are tagged, also when re-added."""
        graph = ControlFlowGraph()
        header = graph.new_node("while c", NodeKind.LOOP)
        body = graph.new_node("x()")
        graph.add_edge(header, body)
        graph.add_edge(body, header)

        assert not graph.is_back_edge(body, header)

        graph.add_edge(body, header, back_edge=True)

        assert graph.is_back_edge(body, header)
        assert not graph.is_back_edge(header, body)
        assert [e.back_edge for e in graph.edges] == [False, True]
        assert len(graph.edges) == 2

    def test_unknown_nodes_are_empty(self, diamond):
        """Test that queries on foreign nodes return empty results."""
        stranger = FlowNode(42, "elsewhere")

        assert diamond.successors(stranger) == []
        assert diamond.predecessors(99) == []
        assert diamond.in_degree(stranger) == 0
        assert not diamond.has_edge(stranger, 0)
        assert stranger not in diamond
        assert diamond.node(0) in diamond

    def test_sources_and_sinks(self, diamond):
        """Test degree-derived sources and sinks."""
        assert [n.id for n in diamond.sources()] == [0]
        assert [n.id for n in diamond.sinks()] == [3]
        assert [n.id for n in diamond.entry_nodes()] == [0]
        assert [n.id for n in diamond.exit_nodes()] == [3]

    def test_entry_falls_back_to_first_node(self):
        """Test a graph whose every node sits on a cycle."""
        graph = ControlFlowGraph()
        a = graph.new_node("while c", NodeKind.LOOP)
        b = graph.new_node("x()")
        graph.add_edge(a, b)
        graph.add_edge(b, a, back_edge=True)

        assert graph.sources() == []
        assert graph.entry_nodes() == [a]

    def test_first_node_stays_entry_next_to_other_sources(self):
        """Test that an unreachable source does not displace node 0."""
        graph = ControlFlowGraph()
        a = graph.new_node("while c", NodeKind.LOOP)
        b = graph.new_node("x()")
        orphan = graph.new_node("match_end", NodeKind.MERGE)
        graph.add_edge(a, b)
        graph.add_edge(b, a, back_edge=True)

        assert graph.sources() == [orphan]
        assert graph.entry_nodes() == [a, orphan]

    def test_marked_exits(self):
        """Test that frontier exits count as exits despite successors."""
        graph = ControlFlowGraph()
        a = graph.new_node("while c", NodeKind.LOOP)
        b = graph.new_node("x()")
        graph.add_edge(a, b)
        graph.add_edge(b, a, back_edge=True)
        graph.mark_exits([a])

        assert graph.is_exit(a)
        assert not graph.is_exit(b)
        assert graph.sinks() == []

    def test_empty_graph(self):
        """Test queries on a graph without nodes."""
        graph = ControlFlowGraph()

        assert graph.sources() == []
        assert graph.entry_nodes() == []
        assert graph.edges == []

    def test_lines_of_path(self, diamond):
        """Test line-set union over a path."""
        assert diamond.lines_of((0, 1, 3)) == {1, 2, 5, 6}
        assert diamond.lines_of(()) == set()

    def test_describe(self, diamond):
        """Test the textual listings used in descriptions."""
        assert diamond.describe_nodes() == "n0:cond, n1:left, n2:right, n3:join"
        assert diamond.describe_edges() == "n0->n1, n0->n2, n1->n3, n2->n3"

    def test_to_dict(self, diamond):
        """Test the plain-data export."""
        data = diamond.to_dict()

        assert data["name"] == "diamond"
        assert data["nodes"][3] == {
            "id": 3,
            "label": "join",
            "kind": "linear",
            "lines": [5, 6],
        }
        assert {"from": 0, "to": 1, "back_edge": False} in data["edges"]
        assert data["exits"] == []
