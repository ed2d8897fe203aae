"""Control-flow graph construction from a function's statement tree.

The builder walks the statement tree depth first and threads a *frontier*
through every call: the tuple of nodes whose outgoing edges are still
pending. Each handler takes the incoming frontier and returns the frontier
left after its statement. The graph is the only mutable structure shared
between calls.

Consecutive straight-line statements collapse into one node. There is no
synthetic entry or exit node: sources and sinks are derived from degrees,
and the frontier left after the last statement is recorded on the graph as
its exit set.

``break`` and ``continue`` jump straight to the loop exit or header, also
from inside a ``try`` that has a ``finally`` block. The ``finally`` node is
fed only by the try and handler exits, so paths that leave a loop early skip
it even though Python runs it on the way out.
"""

from dataclasses import dataclass, field

from loguru import logger

from ..graph.flow_graph import ControlFlowGraph
from ..graph.node_types import FlowNode, NodeKind
from ..parsers.statements import (
    CONTROL_STATEMENTS,
    BreakStatement,
    ContinueStatement,
    ExceptHandler,
    ForStatement,
    FunctionBody,
    IfStatement,
    MatchStatement,
    RaiseStatement,
    ReturnStatement,
    Statement,
    TryStatement,
    WhileStatement,
)

Frontier = tuple[FlowNode, ...]

LINEAR_SEPARATOR = " ; "


@dataclass
class _LoopFrame:
    """Innermost enclosing loop, for ``break`` and ``continue``."""
    header: FlowNode
    breaks: list[FlowNode] = field(default_factory=list)


class ControlFlowGraphBuilder:
    """Builds a ControlFlowGraph for one FunctionBody.

    Building is deterministic: the same statement tree always yields the same
    node ids, labels and edges.
    """

    def build(self, function: FunctionBody) -> ControlFlowGraph:
        graph = ControlFlowGraph(function.display_name)
        logger.debug(f"Building CFG for function: {graph.name}")

        exits = self._connect_block(graph, function.body, (), None)
        graph.mark_exits(exits)

        logger.debug(
            f"Finished CFG for {graph.name}: {len(graph.nodes)} nodes, "
            f"{len(graph.edges)} edges"
        )
        return graph

    # -- blocks -------------------------------------------------------------

    def _connect_block(
        self,
        graph: ControlFlowGraph,
        statements: list[Statement],
        entry: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        """Connect a block, merging runs of simple statements into one node."""
        frontier = entry
        linear_buffer: list[Statement] = []

        for stmt in statements:
            if isinstance(stmt, CONTROL_STATEMENTS):
                if linear_buffer:
                    frontier = self._handle_linear(graph, linear_buffer, frontier)
                    linear_buffer = []
                frontier = self._connect_statement(graph, stmt, frontier, loop)
            else:
                linear_buffer.append(stmt)

        if linear_buffer:
            frontier = self._handle_linear(graph, linear_buffer, frontier)

        return frontier

    def _connect_statement(
        self,
        graph: ControlFlowGraph,
        stmt: Statement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        if isinstance(stmt, IfStatement):
            return self._handle_if(graph, stmt, frontier, loop)
        if isinstance(stmt, WhileStatement):
            return self._handle_while(graph, stmt, frontier, loop)
        if isinstance(stmt, ForStatement):
            return self._handle_for(graph, stmt, frontier, loop)
        if isinstance(stmt, MatchStatement):
            return self._handle_match(graph, stmt, frontier, loop)
        if isinstance(stmt, TryStatement):
            return self._handle_try(graph, stmt, frontier, loop)
        if isinstance(stmt, ReturnStatement):
            return self._handle_terminal(graph, stmt, frontier, NodeKind.RETURN)
        if isinstance(stmt, RaiseStatement):
            return self._handle_terminal(graph, stmt, frontier, NodeKind.RAISE)
        if isinstance(stmt, BreakStatement):
            return self._handle_break(graph, stmt, frontier, loop)
        if isinstance(stmt, ContinueStatement):
            return self._handle_continue(graph, stmt, frontier, loop)
        return self._handle_linear(graph, [stmt], frontier)

    # -- helpers ------------------------------------------------------------

    def _add_node(
        self,
        graph: ControlFlowGraph,
        label: str,
        kind: NodeKind,
        lines,
        origin,
        frontier: Frontier,
    ) -> FlowNode:
        node = graph.new_node(label, kind, lines, origin)
        logger.debug(f"Added {kind.value.upper()} node {node.name}: {label}")
        self._wire(graph, frontier, node)
        return node

    @staticmethod
    def _wire(graph: ControlFlowGraph, frontier: Frontier, node: FlowNode) -> None:
        for prev in frontier:
            graph.add_edge(prev, node)
            logger.debug(f"Edge: {prev.name} -> {node.name}")

    @staticmethod
    def _close_loop(graph: ControlFlowGraph, exits: Frontier, header: FlowNode) -> None:
        for node in exits:
            graph.add_edge(node, header, back_edge=True)
            logger.debug(f"Back edge: {node.name} -> {header.name}")

    # -- statement handlers -------------------------------------------------

    def _handle_linear(
        self, graph: ControlFlowGraph, statements: list[Statement], frontier: Frontier
    ) -> Frontier:
        label = LINEAR_SEPARATOR.join(s.text for s in statements)
        lines: set[int] = set()
        for stmt in statements:
            lines |= stmt.lines
        node = self._add_node(
            graph, label, NodeKind.LINEAR, lines, statements[0], frontier
        )
        return (node,)

    def _handle_terminal(
        self,
        graph: ControlFlowGraph,
        stmt: Statement,
        frontier: Frontier,
        kind: NodeKind,
    ) -> Frontier:
        # Nothing follows a return or raise on this branch.
        self._add_node(graph, stmt.text, kind, stmt.lines, stmt, frontier)
        return ()

    def _handle_if(
        self,
        graph: ControlFlowGraph,
        stmt: IfStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        label = stmt.condition or "if"
        cond = self._add_node(
            graph, label, NodeKind.CONDITION, {stmt.start_line}, stmt, frontier
        )

        then_exits = self._connect_block(graph, stmt.body, (cond,), loop)
        if stmt.orelse:
            else_exits = self._connect_block(graph, stmt.orelse, (cond,), loop)
        else:
            else_exits = (cond,)

        logger.debug(
            f"IF {cond.name} exits: then={[n.name for n in then_exits]}, "
            f"else={[n.name for n in else_exits]}"
        )
        return then_exits + else_exits

    def _build_loop(
        self,
        graph: ControlFlowGraph,
        header: FlowNode,
        body: list[Statement],
        orelse: list[Statement],
        outer: _LoopFrame | None,
    ) -> Frontier:
        frame = _LoopFrame(header)
        if body:
            body_exits = self._connect_block(graph, body, (header,), frame)
            self._close_loop(graph, body_exits, header)

        # The test-fails exit runs the else block, breaks skip it.
        if orelse:
            exits = self._connect_block(graph, orelse, (header,), outer)
        else:
            exits = (header,)
        return exits + tuple(frame.breaks)

    def _handle_while(
        self,
        graph: ControlFlowGraph,
        stmt: WhileStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        label = stmt.condition or "while"
        header = self._add_node(
            graph, label, NodeKind.LOOP, {stmt.start_line}, stmt, frontier
        )
        logger.debug(f"WHILE body statements count: {len(stmt.body)}")
        return self._build_loop(graph, header, stmt.body, stmt.orelse, loop)

    def _handle_for(
        self,
        graph: ControlFlowGraph,
        stmt: ForStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        target = stmt.target or "target"
        iterable = stmt.iterable or "iterable"
        header = self._add_node(
            graph,
            f"for {target} in {iterable}",
            NodeKind.LOOP,
            {stmt.start_line},
            stmt,
            frontier,
        )
        return self._build_loop(graph, header, stmt.body, stmt.orelse, loop)

    def _handle_match(
        self,
        graph: ControlFlowGraph,
        stmt: MatchStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        dispatch = self._add_node(
            graph,
            f"match {stmt.subject or ''}".rstrip(),
            NodeKind.MATCH,
            {stmt.start_line},
            stmt,
            frontier,
        )

        case_exits: list[FlowNode] = []
        for case in stmt.cases:
            label = f"case {case.pattern or '_'}"
            if case.guard:
                label += f" if {case.guard}"
            case_node = self._add_node(
                graph, label, NodeKind.CASE, {case.line}, case, (dispatch,)
            )
            case_exits.extend(
                self._connect_block(graph, case.body, (case_node,), loop)
            )

        # Any number of cases converge on a single successor.
        if not stmt.cases:
            case_exits.append(dispatch)
        merge = self._add_node(
            graph, "match_end", NodeKind.MERGE, (), stmt, tuple(case_exits)
        )
        return (merge,)

    @staticmethod
    def _handler_label(handler: ExceptHandler) -> str:
        if handler.type_text and handler.name:
            return f"except {handler.type_text} as {handler.name}"
        if handler.type_text:
            return f"except {handler.type_text}"
        return "except"

    def _handle_try(
        self,
        graph: ControlFlowGraph,
        stmt: TryStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        try_node = self._add_node(
            graph, "try", NodeKind.TRY, {stmt.start_line}, stmt, frontier
        )
        try_exits = self._connect_block(graph, stmt.body, (try_node,), loop)

        # Any statement of the try body may raise, so every body exit reaches
        # every handler. A body that always leaves early still reaches them
        # through the try node.
        raise_points = try_exits or (try_node,)
        handler_exits: list[FlowNode] = []
        for handler in stmt.handlers:
            handler_node = self._add_node(
                graph,
                self._handler_label(handler),
                NodeKind.HANDLER,
                {handler.line},
                handler,
                raise_points,
            )
            handler_exits.extend(
                self._connect_block(graph, handler.body, (handler_node,), loop)
            )

        completed = try_exits
        if stmt.orelse and try_exits:
            completed = self._connect_block(graph, stmt.orelse, try_exits, loop)

        if stmt.finalbody is None:
            return completed + tuple(handler_exits)

        # finally follows the completed try path and every handler. Returns,
        # breaks and continues inside the try bypass it.
        feeding: list[FlowNode] = []
        if completed:
            feeding.append(completed[-1])
        feeding.extend(handler_exits)
        if not feeding:
            feeding.append(try_node)
        finally_line = stmt.finally_line or stmt.end_line
        finally_node = self._add_node(
            graph,
            "finally",
            NodeKind.FINALLY,
            {finally_line},
            stmt,
            tuple(feeding),
        )
        return self._connect_block(graph, stmt.finalbody, (finally_node,), loop)

    def _handle_break(
        self,
        graph: ControlFlowGraph,
        stmt: BreakStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        if loop is None:
            return self._handle_linear(graph, [stmt], frontier)
        node = self._add_node(graph, stmt.text, NodeKind.BREAK, stmt.lines, stmt, frontier)
        loop.breaks.append(node)
        return ()

    def _handle_continue(
        self,
        graph: ControlFlowGraph,
        stmt: ContinueStatement,
        frontier: Frontier,
        loop: _LoopFrame | None,
    ) -> Frontier:
        if loop is None:
            return self._handle_linear(graph, [stmt], frontier)
        node = self._add_node(
            graph, stmt.text, NodeKind.CONTINUE, stmt.lines, stmt, frontier
        )
        self._close_loop(graph, (node,), loop.header)
        return ()


def build_cfg(function: FunctionBody) -> ControlFlowGraph:
    """Build the control-flow graph of ``function``."""
    return ControlFlowGraphBuilder().build(function)
