"""Projection of selected paths onto named coverage-target records."""

from dataclasses import dataclass, field

from loguru import logger

from ..graph.flow_graph import ControlFlowGraph
from ..parsers.statements import FunctionBody
from .criteria import Criterion, CoverageResult
from .path_enumerator import Path, path_edge_pairs, path_edges


@dataclass(frozen=True)
class CoverageTargetRecord:
    """One test the user should write: which path it drives and which lines it hits."""

    name: str
    description: str
    lines: frozenset[int]
    body: str | None = None
    path: tuple[int, ...] = field(default=(), compare=False)


class CoverageTargetProjector:
    """Maps a CoverageResult to CoverageTargetRecords, one per selected path."""

    PATH_TITLES = {
        Criterion.NODE: "Node Path",
        Criterion.EDGE: "Path",
        Criterion.EDGE_PAIR: "Edge-Pair Path",
        Criterion.PRIME: "Prime Path",
        Criterion.STATEMENT: "Statement",
    }

    def project(
        self, result: CoverageResult, function: FunctionBody
    ) -> list[CoverageTargetRecord]:
        graph = result.graph
        records = []

        for index, path in enumerate(result.paths):
            lines = frozenset(graph.lines_of(path))
            records.append(
                CoverageTargetRecord(
                    name=f"{function.name or 'func'}_{result.criterion.tag}_{index}",
                    description=self._describe(result, function, index, path, lines),
                    lines=lines,
                    body=self._stub(function),
                    path=path,
                )
            )

        if not result.is_complete:
            logger.warning(
                f"{len(records)} {result.criterion.value} targets for "
                f"{function.display_name} leave {len(result.uncovered)} elements "
                f"uncovered{' (enumeration truncated)' if result.truncated else ''}"
            )
        return records

    @staticmethod
    def _stub(function: FunctionBody) -> str:
        return f"pass  # call {function.name or 'func'}(...) with inputs that drive this path"

    @staticmethod
    def _format_path(graph: ControlFlowGraph, path: Path) -> str:
        parts = []
        for node_id in path:
            node = graph.node(node_id)
            lines = ", ".join(str(line) for line in sorted(node.lines))
            parts.append(f"{node.display()} [lines: {lines}]")
        return " -> ".join(parts)

    def _describe(
        self,
        result: CoverageResult,
        function: FunctionBody,
        index: int,
        path: Path,
        lines: frozenset[int],
    ) -> str:
        graph = result.graph
        criterion = result.criterion
        title = self.PATH_TITLES[criterion]

        if criterion is Criterion.STATEMENT:
            # Statements without a node are skipped, so map through ``covered``.
            covered = result.covered
            position = covered[index] if index < len(covered) else index
            text = function.body[position].text if position < len(function.body) else ""
            description = [f"{title} {index}: write a test case that hits `{text}`"]
        else:
            description = [
                f"Nodes: {graph.describe_nodes()}",
                f"Edges: {graph.describe_edges()}",
                f"{title} {index}: {self._format_path(graph, path)}",
            ]

        if criterion is Criterion.NODE:
            description.append(
                "Expected nodes: " + ", ".join(f"n{n}" for n in dict.fromkeys(path))
            )
        elif criterion is Criterion.EDGE:
            description.append(
                "Expected edges: "
                + ", ".join(f"n{a}->n{b}" for a, b in path_edges(path))
            )
        elif criterion is Criterion.EDGE_PAIR:
            description.append(
                "Expected edge-pairs: "
                + ", ".join(f"n{a}->n{b}->n{c}" for a, b, c in path_edge_pairs(path))
            )

        description.append(
            "Expected lines: " + ", ".join(str(line) for line in sorted(lines))
        )
        return "\n".join(description)


def project_targets(
    result: CoverageResult, function: FunctionBody
) -> list[CoverageTargetRecord]:
    return CoverageTargetProjector().project(result, function)
