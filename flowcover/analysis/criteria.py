"""Coverage criteria and minimal path-set selection.

Node, edge and edge-pair coverage share one shape: compute the coverage
universe for the criterion, enumerate candidate paths under the criterion's
loop policy, then greedily pick the candidate that covers the most uncovered
elements until nothing is left or no candidate adds anything. Greedy set
cover is not guaranteed to be minimal; what is guaranteed is full coverage
or an explicit list of what stayed uncovered.

Prime-path coverage has no cover step. Its candidates are spliced into
maximal paths and every maximal path becomes a target.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from ..config import AppConfig, settings
from ..errors import UnknownCriterionError
from ..graph.flow_graph import ControlFlowGraph
from ..graph.node_types import NodeKind
from ..parsers.statements import FunctionBody
from .path_enumerator import (
    LoopPolicy,
    Path,
    PathEnumerator,
    path_edge_pairs,
    path_edges,
)


class Criterion(str, Enum):
    NODE = "node"
    EDGE = "edge"
    EDGE_PAIR = "edge-pair"
    PRIME = "prime"
    STATEMENT = "statement"

    @property
    def tag(self) -> str:
        """Short form used in target names."""
        return self.value.replace("-", "")

    @classmethod
    def parse(cls, name: "str | Criterion") -> "Criterion":
        if isinstance(name, Criterion):
            return name
        key = name.strip().lower().replace("_", "-")
        aliases = {
            "edgepair": "edge-pair",
            "prime-path": "prime",
            "primepath": "prime",
            "stmt": "statement",
        }
        key = aliases.get(key, key)
        for criterion in cls:
            if criterion.value == key:
                return criterion
        raise UnknownCriterionError(name, [c.value for c in cls])


@dataclass
class CoverageResult:
    """Selected paths for one criterion over one graph.

    ``uncovered`` lists the universe elements no selected path reaches. An
    empty list together with ``truncated == False`` means full coverage.
    """
    criterion: Criterion
    graph: ControlFlowGraph
    paths: list[Path] = field(default_factory=list)
    universe: list[Any] = field(default_factory=list)
    uncovered: list[Any] = field(default_factory=list)
    truncated: bool = False
    candidate_count: int = 0

    @property
    def is_complete(self) -> bool:
        return not self.uncovered and not self.truncated

    @property
    def covered(self) -> list[Any]:
        missing = set(self.uncovered)
        return [e for e in self.universe if e not in missing]

    @property
    def coverage_ratio(self) -> float:
        if not self.universe:
            return 1.0
        return len(self.covered) / len(self.universe)


def greedy_cover(
    candidates: Iterable[Path],
    universe: Iterable[Hashable],
    elements_of: Callable[[Path], Iterable[Hashable]],
    consume: bool = True,
) -> tuple[list[Path], list[Hashable]]:
    """Greedy minimum path set over ``universe``.

    Returns the selected paths and the elements left uncovered. Ties go to
    the earliest candidate.
    """
    remaining = list(candidates)
    uncovered = dict.fromkeys(universe)
    selected: list[Path] = []

    while uncovered and remaining:
        best = max(
            remaining,
            key=lambda p: sum(1 for e in set(elements_of(p)) if e in uncovered),
        )
        gained = [e for e in set(elements_of(best)) if e in uncovered]
        if not gained:
            break
        selected.append(best)
        for element in gained:
            del uncovered[element]
        if consume:
            remaining.remove(best)

    return selected, list(uncovered)


def _isolated_nodes(graph: ControlFlowGraph) -> list[tuple[int]]:
    return [
        (n.id,)
        for n in graph.nodes
        if graph.in_degree(n) == 0 and graph.out_degree(n) == 0
    ]


class CriterionSelector(ABC):
    """Base for every criterion: turns one graph into a CoverageResult."""

    criterion: Criterion

    def __init__(self, config: AppConfig | None = None):
        self.config = config or settings

    @abstractmethod
    def select(
        self, graph: ControlFlowGraph, function: FunctionBody | None = None
    ) -> CoverageResult:
        ...


class GreedySelector(CriterionSelector):
    """Universe plus greedy cover over the paths of one loop policy."""

    policy: LoopPolicy

    @abstractmethod
    def universe(self, graph: ControlFlowGraph) -> list[Hashable]:
        ...

    @abstractmethod
    def elements(self, path: Path) -> list[Hashable]:
        ...

    def candidates(self, graph: ControlFlowGraph):
        return PathEnumerator(graph, self.policy, config=self.config).enumerate()

    def select(
        self, graph: ControlFlowGraph, function: FunctionBody | None = None
    ) -> CoverageResult:
        universe = self.universe(graph)
        candidates = self.candidates(graph)
        paths, uncovered = greedy_cover(candidates.paths, universe, self.elements)

        result = CoverageResult(
            criterion=self.criterion,
            graph=graph,
            paths=paths,
            universe=universe,
            uncovered=uncovered,
            truncated=candidates.truncated,
            candidate_count=len(candidates),
        )
        _log_result(result)
        return result


class NodeCoverage(GreedySelector):
    """Every node on some selected path."""

    criterion = Criterion.NODE
    policy = LoopPolicy.BACK_EDGE_REVISIT

    def universe(self, graph: ControlFlowGraph) -> list[Hashable]:
        return [n.id for n in graph.nodes]

    def elements(self, path: Path) -> list[Hashable]:
        return list(path)


class EdgeCoverage(GreedySelector):
    """Every edge on some selected path.

    A node with no edges at all is its own length-0 requirement, so a
    single-node function still gets one target.
    """

    criterion = Criterion.EDGE
    policy = LoopPolicy.EDGE_ONCE

    def universe(self, graph: ControlFlowGraph) -> list[Hashable]:
        return graph.edge_pairs() + _isolated_nodes(graph)

    def elements(self, path: Path) -> list[Hashable]:
        return path_edges(path) + [(n,) for n in path]


class EdgePairCoverage(GreedySelector):
    """Every length-2 walk ``a -> b -> c`` on some selected path.

    Edges that are part of no such walk, and edge-less nodes, are required on
    their own so that short functions are not left without targets.
    """

    criterion = Criterion.EDGE_PAIR
    policy = LoopPolicy.BACK_EDGE_REVISIT

    def universe(self, graph: ControlFlowGraph) -> list[Hashable]:
        triples: list[Hashable] = []
        in_triple: set[tuple[int, int]] = set()
        for a, b in graph.edge_pairs():
            for c in graph.successor_ids(b):
                triples.append((a, b, c))
                in_triple.update({(a, b), (b, c)})
        lone_edges = [e for e in graph.edge_pairs() if e not in in_triple]
        return triples + lone_edges + _isolated_nodes(graph)

    def elements(self, path: Path) -> list[Hashable]:
        return path_edge_pairs(path) + path_edges(path) + [(n,) for n in path]


def _is_subpath(short: Path, long: Path) -> bool:
    size = len(short)
    return any(long[i : i + size] == short for i in range(len(long) - size + 1))


def maximalize(paths: Iterable[Path]) -> list[Path]:
    """Splice finished paths into maximal ones.

    Take the longest remaining path, then keep splicing on candidates at its
    left end (candidate ends where the path starts) and right end (candidate
    starts where the path ends), consuming them, until nothing applies. A
    candidate whose nodes all already occur in the path is not spliced.
    Paths that are sub-paths of an earlier result are dropped.
    """
    remaining = list(dict.fromkeys(paths))
    maximal: list[Path] = []

    while remaining:
        path = max(remaining, key=len)
        remaining.remove(path)
        if any(_is_subpath(path, other) for other in maximal):
            continue

        extended = path
        spliced = True
        while spliced:
            spliced = False
            for candidate in list(remaining):
                if candidate[-1] == extended[0] and not set(candidate) <= set(extended):
                    extended = candidate[:-1] + extended
                    remaining.remove(candidate)
                    spliced = True
            for candidate in list(remaining):
                if candidate[0] == extended[-1] and not set(candidate) <= set(extended):
                    extended = extended + candidate[1:]
                    remaining.remove(candidate)
                    spliced = True

        maximal.append(extended)

    return maximal


class PrimePathCoverage(CriterionSelector):
    """Maximal prime paths, each one a target."""

    criterion = Criterion.PRIME
    policy = LoopPolicy.VISIT_TWICE

    def candidates(self, graph: ControlFlowGraph):
        enumerator = PathEnumerator(
            graph, self.policy, stop_on_self_loop=True, config=self.config
        )
        return enumerator.enumerate()

    def select(
        self, graph: ControlFlowGraph, function: FunctionBody | None = None
    ) -> CoverageResult:
        candidates = self.candidates(graph)
        paths = maximalize(candidates.paths)
        result = CoverageResult(
            criterion=self.criterion,
            graph=graph,
            paths=paths,
            truncated=candidates.truncated,
            candidate_count=len(candidates),
        )
        _log_result(result)
        return result


class StatementCoverage(CriterionSelector):
    """One single-node target per top-level statement of the function body."""

    criterion = Criterion.STATEMENT

    def select(
        self, graph: ControlFlowGraph, function: FunctionBody | None = None
    ) -> CoverageResult:
        statements = function.body if function is not None else []
        universe = list(range(len(statements)))
        paths: list[Path] = []
        uncovered: list[int] = []

        for index, stmt in enumerate(statements):
            node = next(
                (
                    n
                    for n in graph.nodes
                    if n.kind is not NodeKind.MERGE and stmt.start_line in n.lines
                ),
                None,
            )
            if node is None:
                uncovered.append(index)
            else:
                paths.append((node.id,))

        result = CoverageResult(
            criterion=self.criterion,
            graph=graph,
            paths=paths,
            universe=universe,
            uncovered=uncovered,
            candidate_count=len(statements),
        )
        _log_result(result)
        return result


SELECTORS: dict[Criterion, type[CriterionSelector]] = {
    Criterion.NODE: NodeCoverage,
    Criterion.EDGE: EdgeCoverage,
    Criterion.EDGE_PAIR: EdgePairCoverage,
    Criterion.PRIME: PrimePathCoverage,
    Criterion.STATEMENT: StatementCoverage,
}


def get_selector(
    criterion: "str | Criterion", config: AppConfig | None = None
) -> CriterionSelector:
    return SELECTORS[Criterion.parse(criterion)](config)


def _log_result(result: CoverageResult) -> None:
    name = result.graph.name or "<function>"
    logger.info(
        f"{result.criterion.value} coverage for {name}: {len(result.paths)} paths "
        f"selected from {result.candidate_count} candidates"
    )
    if result.uncovered:
        logger.warning(
            f"{result.criterion.value} coverage for {name} is partial: "
            f"{len(result.uncovered)} of {len(result.universe)} elements uncovered"
        )
