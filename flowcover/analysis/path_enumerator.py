"""Bounded enumeration of candidate execution paths over a CFG.

Paths are tuples of node ids. Traversal is breadth first from every entry
node; a path is finished once it reaches an exit node. Loop back edges would
make the traversal infinite, so each criterion picks a loop policy that
bounds how often a path may re-enter a node or edge.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from ..config import AppConfig, settings
from ..graph.flow_graph import ControlFlowGraph

Path = tuple[int, ...]


class LoopPolicy(str, Enum):
    """How far a path may go around a cycle."""

    # Each directed edge at most once per path.
    EDGE_ONCE = "edge-once"
    # Each node at most once per path, except when re-entered along a back edge.
    BACK_EDGE_REVISIT = "back-edge-revisit"
    # Each node fewer than two visits before extension, so one full iteration.
    VISIT_TWICE = "visit-twice"


@dataclass
class PathUniverse:
    """Finished candidate paths, and whether the ceiling cut enumeration short."""
    paths: list[Path] = field(default_factory=list)
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.paths)


def path_edges(path: Path) -> list[tuple[int, int]]:
    return list(zip(path, path[1:]))


def path_edge_pairs(path: Path) -> list[tuple[int, int, int]]:
    return list(zip(path, path[1:], path[2:]))


class PathEnumerator:
    """Enumerates finished paths of a graph under one loop policy."""

    def __init__(
        self,
        graph: ControlFlowGraph,
        policy: LoopPolicy,
        stop_on_self_loop: bool = False,
        config: AppConfig | None = None,
    ):
        self.graph = graph
        self.policy = policy
        self.stop_on_self_loop = stop_on_self_loop
        self.config = config or settings

    def _can_extend(self, path: Path, successor: int) -> bool:
        last = path[-1]
        if self.policy is LoopPolicy.EDGE_ONCE:
            return (last, successor) not in path_edges(path)
        if self.policy is LoopPolicy.BACK_EDGE_REVISIT:
            return successor not in path or self.graph.is_back_edge(last, successor)
        return path.count(successor) < 2

    def _is_finished(self, path: Path) -> bool:
        if self.graph.is_exit(path[-1]):
            return True
        return self._is_self_repeat(path)

    def _is_self_repeat(self, path: Path) -> bool:
        return self.stop_on_self_loop and len(path) > 1 and path[-1] == path[-2]

    def _is_closed(self, path: Path) -> bool:
        """A sink or a self-repeat ends a path for good.

        An exit that sits on a cycle, like a trailing loop header, is recorded
        as finished and still extended.
        """
        return self.graph.out_degree(path[-1]) == 0 or self._is_self_repeat(path)

    def enumerate(self) -> PathUniverse:
        universe = PathUniverse()
        queue: deque[Path] = deque((node.id,) for node in self.graph.entry_nodes())
        expansions = 0

        while queue:
            if (
                len(universe.paths) >= self.config.max_paths
                or expansions >= self.config.max_expansions
            ):
                universe.truncated = True
                logger.warning(
                    f"Path enumeration for {self.graph.name or '<function>'} stopped "
                    f"at {len(universe.paths)} paths after {expansions} expansions "
                    f"({self.policy.value})"
                )
                break

            path = queue.popleft()
            expansions += 1

            if self._is_finished(path):
                universe.paths.append(path)
                if self._is_closed(path):
                    continue

            for successor in self.graph.successor_ids(path[-1]):
                if self._can_extend(path, successor):
                    queue.append(path + (successor,))

        logger.debug(
            f"Enumerated {len(universe.paths)} paths ({self.policy.value}) "
            f"for {self.graph.name or '<function>'}"
        )
        return universe


def enumerate_paths(
    graph: ControlFlowGraph,
    policy: LoopPolicy,
    stop_on_self_loop: bool = False,
    config: AppConfig | None = None,
) -> PathUniverse:
    """Enumerate the candidate paths of ``graph`` under ``policy``."""
    return PathEnumerator(graph, policy, stop_on_self_loop, config).enumerate()
