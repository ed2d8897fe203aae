"""Node and edge type definitions for the control-flow graph."""

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeKind(str, Enum):
    """What a flow node stands for in the source."""
    LINEAR = "linear"
    CONDITION = "condition"
    LOOP = "loop"
    MATCH = "match"
    CASE = "case"
    MERGE = "merge"
    TRY = "try"
    HANDLER = "handler"
    FINALLY = "finally"
    RETURN = "return"
    RAISE = "raise"
    BREAK = "break"
    CONTINUE = "continue"


# Nodes after which no successor can follow on the same path.
TERMINAL_KINDS = frozenset({NodeKind.RETURN, NodeKind.RAISE})


@dataclass(eq=False)
class FlowNode:
    """A graph vertex: one statement or a merged run of straight-line statements.

    Equality is identity based. Two nodes with the same label are still
    distinct entities.
    """
    id: int
    label: str
    kind: NodeKind = NodeKind.LINEAR
    lines: frozenset[int] = field(default_factory=frozenset)
    origin_ref: Any = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        node_id: int,
        label: str,
        kind: NodeKind = NodeKind.LINEAR,
        lines: frozenset[int] | set[int] = frozenset(),
        origin: Any = None,
    ) -> "FlowNode":
        """Create a node holding only a weak reference to its statement."""
        origin_ref = weakref.ref(origin) if origin is not None else None
        return cls(
            id=node_id,
            label=label,
            kind=kind,
            lines=frozenset(lines),
            origin_ref=origin_ref,
        )

    @property
    def origin(self) -> Any | None:
        """The statement this node was built from, if it is still alive."""
        if self.origin_ref is None:
            return None
        return self.origin_ref()

    @property
    def name(self) -> str:
        return f"n{self.id}"

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_KINDS

    def display(self) -> str:
        """Single-line rendering used in descriptions and tables."""
        return f"{self.name}:{self.label.replace(chr(10), ' ')}"


@dataclass(frozen=True)
class FlowEdge:
    """A possible one-step control transfer between two nodes (by id)."""
    source: int
    target: int
    back_edge: bool = field(default=False, compare=False)

    @property
    def pair(self) -> tuple[int, int]:
        return (self.source, self.target)

    def display(self) -> str:
        return f"n{self.source}->n{self.target}"
