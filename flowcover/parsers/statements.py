"""Statement tree for one function body.

This is the input of the CFG builder. Every statement carries its source text
and line span; compound statements carry their child blocks. Children that a
broken parse could not provide are ``None`` or empty, and the builder falls
back to placeholder labels for them.
"""

from dataclasses import dataclass, field


@dataclass
class Statement:
    """Base for every statement kind."""
    text: str
    start_line: int
    end_line: int

    @property
    def lines(self) -> set[int]:
        return set(range(self.start_line, self.end_line + 1))


@dataclass
class SimpleStatement(Statement):
    """A statement with no internal branching (assignment, call, pass, ...)."""


@dataclass
class IfStatement(Statement):
    """``if``/``elif``/``else``. An ``elif`` is a nested IfStatement in ``orelse``."""
    condition: str | None = None
    body: list[Statement] = field(default_factory=list)
    orelse: list[Statement] = field(default_factory=list)


@dataclass
class WhileStatement(Statement):
    condition: str | None = None
    body: list[Statement] = field(default_factory=list)
    orelse: list[Statement] = field(default_factory=list)


@dataclass
class ForStatement(Statement):
    target: str | None = None
    iterable: str | None = None
    body: list[Statement] = field(default_factory=list)
    orelse: list[Statement] = field(default_factory=list)


@dataclass
class MatchCase:
    pattern: str | None
    line: int
    guard: str | None = None
    body: list[Statement] = field(default_factory=list)


@dataclass
class MatchStatement(Statement):
    subject: str | None = None
    cases: list[MatchCase] = field(default_factory=list)


@dataclass
class ExceptHandler:
    line: int
    type_text: str | None = None
    name: str | None = None
    body: list[Statement] = field(default_factory=list)


@dataclass
class TryStatement(Statement):
    body: list[Statement] = field(default_factory=list)
    handlers: list[ExceptHandler] = field(default_factory=list)
    orelse: list[Statement] = field(default_factory=list)
    finalbody: list[Statement] | None = None
    finally_line: int | None = None


@dataclass
class ReturnStatement(Statement):
    pass


@dataclass
class RaiseStatement(Statement):
    pass


@dataclass
class BreakStatement(Statement):
    pass


@dataclass
class ContinueStatement(Statement):
    pass


# Statements that end a straight-line run in a block.
CONTROL_STATEMENTS = (
    IfStatement,
    WhileStatement,
    ForStatement,
    MatchStatement,
    TryStatement,
    ReturnStatement,
    RaiseStatement,
    BreakStatement,
    ContinueStatement,
)


@dataclass
class FunctionBody:
    """The statements of one function, as handed to the CFG builder."""
    name: str
    body: list[Statement] = field(default_factory=list)
    start_line: int = 0
    qualified_name: str | None = None
    source_path: str | None = None

    @property
    def display_name(self) -> str:
        return self.qualified_name or self.name
