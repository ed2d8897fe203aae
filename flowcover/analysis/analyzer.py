"""One-call coverage analysis: statement tree in, coverage targets out."""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from ..config import AppConfig, settings
from ..graph.flow_graph import ControlFlowGraph
from ..parsers.statements import FunctionBody
from .cfg_builder import ControlFlowGraphBuilder
from .criteria import Criterion, CoverageResult, get_selector
from .targets import CoverageTargetProjector, CoverageTargetRecord


@dataclass
class CoverageReport:
    """Everything one analysis produced for one function."""
    function: FunctionBody
    result: CoverageResult
    records: list[CoverageTargetRecord] = field(default_factory=list)

    @property
    def graph(self) -> ControlFlowGraph:
        return self.result.graph

    @property
    def criterion(self) -> Criterion:
        return self.result.criterion

    @property
    def is_complete(self) -> bool:
        return self.result.is_complete

    @property
    def uncovered(self) -> list[Any]:
        return self.result.uncovered


class CoverageAnalyzer:
    """Builds the CFG of a function, selects paths and projects them to records.

    Every call builds a private graph, so one analyzer can serve independent
    functions back to back.
    """

    def __init__(self, config: AppConfig | None = None):
        self.config = config or settings
        self.builder = ControlFlowGraphBuilder()
        self.projector = CoverageTargetProjector()

    def build_graph(self, function: FunctionBody) -> ControlFlowGraph:
        return self.builder.build(function)

    def analyze(
        self, function: FunctionBody, criterion: "str | Criterion | None" = None
    ) -> CoverageReport:
        criterion = Criterion.parse(criterion or self.config.default_criterion)
        graph = self.build_graph(function)
        result = get_selector(criterion, self.config).select(graph, function)
        records = self.projector.project(result, function)
        logger.info(
            f"Generated {len(records)} {criterion.value} targets for "
            f"{function.display_name}"
        )
        return CoverageReport(function=function, result=result, records=records)

    def analyze_all(
        self,
        functions: list[FunctionBody],
        criterion: "str | Criterion | None" = None,
    ) -> list[CoverageReport]:
        return [self.analyze(function, criterion) for function in functions]
