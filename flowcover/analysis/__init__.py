"""CFG construction, path enumeration and coverage-criterion selection."""

from .analyzer import CoverageAnalyzer, CoverageReport
from .cfg_builder import ControlFlowGraphBuilder, build_cfg
from .criteria import (
    Criterion,
    CoverageResult,
    EdgeCoverage,
    EdgePairCoverage,
    NodeCoverage,
    PrimePathCoverage,
    StatementCoverage,
    get_selector,
    greedy_cover,
    maximalize,
)
from .path_enumerator import LoopPolicy, PathEnumerator, PathUniverse, enumerate_paths
from .targets import CoverageTargetProjector, CoverageTargetRecord, project_targets

__all__ = [
    "ControlFlowGraphBuilder",
    "CoverageAnalyzer",
    "CoverageReport",
    "CoverageResult",
    "CoverageTargetProjector",
    "CoverageTargetRecord",
    "Criterion",
    "EdgeCoverage",
    "EdgePairCoverage",
    "LoopPolicy",
    "NodeCoverage",
    "PathEnumerator",
    "PathUniverse",
    "PrimePathCoverage",
    "StatementCoverage",
    "build_cfg",
    "enumerate_paths",
    "get_selector",
    "greedy_cover",
    "maximalize",
    "project_targets",
]
