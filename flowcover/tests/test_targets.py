"""Tests for coverage-target projection and the one-call analyzer."""

import dataclasses

import pytest

from flowcover.analysis.analyzer import CoverageAnalyzer
from flowcover.analysis.cfg_builder import build_cfg
from flowcover.analysis.criteria import (
    EdgeCoverage,
    EdgePairCoverage,
    NodeCoverage,
    PrimePathCoverage,
    StatementCoverage,
)
from flowcover.analysis.targets import (
    CoverageTargetProjector,
    CoverageTargetRecord,
    project_targets,
)
from flowcover.config import AppConfig
from flowcover.errors import UnknownCriterionError
from flowcover.parsers.statements import FunctionBody


class TestCoverageTargetRecord:
    """Test the record value type."""

    def test_frozen(self):
        """Test that records cannot be modified."""
        record = CoverageTargetRecord("f_edge_0", "desc", frozenset({1}))

        with pytest.raises(dataclasses.FrozenInstanceError):
            record.name = "other"

    def test_equality_ignores_path(self):
        """Test that records compare by name, description, lines and body."""
        first = CoverageTargetRecord("f_edge_0", "desc", frozenset({1}), path=(0,))
        second = CoverageTargetRecord("f_edge_0", "desc", frozenset({1}), path=(3,))

        assert first == second


class TestCoverageTargetProjector:
    """Test projection of selected paths onto records."""

    def test_edge_records(self, if_else_function):
        """Test names, lines and descriptions of edge targets."""
        result = EdgeCoverage().select(build_cfg(if_else_function))

        records = project_targets(result, if_else_function)

        assert [r.name for r in records] == ["classify_edge_0", "classify_edge_1"]
        assert records[0].lines == {2, 3}
        assert records[1].lines == {2, 5}
        assert records[0].path == (0, 1)
        assert records[0].description.splitlines() == [
            "Nodes: n0:x > 0, n1:y = 1, n2:y = 2",
            "Edges: n0->n1, n0->n2",
            "Path 0: n0:x > 0 [lines: 2] -> n1:y = 1 [lines: 3]",
            "Expected edges: n0->n1",
            "Expected lines: 2, 3",
        ]
        assert records[0].body.startswith("pass  # call classify(")

    def test_node_records(self, while_function):
        """Test the expected-node listing, without repeats."""
        result = NodeCoverage().select(build_cfg(while_function))

        (record,) = CoverageTargetProjector().project(result, while_function)

        assert record.name == "count_node_0"
        assert record.lines == {2, 3, 4, 5, 6}
        assert "Node Path 0: n0:i = 0 [lines: 2]" in record.description
        assert "Expected nodes: n0, n1, n2, n3" in record.description.splitlines()

    def test_edge_pair_records(self, while_function):
        """Test the expected edge-pair listing."""
        result = EdgePairCoverage().select(build_cfg(while_function))

        records = project_targets(result, while_function)

        assert [r.name for r in records] == ["count_edgepair_0", "count_edgepair_1"]
        assert (
            "Expected edge-pairs: n0->n1->n2, n1->n2->n1, n2->n1->n3"
            in records[0].description.splitlines()
        )

    def test_prime_records(self, while_function):
        """Test that prime targets list the path and its lines only."""
        result = PrimePathCoverage().select(build_cfg(while_function))

        records = project_targets(result, while_function)

        lines = records[1].description.splitlines()
        assert records[1].name == "count_prime_1"
        assert lines[2].startswith("Prime Path 1: n0:i = 0")
        assert lines[-1] == "Expected lines: 2, 3, 6"
        assert not any(line.startswith("Expected edges") for line in lines)

    def test_statement_records(self, while_function):
        """Test that statement targets quote the statement text."""
        result = StatementCoverage().select(build_cfg(while_function), while_function)

        records = project_targets(result, while_function)

        assert [r.name for r in records] == [
            "count_statement_0",
            "count_statement_1",
            "count_statement_2",
        ]
        assert records[1].description.splitlines() == [
            "Statement 1: write a test case that hits `while i < 3`",
            "Expected lines: 3",
        ]

    def test_one_record_per_path(self, match_function):
        """Test that the projection keeps path order and count."""
        result = EdgeCoverage().select(build_cfg(match_function))

        records = project_targets(result, match_function)

        assert [r.path for r in records] == result.paths
        assert len({r.name for r in records}) == len(records)

    def test_empty_result(self):
        """Test that a function without paths has no records."""
        function = FunctionBody("noop", [])
        result = EdgeCoverage().select(build_cfg(function))

        assert project_targets(result, function) == []


class TestCoverageAnalyzer:
    """Test the one-call analysis entry point."""

    def test_default_criterion_from_config(self, if_else_function):
        """Test that the configured criterion is used when none is given."""
        analyzer = CoverageAnalyzer(AppConfig(default_criterion="node"))

        report = analyzer.analyze(if_else_function)

        assert report.criterion.value == "node"
        assert [r.name for r in report.records] == [
            "classify_node_0",
            "classify_node_1",
        ]
        assert report.is_complete
        assert report.uncovered == []
        assert len(report.graph.nodes) == 3

    def test_explicit_criterion(self, while_function):
        """Test a partial edge-pair report."""
        report = CoverageAnalyzer().analyze(while_function, "edge-pair")

        assert not report.is_complete
        assert report.uncovered == [(2, 1, 2)]
        assert len(report.records) == 2

    def test_analyze_all_keeps_graphs_separate(
        self, if_else_function, while_function
    ):
        """Test that each function gets its own graph."""
        reports = CoverageAnalyzer().analyze_all(
            [if_else_function, while_function], "edge"
        )

        assert [r.function.name for r in reports] == ["classify", "count"]
        assert reports[0].graph is not reports[1].graph
        assert len(reports[1].graph.nodes) == 4

    def test_unknown_criterion(self, if_else_function):
        """Test that a bad criterion name is rejected."""
        with pytest.raises(UnknownCriterionError):
            CoverageAnalyzer().analyze(if_else_function, "mcdc")
