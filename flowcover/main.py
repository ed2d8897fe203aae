#!/usr/bin/env python3
"""
Command line entry point.

Parses a Python file, runs a coverage criterion over the control-flow graph
of each selected function and prints the resulting test targets. With
--write, a pytest skeleton is written next to the source file.
"""

import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis.analyzer import CoverageAnalyzer, CoverageReport
from .analysis.criteria import Criterion
from .config import AppConfig
from .errors import FlowcoverError
from .parsers.python_frontend import PythonFrontend
from .script_writer import TestScriptWriter

console = Console()


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def show_graph(report: CoverageReport) -> None:
    graph = report.graph
    table = Table(title=f"CFG of {graph.name}")
    table.add_column("Node", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Label")
    table.add_column("Lines", style="green")
    table.add_column("Successors", style="yellow")

    for node in graph.nodes:
        successors = []
        for succ in graph.successors(node):
            marker = " (back)" if graph.is_back_edge(node, succ) else ""
            successors.append(f"{succ.name}{marker}")
        table.add_row(
            node.name,
            node.kind.value,
            node.label.replace("\n", " "),
            ", ".join(str(line) for line in sorted(node.lines)),
            ", ".join(successors),
        )
    console.print(table)


def show_report(report: CoverageReport) -> None:
    table = Table(
        title=f"{report.criterion.value} coverage: {report.function.display_name}"
    )
    table.add_column("Target", style="cyan")
    table.add_column("Path", style="yellow")
    table.add_column("Lines", style="green")

    for record in report.records:
        table.add_row(
            record.name,
            " -> ".join(f"n{node_id}" for node_id in record.path),
            ", ".join(str(line) for line in sorted(record.lines)),
        )
    console.print(table)

    result = report.result
    if result.truncated:
        console.print(
            "[yellow]Path enumeration hit the configured ceiling; "
            "the targets are a degraded result.[/yellow]"
        )
    if result.uncovered:
        console.print(
            f"[red]{len(result.uncovered)} of {len(result.universe)} coverage "
            f"elements are not reachable by any candidate path:[/red] "
            f"{', '.join(map(str, result.uncovered))}"
        )


def report_to_dict(report: CoverageReport) -> dict:
    return {
        "function": report.function.display_name,
        "criterion": report.criterion.value,
        "complete": report.is_complete,
        "truncated": report.result.truncated,
        "uncovered": [list(e) if isinstance(e, tuple) else e for e in report.uncovered],
        "graph": report.graph.to_dict(),
        "targets": [
            {
                "name": r.name,
                "description": r.description,
                "lines": sorted(r.lines),
                "path": list(r.path),
                "body": r.body,
            }
            for r in report.records
        ],
    }


def main(argv: list[str] | None = None) -> int:
    config = AppConfig()
    parser = argparse.ArgumentParser(
        description="Derive coverage-criterion test targets from Python functions"
    )
    parser.add_argument("source", help="Python file to analyze")
    parser.add_argument(
        "-f",
        "--function",
        action="append",
        help="Function to analyze (name or Class.method); repeatable, default: all",
    )
    parser.add_argument(
        "-c",
        "--criterion",
        default=config.default_criterion,
        choices=[c.value for c in Criterion],
        help=f"Coverage criterion (default: {config.default_criterion})",
    )
    parser.add_argument("--show-graph", action="store_true", help="Print the CFG")
    parser.add_argument(
        "--json", action="store_true", help="Print the reports as JSON instead of tables"
    )
    parser.add_argument(
        "--write", action="store_true", help="Write a pytest skeleton next to the source"
    )
    parser.add_argument("-o", "--output", help="Path of the generated test file")
    parser.add_argument("--module", help="Module to import the functions from")
    parser.add_argument(
        "--log-level", default=config.log_level, help="Log level (default: %(default)s)"
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    source_path = Path(args.source)
    if not source_path.is_file():
        console.print(f"[red]Error: Source file does not exist: {source_path}[/red]")
        return 1

    try:
        source = source_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        console.print(
            f"[red]Error: Source file is not valid UTF-8 ({e.reason}): {source_path}[/red]"
        )
        return 1

    frontend = PythonFrontend()
    analyzer = CoverageAnalyzer(config)

    try:
        if args.function:
            functions = [
                frontend.get_function(source, name, str(source_path))
                for name in args.function
            ]
        else:
            functions = frontend.parse_functions(source, str(source_path))
        reports = analyzer.analyze_all(functions, args.criterion)
    except FlowcoverError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if not reports:
        console.print(f"[yellow]No functions found in {source_path}[/yellow]")
        return 0

    if args.json:
        console.print_json(json.dumps([report_to_dict(r) for r in reports]))
    else:
        console.print(
            Panel(
                f"[bold]{source_path}[/bold]\nCriterion: {args.criterion}",
                style="blue",
            )
        )
        for report in reports:
            if args.show_graph:
                show_graph(report)
            show_report(report)

    if args.write or args.output:
        writer = TestScriptWriter(config)
        text = writer.render(
            {r.function.display_name: r.records for r in reports}, args.module
        )
        target = Path(args.output) if args.output else writer.default_path(source_path)
        writer.write(text, target)
        console.print(f"[green]Test skeleton written to {target}[/green]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
