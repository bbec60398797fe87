"""Cycle detection orchestrator: entries -> graph -> per-entry cycle reports."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from import_cycles.analysis.cycles import find_cycles
from import_cycles.analysis.dependency_graph import DependencyGraphBuilder
from import_cycles.analysis.graph_models import DependencyGraph
from import_cycles.analysis.resolver import DependencyResolver
from import_cycles.models import (
    AnalysisConfig,
    AnalysisResult,
    EntryFailure,
    FileCycleReport,
)
from import_cycles.source import resolve_path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def build_graph(
    entry_paths: list[str | Path],
    config: AnalysisConfig | None = None,
) -> DependencyGraph:
    """Build the value-dependency graph reachable from ``entry_paths``."""
    config = config or AnalysisConfig()
    resolver = DependencyResolver(config)
    builder = DependencyGraphBuilder(resolver, max_workers=config.max_workers)
    return builder.build([resolve_path(p) for p in entry_paths])


def detect_import_cycles(
    entry_paths: list[str | Path],
    config: AnalysisConfig | None = None,
    progress: ProgressCallback | None = None,
) -> AnalysisResult:
    """Find the runtime import cycles reachable from each entry file.

    Entries that cannot be read or parsed are reported in
    ``AnalysisResult.failures``; the remaining entries are still analyzed.
    Entries without cycles are left out of ``AnalysisResult.reports``.
    """
    config = config or AnalysisConfig()
    entries = list(dict.fromkeys(str(resolve_path(p)) for p in entry_paths))

    # Stage 1: Graph
    if progress:
        progress("Resolving imports", 0, 1)
    graph = build_graph(entries, config)
    if progress:
        progress("Resolving imports", 1, 1)

    failures = [
        EntryFailure(file_path=entry, error=graph.failures[entry])
        for entry in entries if entry in graph.failures
    ]
    healthy = [entry for entry in entries if entry not in graph.failures]

    # Stage 2: Cycles, per entry
    reports: list[FileCycleReport] = []
    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        for i, report in enumerate(pool.map(lambda e: find_cycles(graph, e), healthy)):
            if progress:
                progress("Finding cycles", i, len(healthy))
            if report.cycles:
                reports.append(report)
    if progress:
        progress("Finding cycles", len(healthy), len(healthy))

    result = AnalysisResult(entries=entries, reports=reports, failures=failures, graph=graph)
    logger.info(
        "%d entry file(s): %d with cycles (%d cycle(s)), %d failed",
        len(entries), len(reports), result.cycle_count, len(failures),
    )
    return result
