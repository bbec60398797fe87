"""Render analysis results as text or JSON."""

from __future__ import annotations

import json
import os
from collections import Counter
from pathlib import Path
from typing import Callable

from import_cycles.analysis.graph_models import DependencyGraph
from import_cycles.models import AnalysisResult, FileCycleReport

PathFormatter = Callable[[str], str]


def relative_to(base: Path) -> PathFormatter:
    """Formatter showing paths relative to ``base`` where possible."""
    def fmt(path: str) -> str:
        try:
            return os.path.relpath(path, base)
        except ValueError:
            # different drive on Windows
            return path
    return fmt


def _identity(path: str) -> str:
    return path


def rank_cycle_files(reports: list[FileCycleReport]) -> list[tuple[str, int]]:
    """Files ranked by the number of cycles they take part in."""
    counts: Counter[str] = Counter()
    for report in reports:
        for cycle in report.cycles:
            counts.update(set(cycle.files))
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def format_text(result: AnalysisResult, fmt: PathFormatter = _identity) -> str:
    lines = [f"Files that have cycles: {len(result.reports)}", ""]
    for report in result.reports:
        count = len(report.cycles)
        lines.append(f"File: {fmt(report.file_path)} contains {count} cycle{'s' if count != 1 else ''}")
        lines.append("")
        for cycle in report.cycles:
            lines.append("  " + " -> ".join(fmt(f) for f in cycle.files))
        lines.append("")
    if result.failures:
        lines.append(f"Files that could not be analyzed: {len(result.failures)}")
        for failure in result.failures:
            lines.append(f"  {fmt(failure.file_path)}: {failure.error}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def format_ranking(ranking: list[tuple[str, int]], fmt: PathFormatter = _identity) -> str:
    if not ranking:
        return "No files take part in a cycle.\n"
    width = max(len(str(count)) for _, count in ranking)
    return "".join(f"{count:>{width}}  {fmt(path)}\n" for path, count in ranking)


def format_dependencies(graph: DependencyGraph, fmt: PathFormatter = _identity) -> str:
    lines: list[str] = []
    for path, deps in graph.forward.items():
        lines.append(fmt(path))
        for dep in deps:
            edge = graph.edge(path, dep)
            names = f"  ({', '.join(edge.names)})" if edge and edge.names else ""
            lines.append(f"  -> {fmt(dep)}{names}")
        if path in graph.failures:
            lines.append(f"  !! {graph.failures[path]}")
    return "\n".join(lines) + "\n" if lines else ""


def to_dict(result: AnalysisResult, fmt: PathFormatter = _identity) -> dict:
    return {
        "files_with_cycles": len(result.reports),
        "total_cycles": result.cycle_count,
        "reports": [
            {
                "file": fmt(report.file_path),
                "cycles": [
                    {"kind": cycle.kind.value, "files": [fmt(f) for f in cycle.files]}
                    for cycle in report.cycles
                ],
            }
            for report in result.reports
        ],
        "failures": [
            {"file": fmt(f.file_path), "error": f.error} for f in result.failures
        ],
    }


def to_json(result: AnalysisResult, fmt: PathFormatter = _identity) -> str:
    return json.dumps(to_dict(result, fmt), indent=2) + "\n"
