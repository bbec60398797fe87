"""import-cycles: detect runtime import cycles in TypeScript code."""

from __future__ import annotations

__version__ = "0.3.0"

from import_cycles.models import (  # noqa: E402
    AnalysisConfig,
    AnalysisResult,
    CycleKind,
    EntryFailure,
    FileCycleReport,
    ImportChain,
)
from import_cycles.pipeline import build_graph, detect_import_cycles  # noqa: E402

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "CycleKind",
    "EntryFailure",
    "FileCycleReport",
    "ImportChain",
    "build_graph",
    "detect_import_cycles",
]
