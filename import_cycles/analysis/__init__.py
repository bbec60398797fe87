"""Value-dependency analysis: usage classification, resolution, cycles."""

from __future__ import annotations

from import_cycles.analysis.cycles import enumerate_chains, find_cycles
from import_cycles.analysis.dependency_graph import DependencyGraphBuilder
from import_cycles.analysis.graph_models import DependencyEdge, DependencyGraph, FileNode
from import_cycles.analysis.resolver import DependencyResolver
from import_cycles.analysis.usage import is_class_used_as_value

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "DependencyResolver",
    "FileNode",
    "enumerate_chains",
    "find_cycles",
    "is_class_used_as_value",
]
