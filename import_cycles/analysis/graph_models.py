"""Data models for the value-dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field

from import_cycles.models import ResolvedImport


@dataclass
class FileNode:
    path: str
    imports: list[ResolvedImport] = field(default_factory=list)


@dataclass
class DependencyEdge:
    source: str
    target: str
    names: list[str] = field(default_factory=list)  # bindings that made it a value edge


@dataclass
class DependencyGraph:
    nodes: dict[str, FileNode] = field(default_factory=dict)
    edges: list[DependencyEdge] = field(default_factory=list)
    forward: dict[str, list[str]] = field(default_factory=dict)  # source -> [targets], import order
    reverse: dict[str, list[str]] = field(default_factory=dict)  # target -> [sources]
    failures: dict[str, str] = field(default_factory=dict)  # path -> error message

    def dependencies_of(self, path: str) -> list[str]:
        return list(self.forward.get(path, []))

    def edge(self, source: str, target: str) -> DependencyEdge | None:
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None
