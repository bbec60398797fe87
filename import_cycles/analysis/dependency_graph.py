"""Dependency graph builder: resolves every file reachable from the entries."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from import_cycles.analysis.graph_models import DependencyEdge, DependencyGraph, FileNode
from import_cycles.analysis.resolver import DependencyResolver
from import_cycles.errors import ImportCyclesError
from import_cycles.models import ResolvedImport

logger = logging.getLogger(__name__)


class DependencyGraphBuilder:
    """Build the value-dependency graph reachable from a set of entry files.

    Files are resolved breadth-first; each frontier is fanned out to a thread
    pool and gathered in submission order, so the graph does not depend on
    which worker finishes first.
    """

    def __init__(self, resolver: DependencyResolver | None = None, max_workers: int | None = None):
        self.resolver = resolver or DependencyResolver()
        self.max_workers = max_workers or self.resolver.config.max_workers

    def build(self, entry_paths: list[Path]) -> DependencyGraph:
        graph = DependencyGraph()
        visited: set[Path] = set()
        frontier = list(dict.fromkeys(entry_paths))

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            while frontier:
                visited.update(frontier)
                futures = [pool.submit(self._resolve_file, path) for path in frontier]
                next_frontier: list[Path] = []
                for path, future in zip(frontier, futures):
                    imports, error = future.result()
                    if error is not None:
                        graph.failures[str(path)] = error
                        graph.forward.setdefault(str(path), [])
                        continue
                    self._add_node(graph, str(path), imports)
                    for imp in imports:
                        target = imp.target_path
                        if target not in visited and target not in next_frontier:
                            next_frontier.append(target)
                frontier = next_frontier

        # A broken dependency counts as unresolvable: drop the edges into it
        entries = {str(p) for p in entry_paths}
        broken = set(graph.failures) - entries
        if broken:
            self._drop_targets(graph, broken)

        logger.info(
            "dependency graph: %d file(s), %d value edge(s), %d failure(s)",
            len(graph.forward), len(graph.edges), len(graph.failures),
        )
        return graph

    def _resolve_file(self, path: Path) -> tuple[list[ResolvedImport], str | None]:
        try:
            parsed = self.resolver.load(path)
        except ImportCyclesError as e:
            logger.warning("cannot analyze %s: %s", path, e)
            return [], str(e)
        return self.resolver.resolve_imports(parsed), None

    def _add_node(self, graph: DependencyGraph, path: str, imports: list[ResolvedImport]) -> None:
        graph.nodes[path] = FileNode(path=path, imports=imports)
        graph.forward.setdefault(path, [])
        graph.reverse.setdefault(path, [])
        for imp in imports:
            self._add_edge(graph, path, str(imp.target_path), imp.used_names)

    def _add_edge(
        self,
        graph: DependencyGraph,
        source: str,
        target: str,
        names: list[str],
    ) -> None:
        # One edge per file pair; later imports only add names
        if target in graph.forward.get(source, []):
            edge = graph.edge(source, target)
            if edge is not None:
                edge.names.extend(n for n in names if n not in edge.names)
            return
        graph.edges.append(DependencyEdge(source=source, target=target, names=list(names)))
        graph.forward.setdefault(source, []).append(target)
        graph.reverse.setdefault(target, []).append(source)

    @staticmethod
    def _drop_targets(graph: DependencyGraph, targets: set[str]) -> None:
        graph.edges = [e for e in graph.edges if e.target not in targets]
        for source, deps in graph.forward.items():
            graph.forward[source] = [d for d in deps if d not in targets]
        for target in targets:
            graph.reverse.pop(target, None)
