"""Enumerate import chains from an entry file and pick out the cycles."""

from __future__ import annotations

from collections.abc import Iterator

from import_cycles.analysis.graph_models import DependencyGraph
from import_cycles.models import CycleKind, FileCycleReport, ImportChain


def iter_import_chains(graph: DependencyGraph, entry: str) -> Iterator[list[str]]:
    """Depth-first over the value edges, yielding every maximal chain.

    A chain stops at the first file it revisits (that file is appended once)
    or at a file with no dependencies. Dependencies are followed in import
    order, so chains come out in the same order on every run.
    """
    stack: list[tuple[str, ...]] = [(entry,)]
    while stack:
        chain = stack.pop()
        last = chain[-1]
        if last in chain[:-1]:
            yield list(chain)
            continue
        deps = graph.forward.get(last, [])
        if not deps:
            yield list(chain)
            continue
        for dep in reversed(deps):
            stack.append(chain + (dep,))


def classify_chain(chain: list[str]) -> CycleKind:
    if len(chain) > 1 and chain[0] == chain[-1]:
        return CycleKind.CLOSED
    if chain[-1] in chain[:-1]:
        return CycleKind.SUBCYCLE
    return CycleKind.TERMINATED


def enumerate_chains(graph: DependencyGraph, entry: str) -> list[ImportChain]:
    """All distinct chains from ``entry``, classified, in discovery order."""
    chains: list[ImportChain] = []
    seen: set[tuple[str, ...]] = set()
    for chain in iter_import_chains(graph, entry):
        key = tuple(chain)
        if key in seen:
            continue
        seen.add(key)
        chains.append(ImportChain(files=chain, kind=classify_chain(chain)))
    return chains


def find_cycles(graph: DependencyGraph, entry: str) -> FileCycleReport:
    """Closed cycles and subcycles reachable from ``entry``."""
    cycles = [chain for chain in enumerate_chains(graph, entry) if chain.is_cycle]
    return FileCycleReport(file_path=entry, cycles=cycles)
