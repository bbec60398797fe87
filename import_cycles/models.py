"""Data models for the import-cycles analysis."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from import_cycles.analysis.graph_models import DependencyGraph

logger = logging.getLogger(__name__)


class Span(NamedTuple):
    """Byte range ``[start, end)`` into a file's source."""
    start: int
    end: int


class DeclarationKind(enum.Enum):
    TYPE_ALIAS = "type_alias"
    INTERFACE = "interface"
    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"

    @property
    def is_type_level(self) -> bool:
        """Type aliases and interfaces are erased at compile time."""
        return self in (DeclarationKind.TYPE_ALIAS, DeclarationKind.INTERFACE)


class CycleKind(enum.Enum):
    CLOSED = "closed"
    SUBCYCLE = "subcycle"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class SourceFile:
    """Raw bytes of a source file, read once."""
    path: Path
    data: bytes


@dataclass
class LocalVariable:
    """A parameter or a variable declared inside a function-like body."""
    name: str
    type_span: Span | None = None
    value_span: Span | None = None


@dataclass
class FunctionScope:
    """A method, constructor or top-level function."""
    name: str
    span: Span
    body: Span | None = None
    parameters: list[LocalVariable] = field(default_factory=list)
    variables: list[LocalVariable] = field(default_factory=list)


@dataclass
class ClassProperty:
    name: str
    span: Span
    type_span: Span | None = None
    value_span: Span | None = None


@dataclass
class Declaration:
    """A top-level construct declared by a file."""
    name: str
    kind: DeclarationKind
    span: Span
    is_exported: bool = False
    # CLASS
    extends: list[str] = field(default_factory=list)
    properties: list[ClassProperty] = field(default_factory=list)
    methods: list[FunctionScope] = field(default_factory=list)
    constructor: FunctionScope | None = None
    # FUNCTION
    scope: FunctionScope | None = None
    # VARIABLE
    value_span: Span | None = None


@dataclass
class ImportSpecifier:
    imported_name: str
    local_name: str
    is_type_only: bool = False


@dataclass
class ImportStatement:
    """An ``import`` (or ``export ... from``) statement of a file."""
    importing_file: Path
    module_path: str
    specifiers: list[ImportSpecifier] = field(default_factory=list)
    is_type_only: bool = False
    is_namespace_or_default: bool = False
    is_side_effect: bool = False
    is_reexport: bool = False
    span: Span | None = None

    @property
    def is_relative(self) -> bool:
        return self.module_path.startswith(".")


@dataclass
class ParsedFile:
    """Parse result of a single source file."""
    path: Path
    source: bytes
    imports: list[ImportStatement] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)
    # exported name -> local declaration name, for `export { a as b }`
    export_aliases: dict[str, str] = field(default_factory=dict)
    # type annotations, type arguments and type parameters, in source order
    type_spans: list[Span] = field(default_factory=list)

    def text(self, span: Span | None) -> str:
        if span is None:
            return ""
        return self.source[span.start:span.end].decode("utf-8", errors="replace")

    def value_text(self, span: Span | None) -> str:
        """Like ``text``, with every type position blanked out with spaces."""
        if span is None:
            return ""
        data = bytearray(self.source[span.start:span.end])
        for hole in self.type_spans:
            if hole.start >= span.end:
                break
            start, end = max(hole.start, span.start), min(hole.end, span.end)
            if start < end:
                data[start - span.start:end - span.start] = b" " * (end - start)
        return data.decode("utf-8", errors="replace")

    def find_export(self, name: str) -> Declaration | None:
        """Find the exported value declaration for ``name``.

        Type aliases and interfaces are never returned.
        """
        local = self.export_aliases.get(name, name)
        for decl in self.declarations:
            if decl.kind.is_type_level:
                continue
            if decl.name != local:
                continue
            if decl.is_exported or name in self.export_aliases:
                return decl
        return None

    @property
    def reexports(self) -> list[ImportStatement]:
        return [imp for imp in self.imports if imp.is_reexport]


@dataclass
class ResolvedImport:
    """An import statement mapped to an existing local file."""
    statement: ImportStatement
    target_path: Path
    used_names: list[str] = field(default_factory=list)


@dataclass
class ImportChain:
    files: list[str]
    kind: CycleKind

    @property
    def is_cycle(self) -> bool:
        return self.kind != CycleKind.TERMINATED

    def __str__(self) -> str:
        return " -> ".join(self.files)


@dataclass
class FileCycleReport:
    """Cycles found from one entry file."""
    file_path: str
    cycles: list[ImportChain] = field(default_factory=list)


@dataclass
class EntryFailure:
    """An entry file that could not be analyzed."""
    file_path: str
    error: str


_DEFAULT_WORKERS = 4


def _env_workers() -> int:
    raw = os.getenv("IMPORT_CYCLES_WORKERS", "").strip()
    if not raw:
        return _DEFAULT_WORKERS
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            "ignoring IMPORT_CYCLES_WORKERS=%r: not an integer, using %d",
            raw, _DEFAULT_WORKERS,
        )
        return _DEFAULT_WORKERS


@dataclass
class AnalysisConfig:
    """Configuration for a cycle detection run."""
    extensions: tuple[str, ...] = (".ts", ".tsx")
    resolve_index_files: bool = True
    max_workers: int = 0
    warn_class_type_imports: bool = False

    def __post_init__(self):
        if not self.max_workers:
            self.max_workers = _env_workers()
        self.max_workers = max(1, self.max_workers)


@dataclass
class AnalysisResult:
    """Outcome of a run: cycle reports, failed entries and the graph."""
    entries: list[str] = field(default_factory=list)
    reports: list[FileCycleReport] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)
    graph: DependencyGraph | None = None

    @property
    def has_cycles(self) -> bool:
        return bool(self.reports)

    @property
    def cycle_count(self) -> int:
        return sum(len(r.cycles) for r in self.reports)
