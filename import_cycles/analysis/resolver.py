"""Turn a file's import statements into value-dependency edges."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from import_cycles.analysis.usage import is_class_used_as_value
from import_cycles.errors import ImportCyclesError
from import_cycles.models import (
    AnalysisConfig,
    Declaration,
    DeclarationKind,
    ImportStatement,
    ParsedFile,
    ResolvedImport,
    Span,
)
from import_cycles.parsing import EXT_TO_GRAMMAR, TypeScriptParser, parse_source
from import_cycles.source import read_source

logger = logging.getLogger(__name__)

# ESM-style TypeScript imports name the compiled file: "./a.js" means "./a.ts"
_COMPILED_TO_SOURCE: dict[str, tuple[str, ...]] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


class DependencyResolver:
    """Resolve and filter imports, parsing each file at most once.

    Safe to share between threads: the parse cache is lock-protected and
    everything else is read-only.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        parser: TypeScriptParser | None = None,
    ):
        self.config = config or AnalysisConfig()
        self._parser = parser
        self._cache: dict[Path, ParsedFile | ImportCyclesError] = {}
        self._lock = threading.Lock()

    def load(self, path: Path) -> ParsedFile:
        """Read and parse ``path``; failures are cached and re-raised."""
        with self._lock:
            cached = self._cache.get(path)
        if isinstance(cached, ImportCyclesError):
            raise cached
        if cached is not None:
            return cached

        try:
            source = read_source(path)
            parse = self._parser.parse if self._parser is not None else parse_source
            parsed = parse(source)
        except ImportCyclesError as e:
            with self._lock:
                self._cache[path] = e
            raise
        with self._lock:
            return self._cache.setdefault(path, parsed)

    def resolve_module_path(self, importing_file: Path, module_path: str) -> Path | None:
        """Map a relative specifier to an existing source file, or None."""
        base = importing_file.parent / module_path
        if _names_directory(module_path):
            # "." / ".." / "./lib/" can only mean the directory's index file
            candidates: list[Path] = []
        elif base.suffix in EXT_TO_GRAMMAR and base.is_file():
            return base.resolve()
        else:
            candidates = [base.with_name(base.name + ext) for ext in self.config.extensions]
            if base.suffix in _COMPILED_TO_SOURCE:
                candidates.extend(
                    base.with_suffix(ext) for ext in _COMPILED_TO_SOURCE[base.suffix]
                )
        if self.config.resolve_index_files:
            candidates.extend(base / f"index{ext}" for ext in self.config.extensions)

        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        return None

    def resolve_imports(self, parsed: ParsedFile) -> list[ResolvedImport]:
        """Return the imports of ``parsed`` that survive type erasure."""
        resolved: list[ResolvedImport] = []
        for stmt in parsed.imports:
            result = self._resolve_statement(parsed, stmt)
            if result is not None:
                resolved.append(result)
        return resolved

    def find_declaration(
        self,
        target: ParsedFile,
        name: str,
        _seen: frozenset[Path] = frozenset(),
    ) -> Declaration | None:
        """Find the value declaration exported as ``name``.

        Follows ``export ... from`` re-exports so imports through barrel
        files reach the declaring file.
        """
        decl = target.find_export(name)
        if decl is not None:
            return decl

        seen = _seen | {target.path}
        for stmt in target.reexports:
            if stmt.is_type_only or not stmt.is_relative:
                continue
            if stmt.is_namespace_or_default:
                if stmt.specifiers:
                    if any(s.local_name == name for s in stmt.specifiers):
                        # export * as ns from "./a"
                        return Declaration(
                            name=name,
                            kind=DeclarationKind.VARIABLE,
                            span=stmt.span or Span(0, 0),
                            is_exported=True,
                        )
                    continue
                lookup = name
            else:
                match = next(
                    (s for s in stmt.specifiers
                     if s.local_name == name and not s.is_type_only),
                    None,
                )
                if match is None:
                    continue
                lookup = match.imported_name

            path = self.resolve_module_path(target.path, stmt.module_path)
            if path is None or path in seen:
                continue
            try:
                next_file = self.load(path)
            except ImportCyclesError as e:
                logger.debug("cannot follow re-export to %s: %s", path, e)
                continue
            found = self.find_declaration(next_file, lookup, seen)
            if found is not None:
                return found
        return None

    def _resolve_statement(
        self, parsed: ParsedFile, stmt: ImportStatement,
    ) -> ResolvedImport | None:
        if not stmt.is_relative:
            return None

        target = self.resolve_module_path(parsed.path, stmt.module_path)
        if target is None:
            logger.debug("%s: ignoring unresolvable import %r", parsed.path, stmt.module_path)
            return None

        if stmt.is_type_only:
            return None

        if stmt.is_namespace_or_default or stmt.is_side_effect:
            used = [s.local_name for s in stmt.specifiers] or ["*"]
            return ResolvedImport(statement=stmt, target_path=target, used_names=used)

        specifiers = [s for s in stmt.specifiers if not s.is_type_only]
        if not specifiers:
            return None

        try:
            target_file = self.load(target)
        except ImportCyclesError as e:
            logger.warning("%s: dropping import of %s: %s", parsed.path, target, e)
            return None

        used: list[str] = []
        for spec in specifiers:
            decl = self.find_declaration(target_file, spec.imported_name)
            if decl is None:
                logger.debug(
                    "%s: %s is not an exported value of %s",
                    parsed.path, spec.imported_name, target,
                )
                continue
            if (decl.kind != DeclarationKind.CLASS
                    or stmt.is_reexport
                    or is_class_used_as_value(spec.local_name, parsed)):
                used.append(spec.local_name)
            elif self.config.warn_class_type_imports:
                logger.warning(
                    "Class used as type without `import type` declaration: %s %s",
                    parsed.path, spec.local_name,
                )

        if not used:
            return None
        return ResolvedImport(statement=stmt, target_path=target, used_names=used)


def _names_directory(module_path: str) -> bool:
    return module_path.endswith("/") or module_path.rsplit("/", 1)[-1] in (".", "..")
