"""Exceptions raised while reading and parsing source files."""

from __future__ import annotations

from pathlib import Path


class ImportCyclesError(Exception):
    """Base class for analysis errors."""


class SourceNotFoundError(ImportCyclesError):
    def __init__(self, path: Path):
        super().__init__(f"File not found: {path}")
        self.path = path


class SourceReadError(ImportCyclesError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path


class SourceParseError(ImportCyclesError):
    def __init__(self, path: Path, line: int | None = None):
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Syntax error in {path}{where}")
        self.path = path
        self.line = line
