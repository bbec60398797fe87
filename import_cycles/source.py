"""Read source files from disk."""

from __future__ import annotations

from pathlib import Path

from import_cycles.errors import SourceNotFoundError, SourceReadError
from import_cycles.models import SourceFile


def resolve_path(path: str | Path) -> Path:
    """Absolute, symlink-free form of ``path`` (relative to the cwd)."""
    return Path(path).expanduser().resolve()


def read_source(path: str | Path) -> SourceFile:
    """Read a file's bytes.

    Raises:
        SourceNotFoundError: the path does not exist or is not a file.
        SourceReadError: any other I/O failure.
    """
    resolved = resolve_path(path)
    if not resolved.is_file():
        raise SourceNotFoundError(resolved)
    try:
        data = resolved.read_bytes()
    except OSError as e:
        raise SourceReadError(resolved, str(e)) from e
    return SourceFile(path=resolved, data=data)
