"""Parser registry."""

from __future__ import annotations

from import_cycles.models import ParsedFile, SourceFile
from import_cycles.parsing.language_map import EXT_TO_GRAMMAR
from import_cycles.parsing.typescript_parser import TypeScriptParser

_parser = TypeScriptParser()


def parse_source(source: SourceFile) -> ParsedFile:
    """Parse a source file with the shared, thread-aware parser."""
    return _parser.parse(source)


__all__ = [
    "EXT_TO_GRAMMAR",
    "TypeScriptParser",
    "parse_source",
]
