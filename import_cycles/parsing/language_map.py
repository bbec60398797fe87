"""Shared extension-to-grammar mapping for the parser and the resolver."""

from __future__ import annotations

# Maps file extension -> tree-sitter grammar name
EXT_TO_GRAMMAR: dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}


def grammar_for(path_suffix: str) -> str | None:
    return EXT_TO_GRAMMAR.get(path_suffix)
