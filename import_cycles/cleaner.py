"""Comment stripping and identifier matching over source slices."""

from __future__ import annotations

import functools
import re

_RETURN_RE = re.compile(r"\breturn\b([^;\n]*)")
# A trailing `as Type` / `satisfies Type` assertion is erased with the types.
_TYPE_ASSERTION_RE = re.compile(
    r"\b(?:as|satisfies)\s+[A-Za-z_$][\w$.]*(?:<[^;=()]*>)?(?:\[\])*"
)


def strip_comments(code: str) -> str:
    """Remove ``//`` and ``/* */`` comments, aware of string literals.

    Newlines inside block comments are kept so line-based patterns still
    see statement boundaries.
    """
    out: list[str] = []
    in_single_quote = False
    in_double_quote = False
    in_template = False
    in_line_comment = False
    in_block_comment = False
    length = len(code)

    pos = 0
    while pos < length:
        ch = code[pos]
        next_ch = code[pos + 1] if pos + 1 < length else ""

        if in_line_comment:
            if ch == "\n":
                in_line_comment = False
                out.append(ch)
        elif in_block_comment:
            if ch == "*" and next_ch == "/":
                in_block_comment = False
                pos += 1
            elif ch == "\n":
                out.append(ch)
        elif in_single_quote or in_double_quote or in_template:
            out.append(ch)
            if ch == "\\" and next_ch:
                out.append(next_ch)
                pos += 1  # skip escaped char
            elif ch == "'" and in_single_quote:
                in_single_quote = False
            elif ch == '"' and in_double_quote:
                in_double_quote = False
            elif ch == "`" and in_template:
                in_template = False
        else:
            if ch == "/" and next_ch == "/":
                in_line_comment = True
                pos += 1
            elif ch == "/" and next_ch == "*":
                in_block_comment = True
                pos += 1
            else:
                if ch == "'":
                    in_single_quote = True
                elif ch == '"':
                    in_double_quote = True
                elif ch == "`":
                    in_template = True
                out.append(ch)

        pos += 1

    return "".join(out)


@functools.lru_cache(maxsize=512)
def name_pattern(name: str) -> re.Pattern[str]:
    """Whole-identifier pattern for ``name`` (``$`` counts as a word char)."""
    return re.compile(rf"(?<![\w$]){re.escape(name)}(?![\w$])")


@functools.lru_cache(maxsize=512)
def member_pattern(name: str) -> re.Pattern[str]:
    """Pattern for ``this.<name>`` accesses."""
    return re.compile(rf"\bthis\s*\.\s*{re.escape(name)}(?![\w$])")


def count_name(code: str, name: str) -> int:
    return len(name_pattern(name).findall(code))


def mentions(code: str, name: str) -> bool:
    return name_pattern(name).search(code) is not None


def strip_type_assertions(code: str) -> str:
    return _TYPE_ASSERTION_RE.sub(" ", code)


def return_expressions(code: str) -> list[str]:
    """The text following each ``return`` up to ``;`` or end of line."""
    return [m.group(1) for m in _RETURN_RE.finditer(code)]
