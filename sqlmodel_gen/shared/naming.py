"""Naming utilities for code generation."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

GO_KEYWORDS: frozenset[str] = frozenset({
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
})

# Prepended when a normalized identifier would not start with an uppercase letter
EXPORT_PREFIX = "E"

_WORD_RE = re.compile(r"[A-Za-z0-9]+")
_NON_WORD_RE = re.compile(r"\W", re.ASCII)


def to_exported_identifier(value: str, force_cases: Iterable[str] = ()) -> str:
    """Convert a table or column name to an exported Go identifier.

    Every run of ASCII letters and digits becomes a word with its first
    character upper-cased; any other character only separates words.
    Words matching one of ``force_cases`` (ignoring case) take that exact
    spelling.

    Examples:
        >>> to_exported_identifier("user_id", ["ID"])
        'UserID'
        >>> to_exported_identifier("html_content", ["HTML"])
        'HTMLContent'
        >>> to_exported_identifier("2fa_token")
        'E2faToken'
    """
    return _to_exported_identifier(value, tuple(force_cases))


@lru_cache(maxsize=1024)
def _to_exported_identifier(value: str, force_cases: tuple[str, ...]) -> str:
    forced = {word.lower(): word for word in reversed(force_cases)}
    words = []
    for word in _WORD_RE.findall(value):
        replacement = forced.get(word.lower())
        words.append(replacement if replacement is not None else word[0].upper() + word[1:])

    result = "".join(words)
    if not result or not ("A" <= result[0] <= "Z"):
        result = EXPORT_PREFIX + result
    return result


@lru_cache(maxsize=256)
def to_package_name(value: str) -> str:
    """Sanitize a database name for use as a Go package clause."""
    result = _NON_WORD_RE.sub("_", value)
    if not result or result[0].isdigit():
        result = "_" + result
    if result in GO_KEYWORDS:
        result = result + "_"
    return result


def split_list(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma-separated option value, dropping blank entries."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(item.strip() for item in (str(i) for i in items) if item.strip())
