"""
Expression syntax for mapping values.

A mapping leaf is one of four syntactic forms, tried in this order:

    $_a.b[2].c            → PathRef      (field lookup in the record)
    $name(arg, arg, ...)  → Call         (built-in function; args are expressions)
    "text" / 'text'       → Literal      (quotes removed)
    anything else         → RawLiteral   (trimmed text, returned verbatim)

The raw-literal fallback means a mistyped prefix (``$name.title``) yields the
literal string instead of an error. Mappings rely on it for bare constants
such as ``layout: post``.

Parsed trees are immutable and cached per expression string.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union

from content_bridge.utils.helpers import MISSING

_INDEX_RE = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True, slots=True)
class PathRef:
    path: str

    @property
    def segments(self) -> tuple[str, ...]:
        return path_segments(self.path)


@dataclass(frozen=True, slots=True)
class Call:
    name: str
    args: tuple["Node", ...]


@dataclass(frozen=True, slots=True)
class Literal:
    """A quoted string literal."""

    value: str


@dataclass(frozen=True, slots=True)
class RawLiteral:
    """Unquoted text that matched no other form."""

    value: str


Node = Union[PathRef, Call, Literal, RawLiteral]


@lru_cache(maxsize=4096)
def parse_expression(text: str) -> Node:
    """Parse one expression string into a node tree."""
    trimmed = text.strip()

    if trimmed.startswith("$_"):
        return PathRef(trimmed[2:])

    if trimmed.startswith("$") and "(" in trimmed and trimmed.endswith(")"):
        open_at = trimmed.index("(")
        name = trimmed[1:open_at].strip()
        inner = trimmed[open_at + 1:-1]
        return Call(name, tuple(parse_expression(arg) for arg in split_args(inner)))

    if (trimmed.startswith('"') and trimmed.endswith('"')) or (
        trimmed.startswith("'") and trimmed.endswith("'")
    ):
        return Literal(trimmed[1:-1])

    return RawLiteral(trimmed)


def split_args(text: str) -> list[str]:
    """
    Split a function argument list on top-level commas.

    Commas inside nested parentheses or inside quoted strings do not split.
    Each argument is returned trimmed.
    """
    args: list[str] = []
    current: list[str] = []
    quote = ""
    depth = 0

    for char in text:
        if quote:
            if char == quote:
                quote = ""
            current.append(char)
            continue

        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif char in ("'", '"'):
            quote = char
        elif char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue

        current.append(char)

    tail = "".join(current).strip()
    if tail:
        args.append(tail)

    return args


@lru_cache(maxsize=4096)
def path_segments(path: str) -> tuple[str, ...]:
    """``a.b[2].c`` → ``("a", "b", "2", "c")``."""
    return tuple(part for part in _INDEX_RE.sub(r".\1", path).split(".") if part)


def get_path(source: Any, path: str | tuple[str, ...]) -> Any:
    """
    Walk ``source`` along a dotted path.

    Returns MISSING as soon as an intermediate value is null or absent;
    never raises for unknown keys or out-of-range indices.
    """
    segments = path_segments(path) if isinstance(path, str) else path
    if not segments:
        return MISSING

    current = source
    for key in segments:
        if current is None or current is MISSING:
            return MISSING
        current = _child(current, key)

    return current


def _child(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key, MISSING)
    if isinstance(value, (list, str)):
        if key == "length":
            return len(value)
        if key.isdigit():
            index = int(key)
            return value[index] if index < len(value) else MISSING
    return MISSING
