"""Dot-path helpers for concrete traversal paths and rule paths.

A concrete path names one node in a document, array indices included
(``root.senses.0.pos``). Rules are written against normalized paths, which
drop every purely numeric segment (``root.senses.pos``) so one rule matches
the same field in every array element.
"""

from __future__ import annotations

import re

ROOT_PATH = "root"
NUMERIC_SEGMENT_RE = re.compile(r"^[0-9]+$")


def escape_path_segment(segment: object) -> str:
    """Escape ``\\`` and ``.`` so a key like ``gpt-3.5`` stays one segment."""

    return str(segment).replace("\\", "\\\\").replace(".", "\\.")


def split_path(path: str | None) -> list[str]:
    """Split a dot path on unescaped ``.`` into unescaped, non-empty segments."""

    if not path:
        return []

    segments: list[str] = []
    buf: list[str] = []
    chars = iter(str(path))
    for ch in chars:
        if ch == "\\":
            buf.append(next(chars, "\\"))
        elif ch == ".":
            segments.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    segments.append("".join(buf))
    return [segment for segment in segments if segment]


def join_path(parent: str, key: object) -> str:
    """Append one child key (object field name or array index) to ``parent``."""

    escaped = escape_path_segment(key)
    return f"{parent}.{escaped}" if parent else escaped


def normalize_path(path: str | None) -> str:
    """Strip numeric array-index segments from a concrete path.

    The function is total and idempotent: normalizing an already normalized
    path returns it unchanged, and non-numeric segments keep their order.

    Args:
        path: Concrete path such as ``root.ec.word.0.trs.1.tr``.

    Returns:
        Rule-matchable path such as ``root.ec.word.trs.tr``.
    """

    segments = [seg for seg in split_path(path) if not NUMERIC_SEGMENT_RE.fullmatch(seg)]
    return ".".join(escape_path_segment(seg) for seg in segments)


def is_strict_descendant(path: str, ancestor: str) -> bool:
    """Return whether ``path`` lies strictly below ``ancestor`` (whole segments)."""

    prefix = split_path(ancestor)
    segments = split_path(path)
    return len(segments) > len(prefix) and segments[: len(prefix)] == prefix
