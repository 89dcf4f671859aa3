"""Helpers for error paths.

Paths are tuples of keys and integer indices. The string form joins keys with
dots and writes indices in brackets: ``("users", 0, "email")`` is
``"users[0].email"``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from .results import UNDEFINED, PathSegment

_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def path_to_string(path: Sequence[PathSegment]) -> str:
    """Render a path tuple as ``a[0].b``."""
    parts: list[str] = []
    for segment in path:
        if isinstance(segment, int) and not isinstance(segment, bool):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(str(segment))
    return "".join(parts)


def string_to_path(text: str) -> tuple[PathSegment, ...]:
    """Parse ``a[0].b`` (or ``a.0.b``) back into ``("a", 0, "b")``.

    Bare all-digit dotted segments are read as indices so that references
    written as ``items.0.name`` resolve the same way as ``items[0].name``.
    """
    path: list[PathSegment] = []
    for key, index in _SEGMENT_RE.findall(text):
        if index:
            path.append(int(index))
        elif key.isdecimal():
            path.append(int(key))
        else:
            path.append(key)
    return tuple(path)


def get_by_path(obj: Any, path: Sequence[PathSegment] | str) -> Any:
    """Walk ``obj`` along ``path``; ``UNDEFINED`` when any step is missing."""
    if isinstance(path, str):
        path = string_to_path(path)

    current = obj
    for segment in path:
        if isinstance(current, Mapping):
            if segment in current:
                current = current[segment]
            elif str(segment) in current:
                current = current[str(segment)]
            else:
                return UNDEFINED
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not isinstance(segment, int) or not -len(current) <= segment < len(current):
                return UNDEFINED
            current = current[segment]
        elif current is not None and current is not UNDEFINED and isinstance(segment, str):
            current = getattr(current, segment, UNDEFINED)
        else:
            return UNDEFINED
    return current
