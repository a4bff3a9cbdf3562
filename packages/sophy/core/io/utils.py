"""Utility functions for virtual paths.

Provides normalization of client paths and their resolution under an
adapter root.
"""

import posixpath
from pathlib import Path

ROOT = "/"


def normalize_path(path: str) -> str:
    """
    Normalize a client-supplied path into a virtual path.

    Backslashes are treated as separators, "." segments are dropped and ".."
    segments are resolved lexically. The result always starts with "/".

    Args:
        path: Client path, absolute or relative to the adapter root

    Returns:
        Normalized virtual path

    Raises:
        ValueError: If the path climbs above the root

    Example:
        >>> normalize_path("a/./b/../c.txt")
        '/a/c.txt'
        >>> normalize_path("")
        '/'
    """
    parts: list[str] = []
    for segment in str(path).replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not parts:
                raise ValueError(f"Path escapes adapter root: {path}")
            parts.pop()
            continue
        parts.append(segment)
    return ROOT + "/".join(parts)


def join_path(base: str, *parts: str) -> str:
    """Join virtual path segments and normalize the result."""
    return normalize_path(posixpath.join(normalize_path(base), *(p.lstrip("/") for p in parts)))


def resolve_under(root: Path, path: str) -> Path:
    """
    Resolve a virtual path to a real path under root.

    Args:
        root: Absolute adapter root
        path: Virtual path

    Returns:
        Real path inside root

    Raises:
        ValueError: If the path escapes root
    """
    virtual = normalize_path(path)
    if virtual == ROOT:
        return root
    return root.joinpath(*virtual.lstrip("/").split("/"))
