"""Path-string helpers shared by scanning, ingest and the ancestor resolver.

Catalogued paths come from whatever machine ran the scan, so both ``\\`` and
``/`` count as separators regardless of the server's own ``os.sep``.
"""

from __future__ import annotations

SEPARATORS = ("\\", "/")

# Truncation that leaves fewer characters than this hit a drive or fs root
MIN_ANCESTOR_LENGTH = 3

MAX_CHAIN_STEPS = 300


def last_separator(path: str) -> int:
    """Index of the last path separator in *path*, or -1."""
    return max(path.rfind(sep) for sep in SEPARATORS)


def parent_of(path: str) -> str | None:
    """Truncate *path* at its last separator.

    Returns ``None`` when there is no separator or when the remainder would
    be shorter than three characters (``C:``, ``/``, empty).
    """
    idx = last_separator(path)
    if idx < 0:
        return None
    parent = path[:idx]
    if len(parent) < MIN_ANCESTOR_LENGTH:
        return None
    return parent


def leaf_name(path: str) -> str:
    """Last component of *path*; the path itself when it has no separator."""
    stripped = path.rstrip("\\/") or path
    idx = last_separator(stripped)
    return stripped[idx + 1:] if idx >= 0 else stripped


def chain_from_root(path: str) -> list[str]:
    """Ordered ancestor chain ``[topmost, ..., parent, path]``."""
    chain = [path]
    current = path
    for _ in range(MAX_CHAIN_STEPS):
        parent = parent_of(current)
        if parent is None:
            break
        chain.append(parent)
        current = parent
    chain.reverse()
    return chain


def path_depth(path: str) -> int:
    """Depth of *path* in components, used as ``level`` outside a scan."""
    parts = [part for part in path.replace("\\", "/").split("/") if part]
    return max(len(parts) - 1, 0)


def normalize_extension(value: str | None) -> str:
    """Normalize ``"MKV"``, ``".mkv"`` or ``" .Mkv "`` to ``".mkv"``."""
    if not value:
        return ""
    text = value.strip().lstrip(".").lower()
    return f".{text}" if text else ""


def extension_of(filename: str) -> str:
    """Lowercased extension of *filename* including the dot, or ``""``."""
    name = filename.strip()
    idx = name.rfind(".")
    if idx <= 0 or idx == len(name) - 1:
        return ""
    return name[idx:].lower()


def strip_trailing_separators(path: str) -> str:
    """Drop trailing ``\\``/``/`` unless that would eat a drive or fs root."""
    stripped = path.rstrip("\\/")
    if len(stripped) < MIN_ANCESTOR_LENGTH:
        return path
    return stripped
