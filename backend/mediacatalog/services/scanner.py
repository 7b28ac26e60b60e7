"""Filesystem scanner — walks a tree and replaces its catalog rows.

The walk itself is blocking ``os.scandir`` work and runs in a worker thread;
all database writes then happen in one transaction, and :func:`scan_tree`
returns only after that transaction has committed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone

from mediacatalog.services.repository import CatalogRepository
from mediacatalog.utils.paths import extension_of, leaf_name, normalize_extension, parent_of

logger = logging.getLogger(__name__)


@dataclass
class ScannedFile:
    name: str
    extension: str
    size: int
    created_at: str | None
    modified_at: str | None
    accessed_at: str | None


@dataclass
class ScannedFolder:
    path: str
    name: str
    parent_path: str | None
    level: int
    created_at: str | None
    modified_at: str | None
    accessed_at: str | None
    files: list[ScannedFile] = field(default_factory=list)


@dataclass
class ScanResult:
    root_path: str
    scanned_folders: int
    scanned_files: int


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _times(st: os.stat_result) -> tuple[str, str, str]:
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return _iso(created), _iso(st.st_mtime), _iso(st.st_atime)


def _extension_filter(include: list[str], exclude: list[str]):
    inc = {normalize_extension(e) for e in include if e}
    exc = {normalize_extension(e) for e in exclude if e}

    def accept(extension: str) -> bool:
        if inc and extension not in inc:
            return False
        return extension not in exc

    return accept


def walk_tree(
    root_path: str,
    max_depth: int,
    include_files: bool = False,
    include_extensions: list[str] | None = None,
    exclude_extensions: list[str] | None = None,
) -> list[ScannedFolder]:
    """Collect folders (and optionally files) below *root_path*.

    Levels are relative to the scan root (root = 0); folders deeper than
    *max_depth* are skipped. Unreadable entries are logged and skipped.
    """
    accept = _extension_filter(include_extensions or [], exclude_extensions or [])
    root = os.path.normpath(root_path)
    folders: list[ScannedFolder] = []
    stack: list[tuple[str, int]] = [(root, 0)]

    while stack:
        dir_path, level = stack.pop()
        if level > max_depth:
            continue
        try:
            st = os.stat(dir_path)
        except OSError as exc:
            logger.warning("Could not scan %s: %s", dir_path, exc)
            continue

        created, modified, accessed = _times(st)
        folder = ScannedFolder(
            path=dir_path,
            name=leaf_name(dir_path),
            parent_path=parent_of(dir_path),
            level=level,
            created_at=created,
            modified_at=modified,
            accessed_at=accessed,
        )
        folders.append(folder)

        try:
            entries = sorted(os.scandir(dir_path), key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Could not read directory %s: %s", dir_path, exc)
            continue

        subdirs: list[str] = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry.path)
                elif include_files and entry.is_file():
                    extension = extension_of(entry.name)
                    if not accept(extension):
                        continue
                    est = entry.stat()
                    created, modified, accessed = _times(est)
                    folder.files.append(ScannedFile(
                        name=entry.name,
                        extension=extension,
                        size=est.st_size,
                        created_at=created,
                        modified_at=modified,
                        accessed_at=accessed,
                    ))
            except OSError as exc:
                logger.warning("Could not stat %s: %s", entry.path, exc)

        # Reverse so the stack pops subdirectories in name order
        stack.extend((p, level + 1) for p in reversed(subdirs))

    return folders


async def scan_tree(
    repo: CatalogRepository,
    root_path: str,
    max_depth: int,
    include_files: bool = False,
    include_extensions: list[str] | None = None,
    exclude_extensions: list[str] | None = None,
) -> ScanResult:
    """Walk *root_path* and replace its catalog rows; returns after commit."""
    logger.info(
        "Starting %s scan: %s (max depth %d)",
        "file" if include_files else "folder", root_path, max_depth,
    )
    if include_files:
        logger.info(
            "Include extensions: %s | exclude extensions: %s",
            ", ".join(include_extensions or []) or "all",
            ", ".join(exclude_extensions or []) or "none",
        )

    folders = await asyncio.to_thread(
        walk_tree, root_path, max_depth, include_files, include_extensions, exclude_extensions
    )
    if not folders:
        # Root vanished or became unreadable after validation; keep existing rows
        logger.warning("Scan of %s found nothing readable, catalog left unchanged", root_path)
        return ScanResult(root_path=root_path, scanned_folders=0, scanned_files=0)
    n_folders, n_files = await repo.replace_subtree(
        os.path.normpath(root_path), folders, include_files
    )
    logger.info("Scan completed: %d folders, %d files under %s", n_folders, n_files, root_path)
    return ScanResult(root_path=root_path, scanned_folders=n_folders, scanned_files=n_files)
