"""Scan API routes — walk a directory tree into the catalog."""

from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from mediacatalog.api.deps import get_repository
from mediacatalog.config import settings
from mediacatalog.schemas.scan import FileScanRequest, FolderScanRequest, ScanResponse, ScanStatus
from mediacatalog.services.repository import CatalogRepository
from mediacatalog.services.scanner import scan_tree

logger = logging.getLogger(__name__)
router = APIRouter()


def _validate_root(root_path: str) -> None:
    if not root_path or not os.path.isdir(root_path):
        raise HTTPException(400, "Invalid root path")


@router.post("/folder", response_model=ScanResponse)
async def scan_folders(body: FolderScanRequest, repo: CatalogRepository = Depends(get_repository)):
    """Catalogue the folder structure below ``rootPath`` (no files)."""
    _validate_root(body.root_path)
    max_depth = body.max_depth if body.max_depth is not None else settings.scan_default_max_depth
    try:
        result = await scan_tree(repo, body.root_path, max_depth)
    except SQLAlchemyError as exc:
        logger.error("Folder scan failed for %s: %s", body.root_path, exc)
        raise HTTPException(500, f"Folder scan failed: {exc}")

    return ScanResponse(
        message="Folder scan completed",
        root_path=body.root_path,
        scanned_folders=result.scanned_folders,
    )


@router.post("/file", response_model=ScanResponse)
async def scan_files(body: FileScanRequest, repo: CatalogRepository = Depends(get_repository)):
    """Catalogue folders and files below ``rootPath`` with extension filters."""
    _validate_root(body.root_path)
    max_depth = body.max_depth if body.max_depth is not None else settings.scan_default_max_depth
    try:
        result = await scan_tree(
            repo,
            body.root_path,
            max_depth,
            include_files=True,
            include_extensions=body.include_extensions,
            exclude_extensions=body.exclude_extensions,
        )
    except SQLAlchemyError as exc:
        logger.error("File scan failed for %s: %s", body.root_path, exc)
        raise HTTPException(500, f"File scan failed: {exc}")

    return ScanResponse(
        message="File scan completed",
        root_path=body.root_path,
        scanned_folders=result.scanned_folders,
        scanned_files=result.scanned_files,
    )


@router.get("/status", response_model=ScanStatus)
async def scan_status(repo: CatalogRepository = Depends(get_repository)):
    """Catalogue size and the most recent scan timestamp."""
    return ScanStatus(**await repo.scan_status())
