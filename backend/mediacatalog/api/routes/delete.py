"""Delete API routes — by path prefix, by file id, or everything."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from mediacatalog.api.deps import get_repository
from mediacatalog.schemas.manage import (
    DeletePreview,
    DeletePreviewCounts,
    DeleteRequest,
    DeleteResponse,
)
from mediacatalog.services.repository import DELETE_TYPES, CatalogRepository

logger = logging.getLogger(__name__)
router = APIRouter()


def _validate(body: DeleteRequest) -> None:
    if not body.root_path:
        raise HTTPException(400, "Root path is required")
    if body.delete_type not in DELETE_TYPES:
        raise HTTPException(400, "Invalid delete type. Use: folders, files, or both")


@router.delete("", response_model=DeleteResponse)
async def delete_by_path(body: DeleteRequest, repo: CatalogRepository = Depends(get_repository)):
    """Delete everything whose folder path starts with ``rootPath``."""
    _validate(body)
    logger.info("Starting delete operation: %s (type: %s)", body.root_path, body.delete_type)
    try:
        folders, files = await repo.delete_under(body.root_path, body.delete_type)
    except SQLAlchemyError as exc:
        logger.error("Delete operation failed: %s", exc)
        raise HTTPException(500, f"Delete operation failed: {exc}")

    return DeleteResponse(
        message="Delete operation completed",
        deleted_folders=folders,
        deleted_files=files,
        root_path=body.root_path,
        delete_type=body.delete_type,
    )


@router.post("/preview", response_model=DeletePreview)
async def preview_delete(body: DeleteRequest, repo: CatalogRepository = Depends(get_repository)):
    """Count what a prefix deletion would remove."""
    _validate(body)
    try:
        folders, files = await repo.count_under(body.root_path, body.delete_type)
    except SQLAlchemyError as exc:
        logger.error("Delete preview failed: %s", exc)
        raise HTTPException(500, f"Delete preview failed: {exc}")
    return DeletePreview(
        root_path=body.root_path,
        delete_type=body.delete_type,
        preview=DeletePreviewCounts(
            folders_to_delete=folders,
            files_to_delete=files,
            total_items=folders + files,
        ),
    )


@router.delete("/all", response_model=DeleteResponse)
async def delete_all(repo: CatalogRepository = Depends(get_repository)):
    """Clear the whole catalog."""
    try:
        folders, files = await repo.delete_all()
    except SQLAlchemyError as exc:
        logger.error("Clear all failed: %s", exc)
        raise HTTPException(500, f"Failed to clear database: {exc}")
    return DeleteResponse(
        message="All data cleared from database",
        deleted_folders=folders,
        deleted_files=files,
    )


@router.delete("/file/{file_id}", response_model=DeleteResponse)
async def delete_file(file_id: int, repo: CatalogRepository = Depends(get_repository)):
    """Delete a single file by id."""
    try:
        deleted = await repo.delete_file(file_id)
    except SQLAlchemyError as exc:
        logger.error("Error deleting file %d: %s", file_id, exc)
        raise HTTPException(500, f"Failed to delete file: {exc}")
    if not deleted:
        raise HTTPException(404, "File not found")
    return DeleteResponse(message=f"File {file_id} deleted", deleted_folders=0, deleted_files=1)
