"""Add API routes — catalogue single files and folders by hand."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from mediacatalog.api.deps import get_repository
from mediacatalog.schemas.catalog import FolderOut
from mediacatalog.schemas.manage import (
    AddFileRequest,
    AddFileResponse,
    AddFolderRequest,
    AddFolderResponse,
)
from mediacatalog.services.repository import CatalogRepository
from mediacatalog.utils.paths import extension_of, normalize_extension, strip_trailing_separators

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/file", response_model=AddFileResponse)
async def add_file(body: AddFileRequest, repo: CatalogRepository = Depends(get_repository)):
    """Add a file under folder ``path``; the folder is created if missing."""
    name = body.name.strip()
    folder_path = strip_trailing_separators(body.path.strip())
    if not name or not folder_path:
        raise HTTPException(400, "Missing required fields: both name and path are required")
    if body.size < 0:
        raise HTTPException(400, "size must not be negative")

    try:
        file = await repo.add_file(
            folder_path,
            name=name,
            extension=normalize_extension(body.extension) or extension_of(name),
            size=body.size,
            created_at=body.created_at,
            modified_at=body.modified_at,
            accessed_at=body.accessed_at,
        )
    except SQLAlchemyError as exc:
        logger.error("Error inserting file %s: %s", name, exc)
        raise HTTPException(500, f"Failed to add file: {exc}")

    return AddFileResponse(
        message=f'File "{name}" added successfully',
        file_id=file.id,
        file=file,
    )


@router.post("/folder", response_model=AddFolderResponse)
async def add_folder(body: AddFolderRequest, repo: CatalogRepository = Depends(get_repository)):
    """Add a single folder; 409 when the path is already catalogued."""
    path = strip_trailing_separators(body.path.strip())
    if not path:
        raise HTTPException(400, "Missing required fields: path is required")

    if await repo.get_folder(path) is not None:
        raise HTTPException(409, f'Folder "{path}" is already in database')

    try:
        folder = await repo.add_folder(path, name=(body.name or "").strip() or None)
    except SQLAlchemyError as exc:
        logger.error("Error inserting folder %s: %s", path, exc)
        raise HTTPException(500, f"Failed to add folder: {exc}")

    return AddFolderResponse(
        message=f'Folder "{folder.name}" added successfully',
        folder_id=folder.id,
        folder=FolderOut.model_validate(folder),
    )
