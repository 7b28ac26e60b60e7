"""Folder and file record schemas, shaped like the catalog rows."""

from pydantic import BaseModel, ConfigDict


class FolderOut(BaseModel):
    """Folder row as returned by search, children and add endpoints."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    path: str
    name: str
    parent_path: str | None = None
    level: int = 0
    created_at: str | None = None
    modified_at: str | None = None
    accessed_at: str | None = None
    scanned_at: str | None = None


class FileOut(BaseModel):
    """File row joined with the owning folder's path."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    folder_id: int | None = None
    name: str
    extension: str | None = None
    size: int = 0
    created_at: str | None = None
    modified_at: str | None = None
    accessed_at: str | None = None
    scanned_at: str | None = None
    folder_path: str | None = None
