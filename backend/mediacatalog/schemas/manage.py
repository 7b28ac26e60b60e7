"""Add/delete request and response schemas."""

from pydantic import BaseModel

from mediacatalog.schemas.base import CamelModel
from mediacatalog.schemas.catalog import FileOut, FolderOut


class AddFileRequest(BaseModel):
    """``path`` is the folder that contains the file."""
    name: str = ""
    path: str = ""
    extension: str = ""
    size: int = 0
    created_at: str | None = None
    modified_at: str | None = None
    accessed_at: str | None = None


class AddFolderRequest(BaseModel):
    path: str = ""
    name: str | None = None


class AddFileResponse(CamelModel):
    success: bool = True
    message: str
    file_id: int
    file: FileOut


class AddFolderResponse(CamelModel):
    success: bool = True
    message: str
    folder_id: int
    folder: FolderOut


class DeleteRequest(CamelModel):
    root_path: str = ""
    delete_type: str = "both"


class DeleteResponse(CamelModel):
    success: bool = True
    message: str
    deleted_folders: int
    deleted_files: int
    root_path: str | None = None
    delete_type: str | None = None


class DeletePreviewCounts(CamelModel):
    folders_to_delete: int
    files_to_delete: int
    total_items: int


class DeletePreview(CamelModel):
    root_path: str
    delete_type: str
    preview: DeletePreviewCounts
