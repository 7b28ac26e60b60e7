"""Scan request/response schemas."""

from pydantic import Field

from mediacatalog.schemas.base import CamelModel


class FolderScanRequest(CamelModel):
    root_path: str = ""
    max_depth: int | None = Field(default=None, ge=0)


class FileScanRequest(FolderScanRequest):
    include_extensions: list[str] = []
    exclude_extensions: list[str] = []


class ScanResponse(CamelModel):
    success: bool = True
    message: str
    root_path: str
    scanned_folders: int
    scanned_files: int = 0


class ScanStatus(CamelModel):
    folders: int
    files: int
    last_scan: str | None = None
