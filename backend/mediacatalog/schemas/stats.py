"""Statistics schemas."""

from typing import Any

from mediacatalog.schemas.base import CamelModel
from mediacatalog.schemas.catalog import FolderOut


class StatsSummary(CamelModel):
    total_folders: int
    total_files: int
    total_size: int
    average_file_size: float
    last_folder_scan: str | None = None
    last_file_scan: str | None = None


class CatalogStats(CamelModel):
    """Overview for the dashboard; breakdown rows keep their column names."""
    summary: StatsSummary
    file_types: list[dict[str, Any]] = []
    folder_depths: list[dict[str, Any]] = []
    size_distribution: list[dict[str, Any]] = []
    largest_files: list[dict[str, Any]] = []
    busiest_folders: list[dict[str, Any]] = []
    recent_activity: list[dict[str, Any]] = []


class PathStats(CamelModel):
    folder: FolderOut
    files: dict[str, Any]
    file_types: list[dict[str, Any]] = []
    subfolders: dict[str, int]
