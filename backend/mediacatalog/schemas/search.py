"""Search request/response schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from mediacatalog.schemas.base import CamelModel
from mediacatalog.schemas.catalog import FileOut, FolderOut

MAX_ANCESTOR_LEVELS = 20


class SearchMode(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    WORD_BASED = "word-based"
    # No REGEXP in stock SQLite; treated as fuzzy substring search
    REGEX = "regex"


class SearchType(str, Enum):
    FOLDERS = "folders"
    FILES = "files"
    BOTH = "both"


class SearchIn(str, Enum):
    NAME = "name"
    PATH = "path"
    BOTH = "both"


class AncestorMode(str, Enum):
    FROM_ROOT = "from-root"
    FROM_MATCH = "from-match"


class SearchRequest(BaseModel):
    """Normalized search parameters."""
    query: str = ""
    mode: SearchMode = SearchMode.FUZZY
    case_sensitive: bool = False
    search_type: SearchType = SearchType.BOTH
    search_in: SearchIn = SearchIn.BOTH
    extension: str = ""
    size_min: int | None = Field(default=None, ge=0)
    size_max: int | None = Field(default=None, ge=0)
    date_from: str | None = None
    date_to: str | None = None
    ancestor_levels: int = Field(default=0, ge=0, le=MAX_ANCESTOR_LEVELS)
    ancestor_mode: AncestorMode = AncestorMode.FROM_ROOT
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=100, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def includes_folders(self) -> bool:
        return self.search_type in (SearchType.FOLDERS, SearchType.BOTH)

    @property
    def includes_files(self) -> bool:
        return self.search_type in (SearchType.FILES, SearchType.BOTH)


class Pagination(CamelModel):
    page: int
    limit: int
    total_pages: int


class SearchResponse(CamelModel):
    """Merged folder/file result page plus tree-expansion metadata."""
    folders: list[FolderOut] = []
    files: list[FileOut] = []
    total_folders: int = 0
    total_files: int = 0
    pagination: Pagination
    expand_paths: list[str] | None = None
    anchor_paths: list[str] | None = None
    show_all_from_paths: list[str] | None = None
    highlight_paths: list[str] | None = None
    # Single-value mirrors for older clients
    anchor_path: str | None = None
    highlight_path: str | None = None
    show_all_from_path: str | None = None


class ExtensionCount(BaseModel):
    extension: str
    count: int


class ChildrenResponse(CamelModel):
    success: bool = True
    parent_path: str
    children: list[FolderOut]
