"""Merge folder/file result pages into one search response."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from mediacatalog.schemas.catalog import FileOut, FolderOut
from mediacatalog.schemas.search import Pagination, SearchRequest, SearchResponse
from mediacatalog.services.ancestors import AncestorExpansion, OrderedPathSet


@dataclass
class PageResult:
    """One sub-result: a page of records plus the total match count."""
    records: Sequence = field(default_factory=list)
    total: int = 0


def total_pages(total_folders: int, total_files: int, limit: int) -> int:
    # Folder and file pages share one page counter; display-only estimate
    return math.ceil((total_folders + total_files) / limit) if limit > 0 else 0


def assemble_response(
    request: SearchRequest,
    folders: PageResult,
    files: PageResult,
    expansion: AncestorExpansion | None = None,
    highlight: OrderedPathSet | None = None,
) -> SearchResponse:
    """Build the response payload.

    *expansion* is present when the ancestor resolver ran; otherwise only
    *highlight* (computed straight from the matched page) is attached.
    """
    response = SearchResponse(
        folders=[FolderOut.model_validate(f) for f in folders.records],
        files=[FileOut.model_validate(f) for f in files.records],
        total_folders=folders.total,
        total_files=files.total,
        pagination=Pagination(
            page=request.page,
            limit=request.limit,
            total_pages=total_pages(folders.total, files.total, request.limit),
        ),
    )

    if expansion is not None:
        response.expand_paths = expansion.expand.to_list()
        response.anchor_paths = expansion.anchor.to_list()
        response.show_all_from_paths = expansion.show_all_from.to_list()
        response.anchor_path = expansion.anchor.first()
        response.show_all_from_path = expansion.show_all_from.first()
        highlight = expansion.highlight

    if highlight is not None:
        response.highlight_paths = highlight.to_list()
        response.highlight_path = highlight.first()

    return response
