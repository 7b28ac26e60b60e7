"""Search orchestration — predicates, lookups, ancestor expansion, assembly."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from mediacatalog.schemas.catalog import FileOut, FolderOut
from mediacatalog.schemas.search import SearchRequest, SearchResponse
from mediacatalog.services.ancestors import highlight_matches, resolve_ancestors
from mediacatalog.services.assembler import PageResult, assemble_response
from mediacatalog.services.query_builder import (
    Predicate,
    build_file_predicate,
    build_folder_predicate,
    evaluate,
    name_predicate,
)

logger = logging.getLogger(__name__)


class SearchRepository(Protocol):
    """Storage operations the search needs; implemented by CatalogRepository."""

    async def find_folders(self, predicate: Predicate | None, limit: int, offset: int) -> list[FolderOut]: ...

    async def count_folders(self, predicate: Predicate | None) -> int: ...

    async def find_files(self, predicate: Predicate | None, limit: int, offset: int) -> list[FileOut]: ...

    async def count_files(self, predicate: Predicate | None) -> int: ...

    async def get_folders_by_paths(self, paths: Sequence[str]) -> list[FolderOut]: ...


class SearchService:
    """Runs one search request against a repository."""

    def __init__(self, repo: SearchRepository):
        self.repo = repo

    async def search(self, request: SearchRequest) -> SearchResponse:
        folders = PageResult()
        files = PageResult()

        if request.includes_folders:
            folders = await self._folder_page(request)
        if request.includes_files:
            files = await self._file_page(request)

        if not request.includes_folders:
            return assemble_response(request, folders, files)

        name_pred = name_predicate(request)

        def name_matches(name: str) -> bool:
            # Empty query: nothing to highlight
            return name_pred is not None and evaluate(name_pred, {"name": name})

        if request.ancestor_levels == 0:
            highlight = highlight_matches(folders.records, name_matches)
            return assemble_response(request, folders, files, highlight=highlight)

        expansion = resolve_ancestors(
            folders.records, request.ancestor_levels, request.ancestor_mode, name_matches
        )
        try:
            chain_records = await self.repo.get_folders_by_paths(expansion.required_paths())
        except SQLAlchemyError as exc:
            logger.warning("Ancestor lookup failed, returning unexpanded page: %s", exc)
        else:
            folders = PageResult(records=chain_records, total=folders.total)

        return assemble_response(request, folders, files, expansion=expansion)

    async def _folder_page(self, request: SearchRequest) -> PageResult:
        predicate = build_folder_predicate(request)
        try:
            records = await self.repo.find_folders(predicate, request.limit, request.offset)
        except SQLAlchemyError as exc:
            logger.warning("Folder search error: %s", exc)
            return PageResult()
        try:
            total = await self.repo.count_folders(predicate)
        except SQLAlchemyError as exc:
            logger.warning("Folder count error: %s", exc)
            total = 0
        return PageResult(records=records, total=total)

    async def _file_page(self, request: SearchRequest) -> PageResult:
        predicate = build_file_predicate(request)
        try:
            records = await self.repo.find_files(predicate, request.limit, request.offset)
        except SQLAlchemyError as exc:
            logger.warning("File search error: %s", exc)
            return PageResult()
        try:
            total = await self.repo.count_files(predicate)
        except SQLAlchemyError as exc:
            logger.warning("File count error: %s", exc)
            total = 0
        return PageResult(records=records, total=total)
