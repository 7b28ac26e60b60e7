"""Search API routes — multi-mode search, extensions, lazy tree children."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from mediacatalog.api.deps import get_repository, get_search_service
from mediacatalog.config import settings
from mediacatalog.schemas.search import (
    MAX_ANCESTOR_LEVELS,
    AncestorMode,
    ChildrenResponse,
    ExtensionCount,
    SearchIn,
    SearchMode,
    SearchRequest,
    SearchResponse,
    SearchType,
)
from mediacatalog.services.repository import CatalogRepository
from mediacatalog.services.search_service import SearchService

logger = logging.getLogger(__name__)
router = APIRouter()


def _optional_int(name: str, value: str | None) -> int | None:
    # The dashboard sends empty strings for unset filters
    if value is None or value.strip() == "":
        return None
    try:
        parsed = int(value)
    except ValueError:
        raise HTTPException(400, f"{name} must be an integer")
    if parsed < 0:
        raise HTTPException(400, f"{name} must not be negative")
    return parsed


def search_request(
    query: str = "",
    mode: SearchMode = SearchMode.FUZZY,
    case_sensitive: bool = Query(False, alias="caseSensitive"),
    search_type: SearchType = Query(SearchType.BOTH, alias="searchType"),
    search_in: SearchIn = Query(SearchIn.BOTH, alias="searchIn"),
    extension: str = "",
    size_min: str | None = Query(None, alias="sizeMin"),
    size_max: str | None = Query(None, alias="sizeMax"),
    date_from: str | None = Query(None, alias="dateFrom"),
    date_to: str | None = Query(None, alias="dateTo"),
    ancestor_levels: int = Query(0, alias="ancestorLevels", ge=0, le=MAX_ANCESTOR_LEVELS),
    ancestor_mode: AncestorMode = Query(AncestorMode.FROM_ROOT, alias="ancestorMode"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> SearchRequest:
    """Collect the camelCase query string into a :class:`SearchRequest`."""
    try:
        return SearchRequest(
            query=query,
            mode=mode,
            case_sensitive=case_sensitive,
            search_type=search_type,
            search_in=search_in,
            extension=extension,
            size_min=_optional_int("sizeMin", size_min),
            size_max=_optional_int("sizeMax", size_max),
            date_from=date_from or None,
            date_to=date_to or None,
            ancestor_levels=ancestor_levels,
            ancestor_mode=ancestor_mode,
            page=page,
            limit=min(limit or settings.search_default_limit, settings.search_max_limit),
        )
    except ValidationError as exc:
        raise HTTPException(400, str(exc))


@router.get("", response_model=SearchResponse)
async def search(
    request: SearchRequest = Depends(search_request),
    service: SearchService = Depends(get_search_service),
):
    """Search folders and/or files; optionally expand ancestor chains."""
    logger.debug("Search: %s", request.model_dump())
    return await service.search(request)


@router.get("/fts", response_model=SearchResponse)
async def search_fts(
    request: SearchRequest = Depends(search_request),
    service: SearchService = Depends(get_search_service),
):
    """Backward-compatible alias — always a fuzzy search."""
    return await service.search(request.model_copy(update={"mode": SearchMode.FUZZY}))


@router.get("/extensions", response_model=list[ExtensionCount])
async def extensions(repo: CatalogRepository = Depends(get_repository)):
    """Known file extensions with their file counts."""
    return await repo.list_extensions()


@router.get("/children/{parent_path:path}", response_model=ChildrenResponse)
async def children(parent_path: str, repo: CatalogRepository = Depends(get_repository)):
    """Direct child folders, for lazy tree expansion."""
    return ChildrenResponse(parent_path=parent_path, children=await repo.list_children(parent_path))
