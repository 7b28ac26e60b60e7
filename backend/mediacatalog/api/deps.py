"""FastAPI dependency injection — DB session & catalog repository."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediacatalog.database import get_db
from mediacatalog.services.repository import CatalogRepository
from mediacatalog.services.search_service import SearchService


async def get_repository(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    """Repository bound to the request's session."""
    return CatalogRepository(db)


async def get_search_service(
    repo: CatalogRepository = Depends(get_repository),
) -> SearchService:
    return SearchService(repo)
