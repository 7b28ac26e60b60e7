"""Statistics API routes — overview, per-folder breakdown, CSV export."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from mediacatalog.database import get_db
from mediacatalog.schemas.stats import CatalogStats, PathStats
from mediacatalog.services.stats_service import StatsService, to_csv

router = APIRouter()

EXPORT_TYPES = ("files", "folders")


def get_stats_service() -> StatsService:
    return StatsService()


@router.get("", response_model=CatalogStats)
async def catalog_stats(
    db: AsyncSession = Depends(get_db),
    stats: StatsService = Depends(get_stats_service),
):
    """Catalog overview for the dashboard."""
    return await stats.get_overview(db)


@router.get("/path", response_model=PathStats)
async def path_stats(
    path: str = "",
    db: AsyncSession = Depends(get_db),
    stats: StatsService = Depends(get_stats_service),
):
    """File/subfolder breakdown for one catalogued folder."""
    if not path:
        raise HTTPException(400, "Path parameter is required")
    result = await stats.get_path_stats(db, path)
    if result is None:
        raise HTTPException(404, "Folder not found")
    return result


@router.get("/export")
async def export(
    type: str = "files",
    format: str = "csv",
    db: AsyncSession = Depends(get_db),
    stats: StatsService = Depends(get_stats_service),
):
    """Download the folders or files table as CSV."""
    if format != "csv":
        raise HTTPException(400, "Only CSV format is currently supported")
    if type not in EXPORT_TYPES:
        raise HTTPException(400, 'Invalid type. Use "files" or "folders"')

    columns, rows = await stats.export_rows(db, type)
    if not rows:
        raise HTTPException(404, "No data to export")

    filename = f"{type}.csv"
    return Response(
        content=to_csv(columns, rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
