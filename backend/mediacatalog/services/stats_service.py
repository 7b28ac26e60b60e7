"""Catalog statistics, per-folder breakdowns and CSV export."""

from __future__ import annotations

import csv
import io
import logging
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mediacatalog.models.file import File
from mediacatalog.models.folder import Folder
from mediacatalog.schemas.catalog import FolderOut

logger = logging.getLogger(__name__)

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

SIZE_BUCKETS = ("Under 1KB", "1KB - 1MB", "1MB - 100MB", "100MB - 1GB", "Over 1GB")

FOLDER_EXPORT_COLUMNS = (
    "path", "name", "level", "created_at", "modified_at", "accessed_at", "scanned_at",
)
FILE_EXPORT_COLUMNS = (
    "folder_path", "name", "extension", "size",
    "created_at", "modified_at", "accessed_at", "scanned_at",
)


class StatsService:
    """Aggregate queries over the catalog.

    Individual breakdowns degrade to empty lists when their query fails;
    the basic counts do not.
    """

    async def get_overview(self, db: AsyncSession) -> dict[str, Any]:
        total_folders = (await db.execute(select(func.count(Folder.id)))).scalar_one()
        total_files = (await db.execute(select(func.count(File.id)))).scalar_one()
        total_size = (await db.execute(select(func.sum(File.size)))).scalar_one() or 0
        last_folder_scan = (await db.execute(select(func.max(Folder.scanned_at)))).scalar_one()
        last_file_scan = (await db.execute(select(func.max(File.scanned_at)))).scalar_one()

        return {
            "summary": {
                "total_folders": total_folders,
                "total_files": total_files,
                "total_size": total_size,
                "average_file_size": total_size / total_files if total_files else 0,
                "last_folder_scan": last_folder_scan,
                "last_file_scan": last_file_scan,
            },
            "file_types": await self._safe("file types", self._file_types(db)),
            "folder_depths": await self._safe("folder depths", self._folder_depths(db)),
            "size_distribution": await self._safe("size distribution", self._size_distribution(db)),
            "largest_files": await self._safe("largest files", self._largest_files(db)),
            "busiest_folders": await self._safe("busiest folders", self._busiest_folders(db)),
            "recent_activity": await self._safe("recent activity", self._recent_activity(db)),
        }

    async def _safe(self, label: str, query) -> list[dict[str, Any]]:
        try:
            return await query
        except SQLAlchemyError as exc:
            logger.warning("Stats %s error: %s", label, exc)
            return []

    async def _file_types(self, db: AsyncSession) -> list[dict[str, Any]]:
        count = func.count().label("count")
        result = await db.execute(
            select(
                File.extension,
                count,
                func.sum(File.size).label("total_size"),
                func.avg(File.size).label("avg_size"),
            )
            .where(File.extension.is_not(None), File.extension != "")
            .group_by(File.extension)
            .order_by(count.desc())
            .limit(20)
        )
        return [dict(row._mapping) for row in result.all()]

    async def _folder_depths(self, db: AsyncSession) -> list[dict[str, Any]]:
        result = await db.execute(
            select(Folder.level, func.count().label("count"))
            .group_by(Folder.level)
            .order_by(Folder.level)
        )
        return [dict(row._mapping) for row in result.all()]

    async def _size_distribution(self, db: AsyncSession) -> list[dict[str, Any]]:
        bucket = case(
            (File.size < KB, SIZE_BUCKETS[0]),
            (File.size < MB, SIZE_BUCKETS[1]),
            (File.size < 100 * MB, SIZE_BUCKETS[2]),
            (File.size < GB, SIZE_BUCKETS[3]),
            else_=SIZE_BUCKETS[4],
        ).label("size_range")
        result = await db.execute(
            select(bucket, func.count().label("count"), func.sum(File.size).label("total_size"))
            .group_by(bucket)
        )
        rows = [dict(row._mapping) for row in result.all()]
        rows.sort(key=lambda r: SIZE_BUCKETS.index(r["size_range"]))
        return rows

    async def _largest_files(self, db: AsyncSession) -> list[dict[str, Any]]:
        result = await db.execute(
            select(File.name, File.extension, File.size, Folder.path.label("folder_path"))
            .outerjoin(Folder, File.folder_id == Folder.id)
            .order_by(File.size.desc())
            .limit(10)
        )
        return [dict(row._mapping) for row in result.all()]

    async def _busiest_folders(self, db: AsyncSession) -> list[dict[str, Any]]:
        file_count = func.count(File.id).label("file_count")
        result = await db.execute(
            select(Folder.path, Folder.name, file_count, func.sum(File.size).label("total_size"))
            .join(File, File.folder_id == Folder.id)
            .group_by(Folder.id, Folder.path, Folder.name)
            .order_by(file_count.desc())
            .limit(10)
        )
        return [dict(row._mapping) for row in result.all()]

    async def _recent_activity(self, db: AsyncSession) -> list[dict[str, Any]]:
        day = func.date(File.modified_at).label("date")
        result = await db.execute(
            select(day, func.count().label("files_modified"))
            .where(
                File.modified_at.is_not(None),
                func.date(File.modified_at) >= func.date("now", "-30 days"),
            )
            .group_by(day)
            .order_by(day.desc())
            .limit(30)
        )
        return [dict(row._mapping) for row in result.all()]

    async def get_path_stats(self, db: AsyncSession, path: str) -> dict[str, Any] | None:
        """Breakdown for one folder; ``None`` when the folder is not catalogued."""
        folder = (await db.execute(select(Folder).where(Folder.path == path))).scalar_one_or_none()
        if folder is None:
            return None

        row = (await db.execute(
            select(
                func.count(File.id).label("file_count"),
                func.sum(File.size).label("total_size"),
                func.avg(File.size).label("avg_size"),
                func.min(File.size).label("min_size"),
                func.max(File.size).label("max_size"),
            ).where(File.folder_id == folder.id)
        )).one()

        count = func.count().label("count")
        types = await self._safe("path file types", self._query_rows(
            db,
            select(File.extension, count, func.sum(File.size).label("total_size"))
            .where(File.folder_id == folder.id, File.extension.is_not(None), File.extension != "")
            .group_by(File.extension)
            .order_by(count.desc()),
        ))
        subfolders = (await db.execute(
            select(func.count(Folder.id)).where(Folder.parent_path == path)
        )).scalar_one()

        return {
            "folder": FolderOut.model_validate(folder),
            "files": dict(row._mapping),
            "file_types": types,
            "subfolders": {"subfolder_count": subfolders},
        }

    async def _query_rows(self, db: AsyncSession, stmt) -> list[dict[str, Any]]:
        result = await db.execute(stmt)
        return [dict(row._mapping) for row in result.all()]

    async def export_rows(self, db: AsyncSession, kind: str) -> tuple[tuple[str, ...], list[dict[str, Any]]]:
        """Columns and rows for a ``folders`` or ``files`` export."""
        if kind == "folders":
            stmt = select(*(getattr(Folder, c) for c in FOLDER_EXPORT_COLUMNS)).order_by(Folder.path)
            columns = FOLDER_EXPORT_COLUMNS
        elif kind == "files":
            stmt = (
                select(
                    Folder.path.label("folder_path"),
                    *(getattr(File, c) for c in FILE_EXPORT_COLUMNS[1:]),
                )
                .outerjoin(Folder, File.folder_id == Folder.id)
                .order_by(Folder.path, File.name)
            )
            columns = FILE_EXPORT_COLUMNS
        else:
            raise ValueError(f"Invalid export type: {kind}")
        return columns, await self._query_rows(db, stmt)


def to_csv(columns: tuple[str, ...], rows: list[dict[str, Any]]) -> str:
    """Render rows as CSV prefixed with a UTF-8 BOM (Excel needs it)."""
    buf = io.StringIO()
    buf.write("\ufeff")
    writer = csv.DictWriter(buf, fieldnames=columns, lineterminator="\n", extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
    return buf.getvalue()
