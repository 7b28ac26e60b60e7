"""Catalog repository — the only place that talks SQL for folders/files.

Search predicates arrive as expression trees from
:mod:`mediacatalog.services.query_builder` and are compiled here into
SQLAlchemy column expressions; every user-supplied value ends up as a bound
parameter.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from sqlalchemy import ColumnElement, and_, delete, func, insert, or_, select, true
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mediacatalog.models.file import File
from mediacatalog.models.folder import Folder
from mediacatalog.schemas.catalog import FileOut, FolderOut
from mediacatalog.services.query_builder import (
    AllTokensContain,
    And,
    Contains,
    Equals,
    Or,
    Predicate,
    Range,
)
from mediacatalog.utils.paths import leaf_name, parent_of, path_depth

if TYPE_CHECKING:
    from mediacatalog.services.scanner import ScannedFolder

logger = logging.getLogger(__name__)

# Stays well below SQLite's bound-parameter limit
PATH_BATCH_SIZE = 500

# Bulk DML skips syncing objects already loaded in the session
BULK = {"synchronize_session": False}

FOLDER_COLUMNS: dict[str, Any] = {
    "name": Folder.name,
    "path": Folder.path,
    "modified_at": Folder.modified_at,
}

FILE_COLUMNS: dict[str, Any] = {
    "name": File.name,
    "path": Folder.path,
    "extension": File.extension,
    "size": File.size,
    "modified_at": File.modified_at,
}

DELETE_TYPES = ("folders", "files", "both")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _contains(column, value: str, case_sensitive: bool) -> ColumnElement[bool]:
    # instr() keeps % and _ literal and respects case, unlike SQLite LIKE;
    # unicode_lower is registered per connection in mediacatalog.database
    if case_sensitive:
        return func.instr(column, value) > 0
    return func.instr(func.unicode_lower(column), func.unicode_lower(value)) > 0


def compile_predicate(predicate: Predicate, columns: dict[str, Any]) -> ColumnElement[bool]:
    """Compile a predicate tree against a field→column mapping."""
    if isinstance(predicate, And):
        return and_(*(compile_predicate(p, columns) for p in predicate.parts))
    if isinstance(predicate, Or):
        return or_(*(compile_predicate(p, columns) for p in predicate.parts))

    column = columns[predicate.field]
    if isinstance(predicate, Equals):
        if predicate.case_sensitive:
            return column == predicate.value
        return func.unicode_lower(column) == func.unicode_lower(predicate.value)
    if isinstance(predicate, Contains):
        return _contains(column, predicate.value, predicate.case_sensitive)
    if isinstance(predicate, AllTokensContain):
        return and_(*(_contains(column, t, predicate.case_sensitive) for t in predicate.tokens))
    if isinstance(predicate, Range):
        bounds = []
        if predicate.low is not None:
            bounds.append(column >= predicate.low)
        if predicate.high is not None:
            bounds.append(column <= predicate.high)
        return and_(*bounds) if bounds else true()
    raise TypeError(f"Unknown predicate: {predicate!r}")


def _where(predicate: Predicate | None, columns: dict[str, Any]) -> ColumnElement[bool]:
    return true() if predicate is None else compile_predicate(predicate, columns)


def under_prefix(prefix: str) -> ColumnElement[bool]:
    """Folders whose path starts with *prefix* as a raw string.

    ``C:\\Media`` also matches ``C:\\Media2``; descendant-only matching is
    an open question and intentionally not applied here.
    """
    return Folder.path.startswith(prefix, autoescape=True)



def _file_out(file: File, folder_path: str | None) -> FileOut:
    out = FileOut.model_validate(file)
    out.folder_path = folder_path
    return out


def _chunks(items: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class CatalogRepository:
    """Typed async access to the folders/files tables for one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- search -------------------------------------------------------

    async def find_folders(
        self, predicate: Predicate | None, limit: int, offset: int
    ) -> list[FolderOut]:
        stmt = (
            select(Folder)
            .where(_where(predicate, FOLDER_COLUMNS))
            .order_by(Folder.path)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [FolderOut.model_validate(f) for f in result.scalars().all()]

    async def count_folders(self, predicate: Predicate | None) -> int:
        stmt = select(func.count(Folder.id)).where(_where(predicate, FOLDER_COLUMNS))
        return (await self.db.execute(stmt)).scalar_one()

    async def find_files(
        self, predicate: Predicate | None, limit: int, offset: int
    ) -> list[FileOut]:
        stmt = (
            select(File, Folder.path)
            .outerjoin(Folder, File.folder_id == Folder.id)
            .where(_where(predicate, FILE_COLUMNS))
            .order_by(Folder.path, File.name)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [_file_out(file, folder_path) for file, folder_path in result.all()]

    async def count_files(self, predicate: Predicate | None) -> int:
        stmt = (
            select(func.count(File.id))
            .select_from(File)
            .outerjoin(Folder, File.folder_id == Folder.id)
            .where(_where(predicate, FILE_COLUMNS))
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def get_folders_by_paths(self, paths: Sequence[str]) -> list[FolderOut]:
        """Batch lookup keyed by path; unknown paths are skipped. Sorted by path."""
        found: list[FolderOut] = []
        unique = list(dict.fromkeys(paths))
        for batch in _chunks(unique, PATH_BATCH_SIZE):
            result = await self.db.execute(select(Folder).where(Folder.path.in_(batch)))
            found.extend(FolderOut.model_validate(f) for f in result.scalars().all())
        found.sort(key=lambda f: f.path)
        return found

    async def list_children(self, parent_path: str) -> list[FolderOut]:
        result = await self.db.execute(
            select(Folder).where(Folder.parent_path == parent_path).order_by(Folder.name)
        )
        return [FolderOut.model_validate(f) for f in result.scalars().all()]

    async def list_extensions(self) -> list[dict[str, Any]]:
        count = func.count().label("count")
        result = await self.db.execute(
            select(File.extension, count)
            .where(File.extension.is_not(None), File.extension != "")
            .group_by(File.extension)
            .order_by(count.desc(), File.extension)
        )
        return [{"extension": ext, "count": cnt} for ext, cnt in result.all()]

    # --- single records -----------------------------------------------

    async def get_folder(self, path: str) -> Folder | None:
        result = await self.db.execute(select(Folder).where(Folder.path == path))
        return result.scalar_one_or_none()

    async def add_folder(self, path: str, name: str | None = None) -> Folder:
        """Insert a folder outside a scan; caller checks for duplicates."""
        now = utcnow_iso()
        folder = Folder(
            path=path,
            name=name or leaf_name(path),
            parent_path=parent_of(path),
            level=path_depth(path),
            created_at=now,
            modified_at=now,
            accessed_at=now,
            scanned_at=now,
        )
        self.db.add(folder)
        await self._commit()
        await self.db.refresh(folder)
        logger.info("Added folder %s", path)
        return folder

    async def add_file(
        self,
        folder_path: str,
        name: str,
        extension: str,
        size: int,
        created_at: str | None = None,
        modified_at: str | None = None,
        accessed_at: str | None = None,
    ) -> FileOut:
        """Insert a file, creating its folder first when it is not catalogued."""
        now = utcnow_iso()
        folder = await self.get_folder(folder_path)
        if folder is None:
            folder = Folder(
                path=folder_path,
                name=leaf_name(folder_path),
                parent_path=parent_of(folder_path),
                level=path_depth(folder_path),
                created_at=now,
                modified_at=now,
                accessed_at=now,
                scanned_at=now,
            )
            self.db.add(folder)
            await self.db.flush()
            logger.info("Created folder %s for added file", folder_path)

        file = File(
            folder_id=folder.id,
            name=name,
            extension=extension,
            size=size,
            created_at=created_at or now,
            modified_at=modified_at or now,
            accessed_at=accessed_at or now,
            scanned_at=now,
        )
        self.db.add(file)
        await self._commit()
        await self.db.refresh(file)
        logger.info("Added file %s to %s", name, folder_path)
        return _file_out(file, folder_path)

    # --- bulk writes ----------------------------------------------------

    async def replace_subtree(
        self, root_path: str, folders: Sequence[ScannedFolder], include_files: bool
    ) -> tuple[int, int]:
        """Replace everything catalogued under *root_path* with a scan result.

        Runs as one transaction and returns ``(folders, files)`` written.
        """
        now = utcnow_iso()
        try:
            await self._delete_under(root_path, "both")

            folder_rows = [
                {
                    "path": f.path,
                    "name": f.name,
                    "parent_path": f.parent_path,
                    "level": f.level,
                    "created_at": f.created_at,
                    "modified_at": f.modified_at,
                    "accessed_at": f.accessed_at,
                    "scanned_at": now,
                }
                for f in folders
            ]
            if folder_rows:
                stmt = sqlite_insert(Folder)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Folder.path],
                    set_={
                        col: stmt.excluded[col]
                        for col in ("name", "parent_path", "level", "created_at",
                                    "modified_at", "accessed_at", "scanned_at")
                    },
                )
                await self.db.execute(stmt, folder_rows)

            file_rows: list[dict[str, Any]] = []
            if include_files:
                ids = await self._folder_ids([f.path for f in folders])
                for scanned in folders:
                    folder_id = ids.get(scanned.path)
                    if folder_id is None:
                        logger.warning("Could not resolve folder id for %s", scanned.path)
                        continue
                    file_rows.extend(
                        {
                            "folder_id": folder_id,
                            "name": sf.name,
                            "extension": sf.extension,
                            "size": sf.size,
                            "created_at": sf.created_at,
                            "modified_at": sf.modified_at,
                            "accessed_at": sf.accessed_at,
                            "scanned_at": now,
                        }
                        for sf in scanned.files
                    )
                if file_rows:
                    await self.db.execute(insert(File), file_rows)

            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return len(folder_rows), len(file_rows)

    async def _folder_ids(self, paths: Sequence[str]) -> dict[str, int]:
        ids: dict[str, int] = {}
        for batch in _chunks(paths, PATH_BATCH_SIZE):
            result = await self.db.execute(
                select(Folder.path, Folder.id).where(Folder.path.in_(batch))
            )
            ids.update({path: folder_id for path, folder_id in result.all()})
        return ids

    async def count_under(self, prefix: str, delete_type: str) -> tuple[int, int]:
        """Folders/files a prefix deletion of *delete_type* would remove."""
        folders = files = 0
        if delete_type in ("folders", "both"):
            folders = (await self.db.execute(
                select(func.count(Folder.id)).where(under_prefix(prefix))
            )).scalar_one()
        if delete_type in ("files", "both"):
            files = (await self.db.execute(
                select(func.count(File.id)).where(
                    File.folder_id.in_(select(Folder.id).where(under_prefix(prefix)))
                )
            )).scalar_one()
        return folders, files

    async def delete_under(self, prefix: str, delete_type: str) -> tuple[int, int]:
        try:
            counts = await self._delete_under(prefix, delete_type)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        logger.info(
            "Deleted %d folders and %d files under %s (type: %s)",
            counts[0], counts[1], prefix, delete_type,
        )
        return counts

    async def _delete_under(self, prefix: str, delete_type: str) -> tuple[int, int]:
        if delete_type not in DELETE_TYPES:
            raise ValueError(f"Invalid delete type: {delete_type}")
        folders = files = 0
        if delete_type in ("files", "both"):
            result = await self.db.execute(
                delete(File).where(
                    File.folder_id.in_(select(Folder.id).where(under_prefix(prefix)))
                ),
                execution_options=BULK,
            )
            files = result.rowcount or 0
        if delete_type in ("folders", "both"):
            result = await self.db.execute(
                delete(Folder).where(under_prefix(prefix)), execution_options=BULK
            )
            folders = result.rowcount or 0
        return folders, files

    async def delete_file(self, file_id: int) -> bool:
        result = await self.db.execute(
            delete(File).where(File.id == file_id), execution_options=BULK
        )
        await self._commit()
        return bool(result.rowcount)

    async def delete_all(self) -> tuple[int, int]:
        try:
            files = (await self.db.execute(delete(File), execution_options=BULK)).rowcount or 0
            folders = (await self.db.execute(delete(Folder), execution_options=BULK)).rowcount or 0
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        logger.info("Cleared catalog: %d folders, %d files", folders, files)
        return folders, files

    async def scan_status(self) -> dict[str, Any]:
        folders = (await self.db.execute(select(func.count(Folder.id)))).scalar_one()
        files = (await self.db.execute(select(func.count(File.id)))).scalar_one()
        last_folder = (await self.db.execute(select(func.max(Folder.scanned_at)))).scalar_one()
        last_file = (await self.db.execute(select(func.max(File.scanned_at)))).scalar_one()
        stamps = [s for s in (last_folder, last_file) if s]
        return {"folders": folders, "files": files, "last_scan": max(stamps) if stamps else None}

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
