"""Test fixtures — in-memory SQLite database and FastAPI test client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mediacatalog.database import get_db, register_functions
from mediacatalog.main import create_app
from mediacatalog.models import Base, File, Folder


def _configure_test_db(dbapi_conn, _connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    register_functions(dbapi_conn)


@pytest_asyncio.fixture
async def db_session():
    """Provide an async in-memory SQLite session for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    event.listen(engine.sync_engine, "connect", _configure_test_db)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession):
    """Provide an async test client with overridden DB dependency."""
    app = create_app()

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def media_library(db_session: AsyncSession):
    """A small catalogued library on a Windows-style drive.

    C:\\Media
      Movies
        Star Wars Collection   Star Wars Episode IV.mkv (4 GB), starship.mkv
        Sci-Fi
          Space Adventures     trailer.mp4
      Music                    Report.PDF
    D:\\Backup
      Star Archive
    """
    folders = {}
    layout = [
        ("C:\\Media", "Media", None, 0, "2024-01-01T10:00:00"),
        ("C:\\Media\\Movies", "Movies", "C:\\Media", 1, "2024-02-01T10:00:00"),
        ("C:\\Media\\Movies\\Star Wars Collection", "Star Wars Collection",
         "C:\\Media\\Movies", 2, "2024-03-01T10:00:00"),
        ("C:\\Media\\Movies\\Sci-Fi", "Sci-Fi", "C:\\Media\\Movies", 2, "2024-03-05T10:00:00"),
        ("C:\\Media\\Movies\\Sci-Fi\\Space Adventures", "Space Adventures",
         "C:\\Media\\Movies\\Sci-Fi", 3, "2024-04-01T10:00:00"),
        ("C:\\Media\\Music", "Music", "C:\\Media", 1, "2024-05-01T10:00:00"),
        ("D:\\Backup", "Backup", None, 0, "2023-06-01T10:00:00"),
        ("D:\\Backup\\Star Archive", "Star Archive", "D:\\Backup", 1, "2023-07-01T10:00:00"),
    ]
    for path, name, parent, level, modified in layout:
        folder = Folder(
            path=path,
            name=name,
            parent_path=parent,
            level=level,
            created_at=modified,
            modified_at=modified,
            accessed_at=modified,
            scanned_at="2024-06-01T00:00:00",
        )
        db_session.add(folder)
        folders[path] = folder
    await db_session.flush()

    files = [
        ("C:\\Media\\Movies\\Star Wars Collection", "Star Wars Episode IV.mkv", ".mkv",
         4 * 1024 ** 3, "2024-03-02T12:00:00"),
        ("C:\\Media\\Movies\\Star Wars Collection", "starship.mkv", ".mkv",
         700 * 1024 ** 2, "2024-03-03T12:00:00"),
        ("C:\\Media\\Movies\\Sci-Fi\\Space Adventures", "trailer.mp4", ".mp4",
         50 * 1024 ** 2, "2024-04-02T12:00:00"),
        ("C:\\Media\\Music", "Report.PDF", ".pdf", 500, "2024-05-02T12:00:00"),
    ]
    for folder_path, name, ext, size, modified in files:
        db_session.add(File(
            folder_id=folders[folder_path].id,
            name=name,
            extension=ext,
            size=size,
            created_at=modified,
            modified_at=modified,
            accessed_at=modified,
            scanned_at="2024-06-01T00:00:00",
        ))
    await db_session.commit()
    return folders
