"""Tests for filesystem scanning."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from mediacatalog.models import File, Folder
from mediacatalog.services.repository import CatalogRepository
from mediacatalog.services.scanner import scan_tree, walk_tree
from mediacatalog.utils.paths import parent_of


@pytest.fixture
def library(tmp_path):
    """lib/{Movies/{a.mkv, b.MP4, notes.txt, Deep/Deeper/x.mkv}, Music/song.mp3}"""
    root = tmp_path / "lib"
    deeper = root / "Movies" / "Deep" / "Deeper"
    deeper.mkdir(parents=True)
    (root / "Music").mkdir()
    (root / "Movies" / "a.mkv").write_bytes(b"0123456789")
    (root / "Movies" / "b.MP4").write_bytes(b"mp4")
    (root / "Movies" / "notes.txt").write_text("notes")
    (deeper / "x.mkv").write_bytes(b"x")
    (root / "Music" / "song.mp3").write_bytes(b"song")
    return root


class TestWalkTree:
    def test_levels_relative_to_root(self, library):
        folders = walk_tree(str(library), max_depth=10)
        levels = {f.name: f.level for f in folders}
        assert levels == {"lib": 0, "Movies": 1, "Deep": 2, "Deeper": 3, "Music": 1}
        assert all(not f.files for f in folders)

    def test_max_depth(self, library):
        folders = walk_tree(str(library), max_depth=1)
        assert sorted(f.name for f in folders) == ["Movies", "Music", "lib"]

    def test_parent_paths(self, library):
        for folder in walk_tree(str(library), max_depth=10):
            assert folder.parent_path == parent_of(folder.path)

    def test_files_and_extension_filters(self, library):
        folders = walk_tree(str(library), 10, include_files=True, include_extensions=["mkv", ".MP4"])
        files = {sf.name: sf for f in folders for sf in f.files}
        assert sorted(files) == ["a.mkv", "b.MP4", "x.mkv"]
        assert files["b.MP4"].extension == ".mp4"
        assert files["a.mkv"].size == 10

        folders = walk_tree(str(library), 10, include_files=True, exclude_extensions=["txt"])
        assert sorted(sf.name for f in folders for sf in f.files) == ["a.mkv", "b.MP4", "song.mp3", "x.mkv"]


@pytest.mark.asyncio
async def test_folder_scan(client: AsyncClient, library):
    resp = await client.post("/api/scan/folder", json={"rootPath": str(library)})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["scannedFolders"] == 5
    assert data["scannedFiles"] == 0

    resp = await client.get("/api/scan/status")
    status = resp.json()
    assert status["folders"] == 5
    assert status["files"] == 0
    assert status["lastScan"] is not None


@pytest.mark.asyncio
async def test_file_scan_with_filters(client: AsyncClient, library):
    resp = await client.post("/api/scan/file", json={
        "rootPath": str(library), "maxDepth": 10, "excludeExtensions": [".txt"],
    })
    assert resp.status_code == 200, resp.text
    assert resp.json()["scannedFiles"] == 4

    resp = await client.get("/api/search", params={
        "query": "x.mkv", "mode": "exact", "searchType": "files", "searchIn": "name",
    })
    files = resp.json()["files"]
    assert len(files) == 1
    assert files[0]["folder_path"] == str(library / "Movies" / "Deep" / "Deeper")


@pytest.mark.asyncio
async def test_rescan_replaces_subtree(client: AsyncClient, db_session, library):
    await client.post("/api/scan/file", json={"rootPath": str(library)})
    (library / "Movies" / "notes.txt").unlink()
    resp = await client.post("/api/scan/file", json={"rootPath": str(library)})
    assert resp.json()["scannedFiles"] == 4

    status = (await client.get("/api/scan/status")).json()
    assert status["folders"] == 5
    assert status["files"] == 4

    names = (await db_session.execute(select(File.name).order_by(File.name))).scalars().all()
    assert names == ["a.mkv", "b.MP4", "song.mp3", "x.mkv"]


@pytest.mark.asyncio
async def test_scanned_rows_point_at_their_parents(client: AsyncClient, db_session, library):
    await client.post("/api/scan/folder", json={"rootPath": str(library), "maxDepth": 2})
    folders = (await db_session.execute(select(Folder))).scalars().all()
    assert len(folders) == 4
    for folder in folders:
        assert folder.parent_path == parent_of(folder.path)


@pytest.mark.asyncio
@pytest.mark.parametrize("root", ["", "/definitely/not/here"])
async def test_invalid_root(client: AsyncClient, root):
    resp = await client.post("/api/scan/folder", json={"rootPath": root})
    assert resp.status_code == 400
    resp = await client.post("/api/scan/file", json={"rootPath": root})
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", ["/api/scan/folder", "/api/scan/file"])
async def test_negative_depth_is_rejected_without_touching_rows(client: AsyncClient, library, endpoint):
    await client.post("/api/scan/file", json={"rootPath": str(library)})

    resp = await client.post(endpoint, json={"rootPath": str(library), "maxDepth": -1})
    assert resp.status_code == 422

    status = (await client.get("/api/scan/status")).json()
    assert status["folders"] == 5
    assert status["files"] == 5


@pytest.mark.asyncio
async def test_unreadable_root_keeps_catalog(db_session, library):
    repo = CatalogRepository(db_session)
    await scan_tree(repo, str(library), 10, include_files=True)

    # a walk that yields no folders must not clear the subtree
    result = await scan_tree(repo, str(library), -1, include_files=True)
    assert result.scanned_folders == 0

    status = await repo.scan_status()
    assert status["folders"] == 5
    assert status["files"] == 5
