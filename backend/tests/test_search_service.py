"""Tests for search orchestration against an in-memory repository."""

import pytest
from sqlalchemy.exc import OperationalError

from mediacatalog.schemas.catalog import FileOut, FolderOut
from mediacatalog.schemas.search import (
    AncestorMode,
    SearchIn,
    SearchRequest,
    SearchType,
)
from mediacatalog.services.query_builder import evaluate
from mediacatalog.services.search_service import SearchService
from mediacatalog.utils.paths import leaf_name, parent_of, path_depth


def _folder(id_, path):
    return FolderOut(
        id=id_, path=path, name=leaf_name(path), parent_path=parent_of(path), level=path_depth(path),
    )


FOLDERS = [
    _folder(1, "C:\\Media"),
    _folder(2, "C:\\Media\\Movies"),
    _folder(3, "C:\\Media\\Movies\\Star Wars Collection"),
    _folder(4, "C:\\Media\\Star Trek"),
    _folder(5, "C:\\Media\\Star Trek\\Season 1"),
]

FILES = [
    FileOut(id=1, folder_id=3, name="Star Wars Episode IV.mkv", extension=".mkv", size=4000,
            folder_path="C:\\Media\\Movies\\Star Wars Collection"),
    FileOut(id=2, folder_id=5, name="pilot.mkv", extension=".mkv", size=300,
            folder_path="C:\\Media\\Star Trek\\Season 1"),
]


class FakeRepository:
    """Evaluates predicates in-process; named operations can be made to fail."""

    def __init__(self, folders=FOLDERS, files=FILES, fail=()):
        self.folders = list(folders)
        self.files = list(files)
        self.fail = set(fail)
        self.path_lookups = []

    def _check(self, operation):
        if operation in self.fail:
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    def _matching_folders(self, predicate):
        return [
            f for f in self.folders
            if evaluate(predicate, {"name": f.name, "path": f.path, "modified_at": f.modified_at})
        ]

    def _matching_files(self, predicate):
        return [
            f for f in self.files
            if evaluate(predicate, {
                "name": f.name, "path": f.folder_path, "extension": f.extension,
                "size": f.size, "modified_at": f.modified_at,
            })
        ]

    async def find_folders(self, predicate, limit, offset):
        self._check("find_folders")
        return self._matching_folders(predicate)[offset:offset + limit]

    async def count_folders(self, predicate):
        self._check("count_folders")
        return len(self._matching_folders(predicate))

    async def find_files(self, predicate, limit, offset):
        self._check("find_files")
        return self._matching_files(predicate)[offset:offset + limit]

    async def count_files(self, predicate):
        self._check("count_files")
        return len(self._matching_files(predicate))

    async def get_folders_by_paths(self, paths):
        self._check("get_folders_by_paths")
        self.path_lookups.append(list(paths))
        wanted = set(paths)
        return sorted((f for f in self.folders if f.path in wanted), key=lambda f: f.path)


@pytest.mark.asyncio
async def test_searches_both_kinds():
    response = await SearchService(FakeRepository()).search(SearchRequest(query="star"))
    assert response.total_folders == 3
    assert response.total_files == 2
    assert response.pagination.total_pages == 1


@pytest.mark.asyncio
async def test_file_failure_keeps_folder_results():
    repo = FakeRepository(fail={"find_files"})
    response = await SearchService(repo).search(SearchRequest(query="star"))
    assert response.total_folders == 3
    assert response.files == []
    assert response.total_files == 0


@pytest.mark.asyncio
async def test_folder_failure_keeps_file_results():
    repo = FakeRepository(fail={"find_folders"})
    response = await SearchService(repo).search(SearchRequest(query="star", search_in=SearchIn.NAME))
    assert response.folders == []
    assert [f.name for f in response.files] == ["Star Wars Episode IV.mkv"]


@pytest.mark.asyncio
async def test_count_failure_keeps_records():
    repo = FakeRepository(fail={"count_folders"})
    response = await SearchService(repo).search(
        SearchRequest(query="movies", search_in=SearchIn.NAME, search_type=SearchType.FOLDERS)
    )
    assert [f.path for f in response.folders] == ["C:\\Media\\Movies"]
    assert response.total_folders == 0


@pytest.mark.asyncio
async def test_highlight_without_expansion():
    request = SearchRequest(query="star", search_type=SearchType.FOLDERS)
    response = await SearchService(FakeRepository()).search(request)
    # "Season 1" only matches through its path
    assert response.highlight_paths == [
        "C:\\Media\\Movies\\Star Wars Collection",
        "C:\\Media\\Star Trek",
    ]
    assert response.expand_paths is None


@pytest.mark.asyncio
async def test_empty_query_highlights_nothing():
    request = SearchRequest(search_type=SearchType.FOLDERS)
    response = await SearchService(FakeRepository()).search(request)
    assert response.total_folders == len(FOLDERS)
    assert response.highlight_paths == []


@pytest.mark.asyncio
async def test_ancestor_expansion_replaces_page_with_chain():
    repo = FakeRepository()
    request = SearchRequest(
        query="Season 1", search_in=SearchIn.NAME, search_type=SearchType.FOLDERS,
        ancestor_levels=1, ancestor_mode=AncestorMode.FROM_ROOT,
    )
    response = await SearchService(repo).search(request)
    assert [f.path for f in response.folders] == [
        "C:\\Media", "C:\\Media\\Star Trek", "C:\\Media\\Star Trek\\Season 1",
    ]
    assert response.total_folders == 1
    assert response.anchor_paths == ["C:\\Media"]
    assert response.show_all_from_paths == ["C:\\Media\\Star Trek"]
    assert response.highlight_paths == ["C:\\Media\\Star Trek\\Season 1"]
    assert len(repo.path_lookups) == 1


@pytest.mark.asyncio
async def test_ancestor_lookup_failure_returns_raw_page():
    repo = FakeRepository(fail={"get_folders_by_paths"})
    request = SearchRequest(
        query="Season 1", search_in=SearchIn.NAME, search_type=SearchType.FOLDERS,
        ancestor_levels=2, ancestor_mode=AncestorMode.FROM_MATCH,
    )
    response = await SearchService(repo).search(request)
    assert [f.path for f in response.folders] == ["C:\\Media\\Star Trek\\Season 1"]
    assert response.anchor_paths == ["C:\\Media"]


@pytest.mark.asyncio
async def test_files_only_skips_folder_metadata():
    repo = FakeRepository()
    request = SearchRequest(query="star", search_type=SearchType.FILES, ancestor_levels=2)
    response = await SearchService(repo).search(request)
    assert response.folders == []
    assert response.total_folders == 0
    assert response.highlight_paths is None
    assert repo.path_lookups == []


@pytest.mark.asyncio
async def test_pagination_uses_shared_offset():
    request = SearchRequest(page=2, limit=2)
    response = await SearchService(FakeRepository()).search(request)
    assert [f.id for f in response.folders] == [3, 4]
    assert response.files == []
    assert response.pagination.total_pages == 4
