"""Tests for ancestor chain expansion."""

from types import SimpleNamespace

import pytest

from mediacatalog.schemas.search import AncestorMode
from mediacatalog.services.ancestors import (
    OrderedPathSet,
    anchor_index,
    highlight_matches,
    resolve_ancestors,
)

MATCH = SimpleNamespace(path="C:\\A\\B\\Match", name="Match")


def _always(name):
    return True


def _never(name):
    return False


class TestAnchorIndex:
    @pytest.mark.parametrize("levels, expected", [(1, 0), (2, 1), (3, 2), (10, 2)])
    def test_from_root(self, levels, expected):
        assert anchor_index(3, levels, AncestorMode.FROM_ROOT) == expected

    @pytest.mark.parametrize("levels, expected", [(1, 1), (2, 0), (10, 0)])
    def test_from_match(self, levels, expected):
        assert anchor_index(3, levels, AncestorMode.FROM_MATCH) == expected

    def test_single_node_chain(self):
        assert anchor_index(1, 5, AncestorMode.FROM_ROOT) == 0
        assert anchor_index(1, 5, AncestorMode.FROM_MATCH) == 0


class TestResolveAncestors:
    def test_from_root_one_level(self):
        result = resolve_ancestors([MATCH], 1, AncestorMode.FROM_ROOT, _always)
        assert result.expand.to_list() == ["C:\\A", "C:\\A\\B", "C:\\A\\B\\Match"]
        assert result.anchor.to_list() == ["C:\\A"]
        assert result.show_all_from.to_list() == ["C:\\A\\B"]
        assert result.highlight.to_list() == ["C:\\A\\B\\Match"]

    def test_from_match_one_level(self):
        result = resolve_ancestors([MATCH], 1, AncestorMode.FROM_MATCH, _always)
        assert result.anchor.to_list() == ["C:\\A\\B"]
        assert result.show_all_from.to_list() == ["C:\\A\\B\\Match"]

    def test_levels_beyond_chain_clamp(self):
        from_root = resolve_ancestors([MATCH], 10, AncestorMode.FROM_ROOT, _always)
        assert from_root.anchor.to_list() == ["C:\\A\\B\\Match"]
        assert from_root.show_all_from.to_list() == ["C:\\A\\B\\Match"]

        from_match = resolve_ancestors([MATCH], 10, AncestorMode.FROM_MATCH, _always)
        assert from_match.anchor.to_list() == ["C:\\A"]

    def test_root_level_match(self):
        root = SimpleNamespace(path="Media", name="Media")
        result = resolve_ancestors([root], 3, AncestorMode.FROM_MATCH, _always)
        assert result.expand.to_list() == ["Media"]
        assert result.anchor.to_list() == ["Media"]
        assert result.show_all_from.to_list() == ["Media"]

    def test_disjoint_matches_get_separate_anchors(self):
        matches = [
            SimpleNamespace(path="C:\\Media\\Star Wars", name="Star Wars"),
            SimpleNamespace(path="D:\\Backup\\Star Archive", name="Star Archive"),
        ]
        result = resolve_ancestors(matches, 1, AncestorMode.FROM_ROOT, _always)
        assert result.anchor.to_list() == ["C:\\Media", "D:\\Backup"]
        assert result.show_all_from.to_list() == ["C:\\Media\\Star Wars", "D:\\Backup\\Star Archive"]

    def test_shared_ancestors_are_deduplicated(self):
        matches = [
            SimpleNamespace(path="C:\\Media\\Movies\\One", name="One"),
            SimpleNamespace(path="C:\\Media\\Movies\\Two", name="Two"),
        ]
        result = resolve_ancestors(matches, 1, AncestorMode.FROM_ROOT, _always)
        assert result.expand.to_list() == [
            "C:\\Media", "C:\\Media\\Movies", "C:\\Media\\Movies\\One", "C:\\Media\\Movies\\Two",
        ]
        assert result.anchor.to_list() == ["C:\\Media"]
        assert result.show_all_from.to_list() == ["C:\\Media\\Movies"]

    def test_path_only_matches_are_not_highlighted(self):
        result = resolve_ancestors([MATCH], 1, AncestorMode.FROM_ROOT, _never)
        assert result.highlight.to_list() == []
        assert len(result.expand) == 3

    def test_required_paths_cover_all_groups(self):
        result = resolve_ancestors([MATCH], 1, AncestorMode.FROM_ROOT, _always)
        assert result.required_paths() == ["C:\\A", "C:\\A\\B", "C:\\A\\B\\Match"]

    def test_no_matches(self):
        result = resolve_ancestors([], 3, AncestorMode.FROM_ROOT, _always)
        assert result.required_paths() == []
        assert result.anchor.first() is None


def test_highlight_matches_filters_by_name():
    folders = [
        SimpleNamespace(path="C:\\Media\\Movies", name="Movies"),
        SimpleNamespace(path="C:\\Media\\Movies\\Sci-Fi", name="Sci-Fi"),
    ]
    result = highlight_matches(folders, lambda name: "movies" in name.lower())
    assert result.to_list() == ["C:\\Media\\Movies"]


def test_ordered_path_set_keeps_first_insertion():
    paths = OrderedPathSet(["b", "a"])
    paths.add("b")
    paths.add("c")
    assert paths.to_list() == ["b", "a", "c"]
    assert paths.first() == "b"
    assert "a" in paths
