"""Ancestor chain expansion for folder-tree rendering.

For every matched folder the resolver rebuilds the chain of ancestor paths
from the topmost reconstructable node down to the match, then picks an
*anchor* on that chain (the node the client renders as a visible root) and
the anchor's child on the chain (the only branch kept visible under the
anchor). Several unrelated matches each contribute their own anchor, so the
output supports any number of disjoint branches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol

from mediacatalog.schemas.search import AncestorMode
from mediacatalog.utils.paths import chain_from_root

logger = logging.getLogger(__name__)


class FolderLike(Protocol):
    path: str
    name: str


class OrderedPathSet:
    """Insertion-ordered set of paths."""

    def __init__(self, paths: Iterable[str] = ()):
        self._items: dict[str, None] = dict.fromkeys(paths)

    def add(self, path: str) -> None:
        self._items.setdefault(path, None)

    def __contains__(self, path: object) -> bool:
        return path in self._items

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def first(self) -> str | None:
        return next(iter(self._items), None)

    def to_list(self) -> list[str]:
        return list(self._items)


@dataclass
class AncestorExpansion:
    """Path sets handed to the client for expand/anchor/prune/highlight."""
    expand: OrderedPathSet = field(default_factory=OrderedPathSet)
    anchor: OrderedPathSet = field(default_factory=OrderedPathSet)
    show_all_from: OrderedPathSet = field(default_factory=OrderedPathSet)
    highlight: OrderedPathSet = field(default_factory=OrderedPathSet)

    def required_paths(self) -> list[str]:
        """Every path whose full folder record the response needs."""
        needed = OrderedPathSet()
        for group in (self.expand, self.anchor, self.show_all_from, self.highlight):
            for path in group:
                needed.add(path)
        return needed.to_list()


def anchor_index(chain_length: int, levels: int, mode: AncestorMode) -> int:
    """Position of the anchor in a root-first chain of *chain_length* nodes.

    ``from-root``: level 1 is the topmost node of the chain, level 2 its
    child, and so on. ``from-match``: the anchor sits *levels* steps above
    the match. Both clamp to the chain instead of failing.
    """
    last = chain_length - 1
    if mode == AncestorMode.FROM_MATCH:
        return max(0, last - levels)
    return max(0, min(levels - 1, last))


def highlight_matches(
    folders: Iterable[FolderLike], name_matches: Callable[[str], bool]
) -> OrderedPathSet:
    """Paths of folders whose own name satisfies the text predicate."""
    return OrderedPathSet(f.path for f in folders if name_matches(f.name))


def resolve_ancestors(
    matches: Iterable[FolderLike],
    levels: int,
    mode: AncestorMode,
    name_matches: Callable[[str], bool],
) -> AncestorExpansion:
    """Compute expand/anchor/showAllFrom/highlight sets for *matches*."""
    result = AncestorExpansion()
    for folder in matches:
        chain = chain_from_root(folder.path)
        for path in chain:
            result.expand.add(path)

        idx = anchor_index(len(chain), levels, mode)
        result.anchor.add(chain[idx])
        result.show_all_from.add(chain[min(idx + 1, len(chain) - 1)])

        if name_matches(folder.name):
            result.highlight.add(folder.path)

    logger.debug(
        "Resolved %d anchors, %d expanded nodes (levels=%d, mode=%s)",
        len(result.anchor), len(result.expand), levels, mode.value,
    )
    return result
