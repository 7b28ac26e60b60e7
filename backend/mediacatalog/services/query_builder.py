"""Search predicate builder.

Turns a :class:`SearchRequest` into a small expression tree of typed leaf
predicates joined by ``And``/``Or``. The tree is backend-agnostic: the
repository compiles it into bound SQLAlchemy expressions, and
:func:`evaluate` runs it in-process (used to decide highlighting).

Field names used in the tree: ``name``, ``path``, ``extension``, ``size``,
``modified_at``. For files, ``path`` is the owning folder's path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from mediacatalog.schemas.search import SearchIn, SearchMode, SearchRequest
from mediacatalog.utils.paths import normalize_extension


@dataclass(frozen=True)
class Equals:
    field: str
    value: str
    case_sensitive: bool = False


@dataclass(frozen=True)
class Contains:
    field: str
    value: str
    case_sensitive: bool = False


@dataclass(frozen=True)
class AllTokensContain:
    """Every token must occur somewhere in the same field."""
    field: str
    tokens: tuple[str, ...]
    case_sensitive: bool = False


@dataclass(frozen=True)
class Range:
    """Inclusive range; either bound may be ``None``."""
    field: str
    low: Any = None
    high: Any = None


@dataclass(frozen=True)
class And:
    parts: tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    parts: tuple["Predicate", ...]


Predicate = Union[Equals, Contains, AllTokensContain, Range, And, Or]


def tokenize(query: str) -> tuple[str, ...]:
    return tuple(token for token in query.split() if token)


def field_predicate(
    field: str, query: str, mode: SearchMode, case_sensitive: bool
) -> Predicate | None:
    """Text predicate for one field under *mode*, or ``None`` for an empty query."""
    if not query.strip():
        return None
    if mode == SearchMode.EXACT:
        return Equals(field, query, case_sensitive)
    if mode == SearchMode.WORD_BASED:
        tokens = tokenize(query)
        if len(tokens) == 1:
            return Contains(field, tokens[0], case_sensitive)
        return AllTokensContain(field, tokens, case_sensitive)
    # fuzzy, and regex degraded to fuzzy
    return Contains(field, query, case_sensitive)


def text_predicate(
    query: str, mode: SearchMode, case_sensitive: bool, search_in: SearchIn
) -> Predicate | None:
    """Combine name/path predicates according to *search_in*.

    With ``both`` the two fields are built independently and OR-ed, so in
    word-based mode all tokens must hit the name or all must hit the path.
    """
    if search_in == SearchIn.NAME:
        return field_predicate("name", query, mode, case_sensitive)
    if search_in == SearchIn.PATH:
        return field_predicate("path", query, mode, case_sensitive)

    name = field_predicate("name", query, mode, case_sensitive)
    path = field_predicate("path", query, mode, case_sensitive)
    if name is None or path is None:
        return None
    return Or((name, path))


def name_predicate(request: SearchRequest) -> Predicate | None:
    """Text predicate restricted to the name field, for highlight decisions."""
    return field_predicate("name", request.query, request.mode, request.case_sensitive)


def _date_range(request: SearchRequest) -> Range | None:
    if not request.date_from and not request.date_to:
        return None
    return Range("modified_at", request.date_from or None, request.date_to or None)


def _conjoin(parts: list[Predicate | None]) -> Predicate | None:
    present = tuple(p for p in parts if p is not None)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return And(present)


def build_folder_predicate(request: SearchRequest) -> Predicate | None:
    """Folder predicate: text + modified-date range."""
    return _conjoin([
        text_predicate(request.query, request.mode, request.case_sensitive, request.search_in),
        _date_range(request),
    ])


def build_file_predicate(request: SearchRequest) -> Predicate | None:
    """File predicate: text + date range + extension + size range."""
    extension = normalize_extension(request.extension)
    size = None
    if request.size_min is not None or request.size_max is not None:
        size = Range("size", request.size_min, request.size_max)
    return _conjoin([
        text_predicate(request.query, request.mode, request.case_sensitive, request.search_in),
        _date_range(request),
        Equals("extension", extension, case_sensitive=True) if extension else None,
        size,
    ])


def _fold(value: str, case_sensitive: bool) -> str:
    return value if case_sensitive else value.lower()


def evaluate(predicate: Predicate | None, record: Mapping[str, Any]) -> bool:
    """Evaluate *predicate* against a plain mapping of field values.

    A missing or ``None`` field never satisfies a leaf predicate.
    """
    if predicate is None:
        return True
    if isinstance(predicate, And):
        return all(evaluate(p, record) for p in predicate.parts)
    if isinstance(predicate, Or):
        return any(evaluate(p, record) for p in predicate.parts)

    value = record.get(predicate.field)
    if value is None:
        return False

    if isinstance(predicate, Range):
        if predicate.low is not None and value < predicate.low:
            return False
        if predicate.high is not None and value > predicate.high:
            return False
        return True

    cs = predicate.case_sensitive
    text = _fold(str(value), cs)
    if isinstance(predicate, Equals):
        return text == _fold(predicate.value, cs)
    if isinstance(predicate, Contains):
        return _fold(predicate.value, cs) in text
    if isinstance(predicate, AllTokensContain):
        return all(_fold(token, cs) in text for token in predicate.tokens)
    raise TypeError(f"Unknown predicate: {predicate!r}")
