"""Storage-agnostic filter and sort vocabulary understood by the row store gateway.

Column names are plain strings. A dotted path such as ``restaurant.name`` refers
to a column on a related row and is only valid in filters.
"""
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool = True


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring match; ``term`` is matched literally."""

    column: str
    term: str


@dataclass(frozen=True)
class OneOf:
    """Scalar column equal to any of ``values``."""

    column: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class Overlaps:
    """Array column sharing at least one element with ``values``."""

    column: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class AtLeast:
    column: str
    value: float


@dataclass(frozen=True)
class AnyOf:
    predicates: tuple["Predicate", ...]


@dataclass(frozen=True)
class AllOf:
    predicates: tuple["Predicate", ...]


Predicate = Union[Eq, TextMatch, OneOf, Overlaps, AtLeast, AnyOf, AllOf]

SortSpec = tuple[SortKey, ...]

# Every sort ends on the primary key so offset pages never repeat or skip tied rows.
BY_ID = SortKey("id")

NEWEST_FIRST: SortSpec = (SortKey("created_at"), BY_ID)
MOST_LIKED_FIRST: SortSpec = (SortKey("likes_count"), BY_ID)
TRENDING_THEN_NEWEST: SortSpec = (SortKey("is_trending"), SortKey("created_at"), BY_ID)
OLDEST_FIRST: SortSpec = (SortKey("created_at", descending=False), SortKey("id", descending=False))
TOP_RATED: SortSpec = (SortKey("rating"), BY_ID)
MOST_POSTED: SortSpec = (SortKey("posts_count"), BY_ID)
MOST_FOLLOWED: SortSpec = (SortKey("followers_count"), BY_ID)
