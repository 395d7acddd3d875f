"""Feed page contract and query parameters."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from dishcovery.schemas.post import PostResponse


class FeedMode(str, Enum):
    CHRONOLOGICAL = "chronological"
    TRENDING = "trending"
    SEARCH = "search"
    SAVED = "saved"


class TrendingSort(str, Enum):
    POPULAR = "popular"
    NEWEST = "newest"


class SearchSort(str, Enum):
    NEW = "new"
    POPULAR = "popular"


class FeedPage(BaseModel):
    """One page of posts. has_more is an approximation: len(data) == page size."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[PostResponse] = Field(default_factory=list)
    page: int
    has_more: bool = Field(False, alias="hasMore")
