"""Feed assembly: paginated, sorted, socially annotated post listings."""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from dishcovery.core.config import settings
from dishcovery.core.exceptions import InvalidQuery, StoreError, StoreUnavailable
from dishcovery.db.gateway import RowStoreGateway, clamp_limit
from dishcovery.db.query import (
    MOST_LIKED_FIRST,
    NEWEST_FIRST,
    TRENDING_THEN_NEWEST,
    AnyOf,
    Eq,
    Predicate,
    SortSpec,
    TextMatch,
)
from dishcovery.schemas.feed import FeedMode, FeedPage
from dishcovery.schemas.post import PostResponse
from dishcovery.services.normalizer import normalize_post
from dishcovery.services.social_state import SocialStateResolver

logger = logging.getLogger(__name__)

POST_SHAPE = ("user", "restaurant")


class PageState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True)
class FeedQuery:
    mode: FeedMode
    predicate: Predicate | None
    sort: SortSpec


@dataclass
class PageRequest:
    query: FeedQuery
    page: int
    limit: int
    viewer_id: str | None = None
    state: PageState = PageState.IDLE
    error: StoreError | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def transition(self, state: PageState) -> None:
        logger.debug("%s page %d: %s -> %s", self.query.mode.value, self.page, self.state.value, state.value)
        self.state = state


def chronological_query() -> FeedQuery:
    return FeedQuery(FeedMode.CHRONOLOGICAL, None, NEWEST_FIRST)


def trending_query(sort: str | None = None) -> FeedQuery:
    if sort == "popular":
        order = MOST_LIKED_FIRST
    elif sort == "newest":
        order = NEWEST_FIRST
    else:
        # Flagged posts first, ties broken by recency. Two keys, not a score.
        order = TRENDING_THEN_NEWEST
    return FeedQuery(FeedMode.TRENDING, None, order)


def normalize_hashtag(hashtag: str | None) -> str:
    tag = (hashtag or "").strip()
    if tag.startswith("#"):
        tag = tag[1:].strip()
    return tag


def search_query(q: str | None = None, hashtag: str | None = None, sort: str | None = None) -> FeedQuery | None:
    """Build a search query, or None when there is nothing to search for."""
    tag = normalize_hashtag(hashtag)
    term = (q or "").strip()
    if tag:
        predicate: Predicate = TextMatch("caption", f"#{tag}")
    elif term:
        predicate = AnyOf((TextMatch("caption", term), TextMatch("restaurant.name", term)))
    else:
        return None
    order = MOST_LIKED_FIRST if sort == "popular" else NEWEST_FIRST
    return FeedQuery(FeedMode.SEARCH, predicate, order)


def saved_query(viewer_id: str) -> FeedQuery:
    """Posts the viewer has saved, newest post first."""
    return FeedQuery(FeedMode.SAVED, Eq("saves.user_id", viewer_id), NEWEST_FIRST)


class FeedAssembler:
    """Compose gateway rows, social state and the normalizer into a FeedPage."""

    def __init__(
        self,
        gateway: RowStoreGateway,
        resolver: SocialStateResolver | None = None,
        timeout: float | None = None,
    ):
        self.gateway = gateway
        self.resolver = resolver or SocialStateResolver(gateway)
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS

    async def _compose(self, request: PageRequest) -> FeedPage:
        rows = await self.gateway.fetch_page(
            "posts",
            POST_SHAPE,
            request.query.predicate,
            request.query.sort,
            request.offset,
            request.limit,
        )
        social = await self.resolver.resolve(request.viewer_id, [str(r["id"]) for r in rows])
        items = [normalize_post(r, social.liked, social.saved) for r in rows]
        return FeedPage(data=items, page=request.page, has_more=len(rows) == request.limit)

    async def assemble(
        self,
        query: FeedQuery | None,
        page: int = 1,
        limit: int | None = None,
        viewer_id: str | None = None,
    ) -> FeedPage:
        if page < 1:
            raise InvalidQuery(f"page must be >= 1, got {page}")
        limit = clamp_limit(limit if limit is not None else settings.DEFAULT_PAGE_SIZE)
        if query is None:
            return FeedPage(data=[], page=page, has_more=False)

        request = PageRequest(query=query, page=page, limit=limit, viewer_id=viewer_id)
        request.transition(PageState.FETCHING)
        try:
            result = await asyncio.wait_for(self._compose(request), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            request.error = StoreUnavailable("Feed request timed out")
            request.transition(PageState.FAILED)
            raise request.error from e
        except StoreError as e:
            request.error = e
            request.transition(PageState.FAILED)
            logger.warning("%s page %d failed: %s", query.mode.value, page, e)
            raise
        request.transition(PageState.DELIVERED)
        return result

    async def chronological(self, page: int = 1, limit: int | None = None, viewer_id: str | None = None) -> FeedPage:
        return await self.assemble(chronological_query(), page, limit, viewer_id)

    async def trending(
        self,
        sort: str | None = None,
        page: int = 1,
        limit: int | None = None,
        viewer_id: str | None = None,
    ) -> FeedPage:
        return await self.assemble(trending_query(sort), page, limit, viewer_id)

    async def search(
        self,
        q: str | None = None,
        hashtag: str | None = None,
        sort: str | None = None,
        page: int = 1,
        limit: int | None = None,
        viewer_id: str | None = None,
    ) -> FeedPage:
        return await self.assemble(search_query(q, hashtag, sort), page, limit, viewer_id)

    async def saved(self, viewer_id: str, page: int = 1, limit: int | None = None) -> FeedPage:
        return await self.assemble(saved_query(viewer_id), page, limit, viewer_id)

    async def get_post(self, post_id: str, viewer_id: str | None = None) -> PostResponse:
        row = await self.gateway.fetch_one("posts", POST_SHAPE, post_id)
        social = await self.resolver.resolve(viewer_id, [str(row["id"])])
        return normalize_post(row, social.liked, social.saved)
