"""Infinite-scroll pagination cursor scoped to one query identity."""
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dishcovery.client.api import DishcoveryClient
from dishcovery.schemas.feed import FeedMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryIdentity:
    """(mode, filters, sort) - pages are never shared across identities."""

    mode: FeedMode
    q: str = ""
    hashtag: str = ""
    sort: str = ""


PageFetcher = Callable[[QueryIdentity, int, int], Awaitable[Mapping[str, Any]]]


def client_fetcher(client: DishcoveryClient) -> PageFetcher:
    """Route a query identity to the matching feed endpoint."""

    async def fetch(identity: QueryIdentity, page: int, limit: int) -> Mapping[str, Any]:
        if identity.mode == FeedMode.TRENDING:
            return await client.get_trending(page=page, limit=limit, sort=identity.sort or None)
        if identity.mode == FeedMode.SEARCH:
            return await client.search_posts(
                q=identity.q or None,
                hashtag=identity.hashtag or None,
                sort=identity.sort or "new",
                page=page,
                limit=limit,
            )
        if identity.mode == FeedMode.SAVED:
            return await client.get_saved_posts(page=page, limit=limit)
        return await client.get_feed(page=page, limit=limit)

    return fetch


class PaginationCursor:
    """Append-only page list with a single in-flight fetch.

    ``load_more`` is a no-op while a fetch is running or once the last page
    reported ``hasMore == false``. ``reset`` starts a new generation; responses
    from an older generation are dropped when they land.
    """

    def __init__(self, fetch: PageFetcher, identity: QueryIdentity, limit: int = 10):
        self._fetch = fetch
        self.identity = identity
        self.limit = limit
        self.pages: list[Mapping[str, Any]] = []
        self.next_page = 1
        self.error: Exception | None = None
        self._in_flight = False
        self._generation = 0

    @property
    def loading(self) -> bool:
        return self._in_flight

    @property
    def has_more(self) -> bool:
        if not self.pages:
            return True
        return bool(self.pages[-1].get("hasMore", False))

    @property
    def items(self) -> list[Mapping[str, Any]]:
        return [item for page in self.pages for item in page.get("data", [])]

    def reset(self, identity: QueryIdentity | None = None) -> None:
        if identity is not None:
            self.identity = identity
        self._generation += 1
        self.pages = []
        self.next_page = 1
        self.error = None
        self._in_flight = False

    async def load_more(self) -> bool:
        """Fetch the next page. Returns True if a page was appended."""
        if self._in_flight or not self.has_more:
            return False

        generation = self._generation
        page = self.next_page
        identity = self.identity
        self._in_flight = True
        try:
            result = await self._fetch(identity, page, self.limit)
        except Exception as e:
            if generation != self._generation:
                logger.debug("Dropping failed page %d for stale %s", page, identity)
                return False
            self._in_flight = False
            self.error = e
            raise

        if generation != self._generation:
            logger.debug("Dropping page %d for stale %s", page, identity)
            return False
        self._in_flight = False
        if int(result.get("page", page)) != page:
            logger.warning("Discarding out-of-order page %s (expected %d)", result.get("page"), page)
            return False

        self.error = None
        self.pages.append(result)
        self.next_page = page + 1
        return True
