"""Universal search across posts, restaurants and users."""
import asyncio
import logging

from dishcovery.core.exceptions import InvalidQuery, StoreError
from dishcovery.db.gateway import RowStoreGateway
from dishcovery.db.query import MOST_FOLLOWED, MOST_POSTED, AnyOf, TextMatch
from dishcovery.schemas.search import (
    SearchItemHashtag,
    SearchItemPost,
    SearchItemRestaurant,
    SearchItemUser,
    SearchResults,
)
from dishcovery.services.feed_service import POST_SHAPE, normalize_hashtag, search_query
from dishcovery.services.normalizer import normalize_post, normalize_restaurant, normalize_user
from dishcovery.services.social_state import SocialStateResolver

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("all", "post", "restaurant", "user")

POST_LIMIT = 20
RESTAURANT_LIMIT = 15
USER_LIMIT = 10


class SearchService:
    def __init__(self, gateway: RowStoreGateway, resolver: SocialStateResolver | None = None):
        self.gateway = gateway
        self.resolver = resolver or SocialStateResolver(gateway)

    async def _posts(self, term: str, hashtag: str | None, filter: str, viewer_id: str | None) -> list[SearchItemPost]:
        query = search_query(term, hashtag, "popular" if filter == "popular" else "new")
        if query is None:
            return []
        rows = await self.gateway.fetch_page("posts", POST_SHAPE, query.predicate, query.sort, 0, POST_LIMIT)
        social = await self.resolver.resolve(viewer_id, [str(r["id"]) for r in rows])
        return [SearchItemPost(post=normalize_post(r, social.liked, social.saved)) for r in rows]

    async def _restaurants(self, term: str) -> list[SearchItemRestaurant]:
        rows = await self.gateway.fetch_page(
            "restaurants",
            (),
            AnyOf((
                TextMatch("name", term),
                TextMatch("address", term),
                TextMatch("landmark_notes", term),
            )),
            MOST_POSTED,
            0,
            RESTAURANT_LIMIT,
        )
        return [SearchItemRestaurant(restaurant=normalize_restaurant(r)) for r in rows]

    async def _users(self, term: str) -> list[SearchItemUser]:
        rows = await self.gateway.fetch_page(
            "users",
            (),
            AnyOf((TextMatch("username", term), TextMatch("bio", term))),
            MOST_FOLLOWED,
            0,
            USER_LIMIT,
        )
        return [SearchItemUser(user=normalize_user(r)) for r in rows]

    async def search(
        self,
        q: str | None,
        filter: str = "newest",
        type: str = "all",
        viewer_id: str | None = None,
    ) -> SearchResults:
        term = (q or "").strip()
        if not term:
            raise InvalidQuery("Search query required")
        if type not in SEARCH_TYPES:
            raise InvalidQuery(f"Unknown search type: {type}")

        tag = normalize_hashtag(term) if term.startswith("#") else ""
        text = term if not tag else ""

        sections = []
        if type in ("all", "post"):
            sections.append(("post", self._posts(text, tag, filter, viewer_id)))
        if not tag:
            if type in ("all", "restaurant"):
                sections.append(("restaurant", self._restaurants(term)))
            if type in ("all", "user"):
                sections.append(("user", self._users(term)))

        results = await asyncio.gather(*(coro for _, coro in sections), return_exceptions=True)

        items = [SearchItemHashtag(tag=tag)] if tag else []
        failures = []
        for (name, _), result in zip(sections, results):
            if isinstance(result, StoreError):
                logger.warning("Search section %s failed for %r: %s", name, term, result)
                failures.append(result)
                continue
            if isinstance(result, BaseException):
                raise result
            items.extend(result)
        if sections and len(failures) == len(sections):
            raise failures[0]

        return SearchResults(data=items, count=len(items), query=term, filter=filter, type=type)
