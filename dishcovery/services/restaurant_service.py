"""Restaurant browsing: filtered listing, category shelves, top 10 and detail."""
import logging

from dishcovery.core.config import settings
from dishcovery.core.exceptions import InvalidQuery
from dishcovery.db.gateway import RowStoreGateway, clamp_limit
from dishcovery.db.query import MOST_POSTED, NEWEST_FIRST, TOP_RATED, AllOf, AnyOf, AtLeast, OneOf, Overlaps, Predicate
from dishcovery.schemas.restaurant import RankedRestaurant, RestaurantPage, RestaurantSummary, TopRestaurants
from dishcovery.services.normalizer import normalize_restaurant

logger = logging.getLogger(__name__)

TOP_LIMIT = 10

# Localized shelf slugs and aliases, mapped to the stored category tag.
CATEGORY_SLUGS = {
    "via-he": "street-food",
    "nup-hem": "hidden-gem",
    "chay": "vegetarian",
    "sang-trong": "luxury",
    "binh-dan": "student-friendly",
    "an-khuya": "late-night",
    "fancy": "luxury",
    "vegan": "vegetarian",
    "breakfast": "breakfast",
}


def split_csv(value: str | None) -> tuple[str, ...]:
    """'pho, bun,,' -> ('pho', 'bun')"""
    return tuple(part.strip() for part in (value or "").split(",") if part.strip())


def category_tag(slug: str) -> str:
    slug = (slug or "").strip().lower()
    return CATEGORY_SLUGS.get(slug, slug)


def restaurant_filter(
    cuisine: str | None = None,
    price: str | None = None,
    rating: float | None = None,
    type: str | None = None,
) -> Predicate | None:
    """Combine the listing filters; each one given narrows the result."""
    parts: list[Predicate] = []
    if types := split_csv(type):
        parts.append(Overlaps("categories", types))
    if prices := split_csv(price):
        parts.append(OneOf("price_range", prices))
    if cuisines := split_csv(cuisine):
        parts.append(Overlaps("food_types", cuisines))
    if rating is not None:
        parts.append(AtLeast("rating", rating))
    if not parts:
        return None
    return parts[0] if len(parts) == 1 else AllOf(tuple(parts))


class RestaurantService:
    def __init__(self, gateway: RowStoreGateway):
        self.gateway = gateway

    async def _page(self, predicate: Predicate | None, sort, page: int, limit: int | None) -> RestaurantPage:
        if page < 1:
            raise InvalidQuery(f"page must be >= 1, got {page}")
        limit = clamp_limit(limit if limit is not None else settings.DEFAULT_PAGE_SIZE)
        rows = await self.gateway.fetch_page("restaurants", (), predicate, sort, (page - 1) * limit, limit)
        return RestaurantPage(
            data=[normalize_restaurant(r) for r in rows],
            page=page,
            has_more=len(rows) == limit,
        )

    async def list_restaurants(
        self,
        page: int = 1,
        limit: int | None = None,
        cuisine: str | None = None,
        price: str | None = None,
        rating: float | None = None,
        type: str | None = None,
    ) -> RestaurantPage:
        return await self._page(restaurant_filter(cuisine, price, rating, type), NEWEST_FIRST, page, limit)

    async def by_category(self, slug: str, page: int = 1, limit: int | None = None) -> RestaurantPage:
        """Restaurants tagged with the category, either as a browse category or a cuisine."""
        tag = category_tag(slug)
        if not tag:
            raise InvalidQuery("Category required")
        predicate = AnyOf((Overlaps("categories", (tag,)), Overlaps("food_types", (tag,))))
        logger.debug("category %r -> %r", slug, tag)
        return await self._page(predicate, TOP_RATED, page, limit)

    async def top(self) -> TopRestaurants:
        rows = await self.gateway.fetch_page("restaurants", (), None, MOST_POSTED, 0, TOP_LIMIT)
        return TopRestaurants(data=[
            RankedRestaurant(**normalize_restaurant(r).model_dump(), rank=i)
            for i, r in enumerate(rows, start=1)
        ])

    async def get(self, restaurant_id: str) -> RestaurantSummary:
        row = await self.gateway.fetch_one("restaurants", (), restaurant_id)
        return normalize_restaurant(row)
