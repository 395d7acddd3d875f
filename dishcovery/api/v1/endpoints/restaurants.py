"""Restaurant browsing endpoints."""
from fastapi import APIRouter, Depends, Query

from dishcovery.api.deps import get_restaurant_service
from dishcovery.core.config import settings
from dishcovery.schemas.restaurant import RestaurantPage, RestaurantSummary, TopRestaurants
from dishcovery.services.restaurant_service import RestaurantService

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.get("/", response_model=RestaurantPage)
async def list_restaurants(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cuisine: str | None = Query(None, description="Comma-separated food types"),
    price: str | None = Query(None, description="Comma-separated price ranges"),
    rating: float | None = Query(None, description="Minimum rating"),
    type: str | None = Query(None, description="Comma-separated categories"),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.list_restaurants(
        page=page, limit=limit, cuisine=cuisine, price=price, rating=rating, type=type
    )


# fixed paths before /{restaurant_id}
@router.get("/top10", response_model=TopRestaurants)
async def top_restaurants(service: RestaurantService = Depends(get_restaurant_service)):
    return await service.top()


@router.get("/category/{slug}", response_model=RestaurantPage)
async def restaurants_by_category(
    slug: str,
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.by_category(slug, page=page, limit=limit)


@router.get("/{restaurant_id}", response_model=RestaurantSummary)
async def get_restaurant(
    restaurant_id: str,
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.get(restaurant_id)
