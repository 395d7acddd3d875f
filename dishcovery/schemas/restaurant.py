"""Pydantic schemas for Restaurant."""
from pydantic import BaseModel, ConfigDict, Field


class RestaurantSummary(BaseModel):
    id: str
    name: str = ""
    address: str | None = None
    cover_image: str | None = None  # resolved: cover_image, else photos[0], else None
    image_url: str | None = None  # alias of cover_image for legacy consumers
    photos: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)  # alias of photos for legacy consumers
    has_images: bool = False
    food_types: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    price_range: str | None = None
    rating: float | None = None
    posts_count: int = 0
    google_maps_url: str | None = None
    landmark_notes: str | None = None


class RestaurantPage(BaseModel):
    """One page of restaurants; same has_more approximation as the post feed."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[RestaurantSummary] = Field(default_factory=list)
    page: int
    has_more: bool = Field(False, alias="hasMore")


class RankedRestaurant(RestaurantSummary):
    rank: int


class TopRestaurants(BaseModel):
    data: list[RankedRestaurant] = Field(default_factory=list)
