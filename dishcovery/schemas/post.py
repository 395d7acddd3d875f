"""Pydantic schemas for Post."""
from datetime import datetime

from pydantic import BaseModel, Field

from dishcovery.schemas.restaurant import RestaurantSummary
from dishcovery.schemas.user import UserSummary


class PostResponse(BaseModel):
    id: str
    caption: str | None = None
    images: list[str] = Field(default_factory=list)
    image_url: str | None = None
    likes_count: int = 0
    comments_count: int = 0
    saves_count: int = 0
    is_trending: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: UserSummary = Field(default_factory=UserSummary)
    restaurant: RestaurantSummary | None = None
    # Viewer-relative, resolved per request; never stored on the post row
    is_liked: bool = False
    is_saved: bool = False


class LikeState(BaseModel):
    liked: bool
    likes_count: int = 0


class SaveState(BaseModel):
    saved: bool
    saves_count: int = 0
