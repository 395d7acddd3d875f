"""Map heterogeneous stored post/restaurant shapes onto the canonical response shape.

Pure functions, no I/O. Every output field has a fixed default so clients never
branch on missing keys:

* ``image_url`` is the first image, or None.
* a restaurant's cover is ``cover_image`` if non-empty, else ``photos[0]``, else None;
  ``photos`` and ``images`` carry identical lists.
* counts default to 0 (aggregate shapes like ``[{"count": 3}]`` collapse to 3).
* ``is_liked``/``is_saved`` default to False.
* an orphaned post gets the ``unknown`` author sentinel.
"""
from collections.abc import Collection, Mapping
from typing import Any

from dishcovery.schemas.comment import CommentResponse
from dishcovery.schemas.post import PostResponse
from dishcovery.schemas.restaurant import RestaurantSummary
from dishcovery.schemas.user import UserPublic, UserSummary

COUNT_FIELDS = ("likes_count", "comments_count", "saves_count")


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


def _count(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, Mapping):
        return _count(value.get("count"))
    if isinstance(value, (list, tuple)):
        return _count(value[0]) if value else 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _opt_str(value: Any) -> str | None:
    return str(value) if value else None


def resolve_cover_image(row: Mapping[str, Any]) -> str | None:
    cover = row.get("cover_image")
    if cover:
        return str(cover)
    photos = _str_list(row.get("photos"))
    return photos[0] if photos else None


def normalize_author(row: Mapping[str, Any] | None) -> UserSummary:
    if not row:
        return UserSummary()
    return UserSummary(
        id=str(row.get("id") or ""),
        username=row.get("username") or "unknown",
        avatar_url=row.get("avatar_url") or "",
    )


def normalize_user(row: Mapping[str, Any]) -> UserPublic:
    author = normalize_author(row)
    return UserPublic(
        **author.model_dump(),
        bio=row.get("bio"),
        followers_count=_count(row.get("followers_count")),
        posts_count=_count(row.get("posts_count")),
    )


def normalize_restaurant(row: Mapping[str, Any] | None) -> RestaurantSummary | None:
    if not row:
        return None
    photos = _str_list(row.get("photos"))
    cover = resolve_cover_image(row)
    rating = row.get("rating")
    return RestaurantSummary(
        id=str(row.get("id") or ""),
        name=row.get("name") or "",
        address=row.get("address") or None,
        cover_image=cover,
        image_url=cover,
        photos=photos,
        images=list(photos),
        has_images=bool(cover or photos),
        food_types=_str_list(row.get("food_types")),
        categories=_str_list(row.get("categories")),
        price_range=_opt_str(row.get("price_range")),
        rating=float(rating) if rating is not None else None,
        posts_count=_count(row.get("posts_count")),
        google_maps_url=row.get("google_maps_url") or None,
        landmark_notes=row.get("landmark_notes") or None,
    )


def normalize_post(
    row: Mapping[str, Any],
    liked_ids: Collection[str] = frozenset(),
    saved_ids: Collection[str] = frozenset(),
) -> PostResponse:
    """Build the canonical post from a raw joined row (post + author + optional restaurant)."""
    post_id = str(row.get("id") or "")
    images = _str_list(row.get("images") if row.get("images") is not None else row.get("media_urls"))
    author = row.get("user") if "user" in row else row.get("author")
    return PostResponse(
        id=post_id,
        caption=row.get("caption") or None,
        images=images,
        image_url=images[0] if images else None,
        is_trending=bool(row.get("is_trending")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        user=normalize_author(author),
        restaurant=normalize_restaurant(row.get("restaurant")),
        is_liked=post_id in liked_ids,
        is_saved=post_id in saved_ids,
        **{field: _count(row.get(field)) for field in COUNT_FIELDS},
    )


def normalize_comment(row: Mapping[str, Any]) -> CommentResponse:
    return CommentResponse(
        id=str(row.get("id") or ""),
        post_id=str(row.get("post_id") or ""),
        content=row.get("content") or "",
        created_at=row.get("created_at"),
        user=normalize_author(row.get("user")),
    )
