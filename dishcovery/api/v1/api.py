"""V1 API router aggregation."""
from fastapi import APIRouter

from dishcovery.api.v1.endpoints import feed, posts, restaurants, search, users

api_router = APIRouter(prefix="/v1")
# feed before posts so /posts/feed etc. are not captured by /posts/{post_id}
api_router.include_router(feed.router)
api_router.include_router(posts.router)
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(restaurants.router)
api_router.include_router(users.router)
