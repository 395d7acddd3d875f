"""Viewer-scoped listings."""
from fastapi import APIRouter, Depends, Query

from dishcovery.api.deps import get_feed_assembler, get_viewer_id
from dishcovery.core.config import settings
from dishcovery.schemas.feed import FeedPage
from dishcovery.services.feed_service import FeedAssembler

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me/saved-posts", response_model=FeedPage)
async def get_saved_posts(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    viewer_id: str = Depends(get_viewer_id),
    assembler: FeedAssembler = Depends(get_feed_assembler),
):
    return await assembler.saved(viewer_id, page=page, limit=limit)
