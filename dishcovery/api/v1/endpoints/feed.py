"""Feed endpoints: chronological, trending and post search pages."""
from fastapi import APIRouter, Depends, Query

from dishcovery.api.deps import get_feed_assembler, get_viewer_id_optional
from dishcovery.core.config import settings
from dishcovery.schemas.feed import FeedPage, SearchSort, TrendingSort
from dishcovery.services.feed_service import FeedAssembler

router = APIRouter(prefix="/posts", tags=["feed"])


@router.get("/feed", response_model=FeedPage)
async def get_feed(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    viewer_id: str | None = Depends(get_viewer_id_optional),
    assembler: FeedAssembler = Depends(get_feed_assembler),
):
    return await assembler.chronological(page=page, limit=limit, viewer_id=viewer_id)


@router.get("/trending", response_model=FeedPage)
async def get_trending(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    sort: TrendingSort | None = Query(None),
    viewer_id: str | None = Depends(get_viewer_id_optional),
    assembler: FeedAssembler = Depends(get_feed_assembler),
):
    return await assembler.trending(
        sort=sort.value if sort else None, page=page, limit=limit, viewer_id=viewer_id
    )


@router.get("/search", response_model=FeedPage)
async def search_posts(
    q: str | None = Query(None),
    hashtag: str | None = Query(None),
    sort: SearchSort = Query(SearchSort.NEW),
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    viewer_id: str | None = Depends(get_viewer_id_optional),
    assembler: FeedAssembler = Depends(get_feed_assembler),
):
    return await assembler.search(
        q=q, hashtag=hashtag, sort=sort.value, page=page, limit=limit, viewer_id=viewer_id
    )
