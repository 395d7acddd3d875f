from typing import Any

from fastapi import APIRouter, Depends, Query

from dishcovery.api import deps
from dishcovery.schemas.search import SearchResults
from dishcovery.services.search_service import SearchService

router = APIRouter()


@router.get("/", response_model=SearchResults)
async def search(
    q: str | None = Query(None),
    filter: str = Query("newest"),
    type: str = Query("all"),
    viewer_id: str | None = Depends(deps.get_viewer_id_optional),
    service: SearchService = Depends(deps.get_search_service),
) -> Any:
    """
    Search for posts, restaurants and users. A query starting with '#' searches hashtags.
    """
    return await service.search(q, filter=filter, type=type, viewer_id=viewer_id)
