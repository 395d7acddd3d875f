"""Single post reads, likes, saves and comments."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from dishcovery.api.deps import get_db, get_feed_assembler, get_gateway, get_viewer_id, get_viewer_id_optional
from dishcovery.db.gateway import RowStoreGateway
from dishcovery.schemas.comment import CommentCreate, CommentPage, CommentResponse
from dishcovery.schemas.post import LikeState, PostResponse, SaveState
from dishcovery.services import engagement_service
from dishcovery.services.feed_service import FeedAssembler

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    viewer_id: str | None = Depends(get_viewer_id_optional),
    assembler: FeedAssembler = Depends(get_feed_assembler),
):
    return await assembler.get_post(post_id, viewer_id=viewer_id)


@router.post("/{post_id}/like", response_model=LikeState)
async def like_post(
    post_id: str,
    viewer_id: str = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    state = await engagement_service.set_like(db, post_id, viewer_id, liked=True)
    await db.commit()
    return state


@router.delete("/{post_id}/like", response_model=LikeState)
async def unlike_post(
    post_id: str,
    viewer_id: str = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    state = await engagement_service.set_like(db, post_id, viewer_id, liked=False)
    await db.commit()
    return state


@router.post("/{post_id}/save", response_model=SaveState)
async def save_post(
    post_id: str,
    viewer_id: str = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    state = await engagement_service.set_save(db, post_id, viewer_id, saved=True)
    await db.commit()
    return state


@router.delete("/{post_id}/save", response_model=SaveState)
async def unsave_post(
    post_id: str,
    viewer_id: str = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    state = await engagement_service.set_save(db, post_id, viewer_id, saved=False)
    await db.commit()
    return state


@router.get("/{post_id}/comments", response_model=CommentPage)
async def list_post_comments(
    post_id: str,
    page: int = Query(1),
    limit: int = Query(20),
    gateway: RowStoreGateway = Depends(get_gateway),
):
    return await engagement_service.list_comments(gateway, post_id, page=page, limit=limit)


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_post_comment(
    post_id: str,
    data: CommentCreate,
    viewer_id: str = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    comment = await engagement_service.create_comment(db, post_id, viewer_id, data.content)
    await db.commit()
    return comment
