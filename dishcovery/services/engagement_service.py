"""Like, save and comment operations.

Likes and saves use explicit set/unset semantics: POST sets, DELETE unsets, and
repeating either is a no-op. Clients can therefore retry without flipping state.
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dishcovery.core.exceptions import InvalidQuery, NotFound
from dishcovery.db.gateway import RowStoreGateway, clamp_limit, row_to_dict
from dishcovery.db.query import OLDEST_FIRST, Eq
from dishcovery.models.comment import Comment
from dishcovery.models.engagement import PostLike, PostSave
from dishcovery.models.post import Post
from dishcovery.schemas.comment import CommentPage, CommentResponse
from dishcovery.schemas.post import LikeState, SaveState
from dishcovery.services.normalizer import normalize_comment

logger = logging.getLogger(__name__)


def _uuid(value: str, what: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound(f"{what} not found") from None


async def _get_post(db: AsyncSession, post_id: str) -> Post:
    post = await db.get(Post, _uuid(post_id, "Post"))
    if post is None:
        raise NotFound("Post not found")
    return post


async def _set_engagement(db: AsyncSession, model: type, counter: str, post_id: str, user_id: str, on: bool) -> int:
    """Set or clear one viewer's like/save row and keep the post counter in step. Returns the new count."""
    post = await _get_post(db, post_id)
    viewer = _uuid(user_id, "User")
    key = (viewer, post.id)
    count = getattr(post, counter) or 0
    existing = await db.get(model, key)
    if on and existing is None:
        try:
            async with db.begin_nested():
                db.add(model(user_id=viewer, post_id=post.id))
        except IntegrityError:
            # Either a concurrent request from the same viewer won the insert,
            # or the viewer has no user row.
            if await db.get(model, key) is None:
                raise NotFound("User not found") from None
            logger.info("%s post=%s user=%s already set", model.__tablename__, post_id, user_id)
        else:
            count += 1
    elif not on and existing is not None:
        await db.delete(existing)
        count = max(0, count - 1)
    setattr(post, counter, count)
    await db.flush()
    logger.debug("%s post=%s user=%s on=%s count=%s", model.__tablename__, post_id, user_id, on, count)
    return count


async def set_like(db: AsyncSession, post_id: str, user_id: str, liked: bool) -> LikeState:
    count = await _set_engagement(db, PostLike, "likes_count", post_id, user_id, liked)
    return LikeState(liked=liked, likes_count=count)


async def set_save(db: AsyncSession, post_id: str, user_id: str, saved: bool) -> SaveState:
    count = await _set_engagement(db, PostSave, "saves_count", post_id, user_id, saved)
    return SaveState(saved=saved, saves_count=count)


async def create_comment(db: AsyncSession, post_id: str, user_id: str, content: str) -> CommentResponse:
    post = await _get_post(db, post_id)
    comment = Comment(post_id=post.id, user_id=_uuid(user_id, "User"), content=content.strip())
    try:
        async with db.begin_nested():
            db.add(comment)
    except IntegrityError:
        raise NotFound("User not found") from None
    post.comments_count = (post.comments_count or 0) + 1
    await db.flush()
    result = await db.execute(
        select(Comment).where(Comment.id == comment.id).options(selectinload(Comment.user))
    )
    comment = result.scalar_one()
    return normalize_comment(row_to_dict(comment, ("user",)))


async def list_comments(gateway: RowStoreGateway, post_id: str, page: int = 1, limit: int = 20) -> CommentPage:
    """Comments oldest first, so a thread reads top to bottom."""
    if page < 1:
        raise InvalidQuery(f"page must be >= 1, got {page}")
    limit = clamp_limit(limit)
    rows = await gateway.fetch_page(
        "post_comments",
        ("user",),
        Eq("post_id", post_id),
        OLDEST_FIRST,
        (page - 1) * limit,
        limit,
    )
    return CommentPage(data=[normalize_comment(r) for r in rows], page=page)
