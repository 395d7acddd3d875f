"""Optimistic like/save/comment with exact rollback.

Every operation follows the same three steps:

1. apply the new local value to the posts slice synchronously;
2. await the remote write;
3. on success keep it (comments: swap the placeholder for the server row by
   its temporary id), on failure restore the prior value exactly and post a
   transient notice. A cancelled write is restored too, without a notice.

Only one edit per (entity, kind) may be in flight; extra taps are ignored.
Remote writes use set/unset (POST/DELETE) rather than toggles, so the intent
of each call is explicit.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from dishcovery.client.api import DishcoveryClient
from dishcovery.client.state import AuthSlice, PostsSlice, UserSlice

logger = logging.getLogger(__name__)

LIKE_FAILED_NOTICE = "Could not update like. Please try again."
SAVE_FAILED_NOTICE = "Could not update saved posts. Please try again."
COMMENT_FAILED_NOTICE = "Could not send comment. Please try again."


class EditKind(str, Enum):
    LIKE = "like"
    SAVE = "save"
    COMMENT = "comment-create"


class MutationOutcome(str, Enum):
    ACCEPTED = "accepted"
    REVERTED = "reverted"
    IGNORED = "ignored"


@dataclass
class OptimisticEdit:
    entity_id: str
    kind: EditKind
    prior: dict[str, Any]
    applied: dict[str, Any]
    temp_id: str | None = None


class OptimisticMutationController:
    def __init__(
        self,
        api: DishcoveryClient,
        posts: PostsSlice,
        user: UserSlice | None = None,
        auth: AuthSlice | None = None,
    ):
        self.api = api
        self.posts = posts
        self.user = user
        self.auth = auth
        self.in_flight: dict[tuple[str, EditKind], OptimisticEdit] = {}

    def is_pending(self, entity_id: str, kind: EditKind) -> bool:
        return (entity_id, kind) in self.in_flight

    def _begin(self, edit: OptimisticEdit) -> None:
        self.in_flight[(edit.entity_id, edit.kind)] = edit

    def _settle(self, edit: OptimisticEdit) -> None:
        self.in_flight.pop((edit.entity_id, edit.kind), None)

    async def _toggle(
        self,
        post_id: str,
        kind: EditKind,
        flag: str,
        count_field: str,
        notice: str,
    ) -> MutationOutcome:
        if self.is_pending(post_id, kind):
            logger.debug("Ignoring re-entrant %s on %s", kind.value, post_id)
            return MutationOutcome.IGNORED
        post = self.posts.find(post_id)
        if post is None:
            logger.warning("%s on unknown post %s", kind.value, post_id)
            return MutationOutcome.IGNORED

        was_set = bool(post.get(flag, False))
        count = int(post.get(count_field) or 0)
        prior = {flag: was_set, count_field: count}
        applied = {flag: not was_set, count_field: max(0, count - 1) if was_set else count + 1}
        edit = OptimisticEdit(post_id, kind, prior, applied)

        self._begin(edit)
        self.posts.update_post(post_id, applied)
        try:
            if kind == EditKind.LIKE:
                write = self.api.unlike_post if was_set else self.api.like_post
            else:
                write = self.api.unsave_post if was_set else self.api.save_post
            result = await write(post_id)
        except asyncio.CancelledError:
            self.posts.update_post(post_id, edit.prior)
            raise
        except Exception as e:
            logger.info("%s on %s failed, reverting: %s", kind.value, post_id, e)
            self.posts.update_post(post_id, edit.prior)
            self.posts.notify(notice)
            return MutationOutcome.REVERTED
        finally:
            self._settle(edit)

        if isinstance(result, dict) and count_field in result:
            self.posts.update_post(post_id, {count_field: int(result[count_field] or 0)})
        return MutationOutcome.ACCEPTED

    async def toggle_like(self, post_id: str) -> MutationOutcome:
        return await self._toggle(post_id, EditKind.LIKE, "is_liked", "likes_count", LIKE_FAILED_NOTICE)

    async def toggle_save(self, post_id: str) -> MutationOutcome:
        outcome = await self._toggle(post_id, EditKind.SAVE, "is_saved", "saves_count", SAVE_FAILED_NOTICE)
        if outcome == MutationOutcome.ACCEPTED and self.user is not None:
            post = self.posts.find(post_id)
            if post and post.get("is_saved"):
                self.user.add_saved_post(post)
            else:
                self.user.remove_saved_post(post_id)
        return outcome

    def _author(self) -> dict[str, Any]:
        viewer = self.auth.viewer if self.auth and self.auth.viewer else {}
        return {
            "id": str(viewer.get("id", "")),
            "username": viewer.get("username") or "unknown",
            "avatar_url": viewer.get("avatar_url") or "",
        }

    async def send_comment(self, post_id: str, content: str) -> MutationOutcome:
        text = (content or "").strip()
        if not text or self.is_pending(post_id, EditKind.COMMENT):
            return MutationOutcome.IGNORED

        temp_id = f"temp-{uuid.uuid4().hex}"
        placeholder = {
            "id": temp_id,
            "post_id": post_id,
            "content": text,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "user": self._author(),
            "pending": True,
        }
        post = self.posts.find(post_id)
        prior = {"comments_count": int(post.get("comments_count") or 0)} if post else {}
        applied = {"comments_count": prior["comments_count"] + 1} if post else {}
        edit = OptimisticEdit(post_id, EditKind.COMMENT, prior, applied, temp_id=temp_id)

        self._begin(edit)
        self.posts.append_comment(post_id, placeholder)
        if applied:
            self.posts.update_post(post_id, applied)
        try:
            comment = await self.api.create_comment(post_id, text)
        except asyncio.CancelledError:
            self._discard_comment(edit)
            raise
        except Exception as e:
            logger.info("comment on %s failed, removing placeholder: %s", post_id, e)
            self._discard_comment(edit)
            self.posts.notify(COMMENT_FAILED_NOTICE)
            return MutationOutcome.REVERTED
        finally:
            self._settle(edit)

        if isinstance(comment, dict) and comment.get("id"):
            confirmed = {k: v for k, v in comment.items() if k != "pending"}
        else:
            # Accepted without a row to show; keep the local copy as final.
            logger.warning("comment on %s accepted with empty body", post_id)
            confirmed = {k: v for k, v in placeholder.items() if k != "pending"}
        self.posts.replace_comment(post_id, temp_id, confirmed)
        return MutationOutcome.ACCEPTED

    def _discard_comment(self, edit: OptimisticEdit) -> None:
        self.posts.remove_comment(edit.entity_id, edit.temp_id)
        if edit.prior:
            self.posts.update_post(edit.entity_id, edit.prior)
