"""Client state slices: auth, posts, search and user.

Each slice owns its data and exposes explicit mutation methods. Effects that
cross slices are direct calls from the caller, never subscriptions.
"""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from dishcovery.client.cursor import QueryIdentity
from dishcovery.schemas.feed import FeedMode

logger = logging.getLogger(__name__)

Post = dict[str, Any]
CommentItem = dict[str, Any]


@dataclass
class AuthSlice:
    token: str | None = None
    viewer: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.viewer)

    @property
    def viewer_id(self) -> str | None:
        return str(self.viewer["id"]) if self.viewer else None

    def sign_in(self, token: str, viewer: dict[str, Any]) -> None:
        self.token = token
        self.viewer = viewer

    def sign_out(self) -> None:
        self.token = None
        self.viewer = None


@dataclass
class PostsSlice:
    posts: list[Post] = field(default_factory=list)
    comments: dict[str, list[CommentItem]] = field(default_factory=dict)
    notices: list[str] = field(default_factory=list)

    def replace_posts(self, posts: Iterable[Post]) -> None:
        self.posts = [dict(p) for p in posts]

    def append_posts(self, posts: Iterable[Post]) -> None:
        self.posts.extend(dict(p) for p in posts)

    def find(self, post_id: str) -> Post | None:
        for post in self.posts:
            if post.get("id") == post_id:
                return post
        return None

    def update_post(self, post_id: str, changes: dict[str, Any]) -> bool:
        post = self.find(post_id)
        if post is None:
            return False
        post.update(changes)
        return True

    def remove_post(self, post_id: str) -> None:
        self.posts = [p for p in self.posts if p.get("id") != post_id]
        self.comments.pop(post_id, None)

    def comments_for(self, post_id: str) -> list[CommentItem]:
        return self.comments.setdefault(post_id, [])

    def append_comment(self, post_id: str, comment: CommentItem) -> None:
        self.comments_for(post_id).append(comment)

    def replace_comment(self, post_id: str, comment_id: str, comment: CommentItem) -> bool:
        thread = self.comments_for(post_id)
        for i, existing in enumerate(thread):
            if existing.get("id") == comment_id:
                thread[i] = dict(comment)
                return True
        return False

    def remove_comment(self, post_id: str, comment_id: str) -> bool:
        thread = self.comments_for(post_id)
        kept = [c for c in thread if c.get("id") != comment_id]
        removed = len(kept) != len(thread)
        self.comments[post_id] = kept
        return removed

    def notify(self, message: str) -> None:
        """Queue a transient, non-blocking notice for the UI."""
        logger.info("Notice: %s", message)
        self.notices.append(message)

    def drain_notices(self) -> list[str]:
        notices, self.notices = self.notices, []
        return notices


@dataclass
class SearchSlice:
    query: str = ""
    hashtag: str | None = None
    sort: str = "new"

    def set_query(self, q: str) -> None:
        self.query = q
        self.hashtag = None

    def set_hashtag(self, tag: str | None) -> None:
        self.hashtag = tag
        self.query = ""

    def set_sort(self, sort: str) -> None:
        self.sort = sort

    def reset(self) -> None:
        self.query = ""
        self.hashtag = None
        self.sort = "new"

    def identity(self) -> QueryIdentity:
        return QueryIdentity(
            mode=FeedMode.SEARCH,
            q=self.query.strip(),
            hashtag=(self.hashtag or "").strip(),
            sort=self.sort,
        )


@dataclass
class UserSlice:
    user: dict[str, Any] | None = None
    saved_posts: list[Post] = field(default_factory=list)

    def set_user(self, user: dict[str, Any] | None) -> None:
        self.user = user

    def add_saved_post(self, post: Post) -> None:
        if any(p.get("id") == post.get("id") for p in self.saved_posts):
            return
        self.saved_posts.insert(0, dict(post))

    def remove_saved_post(self, post_id: str) -> None:
        self.saved_posts = [p for p in self.saved_posts if p.get("id") != post_id]

    def clear(self) -> None:
        self.user = None
        self.saved_posts = []
