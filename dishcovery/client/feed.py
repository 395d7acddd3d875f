"""Feed view model: one pagination cursor feeding the shared posts slice."""
import logging

from dishcovery.client.cursor import PageFetcher, PaginationCursor, QueryIdentity
from dishcovery.client.state import PostsSlice

logger = logging.getLogger(__name__)


class FeedController:
    def __init__(self, fetch: PageFetcher, posts: PostsSlice, identity: QueryIdentity, limit: int = 10):
        self.posts = posts
        self.cursor = PaginationCursor(fetch, identity, limit=limit)

    @property
    def identity(self) -> QueryIdentity:
        return self.cursor.identity

    async def load_more(self) -> bool:
        appended = await self.cursor.load_more()
        if appended:
            self.posts.append_posts(self.cursor.pages[-1].get("data", []))
        return appended

    async def change_identity(self, identity: QueryIdentity) -> bool:
        """Drop everything loaded for the old identity and fetch page 1 of the new one."""
        if identity == self.cursor.identity and self.cursor.pages:
            return False
        logger.debug("Feed identity %s -> %s", self.cursor.identity, identity)
        self.cursor.reset(identity)
        self.posts.replace_posts([])
        return await self.load_more()

    async def refresh(self) -> bool:
        self.cursor.reset()
        self.posts.replace_posts([])
        return await self.load_more()
