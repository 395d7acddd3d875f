"""Viewer-relative like/save annotation for a batch of posts."""
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from dishcovery.core.exceptions import SocialStateDegraded, StoreError
from dishcovery.db.gateway import RowStoreGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocialState:
    liked: frozenset[str] = field(default_factory=frozenset)
    saved: frozenset[str] = field(default_factory=frozenset)
    degraded: bool = False


class SocialStateResolver:
    """Resolve which posts a viewer liked and saved in two existence queries.

    The query count does not depend on the batch size. Anonymous viewers cost
    nothing. A failed query degrades its set to empty instead of failing the
    page: like/save state is cosmetic, not an access decision.
    """

    def __init__(self, gateway: RowStoreGateway):
        self.gateway = gateway

    async def _existence(self, table: str, viewer_id: str, post_ids: list[str]) -> frozenset[str] | None:
        try:
            found = await self.gateway.fetch_existence_set(table, "post_id", viewer_id, post_ids)
        except StoreError as e:
            logger.warning(
                "%s: %s lookup failed for viewer %s (%d posts): %s",
                SocialStateDegraded.__name__, table, viewer_id, len(post_ids), e,
            )
            return None
        return frozenset(found)

    async def resolve(self, viewer_id: str | None, post_ids: Sequence[str]) -> SocialState:
        if not viewer_id:
            return SocialState()
        ids = list(post_ids)
        liked, saved = await asyncio.gather(
            self._existence("post_likes", viewer_id, ids),
            self._existence("post_saves", viewer_id, ids),
        )
        return SocialState(
            liked=liked or frozenset(),
            saved=saved or frozenset(),
            degraded=liked is None or saved is None,
        )
