"""API dependencies: viewer identity, db session, feed services."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dishcovery.core.security import viewer_id_from_token
from dishcovery.db.gateway import RowStoreGateway, SqlAlchemyGateway
from dishcovery.db.session import async_session_maker, get_db  # noqa: F401
from dishcovery.services.feed_service import FeedAssembler
from dishcovery.services.restaurant_service import RestaurantService
from dishcovery.services.search_service import SearchService
from dishcovery.services.social_state import SocialStateResolver

security = HTTPBearer(auto_error=False)


async def get_viewer_id_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    if not credentials:
        return None
    return viewer_id_from_token(credentials.credentials)


async def get_viewer_id(
    viewer_id: str | None = Depends(get_viewer_id_optional),
) -> str:
    if viewer_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return viewer_id


def get_gateway() -> RowStoreGateway:
    return SqlAlchemyGateway(async_session_maker)


def get_feed_assembler(gateway: RowStoreGateway = Depends(get_gateway)) -> FeedAssembler:
    return FeedAssembler(gateway, SocialStateResolver(gateway))


def get_search_service(gateway: RowStoreGateway = Depends(get_gateway)) -> SearchService:
    return SearchService(gateway, SocialStateResolver(gateway))


def get_restaurant_service(gateway: RowStoreGateway = Depends(get_gateway)) -> RestaurantService:
    return RestaurantService(gateway)
