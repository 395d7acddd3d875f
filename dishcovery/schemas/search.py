"""Universal search result items - tagged union (post | user | restaurant | hashtag)."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from dishcovery.schemas.post import PostResponse
from dishcovery.schemas.restaurant import RestaurantSummary
from dishcovery.schemas.user import UserPublic


class SearchItemPost(BaseModel):
    type: Literal["post"] = "post"
    post: PostResponse


class SearchItemUser(BaseModel):
    type: Literal["user"] = "user"
    user: UserPublic


class SearchItemRestaurant(BaseModel):
    type: Literal["restaurant"] = "restaurant"
    restaurant: RestaurantSummary


class SearchItemHashtag(BaseModel):
    type: Literal["hashtag"] = "hashtag"
    tag: str


SearchItem = Annotated[
    Union[SearchItemPost, SearchItemUser, SearchItemRestaurant, SearchItemHashtag],
    Field(discriminator="type"),
]


class SearchResults(BaseModel):
    data: list[SearchItem]
    count: int
    query: str
    filter: str
    type: str
