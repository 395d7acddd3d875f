"""Pydantic schemas for User."""
from pydantic import BaseModel

UNKNOWN_AUTHOR_USERNAME = "unknown"


class UserSummary(BaseModel):
    """Author summary embedded in posts and comments."""

    id: str = ""
    username: str = UNKNOWN_AUTHOR_USERNAME
    avatar_url: str = ""


class UserPublic(UserSummary):
    bio: str | None = None
    followers_count: int = 0
    posts_count: int = 0
