"""Pydantic schemas for Comment."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from dishcovery.schemas.user import UserSummary


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment content must not be blank")
        return value


class CommentResponse(BaseModel):
    id: str
    post_id: str
    content: str
    created_at: datetime | None = None
    user: UserSummary = Field(default_factory=UserSummary)


class CommentPage(BaseModel):
    data: list[CommentResponse]
    page: int
