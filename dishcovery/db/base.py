"""SQLAlchemy declarative base and model imports for Alembic."""
from dishcovery.db.session import Base  # noqa: F401
from dishcovery.models.user import User  # noqa: F401
from dishcovery.models.restaurant import Restaurant  # noqa: F401
from dishcovery.models.post import Post  # noqa: F401
from dishcovery.models.comment import Comment  # noqa: F401
from dishcovery.models.engagement import PostLike, PostSave  # noqa: F401

__all__ = ["Base", "User", "Restaurant", "Post", "Comment", "PostLike", "PostSave"]
