from dishcovery.models.user import User
from dishcovery.models.restaurant import Restaurant
from dishcovery.models.post import Post
from dishcovery.models.comment import Comment
from dishcovery.models.engagement import PostLike, PostSave

__all__ = ["User", "Restaurant", "Post", "Comment", "PostLike", "PostSave"]
