from dishcovery.schemas.user import UserSummary, UserPublic
from dishcovery.schemas.restaurant import RestaurantSummary
from dishcovery.schemas.post import PostResponse, LikeState, SaveState
from dishcovery.schemas.comment import CommentCreate, CommentResponse, CommentPage
from dishcovery.schemas.feed import FeedPage, FeedMode, TrendingSort, SearchSort
