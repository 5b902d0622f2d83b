"""Services package."""

from app.services.comments import CommentService
from app.services.playlists import PlaylistService
from app.services.relationships import RelationshipStore, Target
from app.services.toggle import ToggleEngine, ToggleResult
from app.services.tweets import TweetService
from app.services.users import UserService
from app.services.videos import VideoService
from app.services.views import AggregateViewBuilder

__all__ = [
    "AggregateViewBuilder",
    "CommentService",
    "PlaylistService",
    "RelationshipStore",
    "Target",
    "ToggleEngine",
    "ToggleResult",
    "TweetService",
    "UserService",
    "VideoService",
]
