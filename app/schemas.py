from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from app.models import Visibility

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Serialized with camelCase keys, populated by field name or alias."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ============ Envelopes ============

class ApiResponse(CamelModel, Generic[DataT]):
    status_code: int = 200
    data: DataT
    meta: dict[str, Any] = Field(default_factory=dict)
    message: str = "Success"
    success: bool = True

    @classmethod
    def build(
        cls,
        data: Any,
        message: str = "Success",
        meta: Optional[dict] = None,
        status_code: int = 200,
    ) -> "ApiResponse":
        return cls(
            status_code=status_code,
            data=data,
            meta=meta or {},
            message=message,
            success=status_code < 400,
        )


class ErrorResponse(CamelModel):
    status_code: int
    message: str
    success: bool = False
    errors: List[Any] = Field(default_factory=list)


# ============ People ============

class OwnerSummary(CamelModel):
    id: UUID
    username: str
    display_name: str
    avatar: Optional[str] = None


class ChannelSummary(OwnerSummary):
    subscribers_count: int = 0


class VideoOwner(OwnerSummary):
    banner: Optional[str] = None
    subscribers_count: int = 0
    is_subscribed: bool = False


class ChannelView(CamelModel):
    id: UUID
    username: str
    display_name: str
    avatar: Optional[str] = None
    banner: Optional[str] = None
    created_at: datetime
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


# ============ Videos ============

class VideoSummary(CamelModel):
    id: UUID
    title: str
    video_url: str
    thumbnail_url: str
    duration: float
    views: int
    visibility: Visibility
    created_at: datetime
    owner: OwnerSummary


class VideoView(CamelModel):
    id: UUID
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    duration: float
    views: int
    visibility: Visibility
    category: str
    created_at: datetime
    updated_at: datetime
    owner: VideoOwner
    likes: int = 0
    dislikes: int = 0
    is_liked: bool = False
    is_disliked: bool = False


class VideoResponse(CamelModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    duration: float
    views: int
    visibility: Visibility
    category: str
    created_at: datetime
    updated_at: datetime


class VideoCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    video_url: str = Field(..., description="URL returned by the upload service")
    thumbnail_url: str = Field(..., description="URL returned by the upload service")
    duration: float = Field(default=0, ge=0)
    category: str = Field(default="general", max_length=100)
    visibility: Visibility = Visibility.PUBLIC


class VideoUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    thumbnail_url: Optional[str] = None


class VisibilityUpdate(CamelModel):
    visibility: Visibility


# ============ Comments ============

class CommentView(CamelModel):
    id: UUID
    content: str
    video_id: UUID
    parent_comment_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
    owner: OwnerSummary
    likes: int = 0
    dislikes: int = 0
    is_liked: bool = False
    is_disliked: bool = False


class CommentResponse(CamelModel):
    id: UUID
    content: str
    video_id: UUID
    owner_id: UUID
    parent_comment_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)
    parent_comment_id: Optional[UUID] = None


class CommentUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


# ============ Reactions & subscriptions ============

class LikeState(CamelModel):
    is_liked: bool
    likes: Optional[int] = None


class DislikeState(CamelModel):
    is_disliked: bool
    dislikes: Optional[int] = None


class SubscriptionState(CamelModel):
    is_subscribed: bool
    subscribers_count: int


# ============ Tweets ============

class TweetCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=500)


class TweetResponse(CamelModel):
    id: UUID
    owner_id: UUID
    content: str
    created_at: datetime


# ============ Playlists ============

class PlaylistCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    videos: List[UUID] = []


class PlaylistUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)


class PlaylistVideosRequest(CamelModel):
    playlist_ids: List[UUID] = Field(..., min_length=1)
    video_id: UUID


class PlaylistResponse(CamelModel):
    id: UUID
    owner_id: UUID
    name: str
    description: str
    thumbnail: Optional[str] = None
    videos: List[UUID] = []
    created_at: datetime


class PlaylistUpdateResult(CamelModel):
    modified_count: int


# ============ Health ============

class HealthResponse(BaseModel):
    status: str
    database: str
