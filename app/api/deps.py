from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import verify_token
from app.database import get_db
from app.exceptions import Unauthorized
from app.models import User
from app.services import (
    AggregateViewBuilder,
    CommentService,
    PlaylistService,
    ToggleEngine,
    TweetService,
    UserService,
    VideoService,
)

# Tokens are issued by the auth service; this one only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/users/login", auto_error=False)


async def get_optional_viewer(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[UUID]:
    """Viewer id from the bearer token, or None for anonymous requests."""
    if not token:
        return None

    payload = verify_token(token)
    if payload is None:
        raise Unauthorized("Invalid authentication token")

    try:
        viewer_id = UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid authentication token")

    if await db.get(User, viewer_id) is None:
        raise Unauthorized("Invalid access token")
    return viewer_id


async def get_current_viewer(
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
) -> UUID:
    if viewer_id is None:
        raise Unauthorized()
    return viewer_id


async def get_toggle_engine(db: AsyncSession = Depends(get_db)) -> ToggleEngine:
    """Dependency for ToggleEngine."""
    return ToggleEngine(db)


async def get_view_builder(db: AsyncSession = Depends(get_db)) -> AggregateViewBuilder:
    """Dependency for AggregateViewBuilder."""
    return AggregateViewBuilder(db)


async def get_video_service(db: AsyncSession = Depends(get_db)) -> VideoService:
    """Dependency for VideoService."""
    return VideoService(db)


async def get_comment_service(db: AsyncSession = Depends(get_db)) -> CommentService:
    """Dependency for CommentService."""
    return CommentService(db)


async def get_tweet_service(db: AsyncSession = Depends(get_db)) -> TweetService:
    """Dependency for TweetService."""
    return TweetService(db)


async def get_playlist_service(db: AsyncSession = Depends(get_db)) -> PlaylistService:
    """Dependency for PlaylistService."""
    return PlaylistService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Dependency for UserService."""
    return UserService(db)
