import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgument, NotFound
from app.models import Comment, Video, Visibility, WatchHistoryEntry
from app.services.ids import parse_id

logger = logging.getLogger(__name__)


class VideoService:
    """Video metadata lifecycle. Media files live in the upload service."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def publish(
        self,
        owner_id: UUID,
        title: str,
        description: str,
        video_url: str,
        thumbnail_url: str,
        duration: float = 0,
        category: str = "general",
        visibility: Visibility = Visibility.PUBLIC,
    ) -> Video:
        if not title or not title.strip() or not description or not description.strip():
            raise InvalidArgument("Title or description is missing")
        if not video_url:
            raise InvalidArgument("Video file is missing")
        if not thumbnail_url:
            raise InvalidArgument("Thumbnail is missing")

        video = Video(
            owner_id=owner_id,
            title=title.strip(),
            description=description.strip(),
            video_url=video_url,
            thumbnail_url=thumbnail_url,
            duration=duration,
            category=category,
            visibility=visibility,
        )
        self.db.add(video)
        await self.db.commit()
        await self.db.refresh(video)
        return video

    async def get_owned(self, owner_id: UUID, video_id) -> Video:
        """Fetch a video the caller owns; anything else is reported as not found."""
        video_id = parse_id(video_id, "video id")
        result = await self.db.execute(
            select(Video).where(Video.id == video_id, Video.owner_id == owner_id)
        )
        video = result.scalar_one_or_none()
        if video is None:
            raise NotFound("Video not found or not authorized")
        return video

    async def update(
        self,
        owner_id: UUID,
        video_id,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> Video:
        video = await self.get_owned(owner_id, video_id)
        if title:
            video.title = title.strip()
        if description:
            video.description = description.strip()
        if thumbnail_url:
            video.thumbnail_url = thumbnail_url
        await self.db.commit()
        await self.db.refresh(video)
        return video

    async def set_visibility(self, owner_id: UUID, video_id, visibility: Visibility) -> Video:
        video = await self.get_owned(owner_id, video_id)
        video.visibility = visibility
        await self.db.commit()
        await self.db.refresh(video)
        return video

    async def delete(self, owner_id: UUID, video_id) -> Video:
        """Delete a video and its comments. Watch-history entries are left behind."""
        video = await self.get_owned(owner_id, video_id)
        await self.db.execute(delete(Comment).where(Comment.video_id == video.id))
        await self.db.delete(video)
        await self.db.commit()
        return video

    async def record_view(self, viewer_id: UUID, video_id) -> int:
        """
        Append the video to the viewer's watch history and recompute views.

        views is rewritten from the watch-history count; concurrent viewers
        can race between the count and the write.
        """
        video_id = parse_id(video_id, "video id")
        video = await self.db.get(Video, video_id)
        if video is None:
            raise NotFound("Video not found")

        self.db.add(WatchHistoryEntry(user_id=viewer_id, video_id=video_id))
        await self.db.flush()

        result = await self.db.execute(
            select(func.count(WatchHistoryEntry.id)).where(WatchHistoryEntry.video_id == video_id)
        )
        video.views = result.scalar_one()
        await self.db.commit()

        logger.debug(f"Recomputed views for video {video_id}: {video.views}")
        return video.views
