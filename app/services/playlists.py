from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import InvalidArgument, NotFound
from app.models import Playlist, PlaylistVideo, Video
from app.services.ids import parse_id


class PlaylistService:
    """Playlists hold an ordered, duplicate-free list of videos."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        owner_id: UUID,
        name: str,
        description: str,
        videos: Optional[list[UUID]] = None,
    ) -> Playlist:
        if not name or not name.strip() or not description or not description.strip():
            raise InvalidArgument("Playlist name and description are required")

        playlist = Playlist(owner_id=owner_id, name=name.strip(), description=description.strip())
        self.db.add(playlist)
        await self.db.flush()

        existing = await self._existing_videos(videos or [])
        # Keep first occurrence only
        for position, video_id in enumerate(vid for vid in dict.fromkeys(videos or []) if vid in existing):
            self.db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=position))
        await self._set_thumbnail(playlist)
        await self.db.commit()
        return await self.get(playlist.id)

    async def get(self, playlist_id) -> Playlist:
        playlist_id = parse_id(playlist_id, "playlist id")
        result = await self.db.execute(
            select(Playlist)
            .where(Playlist.id == playlist_id)
            .options(selectinload(Playlist.entries))
            .execution_options(populate_existing=True)
        )
        playlist = result.scalar_one_or_none()
        if playlist is None:
            raise NotFound("Playlist not found")
        return playlist

    async def list_for_user(self, user_id) -> list[Playlist]:
        user_id = parse_id(user_id, "user id")
        result = await self.db.execute(
            select(Playlist)
            .where(Playlist.owner_id == user_id)
            .options(selectinload(Playlist.entries))
            .order_by(Playlist.created_at.desc(), Playlist.id)
        )
        return list(result.scalars().all())

    async def update(
        self,
        owner_id: UUID,
        playlist_id,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Playlist:
        playlist = await self._get_owned(owner_id, playlist_id)
        if name:
            playlist.name = name.strip()
        if description:
            playlist.description = description.strip()
        await self.db.commit()
        return await self.get(playlist.id)

    async def delete(self, owner_id: UUID, playlist_id) -> Playlist:
        playlist = await self._get_owned(owner_id, playlist_id)
        await self.db.delete(playlist)
        await self.db.commit()
        return playlist

    async def add_video(self, owner_id: UUID, playlist_ids: list[UUID], video_id) -> int:
        """Append the video to each of the caller's playlists that lacks it.

        Returns the number of playlists modified.
        """
        video_id = parse_id(video_id, "video id")
        if not playlist_ids:
            raise InvalidArgument("Playlist id and video id are required")
        if await self.db.get(Video, video_id) is None:
            raise NotFound("Video not found")

        modified = 0
        for playlist in await self._owned_many(owner_id, playlist_ids):
            if any(entry.video_id == video_id for entry in playlist.entries):
                continue
            position = await self._next_position(playlist.id)
            self.db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=position))
            await self._set_thumbnail(playlist)
            modified += 1

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise

        if not modified:
            raise InvalidArgument("Failed to add video to any playlist")
        return modified

    async def remove_video(self, owner_id: UUID, playlist_ids: list[UUID], video_id) -> int:
        video_id = parse_id(video_id, "video id")
        if not playlist_ids:
            raise InvalidArgument("Playlist id and video id are required")

        owned = [playlist.id for playlist in await self._owned_many(owner_id, playlist_ids)]
        if not owned:
            raise InvalidArgument("Failed to remove video from any playlist")

        result = await self.db.execute(
            delete(PlaylistVideo).where(
                PlaylistVideo.playlist_id.in_(owned),
                PlaylistVideo.video_id == video_id,
            )
        )
        await self.db.commit()
        if not result.rowcount:
            raise InvalidArgument("Failed to remove video from any playlist")
        return result.rowcount

    async def _get_owned(self, owner_id: UUID, playlist_id) -> Playlist:
        playlist = await self.get(playlist_id)
        if playlist.owner_id != owner_id:
            raise NotFound("Playlist not found or not authorized")
        return playlist

    async def _owned_many(self, owner_id: UUID, playlist_ids: list[UUID]) -> list[Playlist]:
        result = await self.db.execute(
            select(Playlist)
            .where(Playlist.id.in_(list(playlist_ids)), Playlist.owner_id == owner_id)
            .options(selectinload(Playlist.entries))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _next_position(self, playlist_id: UUID) -> int:
        result = await self.db.execute(
            select(func.max(PlaylistVideo.position)).where(PlaylistVideo.playlist_id == playlist_id)
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def _existing_videos(self, video_ids: list[UUID]) -> set[UUID]:
        if not video_ids:
            return set()
        result = await self.db.execute(select(Video.id).where(Video.id.in_(list(video_ids))))
        return set(result.scalars().all())

    async def _set_thumbnail(self, playlist: Playlist) -> None:
        """A playlist without a thumbnail borrows the one of its first video."""
        if playlist.thumbnail:
            return
        await self.db.flush()
        result = await self.db.execute(
            select(Video.thumbnail_url)
            .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
            .where(PlaylistVideo.playlist_id == playlist.id)
            .order_by(PlaylistVideo.position)
            .limit(1)
        )
        playlist.thumbnail = result.scalar_one_or_none()
