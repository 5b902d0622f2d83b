from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import Conflict, InvalidArgument, NotFound
from app.models import User, WatchHistoryEntry
from app.services.ids import parse_id


class UserService:
    """Channel records and watch history.

    Registration, login and password hashing belong to the auth service;
    create() is the hook it (and the test-suite) uses to persist a user.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        username: str,
        email: str,
        display_name: Optional[str] = None,
        avatar: Optional[str] = None,
        banner: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        if not username or not username.strip() or not email or not email.strip():
            raise InvalidArgument("Username and email are required")

        user = User(
            username=username.strip().lower(),
            email=email.strip().lower(),
            display_name=(display_name or username).strip(),
            avatar=avatar,
            banner=banner,
            password_hash=password_hash,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("User with email or username already exists")
        await self.db.refresh(user)
        return user

    async def get(self, user_id) -> User:
        user = await self.db.get(User, parse_id(user_id, "user id"))
        if user is None:
            raise NotFound("User does not exist")
        return user

    async def remove_from_watch_history(self, viewer_id: UUID, video_id) -> int:
        """Drop every occurrence of the video from the viewer's history."""
        video_id = parse_id(video_id, "video id")
        result = await self.db.execute(
            delete(WatchHistoryEntry).where(
                WatchHistoryEntry.user_id == viewer_id,
                WatchHistoryEntry.video_id == video_id,
            )
        )
        await self.db.commit()
        if result.rowcount == 0:
            raise NotFound("Video not found in watch history")
        return result.rowcount

    async def clear_watch_history(self, viewer_id: UUID) -> int:
        result = await self.db.execute(
            delete(WatchHistoryEntry).where(WatchHistoryEntry.user_id == viewer_id)
        )
        await self.db.commit()
        return result.rowcount

    async def history_video_ids(self, viewer_id: UUID) -> list[UUID]:
        """Raw watch-history sequence, oldest first, repeats included."""
        result = await self.db.execute(
            select(WatchHistoryEntry.video_id)
            .where(WatchHistoryEntry.user_id == viewer_id)
            .order_by(WatchHistoryEntry.id)
        )
        return list(result.scalars().all())
