from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgument, NotFound
from app.models import Comment, Predicate, TargetKind, User, Video, Visibility
from app.schemas import (
    ChannelSummary, ChannelView, CommentView, OwnerSummary,
    VideoOwner, VideoSummary, VideoView
)
from app.services.ids import parse_id
from app.services.pagination import paginate
from app.services.relationships import RelationshipStore, Target
from app.services.users import UserService


class AggregateViewBuilder:
    """
    Denormalized, viewer-relative reads.

    Every join is done by fetching the primary rows, batch-fetching the
    related rows and counts, and assembling in memory. Results depend on
    viewer_id and must never be shared between viewers.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = RelationshipStore(db)

    # ============ Videos ============

    async def video_detail(self, video_id, viewer_id: Optional[UUID] = None) -> VideoView:
        video_id = parse_id(video_id, "video id")
        result = await self.db.execute(select(Video).where(Video.id == video_id))
        video = result.scalar_one_or_none()
        if video is None:
            raise NotFound("Video not found")

        owner = await self.db.get(User, video.owner_id)
        channel = Target(TargetKind.CHANNEL, owner.id)
        target = Target(TargetKind.VIDEO, video.id)

        return VideoView(
            id=video.id,
            title=video.title,
            description=video.description,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            duration=video.duration,
            views=video.views,
            visibility=video.visibility,
            category=video.category,
            created_at=video.created_at,
            updated_at=video.updated_at,
            owner=VideoOwner(
                id=owner.id,
                username=owner.username,
                display_name=owner.display_name,
                avatar=owner.avatar,
                banner=owner.banner,
                subscribers_count=await self.store.count_edges(Predicate.SUBSCRIBE, channel),
                is_subscribed=await self.store.has_edge(viewer_id, Predicate.SUBSCRIBE, channel),
            ),
            likes=await self.store.count_edges(Predicate.LIKE, target),
            dislikes=await self.store.count_edges(Predicate.DISLIKE, target),
            is_liked=await self.store.has_edge(viewer_id, Predicate.LIKE, target),
            is_disliked=await self.store.has_edge(viewer_id, Predicate.DISLIKE, target),
        )

    async def video_feed(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
        query: Optional[str] = None,
        owner_id: Optional[UUID] = None,
        viewer_id: Optional[UUID] = None,
    ) -> tuple[list[VideoSummary], int]:
        """Public videos, optionally of one owner and matching a title search.

        An owner listing their own channel also sees private and unlisted videos.
        """
        window = paginate(page, limit, sort)

        filters = []
        if owner_id is not None:
            filters.append(Video.owner_id == owner_id)
        if owner_id is None or owner_id != viewer_id:
            filters.append(Video.visibility == Visibility.PUBLIC)
        if query:
            filters.append(Video.title.ilike(f"%{query}%"))

        total = await self._count(Video.id, filters)
        result = await self.db.execute(
            window.apply(select(Video).where(*filters), Video.created_at, Video.id)
        )
        return await self._video_summaries(result.scalars().all()), total

    async def subscription_feed(
        self,
        viewer_id: UUID,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> tuple[list[VideoSummary], int]:
        """Public videos from channels the viewer subscribes to."""
        window = paginate(page, limit, sort)
        channel_ids = await self.store.targets_of(viewer_id, Predicate.SUBSCRIBE, TargetKind.CHANNEL)
        if not channel_ids:
            return [], 0

        filters = [Video.owner_id.in_(channel_ids), Video.visibility == Visibility.PUBLIC]
        total = await self._count(Video.id, filters)
        result = await self.db.execute(
            window.apply(select(Video).where(*filters), Video.created_at, Video.id)
        )
        return await self._video_summaries(result.scalars().all()), total

    async def reacted_videos(self, viewer_id: UUID, predicate: Predicate) -> list[VideoSummary]:
        """Videos the viewer holds a like (or dislike) on, oldest reaction first."""
        video_ids = await self.store.targets_of(viewer_id, predicate, TargetKind.VIDEO)
        videos = await self._videos_by_id(video_ids)
        return await self._video_summaries(videos[vid] for vid in video_ids if vid in videos)

    async def liked_videos(self, viewer_id: UUID) -> list[VideoSummary]:
        return await self.reacted_videos(viewer_id, Predicate.LIKE)

    async def watch_history(self, viewer_id: UUID) -> list[VideoSummary]:
        """
        Resolve the watch-history sequence in watch order.

        Each video appears once, at its first position; entries whose video
        no longer exists are dropped.
        """
        history = await UserService(self.db).history_video_ids(viewer_id)
        ordered = list(dict.fromkeys(history))
        videos = await self._videos_by_id(ordered)
        return await self._video_summaries(videos[vid] for vid in ordered if vid in videos)

    # ============ Comments ============

    async def comments_for_video(
        self,
        video_id,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
        viewer_id: Optional[UUID] = None,
    ) -> tuple[list[CommentView], int]:
        """One page of a video's comments and replies, flattened, plus the total."""
        video_id = parse_id(video_id, "video id")
        window = paginate(page, limit, sort)

        filters = [Comment.video_id == video_id]
        total = await self._count(Comment.id, filters)
        result = await self.db.execute(
            window.apply(select(Comment).where(*filters), Comment.created_at, Comment.id)
        )
        comments = list(result.scalars().all())

        ids = [comment.id for comment in comments]
        owners = await self._users_by_id({comment.owner_id for comment in comments})
        likes = await self.store.count_by_target(Predicate.LIKE, TargetKind.COMMENT, ids)
        dislikes = await self.store.count_by_target(Predicate.DISLIKE, TargetKind.COMMENT, ids)
        liked = await self.store.subject_targets(viewer_id, Predicate.LIKE, TargetKind.COMMENT, ids)
        disliked = await self.store.subject_targets(viewer_id, Predicate.DISLIKE, TargetKind.COMMENT, ids)

        views = [
            CommentView(
                id=comment.id,
                content=comment.content,
                video_id=comment.video_id,
                parent_comment_id=comment.parent_comment_id,
                created_at=comment.created_at,
                updated_at=comment.updated_at,
                owner=_owner_summary(owners[comment.owner_id]),
                likes=likes.get(comment.id, 0),
                dislikes=dislikes.get(comment.id, 0),
                is_liked=comment.id in liked,
                is_disliked=comment.id in disliked,
            )
            for comment in comments
        ]
        return views, total

    # ============ Channels ============

    async def channel_profile(self, username: str, viewer_id: Optional[UUID] = None) -> ChannelView:
        if not username or not username.strip():
            raise InvalidArgument("username is missing")

        result = await self.db.execute(
            select(User).where(func.lower(User.username) == username.strip().lower())
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("Channel does not exist")

        channel = Target(TargetKind.CHANNEL, user.id)
        return ChannelView(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            avatar=user.avatar,
            banner=user.banner,
            created_at=user.created_at,
            subscribers_count=await self.store.count_edges(Predicate.SUBSCRIBE, channel),
            channels_subscribed_to_count=await self.store.count_by_subject(
                Predicate.SUBSCRIBE, TargetKind.CHANNEL, user.id
            ),
            is_subscribed=await self.store.has_edge(viewer_id, Predicate.SUBSCRIBE, channel),
        )

    async def subscribed_channels(self, subscriber_id) -> list[ChannelSummary]:
        """Channels the subscriber follows, each with its own subscriber count."""
        subscriber_id = parse_id(subscriber_id, "subscriber id")
        channel_ids = await self.store.targets_of(subscriber_id, Predicate.SUBSCRIBE, TargetKind.CHANNEL)
        users = await self._users_by_id(channel_ids)
        counts = await self.store.count_by_target(Predicate.SUBSCRIBE, TargetKind.CHANNEL, channel_ids)
        return [
            ChannelSummary(
                id=users[cid].id,
                username=users[cid].username,
                display_name=users[cid].display_name,
                avatar=users[cid].avatar,
                subscribers_count=counts.get(cid, 0),
            )
            for cid in channel_ids
            if cid in users
        ]

    async def channel_subscribers(self, channel_id) -> list[OwnerSummary]:
        channel = Target(TargetKind.CHANNEL, parse_id(channel_id, "channel id"))
        await self.store.ensure_target(channel)
        subscriber_ids = await self.store.subjects_of(Predicate.SUBSCRIBE, channel)
        users = await self._users_by_id(subscriber_ids)
        return [_owner_summary(users[sid]) for sid in subscriber_ids if sid in users]

    # ============ Helpers ============

    async def _count(self, column, filters) -> int:
        result = await self.db.execute(select(func.count(column)).where(*filters))
        return result.scalar_one()

    async def _users_by_id(self, user_ids: Iterable[UUID]) -> dict[UUID, User]:
        ids = list(user_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    async def _videos_by_id(self, video_ids: Iterable[UUID]) -> dict[UUID, Video]:
        ids = list(video_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Video).where(Video.id.in_(ids)))
        return {video.id: video for video in result.scalars().all()}

    async def _video_summaries(self, videos: Iterable[Video]) -> list[VideoSummary]:
        videos = list(videos)
        owners = await self._users_by_id({video.owner_id for video in videos})
        return [
            VideoSummary(
                id=video.id,
                title=video.title,
                video_url=video.video_url,
                thumbnail_url=video.thumbnail_url,
                duration=video.duration,
                views=video.views,
                visibility=video.visibility,
                created_at=video.created_at,
                owner=_owner_summary(owners[video.owner_id]),
            )
            for video in videos
        ]


def _owner_summary(user: User) -> OwnerSummary:
    return OwnerSummary(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        avatar=user.avatar,
    )
