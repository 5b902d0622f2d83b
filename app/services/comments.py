from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgument, NotFound
from app.models import Comment, Video
from app.services.ids import parse_id


class CommentService:
    """Comment and reply writes. Reads go through AggregateViewBuilder."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(
        self,
        owner_id: UUID,
        video_id,
        content: str,
        parent_comment_id: Optional[UUID] = None,
    ) -> Comment:
        video_id = parse_id(video_id, "video id")
        if not content or not content.strip():
            raise InvalidArgument("Comment content is required")

        if await self.db.get(Video, video_id) is None:
            raise NotFound("Video not found")

        if parent_comment_id is not None:
            parent = await self.db.get(Comment, parse_id(parent_comment_id, "parent comment id"))
            if parent is None or parent.video_id != video_id:
                raise NotFound("Parent comment not found")

        comment = Comment(
            owner_id=owner_id,
            video_id=video_id,
            content=content.strip(),
            parent_comment_id=parent_comment_id,
        )
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def update(self, owner_id: UUID, comment_id, content: str) -> Comment:
        if not content or not content.strip():
            raise InvalidArgument("Comment content is required")
        comment = await self._get_owned(owner_id, comment_id)
        comment.content = content.strip()
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def delete(self, owner_id: UUID, comment_id) -> Comment:
        """Delete a comment together with its replies, at any depth."""
        comment = await self._get_owned(owner_id, comment_id)

        replies = []
        frontier = [comment.id]
        while frontier:
            result = await self.db.execute(
                select(Comment.id).where(Comment.parent_comment_id.in_(frontier))
            )
            frontier = list(result.scalars().all())
            replies.extend(frontier)
        if replies:
            await self.db.execute(delete(Comment).where(Comment.id.in_(replies)))

        await self.db.delete(comment)
        await self.db.commit()
        return comment

    async def _get_owned(self, owner_id: UUID, comment_id) -> Comment:
        comment_id = parse_id(comment_id, "comment id")
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id, Comment.owner_id == owner_id)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFound("Comment not found or not authorized")
        return comment
