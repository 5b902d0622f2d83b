from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgument, NotFound
from app.models import Tweet
from app.services.ids import parse_id


class TweetService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: UUID, content: str) -> Tweet:
        if not content or not content.strip():
            raise InvalidArgument("Tweet content is required")
        tweet = Tweet(owner_id=owner_id, content=content.strip())
        self.db.add(tweet)
        await self.db.commit()
        await self.db.refresh(tweet)
        return tweet

    async def list_for_user(self, user_id) -> list[Tweet]:
        user_id = parse_id(user_id, "user id")
        result = await self.db.execute(
            select(Tweet).where(Tweet.owner_id == user_id).order_by(Tweet.created_at.desc(), Tweet.id)
        )
        return list(result.scalars().all())

    async def delete(self, owner_id: UUID, tweet_id) -> Tweet:
        tweet_id = parse_id(tweet_id, "tweet id")
        result = await self.db.execute(
            select(Tweet).where(Tweet.id == tweet_id, Tweet.owner_id == owner_id)
        )
        tweet = result.scalar_one_or_none()
        if tweet is None:
            raise NotFound("Tweet not found or not authorized")
        await self.db.delete(tweet)
        await self.db.commit()
        return tweet
