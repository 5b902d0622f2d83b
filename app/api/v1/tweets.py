from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_current_viewer, get_tweet_service
from app.schemas import ApiResponse, TweetCreate, TweetResponse
from app.services import TweetService

router = APIRouter(prefix="/tweets", tags=["Tweets"])


@router.post("", response_model=ApiResponse[TweetResponse], status_code=201)
async def create_tweet(
    request: TweetCreate,
    viewer_id: UUID = Depends(get_current_viewer),
    tweet_service: TweetService = Depends(get_tweet_service),
):
    tweet = await tweet_service.create(viewer_id, request.content)
    return ApiResponse.build(
        TweetResponse.model_validate(tweet), "Tweet created successfully", status_code=201
    )


@router.get("/user/{user_id}", response_model=ApiResponse[List[TweetResponse]])
async def get_user_tweets(
    user_id: str,
    tweet_service: TweetService = Depends(get_tweet_service),
):
    tweets = await tweet_service.list_for_user(user_id)
    return ApiResponse.build(
        [TweetResponse.model_validate(t) for t in tweets], "Tweets fetched successfully"
    )


@router.delete("/{tweet_id}", response_model=ApiResponse[TweetResponse])
async def delete_tweet(
    tweet_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    tweet_service: TweetService = Depends(get_tweet_service),
):
    tweet = await tweet_service.delete(viewer_id, tweet_id)
    return ApiResponse.build(TweetResponse.model_validate(tweet), "Tweet deleted successfully")
