from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_viewer,
    get_optional_viewer,
    get_user_service,
    get_view_builder,
)
from app.schemas import ApiResponse, ChannelView, OwnerSummary, VideoSummary
from app.services import AggregateViewBuilder, UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/c/{username}", response_model=ApiResponse[ChannelView])
async def get_user_channel_profile(
    username: str,
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    channel = await views.channel_profile(username, viewer_id)
    return ApiResponse.build(channel, "Channel fetched successfully")


@router.get("/history/videos", response_model=ApiResponse[List[VideoSummary]])
async def get_watch_history(
    viewer_id: UUID = Depends(get_current_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    history = await views.watch_history(viewer_id)
    return ApiResponse.build(history, "Watch history fetched successfully")


@router.patch("/history/remove/{video_id}", response_model=ApiResponse[list])
async def remove_video_from_watch_history(
    video_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.remove_from_watch_history(viewer_id, video_id)
    return ApiResponse.build([], "Video removed from watch history")


@router.patch("/history/clear", response_model=ApiResponse[list])
async def clear_watch_history(
    viewer_id: UUID = Depends(get_current_viewer),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.clear_watch_history(viewer_id)
    return ApiResponse.build([], "Cleared watch history")


@router.get("/{user_id}", response_model=ApiResponse[OwnerSummary])
async def get_user_by_id(
    user_id: str,
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.get(user_id)
    return ApiResponse.build(OwnerSummary.model_validate(user), "User fetched successfully")
