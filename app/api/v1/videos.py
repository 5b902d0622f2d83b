from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import (
    get_current_viewer,
    get_optional_viewer,
    get_video_service,
    get_view_builder,
)
from app.api.v1.comments import get_video_comments
from app.schemas import (
    ApiResponse,
    CommentView,
    VideoCreate,
    VideoResponse,
    VideoSummary,
    VideoUpdate,
    VideoView,
    VisibilityUpdate,
)
from app.services import AggregateViewBuilder, VideoService
from app.services.ids import parse_id
from app.services.pagination import paginate, total_pages

router = APIRouter(prefix="/videos", tags=["Videos"])


def _page_meta(page, limit, sort, total: int) -> dict:
    window = paginate(page, limit, sort)
    return {
        "currentPage": window.page,
        "totalPages": total_pages(total, window.take),
        "pageSize": window.take,
        "totalItems": total,
    }


@router.get("", response_model=ApiResponse[List[VideoSummary]])
async def get_all_videos(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort: Optional[str] = Query(default=None, alias="sortType"),
    query: Optional[str] = Query(default=None),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    """Public videos, newest first, with optional channel filter and title search."""
    owner_id = parse_id(user_id, "userId") if user_id else None
    videos, total = await views.video_feed(page, limit, sort, query, owner_id, viewer_id)
    return ApiResponse.build(
        videos, "All videos fetched successfully", meta=_page_meta(page, limit, sort, total)
    )


@router.post("", response_model=ApiResponse[VideoResponse], status_code=201)
async def publish_video(
    request: VideoCreate,
    viewer_id: UUID = Depends(get_current_viewer),
    video_service: VideoService = Depends(get_video_service),
):
    """Create a video from URLs produced by the upload service."""
    video = await video_service.publish(
        owner_id=viewer_id,
        title=request.title,
        description=request.description,
        video_url=request.video_url,
        thumbnail_url=request.thumbnail_url,
        duration=request.duration,
        category=request.category,
        visibility=request.visibility,
    )
    return ApiResponse.build(
        VideoResponse.model_validate(video), "Video uploaded successfully", status_code=201
    )


@router.get("/subscriptions", response_model=ApiResponse[List[VideoSummary]])
async def get_videos_from_subscriptions(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort: Optional[str] = Query(default=None, alias="sortType"),
    viewer_id: UUID = Depends(get_current_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    videos, total = await views.subscription_feed(viewer_id, page, limit, sort)
    return ApiResponse.build(
        videos, "All videos fetched successfully", meta=_page_meta(page, limit, sort, total)
    )


@router.get("/auth/user", response_model=ApiResponse[List[VideoSummary]])
async def get_own_videos(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort: Optional[str] = Query(default=None, alias="sortType"),
    viewer_id: UUID = Depends(get_current_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    """The viewer's own videos, whatever their visibility."""
    videos, total = await views.video_feed(page, limit, sort, owner_id=viewer_id, viewer_id=viewer_id)
    return ApiResponse.build(
        videos, "Videos fetched successfully", meta=_page_meta(page, limit, sort, total)
    )


@router.get("/user/{user_id}", response_model=ApiResponse[List[VideoSummary]])
async def get_user_videos(
    user_id: str,
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort: Optional[str] = Query(default=None, alias="sortType"),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    owner_id = parse_id(user_id, "user id")
    videos, total = await views.video_feed(page, limit, sort, owner_id=owner_id, viewer_id=viewer_id)
    return ApiResponse.build(
        videos, "Videos fetched successfully", meta=_page_meta(page, limit, sort, total)
    )


@router.patch("/toggle/visibility/{video_id}", response_model=ApiResponse[VideoResponse])
async def toggle_visibility(
    video_id: str,
    request: VisibilityUpdate,
    viewer_id: UUID = Depends(get_current_viewer),
    video_service: VideoService = Depends(get_video_service),
):
    video = await video_service.set_visibility(viewer_id, video_id, request.visibility)
    return ApiResponse.build(VideoResponse.model_validate(video), "Visibility updated")


@router.get("/{video_id}", response_model=ApiResponse[VideoView])
async def get_video_by_id(
    video_id: str,
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    video_service: VideoService = Depends(get_video_service),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    """Video detail; an authenticated view is recorded in the watch history first."""
    if viewer_id is not None:
        await video_service.record_view(viewer_id, video_id)
    video = await views.video_detail(video_id, viewer_id)
    return ApiResponse.build(video, "Video found successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoResponse])
async def update_video(
    video_id: str,
    request: VideoUpdate,
    viewer_id: UUID = Depends(get_current_viewer),
    video_service: VideoService = Depends(get_video_service),
):
    video = await video_service.update(
        viewer_id,
        video_id,
        title=request.title,
        description=request.description,
        thumbnail_url=request.thumbnail_url,
    )
    return ApiResponse.build(VideoResponse.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[VideoResponse])
async def delete_video(
    video_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    video_service: VideoService = Depends(get_video_service),
):
    video = await video_service.delete(viewer_id, video_id)
    return ApiResponse.build(VideoResponse.model_validate(video), "Video deleted successfully")


@router.get("/{video_id}/comments", response_model=ApiResponse[List[CommentView]])
async def get_comments_of_video(
    video_id: str,
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort: Optional[str] = Query(default=None),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    """Same listing as GET /comments/{video_id}."""
    return await get_video_comments(video_id, page, limit, sort, viewer_id, views)
