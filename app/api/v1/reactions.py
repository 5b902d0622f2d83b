from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_current_viewer, get_toggle_engine, get_view_builder
from app.exceptions import InvalidArgument
from app.models import Predicate, TargetKind
from app.schemas import ApiResponse, DislikeState, LikeState, VideoSummary
from app.services import AggregateViewBuilder, ToggleEngine

# Path codes used by the client: /toggle/v/{id}, /toggle/c/{id}, /toggle/t/{id}
KIND_CODES = {
    "v": TargetKind.VIDEO,
    "c": TargetKind.COMMENT,
    "t": TargetKind.TWEET,
}


def _resolve_kind(code: str) -> TargetKind:
    try:
        return KIND_CODES[code]
    except KeyError:
        raise InvalidArgument(f"Unknown target kind '{code}'")


likes_router = APIRouter(prefix="/likes", tags=["Likes"])
dislikes_router = APIRouter(prefix="/dislikes", tags=["Dislikes"])


@likes_router.post("/toggle/{kind}/{target_id}", response_model=ApiResponse[LikeState])
async def toggle_like(
    kind: str,
    target_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    """Like the target, or remove the like if already present."""
    result = await engine.toggle(viewer_id, Predicate.LIKE, _resolve_kind(kind), target_id)
    message = "Like created successfully" if result.active else "Like removed successfully"
    return ApiResponse.build(LikeState(is_liked=result.active, likes=result.count), message)


@likes_router.get("/videos", response_model=ApiResponse[List[VideoSummary]])
async def get_liked_videos(
    viewer_id: UUID = Depends(get_current_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    videos = await views.liked_videos(viewer_id)
    return ApiResponse.build(videos, "Liked videos fetched")


@likes_router.delete("/videos", response_model=ApiResponse[List[VideoSummary]])
async def clear_liked_videos(
    viewer_id: UUID = Depends(get_current_viewer),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    """Remove every like made by the viewer."""
    removed = await engine.clear(viewer_id, Predicate.LIKE)
    return ApiResponse.build([], "All likes made by you are removed", meta={"removed": removed})


@dislikes_router.post("/toggle/{kind}/{target_id}", response_model=ApiResponse[DislikeState])
async def toggle_dislike(
    kind: str,
    target_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    """Dislike the target, or remove the dislike if already present."""
    result = await engine.toggle(viewer_id, Predicate.DISLIKE, _resolve_kind(kind), target_id)
    message = "Dislike created successfully" if result.active else "Dislike removed successfully"
    return ApiResponse.build(DislikeState(is_disliked=result.active, dislikes=result.count), message)


@dislikes_router.get("/videos", response_model=ApiResponse[List[VideoSummary]])
async def get_disliked_videos(
    viewer_id: UUID = Depends(get_current_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    videos = await views.reacted_videos(viewer_id, Predicate.DISLIKE)
    return ApiResponse.build(videos, "Disliked videos fetched")
