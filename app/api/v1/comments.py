from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import (
    get_comment_service,
    get_current_viewer,
    get_optional_viewer,
    get_view_builder,
)
from app.schemas import (
    ApiResponse,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    CommentView,
)
from app.services import AggregateViewBuilder, CommentService
from app.services.pagination import paginate, total_pages

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("/{video_id}", response_model=ApiResponse[List[CommentView]])
async def get_video_comments(
    video_id: str,
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort: Optional[str] = Query(default=None),
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    """Comments and replies of a video, flattened, one page at a time."""
    window = paginate(page, limit, sort)
    comments, total = await views.comments_for_video(
        video_id, window.page, window.take, window.direction, viewer_id
    )
    return ApiResponse.build(
        comments,
        "Comments fetched successfully",
        meta={
            "totalCommentsCount": total,
            "page": window.page,
            "limit": window.take,
            "totalPages": total_pages(total, window.take),
        },
    )


@router.post("/{video_id}", response_model=ApiResponse[CommentResponse], status_code=201)
async def add_comment(
    video_id: str,
    request: CommentCreate,
    viewer_id: UUID = Depends(get_current_viewer),
    comment_service: CommentService = Depends(get_comment_service),
):
    comment = await comment_service.add(
        owner_id=viewer_id,
        video_id=video_id,
        content=request.content,
        parent_comment_id=request.parent_comment_id,
    )
    return ApiResponse.build(
        CommentResponse.model_validate(comment), "Comment created successfully", status_code=201
    )


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: str,
    request: CommentUpdate,
    viewer_id: UUID = Depends(get_current_viewer),
    comment_service: CommentService = Depends(get_comment_service),
):
    comment = await comment_service.update(viewer_id, comment_id, request.content)
    return ApiResponse.build(CommentResponse.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[CommentResponse])
async def delete_comment(
    comment_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    comment_service: CommentService = Depends(get_comment_service),
):
    comment = await comment_service.delete(viewer_id, comment_id)
    return ApiResponse.build(CommentResponse.model_validate(comment), "Comment deleted successfully")
