from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_current_viewer, get_playlist_service
from app.models import Playlist
from app.schemas import (
    ApiResponse,
    PlaylistCreate,
    PlaylistResponse,
    PlaylistUpdate,
    PlaylistUpdateResult,
    PlaylistVideosRequest,
)
from app.services import PlaylistService

router = APIRouter(prefix="/playlist", tags=["Playlists"])


def _to_response(playlist: Playlist) -> PlaylistResponse:
    return PlaylistResponse(
        id=playlist.id,
        owner_id=playlist.owner_id,
        name=playlist.name,
        description=playlist.description,
        thumbnail=playlist.thumbnail,
        videos=[entry.video_id for entry in playlist.entries],
        created_at=playlist.created_at,
    )


@router.post("", response_model=ApiResponse[PlaylistResponse], status_code=201)
async def create_playlist(
    request: PlaylistCreate,
    viewer_id: UUID = Depends(get_current_viewer),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    playlist = await playlist_service.create(
        viewer_id, request.name, request.description, request.videos
    )
    return ApiResponse.build(_to_response(playlist), "Playlist created successfully", status_code=201)


@router.get("/user/{user_id}", response_model=ApiResponse[List[PlaylistResponse]])
async def get_user_playlists(
    user_id: str,
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    playlists = await playlist_service.list_for_user(user_id)
    return ApiResponse.build([_to_response(p) for p in playlists], "Playlists fetched successfully")


@router.patch("/add", response_model=ApiResponse[PlaylistUpdateResult])
async def add_video_to_playlists(
    request: PlaylistVideosRequest,
    viewer_id: UUID = Depends(get_current_viewer),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    modified = await playlist_service.add_video(viewer_id, request.playlist_ids, request.video_id)
    return ApiResponse.build(
        PlaylistUpdateResult(modified_count=modified),
        "Video added to selected playlists successfully",
    )


@router.patch("/remove", response_model=ApiResponse[PlaylistUpdateResult])
async def remove_video_from_playlists(
    request: PlaylistVideosRequest,
    viewer_id: UUID = Depends(get_current_viewer),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    modified = await playlist_service.remove_video(viewer_id, request.playlist_ids, request.video_id)
    return ApiResponse.build(
        PlaylistUpdateResult(modified_count=modified),
        "Video removed from selected playlists successfully",
    )


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def get_playlist_by_id(
    playlist_id: str,
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    playlist = await playlist_service.get(playlist_id)
    return ApiResponse.build(_to_response(playlist), "Playlist fetched successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def update_playlist(
    playlist_id: str,
    request: PlaylistUpdate,
    viewer_id: UUID = Depends(get_current_viewer),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    playlist = await playlist_service.update(
        viewer_id, playlist_id, name=request.name, description=request.description
    )
    return ApiResponse.build(_to_response(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def delete_playlist(
    playlist_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    playlist = await playlist_service.delete(viewer_id, playlist_id)
    return ApiResponse.build(_to_response(playlist), "Playlist deleted successfully")
