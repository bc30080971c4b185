"""
VidTube API: Playlist routes.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user, get_optional_user, parse_id
from vidtube.core.database import get_db
from vidtube.models.models import Playlist, User
from vidtube.schemas.schemas import ApiResponse, Empty, PlaylistOut, PlaylistRequest, VideoBrief
from vidtube.services.playlists.playlist_service import playlist_service

router = APIRouter(prefix="/playlist", tags=["Playlists"])


async def _render(
    db: AsyncSession, playlists: List[Playlist], viewer: Optional[User] = None
) -> List[PlaylistOut]:
    viewer_id = viewer.id if viewer is not None else None
    videos = await playlist_service.videos_for(db, [p.id for p in playlists], viewer_id)
    rendered = []
    for p in playlists:
        items = [VideoBrief.model_validate(v) for v in videos.get(p.id, [])]
        out = PlaylistOut.model_validate(p)
        out.videos = items
        out.total_videos = len(items)
        rendered.append(out)
    return rendered


@router.post("", response_model=ApiResponse[PlaylistOut], status_code=201)
async def create_playlist(
    data: PlaylistRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.create(db, user, data.name, data.description)
    (out,) = await _render(db, [playlist], user)
    return ApiResponse.ok(out, "Playlist created successfully", 201)


@router.get("/user/{user_id}", response_model=ApiResponse[List[PlaylistOut]])
async def user_playlists(
    user_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    playlists = await playlist_service.list_for_user(db, parse_id(user_id, "user"))
    return ApiResponse.ok(await _render(db, playlists, viewer), "User playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def get_playlist(
    playlist_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.get_or_404(db, parse_id(playlist_id, "playlist"))
    (out,) = await _render(db, [playlist], viewer)
    return ApiResponse.ok(out, "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.add_video(
        db, user, parse_id(playlist_id, "playlist"), parse_id(video_id, "video")
    )
    (out,) = await _render(db, [playlist], user)
    return ApiResponse.ok(out, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.remove_video(
        db, user, parse_id(playlist_id, "playlist"), parse_id(video_id, "video")
    )
    (out,) = await _render(db, [playlist], user)
    return ApiResponse.ok(out, "Video removed from playlist successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def update_playlist(
    playlist_id: str,
    data: PlaylistRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.update(
        db, user, parse_id(playlist_id, "playlist"), data.name, data.description
    )
    (out,) = await _render(db, [playlist], user)
    return ApiResponse.ok(out, "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[Empty])
async def delete_playlist(
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await playlist_service.delete(db, user, parse_id(playlist_id, "playlist"))
    return ApiResponse.ok(Empty(), "Playlist deleted successfully")
