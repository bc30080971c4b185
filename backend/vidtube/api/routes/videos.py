"""
VidTube API: Video routes.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import Pagination, get_current_user, get_optional_user, pagination, parse_id
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import ApiResponse, Empty, VideoList, VideoOut
from vidtube.services.media.storage_service import MediaStorage, get_media_storage
from vidtube.services.videos.video_service import video_service

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.get("", response_model=ApiResponse[VideoList])
async def list_videos(
    page: Pagination = Depends(pagination),
    query: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_type: str = Query("desc", alias="sortType", pattern="^(asc|desc)$"),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    """List published videos with search, owner filter, sorting and pagination."""
    owner_id = parse_id(user_id, "user") if user_id else None
    videos, total = await video_service.list_videos(
        db, page.offset, page.limit, query=query, sort_by=sort_by, sort_type=sort_type, owner_id=owner_id
    )
    return ApiResponse.ok(
        VideoList(videos=[VideoOut.model_validate(v) for v in videos], meta=page.meta(total)),
        "Videos fetched successfully",
    )


@router.post("", response_model=ApiResponse[VideoOut], status_code=201)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    duration: Optional[float] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    video = await video_service.publish(
        db, storage, user, title, description, video_file, thumbnail, duration=duration
    )
    return ApiResponse.ok(VideoOut.model_validate(video), "Video published successfully", 201)


@router.get("/{video_id}", response_model=ApiResponse[VideoOut])
async def get_video(
    video_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Fetch one video; guests receive it in preview mode without counting a view."""
    video = await video_service.view(db, parse_id(video_id, "video"), viewer)
    out = VideoOut.model_validate(video)
    if viewer is None:
        out.is_preview_mode = True
    return ApiResponse.ok(out, "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoOut])
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    video = await video_service.update(
        db, storage, user, parse_id(video_id, "video"),
        title=title, description=description, thumbnail=thumbnail,
    )
    return ApiResponse.ok(VideoOut.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[Empty])
async def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    await video_service.delete(db, storage, user, parse_id(video_id, "video"))
    return ApiResponse.ok(Empty(), "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoOut])
async def toggle_publish(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await video_service.toggle_publish(db, user, parse_id(video_id, "video"))
    state = "published" if video.is_published else "unpublished"
    return ApiResponse.ok(VideoOut.model_validate(video), f"Video {state} successfully")
