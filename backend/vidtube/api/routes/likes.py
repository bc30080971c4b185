"""
VidTube API: Like routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import Pagination, get_current_user, pagination, parse_id
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import ApiResponse, LikedVideo, LikedVideoList, LikeToggle, VideoOut
from vidtube.services.likes.like_service import like_service

router = APIRouter(prefix="/likes", tags=["Likes"])


async def _toggle(db: AsyncSession, user: User, target: str, raw_id: str, label: str) -> ApiResponse:
    liked, count = await like_service.toggle(db, user, target, parse_id(raw_id, target))
    message = f"{label} liked successfully" if liked else f"{label} unliked successfully"
    return ApiResponse.ok(LikeToggle(liked=liked, likes_count=count), message)


@router.post("/toggle/v/{video_id}", response_model=ApiResponse[LikeToggle])
async def toggle_video_like(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, user, "video", video_id, "Video")


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse[LikeToggle])
async def toggle_comment_like(
    comment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, user, "comment", comment_id, "Comment")


@router.post("/toggle/t/{tweet_id}", response_model=ApiResponse[LikeToggle])
async def toggle_tweet_like(
    tweet_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, user, "tweet", tweet_id, "Tweet")


@router.get("/videos", response_model=ApiResponse[LikedVideoList])
async def liked_videos(
    page: Pagination = Depends(pagination),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Videos the current user has liked, most recent like first."""
    rows, total = await like_service.liked_videos(db, user, page.offset, page.limit)
    likes = [
        LikedVideo(
            id=like.id,
            video=like.video_id,
            created_at=like.created_at,
            video_details=VideoOut.model_validate(video),
        )
        for like, video in rows
    ]
    return ApiResponse.ok(LikedVideoList(likes=likes, meta=page.meta(total)), "Liked videos fetched successfully")
