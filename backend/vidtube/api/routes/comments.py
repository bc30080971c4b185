"""
VidTube API: Comment Routes

Endpoints for browsing a video's comments and for owner-scoped edits.
"""
from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import Pagination, get_current_user, get_optional_user, pagination, parse_id
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import ApiResponse, CommentOut, CommentPage, ContentRequest, Empty
from vidtube.services.comments.comment_service import comment_service

router = APIRouter(prefix="/comments", tags=["Comments"])


def _to_schema(comment, likes_count: int = 0) -> CommentOut:
    out = CommentOut.model_validate(comment)
    out.likes_count = likes_count
    return out


@router.get("/{video_id}", response_model=ApiResponse[CommentPage])
async def list_video_comments(
    video_id: str,
    page: Pagination = Depends(pagination),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """List comments for a video, newest first."""
    comments, total = await comment_service.list_for_video(
        db, parse_id(video_id, "video"), page.offset, page.limit, viewer
    )
    likes = await comment_service.like_counts(db, [c.id for c in comments])
    total_pages = math.ceil(total / page.limit) if total else 0

    return ApiResponse.ok(
        CommentPage(
            docs=[_to_schema(c, likes.get(c.id, 0)) for c in comments],
            total_docs=total,
            limit=page.limit,
            page=page.page,
            total_pages=total_pages,
            has_next_page=page.page < total_pages,
            has_prev_page=page.page > 1,
        ),
        "Comments fetched successfully",
    )


@router.post("/{video_id}", response_model=ApiResponse[CommentOut], status_code=201)
async def add_comment(
    video_id: str,
    data: ContentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.add(db, user, parse_id(video_id, "video"), data.content)
    return ApiResponse.ok(_to_schema(comment), "Comment added successfully", 201)


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentOut])
async def update_comment(
    comment_id: str,
    data: ContentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cid = parse_id(comment_id, "comment")
    comment = await comment_service.update(db, user, cid, data.content)
    likes = await comment_service.like_counts(db, [cid])
    return ApiResponse.ok(_to_schema(comment, likes.get(cid, 0)), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[Empty])
async def delete_comment(
    comment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete(db, user, parse_id(comment_id, "comment"))
    return ApiResponse.ok(Empty(), "Comment deleted successfully")
