"""
VidTube API: Creator dashboard routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import Pagination, get_current_user, pagination
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import ApiResponse, ChannelStats, DashboardVideo, DashboardVideoList, SubscriberEntry
from vidtube.services.dashboard.dashboard_service import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=ApiResponse[ChannelStats])
async def channel_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Totals across the caller's channel plus the latest subscribers."""
    stats = await dashboard_service.channel_stats(db, user)
    recent = [SubscriberEntry.model_validate(s) for s in stats.pop("recent_subscribers")]
    return ApiResponse.ok(
        ChannelStats(**stats, recent_subscribers=recent),
        "Channel stats fetched successfully",
    )


@router.get("/videos", response_model=ApiResponse[DashboardVideoList])
async def channel_videos(
    page: Pagination = Depends(pagination),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_type: str = Query("desc", alias="sortType", pattern="^(asc|desc)$"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, total = await dashboard_service.channel_videos(
        db, user, page.offset, page.limit, sort_by=sort_by, sort_type=sort_type
    )
    return ApiResponse.ok(
        DashboardVideoList(videos=[DashboardVideo(**r) for r in rows], meta=page.meta(total)),
        "Channel videos fetched successfully",
    )
