"""
VidTube Dashboard Service: read-only rollups scoped to the requesting creator.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.models.models import Comment, Like, Subscription, User, Video
from vidtube.services.videos.video_service import SORTABLE_FIELDS, sort_clause

RECENT_SUBSCRIBERS = 10


class DashboardService:

    async def channel_stats(self, db: AsyncSession, user: User) -> Dict:
        video_row = (await db.execute(
            select(func.count(Video.id), func.coalesce(func.sum(Video.views), 0))
            .where(Video.owner_id == user.id)
        )).one()

        total_likes = await db.scalar(
            select(func.count(Like.id))
            .join(Video, Video.id == Like.video_id)
            .where(Video.owner_id == user.id)
        )
        total_subscribers = await db.scalar(
            select(func.count(Subscription.id)).where(Subscription.channel_id == user.id)
        )
        recent = await db.execute(
            select(Subscription)
            .where(Subscription.channel_id == user.id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
            .limit(RECENT_SUBSCRIBERS)
        )

        return {
            "total_videos": video_row[0] or 0,
            "total_views": int(video_row[1] or 0),
            "total_likes": total_likes or 0,
            "total_subscribers": total_subscribers or 0,
            "recent_subscribers": list(recent.scalars().all()),
        }

    async def channel_videos(
        self,
        db: AsyncSession,
        user: User,
        offset: int,
        limit: int,
        sort_by: str = "createdAt",
        sort_type: str = "desc",
    ) -> Tuple[List[Dict], int]:
        """Every video of the creator (published or not) with like and comment counts."""
        likes_count = (
            select(func.count(Like.id)).where(Like.video_id == Video.id).correlate(Video).scalar_subquery()
        )
        comments_count = (
            select(func.count(Comment.id)).where(Comment.video_id == Video.id).correlate(Video).scalar_subquery()
        )
        fields = {
            **SORTABLE_FIELDS,
            "likesCount": likes_count,
            "commentsCount": comments_count,
        }
        order = sort_clause(sort_by, sort_type, fields)

        total = await db.scalar(select(func.count(Video.id)).where(Video.owner_id == user.id)) or 0
        result = await db.execute(
            select(Video, likes_count.label("likes_count"), comments_count.label("comments_count"))
            .where(Video.owner_id == user.id)
            .order_by(order, Video.id)
            .offset(offset)
            .limit(limit)
        )

        rows = []
        for video, likes, comments in result.all():
            rows.append({
                "id": video.id,
                "title": video.title,
                "description": video.description,
                "thumbnail": video.thumbnail,
                "video_file": video.video_file,
                "duration": video.duration,
                "views": video.views,
                "is_published": video.is_published,
                "created_at": video.created_at,
                "likes_count": likes or 0,
                "comments_count": comments or 0,
            })
        return rows, total


dashboard_service = DashboardService()
