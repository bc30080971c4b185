"""
VidTube Like Service: toggle pattern over a single likes table.

A Like row targets exactly one of video / comment / tweet. Its presence
means "liked"; toggling deletes it if present and creates it otherwise.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.models.models import Comment, Like, Tweet, User, Video
from vidtube.services.videos.video_service import video_service

logger = logging.getLogger(__name__)

TARGETS = {
    "video": (Video, Like.video_id, "Video"),
    "comment": (Comment, Like.comment_id, "Comment"),
    "tweet": (Tweet, Like.tweet_id, "Tweet"),
}


class LikeService:

    async def count(self, db: AsyncSession, target: str, target_id: uuid.UUID) -> int:
        _, column, _ = TARGETS[target]
        return await db.scalar(select(func.count(Like.id)).where(column == target_id)) or 0

    async def _ensure_target(self, db: AsyncSession, user: User, target: str, target_id: uuid.UUID) -> None:
        """404 unless the target exists; videos and their comments must also be visible to ``user``."""
        model, _, label = TARGETS[target]
        record = await db.get(model, target_id)
        if not record:
            raise ApiError(404, f"{label} not found")
        if target == "video":
            await video_service.get_visible_or_404(db, target_id, user)
        elif target == "comment":
            visible = await db.scalar(
                select(Video.id).where(Video.id == record.video_id, Video.visible_to(user.id))
            )
            if not visible:
                raise ApiError(404, f"{label} not found")

    async def _is_liked(self, db: AsyncSession, column, target_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await db.scalar(
            select(Like.id).where(column == target_id, Like.liked_by_id == user_id)
        ) is not None

    async def toggle(self, db: AsyncSession, user: User, target: str, target_id: uuid.UUID) -> Tuple[bool, int]:
        """Flip the like state of ``target_id`` for ``user``; returns (liked, likes_count)."""
        model, column, label = TARGETS[target]
        user_id = user.id
        await self._ensure_target(db, user, target, target_id)

        existing = await db.scalar(
            select(Like).where(column == target_id, Like.liked_by_id == user_id)
        )
        if existing:
            await db.delete(existing)
            liked = False
        else:
            db.add(Like(liked_by_id=user_id, **{column.key: target_id}))
            liked = True

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            # either a concurrent toggle inserted the same like, or the target vanished
            if not await db.scalar(select(model.id).where(model.id == target_id)):
                raise ApiError(404, f"{label} not found")
            liked = await self._is_liked(db, column, target_id, user_id)
            logger.info("Like toggle on %s %s raced; liked=%s", target, target_id, liked)

        return liked, await self.count(db, target, target_id)

    async def liked_videos(
        self, db: AsyncSession, user: User, offset: int, limit: int
    ) -> Tuple[List[Tuple[Like, Video]], int]:
        conditions = (Like.liked_by_id == user.id, Video.visible_to(user.id))
        total = await db.scalar(
            select(func.count(Like.id)).join(Video, Video.id == Like.video_id).where(*conditions)
        ) or 0
        result = await db.execute(
            select(Like, Video)
            .join(Video, Video.id == Like.video_id)
            .where(*conditions)
            .order_by(Like.created_at.desc(), Like.id)
            .offset(offset)
            .limit(limit)
        )
        return [(like, video) for like, video in result.all()], total


like_service = LikeService()
