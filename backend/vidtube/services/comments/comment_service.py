"""
VidTube Comment Service.
"""
from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.models.models import Comment, Like, User, Video
from vidtube.services.videos.video_service import ensure_owner, video_service

logger = logging.getLogger(__name__)


def _content(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ApiError(400, "Comment content is required")
    return value.strip()


class CommentService:

    async def get_or_404(self, db: AsyncSession, comment_id: uuid.UUID) -> Comment:
        comment = await db.get(Comment, comment_id)
        if not comment:
            raise ApiError(404, "Comment not found")
        return comment

    async def like_counts(self, db: AsyncSession, comment_ids: List[uuid.UUID]) -> Dict[uuid.UUID, int]:
        if not comment_ids:
            return {}
        result = await db.execute(
            select(Like.comment_id, func.count(Like.id))
            .where(Like.comment_id.in_(comment_ids))
            .group_by(Like.comment_id)
        )
        return {cid: cnt for cid, cnt in result}

    async def list_for_video(
        self,
        db: AsyncSession,
        video_id: uuid.UUID,
        offset: int,
        limit: int,
        viewer: Optional[User] = None,
    ) -> Tuple[List[Comment], int]:
        await video_service.get_visible_or_404(db, video_id, viewer)

        total = await db.scalar(
            select(func.count(Comment.id)).where(Comment.video_id == video_id)
        ) or 0
        result = await db.execute(
            select(Comment)
            .where(Comment.video_id == video_id)
            .order_by(Comment.created_at.desc(), Comment.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def add(self, db: AsyncSession, user: User, video_id: uuid.UUID, content: Optional[str]) -> Comment:
        content = _content(content)
        await video_service.get_visible_or_404(db, video_id, user)

        comment = Comment(content=content, video_id=video_id, owner=user)
        db.add(comment)
        await db.commit()
        return comment

    async def update(self, db: AsyncSession, user: User, comment_id: uuid.UUID, content: Optional[str]) -> Comment:
        content = _content(content)
        comment = await self.get_or_404(db, comment_id)
        ensure_owner(comment, user, "update", "comment")

        comment.content = content
        await db.commit()
        return comment

    async def delete(self, db: AsyncSession, user: User, comment_id: uuid.UUID) -> None:
        """The comment's author or the owner of the video may delete it."""
        comment = await self.get_or_404(db, comment_id)
        video_owner = await db.scalar(select(Video.owner_id).where(Video.id == comment.video_id))
        if comment.owner_id != user.id and video_owner != user.id:
            raise ApiError(403, "You don't have permission to delete this comment")

        await db.execute(
            delete(Like).where(Like.comment_id == comment_id).execution_options(synchronize_session=False)
        )
        await db.delete(comment)
        await db.commit()
        logger.info("Comment %s deleted by %s", comment_id, user.id)


comment_service = CommentService()
