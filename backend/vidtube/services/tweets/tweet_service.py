"""
VidTube Tweet Service: short text posts owned by a user.
"""
from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.models.models import Like, Tweet, User
from vidtube.services.videos.video_service import ensure_owner

logger = logging.getLogger(__name__)


def _content(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ApiError(400, "Tweet content is required")
    return value.strip()


class TweetService:

    async def get_or_404(self, db: AsyncSession, tweet_id: uuid.UUID) -> Tweet:
        tweet = await db.get(Tweet, tweet_id)
        if not tweet:
            raise ApiError(404, "Tweet not found")
        return tweet

    async def like_counts(self, db: AsyncSession, tweet_ids: List[uuid.UUID]) -> Dict[uuid.UUID, int]:
        if not tweet_ids:
            return {}
        result = await db.execute(
            select(Like.tweet_id, func.count(Like.id))
            .where(Like.tweet_id.in_(tweet_ids))
            .group_by(Like.tweet_id)
        )
        return {tid: cnt for tid, cnt in result}

    async def create(self, db: AsyncSession, user: User, content: Optional[str]) -> Tweet:
        tweet = Tweet(content=_content(content), owner=user)
        db.add(tweet)
        await db.commit()
        return tweet

    async def list_for_user(
        self, db: AsyncSession, user_id: uuid.UUID, offset: int, limit: int
    ) -> Tuple[List[Tweet], int]:
        if not await db.get(User, user_id):
            raise ApiError(404, "User not found")

        total = await db.scalar(select(func.count(Tweet.id)).where(Tweet.owner_id == user_id)) or 0
        result = await db.execute(
            select(Tweet)
            .where(Tweet.owner_id == user_id)
            .order_by(Tweet.created_at.desc(), Tweet.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def update(self, db: AsyncSession, user: User, tweet_id: uuid.UUID, content: Optional[str]) -> Tweet:
        content = _content(content)
        tweet = await self.get_or_404(db, tweet_id)
        ensure_owner(tweet, user, "update", "tweet")

        tweet.content = content
        await db.commit()
        return tweet

    async def delete(self, db: AsyncSession, user: User, tweet_id: uuid.UUID) -> None:
        tweet = await self.get_or_404(db, tweet_id)
        ensure_owner(tweet, user, "delete", "tweet")

        await db.execute(
            delete(Like).where(Like.tweet_id == tweet_id).execution_options(synchronize_session=False)
        )
        await db.delete(tweet)
        await db.commit()
        logger.info("Tweet %s deleted by %s", tweet_id, user.id)


tweet_service = TweetService()
