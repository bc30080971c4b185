"""
VidTube Subscription Service: user-to-channel follow edges (toggle pattern).
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.models.models import Subscription, User

logger = logging.getLogger(__name__)


class SubscriptionService:

    async def _channel_or_404(self, db: AsyncSession, channel_id: uuid.UUID) -> User:
        channel = await db.get(User, channel_id)
        if not channel:
            raise ApiError(404, "Channel not found")
        return channel

    async def toggle(self, db: AsyncSession, user: User, channel_id: uuid.UUID) -> bool:
        """Subscribe if absent, unsubscribe if present; returns the new state."""
        user_id = user.id
        await self._channel_or_404(db, channel_id)
        if channel_id == user_id:
            raise ApiError(400, "You cannot subscribe to yourself")

        existing = await db.scalar(
            select(Subscription).where(
                Subscription.subscriber_id == user_id, Subscription.channel_id == channel_id
            )
        )
        if existing:
            await db.delete(existing)
            subscribed = False
        else:
            db.add(Subscription(subscriber_id=user_id, channel_id=channel_id))
            subscribed = True

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            # either a concurrent toggle inserted the same edge, or the channel vanished
            await self._channel_or_404(db, channel_id)
            subscribed = await db.scalar(
                select(Subscription.id).where(
                    Subscription.subscriber_id == user_id, Subscription.channel_id == channel_id
                )
            ) is not None

        logger.info("User %s %s channel %s", user_id, "subscribed to" if subscribed else "unsubscribed from", channel_id)
        return subscribed

    async def subscribers(
        self, db: AsyncSession, channel_id: uuid.UUID, offset: int, limit: int
    ) -> Tuple[List[Subscription], int]:
        await self._channel_or_404(db, channel_id)
        condition = Subscription.channel_id == channel_id
        total = await db.scalar(select(func.count(Subscription.id)).where(condition)) or 0
        result = await db.execute(
            select(Subscription)
            .where(condition)
            .order_by(Subscription.created_at.desc(), Subscription.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def subscribed_channels(
        self, db: AsyncSession, subscriber_id: uuid.UUID, offset: int, limit: int
    ) -> Tuple[List[Subscription], int]:
        condition = Subscription.subscriber_id == subscriber_id
        total = await db.scalar(select(func.count(Subscription.id)).where(condition)) or 0
        result = await db.execute(
            select(Subscription)
            .where(condition)
            .order_by(Subscription.created_at.desc(), Subscription.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total


subscription_service = SubscriptionService()
