"""
VidTube API: Subscription routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import Pagination, get_current_user, pagination, parse_id
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import (
    ApiResponse,
    ChannelEntry,
    ChannelList,
    SubscriberEntry,
    SubscriberList,
    SubscriptionToggle,
)
from vidtube.services.subscriptions.subscription_service import subscription_service

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggle])
async def toggle_subscription(
    channel_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscribed = await subscription_service.toggle(db, user, parse_id(channel_id, "channel"))
    message = "Subscribed successfully" if subscribed else "Unsubscribed successfully"
    return ApiResponse.ok(SubscriptionToggle(subscribed=subscribed), message)


@router.get("/c/{channel_id}", response_model=ApiResponse[SubscriberList])
async def channel_subscribers(
    channel_id: str,
    page: Pagination = Depends(pagination),
    db: AsyncSession = Depends(get_db),
):
    subs, total = await subscription_service.subscribers(
        db, parse_id(channel_id, "channel"), page.offset, page.limit
    )
    return ApiResponse.ok(
        SubscriberList(subscribers=[SubscriberEntry.model_validate(s) for s in subs], meta=page.meta(total)),
        "Subscribers fetched successfully",
    )


@router.get("/u/{subscriber_id}", response_model=ApiResponse[ChannelList])
async def subscribed_channels(
    subscriber_id: str,
    page: Pagination = Depends(pagination),
    db: AsyncSession = Depends(get_db),
):
    subs, total = await subscription_service.subscribed_channels(
        db, parse_id(subscriber_id, "subscriber"), page.offset, page.limit
    )
    return ApiResponse.ok(
        ChannelList(channels=[ChannelEntry.model_validate(s) for s in subs], meta=page.meta(total)),
        "Subscribed channels fetched successfully",
    )
