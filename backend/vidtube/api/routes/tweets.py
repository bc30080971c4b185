"""
VidTube API: Tweet routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import Pagination, get_current_user, pagination, parse_id
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import ApiResponse, ContentRequest, Empty, TweetList, TweetOut
from vidtube.services.tweets.tweet_service import tweet_service

router = APIRouter(prefix="/tweets", tags=["Tweets"])


def _to_schema(tweet, likes_count: int = 0) -> TweetOut:
    out = TweetOut.model_validate(tweet)
    out.likes_count = likes_count
    return out


@router.post("", response_model=ApiResponse[TweetOut], status_code=201)
async def create_tweet(
    data: ContentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tweet = await tweet_service.create(db, user, data.content)
    return ApiResponse.ok(_to_schema(tweet), "Tweet created successfully", 201)


@router.get("/user/{user_id}", response_model=ApiResponse[TweetList])
async def user_tweets(
    user_id: str,
    page: Pagination = Depends(pagination),
    db: AsyncSession = Depends(get_db),
):
    tweets, total = await tweet_service.list_for_user(db, parse_id(user_id, "user"), page.offset, page.limit)
    likes = await tweet_service.like_counts(db, [t.id for t in tweets])
    return ApiResponse.ok(
        TweetList(tweets=[_to_schema(t, likes.get(t.id, 0)) for t in tweets], meta=page.meta(total)),
        "User tweets fetched successfully",
    )


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetOut])
async def update_tweet(
    tweet_id: str,
    data: ContentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tid = parse_id(tweet_id, "tweet")
    tweet = await tweet_service.update(db, user, tid, data.content)
    likes = await tweet_service.like_counts(db, [tid])
    return ApiResponse.ok(_to_schema(tweet, likes.get(tid, 0)), "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[Empty])
async def delete_tweet(
    tweet_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await tweet_service.delete(db, user, parse_id(tweet_id, "tweet"))
    return ApiResponse.ok(Empty(), "Tweet deleted successfully")
