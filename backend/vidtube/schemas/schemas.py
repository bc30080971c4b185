"""
VidTube API Schemas: Pydantic v2 models for request/response validation.

Fields are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ═══════════════════════════════════════════════════════════════════════
# Envelope
# ═══════════════════════════════════════════════════════════════════════

class ApiResponse(CamelModel, Generic[T]):
    status_code: int = 200
    data: Optional[T] = None
    message: str = "Success"
    success: bool = True

    @classmethod
    def ok(cls, data=None, message: str = "Success", status_code: int = 200) -> "ApiResponse":
        return cls(status_code=status_code, data=data, message=message, success=status_code < 400)


class Empty(CamelModel):
    pass


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


# ═══════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════

class OwnerSummary(CamelModel):
    id: uuid.UUID
    username: str
    full_name: str
    avatar: str


class UserOut(CamelModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    created_at: datetime
    updated_at: datetime


class LoginRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str = ""


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    old_password: str = ""
    new_password: str = ""


class UpdateAccountRequest(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginData(TokenPair):
    user: UserOut


class ChannelProfile(CamelModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    created_at: datetime
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


# ═══════════════════════════════════════════════════════════════════════
# Videos
# ═══════════════════════════════════════════════════════════════════════

class VideoOut(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float = 0.0
    views: int = 0
    is_published: bool = True
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime
    is_preview_mode: Optional[bool] = None


class VideoBrief(CamelModel):
    id: uuid.UUID
    title: str
    thumbnail: str
    duration: float = 0.0
    views: int = 0
    owner: Optional[OwnerSummary] = None
    created_at: Optional[datetime] = None


class VideoList(CamelModel):
    videos: List[VideoOut]
    meta: PageMeta


# ═══════════════════════════════════════════════════════════════════════
# Comments / Tweets
# ═══════════════════════════════════════════════════════════════════════

class ContentRequest(CamelModel):
    content: Optional[str] = None


class CommentOut(CamelModel):
    id: uuid.UUID
    content: str
    video_id: uuid.UUID
    owner: OwnerSummary
    likes_count: int = 0
    created_at: datetime
    updated_at: datetime


class CommentPage(CamelModel):
    docs: List[CommentOut]
    total_docs: int
    limit: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class TweetOut(CamelModel):
    id: uuid.UUID
    content: str
    owner: OwnerSummary
    likes_count: int = 0
    created_at: datetime
    updated_at: datetime


class TweetList(CamelModel):
    tweets: List[TweetOut]
    meta: PageMeta


# ═══════════════════════════════════════════════════════════════════════
# Likes
# ═══════════════════════════════════════════════════════════════════════

class LikeToggle(CamelModel):
    liked: bool
    likes_count: int


class LikedVideo(CamelModel):
    id: uuid.UUID
    video: uuid.UUID
    created_at: datetime
    video_details: Optional[VideoOut] = None


class LikedVideoList(CamelModel):
    likes: List[LikedVideo]
    meta: PageMeta


# ═══════════════════════════════════════════════════════════════════════
# Playlists
# ═══════════════════════════════════════════════════════════════════════

class PlaylistRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistOut(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    owner: OwnerSummary
    videos: List[VideoBrief] = Field(default_factory=list)
    total_videos: int = 0
    created_at: datetime
    updated_at: datetime


# ═══════════════════════════════════════════════════════════════════════
# Subscriptions
# ═══════════════════════════════════════════════════════════════════════

class SubscriptionToggle(CamelModel):
    subscribed: bool


class SubscriberEntry(CamelModel):
    id: uuid.UUID
    subscriber: OwnerSummary
    created_at: datetime


class ChannelEntry(CamelModel):
    id: uuid.UUID
    channel: OwnerSummary
    created_at: datetime


class SubscriberList(CamelModel):
    subscribers: List[SubscriberEntry]
    meta: PageMeta


class ChannelList(CamelModel):
    channels: List[ChannelEntry]
    meta: PageMeta


# ═══════════════════════════════════════════════════════════════════════
# Dashboard
# ═══════════════════════════════════════════════════════════════════════

class ChannelStats(CamelModel):
    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_subscribers: int = 0
    recent_subscribers: List[SubscriberEntry] = Field(default_factory=list)


class DashboardVideo(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    thumbnail: str
    video_file: str
    duration: float = 0.0
    views: int = 0
    is_published: bool = True
    created_at: datetime
    likes_count: int = 0
    comments_count: int = 0


class DashboardVideoList(CamelModel):
    videos: List[DashboardVideo]
    meta: PageMeta
