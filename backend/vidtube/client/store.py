"""
VidTube client state: one slice per feature area, fed by ``VidTubeClient``.

Every action follows the same lifecycle: mark the slice loading and clear
its error, await the API call, then either write the result into the slice
or record the failure message. Nothing is applied before the server answers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional

from vidtube.client.api import ApiClientError, FileTuple, VidTubeClient

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# Slices
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Slice:
    is_loading: bool = False
    error: Optional[str] = None

    def clear_error(self) -> None:
        self.error = None


@dataclass
class AuthSlice(Slice):
    user: Optional[Dict] = None
    is_authenticated: bool = False
    channel_profile: Optional[Dict] = None
    watch_history: List[Dict] = field(default_factory=list)

    def clear_credentials(self) -> None:
        self.user = None
        self.is_authenticated = False
        self.channel_profile = None
        self.watch_history = []


@dataclass
class VideoSlice(Slice):
    videos: List[Dict] = field(default_factory=list)
    current_video: Optional[Dict] = None
    total_videos: int = 0
    total_pages: int = 0
    current_page: int = 1


@dataclass
class CommentSlice(Slice):
    comments: List[Dict] = field(default_factory=list)
    total_comments: int = 0
    total_pages: int = 0
    current_page: int = 1
    has_next_page: bool = False
    has_prev_page: bool = False


@dataclass
class LikeSlice(Slice):
    liked_videos: List[Dict] = field(default_factory=list)
    video_likes: Dict[str, Dict] = field(default_factory=dict)
    comment_likes: Dict[str, Dict] = field(default_factory=dict)
    tweet_likes: Dict[str, Dict] = field(default_factory=dict)
    total_liked_videos: int = 0


@dataclass
class PlaylistSlice(Slice):
    playlists: List[Dict] = field(default_factory=list)
    current_playlist: Optional[Dict] = None


@dataclass
class SubscriptionSlice(Slice):
    subscribers: List[Dict] = field(default_factory=list)
    subscribed_channels: List[Dict] = field(default_factory=list)
    subscription_status: Dict[str, bool] = field(default_factory=dict)
    total_subscribers: int = 0
    total_channels: int = 0


@dataclass
class TweetSlice(Slice):
    tweets: List[Dict] = field(default_factory=list)
    total_tweets: int = 0


@dataclass
class DashboardSlice(Slice):
    stats: Dict[str, Any] = field(default_factory=dict)
    channel_videos: List[Dict] = field(default_factory=list)
    total_channel_videos: int = 0
    total_pages: int = 0


def _replace(items: List[Dict], updated: Dict) -> List[Dict]:
    return [updated if item.get("id") == updated.get("id") else item for item in items]


def _without(items: List[Dict], item_id: str) -> List[Dict]:
    return [item for item in items if item.get("id") != item_id]


# ═══════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════

class Store:
    """Application state container; actions return the API payload or ``None`` on failure."""

    def __init__(self, client: VidTubeClient):
        self.client = client
        self.auth = AuthSlice()
        self.video = VideoSlice()
        self.comment = CommentSlice()
        self.like = LikeSlice()
        self.playlist = PlaylistSlice()
        self.subscription = SubscriptionSlice()
        self.tweet = TweetSlice()
        self.dashboard = DashboardSlice()

    async def _run(self, slice_: Slice, call: Awaitable[Any]) -> Any:
        slice_.is_loading = True
        slice_.error = None
        try:
            return await call
        except ApiClientError as e:
            logger.debug("Store action failed (%s): %s", e.status_code, e.message)
            slice_.error = e.message
            return None
        finally:
            slice_.is_loading = False

    # ── Auth ─────────────────────────────────────────────────────────────

    async def register(self, full_name: str, email: str, username: str, password: str,
                       avatar: FileTuple, cover_image: Optional[FileTuple] = None):
        return await self._run(
            self.auth, self.client.register(full_name, email, username, password, avatar, cover_image)
        )

    async def login(self, password: str, username: Optional[str] = None, email: Optional[str] = None):
        result = await self._run(self.auth, self.client.login(password, username=username, email=email))
        if result is not None:
            self.auth.user = result["user"]
            self.auth.is_authenticated = True
        else:
            self.auth.is_authenticated = False
        return result

    async def logout(self):
        await self._run(self.auth, self.client.logout())
        # Credentials are dropped even when the server call fails.
        self.auth.clear_credentials()

    async def refresh_token(self):
        result = await self._run(self.auth, self.client.refresh())
        if result is None:
            self.auth.clear_credentials()
        return result

    async def fetch_current_user(self):
        user = await self._run(self.auth, self.client.current_user())
        if user is not None:
            self.auth.user = user
            self.auth.is_authenticated = True
        return user

    async def change_password(self, old_password: str, new_password: str) -> bool:
        await self._run(self.auth, self.client.change_password(old_password, new_password))
        return self.auth.error is None

    async def update_account(self, full_name: Optional[str] = None, email: Optional[str] = None):
        user = await self._run(self.auth, self.client.update_account(full_name, email))
        if user is not None:
            self.auth.user = user
        return user

    async def update_avatar(self, avatar: FileTuple):
        user = await self._run(self.auth, self.client.update_avatar(avatar))
        if user is not None:
            self.auth.user = user
        return user

    async def update_cover_image(self, cover_image: FileTuple):
        user = await self._run(self.auth, self.client.update_cover_image(cover_image))
        if user is not None:
            self.auth.user = user
        return user

    async def fetch_channel_profile(self, username: str):
        profile = await self._run(self.auth, self.client.channel_profile(username))
        if profile is not None:
            self.auth.channel_profile = profile
        return profile

    async def fetch_watch_history(self):
        history = await self._run(self.auth, self.client.watch_history())
        if history is not None:
            self.auth.watch_history = history
        return history

    # ── Videos ───────────────────────────────────────────────────────────

    async def fetch_videos(self, page: int = 1, limit: int = 10, **filters):
        result = await self._run(self.video, self.client.list_videos(page=page, limit=limit, **filters))
        if result is not None:
            self.video.videos = result["videos"]
            self.video.total_videos = result["meta"]["total"]
            self.video.total_pages = result["meta"]["totalPages"]
            self.video.current_page = result["meta"]["page"]
        return result

    async def fetch_video(self, video_id: str):
        video = await self._run(self.video, self.client.get_video(video_id))
        if video is not None:
            self.video.current_video = video
        return video

    async def publish_video(self, title: str, description: str, video_file: FileTuple,
                            thumbnail: FileTuple, duration: Optional[float] = None):
        video = await self._run(
            self.video, self.client.publish_video(title, description, video_file, thumbnail, duration)
        )
        if video is not None:
            self.video.videos = [video] + self.video.videos
            self.video.total_videos += 1
        return video

    async def update_video(self, video_id: str, **changes):
        video = await self._run(self.video, self.client.update_video(video_id, **changes))
        if video is not None:
            self.video.videos = _replace(self.video.videos, video)
            if self.video.current_video and self.video.current_video.get("id") == video_id:
                self.video.current_video = video
        return video

    async def delete_video(self, video_id: str) -> bool:
        await self._run(self.video, self.client.delete_video(video_id))
        if self.video.error is not None:
            return False
        self.video.videos = _without(self.video.videos, video_id)
        self.video.total_videos = max(0, self.video.total_videos - 1)
        if self.video.current_video and self.video.current_video.get("id") == video_id:
            self.video.current_video = None
        return True

    async def toggle_publish(self, video_id: str):
        video = await self._run(self.video, self.client.toggle_publish(video_id))
        if video is not None:
            self.video.videos = _replace(self.video.videos, video)
        return video

    # ── Comments ─────────────────────────────────────────────────────────

    async def fetch_comments(self, video_id: str, page: int = 1, limit: int = 10):
        result = await self._run(self.comment, self.client.list_comments(video_id, page, limit))
        if result is not None:
            self.comment.comments = result["docs"]
            self.comment.total_comments = result["totalDocs"]
            self.comment.total_pages = result["totalPages"]
            self.comment.current_page = result["page"]
            self.comment.has_next_page = result["hasNextPage"]
            self.comment.has_prev_page = result["hasPrevPage"]
        return result

    async def add_comment(self, video_id: str, content: str):
        comment = await self._run(self.comment, self.client.add_comment(video_id, content))
        if comment is not None:
            self.comment.comments = [comment] + self.comment.comments
            self.comment.total_comments += 1
        return comment

    async def update_comment(self, comment_id: str, content: str):
        comment = await self._run(self.comment, self.client.update_comment(comment_id, content))
        if comment is not None:
            self.comment.comments = _replace(self.comment.comments, comment)
        return comment

    async def delete_comment(self, comment_id: str) -> bool:
        await self._run(self.comment, self.client.delete_comment(comment_id))
        if self.comment.error is not None:
            return False
        self.comment.comments = _without(self.comment.comments, comment_id)
        self.comment.total_comments = max(0, self.comment.total_comments - 1)
        return True

    # ── Likes ────────────────────────────────────────────────────────────

    async def toggle_video_like(self, video_id: str):
        result = await self._run(self.like, self.client.toggle_video_like(video_id))
        if result is not None:
            self.like.video_likes[video_id] = result
            if not result["liked"]:
                self.like.liked_videos = [
                    v for v in self.like.liked_videos if v.get("video") != video_id
                ]
        return result

    async def toggle_comment_like(self, comment_id: str):
        result = await self._run(self.like, self.client.toggle_comment_like(comment_id))
        if result is not None:
            self.like.comment_likes[comment_id] = result
        return result

    async def toggle_tweet_like(self, tweet_id: str):
        result = await self._run(self.like, self.client.toggle_tweet_like(tweet_id))
        if result is not None:
            self.like.tweet_likes[tweet_id] = result
        return result

    async def fetch_liked_videos(self, page: int = 1, limit: int = 10):
        result = await self._run(self.like, self.client.liked_videos(page, limit))
        if result is not None:
            self.like.liked_videos = result["likes"]
            self.like.total_liked_videos = result["meta"]["total"]
        return result

    # ── Tweets ───────────────────────────────────────────────────────────

    async def fetch_user_tweets(self, user_id: str, page: int = 1, limit: int = 10):
        result = await self._run(self.tweet, self.client.user_tweets(user_id, page, limit))
        if result is not None:
            self.tweet.tweets = result["tweets"]
            self.tweet.total_tweets = result["meta"]["total"]
        return result

    async def create_tweet(self, content: str):
        tweet = await self._run(self.tweet, self.client.create_tweet(content))
        if tweet is not None:
            self.tweet.tweets = [tweet] + self.tweet.tweets
            self.tweet.total_tweets += 1
        return tweet

    async def update_tweet(self, tweet_id: str, content: str):
        tweet = await self._run(self.tweet, self.client.update_tweet(tweet_id, content))
        if tweet is not None:
            self.tweet.tweets = _replace(self.tweet.tweets, tweet)
        return tweet

    async def delete_tweet(self, tweet_id: str) -> bool:
        await self._run(self.tweet, self.client.delete_tweet(tweet_id))
        if self.tweet.error is not None:
            return False
        self.tweet.tweets = _without(self.tweet.tweets, tweet_id)
        self.tweet.total_tweets = max(0, self.tweet.total_tweets - 1)
        return True

    # ── Playlists ────────────────────────────────────────────────────────

    async def fetch_user_playlists(self, user_id: str):
        playlists = await self._run(self.playlist, self.client.user_playlists(user_id))
        if playlists is not None:
            self.playlist.playlists = playlists
        return playlists

    async def fetch_playlist(self, playlist_id: str):
        playlist = await self._run(self.playlist, self.client.get_playlist(playlist_id))
        if playlist is not None:
            self.playlist.current_playlist = playlist
        return playlist

    async def create_playlist(self, name: str, description: str):
        playlist = await self._run(self.playlist, self.client.create_playlist(name, description))
        if playlist is not None:
            self.playlist.playlists = [playlist] + self.playlist.playlists
        return playlist

    def _store_playlist(self, playlist: Dict) -> None:
        self.playlist.playlists = _replace(self.playlist.playlists, playlist)
        if self.playlist.current_playlist and self.playlist.current_playlist.get("id") == playlist["id"]:
            self.playlist.current_playlist = playlist

    async def update_playlist(self, playlist_id: str, name: Optional[str] = None,
                              description: Optional[str] = None):
        playlist = await self._run(self.playlist, self.client.update_playlist(playlist_id, name, description))
        if playlist is not None:
            self._store_playlist(playlist)
        return playlist

    async def delete_playlist(self, playlist_id: str) -> bool:
        await self._run(self.playlist, self.client.delete_playlist(playlist_id))
        if self.playlist.error is not None:
            return False
        self.playlist.playlists = _without(self.playlist.playlists, playlist_id)
        if self.playlist.current_playlist and self.playlist.current_playlist.get("id") == playlist_id:
            self.playlist.current_playlist = None
        return True

    async def add_to_playlist(self, video_id: str, playlist_id: str):
        playlist = await self._run(self.playlist, self.client.add_to_playlist(video_id, playlist_id))
        if playlist is not None:
            self._store_playlist(playlist)
        return playlist

    async def remove_from_playlist(self, video_id: str, playlist_id: str):
        playlist = await self._run(self.playlist, self.client.remove_from_playlist(video_id, playlist_id))
        if playlist is not None:
            self._store_playlist(playlist)
        return playlist

    # ── Subscriptions ────────────────────────────────────────────────────

    async def toggle_subscription(self, channel_id: str):
        result = await self._run(self.subscription, self.client.toggle_subscription(channel_id))
        if result is not None:
            self.subscription.subscription_status[channel_id] = result["subscribed"]
        return result

    async def fetch_subscribers(self, channel_id: str, page: int = 1, limit: int = 10):
        result = await self._run(self.subscription, self.client.channel_subscribers(channel_id, page, limit))
        if result is not None:
            self.subscription.subscribers = result["subscribers"]
            self.subscription.total_subscribers = result["meta"]["total"]
        return result

    async def fetch_subscribed_channels(self, subscriber_id: str, page: int = 1, limit: int = 10):
        result = await self._run(
            self.subscription, self.client.subscribed_channels(subscriber_id, page, limit)
        )
        if result is not None:
            self.subscription.subscribed_channels = result["channels"]
            self.subscription.total_channels = result["meta"]["total"]
        return result

    # ── Dashboard ────────────────────────────────────────────────────────

    async def fetch_channel_stats(self):
        stats = await self._run(self.dashboard, self.client.channel_stats())
        if stats is not None:
            self.dashboard.stats = stats
        return stats

    async def fetch_channel_videos(self, page: int = 1, limit: int = 10,
                                   sort_by: str = "createdAt", sort_type: str = "desc"):
        result = await self._run(
            self.dashboard, self.client.channel_videos(page, limit, sort_by, sort_type)
        )
        if result is not None:
            self.dashboard.channel_videos = result["videos"]
            self.dashboard.total_channel_videos = result["meta"]["total"]
            self.dashboard.total_pages = result["meta"]["totalPages"]
        return result
