"""
VidTube API client: async httpx wrapper around the REST surface.

Every call unwraps the ``{statusCode, data, message, success}`` envelope and
returns ``data``. Failures raise ``ApiClientError`` carrying the server's
message, or a generic one when the body is not an envelope.

Uploads are passed as httpx file tuples: ``(filename, content, content_type)``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

FileTuple = Tuple[str, bytes, str]

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"


class ApiClientError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class VidTubeClient:
    """Async client that keeps the current token pair and sends it as a bearer header."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "VidTubeClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # ── Transport ────────────────────────────────────────────────────────

    def set_tokens(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token

    def clear_tokens(self) -> None:
        self.set_tokens(None, None)
        self._http.cookies.clear()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, FileTuple]] = None,
    ) -> Any:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        if data:
            data = {k: v for k, v in data.items() if v is not None}
        if files:
            files = {k: v for k, v in files.items() if v is not None}

        try:
            response = await self._http.request(
                method, path, params=params, json=json, data=data or None, files=files or None, headers=headers
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiClientError(0, f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error or not isinstance(body, dict) or body.get("success") is False:
            message = body.get("message") if isinstance(body, dict) else None
            raise ApiClientError(response.status_code, message or f"Request failed with status {response.status_code}")
        return body.get("data")

    # ═══════════════════════════════════════════════════════════════════
    # Users / auth
    # ═══════════════════════════════════════════════════════════════════

    async def register(
        self,
        full_name: str,
        email: str,
        username: str,
        password: str,
        avatar: FileTuple,
        cover_image: Optional[FileTuple] = None,
    ) -> Dict:
        return await self._request(
            "POST",
            "/users/register",
            data={"fullName": full_name, "email": email, "username": username, "password": password},
            files={"avatar": avatar, "coverImage": cover_image},
        )

    async def login(self, password: str, username: Optional[str] = None, email: Optional[str] = None) -> Dict:
        payload = {"password": password}
        if username:
            payload["username"] = username
        if email:
            payload["email"] = email
        result = await self._request("POST", "/users/login", json=payload)
        self.set_tokens(result["accessToken"], result["refreshToken"])
        return result

    async def logout(self) -> None:
        try:
            await self._request("POST", "/users/logout")
        finally:
            self.clear_tokens()

    async def refresh(self) -> Dict:
        try:
            result = await self._request(
                "POST", "/users/refresh-token", json={"refreshToken": self.refresh_token}
            )
        except ApiClientError:
            self.clear_tokens()
            raise
        self.set_tokens(result["accessToken"], result["refreshToken"])
        return result

    async def change_password(self, old_password: str, new_password: str) -> None:
        await self._request(
            "POST", "/users/change-password", json={"oldPassword": old_password, "newPassword": new_password}
        )

    async def current_user(self) -> Dict:
        return await self._request("GET", "/users/current-user")

    async def update_account(self, full_name: Optional[str] = None, email: Optional[str] = None) -> Dict:
        return await self._request("PATCH", "/users/update-account", json={"fullName": full_name, "email": email})

    async def update_avatar(self, avatar: FileTuple) -> Dict:
        return await self._request("PATCH", "/users/update-avatar", files={"avatar": avatar})

    async def update_cover_image(self, cover_image: FileTuple) -> Dict:
        return await self._request("PATCH", "/users/cover-image", files={"coverImage": cover_image})

    async def channel_profile(self, username: str) -> Dict:
        return await self._request("GET", f"/users/c/{username}")

    async def watch_history(self) -> list:
        return await self._request("GET", "/users/history")

    # ═══════════════════════════════════════════════════════════════════
    # Videos
    # ═══════════════════════════════════════════════════════════════════

    async def list_videos(
        self,
        page: int = 1,
        limit: int = 10,
        query: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_type: str = "desc",
        user_id: Optional[str] = None,
    ) -> Dict:
        return await self._request(
            "GET",
            "/videos",
            params={
                "page": page, "limit": limit, "query": query,
                "sortBy": sort_by, "sortType": sort_type, "userId": user_id,
            },
        )

    async def publish_video(
        self,
        title: str,
        description: str,
        video_file: FileTuple,
        thumbnail: FileTuple,
        duration: Optional[float] = None,
    ) -> Dict:
        return await self._request(
            "POST",
            "/videos",
            data={"title": title, "description": description, "duration": duration},
            files={"videoFile": video_file, "thumbnail": thumbnail},
        )

    async def get_video(self, video_id: str) -> Dict:
        return await self._request("GET", f"/videos/{video_id}")

    async def update_video(
        self,
        video_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail: Optional[FileTuple] = None,
    ) -> Dict:
        return await self._request(
            "PATCH",
            f"/videos/{video_id}",
            data={"title": title, "description": description},
            files={"thumbnail": thumbnail},
        )

    async def delete_video(self, video_id: str) -> None:
        await self._request("DELETE", f"/videos/{video_id}")

    async def toggle_publish(self, video_id: str) -> Dict:
        return await self._request("PATCH", f"/videos/toggle/publish/{video_id}")

    # ═══════════════════════════════════════════════════════════════════
    # Comments
    # ═══════════════════════════════════════════════════════════════════

    async def list_comments(self, video_id: str, page: int = 1, limit: int = 10) -> Dict:
        return await self._request("GET", f"/comments/{video_id}", params={"page": page, "limit": limit})

    async def add_comment(self, video_id: str, content: str) -> Dict:
        return await self._request("POST", f"/comments/{video_id}", json={"content": content})

    async def update_comment(self, comment_id: str, content: str) -> Dict:
        return await self._request("PATCH", f"/comments/c/{comment_id}", json={"content": content})

    async def delete_comment(self, comment_id: str) -> None:
        await self._request("DELETE", f"/comments/c/{comment_id}")

    # ═══════════════════════════════════════════════════════════════════
    # Likes
    # ═══════════════════════════════════════════════════════════════════

    async def toggle_video_like(self, video_id: str) -> Dict:
        return await self._request("POST", f"/likes/toggle/v/{video_id}")

    async def toggle_comment_like(self, comment_id: str) -> Dict:
        return await self._request("POST", f"/likes/toggle/c/{comment_id}")

    async def toggle_tweet_like(self, tweet_id: str) -> Dict:
        return await self._request("POST", f"/likes/toggle/t/{tweet_id}")

    async def liked_videos(self, page: int = 1, limit: int = 10) -> Dict:
        return await self._request("GET", "/likes/videos", params={"page": page, "limit": limit})

    # ═══════════════════════════════════════════════════════════════════
    # Tweets
    # ═══════════════════════════════════════════════════════════════════

    async def create_tweet(self, content: str) -> Dict:
        return await self._request("POST", "/tweets", json={"content": content})

    async def user_tweets(self, user_id: str, page: int = 1, limit: int = 10) -> Dict:
        return await self._request("GET", f"/tweets/user/{user_id}", params={"page": page, "limit": limit})

    async def update_tweet(self, tweet_id: str, content: str) -> Dict:
        return await self._request("PATCH", f"/tweets/{tweet_id}", json={"content": content})

    async def delete_tweet(self, tweet_id: str) -> None:
        await self._request("DELETE", f"/tweets/{tweet_id}")

    # ═══════════════════════════════════════════════════════════════════
    # Playlists
    # ═══════════════════════════════════════════════════════════════════

    async def create_playlist(self, name: str, description: str) -> Dict:
        return await self._request("POST", "/playlist", json={"name": name, "description": description})

    async def user_playlists(self, user_id: str) -> list:
        return await self._request("GET", f"/playlist/user/{user_id}")

    async def get_playlist(self, playlist_id: str) -> Dict:
        return await self._request("GET", f"/playlist/{playlist_id}")

    async def update_playlist(
        self, playlist_id: str, name: Optional[str] = None, description: Optional[str] = None
    ) -> Dict:
        return await self._request(
            "PATCH", f"/playlist/{playlist_id}", json={"name": name, "description": description}
        )

    async def delete_playlist(self, playlist_id: str) -> None:
        await self._request("DELETE", f"/playlist/{playlist_id}")

    async def add_to_playlist(self, video_id: str, playlist_id: str) -> Dict:
        return await self._request("PATCH", f"/playlist/add/{video_id}/{playlist_id}")

    async def remove_from_playlist(self, video_id: str, playlist_id: str) -> Dict:
        return await self._request("PATCH", f"/playlist/remove/{video_id}/{playlist_id}")

    # ═══════════════════════════════════════════════════════════════════
    # Subscriptions
    # ═══════════════════════════════════════════════════════════════════

    async def toggle_subscription(self, channel_id: str) -> Dict:
        return await self._request("POST", f"/subscriptions/c/{channel_id}")

    async def channel_subscribers(self, channel_id: str, page: int = 1, limit: int = 10) -> Dict:
        return await self._request(
            "GET", f"/subscriptions/c/{channel_id}", params={"page": page, "limit": limit}
        )

    async def subscribed_channels(self, subscriber_id: str, page: int = 1, limit: int = 10) -> Dict:
        return await self._request(
            "GET", f"/subscriptions/u/{subscriber_id}", params={"page": page, "limit": limit}
        )

    # ═══════════════════════════════════════════════════════════════════
    # Dashboard
    # ═══════════════════════════════════════════════════════════════════

    async def channel_stats(self) -> Dict:
        return await self._request("GET", "/dashboard/stats")

    async def channel_videos(
        self, page: int = 1, limit: int = 10, sort_by: str = "createdAt", sort_type: str = "desc"
    ) -> Dict:
        return await self._request(
            "GET",
            "/dashboard/videos",
            params={"page": page, "limit": limit, "sortBy": sort_by, "sortType": sort_type},
        )
