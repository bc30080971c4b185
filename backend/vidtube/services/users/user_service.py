"""
VidTube User Service: registration, credential lifecycle, profile updates,
channel profiles and watch history.

Credential handshake:
1. Login verifies the password and issues an access/refresh pair
2. The refresh token is stored on the user row
3. Refresh verifies the signature, compares against the stored token,
   then issues and stores a new pair (the old refresh token stops working)
4. Logout clears the stored refresh token
"""
from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.core.security import (
    REFRESH,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from vidtube.models.models import Subscription, User, Video, WatchHistory, utcnow
from vidtube.services.media.storage_service import (
    IMAGE, MediaStorage, discard_on_failure, store_upload,
)

logger = logging.getLogger(__name__)


def _require(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ApiError(400, f"{label} is required")
    return str(value).strip()


class UserService:
    """Manages users and their credentials."""

    # ── Registration / credentials ───────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        storage: MediaStorage,
        full_name: Optional[str],
        email: Optional[str],
        username: Optional[str],
        password: Optional[str],
        avatar: Optional[UploadFile],
        cover_image: Optional[UploadFile] = None,
    ) -> User:
        full_name = _require(full_name, "Full Name")
        email = _require(email, "Email").lower()
        username = _require(username, "Username").lower()
        if password is None or not password.strip():
            raise ApiError(400, "Password is required")

        existing = await db.scalar(
            select(User.id).where(or_(User.email == email, User.username == username))
        )
        if existing:
            raise ApiError(409, "User with same email or username already exists")

        async with discard_on_failure(storage) as stored:
            avatar_media = await store_upload(storage, avatar, IMAGE, "avatars", "Avatar file")
            stored.append(avatar_media)
            cover_media = await store_upload(
                storage, cover_image, IMAGE, "covers", "Cover image", required=False
            )
            if cover_media:
                stored.append(cover_media)

            user = User(
                full_name=full_name,
                email=email,
                username=username,
                avatar=avatar_media.url,
                cover_image=cover_media.url if cover_media else "",
                hashed_password=hash_password(password),
            )
            db.add(user)
            await db.commit()
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    async def issue_tokens(self, db: AsyncSession, user: User) -> Tuple[str, str]:
        access_token = create_access_token(user)
        refresh_token = create_refresh_token(user)
        user.refresh_token = refresh_token
        await db.commit()
        return access_token, refresh_token

    async def login(
        self,
        db: AsyncSession,
        password: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Tuple[User, str, str]:
        if not username and not email:
            raise ApiError(400, "username or email is required")

        clauses = []
        if username:
            clauses.append(User.username == username.strip().lower())
        if email:
            clauses.append(User.email == email.strip().lower())
        user = await db.scalar(select(User).where(or_(*clauses)))
        if not user:
            raise ApiError(404, "User does not exist")

        if not verify_password(password, user.hashed_password):
            raise ApiError(401, "Invalid user credentials")

        access_token, refresh_token = await self.issue_tokens(db, user)
        logger.info("User %s logged in", user.username)
        return user, access_token, refresh_token

    async def logout(self, db: AsyncSession, user: User) -> None:
        user.refresh_token = None
        await db.commit()
        logger.info("User %s logged out", user.username)

    async def refresh(self, db: AsyncSession, incoming: Optional[str]) -> Tuple[str, str]:
        if not incoming:
            raise ApiError(401, "Unauthorized request")

        try:
            claims = decode_token(incoming, REFRESH)
        except TokenError as e:
            logger.info("Rejected refresh token: %s", e)
            raise ApiError(401, "Invalid refresh token")

        user = await db.get(User, claims["sub"])
        if not user:
            raise ApiError(401, "Invalid refresh token")
        if incoming != user.refresh_token:
            raise ApiError(401, "Refresh token is expired or used")

        return await self.issue_tokens(db, user)

    async def change_password(
        self, db: AsyncSession, user: User, old_password: str, new_password: str
    ) -> None:
        if not verify_password(old_password, user.hashed_password):
            raise ApiError(401, "Invalid old password")
        if not new_password or not new_password.strip():
            raise ApiError(400, "New password is required")
        user.hashed_password = hash_password(new_password)
        await db.commit()

    # ── Profile ──────────────────────────────────────────────────────

    async def update_account(
        self, db: AsyncSession, user: User, full_name: Optional[str], email: Optional[str]
    ) -> User:
        if not full_name or not full_name.strip() or not email or not email.strip():
            raise ApiError(400, "All fields are required")
        email = email.strip().lower()

        taken = await db.scalar(select(User.id).where(User.email == email, User.id != user.id))
        if taken:
            raise ApiError(409, "Email is already in use")

        user.full_name = full_name.strip()
        user.email = email
        await db.commit()
        return user

    async def update_avatar(
        self, db: AsyncSession, storage: MediaStorage, user: User, avatar: Optional[UploadFile]
    ) -> User:
        async with discard_on_failure(storage) as stored:
            media = await store_upload(storage, avatar, IMAGE, "avatars", "Avatar file")
            stored.append(media)
            previous, user.avatar = user.avatar, media.url
            await db.commit()
        await storage.discard(previous)
        return user

    async def update_cover_image(
        self, db: AsyncSession, storage: MediaStorage, user: User, cover_image: Optional[UploadFile]
    ) -> User:
        async with discard_on_failure(storage) as stored:
            media = await store_upload(storage, cover_image, IMAGE, "covers", "Cover image file")
            stored.append(media)
            previous, user.cover_image = user.cover_image, media.url
            await db.commit()
        await storage.discard(previous)
        return user

    async def get_channel_profile(
        self, db: AsyncSession, username: str, viewer: Optional[User] = None
    ) -> Dict:
        if not username or not username.strip():
            raise ApiError(400, "username is missing")

        channel = await db.scalar(select(User).where(User.username == username.strip().lower()))
        if not channel:
            raise ApiError(404, "Channel does not exist")

        subscribers = await db.scalar(
            select(func.count(Subscription.id)).where(Subscription.channel_id == channel.id)
        )
        subscribed_to = await db.scalar(
            select(func.count(Subscription.id)).where(Subscription.subscriber_id == channel.id)
        )
        is_subscribed = False
        if viewer is not None:
            is_subscribed = bool(await db.scalar(
                select(Subscription.id).where(
                    Subscription.channel_id == channel.id,
                    Subscription.subscriber_id == viewer.id,
                )
            ))

        return {
            "id": channel.id,
            "username": channel.username,
            "email": channel.email,
            "full_name": channel.full_name,
            "avatar": channel.avatar,
            "cover_image": channel.cover_image,
            "created_at": channel.created_at,
            "subscribers_count": subscribers or 0,
            "channels_subscribed_to_count": subscribed_to or 0,
            "is_subscribed": is_subscribed,
        }

    # ── Watch history ────────────────────────────────────────────────

    async def record_watch(self, db: AsyncSession, user_id: uuid.UUID, video_id: uuid.UUID) -> None:
        """Add a video to the user's history once; rewatching bumps it to the top."""
        entry = await db.scalar(
            select(WatchHistory).where(
                WatchHistory.user_id == user_id, WatchHistory.video_id == video_id
            )
        )
        if entry:
            entry.watched_at = utcnow()
        else:
            db.add(WatchHistory(user_id=user_id, video_id=video_id))

    async def get_watch_history(self, db: AsyncSession, user: User) -> List[Video]:
        result = await db.execute(
            select(Video)
            .join(WatchHistory, WatchHistory.video_id == Video.id)
            .where(WatchHistory.user_id == user.id, Video.visible_to(user.id))
            .order_by(WatchHistory.watched_at.desc())
        )
        return list(result.scalars().all())

    async def clear_video_history(self, db: AsyncSession, video_id: uuid.UUID) -> None:
        await db.execute(
            delete(WatchHistory)
            .where(WatchHistory.video_id == video_id)
            .execution_options(synchronize_session=False)
        )


user_service = UserService()
