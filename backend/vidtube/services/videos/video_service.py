"""
VidTube Video Service: publishing, browsing and owner-only mutations.

Deleting a video removes everything that references it: comments (and the
likes on those comments), likes on the video, playlist entries and watch
history rows.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.models.models import Comment, Like, PlaylistVideo, User, Video
from vidtube.services.media.storage_service import (
    IMAGE, VIDEO, MediaStorage, discard_on_failure, store_upload,
)
from vidtube.services.users.user_service import user_service

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


def sort_clause(sort_by: str, sort_type: str, fields=None):
    fields = fields or SORTABLE_FIELDS
    column = fields.get(sort_by)
    if column is None:
        raise ApiError(400, f"Cannot sort by '{sort_by}'")
    return column.asc() if sort_type == "asc" else column.desc()


def ensure_owner(record, user: User, action: str, noun: str) -> None:
    if record.owner_id != user.id:
        raise ApiError(403, f"You don't have permission to {action} this {noun}")


class VideoService:
    """CRUD and browsing for videos."""

    async def get_or_404(self, db: AsyncSession, video_id: uuid.UUID) -> Video:
        video = await db.get(Video, video_id)
        if not video:
            raise ApiError(404, "Video not found")
        return video

    async def list_videos(
        self,
        db: AsyncSession,
        offset: int,
        limit: int,
        query: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_type: str = "desc",
        owner_id: Optional[uuid.UUID] = None,
    ) -> Tuple[List[Video], int]:
        """Published videos, optionally filtered by title substring and owner."""
        order = sort_clause(sort_by, sort_type)

        conditions = [Video.is_published.is_(True)]
        if query:
            conditions.append(Video.title.ilike(f"%{query}%"))
        if owner_id:
            conditions.append(Video.owner_id == owner_id)

        total = await db.scalar(select(func.count(Video.id)).where(*conditions)) or 0
        result = await db.execute(
            select(Video).where(*conditions).order_by(order, Video.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def publish(
        self,
        db: AsyncSession,
        storage: MediaStorage,
        owner: User,
        title: Optional[str],
        description: Optional[str],
        video_file: Optional[UploadFile],
        thumbnail: Optional[UploadFile],
        duration: Optional[float] = None,
    ) -> Video:
        if not title or not title.strip() or not description or not description.strip():
            raise ApiError(400, "Title and description are required")
        if video_file is None or not video_file.filename:
            raise ApiError(400, "Video file is required")
        if thumbnail is None or not thumbnail.filename:
            raise ApiError(400, "Thumbnail is required")

        async with discard_on_failure(storage) as stored:
            video_media = await store_upload(storage, video_file, VIDEO, "videos", "Video file")
            stored.append(video_media)
            thumb_media = await store_upload(storage, thumbnail, IMAGE, "thumbnails", "Thumbnail")
            stored.append(thumb_media)

            video = Video(
                owner=owner,
                title=title.strip(),
                description=description.strip(),
                video_file=video_media.url,
                thumbnail=thumb_media.url,
                duration=max(duration or 0.0, 0.0),
            )
            db.add(video)
            await db.commit()
        logger.info("User %s published video %s", owner.id, video.id)
        return video

    async def get_visible_or_404(
        self, db: AsyncSession, video_id: uuid.UUID, viewer: Optional[User]
    ) -> Video:
        """Unpublished videos exist only for their owner."""
        video = await self.get_or_404(db, video_id)
        if not video.is_published and (viewer is None or viewer.id != video.owner_id):
            raise ApiError(404, "Video not found")
        return video

    async def view(self, db: AsyncSession, video_id: uuid.UUID, viewer: Optional[User]) -> Video:
        """Fetch a video; authenticated viewers count as a view and get a history entry."""
        video = await self.get_visible_or_404(db, video_id, viewer)

        if viewer is not None:
            # a view is not an edit: keep updated_at as it was
            await db.execute(
                update(Video)
                .where(Video.id == video_id)
                .values(views=Video.views + 1, updated_at=Video.updated_at)
            )
            await user_service.record_watch(db, viewer.id, video_id)
            await db.commit()
            await db.refresh(video, attribute_names=["views"])
        return video

    async def update(
        self,
        db: AsyncSession,
        storage: MediaStorage,
        user: User,
        video_id: uuid.UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail: Optional[UploadFile] = None,
    ) -> Video:
        has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
        if not (title and title.strip()) and not (description and description.strip()) and not has_thumbnail:
            raise ApiError(400, "At least one field is required to update")

        video = await self.get_or_404(db, video_id)
        ensure_owner(video, user, "update", "video")

        if title and title.strip():
            video.title = title.strip()
        if description and description.strip():
            video.description = description.strip()
        previous = None
        async with discard_on_failure(storage) as stored:
            if has_thumbnail:
                media = await store_upload(storage, thumbnail, IMAGE, "thumbnails", "Thumbnail")
                stored.append(media)
                previous, video.thumbnail = video.thumbnail, media.url
            await db.commit()
        await storage.discard(previous)
        return video

    async def delete(self, db: AsyncSession, storage: MediaStorage, user: User, video_id: uuid.UUID) -> None:
        video = await self.get_or_404(db, video_id)
        ensure_owner(video, user, "delete", "video")

        comment_ids = select(Comment.id).where(Comment.video_id == video_id)
        opts = {"synchronize_session": False}
        liked_comments = await db.execute(
            delete(Like).where(Like.comment_id.in_(comment_ids)).execution_options(**opts)
        )
        comments = await db.execute(
            delete(Comment).where(Comment.video_id == video_id).execution_options(**opts)
        )
        likes = await db.execute(delete(Like).where(Like.video_id == video_id).execution_options(**opts))
        await db.execute(
            delete(PlaylistVideo).where(PlaylistVideo.video_id == video_id).execution_options(**opts)
        )
        await user_service.clear_video_history(db, video_id)
        media_urls = (video.video_file, video.thumbnail)
        await db.delete(video)
        await db.commit()

        for url in media_urls:
            await storage.discard(url)

        logger.info(
            "Deleted video %s with %d comments, %d video likes, %d comment likes",
            video_id, comments.rowcount, likes.rowcount, liked_comments.rowcount,
        )

    async def toggle_publish(self, db: AsyncSession, user: User, video_id: uuid.UUID) -> Video:
        video = await self.get_or_404(db, video_id)
        ensure_owner(video, user, "update", "video")
        video.is_published = not video.is_published
        await db.commit()
        return video


video_service = VideoService()
