"""
VidTube Playlist Service: owner-curated, ordered lists of videos.
"""
from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import ApiError
from vidtube.models.models import Playlist, PlaylistVideo, User, Video
from vidtube.services.videos.video_service import ensure_owner, video_service


class PlaylistService:

    async def get_or_404(self, db: AsyncSession, playlist_id: uuid.UUID) -> Playlist:
        playlist = await db.get(Playlist, playlist_id)
        if not playlist:
            raise ApiError(404, "Playlist not found")
        return playlist

    async def videos_for(
        self, db: AsyncSession, playlist_ids: List[uuid.UUID], viewer_id: Optional[uuid.UUID] = None
    ) -> Dict[uuid.UUID, List[Video]]:
        """
        Videos of each playlist in insertion order, fetched in one query.
        Unpublished entries only show up for their owner.
        """
        if not playlist_ids:
            return {}
        result = await db.execute(
            select(PlaylistVideo.playlist_id, Video)
            .join(Video, Video.id == PlaylistVideo.video_id)
            .where(PlaylistVideo.playlist_id.in_(playlist_ids), Video.visible_to(viewer_id))
            .order_by(PlaylistVideo.added_at, PlaylistVideo.id)
        )
        grouped: Dict[uuid.UUID, List[Video]] = defaultdict(list)
        for playlist_id, video in result.all():
            grouped[playlist_id].append(video)
        return grouped

    async def create(
        self, db: AsyncSession, user: User, name: Optional[str], description: Optional[str]
    ) -> Playlist:
        if not name or not name.strip():
            raise ApiError(400, "Playlist name is required")
        if not description or not description.strip():
            raise ApiError(400, "Playlist description is required")

        playlist = Playlist(name=name.strip(), description=description.strip(), owner=user)
        db.add(playlist)
        await db.commit()
        return playlist

    async def list_for_user(self, db: AsyncSession, user_id: uuid.UUID) -> List[Playlist]:
        if not await db.get(User, user_id):
            raise ApiError(404, "User not found")
        result = await db.execute(
            select(Playlist)
            .where(Playlist.owner_id == user_id)
            .order_by(Playlist.created_at.desc(), Playlist.id)
        )
        return list(result.scalars().all())

    async def update(
        self,
        db: AsyncSession,
        user: User,
        playlist_id: uuid.UUID,
        name: Optional[str],
        description: Optional[str],
    ) -> Playlist:
        name = name.strip() if name else ""
        description = description.strip() if description else ""
        if not name and not description:
            raise ApiError(400, "At least one field is required to update")

        playlist = await self.get_or_404(db, playlist_id)
        ensure_owner(playlist, user, "update", "playlist")

        if name:
            playlist.name = name
        if description:
            playlist.description = description
        await db.commit()
        return playlist

    async def delete(self, db: AsyncSession, user: User, playlist_id: uuid.UUID) -> None:
        playlist = await self.get_or_404(db, playlist_id)
        ensure_owner(playlist, user, "delete", "playlist")

        await db.execute(
            delete(PlaylistVideo)
            .where(PlaylistVideo.playlist_id == playlist_id)
            .execution_options(synchronize_session=False)
        )
        await db.delete(playlist)
        await db.commit()

    async def _entry(self, db: AsyncSession, playlist_id: uuid.UUID, video_id: uuid.UUID) -> Optional[PlaylistVideo]:
        return await db.scalar(
            select(PlaylistVideo).where(
                PlaylistVideo.playlist_id == playlist_id, PlaylistVideo.video_id == video_id
            )
        )

    async def add_video(
        self, db: AsyncSession, user: User, playlist_id: uuid.UUID, video_id: uuid.UUID
    ) -> Playlist:
        playlist = await self.get_or_404(db, playlist_id)
        ensure_owner(playlist, user, "modify", "playlist")
        await video_service.get_visible_or_404(db, video_id, user)

        if await self._entry(db, playlist_id, video_id):
            raise ApiError(400, "Video already in playlist")

        db.add(PlaylistVideo(playlist_id=playlist_id, video_id=video_id))
        await db.commit()
        return playlist

    async def remove_video(
        self, db: AsyncSession, user: User, playlist_id: uuid.UUID, video_id: uuid.UUID
    ) -> Playlist:
        playlist = await self.get_or_404(db, playlist_id)
        ensure_owner(playlist, user, "modify", "playlist")

        entry = await self._entry(db, playlist_id, video_id)
        if not entry:
            raise ApiError(400, "Video not in playlist")

        await db.delete(entry)
        await db.commit()
        return playlist


playlist_service = PlaylistService()
