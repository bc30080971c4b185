from __future__ import annotations

import os

os.environ.setdefault("VIDTUBE_DB_URL_OVERRIDE", "sqlite+aiosqlite://")

from typing import Dict, Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vidtube.core.database import Base, get_db
from vidtube.core.errors import ApiError
from vidtube.main import app
from vidtube.models import models  # noqa: F401
from vidtube.services.media.storage_service import MediaStorage, UploadedMedia, get_media_storage

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 128


class FakeMediaStorage(MediaStorage):
    """Keeps uploaded objects in memory instead of talking to S3."""

    def __init__(self):
        super().__init__(client=object())
        self.objects: Dict[str, bytes] = {}
        self.deleted = []
        self.fail_uploads = False
        self.fail_folders = set()

    async def upload(self, data, filename, content_type, folder, label="File"):
        if self.fail_uploads or folder in self.fail_folders:
            raise ApiError(500, f"{label} upload failed")
        key = self.object_key(folder, filename, content_type)
        self.objects[key] = data
        return UploadedMedia(url=self.public_url(key), key=key, size=len(data), content_type=content_type)

    async def delete(self, key):
        self.deleted.append(key)
        return self.objects.pop(key, None) is not None


class RivalInsertSession(AsyncSession):
    """
    Session whose next commit is preceded by another session committing
    ``rival_row``, the way a concurrent request would between our read and write.
    """

    rival_row = None

    async def commit(self):
        row, self.rival_row = self.rival_row, None
        if row is not None:
            async with AsyncSession(self.bind, expire_on_commit=False) as rival:
                rival.add(row)
                await rival.commit()
        await super().commit()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def storage():
    return FakeMediaStorage()


@pytest.fixture
async def client(engine, storage):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_storage] = lambda: storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, username: str, cover: bool = False, **overrides) -> httpx.Response:
    data = {
        "fullName": overrides.pop("full_name", username.title()),
        "email": overrides.pop("email", f"{username}@example.com"),
        "username": username,
        "password": overrides.pop("password", "secret123"),
    }
    files = {"avatar": ("avatar.png", PNG, "image/png")}
    if cover:
        files["coverImage"] = ("cover.png", PNG, "image/png")
    return await client.post("/api/v1/users/register", data=data, files=files)


async def login(client: httpx.AsyncClient, username: str, password: str = "secret123") -> Dict:
    resp = await client.post("/api/v1/users/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def publish(
    client: httpx.AsyncClient,
    token: str,
    title: str = "First video",
    description: str = "A test upload",
    duration: Optional[float] = 12.5,
) -> Dict:
    data = {"title": title, "description": description}
    if duration is not None:
        data["duration"] = str(duration)
    resp = await client.post(
        "/api/v1/videos",
        data=data,
        files={
            "videoFile": ("clip.mp4", MP4, "video/mp4"),
            "thumbnail": ("thumb.png", PNG, "image/png"),
        },
        headers=auth(token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
async def alice(client):
    await register(client, "alice")
    return await login(client, "alice")


@pytest.fixture
async def bob(client):
    await register(client, "bob")
    return await login(client, "bob")
