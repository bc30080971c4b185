from __future__ import annotations

import io

import boto3
import pytest
from botocore.stub import ANY, Stubber
from fastapi import UploadFile
from starlette.datastructures import Headers

from vidtube.core.config import Settings
from vidtube.core.errors import ApiError
from vidtube.services.media.storage_service import IMAGE, VIDEO, MediaStorage, read_upload


@pytest.fixture
def cfg():
    return Settings(
        storage_endpoint="minio:9000",
        storage_bucket="media",
        storage_access_key="key",
        storage_secret_key="secret",
    )


@pytest.fixture
def s3():
    client = boto3.client(
        "s3",
        endpoint_url="http://minio:9000",
        region_name="us-east-1",
        aws_access_key_id="key",
        aws_secret_access_key="secret",
    )
    with Stubber(client) as stubber:
        yield client, stubber


def _upload_file(data: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


async def test_upload_puts_object_and_returns_public_url(cfg, s3):
    client, stubber = s3
    stubber.add_response(
        "put_object",
        {},
        {"Bucket": "media", "Key": ANY, "Body": b"png-bytes", "ContentType": "image/png"},
    )
    storage = MediaStorage(client=client, cfg=cfg)

    media = await storage.upload(b"png-bytes", "face.PNG", "image/png", "avatars")

    assert media.key.startswith("avatars/") and media.key.endswith(".png")
    assert media.url == f"http://minio:9000/media/{media.key}"
    assert media.size == len(b"png-bytes")
    stubber.assert_no_pending_responses()


async def test_upload_failure_raises_api_error(cfg, s3):
    client, stubber = s3
    stubber.add_client_error("put_object", service_error_code="NoSuchBucket", http_status_code=404)
    storage = MediaStorage(client=client, cfg=cfg)

    with pytest.raises(ApiError) as exc:
        await storage.upload(b"x", "clip.mp4", "video/mp4", "videos", label="Video file")
    assert exc.value.status_code == 500
    assert exc.value.message == "Video file upload failed"


async def test_discard_maps_url_to_key_and_ignores_foreign_urls(cfg, s3):
    client, stubber = s3
    stubber.add_response("delete_object", {}, {"Bucket": "media", "Key": "thumbnails/abc.png"})
    storage = MediaStorage(client=client, cfg=cfg)

    assert await storage.discard("http://minio:9000/media/thumbnails/abc.png") is True
    assert await storage.discard("https://elsewhere.example/abc.png") is False
    assert await storage.discard(None) is False
    stubber.assert_no_pending_responses()


async def test_delete_failure_is_logged_not_raised(cfg, s3):
    client, stubber = s3
    stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)
    storage = MediaStorage(client=client, cfg=cfg)
    assert await storage.delete("videos/x.mp4") is False


def test_public_url_override(cfg):
    cfg.storage_public_url = "https://cdn.example.com/media/"
    storage = MediaStorage(client=object(), cfg=cfg)
    assert storage.public_url("a/b.png") == "https://cdn.example.com/media/a/b.png"
    assert storage.key_from_url("https://cdn.example.com/media/a/b.png") == "a/b.png"


def test_object_key_falls_back_to_content_type_extension():
    key = MediaStorage.object_key("videos", "upload", "video/mp4")
    assert key.startswith("videos/") and key.endswith(".mp4")


async def test_read_upload_validation():
    data = await read_upload(_upload_file(b"img", "a.png", "image/png"), IMAGE, "Avatar file")
    assert data == b"img"

    assert await read_upload(None, IMAGE, "Cover image", required=False) is None

    with pytest.raises(ApiError, match="Avatar file is required"):
        await read_upload(None, IMAGE, "Avatar file")
    with pytest.raises(ApiError, match="must be one of"):
        await read_upload(_upload_file(b"img", "a.png", "image/png"), VIDEO, "Video file")
    with pytest.raises(ApiError, match="is empty"):
        await read_upload(_upload_file(b"", "a.png", "image/png"), IMAGE, "Thumbnail")


async def test_read_upload_enforces_size_limit(monkeypatch):
    from vidtube.services.media import storage_service

    monkeypatch.setattr(storage_service.settings, "max_image_size_mb", 0)
    with pytest.raises(ApiError, match="exceeds"):
        await read_upload(_upload_file(b"x", "a.png", "image/png"), IMAGE, "Thumbnail")


class _UnreadableStream(io.BytesIO):
    def read(self, *args):
        raise AssertionError("body should not be read")


async def test_read_upload_rejects_declared_oversize_before_reading():
    upload = UploadFile(
        file=_UnreadableStream(),
        size=200 * 1024 * 1024,
        filename="big.mp4",
        headers=Headers({"content-type": "video/mp4"}),
    )
    with pytest.raises(ApiError, match="exceeds"):
        await read_upload(upload, VIDEO, "Video file")
