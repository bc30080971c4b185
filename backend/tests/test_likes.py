from __future__ import annotations

import uuid

from sqlalchemy import func, select

from conftest import RivalInsertSession, auth, publish
from vidtube.models.models import Like, User
from vidtube.services.likes.like_service import like_service

MISSING = "00000000-0000-0000-0000-000000000000"


async def test_video_like_toggles(client, alice, bob):
    video = await publish(client, alice["accessToken"])
    url = f"/api/v1/likes/toggle/v/{video['id']}"
    headers = auth(bob["accessToken"])

    first = await client.post(url, headers=headers)
    assert first.status_code == 200
    assert first.json()["data"] == {"liked": True, "likesCount": 1}
    assert first.json()["message"] == "Video liked successfully"

    second = await client.post(url, headers=headers)
    assert second.json()["data"] == {"liked": False, "likesCount": 0}
    assert second.json()["message"] == "Video unliked successfully"


async def test_likes_are_counted_per_user(client, alice, bob):
    video = await publish(client, alice["accessToken"])
    url = f"/api/v1/likes/toggle/v/{video['id']}"
    await client.post(url, headers=auth(alice["accessToken"]))
    resp = await client.post(url, headers=auth(bob["accessToken"]))
    assert resp.json()["data"]["likesCount"] == 2


async def test_comment_and_tweet_likes(client, alice, bob):
    video = await publish(client, alice["accessToken"])
    comment = (await client.post(
        f"/api/v1/comments/{video['id']}", json={"content": "hi"}, headers=auth(alice["accessToken"])
    )).json()["data"]
    tweet = (await client.post(
        "/api/v1/tweets", json={"content": "hello"}, headers=auth(alice["accessToken"])
    )).json()["data"]
    headers = auth(bob["accessToken"])

    resp = await client.post(f"/api/v1/likes/toggle/c/{comment['id']}", headers=headers)
    assert resp.json()["data"]["liked"] is True
    resp = await client.post(f"/api/v1/likes/toggle/t/{tweet['id']}", headers=headers)
    assert resp.json()["message"] == "Tweet liked successfully"

    comments = (await client.get(f"/api/v1/comments/{video['id']}")).json()["data"]
    assert comments["docs"][0]["likesCount"] == 1
    tweets = (await client.get(f"/api/v1/tweets/user/{alice['user']['id']}")).json()["data"]
    assert tweets["tweets"][0]["likesCount"] == 1


async def test_toggle_unknown_targets(client, bob):
    headers = auth(bob["accessToken"])
    for kind, label in (("v", "Video"), ("c", "Comment"), ("t", "Tweet")):
        resp = await client.post(f"/api/v1/likes/toggle/{kind}/{MISSING}", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == f"{label} not found"

    resp = await client.post("/api/v1/likes/toggle/v/xyz", headers=headers)
    assert resp.status_code == 400


async def test_toggle_requires_auth(client, alice):
    video = await publish(client, alice["accessToken"])
    resp = await client.post(f"/api/v1/likes/toggle/v/{video['id']}")
    assert resp.status_code == 401


async def test_liked_videos_lists_most_recent_first(client, alice, bob):
    one = await publish(client, alice["accessToken"], title="One")
    two = await publish(client, alice["accessToken"], title="Two")
    headers = auth(bob["accessToken"])
    await client.post(f"/api/v1/likes/toggle/v/{one['id']}", headers=headers)
    await client.post(f"/api/v1/likes/toggle/v/{two['id']}", headers=headers)

    resp = await client.get("/api/v1/likes/videos", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["meta"]["total"] == 2
    assert [like["videoDetails"]["title"] for like in data["likes"]] == ["Two", "One"]
    assert data["likes"][0]["video"] == two["id"]
    assert data["likes"][0]["videoDetails"]["owner"]["username"] == "alice"


async def test_concurrent_like_resolves_to_a_single_like(client, engine, alice, bob):
    video = await publish(client, alice["accessToken"])
    video_id = uuid.UUID(video["id"])
    bob_id = uuid.UUID(bob["user"]["id"])

    async with RivalInsertSession(engine, expire_on_commit=False) as db:
        user = await db.get(User, bob_id)
        db.rival_row = Like(liked_by_id=bob_id, video_id=video_id)
        liked, count = await like_service.toggle(db, user, "video", video_id)

        assert liked is True
        assert count == 1
        rows = await db.scalar(select(func.count(Like.id)).where(Like.video_id == video_id))
        assert rows == 1
