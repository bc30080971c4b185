from __future__ import annotations

from conftest import auth, publish


async def test_stats_require_auth(client):
    assert (await client.get("/api/v1/dashboard/stats")).status_code == 401


async def test_channel_stats(client, alice, bob):
    one = await publish(client, alice["accessToken"], title="One")
    await publish(client, alice["accessToken"], title="Two")
    await publish(client, bob["accessToken"], title="Not alice's")
    headers = auth(bob["accessToken"])
    await client.get(f"/api/v1/videos/{one['id']}", headers=headers)
    await client.get(f"/api/v1/videos/{one['id']}", headers=headers)
    await client.post(f"/api/v1/likes/toggle/v/{one['id']}", headers=headers)
    await client.post(f"/api/v1/subscriptions/c/{alice['user']['id']}", headers=headers)

    resp = await client.get("/api/v1/dashboard/stats", headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    stats = resp.json()["data"]
    assert stats["totalVideos"] == 2
    assert stats["totalViews"] == 2
    assert stats["totalLikes"] == 1
    assert stats["totalSubscribers"] == 1
    assert stats["recentSubscribers"][0]["subscriber"]["username"] == "bob"


async def test_empty_channel_stats(client, alice):
    stats = (await client.get("/api/v1/dashboard/stats", headers=auth(alice["accessToken"]))).json()["data"]
    assert stats == {
        "totalVideos": 0,
        "totalViews": 0,
        "totalLikes": 0,
        "totalSubscribers": 0,
        "recentSubscribers": [],
    }


async def test_channel_videos_include_unpublished_and_counts(client, alice, bob):
    token = alice["accessToken"]
    quiet = await publish(client, token, title="Quiet")
    popular = await publish(client, token, title="Popular")
    await client.patch(f"/api/v1/videos/toggle/publish/{quiet['id']}", headers=auth(token))
    headers = auth(bob["accessToken"])
    await client.post(f"/api/v1/likes/toggle/v/{popular['id']}", headers=headers)
    await client.post(f"/api/v1/comments/{popular['id']}", json={"content": "wow"}, headers=headers)

    resp = await client.get(
        "/api/v1/dashboard/videos", params={"sortBy": "likesCount", "sortType": "desc"}, headers=auth(token)
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["meta"]["total"] == 2
    first, second = data["videos"]
    assert first["title"] == "Popular"
    assert first["likesCount"] == 1 and first["commentsCount"] == 1
    assert second["title"] == "Quiet"
    assert second["isPublished"] is False

    bad = await client.get("/api/v1/dashboard/videos", params={"sortBy": "nope"}, headers=auth(token))
    assert bad.status_code == 400
