from __future__ import annotations

from conftest import MP4, PNG, auth, publish

API = "/api/v1/videos"


async def test_publish_requires_title_and_files(client, alice):
    headers = auth(alice["accessToken"])
    resp = await client.post(
        API,
        data={"title": "", "description": "d"},
        files={"videoFile": ("v.mp4", MP4, "video/mp4"), "thumbnail": ("t.png", PNG, "image/png")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Title and description are required"

    resp = await client.post(
        API, data={"title": "t", "description": "d"},
        files={"thumbnail": ("t.png", PNG, "image/png")}, headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Video file is required"

    resp = await client.post(
        API, data={"title": "t", "description": "d"},
        files={"videoFile": ("v.mp4", MP4, "video/mp4")}, headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Thumbnail is required"


async def test_publish_requires_auth(client):
    resp = await client.post(API, data={"title": "t", "description": "d"})
    assert resp.status_code == 401


async def test_publish_stores_media_and_owner(client, storage, alice):
    video = await publish(client, alice["accessToken"], duration=61.0)
    assert video["views"] == 0
    assert video["isPublished"] is True
    assert video["duration"] == 61.0
    assert video["owner"]["username"] == "alice"
    assert "/videos/" in video["videoFile"]
    assert "/thumbnails/" in video["thumbnail"]
    # avatar + video + thumbnail
    assert len(storage.objects) == 3


async def test_list_videos_search_sort_and_pagination(client, alice, bob):
    for title in ("Cooking pasta", "Cooking rice", "Gardening"):
        await publish(client, alice["accessToken"], title=title)
    await publish(client, bob["accessToken"], title="Bob cooking show")

    resp = await client.get(API, params={"query": "cooking", "sortBy": "title", "sortType": "asc"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [v["title"] for v in data["videos"]] == ["Bob cooking show", "Cooking pasta", "Cooking rice"]
    assert data["meta"]["total"] == 3

    resp = await client.get(API, params={"userId": alice["user"]["id"], "limit": 2, "page": 2})
    data = resp.json()["data"]
    assert data["meta"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}
    assert len(data["videos"]) == 1


async def test_list_videos_rejects_unknown_sort_field(client):
    resp = await client.get(API, params={"sortBy": "password"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_list_videos_validates_pagination(client):
    resp = await client.get(API, params={"page": 0})
    assert resp.status_code == 400
    assert resp.json()["errors"]


async def test_guest_view_is_preview_and_not_counted(client, alice):
    video = await publish(client, alice["accessToken"])
    resp = await client.get(f"{API}/{video['id']}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["isPreviewMode"] is True
    assert data["views"] == 0


async def test_authenticated_view_increments_views(client, alice, bob):
    video = await publish(client, alice["accessToken"])
    headers = auth(bob["accessToken"])
    await client.get(f"{API}/{video['id']}", headers=headers)
    resp = await client.get(f"{API}/{video['id']}", headers=headers)
    data = resp.json()["data"]
    assert data["views"] == 2
    assert data["isPreviewMode"] is None


async def test_get_video_invalid_and_missing_ids(client):
    resp = await client.get(f"{API}/not-a-uuid")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid video ID"

    resp = await client.get(f"{API}/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404


async def test_update_video_owner_only(client, alice, bob):
    video = await publish(client, alice["accessToken"])
    url = f"{API}/{video['id']}"

    forbidden = await client.patch(url, data={"title": "Hijack"}, headers=auth(bob["accessToken"]))
    assert forbidden.status_code == 403

    empty = await client.patch(url, headers=auth(alice["accessToken"]))
    assert empty.status_code == 400

    ok = await client.patch(url, data={"title": "Renamed"}, headers=auth(alice["accessToken"]))
    assert ok.status_code == 200
    assert ok.json()["data"]["title"] == "Renamed"
    assert ok.json()["data"]["description"] == video["description"]


async def test_update_thumbnail_replaces_object(client, storage, alice):
    video = await publish(client, alice["accessToken"])
    resp = await client.patch(
        f"{API}/{video['id']}",
        files={"thumbnail": ("new.png", PNG, "image/png")},
        headers=auth(alice["accessToken"]),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["thumbnail"] != video["thumbnail"]
    assert storage.public_url(storage.deleted[0]) == video["thumbnail"]


async def test_toggle_publish_hides_video_from_others(client, alice, bob):
    video = await publish(client, alice["accessToken"])
    url = f"{API}/toggle/publish/{video['id']}"

    forbidden = await client.patch(url, headers=auth(bob["accessToken"]))
    assert forbidden.status_code == 403

    resp = await client.patch(url, headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    assert resp.json()["data"]["isPublished"] is False

    listing = await client.get(API)
    assert listing.json()["data"]["meta"]["total"] == 0
    assert (await client.get(f"{API}/{video['id']}")).status_code == 404
    assert (await client.get(f"{API}/{video['id']}", headers=auth(bob["accessToken"]))).status_code == 404
    assert (await client.get(f"{API}/{video['id']}", headers=auth(alice["accessToken"]))).status_code == 200


async def test_delete_video_cascades(client, storage, alice, bob):
    video = await publish(client, alice["accessToken"])
    vid = video["id"]
    bob_headers = auth(bob["accessToken"])

    comment = (await client.post(f"/api/v1/comments/{vid}", json={"content": "Nice"}, headers=bob_headers)).json()["data"]
    await client.post(f"/api/v1/likes/toggle/v/{vid}", headers=bob_headers)
    await client.post(f"/api/v1/likes/toggle/c/{comment['id']}", headers=bob_headers)
    await client.get(f"{API}/{vid}", headers=bob_headers)
    playlist = (await client.post(
        "/api/v1/playlist", json={"name": "Faves", "description": "best"}, headers=bob_headers
    )).json()["data"]
    await client.patch(f"/api/v1/playlist/add/{vid}/{playlist['id']}", headers=bob_headers)

    forbidden = await client.delete(f"{API}/{vid}", headers=bob_headers)
    assert forbidden.status_code == 403

    resp = await client.delete(f"{API}/{vid}", headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    assert resp.json()["data"] == {}

    assert (await client.get(f"{API}/{vid}")).status_code == 404
    liked = (await client.get("/api/v1/likes/videos", headers=bob_headers)).json()["data"]
    assert liked["meta"]["total"] == 0
    history = (await client.get("/api/v1/users/history", headers=bob_headers)).json()["data"]
    assert history == []
    pl = (await client.get(f"/api/v1/playlist/{playlist['id']}")).json()["data"]
    assert pl["totalVideos"] == 0
    like_comment = await client.post(f"/api/v1/likes/toggle/c/{comment['id']}", headers=bob_headers)
    assert like_comment.status_code == 404

    removed = {storage.public_url(k) for k in storage.deleted}
    assert {video["videoFile"], video["thumbnail"]} <= removed


async def test_unpublished_video_is_hidden_on_every_read_path(client, alice, bob):
    video = await publish(client, alice["accessToken"], title="Secret draft")
    vid = video["id"]
    bob_headers = auth(bob["accessToken"])
    alice_headers = auth(alice["accessToken"])

    comment = (await client.post(f"/api/v1/comments/{vid}", json={"content": "First"}, headers=bob_headers)).json()["data"]
    await client.post(f"/api/v1/likes/toggle/v/{vid}", headers=bob_headers)
    await client.get(f"{API}/{vid}", headers=bob_headers)
    playlist = (await client.post(
        "/api/v1/playlist", json={"name": "Later", "description": "watch later"}, headers=bob_headers
    )).json()["data"]
    await client.patch(f"/api/v1/playlist/add/{vid}/{playlist['id']}", headers=bob_headers)
    other = (await client.post(
        "/api/v1/playlist", json={"name": "More", "description": "more"}, headers=bob_headers
    )).json()["data"]

    await client.patch(f"{API}/toggle/publish/{vid}", headers=alice_headers)

    guest_playlist = (await client.get(f"/api/v1/playlist/{playlist['id']}")).json()["data"]
    assert guest_playlist["videos"] == [] and guest_playlist["totalVideos"] == 0
    bob_playlists = (await client.get(f"/api/v1/playlist/user/{bob['user']['id']}", headers=bob_headers)).json()["data"]
    assert all(p["videos"] == [] for p in bob_playlists)

    liked = (await client.get("/api/v1/likes/videos", headers=bob_headers)).json()["data"]
    assert liked["likes"] == [] and liked["meta"]["total"] == 0
    history = (await client.get("/api/v1/users/history", headers=bob_headers)).json()["data"]
    assert history == []

    assert (await client.get(f"/api/v1/comments/{vid}")).status_code == 404
    assert (await client.get(f"/api/v1/comments/{vid}", headers=bob_headers)).status_code == 404
    resp = await client.post(f"/api/v1/comments/{vid}", json={"content": "Again"}, headers=bob_headers)
    assert resp.status_code == 404
    assert (await client.post(f"/api/v1/likes/toggle/v/{vid}", headers=bob_headers)).status_code == 404
    assert (await client.post(f"/api/v1/likes/toggle/c/{comment['id']}", headers=bob_headers)).status_code == 404
    resp = await client.patch(f"/api/v1/playlist/add/{vid}/{other['id']}", headers=bob_headers)
    assert resp.status_code == 404

    # the owner still sees everything
    assert (await client.get(f"/api/v1/comments/{vid}", headers=alice_headers)).json()["data"]["totalDocs"] == 1
    assert (await client.post(f"/api/v1/likes/toggle/v/{vid}", headers=alice_headers)).status_code == 200
    mine = (await client.post(
        "/api/v1/playlist", json={"name": "Drafts", "description": "wip"}, headers=alice_headers
    )).json()["data"]
    added = await client.patch(f"/api/v1/playlist/add/{vid}/{mine['id']}", headers=alice_headers)
    assert [v["title"] for v in added.json()["data"]["videos"]] == ["Secret draft"]
    assert (await client.get(f"/api/v1/playlist/{mine['id']}")).json()["data"]["videos"] == []


async def test_failed_thumbnail_upload_leaves_no_orphans(client, storage, alice):
    before = dict(storage.objects)
    storage.fail_folders = {"thumbnails"}
    resp = await client.post(
        API,
        data={"title": "Clip", "description": "desc"},
        files={
            "videoFile": ("clip.mp4", MP4, "video/mp4"),
            "thumbnail": ("thumb.png", PNG, "image/png"),
        },
        headers=auth(alice["accessToken"]),
    )
    assert resp.status_code == 500
    assert resp.json()["message"] == "Thumbnail upload failed"
    assert storage.objects == before
    assert [key.split("/")[0] for key in storage.deleted] == ["videos"]


async def test_views_do_not_change_updated_at(client, alice, bob):
    await publish(client, alice["accessToken"])
    before = (await client.get(API)).json()["data"]["videos"][0]

    headers = auth(bob["accessToken"])
    await client.get(f"{API}/{before['id']}", headers=headers)
    await client.get(f"{API}/{before['id']}", headers=headers)

    after = (await client.get(API)).json()["data"]["videos"][0]
    assert after["views"] == 2
    assert after["updatedAt"] == before["updatedAt"]
