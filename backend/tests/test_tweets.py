from __future__ import annotations

from conftest import auth


async def test_create_and_list_user_tweets(client, alice):
    headers = auth(alice["accessToken"])
    for text in ("first", "second"):
        resp = await client.post("/api/v1/tweets", json={"content": text}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["data"]["owner"]["username"] == "alice"

    resp = await client.get(f"/api/v1/tweets/user/{alice['user']['id']}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [t["content"] for t in data["tweets"]] == ["second", "first"]
    assert data["meta"]["total"] == 2


async def test_tweet_validation(client, alice):
    resp = await client.post("/api/v1/tweets", json={"content": ""}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Tweet content is required"

    resp = await client.post("/api/v1/tweets", json={"content": "hi"})
    assert resp.status_code == 401

    resp = await client.get("/api/v1/tweets/user/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404


async def test_tweet_update_and_delete_owner_only(client, alice, bob):
    tweet = (await client.post(
        "/api/v1/tweets", json={"content": "draft"}, headers=auth(alice["accessToken"])
    )).json()["data"]
    url = f"/api/v1/tweets/{tweet['id']}"

    assert (await client.patch(url, json={"content": "x"}, headers=auth(bob["accessToken"]))).status_code == 403
    assert (await client.delete(url, headers=auth(bob["accessToken"]))).status_code == 403

    resp = await client.patch(url, json={"content": "final"}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    assert resp.json()["data"]["content"] == "final"

    await client.post(f"/api/v1/likes/toggle/t/{tweet['id']}", headers=auth(bob["accessToken"]))
    resp = await client.delete(url, headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Tweet deleted successfully"

    resp = await client.patch(url, json={"content": "again"}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 404
