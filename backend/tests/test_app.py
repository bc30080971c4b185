from __future__ import annotations


async def test_root_and_health(client):
    root = await client.get("/")
    assert root.status_code == 200
    assert root.json()["name"] == "VidTube"

    health = await client.get("/health")
    assert health.json()["status"] == "healthy"


async def test_metrics_record_requests(client):
    await client.get("/health")
    resp = await client.get("/metrics/")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "http_request_duration_seconds" in resp.text


async def test_unknown_route_uses_error_envelope(client):
    resp = await client.get("/api/v1/nothing-here")
    assert resp.status_code == 404
    body = resp.json()
    assert body == {"statusCode": 404, "data": None, "message": "Not Found", "success": False, "errors": []}


async def test_validation_errors_are_400_with_field_details(client):
    resp = await client.get("/api/v1/videos", params={"limit": 1000})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "limit"
    assert body["message"].startswith("limit:")
