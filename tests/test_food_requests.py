"""Food request tests: worker submission, admin list and toggle."""

from __future__ import annotations

from tasktracker.food_requests.service import FoodRequestService

REQUESTS = [
    {"_id": "f1", "worker": {"_id": "w1", "name": "Jane Doe"}, "date": "2024-03-01"},
    {"_id": "f2", "worker": {"_id": "w2", "name": "Sam Lee"}, "date": "2024-03-01"},
]


async def test_worker_submits_request(client, worker_session, upstream):
    upstream.add("POST", "/food-requests", json={"message": "Request recorded"}, status=201)

    resp = await client.post("/api/worker/food-requests")

    assert resp.status_code == 201
    assert resp.json() == {"message": "Request recorded"}


async def test_closed_requests_surface_server_message(client, worker_session, upstream):
    upstream.add("POST", "/food-requests", json={"message": "Food requests are closed"}, status=400)

    resp = await client.post("/api/worker/food-requests")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Food requests are closed"


async def test_settings_default_enabled(api, worker_session, upstream):
    upstream.add("GET", "/food-requests/settings", json=None)
    assert (await FoodRequestService.get_settings(api)).enabled is True


async def test_admin_screen_loads_requests_and_switch(client, admin_session, upstream):
    upstream.add("GET", "/food-requests", json=REQUESTS)
    upstream.add("GET", "/food-requests/settings", json={"enabled": False})

    body = (await client.get("/api/admin/food-requests")).json()

    assert body["total"] == 2
    assert body["enabled"] is False
    assert body["refreshed_at"] is not None


async def test_toggle_invalidates_screen(client, admin_session, upstream):
    upstream.add("GET", "/food-requests", json=REQUESTS)
    upstream.add("GET", "/food-requests/settings", json={"enabled": True})
    upstream.add("PUT", "/food-requests/toggle", json={"enabled": False})

    await client.get("/api/admin/food-requests")
    resp = await client.put("/api/admin/food-requests/toggle")
    await client.get("/api/admin/food-requests")

    assert resp.json() == {"enabled": False, "message": "Food requests disabled successfully"}
    assert len(upstream.calls_to("GET", "/food-requests")) == 2
