"""Leave module tests: worker applications and the admin approval screen."""

from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from tasktracker.client.uploads import FileUpload
from tasktracker.common.exceptions import ValidationException
from tasktracker.leave.schemas import Leave, LeaveCreate
from tasktracker.leave.service import LeaveService, inclusive_days

LEAVES = [
    {
        "_id": "l1",
        "worker": {"_id": "worker-1", "name": "Jane Doe", "department": "kitchen"},
        "leaveType": "Sick Leave",
        "startDate": "2024-03-01T00:00:00.000Z",
        "endDate": "2024-03-02T00:00:00.000Z",
        "status": "Pending",
        "createdAt": "2024-02-20T10:00:00.000Z",
    },
    {
        "_id": "l2",
        "worker": {"_id": "worker-2", "name": "Sam Lee"},
        "leaveType": "Annual Leave",
        "startDate": "2024-03-10T00:00:00.000Z",
        "endDate": "2024-03-15T00:00:00.000Z",
        "status": "Approved",
        "createdAt": "2024-02-25T10:00:00.000Z",
    },
    {
        "_id": "l3",
        "worker": {"_id": "worker-1", "name": "Jane Doe"},
        "leaveType": "Personal Leave",
        "startDate": "2024-04-01T00:00:00.000Z",
        "endDate": "2024-04-01T00:00:00.000Z",
        "status": "Pending",
        "createdAt": "2024-03-20T10:00:00.000Z",
    },
]


def _application(**overrides) -> LeaveCreate:
    fields = {
        "leave_type": "Sick Leave",
        "start_date": date(2024, 5, 6),
        "end_date": date(2024, 5, 8),
        "reason": "Flu",
    }
    fields.update(overrides)
    return LeaveCreate(**fields)


# ── Pure helpers ────────────────────────────────────────────────────


class TestInclusiveDays:

    def test_same_day_counts_one(self):
        assert inclusive_days(date(2024, 1, 1), date(2024, 1, 1)) == 1

    def test_range_includes_both_ends(self):
        assert inclusive_days(date(2024, 1, 30), date(2024, 2, 2)) == 4


class TestFilterLeaves:

    RECORDS = [Leave.model_validate(item) for item in LEAVES]

    def test_date_from_excludes_earlier_starts(self):
        kept = LeaveService.filter_leaves(self.RECORDS, date_from=date(2024, 3, 10))
        assert [l.id for l in kept] == ["l2", "l3"]

    def test_date_to_uses_end_date(self):
        kept = LeaveService.filter_leaves(self.RECORDS, date_to=date(2024, 3, 14))
        assert [l.id for l in kept] == ["l1"]

    def test_status_all_keeps_everything(self):
        assert len(LeaveService.filter_leaves(self.RECORDS, status="all")) == 3
        assert [l.id for l in LeaveService.filter_leaves(self.RECORDS, status="Approved")] == ["l2"]


# ── Worker: apply ───────────────────────────────────────────────────


class TestApplyLeave:

    async def test_missing_fields(self, api, object_storage, upstream):
        with pytest.raises(ValidationException) as exc_info:
            await LeaveService.apply_leave(api, object_storage, _application(reason=""))
        assert exc_info.value.detail == "Please fill in all required fields"
        assert upstream.calls == []

    async def test_end_before_start(self, api, object_storage):
        with pytest.raises(ValidationException) as exc_info:
            await LeaveService.apply_leave(
                api, object_storage, _application(end_date=date(2024, 5, 1)),
            )
        assert exc_info.value.detail == "End date cannot be before start date"

    async def test_oversized_document_rejected(self, api, object_storage, storage_upstream):
        document = FileUpload(filename="note.png", content=b"x" * (1024 * 1024 + 1))

        with pytest.raises(ValidationException) as exc_info:
            await LeaveService.apply_leave(api, object_storage, _application(), document)

        assert exc_info.value.detail == "Image size should be less than 1MB"
        assert storage_upstream.calls == []

    async def test_total_days_sent(self, client, worker_session, upstream):
        upstream.add("POST", "/leaves", json={"_id": "l9", "status": "Pending"}, status=201)

        resp = await client.post(
            "/api/worker/leaves",
            data={
                "leave_type": "Sick Leave",
                "start_date": "2024-05-06",
                "end_date": "2024-05-08",
                "reason": "Flu",
            },
        )

        assert resp.status_code == 201
        sent = json.loads(upstream.calls[0].content)
        assert sent == {
            "leaveType": "Sick Leave",
            "startDate": "2024-05-06",
            "endDate": "2024-05-08",
            "reason": "Flu",
            "totalDays": 3,
        }

    async def test_document_uploaded_and_linked(
        self, client, worker_session, upstream, storage_upstream,
    ):
        storage_upstream.default = lambda request: httpx.Response(200, json={})
        upstream.add("POST", "/leaves", json={"_id": "l9"}, status=201)

        resp = await client.post(
            "/api/worker/leaves",
            data={
                "leave_type": "Sick Leave",
                "start_date": "2024-05-06",
                "end_date": "2024-05-06",
                "reason": "Clinic",
            },
            files={"document": ("note.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert resp.status_code == 201
        sent = json.loads(upstream.calls[0].content)
        assert sent["document"].endswith("_note.pdf")
        assert sent["totalDays"] == 1

    async def test_my_leaves_newest_first(self, client, worker_session, upstream):
        upstream.add("GET", "/leaves/me", json=LEAVES)

        data = (await client.get("/api/worker/leaves")).json()

        assert [l["id"] for l in data] == ["l3", "l2", "l1"]

    async def test_admin_cannot_use_worker_screen(self, client, admin_session):
        resp = await client.get("/api/worker/leaves")
        assert resp.status_code == 403


# ── Admin screen ────────────────────────────────────────────────────


class TestAdminLeaves:

    async def test_opening_screen_marks_viewed(self, client, admin_session, upstream):
        upstream.add("PUT", "/leaves/mark-viewed-by-admin", json={"message": "ok"})
        upstream.add("GET", "/leaves/status", json=LEAVES)

        resp = await client.get(
            "/api/admin/leaves", params={"status": "Pending", "date_from": "2024-03-05"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 2
        assert body["status"] == "Pending"
        assert [l["id"] for l in body["data"]] == ["l2", "l3"]
        assert upstream.calls[0].url.path == "/api/leaves/mark-viewed-by-admin"
        assert upstream.calls[1].url.params["status"] == "Pending"

    async def test_mark_viewed_failure_only_logged(self, client, admin_session, upstream, caplog):
        upstream.add("PUT", "/leaves/mark-viewed-by-admin", json={"message": "db down"}, status=500)
        upstream.add("GET", "/leaves/status", json=LEAVES)

        resp = await client.get("/api/admin/leaves")

        assert resp.status_code == 200
        assert resp.json()["total"] == 3
        assert "Failed to mark leaves as viewed: db down" in caplog.text

    async def test_unknown_status_rejected(self, client, admin_session):
        resp = await client.get("/api/admin/leaves", params={"status": "Cancelled"})
        assert resp.status_code == 422

    @pytest.mark.parametrize("action, status", [("approve", "Approved"), ("reject", "Rejected")])
    async def test_approve_and_reject(self, client, admin_session, upstream, action, status):
        upstream.add("PUT", "/leaves/l1/status", json={"_id": "l1", "status": status})

        resp = await client.put(f"/api/admin/leaves/l1/{action}")

        assert resp.json()["status"] == status
        assert json.loads(upstream.calls[0].content) == {"status": status}

    async def test_range_params(self, client, admin_session, upstream):
        upstream.add("GET", "/leaves/range", json=LEAVES[:1])

        resp = await client.get(
            "/api/admin/leaves/range", params={"start_date": "2024-03-01", "end_date": "2024-03-31"},
        )

        assert len(resp.json()) == 1
        params = upstream.calls[0].url.params
        assert params["startDate"] == "2024-03-01"
        assert params["endDate"] == "2024-03-31"

    @pytest.mark.parametrize("payload, expected", [({"count": 4}, 4), (7, 7), ("n/a", 0)])
    async def test_new_requests_count_shapes(self, api, admin_session, upstream, payload, expected):
        upstream.add("GET", "/leaves/new-requests-count", json=payload)
        assert await LeaveService.new_requests_count(api) == expected
