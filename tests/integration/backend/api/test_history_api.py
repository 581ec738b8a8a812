"""
Integration Tests for History API.

Tests the history endpoints with a real database session.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from taskboard.backend.core.utils import utc_now

HISTORY = "/api/v1/history"
NOTES = "/api/v1/notes"
GROUPS = "/api/v1/groups"


async def _complete(client, headers, title, priority="medium", group_id=None):
    body = {"title": title, "priority": priority, "status": "done"}
    if group_id:
        body["groupId"] = group_id
    response = await client.post(NOTES, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestQueryHistory:
    """Tests for GET /api/v1/history."""

    @pytest.mark.asyncio
    async def test_archived_note_shape(self, client: AsyncClient, api, auth_headers, owner_id):
        group = (await client.post(GROUPS, json={"name": "Work"}, headers=auth_headers)).json()["data"]
        note = await _complete(client, auth_headers, "Report", "high", group["id"])

        response = await client.get(HISTORY, headers=auth_headers)

        item = api.assert_success(response)["data"][0]
        assert set(item) == {
            "id",
            "userId",
            "originalNoteId",
            "title",
            "description",
            "priority",
            "groupName",
            "completedAt",
            "archivedAt",
            "createdAt",
        }
        assert item["originalNoteId"] == note["id"]
        assert item["userId"] == owner_id
        assert item["groupName"] == "Work"
        assert item["completedAt"] == note["completedAt"]

    @pytest.mark.asyncio
    async def test_filters(self, client, api, auth_headers):
        await _complete(client, auth_headers, "Buy milk", "high")
        await _complete(client, auth_headers, "Buy bread", "low")

        response = await client.get(HISTORY, params={"search": "milk", "priority": "high"}, headers=auth_headers)

        assert [i["title"] for i in api.assert_success(response)["data"]] == ["Buy milk"]

    @pytest.mark.asyncio
    async def test_inverted_dates_are_400(self, client, api, auth_headers):
        today = utc_now().date()

        response = await client.get(
            HISTORY,
            params={"start_date": today.isoformat(), "end_date": (today - timedelta(days=1)).isoformat()},
            headers=auth_headers,
        )

        api.assert_error(response, 400)

    @pytest.mark.asyncio
    async def test_isolated_per_owner(self, client, api, auth_headers, other_headers):
        await _complete(client, other_headers, "Theirs")

        response = await client.get(HISTORY, headers=auth_headers)

        assert api.assert_success(response)["pagination"]["total"] == 0


class TestHistoryStats:
    """Tests for the statistics endpoints."""

    @pytest.mark.asyncio
    async def test_daily_stats(self, client, api, auth_headers):
        await _complete(client, auth_headers, "a", "high")
        await _complete(client, auth_headers, "b", "high")
        await _complete(client, auth_headers, "c", "medium")

        response = await client.get(f"{HISTORY}/stats/daily", params={"days": 7}, headers=auth_headers)

        buckets = api.assert_success(response)["data"]
        assert len(buckets) == 1
        assert buckets[0]["totalCompleted"] == 3
        assert buckets[0]["byPriority"]["high"] == 2
        assert buckets[0]["byPriority"]["low"] == 0

    @pytest.mark.asyncio
    async def test_priority_and_group_stats(self, client, api, auth_headers):
        await _complete(client, auth_headers, "a", "low")
        await _complete(client, auth_headers, "b", "low")

        priorities = api.assert_success(await client.get(f"{HISTORY}/stats/priority", headers=auth_headers))
        groups = api.assert_success(await client.get(f"{HISTORY}/stats/groups", headers=auth_headers))

        assert priorities["data"]["low"] == 2
        assert groups["data"] == [{"groupName": "Ungrouped", "count": 2}]

    @pytest.mark.asyncio
    async def test_recent_limit_bounds(self, client, api, auth_headers):
        await _complete(client, auth_headers, "a")

        ok = await client.get(f"{HISTORY}/recent", params={"limit": 1}, headers=auth_headers)
        too_many = await client.get(f"{HISTORY}/recent", params={"limit": 51}, headers=auth_headers)

        assert len(api.assert_success(ok)["data"]) == 1
        api.assert_validation_error(too_many, field="limit")


class TestHistoryEntries:
    """Tests for single entries and reconciliation."""

    @pytest.mark.asyncio
    async def test_get_and_delete_entry(self, client, api, auth_headers, other_headers):
        note = await _complete(client, auth_headers, "a")
        entry = api.assert_success(await client.get(HISTORY, headers=auth_headers))["data"][0]

        api.assert_error(await client.get(f"{HISTORY}/{entry['id']}", headers=other_headers), 404)
        assert (await client.delete(f"{HISTORY}/{entry['id']}", headers=auth_headers)).status_code == 204
        api.assert_error(await client.get(f"{HISTORY}/{entry['id']}", headers=auth_headers), 404)
        assert api.assert_success(await client.get(f"{NOTES}/{note['id']}", headers=auth_headers))

    @pytest.mark.asyncio
    async def test_reconcile_restores_deleted_entry(self, client, api, auth_headers):
        await _complete(client, auth_headers, "a")
        entry = api.assert_success(await client.get(HISTORY, headers=auth_headers))["data"][0]
        await client.delete(f"{HISTORY}/{entry['id']}", headers=auth_headers)

        first = await client.post(f"{HISTORY}/reconcile", headers=auth_headers)
        second = await client.post(f"{HISTORY}/reconcile", headers=auth_headers)

        assert api.assert_success(first)["data"] == {"archived": 1}
        assert api.assert_success(second)["data"] == {"archived": 0}
