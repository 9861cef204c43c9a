"""
ProgressLog Backend — Records API Tests
=========================================

What:  End-to-end tests of the /api/records endpoints.
How:   HTTPX AsyncClient over ASGITransport against a temporary SQLite
       database (see conftest.py); every request goes through the real
       routes, service, session dependency and exception handlers.
"""

import pytest
from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


def _failing_commit(message):
    return AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception(message)))


async def _create(client, **fields):
    response = await client.post("/api/records", json=fields)
    assert response.status_code == 200
    return response.json()["data"]["id"]


async def _list(client):
    response = await client.get("/api/records")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "success"
    return body["data"]


async def _get(client, record_id):
    return next(r for r in await _list(client) if r["id"] == record_id)


class TestListRecords:

    @pytest.mark.asyncio
    async def test_empty_table(self, test_client):
        response = await test_client.get("/api/records")

        assert response.status_code == 200
        assert response.json() == {"message": "success", "data": []}

    @pytest.mark.asyncio
    async def test_ordered_by_timestamp_descending(self, test_client):
        for ts in (5, 1, 9):
            await _create(test_client, name=f"ts-{ts}", timestamp=ts)

        records = await _list(test_client)

        assert [r["timestamp"] for r in records] == [9, 5, 1]


class TestCreateRecord:

    @pytest.mark.asyncio
    async def test_returns_new_id(self, test_client, sample_payload):
        response = await test_client.post("/api/records", json=sample_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "success"
        assert isinstance(body["data"]["id"], int)

    @pytest.mark.asyncio
    async def test_round_trip(self, test_client, sample_payload):
        record_id = await _create(test_client, **sample_payload)

        stored = await _get(test_client, record_id)

        for field, value in sample_payload.items():
            assert stored[field] == value, field
        assert stored["likes"] == 0

    @pytest.mark.asyncio
    async def test_monthly_without_unit(self, test_client):
        record_id = await _create(test_client, name="a", frequency="monthly")

        assert (await _get(test_client, record_id))["unit"] == "جزء"

    @pytest.mark.asyncio
    async def test_daily_without_unit(self, test_client):
        record_id = await _create(test_client, name="a", frequency="daily")

        assert (await _get(test_client, record_id))["unit"] == "صفحة"

    @pytest.mark.asyncio
    async def test_supplied_likes_is_ignored(self, test_client):
        record_id = await _create(test_client, name="a", likes=50)

        assert (await _get(test_client, record_id))["likes"] == 0

    @pytest.mark.asyncio
    async def test_defaults_for_empty_body(self, test_client):
        record_id = await _create(test_client)

        stored = await _get(test_client, record_id)
        assert stored["kind"] == "record"
        assert stored["quantity"] == 0
        assert stored["likes"] == 0
        assert stored["timestamp"] > 0
        assert stored["unit"] == "صفحة"

    @pytest.mark.asyncio
    async def test_separator_kind_is_kept(self, test_client):
        record_id = await _create(test_client, kind="separator", timestamp=10)

        assert (await _get(test_client, record_id))["kind"] == "separator"

    @pytest.mark.asyncio
    async def test_malformed_score_is_rejected(self, test_client):
        response = await test_client.post("/api/records", json={"score": "abc"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "validation_error"
        assert "score" in body["error"]
        assert await _list(test_client) == []

    @pytest.mark.asyncio
    async def test_malformed_score_lists_field_details(self, test_client):
        response = await test_client.post("/api/records", json={"name": "Ali", "score": "abc"})

        details = response.json()["details"]
        assert details["field"] == "score"
        assert details["errors"][0]["loc"] == ["score"]
        assert details["errors"][0]["type"] == "int_parsing"

    @pytest.mark.asyncio
    async def test_failed_commit_returns_500(self, test_client):
        with patch.object(AsyncSession, "commit", _failing_commit("connection lost")):
            response = await test_client.post("/api/records", json={"name": "Ali"})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "database_error"
        assert "connection lost" in body["error"]
        assert await _list(test_client) == []


class TestUpdateRecord:

    @pytest.mark.asyncio
    async def test_overwrites_fields(self, test_client, sample_payload):
        record_id = await _create(test_client, **sample_payload)

        response = await test_client.put(
            f"/api/records/{record_id}",
            json={**sample_payload, "name": "Omar", "score": 10},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "success", "changes": 1}
        stored = await _get(test_client, record_id)
        assert stored["name"] == "Omar"
        assert stored["score"] == 10

    @pytest.mark.asyncio
    async def test_omitted_fields_are_cleared_but_likes_kept(self, test_client, sample_payload):
        record_id = await _create(test_client, **sample_payload)
        await test_client.post(f"/api/records/{record_id}/like")

        await test_client.put(
            f"/api/records/{record_id}",
            json={"name": "Omar", "frequency": "monthly", "timestamp": 7},
        )

        stored = await _get(test_client, record_id)
        assert stored["name"] == "Omar"
        assert stored["notes"] is None
        assert stored["score"] is None
        assert stored["quantity"] is None
        assert stored["unit"] == "جزء"
        assert stored["kind"] == "record"
        assert stored["likes"] == 1

    @pytest.mark.asyncio
    async def test_separator_becomes_record_when_kind_omitted(self, test_client):
        record_id = await _create(test_client, kind="separator", timestamp=10)

        await test_client.put(f"/api/records/{record_id}", json={"timestamp": 10})

        assert (await _get(test_client, record_id))["kind"] == "record"

    @pytest.mark.asyncio
    async def test_separator_kept_when_kind_resent(self, test_client):
        record_id = await _create(test_client, kind="separator", timestamp=10)

        await test_client.put(
            f"/api/records/{record_id}", json={"kind": "separator", "timestamp": 11}
        )

        stored = await _get(test_client, record_id)
        assert stored["kind"] == "separator"
        assert stored["timestamp"] == 11

    @pytest.mark.asyncio
    async def test_missing_id_succeeds_without_creating(self, test_client, sample_payload):
        response = await test_client.put("/api/records/999", json=sample_payload)

        assert response.status_code == 200
        assert response.json() == {"message": "success", "changes": 0}
        assert await _list(test_client) == []

    @pytest.mark.asyncio
    async def test_non_integer_id_is_rejected(self, test_client, sample_payload):
        response = await test_client.put("/api/records/abc", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"


class TestDeleteRecord:

    @pytest.mark.asyncio
    async def test_deletes_row(self, test_client):
        keep = await _create(test_client, name="keep", timestamp=2)
        gone = await _create(test_client, name="gone", timestamp=1)

        response = await test_client.delete(f"/api/records/{gone}")

        assert response.status_code == 200
        assert response.json() == {"message": "deleted"}
        assert [r["id"] for r in await _list(test_client)] == [keep]

    @pytest.mark.asyncio
    async def test_missing_id_succeeds(self, test_client):
        response = await test_client.delete("/api/records/4242")

        assert response.status_code == 200
        assert response.json() == {"message": "deleted"}


class TestLikeRecord:

    @pytest.mark.asyncio
    async def test_two_likes_add_two(self, test_client):
        record_id = await _create(test_client, name="a")

        for _ in range(2):
            response = await test_client.post(f"/api/records/{record_id}/like")
            assert response.status_code == 200
            assert response.json() == {"message": "liked"}

        assert (await _get(test_client, record_id))["likes"] == 2

    @pytest.mark.asyncio
    async def test_like_only_touches_target(self, test_client):
        liked = await _create(test_client, name="a", timestamp=2)
        other = await _create(test_client, name="b", timestamp=1)

        await test_client.post(f"/api/records/{liked}/like")

        assert (await _get(test_client, other))["likes"] == 0

    @pytest.mark.asyncio
    async def test_failed_commit_leaves_likes_unchanged(self, test_client):
        record_id = await _create(test_client, timestamp=1)

        with patch.object(AsyncSession, "commit", _failing_commit("server closed the connection")):
            response = await test_client.post(f"/api/records/{record_id}/like")

        assert response.status_code == 500
        assert response.json()["code"] == "database_error"
        assert (await _get(test_client, record_id))["likes"] == 0

    @pytest.mark.asyncio
    async def test_missing_id_is_noop(self, test_client):
        response = await test_client.post("/api/records/777/like")

        assert response.status_code == 200
        assert response.json() == {"message": "liked"}
        assert await _list(test_client) == []


class TestErrorResponses:

    @pytest.mark.asyncio
    async def test_database_failure_returns_500_with_message(self, test_client, database):
        # Drop the table underneath the running app
        async with database.engine.begin() as conn:
            from app.database import Base
            await conn.run_sync(Base.metadata.drop_all)

        response = await test_client.get("/api/records")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "database_error"
        assert "records" in body["error"]

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/records", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/api/records")

        assert len(response.headers["X-Request-ID"]) == 8
