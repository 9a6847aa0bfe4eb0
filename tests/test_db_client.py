"""Tests for the Supabase profile store adapter."""

import asyncio
import time
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from sitter_gateway.db.client import DatabaseClient, run_blocking
from sitter_gateway.exceptions import DependencyError
from sitter_gateway.models.profile import PrivateProfile, PublicProfile, Role


def _result(data):
    result = MagicMock()
    result.data = data
    return result


@pytest.fixture
def supabase_client():
    return MagicMock()


@pytest.fixture
def table(supabase_client):
    """The query builder returned by client.table(); every filter chains back to it."""
    builder = MagicMock()
    for name in ("select", "insert", "upsert", "update", "delete", "eq", "in_", "limit"):
        getattr(builder, name).return_value = builder
    supabase_client.table.return_value = builder
    return builder


class TestWrites:
    """Inserts and deletes."""

    @pytest.mark.asyncio
    async def test_insert_private_profile_row(self, supabase_client, table):
        table.execute.return_value = _result([])
        db = DatabaseClient(supabase_client)

        await db.insert_private_profile(PrivateProfile.for_role("u1", Role.HOST))

        supabase_client.table.assert_called_with("profiles_private")
        table.insert.assert_called_once_with(
            {"id": "u1", "isHost": True, "isSitter": False, "approved": False, "phone": None}
        )

    @pytest.mark.asyncio
    async def test_delete_public_profile_keyed_by_id(self, supabase_client, table):
        table.execute.return_value = _result([])
        db = DatabaseClient(supabase_client)

        await db.delete_public_profile("u1")

        supabase_client.table.assert_called_with("profiles")
        table.eq.assert_called_once_with("id", "u1")

    @pytest.mark.asyncio
    async def test_duplicate_key_is_client_error(self, supabase_client, table):
        table.execute.side_effect = APIError(
            {"message": "duplicate key value", "code": "23505", "details": None, "hint": None}
        )
        db = DatabaseClient(supabase_client)

        with pytest.raises(DependencyError) as exc_info:
            await db.insert_public_profile(PublicProfile(id="u1"))

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "duplicate key value"

    @pytest.mark.asyncio
    async def test_service_error_is_500(self, supabase_client, table):
        table.execute.side_effect = APIError(
            {"message": "permission denied", "code": "42501", "details": None, "hint": None}
        )
        db = DatabaseClient(supabase_client)

        with pytest.raises(DependencyError) as exc_info:
            await db.insert_public_profile(PublicProfile(id="u1"))

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_is_500(self, supabase_client, table):
        table.execute.side_effect = httpx.ConnectError("refused")
        db = DatabaseClient(supabase_client)

        with pytest.raises(DependencyError) as exc_info:
            await db.delete_private_profile("u1")

        assert exc_info.value.status_code == 500


class TestReads:
    """Point lookups."""

    @pytest.mark.asyncio
    async def test_get_private_profile(self, supabase_client, table):
        table.execute.return_value = _result(
            [{"id": "u1", "isHost": True, "isSitter": False, "approved": True, "phone": None}]
        )
        db = DatabaseClient(supabase_client)

        profile = await db.get_private_profile("u1")

        assert profile.is_host is True
        assert profile.approved is True

    @pytest.mark.asyncio
    async def test_get_public_profile_missing(self, supabase_client, table):
        table.execute.return_value = _result([])
        db = DatabaseClient(supabase_client)

        assert await db.get_public_profile("nobody") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "rows,expected",
        [
            ([{"approved": True}], True),
            ([{"approved": False}], False),
            ([{"approved": None}], False),
            ([], False),
        ],
    )
    async def test_is_approved(self, supabase_client, table, rows, expected):
        table.execute.return_value = _result(rows)
        db = DatabaseClient(supabase_client)

        assert await db.is_approved("u1") is expected
        table.select.assert_called_once_with("approved")

    @pytest.mark.asyncio
    async def test_batch_lookup_uses_in_filter(self, supabase_client, table):
        table.execute.return_value = _result(
            [{"id": "a", "first_name": "A"}, {"id": "b", "first_name": "B"}]
        )
        db = DatabaseClient(supabase_client)

        profiles = await db.get_public_profiles(["a", "b"])

        assert [p.id for p in profiles] == ["a", "b"]
        table.in_.assert_called_once_with("id", ["a", "b"])


class TestRunBlocking:
    """Tests for run_blocking under cancellation."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        assert await run_blocking(lambda x: x * 2, 21) == 42

    @pytest.mark.asyncio
    async def test_cancel_waits_for_call_and_hands_over_result(self):
        finished = []
        handed_over = []

        def _slow():
            time.sleep(0.2)
            finished.append(True)
            return "row"

        async def _on_interrupted(result):
            handed_over.append(result)

        task = asyncio.ensure_future(run_blocking(_slow, on_interrupted=_on_interrupted))
        await asyncio.sleep(0.05)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert finished == [True]
        assert handed_over == ["row"]

    @pytest.mark.asyncio
    async def test_failed_call_skips_handover(self):
        handed_over = []

        def _slow_failure():
            time.sleep(0.2)
            raise RuntimeError("boom")

        async def _on_interrupted(result):
            handed_over.append(result)

        task = asyncio.ensure_future(run_blocking(_slow_failure, on_interrupted=_on_interrupted))
        await asyncio.sleep(0.05)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert handed_over == []
