"""
Tests for the persistence gateways.

SupabaseGateway runs against the mock_supabase fixture; InMemoryGateway
is exercised directly.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from onboarding.errors import PersistenceError
from onboarding.gateway import InMemoryGateway, OnboardingGateway, SupabaseGateway
from onboarding.state import OnboardingRecord, ProfileRecord


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


USER_ROW = {
    "id": "u-1",
    "chat_id": "U1",
    "onboarding_step": 2,
    "onboarding_state": {"name": "Alice", "petName": "Mochi"},
    "onboarding_complete": False,
}

PROFILE = ProfileRecord(
    name="Mochi",
    pet_type="Dog",
    breed=None,
    dob="2020-05-01",
    preferences="likes chicken",
)


def _table(mock_supabase) -> MagicMock:
    return mock_supabase.table.return_value


def test_implementations_satisfy_protocol(mock_supabase):
    assert isinstance(SupabaseGateway(mock_supabase), OnboardingGateway)
    assert isinstance(InMemoryGateway(), OnboardingGateway)


class TestSupabaseLoad:

    def test_found(self, mock_supabase):
        _table(mock_supabase).execute.return_value = MagicMock(data=[USER_ROW])
        record = _run(SupabaseGateway(mock_supabase).load_onboarding("U1"))

        assert record == OnboardingRecord(
            identifier="U1",
            user_id="u-1",
            step=2,
            state={"name": "Alice", "petName": "Mochi"},
            complete=False,
        )
        mock_supabase.table.assert_called_with("users")
        _table(mock_supabase).eq.assert_called_with("chat_id", "U1")

    def test_not_found(self, mock_supabase):
        assert _run(SupabaseGateway(mock_supabase).load_onboarding("U1")) is None

    def test_failure_raises_persistence_error(self, mock_supabase):
        _table(mock_supabase).execute.side_effect = RuntimeError("connection reset")
        with pytest.raises(PersistenceError) as exc_info:
            _run(SupabaseGateway(mock_supabase).load_onboarding("U1"))
        assert exc_info.value.operation == "load_onboarding"


class TestSupabaseCreate:

    def test_inserts_fresh_record(self, mock_supabase):
        created = {**USER_ROW, "onboarding_step": 0, "onboarding_state": {}}
        _table(mock_supabase).execute.return_value = MagicMock(data=[created])

        record = _run(SupabaseGateway(mock_supabase).create_onboarding("U1"))

        assert record.step == 0
        assert record.user_id == "u-1"
        _table(mock_supabase).insert.assert_called_once_with({
            "chat_id": "U1",
            "onboarding_step": 0,
            "onboarding_state": {},
            "onboarding_complete": False,
        })

    def test_concurrent_create_rereads_existing(self, mock_supabase):
        conflict = APIError({"code": "23505", "message": "duplicate key value"})
        _table(mock_supabase).execute.side_effect = [conflict, MagicMock(data=[USER_ROW])]

        record = _run(SupabaseGateway(mock_supabase).create_onboarding("U1"))

        assert record.step == 2
        assert record.state["petName"] == "Mochi"

    def test_other_api_errors_raise(self, mock_supabase):
        error = APIError({"code": "42501", "message": "permission denied"})
        _table(mock_supabase).execute.side_effect = error
        with pytest.raises(PersistenceError):
            _run(SupabaseGateway(mock_supabase).create_onboarding("U1"))


class TestSupabaseSave:

    def test_updates_by_chat_id(self, mock_supabase):
        _table(mock_supabase).execute.return_value = MagicMock(data=[USER_ROW])
        record = OnboardingRecord.from_dict(USER_ROW)

        _run(SupabaseGateway(mock_supabase).save_onboarding(record))

        _table(mock_supabase).update.assert_called_once_with({
            "onboarding_step": 2,
            "onboarding_state": {"name": "Alice", "petName": "Mochi"},
            "onboarding_complete": False,
        })
        _table(mock_supabase).eq.assert_called_with("chat_id", "U1")

    def test_missing_row_raises(self, mock_supabase):
        with pytest.raises(PersistenceError):
            _run(SupabaseGateway(mock_supabase).save_onboarding(OnboardingRecord(identifier="U1")))

    def test_failure_raises(self, mock_supabase):
        _table(mock_supabase).execute.side_effect = RuntimeError("timeout")
        with pytest.raises(PersistenceError):
            _run(SupabaseGateway(mock_supabase).save_onboarding(OnboardingRecord(identifier="U1")))


class TestSupabaseUpsertProfile:

    def test_inserts_when_missing(self, mock_supabase):
        table = _table(mock_supabase)
        table.execute.side_effect = [MagicMock(data=[]), MagicMock(data=[{"id": "pet-1"}])]

        _run(SupabaseGateway(mock_supabase).upsert_profile("u-1", PROFILE))

        table.insert.assert_called_once_with({
            "user_id": "u-1",
            "name": "Mochi",
            "type": "Dog",
            "breed": None,
            "dob": "2020-05-01",
            "preferences": {"description": "likes chicken"},
        })
        table.update.assert_not_called()

    def test_updates_existing_in_place(self, mock_supabase):
        table = _table(mock_supabase)
        table.execute.side_effect = [MagicMock(data=[{"id": "pet-1"}]), MagicMock(data=[{"id": "pet-1"}])]

        _run(SupabaseGateway(mock_supabase).upsert_profile("u-1", PROFILE))

        table.update.assert_called_once_with(PROFILE.to_row())
        table.eq.assert_called_with("id", "pet-1")
        table.insert.assert_not_called()

    def test_failure_raises(self, mock_supabase):
        _table(mock_supabase).execute.side_effect = RuntimeError("timeout")
        with pytest.raises(PersistenceError):
            _run(SupabaseGateway(mock_supabase).upsert_profile("u-1", PROFILE))


class TestSupabaseGetProfile:

    def test_found(self, mock_supabase):
        _table(mock_supabase).execute.side_effect = [
            MagicMock(data=[{"id": "u-1"}]),
            MagicMock(data=[{"id": "pet-1", "user_id": "u-1", **PROFILE.to_row()}]),
        ]
        assert _run(SupabaseGateway(mock_supabase).get_profile("U1")) == PROFILE

    def test_unknown_chat(self, mock_supabase):
        assert _run(SupabaseGateway(mock_supabase).get_profile("U1")) is None

    def test_no_pet_yet(self, mock_supabase):
        _table(mock_supabase).execute.side_effect = [MagicMock(data=[{"id": "u-1"}]), MagicMock(data=[])]
        assert _run(SupabaseGateway(mock_supabase).get_profile("U1")) is None


class TestInMemoryGateway:

    def test_create_is_idempotent(self):
        gateway = InMemoryGateway()
        first = _run(gateway.create_onboarding("U1"))
        second = _run(gateway.create_onboarding("U1"))
        assert first.user_id == second.user_id
        assert len(gateway.users) == 1

    def test_save_and_load(self):
        gateway = InMemoryGateway()
        record = _run(gateway.create_onboarding("U1"))
        _run(gateway.save_onboarding(record.with_answer("name", "Alice")))
        loaded = _run(gateway.load_onboarding("U1"))
        assert loaded.step == 1
        assert loaded.state == {"name": "Alice"}

    def test_save_unknown_chat_raises(self):
        with pytest.raises(PersistenceError):
            _run(InMemoryGateway().save_onboarding(OnboardingRecord(identifier="nobody")))

    def test_repeated_upsert_keeps_one_profile(self):
        gateway = InMemoryGateway()
        record = _run(gateway.create_onboarding("U1"))
        _run(gateway.upsert_profile(record.user_id, PROFILE))
        _run(gateway.upsert_profile(record.user_id, PROFILE))
        assert len(gateway.pets) == 1
        assert _run(gateway.get_profile("U1")) == PROFILE

    def test_upsert_updates_fields(self):
        gateway = InMemoryGateway()
        record = _run(gateway.create_onboarding("U1"))
        _run(gateway.upsert_profile(record.user_id, PROFILE))
        _run(gateway.upsert_profile(record.user_id, ProfileRecord(name="Mochi", pet_type="Cat")))
        assert _run(gateway.get_profile("U1")).pet_type == "Cat"
