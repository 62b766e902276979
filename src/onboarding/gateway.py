"""
Onboarding Persistence Gateway.

Load/create/save of onboarding records and upsert of the derived pet
profile. Two implementations share the OnboardingGateway protocol:

- SupabaseGateway: users + pets tables via the Supabase client
- InMemoryGateway: process-local dicts, for local chat sessions and tests

Every failure of the underlying medium surfaces as PersistenceError.
"""

import logging
import uuid
from typing import Protocol, runtime_checkable

from postgrest.exceptions import APIError
from supabase import Client

from .errors import PersistenceError
from .state import OnboardingRecord, ProfileRecord

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
PETS_TABLE = "pets"

USER_COLUMNS = "id, chat_id, onboarding_step, onboarding_state, onboarding_complete"

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


@runtime_checkable
class OnboardingGateway(Protocol):
    """Record store used by the dispatcher, resolver, and assistant."""

    async def load_onboarding(self, identifier: str) -> OnboardingRecord | None:
        """Get the onboarding record for a chat, or None if never seen."""
        ...

    async def create_onboarding(self, identifier: str) -> OnboardingRecord:
        """
        Create a fresh record (step 0, empty state, incomplete).

        If another request created it first, return that record instead.
        """
        ...

    async def save_onboarding(self, record: OnboardingRecord) -> None:
        """Persist step, state, and completion for an existing record."""
        ...

    async def upsert_profile(self, user_id: str, profile: ProfileRecord) -> None:
        """Update the user's pet profile in place, or insert it if missing."""
        ...

    async def get_profile(self, identifier: str) -> ProfileRecord | None:
        """Get the pet profile for a chat, or None if not created yet."""
        ...


# =============================================================================
# Supabase
# =============================================================================


class SupabaseGateway:
    """OnboardingGateway backed by the Supabase users and pets tables."""

    def __init__(self, client: Client):
        self._client = client

    async def load_onboarding(self, identifier: str) -> OnboardingRecord | None:
        try:
            result = (
                self._client.table(USERS_TABLE)
                .select(USER_COLUMNS)
                .eq("chat_id", identifier)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to load onboarding record for {identifier}: {e}")
            raise PersistenceError("load_onboarding", str(e)) from e

        if not result.data:
            return None
        return OnboardingRecord.from_dict(result.data[0])

    async def create_onboarding(self, identifier: str) -> OnboardingRecord:
        row = OnboardingRecord(identifier=identifier).to_dict()
        try:
            result = self._client.table(USERS_TABLE).insert(row).execute()
        except APIError as e:
            if e.code != UNIQUE_VIOLATION:
                logger.error(f"Failed to create onboarding record for {identifier}: {e}")
                raise PersistenceError("create_onboarding", str(e)) from e
            # Lost the race against a concurrent first message
            logger.info(f"Onboarding record for {identifier} already exists, re-reading")
            existing = await self.load_onboarding(identifier)
            if existing is None:
                raise PersistenceError("create_onboarding", "record vanished after conflict") from e
            return existing
        except Exception as e:
            logger.error(f"Failed to create onboarding record for {identifier}: {e}")
            raise PersistenceError("create_onboarding", str(e)) from e

        if not result.data:
            raise PersistenceError("create_onboarding", "insert returned no row")
        return OnboardingRecord.from_dict(result.data[0])

    async def save_onboarding(self, record: OnboardingRecord) -> None:
        updates = record.to_dict()
        updates.pop("chat_id")
        try:
            result = (
                self._client.table(USERS_TABLE)
                .update(updates)
                .eq("chat_id", record.identifier)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to save onboarding record for {record.identifier}: {e}")
            raise PersistenceError("save_onboarding", str(e)) from e

        if not result.data:
            raise PersistenceError("save_onboarding", f"no users row for chat {record.identifier}")

    async def upsert_profile(self, user_id: str, profile: ProfileRecord) -> None:
        row = profile.to_row()
        try:
            existing = (
                self._client.table(PETS_TABLE)
                .select("id")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            if existing.data:
                pet_id = existing.data[0]["id"]
                self._client.table(PETS_TABLE).update(row).eq("id", pet_id).execute()
                logger.info(f"Updated pet {pet_id} for user {user_id}")
            else:
                self._client.table(PETS_TABLE).insert({"user_id": user_id, **row}).execute()
                logger.info(f"Created pet for user {user_id}")
        except Exception as e:
            logger.error(f"Failed to upsert pet for user {user_id}: {e}")
            raise PersistenceError("upsert_profile", str(e)) from e

    async def get_profile(self, identifier: str) -> ProfileRecord | None:
        try:
            user = (
                self._client.table(USERS_TABLE)
                .select("id")
                .eq("chat_id", identifier)
                .limit(1)
                .execute()
            )
            if not user.data:
                return None

            pet = (
                self._client.table(PETS_TABLE)
                .select("name, type, breed, dob, preferences")
                .eq("user_id", user.data[0]["id"])
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to load pet profile for {identifier}: {e}")
            raise PersistenceError("get_profile", str(e)) from e

        if not pet.data:
            return None
        return ProfileRecord.from_row(pet.data[0])


# =============================================================================
# In-memory
# =============================================================================


class InMemoryGateway:
    """
    OnboardingGateway kept in process memory.

    Used by `pet-butler chat --memory` and the test suite. Rows are
    stored as the same dicts the Supabase tables would hold.
    """

    def __init__(self):
        self.users: dict[str, dict] = {}  # chat_id -> users row
        self.pets: dict[str, dict] = {}  # user_id -> pets row

    async def load_onboarding(self, identifier: str) -> OnboardingRecord | None:
        row = self.users.get(identifier)
        if row is None:
            return None
        return OnboardingRecord.from_dict(row)

    async def create_onboarding(self, identifier: str) -> OnboardingRecord:
        if identifier not in self.users:
            row = OnboardingRecord(identifier=identifier).to_dict()
            row["id"] = str(uuid.uuid4())
            self.users[identifier] = row
        return OnboardingRecord.from_dict(self.users[identifier])

    async def save_onboarding(self, record: OnboardingRecord) -> None:
        row = self.users.get(record.identifier)
        if row is None:
            raise PersistenceError("save_onboarding", f"no users row for chat {record.identifier}")
        row.update(record.to_dict())

    async def upsert_profile(self, user_id: str, profile: ProfileRecord) -> None:
        existing = self.pets.get(user_id)
        if existing is not None:
            existing.update(profile.to_row())
        else:
            self.pets[user_id] = {"id": str(uuid.uuid4()), "user_id": user_id, **profile.to_row()}

    async def get_profile(self, identifier: str) -> ProfileRecord | None:
        user = self.users.get(identifier)
        if user is None:
            return None
        pet = self.pets.get(user["id"])
        if pet is None:
            return None
        return ProfileRecord.from_row(pet)
