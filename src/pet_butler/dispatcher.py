"""
Pet Butler - Message Dispatcher.

Routes every inbound chat message:
- chat never seen -> create its onboarding record, then onboard as below
- onboarding incomplete -> onboarding state machine
- onboarding complete -> assistant

Messages for the same chat are processed one at a time: the chat's lock
is held across load -> transition -> save. Different chats never wait
on each other.

route() never raises. Every failure becomes a reply.
"""

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager

from onboarding import (
    OnboardingGateway,
    OnboardingMachine,
    OnboardingRecord,
    PersistenceError,
    ProfileRecord,
    transition,
)
from pet_butler.assistant import PetAssistant

logger = logging.getLogger(__name__)

SETUP_FAILED_REPLY = "I had trouble setting you up. Please try again."
LOAD_FAILED_REPLY = "An unexpected error occurred. Please try again later."
SAVE_FAILED_REPLY = "An error occurred while saving your progress. Please try again."
INTERNAL_ERROR_REPLY = "I apologize, but I encountered an internal error. Could you please try again?"


class ChatLocks:
    """One asyncio.Lock per chat, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, identifier: str):
        lock = self._locks.setdefault(identifier, asyncio.Lock())
        self._waiters[identifier] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[identifier] -= 1
            if self._waiters[identifier] == 0:
                del self._waiters[identifier]
                del self._locks[identifier]

    def __len__(self) -> int:
        return len(self._locks)


class Dispatcher:
    """Entry point for chat transports."""

    def __init__(
        self,
        gateway: OnboardingGateway,
        machine: OnboardingMachine,
        assistant: PetAssistant,
    ):
        self.gateway = gateway
        self.machine = machine
        self.assistant = assistant
        self.locks = ChatLocks()

    async def route(self, identifier: str, message: str) -> str:
        """Handle one message from a chat and return the reply text."""
        try:
            async with self.locks.hold(identifier):
                try:
                    record = await self.gateway.load_onboarding(identifier)
                except PersistenceError as e:
                    logger.error(f"Error fetching onboarding record for {identifier}: {e}")
                    return LOAD_FAILED_REPLY

                if record is None:
                    return await self._first_contact(identifier, message)
                if not record.complete:
                    return await self._onboard(record, message)

            return await self._assist(record, message)
        except Exception:
            logger.exception(f"Unhandled error routing message for {identifier}")
            return INTERNAL_ERROR_REPLY

    async def _first_contact(self, identifier: str, message: str) -> str:
        """Create the record, then treat the message as the answer to the first question."""
        try:
            record = await self.gateway.create_onboarding(identifier)
        except PersistenceError as e:
            logger.error(f"Error creating onboarding record for {identifier}: {e}")
            return SETUP_FAILED_REPLY

        logger.info(f"Started onboarding for {identifier}")
        return await self._onboard(record, message)

    async def _onboard(self, record: OnboardingRecord, message: str) -> str:
        result = transition(record, message)

        try:
            await self.gateway.save_onboarding(result.record)
        except PersistenceError as e:
            logger.error(f"Error saving onboarding progress for {record.identifier}: {e}")
            return SAVE_FAILED_REPLY

        if result.completed_now:
            await self._derive_profile(result.record)

        return await self.machine.render(record.identifier, result)

    async def _derive_profile(self, record: OnboardingRecord) -> bool:
        """
        Upsert the pet profile from a completed record's answers.

        Failures are logged, not raised: onboarding stays complete and the
        profile is derived again on the next assistant turn.
        """
        if record.user_id is None:
            logger.error(f"Cannot derive pet profile for {record.identifier}: no user id")
            return False
        try:
            await self.gateway.upsert_profile(record.user_id, ProfileRecord.from_answers(record.state))
        except PersistenceError as e:
            logger.error(f"Error saving pet details for {record.identifier}: {e}")
            return False
        return True

    async def _assist(self, record: OnboardingRecord, message: str) -> str:
        try:
            profile = await self.gateway.get_profile(record.identifier)
        except PersistenceError as e:
            logger.warning(f"Could not check pet profile for {record.identifier}: {e}")
            profile = None

        if profile is None and record.state:
            logger.info(f"Re-deriving missing pet profile for {record.identifier}")
            if await self._derive_profile(record):
                profile = ProfileRecord.from_answers(record.state)

        return await self.assistant.complete(record.identifier, message, profile=profile)
