"""
Pet Butler - Post-onboarding assistant.

Free-form chat once onboarding is complete. One LLM call per message,
with the pet's profile injected into the system prompt.

Never raises: every failure becomes a fixed reply.
"""

import json
import logging
import time

from openai import AsyncOpenAI

from onboarding import OnboardingGateway, PersistenceError, ProfileRecord
from pet_butler.llm.client import call_llm_chat

logger = logging.getLogger(__name__)

MISSING_PROFILE_REPLY = (
    "I can't seem to find your pet's details to provide personalized assistance. "
    "Please ensure pet onboarding is complete."
)
EMPTY_RESPONSE_REPLY = "I'm sorry, I couldn't get a response from the AI at this moment."
APOLOGY_REPLY = "I am currently having trouble communicating with the AI. Please try again shortly."

SYSTEM_PROMPT = """You are a helpful and proactive Pet Butler AI. Your primary goal is to assist pet owners by monitoring pet food, routines, and proactively sending reminders and suggestions. You have memory of pet preferences and routines.
Here is the information about the user's pet:
{pet_info}
Pet Preferences & Routines: {pet_preferences}

Handle requests related to:
- Auto food reorder reminders (provide product links if appropriate).
- Vet/spa auto-reminder + booking simulation.
- Proactive messages like "{pet_name} hasn't walked today" or "Time for grooming?".
- General pet care advice based on the provided preferences.
- Always maintain a friendly and helpful tone.
- If a request involves reordering or booking, simulate the action and inform the user, e.g., "I've simulated a reorder reminder for [product]." or "I've simulated a booking for [service]."
"""


def format_profile_for_prompt(profile: ProfileRecord) -> str:
    """Render the pet profile into the assistant's system prompt."""
    pet_info = (
        f"Pet Name: {profile.name}, Type: {profile.pet_type}, "
        f"Breed: {profile.breed or 'N/A'}, Age/DOB: {profile.dob or 'N/A'}"
    )
    if profile.preferences:
        pet_preferences = json.dumps({"description": profile.preferences})
    else:
        pet_preferences = "No specific preferences recorded."
    return SYSTEM_PROMPT.format(
        pet_info=pet_info,
        pet_preferences=pet_preferences,
        pet_name=profile.name or "Your pet",
    )


class PetAssistant:
    """Answers messages from onboarded users."""

    def __init__(
        self,
        gateway: OnboardingGateway,
        llm_client: AsyncOpenAI,
        model: str,
        max_tokens: int = 1500,
    ):
        self._gateway = gateway
        self._llm_client = llm_client
        self.model = model
        self.max_tokens = max_tokens

    async def complete(
        self,
        identifier: str,
        message: str,
        profile: ProfileRecord | None = None,
    ) -> str:
        """
        Reply to one message. Always returns text.

        Pass `profile` when the caller already loaded it; otherwise it is
        read from the gateway.
        """
        started = time.perf_counter()
        if profile is None:
            try:
                profile = await self._gateway.get_profile(identifier)
            except PersistenceError as e:
                logger.error(f"Could not load pet profile for {identifier}: {e}")
                return MISSING_PROFILE_REPLY

        if profile is None:
            logger.warning(f"No pet profile for onboarded chat {identifier}")
            return MISSING_PROFILE_REPLY

        try:
            reply = await call_llm_chat(
                self._llm_client,
                model=self.model,
                system_prompt=format_profile_for_prompt(profile),
                user_prompt=message,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error(f"Assistant completion failed for {identifier}: {e}")
            return APOLOGY_REPLY
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"Assistant turn for {identifier} took {elapsed_ms:.0f}ms")

        if not reply:
            return EMPTY_RESPONSE_REPLY
        return reply
