"""
Pet Butler Onboarding.

Collects the owner's name and the pet's details one question at a time
over chat, persisting progress after every message. Once the last
question is answered the pet profile is written and the chat is handed
to the assistant.

Questions:
1. Owner name (send /start to begin again)
2. Pet name
3. Pet type
4. Breed (optional)
5. Date of birth (YYYY-MM-DD or "unknown")
6. Preferences (completes onboarding)
"""

from .errors import OnboardingError, PersistenceError
from .gateway import InMemoryGateway, OnboardingGateway, SupabaseGateway
from .machine import OnboardingMachine, Transition, transition
from .placeholders import PlaceholderResolver
from .questions import QUESTIONS, RESTART_TOKEN, Question
from .state import OnboardingRecord, ProfileRecord

__all__ = [
    "OnboardingError",
    "PersistenceError",
    "OnboardingGateway",
    "SupabaseGateway",
    "InMemoryGateway",
    "OnboardingMachine",
    "Transition",
    "transition",
    "PlaceholderResolver",
    "QUESTIONS",
    "RESTART_TOKEN",
    "Question",
    "OnboardingRecord",
    "ProfileRecord",
]
