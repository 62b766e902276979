"""
Pet Butler - Service wiring.

Builds the object graph once at process start:

    Supabase client -> gateway -> resolver -> machine
    OpenAI client + gateway -> assistant
    gateway + machine + assistant -> dispatcher

The web app keeps the result on app.state; the CLI passes it along.
"""

import logging
from dataclasses import dataclass

from onboarding import (
    InMemoryGateway,
    OnboardingGateway,
    OnboardingMachine,
    PlaceholderResolver,
    SupabaseGateway,
)
from pet_butler.assistant import PetAssistant
from pet_butler.config import Settings
from pet_butler.db.client import create_supabase_client
from pet_butler.dispatcher import Dispatcher
from pet_butler.llm.client import create_llm_client

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Long-lived collaborators shared by every request."""
    settings: Settings
    gateway: OnboardingGateway
    assistant: PetAssistant
    dispatcher: Dispatcher


def build_gateway(settings: Settings, storage: str | None = None) -> OnboardingGateway:
    """Create the record store named by `storage` (defaults to settings.storage)."""
    storage = storage or settings.storage
    if storage == "memory":
        logger.info("Using in-memory storage (progress is lost on exit)")
        return InMemoryGateway()
    return SupabaseGateway(create_supabase_client(settings))


def build_services(
    settings: Settings,
    *,
    gateway: OnboardingGateway | None = None,
    assistant: PetAssistant | None = None,
) -> Services:
    """
    Wire up the dispatcher and its collaborators.

    Args:
        settings: Loaded application settings
        gateway: Record store to use instead of the configured one
        assistant: Assistant to use instead of the OpenRouter-backed one

    Returns:
        Services ready to route messages
    """
    if gateway is None:
        gateway = build_gateway(settings)

    if assistant is None:
        assistant = PetAssistant(
            gateway,
            create_llm_client(settings),
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
        )

    machine = OnboardingMachine(PlaceholderResolver(gateway))
    dispatcher = Dispatcher(gateway, machine, assistant)
    return Services(
        settings=settings,
        gateway=gateway,
        assistant=assistant,
        dispatcher=dispatcher,
    )
