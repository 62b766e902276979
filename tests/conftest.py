"""
Pytest configuration and fixtures for Pet Butler tests.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before importing pet_butler modules
os.environ["PET_BUTLER_ENV"] = "development"
os.environ["STORAGE"] = "memory"

from onboarding import InMemoryGateway, OnboardingMachine, PlaceholderResolver
from pet_butler.config import Settings
from pet_butler.dispatcher import Dispatcher


@pytest.fixture
def settings():
    """Settings that never read .env and need no external services."""
    return Settings(
        _env_file=None,
        telegram_bot_token="",
        webhook_url=None,
        supabase_url="",
        supabase_service_key="",
        openrouter_api_key="test-key-not-real",
        storage="memory",
        pet_butler_env="development",
    )


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def gateway():
    """Empty in-memory record store."""
    return InMemoryGateway()


@pytest.fixture
def machine(gateway):
    return OnboardingMachine(PlaceholderResolver(gateway))


@pytest.fixture
def assistant():
    """Assistant stand-in that always answers the same text."""
    mock = MagicMock()
    mock.complete = AsyncMock(return_value="assistant reply")
    return mock


@pytest.fixture
def dispatcher(gateway, machine, assistant):
    return Dispatcher(gateway, machine, assistant)


@pytest.fixture
def complete_answers():
    """Captured answers for a fully onboarded chat."""
    return {
        "name": "Alice",
        "petName": "Mochi",
        "petType": "Dog",
        "petBreed": None,
        "petDob": None,
        "petPreferences": "likes chicken",
    }
