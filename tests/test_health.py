"""Basic health check tests."""

from typer.testing import CliRunner


def test_import_pet_butler():
    """Test that pet_butler package can be imported."""
    import pet_butler
    assert pet_butler.__version__ == "1.0.0"


def test_import_onboarding():
    """Test that the onboarding package exposes its entry points."""
    from onboarding import (
        QUESTIONS,
        RESTART_TOKEN,
        InMemoryGateway,
        OnboardingGateway,
        transition,
    )

    assert len(QUESTIONS) == 6
    assert RESTART_TOKEN == "/start"
    assert isinstance(InMemoryGateway(), OnboardingGateway)
    assert callable(transition)


def test_cli_version():
    from pet_butler.main import app

    result = CliRunner().invoke(app, ["version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.stdout
