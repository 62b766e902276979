"""
Onboarding State.

Records persisted by the gateway:
- OnboardingRecord: one per chat, tracks step/answers/completion (users table)
- ProfileRecord: the pet profile derived from a completed onboarding (pets table)

Both are frozen dataclasses. Transitions build new values with
dataclasses.replace() instead of mutating shared records.
"""

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class OnboardingRecord:
    """
    Persisted onboarding progress for one chat.

    Stored in the users table:
        chat_id -> identifier
        onboarding_step -> step
        onboarding_state -> state (JSONB)
        onboarding_complete -> complete
    """
    identifier: str
    user_id: str | None = None
    step: int = 0
    state: dict[str, str | None] = field(default_factory=dict)
    complete: bool = False

    def with_answer(self, field_id: str, value: str | None) -> "OnboardingRecord":
        """Return a copy with one more captured answer and the step advanced."""
        state = {**self.state, field_id: value}
        return replace(self, state=state, step=self.step + 1)

    def restarted(self) -> "OnboardingRecord":
        """Return a copy with captured answers cleared (step is kept)."""
        return replace(self, state={})

    def completed(self, step: int | None = None) -> "OnboardingRecord":
        """Return a copy marked complete, optionally pinning the step."""
        return replace(self, complete=True, step=self.step if step is None else step)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a users-table row (without the database id)."""
        return {
            "chat_id": self.identifier,
            "onboarding_step": self.step,
            "onboarding_state": dict(self.state),
            "onboarding_complete": self.complete,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OnboardingRecord":
        """Deserialize from a users-table row. Missing columns get defaults."""
        return cls(
            identifier=str(data["chat_id"]),
            user_id=data.get("id"),
            step=data.get("onboarding_step") or 0,
            state=dict(data.get("onboarding_state") or {}),
            complete=bool(data.get("onboarding_complete") or False),
        )


@dataclass(frozen=True)
class ProfileRecord:
    """The pet profile built from a completed onboarding."""
    name: str
    pet_type: str
    breed: str | None = None
    dob: str | None = None
    preferences: str = ""

    @classmethod
    def from_answers(cls, state: dict[str, str | None]) -> "ProfileRecord":
        """Derive the profile from captured onboarding answers."""
        return cls(
            name=state.get("petName") or "",
            pet_type=state.get("petType") or "",
            breed=state.get("petBreed"),
            dob=state.get("petDob"),
            preferences=state.get("petPreferences") or "",
        )

    def to_row(self) -> dict[str, Any]:
        """Serialize to a pets-table row (without user_id)."""
        return {
            "name": self.name,
            "type": self.pet_type,
            "breed": self.breed,
            "dob": self.dob,
            "preferences": {"description": self.preferences} if self.preferences else {},
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ProfileRecord":
        """Deserialize from a pets-table row."""
        preferences = row.get("preferences") or {}
        if isinstance(preferences, dict):
            preferences = preferences.get("description", "")
        return cls(
            name=row.get("name") or "",
            pet_type=row.get("type") or "",
            breed=row.get("breed"),
            dob=row.get("dob"),
            preferences=preferences or "",
        )
