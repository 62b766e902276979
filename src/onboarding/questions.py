"""
Onboarding Question Catalog.

Ordered, immutable list of questions. The step stored on an
OnboardingRecord is an index into QUESTIONS; len(QUESTIONS) is the
terminal step.

Prompts may contain {{placeholder}} tokens, resolved at reply time
by onboarding.placeholders.
"""

from dataclasses import dataclass

from .fields import (
    ConstrainedDate,
    FieldKind,
    OptionalText,
    RequiredText,
    TerminalText,
)

# Re-enters the first question. Only honoured at step 0.
RESTART_TOKEN = "/start"


@dataclass(frozen=True)
class Question:
    """One onboarding question."""
    field_id: str
    prompt: str
    kind: FieldKind
    reminder: str = ""  # Sent when the answer is rejected
    acknowledgement: str = ""  # Sent when accepted, ahead of the next prompt if any


QUESTIONS: tuple[Question, ...] = (
    Question(
        field_id="name",
        prompt="Hello there! I'm your Pet Butler. What's your name?",
        kind=RequiredText(),
        reminder="Please tell me your name so we can get started!",
        acknowledgement="Nice to meet you, {{userName}}!",
    ),
    Question(
        field_id="petName",
        prompt="What's your pet's name?",
        kind=RequiredText(),
        reminder="Please tell me your pet's name!",
    ),
    Question(
        field_id="petType",
        prompt="And what type of pet is {{petName}}? (e.g., Dog, Cat, Bird, etc.)",
        kind=RequiredText(),
        reminder="Please tell me your pet's type!",
    ),
    Question(
        field_id="petBreed",
        prompt="Do you know {{petName}}'s breed? If not, no worries!",
        kind=OptionalText(),
    ),
    Question(
        field_id="petDob",
        prompt=(
            "What is {{petName}}'s date of birth? "
            "(YYYY-MM-DD, or \"unknown\" if you don't know)"
        ),
        kind=ConstrainedDate(),
        reminder="Please use YYYY-MM-DD format or type 'unknown'.",
    ),
    Question(
        field_id="petPreferences",
        prompt=(
            "Awesome! Just a few questions about {{petName}}'s preferences. "
            "For example, \"likes chicken, allergic to beef, needs daily walks\"."
        ),
        kind=TerminalText(),
        reminder="Please tell me a little about {{petName}}'s preferences!",
        acknowledgement="Got it! We're all set for {{petName}}. I'll start looking after your pet!",
    ),
)


def question_at(step: int) -> Question | None:
    """Get the question pending at a step, or None past the end."""
    if 0 <= step < len(QUESTIONS):
        return QUESTIONS[step]
    return None


def terminal_step() -> int:
    """Step index reached once every question is answered."""
    return len(QUESTIONS)
