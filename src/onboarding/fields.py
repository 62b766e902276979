"""
Onboarding Field Kinds.

Each question in the catalog is backed by one field kind. A kind only
knows how to validate raw chat text; it knows nothing about steps,
records, or persistence.

Kinds:
- RequiredText: trimmed, non-empty
- OptionalText: anything, empty becomes the unknown marker (None)
- ConstrainedDate: YYYY-MM-DD calendar date or "unknown"
- TerminalText: RequiredText that also completes onboarding
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import ClassVar

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UNKNOWN_TOKEN = "unknown"


@dataclass(frozen=True)
class FieldResult:
    """Outcome of validating one answer."""
    accepted: bool
    value: str | None = None

    @classmethod
    def accept(cls, value: str | None) -> "FieldResult":
        return cls(accepted=True, value=value)

    @classmethod
    def reject(cls) -> "FieldResult":
        return cls(accepted=False)


@dataclass(frozen=True)
class RequiredText:
    """Free text that must not be blank."""
    completes: ClassVar[bool] = False

    def validate(self, text: str) -> FieldResult:
        value = text.strip()
        if not value:
            return FieldResult.reject()
        return FieldResult.accept(value)


@dataclass(frozen=True)
class OptionalText:
    """Free text that may be skipped. Blank answers are stored as None."""
    completes: ClassVar[bool] = False

    def validate(self, text: str) -> FieldResult:
        return FieldResult.accept(text.strip() or None)


@dataclass(frozen=True)
class ConstrainedDate:
    """
    A calendar date in YYYY-MM-DD form, or the literal "unknown".

    Dates are stored as the raw trimmed text; "unknown" is stored as None.
    """
    completes: ClassVar[bool] = False

    def validate(self, text: str) -> FieldResult:
        value = text.strip()
        if value.lower() == UNKNOWN_TOKEN:
            return FieldResult.accept(None)
        if ISO_DATE_PATTERN.match(value) and _is_calendar_date(value):
            return FieldResult.accept(value)
        return FieldResult.reject()


@dataclass(frozen=True)
class TerminalText(RequiredText):
    """Last question: a required answer that completes onboarding."""
    completes: ClassVar[bool] = True


FieldKind = RequiredText | OptionalText | ConstrainedDate | TerminalText


def _is_calendar_date(value: str) -> bool:
    # 2023-02-30 matches the pattern but is not a date
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
