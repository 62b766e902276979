"""
Placeholder Resolution.

Replaces {{token}} references in prompt templates with captured data,
e.g. "What type of pet is {{petName}}?" -> "What type of pet is Mochi?".

Lookup order for each token:
1. The persisted pet profile (gateway.get_profile)
2. Answers the caller passes in `captured` (committed this turn)
3. A generic fallback phrase

Resolution never fails: lookup errors are logged and the fallback is used.
"""

import logging
import re
from dataclasses import dataclass

from .errors import PersistenceError
from .gateway import OnboardingGateway
from .state import ProfileRecord

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class Placeholder:
    """Where a token's value comes from."""
    answer_key: str  # Key in OnboardingRecord.state
    fallback: str
    profile_attr: str | None = None  # Attribute on ProfileRecord, if any


PLACEHOLDERS: dict[str, Placeholder] = {
    "petName": Placeholder(answer_key="petName", fallback="your pet", profile_attr="name"),
    "userName": Placeholder(answer_key="name", fallback="there"),
}


def find_placeholders(template: str) -> list[str]:
    """Known placeholder names referenced by a template, in order of appearance."""
    names = []
    for match in PLACEHOLDER_PATTERN.finditer(template):
        name = match.group(1)
        if name in PLACEHOLDERS and name not in names:
            names.append(name)
    return names


class PlaceholderResolver:
    """Resolves prompt templates for a chat against stored data."""

    def __init__(self, gateway: OnboardingGateway):
        self._gateway = gateway

    async def resolve(
        self,
        identifier: str,
        template: str,
        captured: dict[str, str | None] | None = None,
    ) -> str:
        """
        Substitute every known {{token}} in the template.

        Args:
            identifier: Chat identifier whose data fills the tokens
            template: Prompt text with {{token}} references
            captured: Answers already captured for this chat

        Returns:
            The template with known tokens replaced. Unknown tokens are kept.
        """
        names = find_placeholders(template)
        if not names:
            return template

        profile = None
        if any(PLACEHOLDERS[name].profile_attr for name in names):
            profile = await self._load_profile(identifier)

        values = {
            name: _lookup(PLACEHOLDERS[name], profile, captured or {})
            for name in names
        }

        def substitute(match: re.Match) -> str:
            return values.get(match.group(1), match.group(0))

        return PLACEHOLDER_PATTERN.sub(substitute, template)

    async def _load_profile(self, identifier: str) -> ProfileRecord | None:
        try:
            return await self._gateway.get_profile(identifier)
        except PersistenceError as e:
            logger.warning(f"Placeholder lookup failed for {identifier}, using fallback: {e}")
            return None


def _lookup(
    placeholder: Placeholder,
    profile: ProfileRecord | None,
    captured: dict[str, str | None],
) -> str:
    if profile is not None and placeholder.profile_attr:
        value = getattr(profile, placeholder.profile_attr, None)
        if value:
            return value
    value = captured.get(placeholder.answer_key)
    if value:
        return value
    return placeholder.fallback
