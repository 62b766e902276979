"""
Onboarding State Machine.

Decides, for every inbound message, what happens to the pending question.

Two phases:
- transition(record, message): pure. Validates the answer with the
  question's field kind and returns the next record plus a reply template.
- OnboardingMachine.advance(...): transition + placeholder resolution.

The dispatcher calls transition(), commits the new record, then render(),
so placeholder lookups see the profile written on completion.
"""

import logging
from dataclasses import dataclass, replace

from .placeholders import PlaceholderResolver
from .questions import (
    RESTART_TOKEN,
    Question,
    question_at,
    terminal_step,
)
from .state import OnboardingRecord

logger = logging.getLogger(__name__)

ALREADY_COMPLETE_REPLY = "It seems you've completed onboarding. How can I assist you?"
WELCOME_BACK_REPLY = "Welcome aboard! How can I help you manage your pet's life today?"


@dataclass(frozen=True)
class Transition:
    """Result of applying one message to an onboarding record."""
    record: OnboardingRecord
    reply: str  # May contain {{placeholders}}
    accepted: bool = False  # Answer stored, step advanced
    completed_now: bool = False  # complete went False -> True on this message
    restarted: bool = False


def transition(record: OnboardingRecord, message: str) -> Transition:
    """
    Apply one inbound message to a record. No I/O.

    Rejected answers return the record unchanged with the question's
    reminder as the reply.
    """
    if record.complete:
        return Transition(record=record, reply=ALREADY_COMPLETE_REPLY)

    if record.step < 0:
        logger.warning(f"Onboarding record for {record.identifier} has step {record.step}, resetting to 0")
        record = replace(record, step=0)

    if record.step >= terminal_step():
        return _repair_drift(record)

    question = question_at(record.step)
    if record.step == 0 and message.lower() == RESTART_TOKEN:
        return Transition(record=record.restarted(), reply=question.prompt, restarted=True)

    result = question.kind.validate(message)
    if not result.accepted:
        return Transition(record=record, reply=question.reminder or question.prompt)

    updated = record.with_answer(question.field_id, result.value)
    if question.kind.completes:
        logger.info(f"Onboarding complete for {record.identifier}")
        return Transition(
            record=updated.completed(),
            reply=question.acknowledgement or WELCOME_BACK_REPLY,
            accepted=True,
            completed_now=True,
        )

    if updated.step >= terminal_step():
        repaired = _repair_drift(updated)
        return Transition(
            record=repaired.record,
            reply=question.acknowledgement or repaired.reply,
            accepted=True,
            completed_now=True,
        )

    return Transition(record=updated, reply=_next_reply(question, updated.step), accepted=True)


def _next_reply(answered: Question, next_step: int) -> str:
    """Reply after an accepted answer that leaves onboarding open."""
    next_prompt = question_at(next_step).prompt
    if answered.acknowledgement:
        return f"{answered.acknowledgement} {next_prompt}"
    return next_prompt


def _repair_drift(record: OnboardingRecord) -> Transition:
    # Step ran past the catalog without the completion flag being set
    logger.warning(
        f"Onboarding record for {record.identifier} at step {record.step} "
        f"without completion, forcing complete"
    )
    return Transition(
        record=record.completed(step=terminal_step()),
        reply=WELCOME_BACK_REPLY,
        completed_now=True,
    )


class OnboardingMachine:
    """Onboarding transitions with resolved replies."""

    def __init__(self, resolver: PlaceholderResolver):
        self.resolver = resolver

    async def advance(
        self,
        identifier: str,
        message: str,
        record: OnboardingRecord,
    ) -> tuple[OnboardingRecord, str]:
        """Apply a message and return the new record with its resolved reply."""
        result = transition(record, message)
        reply = await self.render(identifier, result)
        return result.record, reply

    async def render(self, identifier: str, result: Transition) -> str:
        """Resolve the placeholders in a transition's reply."""
        return await self.resolver.resolve(identifier, result.reply, captured=result.record.state)

