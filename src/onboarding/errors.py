"""
Onboarding Errors.

Only persistence problems are errors. Invalid answers are normal
state machine outcomes and never raise.
"""


class OnboardingError(Exception):
    """Base class for onboarding failures."""


class PersistenceError(OnboardingError):
    """A read or write against the record store failed."""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
