"""Exception types raised by the game orchestration core."""

from __future__ import annotations


class HotSeatError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(HotSeatError):
    """Raised when input data breaks one or more rules.

    ``errors`` always holds the complete list of violations.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed.")


class IllegalStateTransition(HotSeatError):
    """Raised when an action is attempted outside the state that allows it."""

    def __init__(self, current_state: str, action: str) -> None:
        self.current_state = current_state
        self.action = action
        super().__init__(f"Cannot {action} while in state '{current_state}'.")


class LifelineUnavailable(HotSeatError):
    """Raised when a lifeline fails its eligibility gate."""

    def __init__(self, lifeline: str, reason: str) -> None:
        self.lifeline = lifeline
        self.reason = reason
        super().__init__(f"Lifeline '{lifeline}' is unavailable: {reason}")


class InvalidAnswerOption(HotSeatError, ValueError):
    """Raised when an answer letter cannot be normalized to A-D."""

    def __init__(self, side: str, value: object) -> None:
        self.side = side
        self.value = value
        super().__init__(f"Invalid {side} answer: {value!r}. Must be A, B, C, or D.")


class InvalidQuestionData(HotSeatError, ValueError):
    """Raised when a question is structurally unusable."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class InvalidQuestionNumber(HotSeatError, ValueError):
    """Raised for a question number outside ``0..N``."""

    def __init__(self, number: int, maximum: int) -> None:
        self.number = number
        self.maximum = maximum
        super().__init__(f"Question number {number} is outside 0..{maximum}.")


class InvariantViolation(HotSeatError, RuntimeError):
    """Raised when internal data contradicts an engine invariant."""
