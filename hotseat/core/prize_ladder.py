"""Prize ladder and milestone (safe haven) calculations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from hotseat.constants.game_constants import (
    CURRENCY_SYMBOL,
    DEFAULT_PRIZE_STRUCTURE,
    MILESTONE_QUESTIONS,
)
from hotseat.core.errors import InvalidQuestionNumber, ValidationError


def validate_prize_values(values: Sequence[object], milestones: Iterable[int] = ()) -> list[str]:
    """Return every rule the prize values and milestones break."""
    errors: list[str] = []
    if not values:
        errors.append("Prize structure cannot be empty")
    for index, prize in enumerate(values):
        if isinstance(prize, bool) or not isinstance(prize, int) or prize <= 0:
            errors.append(f"Prize for question {index + 1} must be a positive whole number")
    for milestone in sorted(set(milestones)):
        if not 1 <= milestone <= len(values):
            errors.append(f"Milestone {milestone} is outside the ladder (1-{len(values)})")
    return errors


def format_prize(amount: int, currency: str = CURRENCY_SYMBOL) -> str:
    return f"{currency}{amount:,}"


class PrizeLadder:
    """Immutable list of prizes, 1-indexed by question number."""

    def __init__(
        self,
        values: Sequence[int] = DEFAULT_PRIZE_STRUCTURE,
        milestones: Iterable[int] = MILESTONE_QUESTIONS,
    ) -> None:
        milestone_set = frozenset(milestones)
        errors = validate_prize_values(values, milestone_set)
        if errors:
            raise ValidationError(errors)
        self._values: tuple[int, ...] = tuple(values)
        self._milestones: frozenset[int] = milestone_set

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PrizeLadder(values={list(self._values)!r}, milestones={sorted(self._milestones)!r})"

    @property
    def values(self) -> tuple[int, ...]:
        return self._values

    @property
    def milestones(self) -> tuple[int, ...]:
        return tuple(sorted(self._milestones))

    @property
    def max_prize(self) -> int:
        return self._values[-1]

    @property
    def total_prize_pool(self) -> int:
        return sum(self._values)

    def prize_for(self, question_number: int) -> int:
        """Prize won by answering ``question_number`` correctly; 0 for no progress."""
        self._check_range(question_number)
        if question_number == 0:
            return 0
        return self._values[question_number - 1]

    def next_prize(self, current: int) -> int | None:
        """Prize for the question after ``current``, or None at the top of the ladder."""
        self._check_range(current)
        if current >= len(self._values):
            return None
        return self._values[current]

    def is_milestone(self, question_number: int) -> bool:
        self._check_range(question_number)
        return question_number in self._milestones

    def guaranteed_prize(self, questions_answered: int) -> int:
        """Prize at the highest milestone reached, or 0 when none is reached."""
        self._check_range(questions_answered)
        reached = [m for m in self._milestones if m <= questions_answered]
        if not reached:
            return 0
        return self._values[max(reached) - 1]

    def with_values(self, values: Sequence[int]) -> PrizeLadder:
        return PrizeLadder(values, self._milestones)

    def _check_range(self, question_number: int) -> None:
        if not 0 <= question_number <= len(self._values):
            raise InvalidQuestionNumber(question_number, len(self._values))


def default_prize_values(levels: int) -> tuple[int, ...]:
    """Default ladder for ``levels`` questions, extending the 500-step default."""
    if levels <= len(DEFAULT_PRIZE_STRUCTURE):
        return tuple(DEFAULT_PRIZE_STRUCTURE[:levels])
    step = DEFAULT_PRIZE_STRUCTURE[0]
    return tuple(step * number for number in range(1, levels + 1))
