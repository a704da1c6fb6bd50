"""Comparison of a team's selected option with the correct option."""

from __future__ import annotations

from hotseat.constants.game_constants import ANSWER_OPTIONS
from hotseat.core.errors import InvalidAnswerOption
from hotseat.core.models import AnswerValidation


def normalize_option(option: object) -> str | None:
    """Return the trimmed, uppercased letter, or None if it is not A-D."""
    if not isinstance(option, str):
        return None
    normalized = option.strip().upper()
    return normalized if normalized in ANSWER_OPTIONS else None


def is_valid_option(option: object) -> bool:
    return normalize_option(option) is not None


def validate_answer(selected: object, correct: object) -> AnswerValidation:
    normalized_selected = normalize_option(selected)
    if normalized_selected is None:
        raise InvalidAnswerOption("selected", selected)
    normalized_correct = normalize_option(correct)
    if normalized_correct is None:
        raise InvalidAnswerOption("correct", correct)

    return AnswerValidation(
        is_correct=normalized_selected == normalized_correct,
        normalized_selected=normalized_selected,
        normalized_correct=normalized_correct,
    )
