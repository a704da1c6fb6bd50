"""State machine for the lifecycle of the question currently in play.

    NOT_LOADED -> LOADED_HOST_ONLY -> SHOWN_TO_PUBLIC -> ANSWER_SELECTED
               -> ANSWER_LOCKED -> ANSWER_VALIDATED

Every guard is checked before anything is mutated, so a rejected action
leaves the flow exactly as it was.
"""

from __future__ import annotations

from collections.abc import Iterable

from hotseat.constants.game_constants import ANSWER_OPTIONS
from hotseat.core.answer_validator import normalize_option, validate_answer
from hotseat.core.errors import (
    IllegalStateTransition,
    InvalidAnswerOption,
    InvalidQuestionData,
    InvariantViolation,
)
from hotseat.core.models import AnswerValidation, LifelineType, Question, QuestionState
from hotseat.core.services.question_bank import question_errors

_PUBLIC_STATES = frozenset(
    {
        QuestionState.SHOWN_TO_PUBLIC,
        QuestionState.ANSWER_SELECTED,
        QuestionState.ANSWER_LOCKED,
        QuestionState.ANSWER_VALIDATED,
    }
)
_LOCKED_STATES = frozenset({QuestionState.ANSWER_LOCKED, QuestionState.ANSWER_VALIDATED})


class QuestionFlow:
    """Tracks one question from loading to validation."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._state = QuestionState.NOT_LOADED
        self._question: Question | None = None
        self._selected: str | None = None
        self._filtered_options: tuple[str, ...] | None = None
        self._result: AnswerValidation | None = None
        self._lifeline_used: LifelineType | None = None
        self._reopened = False
        self._rejected: set[str] = set()

    @property
    def state(self) -> QuestionState:
        return self._state

    @property
    def question(self) -> Question | None:
        return self._question

    @property
    def selected_answer(self) -> str | None:
        return self._selected

    @property
    def result(self) -> AnswerValidation | None:
        return self._result

    @property
    def lifeline_used(self) -> LifelineType | None:
        return self._lifeline_used

    @property
    def is_reopened(self) -> bool:
        return self._reopened

    @property
    def filtered_options(self) -> tuple[str, ...] | None:
        return self._filtered_options

    @property
    def is_loaded(self) -> bool:
        return self._state is not QuestionState.NOT_LOADED

    @property
    def is_visible_to_public(self) -> bool:
        return self._state in _PUBLIC_STATES

    @property
    def is_locked(self) -> bool:
        return self._state in _LOCKED_STATES

    @property
    def is_validated(self) -> bool:
        return self._state is QuestionState.ANSWER_VALIDATED

    def visible_option_letters(self) -> tuple[str, ...]:
        if self._filtered_options is not None:
            return self._filtered_options
        return ANSWER_OPTIONS if self._question else ()

    def visible_options(self) -> dict[str, str]:
        if self._question is None:
            return {}
        return {letter: self._question.options[letter] for letter in self.visible_option_letters()}

    # --- transitions ---

    def load(self, question: Question) -> None:
        self._require({QuestionState.NOT_LOADED}, "load a question")
        errors = question_errors(question)
        if errors:
            raise InvalidQuestionData(errors)
        self._question = question
        self._state = QuestionState.LOADED_HOST_ONLY

    def show(self) -> None:
        self._require({QuestionState.LOADED_HOST_ONLY}, "show the question")
        self._state = QuestionState.SHOWN_TO_PUBLIC

    def hide(self) -> None:
        self._require({QuestionState.SHOWN_TO_PUBLIC}, "hide the question")
        if self._reopened:
            raise IllegalStateTransition(self._state.value, "hide a reopened question")
        self._state = QuestionState.LOADED_HOST_ONLY

    def select(self, option: object) -> str:
        self._require(
            {QuestionState.SHOWN_TO_PUBLIC, QuestionState.ANSWER_SELECTED},
            "select an answer",
        )
        letter = normalize_option(option)
        if letter is None:
            raise InvalidAnswerOption("selected", option)
        if letter not in self.visible_option_letters():
            raise InvalidAnswerOption("selected", option)
        if self._reopened:
            if self._lifeline_used is None:
                raise IllegalStateTransition(
                    self._state.value, "select an answer on a reopened question before using a lifeline"
                )
            if letter in self._rejected:
                raise InvalidAnswerOption("selected", option)
        self._selected = letter
        self._state = QuestionState.ANSWER_SELECTED
        return letter

    def lock(self) -> None:
        self._require({QuestionState.ANSWER_SELECTED}, "lock the answer")
        self._state = QuestionState.ANSWER_LOCKED

    def validate(self) -> AnswerValidation:
        self._require({QuestionState.ANSWER_LOCKED}, "validate the answer")
        if self._question is None:
            raise InvariantViolation("Locked answer without a loaded question.")
        result = validate_answer(self._selected, self._question.correct_answer)
        self._result = result
        self._state = QuestionState.ANSWER_VALIDATED
        return result

    def reopen_for_rescue(self) -> None:
        """Return an incorrectly answered question to the public so a lifeline can be used."""
        self._require({QuestionState.ANSWER_VALIDATED}, "reopen the question")
        if self._result is None or self._result.is_correct:
            raise IllegalStateTransition(self._state.value, "reopen a correctly answered question")
        if self._lifeline_used is not None:
            raise IllegalStateTransition(self._state.value, "reopen after a lifeline was already used")
        self._rejected.add(self._result.normalized_selected)
        self._selected = None
        self._result = None
        self._reopened = True
        self._state = QuestionState.SHOWN_TO_PUBLIC

    # --- lifeline hooks ---

    def lifeline_block_reason(self) -> str | None:
        """Why no lifeline may be used on this question right now, or None."""
        if not self.is_loaded:
            return "no question is loaded"
        if not self.is_visible_to_public:
            return "the question is not visible to the public"
        if self.is_locked:
            return "the answer is already locked"
        if self._lifeline_used is not None:
            return "a lifeline was already used on this question"
        return None

    def record_lifeline(self, lifeline: LifelineType) -> None:
        reason = self.lifeline_block_reason()
        if reason is not None:
            raise IllegalStateTransition(self._state.value, f"use a lifeline ({reason})")
        self._lifeline_used = lifeline

    def apply_filter(self, remaining: Iterable[str]) -> None:
        """Restrict the visible options, dropping a selection that was filtered out."""
        allowed = set(remaining)
        ordered = tuple(letter for letter in ANSWER_OPTIONS if letter in allowed)
        self._filtered_options = ordered
        if self._selected is not None and self._selected not in ordered:
            self._selected = None
            self._state = QuestionState.SHOWN_TO_PUBLIC

    def _require(self, allowed: set[QuestionState], action: str) -> None:
        if self._state not in allowed:
            raise IllegalStateTransition(self._state.value, action)
