"""Service holding the question sets available to an event."""

from __future__ import annotations

from collections.abc import Mapping
import re

from hotseat.constants.game_constants import ANSWER_OPTIONS, QUESTIONS_PER_SET
from hotseat.core.errors import ValidationError
from hotseat.core.models import Question, QuestionSet

_SET_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,50}$")


def question_errors(question: object) -> list[str]:
    """Return every structural problem with a question (empty when loadable)."""
    if not isinstance(question, Question):
        return ["Question data is missing"]

    errors: list[str] = []
    label = f"Question {question.number}"
    if not isinstance(question.number, int) or question.number < 1:
        errors.append(f"{label}: number must be a positive integer")
    if not isinstance(question.text, str) or not question.text.strip():
        errors.append(f"{label}: question text is required")
    options = question.options if isinstance(question.options, Mapping) else {}
    if not options:
        errors.append(f"{label}: options are missing")
    for letter in ANSWER_OPTIONS:
        text = options.get(letter)
        if not isinstance(text, str) or not text.strip():
            errors.append(f"{label}: option {letter} is missing")
    extra = sorted(set(options) - set(ANSWER_OPTIONS))
    if extra:
        errors.append(f"{label}: unexpected options {', '.join(map(str, extra))}")
    if question.correct_answer not in ANSWER_OPTIONS:
        errors.append(
            f"{label}: correct answer must be one of {', '.join(ANSWER_OPTIONS)} "
            f"(got {question.correct_answer!r})"
        )
    return errors


def question_set_errors(question_set: QuestionSet, questions_per_set: int = QUESTIONS_PER_SET) -> list[str]:
    errors: list[str] = []
    if not _SET_ID_PATTERN.match(question_set.set_id or ""):
        errors.append("Set ID must be 3-50 alphanumeric characters with hyphens/underscores")
    if not question_set.set_name.strip():
        errors.append("Set name is required")
    if len(question_set.questions) != questions_per_set:
        errors.append(
            f"Question set must have exactly {questions_per_set} questions "
            f"(found {len(question_set.questions)})"
        )
    numbers = [q.number for q in question_set.questions]
    if numbers != list(range(1, len(numbers) + 1)):
        errors.append("Questions must be numbered 1..N in order")
    for question in question_set.questions:
        errors.extend(question_errors(question))
    return errors


class QuestionBank:
    """Keeps validated question sets keyed by set id."""

    def __init__(self, questions_per_set: int = QUESTIONS_PER_SET) -> None:
        self._questions_per_set = questions_per_set
        self._sets: dict[str, QuestionSet] = {}

    def add_set(self, question_set: QuestionSet) -> None:
        """Validate and store a set; an existing set with the same id is replaced."""
        errors = question_set_errors(question_set, self._questions_per_set)
        if errors:
            raise ValidationError(errors)
        self._sets[question_set.set_id] = question_set

    def remove_set(self, set_id: str) -> None:
        if set_id not in self._sets:
            raise KeyError(f"Question set '{set_id}' not found")
        del self._sets[set_id]

    def get_set(self, set_id: str) -> QuestionSet:
        try:
            return self._sets[set_id]
        except KeyError as exc:
            raise KeyError(f"Question set '{set_id}' not found") from exc

    def get_sets(self) -> list[QuestionSet]:
        return list(self._sets.values())

    def as_mapping(self) -> dict[str, QuestionSet]:
        return dict(self._sets)

    def get_set_count(self) -> int:
        return len(self._sets)

    def has_set(self, set_id: str) -> bool:
        return set_id in self._sets

    def get_question(self, set_id: str, number: int) -> Question | None:
        return self.get_set(set_id).question_by_number(number)

    def clear(self) -> None:
        self._sets = {}
