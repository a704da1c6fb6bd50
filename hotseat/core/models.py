"""Domain models for the hot seat quiz engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from hotseat.core.errors import LifelineUnavailable


class TeamStatus(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    ELIMINATED = "eliminated"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (TeamStatus.ELIMINATED, TeamStatus.COMPLETED)


class GameStatus(str, Enum):
    NOT_STARTED = "not-started"
    INITIALIZED = "initialized"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class QuestionState(str, Enum):
    NOT_LOADED = "not-loaded"
    LOADED_HOST_ONLY = "loaded-host-only"
    SHOWN_TO_PUBLIC = "shown-to-public"
    ANSWER_SELECTED = "answer-selected"
    ANSWER_LOCKED = "answer-locked"
    ANSWER_VALIDATED = "answer-validated"


class LifelineType(str, Enum):
    PHONE_A_FRIEND = "phoneAFriend"
    FIFTY_FIFTY = "fiftyFifty"


@dataclass(slots=True)
class LifelineFlags:
    """Per-team lifeline availability. Flags only ever go from True to False."""

    phone_a_friend: bool = True
    fifty_fifty: bool = True

    def is_available(self, lifeline: LifelineType) -> bool:
        if lifeline is LifelineType.PHONE_A_FRIEND:
            return self.phone_a_friend
        return self.fifty_fifty

    def consume(self, lifeline: LifelineType) -> None:
        if not self.is_available(lifeline):
            raise LifelineUnavailable(lifeline.value, "already used by this team")
        if lifeline is LifelineType.PHONE_A_FRIEND:
            self.phone_a_friend = False
        else:
            self.fifty_fifty = False

    def available(self) -> list[LifelineType]:
        return [kind for kind in LifelineType if self.is_available(kind)]

    def any_available(self) -> bool:
        return self.phone_a_friend or self.fifty_fifty

    def restore(self) -> None:
        """Full event reset only."""
        self.phone_a_friend = True
        self.fifty_fifty = True

    def to_dict(self) -> dict[str, bool]:
        return {
            LifelineType.PHONE_A_FRIEND.value: self.phone_a_friend,
            LifelineType.FIFTY_FIFTY.value: self.fifty_fifty,
        }


@dataclass(slots=True)
class Team:
    """A team on the event roster."""

    id: str
    name: str
    participants: str = ""
    contact: str = ""
    status: TeamStatus = TeamStatus.WAITING
    current_prize: int = 0
    questions_answered: int = 0
    lifelines_available: LifelineFlags = field(default_factory=LifelineFlags)
    created_at: datetime | None = None

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "participants": self.participants,
            "contact": self.contact,
            "status": self.status.value,
            "currentPrize": self.current_prize,
            "questionsAnswered": self.questions_answered,
            "lifelinesAvailable": self.lifelines_available.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with options A-D and one correct letter."""

    id: str
    number: int
    text: str
    options: dict[str, str]
    correct_answer: str

    def public_dict(self) -> dict[str, object]:
        """Question data safe for the audience: no correct answer."""
        return {
            "id": self.id,
            "number": self.number,
            "text": self.text,
            "options": dict(self.options),
        }

    def host_dict(self) -> dict[str, object]:
        payload = self.public_dict()
        payload["correctAnswer"] = self.correct_answer
        return payload


@dataclass(frozen=True, slots=True)
class QuestionSet:
    """Ordered set of ladder questions assigned to a single team."""

    set_id: str
    set_name: str
    questions: tuple[Question, ...]

    def question_by_number(self, number: int) -> Question | None:
        return next((q for q in self.questions if q.number == number), None)


@dataclass(frozen=True, slots=True)
class PlayQueue:
    """Randomized team order plus the 1:1 team to question-set assignment."""

    order: tuple[str, ...]
    assignments: dict[str, str]

    def position_of(self, team_id: str) -> int:
        try:
            return self.order.index(team_id)
        except ValueError:
            return -1

    def next_after(self, team_id: str) -> str | None:
        index = self.position_of(team_id)
        if index == -1 or index + 1 >= len(self.order):
            return None
        return self.order[index + 1]


@dataclass(frozen=True, slots=True)
class AnswerValidation:
    """Result of comparing the selected option with the correct one."""

    is_correct: bool
    normalized_selected: str
    normalized_correct: str
