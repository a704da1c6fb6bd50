"""Aggregate state of one event, owned by the GameManager."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from hotseat.core.errors import IllegalStateTransition
from hotseat.core.models import GameStatus, PlayQueue
from hotseat.core.services.lifelines import PhoneTimer
from hotseat.core.services.question_flow import QuestionFlow

GAME_STATUS_TRANSITIONS: dict[GameStatus, frozenset[GameStatus]] = {
    GameStatus.NOT_STARTED: frozenset({GameStatus.INITIALIZED}),
    GameStatus.INITIALIZED: frozenset({GameStatus.ACTIVE, GameStatus.NOT_STARTED}),
    GameStatus.ACTIVE: frozenset({GameStatus.PAUSED, GameStatus.COMPLETED, GameStatus.NOT_STARTED}),
    GameStatus.PAUSED: frozenset({GameStatus.ACTIVE, GameStatus.COMPLETED, GameStatus.NOT_STARTED}),
    GameStatus.COMPLETED: frozenset({GameStatus.NOT_STARTED}),
}


class PendingDecision(str, Enum):
    """Host choice required after an incorrect answer while a rescue exists."""

    RESCUE_OR_ELIMINATE = "rescue-or-eliminate"


@dataclass(slots=True)
class GameState:
    """Everything that changes while an event runs.

    Teams, question sets and the prize ladder live in their own services and
    survive an uninitialize; everything here is cleared by it.
    """

    status: GameStatus = GameStatus.NOT_STARTED
    current_team_id: str | None = None
    current_question_number: int = 0
    play_queue: PlayQueue | None = None
    flow: QuestionFlow = field(default_factory=QuestionFlow)
    phone_call_active: bool = False
    phone_timer: PhoneTimer | None = None
    pending_decision: PendingDecision | None = None
    initialized_at: datetime | None = None
    started_at: datetime | None = None

    def transition(self, target: GameStatus, action: str) -> None:
        if target not in GAME_STATUS_TRANSITIONS[self.status]:
            raise IllegalStateTransition(self.status.value, action)
        self.status = target

    def require(self, allowed: set[GameStatus], action: str) -> None:
        if self.status not in allowed:
            raise IllegalStateTransition(self.status.value, action)

    def clear(self) -> None:
        """Drop the queue, the turn and any call in progress."""
        self.status = GameStatus.NOT_STARTED
        self.current_team_id = None
        self.current_question_number = 0
        self.play_queue = None
        self.flow.reset()
        self.phone_call_active = False
        self.phone_timer = None
        self.pending_decision = None
        self.initialized_at = None
        self.started_at = None
