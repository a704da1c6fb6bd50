"""Turn and game controller shared by the host console, the API and the timer ticker."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
import random
from threading import Lock

from hotseat.core.errors import (
    IllegalStateTransition,
    InvariantViolation,
    LifelineUnavailable,
    ValidationError,
)
from hotseat.core.event_config import EventConfig
from hotseat.core.game_state import GameState, PendingDecision
from hotseat.core.models import GameStatus, LifelineType, QuestionSet, Team, TeamStatus
from hotseat.core.play_queue import (
    PlayQueueEntry,
    generate_play_queue,
    play_queue_preview,
    validate_play_queue,
)
from hotseat.core.prize_ladder import PrizeLadder, default_prize_values
from hotseat.core.projections import build_host_view, build_public_view, public_game_record
from hotseat.core.services.leaderboard import LeaderboardRow, rank_teams
from hotseat.core.services.lifelines import (
    PhoneTimer,
    apply_fifty_fifty,
    lifeline_block_reason,
    utc_now,
)
from hotseat.core.services.prize_editor import PrizeLadderEditor
from hotseat.core.services.question_bank import QuestionBank
from hotseat.core.services.state_store import (
    GAME_RECORD,
    InMemoryStateStore,
    StateStore,
    team_record_key,
)
from hotseat.core.services.team_roster import TeamRoster

logger = logging.getLogger(__name__)

_SETUP_STATES = {GameStatus.NOT_STARTED, GameStatus.INITIALIZED}


class OutcomeKind(str, Enum):
    CORRECT = "correct"
    COMPLETED = "completed"
    DECISION_PENDING = "decision-pending"
    ELIMINATED = "eliminated"


@dataclass(frozen=True, slots=True)
class AnswerOutcome:
    """What happened when the host locked the team's answer."""

    kind: OutcomeKind
    question_number: int
    selected_answer: str
    correct_answer: str
    prize: int
    guaranteed_prize: int
    available_lifelines: tuple[LifelineType, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "questionNumber": self.question_number,
            "selectedAnswer": self.selected_answer,
            "correctAnswer": self.correct_answer,
            "prize": self.prize,
            "guaranteedPrize": self.guaranteed_prize,
            "availableLifelines": [kind.value for kind in self.available_lifelines],
        }


class GameManager:
    """Facade over roster, question bank, prize ladder and the running game.

    Every public method takes the manager lock, so the phone timer ticker and
    host actions never interleave. Every mutation publishes exactly one
    change set to the state store.
    """

    def __init__(
        self,
        config: EventConfig | None = None,
        store: StateStore | None = None,
        state: GameState | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._lock = Lock()
        self._config = config or EventConfig()
        self._store: StateStore = store if store is not None else InMemoryStateStore()
        self._state = state or GameState()
        self._rng = rng or random.Random()
        self._clock = clock

        # Services
        self._roster = TeamRoster(self._config.max_teams)
        self._bank = QuestionBank(self._config.questions_per_set)
        self._ladder = PrizeLadder(
            default_prize_values(self._config.questions_per_set),
            self._config.milestone_questions,
        )
        self._prize_editor: PrizeLadderEditor | None = None
        self._detach_prize_editor: Callable[[], None] | None = None

        self._lifeline_handlers: dict[LifelineType, Callable[[Team], dict[str, object]]] = {
            LifelineType.FIFTY_FIFTY: self._use_fifty_fifty,
            LifelineType.PHONE_A_FRIEND: self._use_phone_a_friend,
        }

        with self._lock:
            self._publish()

    @property
    def config(self) -> EventConfig:
        return self._config

    @property
    def store(self) -> StateStore:
        return self._store

    # --- Team Roster Delegation ---

    def add_team(self, name: str, participants: str = "", contact: str = "") -> Team:
        with self._lock:
            self._state.require({GameStatus.NOT_STARTED}, "add a team")
            team = self._roster.add_team(name, participants, contact)
            self._publish(team, game=False)
            logger.info("Team added: %s", team.name)
            return team

    def update_team(
        self,
        team_id: str,
        *,
        name: str | None = None,
        participants: str | None = None,
        contact: str | None = None,
    ) -> Team:
        with self._lock:
            team = self._roster.update_details(team_id, name=name, participants=participants, contact=contact)
            self._publish(team, game=False)
            return team

    def remove_team(self, team_id: str) -> None:
        with self._lock:
            self._state.require({GameStatus.NOT_STARTED}, "remove a team")
            self._roster.remove_team(team_id)
            self._store.write({team_record_key(team_id): None})

    def get_team(self, team_id: str) -> Team:
        with self._lock:
            return self._roster.get_team(team_id)

    def get_teams(self) -> list[Team]:
        with self._lock:
            return self._roster.get_teams()

    # --- Question Bank Delegation ---

    def add_question_set(self, question_set: QuestionSet) -> None:
        with self._lock:
            self._state.require({GameStatus.NOT_STARTED}, "register a question set")
            self._bank.add_set(question_set)
            logger.info("Question set registered: %s", question_set.set_id)

    def remove_question_set(self, set_id: str) -> None:
        with self._lock:
            self._state.require({GameStatus.NOT_STARTED}, "remove a question set")
            self._bank.remove_set(set_id)

    def get_question_sets(self) -> list[QuestionSet]:
        with self._lock:
            return self._bank.get_sets()

    # --- Prize Ladder ---

    @property
    def prize_ladder(self) -> PrizeLadder:
        with self._lock:
            return self._ladder

    def set_prize_ladder(self, values: Sequence[int]) -> PrizeLadder:
        with self._lock:
            self._apply_prize_values(values)
            return self._ladder

    def open_prize_editor(self) -> PrizeLadderEditor:
        """Start a host edit session that follows remote ladder writes until edited."""
        with self._lock:
            if self._detach_prize_editor is not None:
                self._detach_prize_editor()
            editor = PrizeLadderEditor(
                self._ladder.values,
                self._ladder.milestones,
                expected_levels=self._config.questions_per_set,
            )

            def follow_remote(_revision: int, changes: dict[str, dict[str, object] | None]) -> None:
                record = changes.get(GAME_RECORD)
                if record and "prizeLadder" in record:
                    editor.receive_remote(record["prizeLadder"])

            self._prize_editor = editor
            self._detach_prize_editor = self._store.subscribe(follow_remote)
            return editor

    def edit_prize_level(self, question_number: int, amount: int) -> list[int]:
        with self._lock:
            editor = self._require_prize_editor("edit a prize level")
            editor.edit_value(question_number, amount)
            return editor.values

    def discard_prize_edits(self) -> list[int]:
        with self._lock:
            editor = self._require_prize_editor("discard prize edits")
            editor.discard()
            return editor.values

    def save_prize_editor(self) -> PrizeLadder:
        with self._lock:
            editor = self._require_prize_editor("save prize edits")
            self._state.require(_SETUP_STATES, "change the prize ladder")
            self._apply_prize_values(editor.save())
            return self._ladder

    # --- Game Lifecycle ---

    def get_status(self) -> GameStatus:
        with self._lock:
            return self._state.status

    def initialize_game(self) -> list[PlayQueueEntry]:
        """Generate the play queue. May be re-run until the event starts."""
        with self._lock:
            self._initialize()
            return self._preview()

    def reinitialize_game(self) -> list[PlayQueueEntry]:
        """Reset the event and generate a fresh play queue."""
        with self._lock:
            if self._state.status is not GameStatus.NOT_STARTED:
                self._reset_event(publish=False)
            self._initialize()
            return self._preview()

    def preview_play_queue(self) -> list[PlayQueueEntry]:
        with self._lock:
            if self._state.play_queue is None:
                raise IllegalStateTransition(self._state.status.value, "preview the play queue")
            return self._preview()

    def start_event(self) -> Team:
        with self._lock:
            self._state.require({GameStatus.INITIALIZED}, "start the event")
            queue = self._state.play_queue
            if queue is None:
                raise InvariantViolation("Initialized game has no play queue.")
            errors = validate_play_queue(queue)
            if errors:
                raise ValidationError(errors)
            self._state.transition(GameStatus.ACTIVE, "start the event")
            self._state.started_at = self._clock()
            team = self._activate_team(queue.order[0])
            self._publish(team)
            logger.info("Event started; first team: %s", team.name)
            return team

    def uninitialize_game(self) -> None:
        with self._lock:
            if self._state.status is GameStatus.NOT_STARTED:
                raise IllegalStateTransition(self._state.status.value, "uninitialize the game")
            self._reset_event(publish=True)

    def pause_game(self) -> None:
        with self._lock:
            self._state.transition(GameStatus.PAUSED, "pause the game")
            self._publish()
            logger.info("Game paused by host")

    def resume_game(self) -> None:
        with self._lock:
            self._state.require({GameStatus.PAUSED}, "resume the game")
            if self._state.phone_call_active:
                raise IllegalStateTransition(
                    self._state.status.value, "resume the game while a Phone-a-Friend call is outstanding"
                )
            self._state.transition(GameStatus.ACTIVE, "resume the game")
            self._publish()
            logger.info("Game resumed by host")

    # --- Question Flow ---

    def load_question(self) -> int:
        """Load the current team's next question for the host. Returns its number."""
        with self._lock:
            team = self._require_turn("load a question")
            self._require_no_decision("load a question")
            flow = self._state.flow
            if flow.is_validated:
                flow.reset()
            number = self._state.current_question_number
            question = self._bank.get_question(self._assigned_set_id(team), number)
            if question is None:
                raise InvariantViolation(f"Question {number} is missing from the assigned set.")
            flow.load(question)
            self._publish()
            logger.info("Question %d loaded for %s", number, team.name)
            return number

    def show_question(self) -> None:
        with self._lock:
            self._require_turn("show the question")
            self._state.flow.show()
            self._publish()

    def hide_question(self) -> None:
        with self._lock:
            self._require_turn("hide the question")
            self._state.flow.hide()
            self._publish()

    def select_answer(self, option: object) -> str:
        with self._lock:
            self._require_turn("select an answer")
            letter = self._state.flow.select(option)
            self._publish()
            return letter

    def lock_answer(self) -> AnswerOutcome:
        """Lock the selection, validate it and settle the team's prize."""
        with self._lock:
            team = self._require_turn("lock the answer")
            flow = self._state.flow
            flow.lock()
            result = flow.validate()
            number = self._state.current_question_number

            if result.is_correct:
                outcome = self._credit_correct(team, number, result.normalized_selected, result.normalized_correct)
            else:
                guaranteed = self._ladder.guaranteed_prize(team.questions_answered)
                rescues = tuple(team.lifelines_available.available()) if flow.lifeline_used is None else ()
                if rescues:
                    self._state.pending_decision = PendingDecision.RESCUE_OR_ELIMINATE
                    kind = OutcomeKind.DECISION_PENDING
                    prize = team.current_prize
                    logger.info("Incorrect answer by %s; host decision pending", team.name)
                else:
                    self._eliminate(team)
                    kind = OutcomeKind.ELIMINATED
                    prize = team.current_prize
                outcome = AnswerOutcome(
                    kind=kind,
                    question_number=number,
                    selected_answer=result.normalized_selected,
                    correct_answer=result.normalized_correct,
                    prize=prize,
                    guaranteed_prize=guaranteed,
                    available_lifelines=rescues,
                )
            self._publish(team)
            return outcome

    def offer_lifeline(self) -> None:
        """Reopen the incorrectly answered question so the team may use a lifeline."""
        with self._lock:
            team = self._require_turn("offer a lifeline")
            if self._state.pending_decision is None:
                raise IllegalStateTransition(self._state.status.value, "offer a lifeline without a pending decision")
            self._state.flow.reopen_for_rescue()
            self._state.pending_decision = None
            self._publish()
            logger.info("Lifeline opportunity offered to %s", team.name)

    def eliminate_team(self) -> Team:
        with self._lock:
            team = self._require_turn("eliminate the team")
            flow = self._state.flow
            rescue_open = flow.is_reopened and not flow.is_locked
            if self._state.pending_decision is None and not rescue_open:
                raise IllegalStateTransition(self._state.status.value, "eliminate a team without a pending decision")
            self._eliminate(team)
            self._publish(team)
            return team

    def skip_question(self) -> None:
        """Move past the loaded question without prize credit."""
        with self._lock:
            team = self._require_turn("skip the question")
            self._require_no_decision("skip the question")
            flow = self._state.flow
            if not flow.is_loaded or flow.is_locked or flow.is_reopened:
                raise IllegalStateTransition(flow.state.value, "skip the question")
            number = self._state.current_question_number
            flow.reset()
            if number >= len(self._ladder):
                self._roster.transition(team.id, TeamStatus.COMPLETED)
                logger.info("%s completed by skipping the final question", team.name)
            else:
                self._state.current_question_number = number + 1
                logger.info("Question %d skipped for %s", number, team.name)
            self._publish(team)

    def advance_to_next_team(self) -> Team | None:
        """Activate the next team in the play queue, completing the game when none is left."""
        with self._lock:
            self._state.require({GameStatus.ACTIVE}, "advance to the next team")
            current = self._current_team()
            if current is not None and not current.status.is_terminal:
                raise IllegalStateTransition(current.status.value, "advance while the current team is still playing")
            queue = self._state.play_queue
            if queue is None:
                raise InvariantViolation("Active game has no play queue.")
            next_id = queue.next_after(current.id) if current else None
            if next_id is None:
                self._state.transition(GameStatus.COMPLETED, "complete the game")
                self._state.flow.reset()
                self._state.current_team_id = None
                self._state.current_question_number = 0
                self._publish()
                logger.info("Play queue exhausted; game completed")
                return None
            team = self._activate_team(next_id)
            self._publish(team)
            logger.info("Next team: %s", team.name)
            return team

    # --- Lifelines ---

    def can_use_lifeline(self, lifeline: LifelineType) -> bool:
        with self._lock:
            return self._lifeline_block_reason(lifeline) is None

    def activate_lifeline(self, lifeline: LifelineType) -> dict[str, object]:
        with self._lock:
            reason = self._lifeline_block_reason(lifeline)
            if reason is not None:
                raise LifelineUnavailable(lifeline.value, reason)
            team = self._current_team()
            if team is None:
                raise InvariantViolation("Usable lifeline without a current team.")
            return self._lifeline_handlers[lifeline](team)

    def start_phone_timer(self, now: datetime | None = None) -> PhoneTimer:
        with self._lock:
            if not self._state.phone_call_active:
                raise IllegalStateTransition(self._state.status.value, "start the call timer without an active call")
            if self._state.phone_timer is not None:
                raise IllegalStateTransition(self._state.status.value, "start the call timer twice")
            timer = PhoneTimer(
                started_at=now or self._clock(),
                duration_seconds=self._config.phone_a_friend_seconds,
            )
            self._state.phone_timer = timer
            self._publish()
            logger.info("Phone-a-Friend timer started (%ds)", timer.duration_seconds)
            return timer

    def resume_from_phone_a_friend(self) -> bool:
        """End the call manually. Returns False when no call is outstanding."""
        with self._lock:
            return self._resume_phone_call("manual resume")

    def check_phone_timer(self, now: datetime | None = None) -> bool:
        """Resume the game if the call timer has run out. Called by the ticker."""
        with self._lock:
            timer = self._state.phone_timer
            if not self._state.phone_call_active or timer is None:
                return False
            if not timer.is_expired(now or self._clock()):
                return False
            return self._resume_phone_call("timer expiry")

    def phone_timer_remaining(self, now: datetime | None = None) -> float | None:
        with self._lock:
            timer = self._state.phone_timer
            if timer is None:
                return None
            return timer.remaining(now or self._clock())

    # --- Views ---

    def host_view(self, now: datetime | None = None) -> dict[str, object]:
        with self._lock:
            usable = [kind for kind in LifelineType if self._lifeline_block_reason(kind) is None]
            preview = self._preview() if self._state.play_queue else []
            return build_host_view(
                self._state,
                self._roster.get_teams(),
                self._ladder,
                self._config,
                now or self._clock(),
                preview,
                usable,
            )

    def public_view(self, now: datetime | None = None) -> dict[str, object]:
        with self._lock:
            return build_public_view(
                self._state,
                self._roster.get_teams(),
                self._ladder,
                self._config,
                now or self._clock(),
            )

    def leaderboard(self) -> list[LeaderboardRow]:
        with self._lock:
            return rank_teams(self._roster.get_teams())

    # --- internals (callers hold the lock) ---

    def _publish(self, *teams: Team, game: bool = True) -> int:
        changes: dict[str, dict[str, object] | None] = {}
        if game:
            changes[GAME_RECORD] = public_game_record(self._state, self._ladder)
        for team in teams:
            changes[team_record_key(team.id)] = team.to_record()
        return self._store.write(changes)

    def _preview(self) -> list[PlayQueueEntry]:
        if self._state.play_queue is None:
            raise InvariantViolation("No play queue has been generated.")
        return play_queue_preview(self._state.play_queue, self._roster.as_mapping(), self._bank.as_mapping())

    def _initialize(self) -> None:
        self._state.require(_SETUP_STATES, "initialize the game")
        queue = generate_play_queue(self._roster.get_teams(), self._bank.get_sets(), self._rng)
        if self._state.status is GameStatus.NOT_STARTED:
            self._state.transition(GameStatus.INITIALIZED, "initialize the game")
        self._state.play_queue = queue
        self._state.initialized_at = self._clock()
        self._publish()
        logger.info("Game initialized with %d teams", len(queue.order))

    def _reset_event(self, publish: bool) -> None:
        self._state.transition(GameStatus.NOT_STARTED, "uninitialize the game")
        self._roster.reset_all()
        self._state.clear()
        if publish:
            self._publish(*self._roster.get_teams())
        else:
            self._store.write({team_record_key(t.id): t.to_record() for t in self._roster.get_teams()})
        logger.info("Event reset; teams returned to waiting")

    def _apply_prize_values(self, values: Sequence[int]) -> None:
        self._state.require(_SETUP_STATES, "change the prize ladder")
        if len(values) != self._config.questions_per_set:
            raise ValidationError([f"Prize structure must have exactly {self._config.questions_per_set} levels"])
        self._ladder = PrizeLadder(values, self._config.milestone_questions)
        self._publish()
        logger.info("Prize ladder updated; top prize %d", self._ladder.max_prize)

    def _current_team(self) -> Team | None:
        if self._state.current_team_id is None:
            return None
        return self._roster.get_team(self._state.current_team_id)

    def _require_turn(self, action: str) -> Team:
        self._state.require({GameStatus.ACTIVE}, action)
        team = self._current_team()
        if team is None or team.status is not TeamStatus.ACTIVE:
            status = team.status.value if team else self._state.status.value
            raise IllegalStateTransition(status, action)
        return team

    def _require_prize_editor(self, action: str) -> PrizeLadderEditor:
        if self._prize_editor is None:
            raise IllegalStateTransition(self._state.status.value, f"{action} without an open editor")
        return self._prize_editor

    def _require_no_decision(self, action: str) -> None:
        if self._state.pending_decision is not None:
            raise IllegalStateTransition(self._state.pending_decision.value, action)

    def _assigned_set_id(self, team: Team) -> str:
        queue = self._state.play_queue
        if queue is None or team.id not in queue.assignments:
            raise InvariantViolation(f"Team '{team.name}' has no question set assigned.")
        return queue.assignments[team.id]

    def _activate_team(self, team_id: str) -> Team:
        team = self._roster.transition(team_id, TeamStatus.ACTIVE)
        self._state.current_team_id = team.id
        self._state.current_question_number = team.questions_answered + 1
        self._state.pending_decision = None
        self._state.flow.reset()
        return team

    def _credit_correct(self, team: Team, number: int, selected: str, correct: str) -> AnswerOutcome:
        team.current_prize = self._ladder.prize_for(number)
        team.questions_answered = number
        if number >= len(self._ladder):
            self._roster.transition(team.id, TeamStatus.COMPLETED)
            kind = OutcomeKind.COMPLETED
            logger.info("%s completed the ladder with %d", team.name, team.current_prize)
        else:
            self._state.current_question_number = number + 1
            kind = OutcomeKind.CORRECT
            logger.info("%s answered question %d correctly", team.name, number)
        return AnswerOutcome(
            kind=kind,
            question_number=number,
            selected_answer=selected,
            correct_answer=correct,
            prize=team.current_prize,
            guaranteed_prize=self._ladder.guaranteed_prize(team.questions_answered),
        )

    def _eliminate(self, team: Team) -> None:
        team.current_prize = self._ladder.guaranteed_prize(team.questions_answered)
        self._roster.transition(team.id, TeamStatus.ELIMINATED)
        self._state.pending_decision = None
        logger.info("%s eliminated with guaranteed prize %d", team.name, team.current_prize)

    def _lifeline_block_reason(self, lifeline: LifelineType) -> str | None:
        if self._state.status is not GameStatus.ACTIVE:
            return f"the game is {self._state.status.value}"
        team = self._current_team()
        if team is not None and team.status is not TeamStatus.ACTIVE:
            team = None
        return lifeline_block_reason(lifeline, self._state.flow, team)

    def _use_fifty_fifty(self, team: Team) -> dict[str, object]:
        question = self._state.flow.question
        if question is None:
            raise InvariantViolation("50/50 used without a loaded question.")
        result = apply_fifty_fifty(question.correct_answer, self._rng)
        team.lifelines_available.consume(LifelineType.FIFTY_FIFTY)
        self._state.flow.record_lifeline(LifelineType.FIFTY_FIFTY)
        self._state.flow.apply_filter(result.remaining_options)
        self._publish(team)
        logger.info("50/50 used by %s; removed %s", team.name, ", ".join(result.removed_options))
        return {
            "lifeline": LifelineType.FIFTY_FIFTY.value,
            "removedOptions": list(result.removed_options),
            "remainingOptions": list(result.remaining_options),
        }

    def _use_phone_a_friend(self, team: Team) -> dict[str, object]:
        team.lifelines_available.consume(LifelineType.PHONE_A_FRIEND)
        self._state.flow.record_lifeline(LifelineType.PHONE_A_FRIEND)
        self._state.phone_call_active = True
        self._state.phone_timer = None
        self._state.transition(GameStatus.PAUSED, "start a Phone-a-Friend call")
        self._publish(team)
        logger.info("Phone-a-Friend used by %s; game paused", team.name)
        return {
            "lifeline": LifelineType.PHONE_A_FRIEND.value,
            "durationSeconds": self._config.phone_a_friend_seconds,
        }

    def _resume_phone_call(self, trigger: str) -> bool:
        if not self._state.phone_call_active:
            logger.debug("Ignoring %s: no Phone-a-Friend call outstanding", trigger)
            return False
        self._state.phone_call_active = False
        self._state.phone_timer = None
        self._state.transition(GameStatus.ACTIVE, "resume from Phone-a-Friend")
        self._publish()
        logger.info("Phone-a-Friend call ended by %s; game active", trigger)
        return True
