"""Read-only views of the game for the host console and the public display.

Nothing produced by ``public_game_record`` or ``build_public_view`` may carry
the correct answer; only the host view does.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime

from hotseat.core.event_config import EventConfig
from hotseat.core.game_state import GameState
from hotseat.core.models import LifelineType, Team
from hotseat.core.play_queue import PlayQueueEntry
from hotseat.core.prize_ladder import PrizeLadder, format_prize
from hotseat.core.services.question_flow import QuestionFlow


def public_question(flow: QuestionFlow) -> dict[str, object] | None:
    if flow.question is None or not flow.is_visible_to_public:
        return None
    return {
        "id": flow.question.id,
        "number": flow.question.number,
        "text": flow.question.text,
        "options": flow.visible_options(),
    }


def public_game_record(state: GameState, ladder: PrizeLadder) -> dict[str, object]:
    """The ``game`` record mirrored to observers."""
    flow = state.flow
    result = flow.result
    answer_result = None
    if result is not None:
        answer_result = "correct" if result.is_correct else "incorrect"
    # A validated question stays on screen until the next load; report its own number.
    number = flow.question.number if flow.question is not None else state.current_question_number
    return {
        "status": state.status.value,
        "currentTeamId": state.current_team_id,
        "currentQuestionNumber": number,
        "playQueue": list(state.play_queue.order) if state.play_queue else [],
        "questionState": flow.state.value,
        "question": public_question(flow),
        "selectedAnswer": flow.selected_answer if flow.is_visible_to_public else None,
        "answerResult": answer_result,
        "filteredOptions": list(flow.filtered_options) if flow.filtered_options is not None else None,
        "lifelineUsed": flow.lifeline_used.value if flow.lifeline_used else None,
        "phoneCallActive": state.phone_call_active,
        "phoneTimer": state.phone_timer.to_record() if state.phone_timer else None,
        "pendingDecision": state.pending_decision.value if state.pending_decision else None,
        "prizeLadder": list(ladder.values),
        "milestones": list(ladder.milestones),
        "initializedAt": state.initialized_at.isoformat() if state.initialized_at else None,
        "startedAt": state.started_at.isoformat() if state.started_at else None,
    }


def team_summary(team: Team, currency: str) -> dict[str, object]:
    return {
        "id": team.id,
        "name": team.name,
        "status": team.status.value,
        "currentPrize": team.current_prize,
        "currentPrizeDisplay": format_prize(team.current_prize, currency),
        "questionsAnswered": team.questions_answered,
        "lifelinesAvailable": team.lifelines_available.to_dict(),
    }


def _timer_view(state: GameState, now: datetime) -> dict[str, object] | None:
    timer = state.phone_timer
    if timer is None:
        return None
    return {
        **timer.to_record(),
        "remainingSeconds": timer.remaining(now),
        "display": timer.display(now),
        "progressPct": timer.progress_pct(now),
    }


def _prize_context(
    state: GameState,
    team: Team | None,
    ladder: PrizeLadder,
    config: EventConfig,
) -> dict[str, object]:
    if team is None:
        return {"playingFor": None, "guaranteedPrize": None}
    # Skips advance the question counter without crediting questions_answered.
    number = state.current_question_number
    playing_for = None
    if not team.status.is_terminal and 1 <= number <= len(ladder):
        playing_for = ladder.prize_for(number)
    guaranteed = ladder.guaranteed_prize(team.questions_answered)
    return {
        "playingFor": format_prize(playing_for, config.currency_symbol) if playing_for is not None else None,
        "guaranteedPrize": format_prize(guaranteed, config.currency_symbol),
    }


def build_public_view(
    state: GameState,
    teams: Sequence[Team],
    ladder: PrizeLadder,
    config: EventConfig,
    now: datetime,
) -> dict[str, object]:
    current = next((t for t in teams if t.id == state.current_team_id), None)
    view = public_game_record(state, ladder)
    view["currentTeam"] = team_summary(current, config.currency_symbol) if current else None
    view["phoneTimer"] = _timer_view(state, now)
    view["prizeLadderDisplay"] = [format_prize(v, config.currency_symbol) for v in ladder.values]
    view.update(_prize_context(state, current, ladder, config))
    view["teams"] = [team_summary(t, config.currency_symbol) for t in teams]
    return view


def build_host_view(
    state: GameState,
    teams: Sequence[Team],
    ladder: PrizeLadder,
    config: EventConfig,
    now: datetime,
    preview: Sequence[PlayQueueEntry],
    usable_lifelines: Sequence[LifelineType],
) -> dict[str, object]:
    view = build_public_view(state, teams, ladder, config, now)
    flow = state.flow
    view["hostQuestion"] = flow.question.host_dict() if flow.question else None
    view["selectedAnswer"] = flow.selected_answer
    view["isReopened"] = flow.is_reopened
    view["usableLifelines"] = [kind.value for kind in usable_lifelines]
    view["playQueuePreview"] = [asdict(entry) for entry in preview]
    view["teams"] = [t.to_record() for t in teams]
    view["totalPrizePool"] = format_prize(ladder.total_prize_pool, config.currency_symbol)
    return view
