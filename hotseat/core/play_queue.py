"""Play order and question-set assignment for an event.

The team order and the set assignment come from two independent
Fisher-Yates shuffles, so every permutation of teams and every injective
team-to-set mapping is equally likely.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import logging
import random
from typing import TypeVar

from hotseat.constants.game_constants import MIN_TEAMS
from hotseat.core.errors import ValidationError
from hotseat.core.models import PlayQueue, QuestionSet, Team

T = TypeVar("T")

logger = logging.getLogger(__name__)


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly shuffled copy of ``items``."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def validate_can_initialize(teams: Sequence[Team], question_sets: Sequence[QuestionSet]) -> list[str]:
    errors: list[str] = []
    if len(teams) < MIN_TEAMS:
        errors.append(f"At least {MIN_TEAMS} team is required to initialize the game")
    if not question_sets:
        errors.append("At least 1 question set is required to initialize the game")
    if len(question_sets) < len(teams):
        errors.append(
            f"Insufficient question sets: need {len(teams)} sets for {len(teams)} teams "
            f"(only {len(question_sets)} available)"
        )
    return errors


def generate_play_queue(
    teams: Sequence[Team],
    question_sets: Sequence[QuestionSet],
    rng: random.Random | None = None,
) -> PlayQueue:
    """Shuffle the teams into a play order and give each a distinct question set."""
    errors = validate_can_initialize(teams, question_sets)
    if errors:
        raise ValidationError(errors)

    rng = rng or random.Random()
    shuffled_teams = fisher_yates_shuffle(teams, rng)
    shuffled_sets = fisher_yates_shuffle(question_sets, rng)

    order = tuple(team.id for team in shuffled_teams)
    assignments = {team.id: shuffled_sets[i].set_id for i, team in enumerate(shuffled_teams)}
    logger.info("Play queue generated: %d teams, %d sets available", len(order), len(question_sets))
    return PlayQueue(order=order, assignments=assignments)


def validate_play_queue(queue: PlayQueue) -> list[str]:
    """Consistency checks for a queue read back from storage."""
    errors: list[str] = []
    if not queue.order:
        errors.append("Play queue cannot be empty")
    if len(set(queue.order)) != len(queue.order):
        errors.append("Play queue contains duplicate teams")
    missing = [team_id for team_id in queue.order if team_id not in queue.assignments]
    if missing:
        errors.append(f"{len(missing)} team(s) missing question set assignments")
    assigned = list(queue.assignments.values())
    if len(set(assigned)) != len(assigned):
        errors.append("A question set is assigned to more than one team")
    return errors


@dataclass(slots=True)
class PlayQueueEntry:
    """Preview row for the host before the event starts."""

    position: int
    team_id: str
    team_name: str
    team_participants: str
    question_set_id: str | None
    question_set_name: str


def play_queue_preview(
    queue: PlayQueue,
    teams: Mapping[str, Team],
    question_sets: Mapping[str, QuestionSet],
) -> list[PlayQueueEntry]:
    entries: list[PlayQueueEntry] = []
    for index, team_id in enumerate(queue.order):
        team = teams.get(team_id)
        set_id = queue.assignments.get(team_id)
        question_set = question_sets.get(set_id) if set_id else None
        entries.append(
            PlayQueueEntry(
                position=index + 1,
                team_id=team_id,
                team_name=team.name if team else "Unknown Team",
                team_participants=team.participants if team else "",
                question_set_id=set_id,
                question_set_name=question_set.set_name if question_set else "Unknown Set",
            )
        )
    return entries
