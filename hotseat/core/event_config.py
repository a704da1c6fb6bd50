"""Per-event configuration, with environment overrides."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os

from hotseat.constants.game_constants import (
    CURRENCY_SYMBOL,
    MAX_TEAMS,
    MILESTONE_QUESTIONS,
    PHONE_A_FRIEND_DURATION_SECONDS,
    QUESTIONS_PER_SET,
)
from hotseat.core.errors import ValidationError


@dataclass(frozen=True, slots=True)
class EventConfig:
    """Fixed rules for one event: ladder length, milestones and lifeline timing."""

    questions_per_set: int = QUESTIONS_PER_SET
    milestone_questions: tuple[int, ...] = MILESTONE_QUESTIONS
    phone_a_friend_seconds: int = PHONE_A_FRIEND_DURATION_SECONDS
    currency_symbol: str = CURRENCY_SYMBOL
    max_teams: int = MAX_TEAMS

    def __post_init__(self) -> None:
        errors: list[str] = []
        if self.questions_per_set <= 0:
            errors.append("Questions per set must be a positive integer")
        if self.phone_a_friend_seconds <= 0:
            errors.append("Phone-a-Friend duration must be a positive number of seconds")
        if self.max_teams <= 0:
            errors.append("Maximum team count must be positive")
        for milestone in self.milestone_questions:
            if not 1 <= milestone <= self.questions_per_set:
                errors.append(f"Milestone {milestone} is outside 1-{self.questions_per_set}")
        if errors:
            raise ValidationError(errors)


def load_event_config(environ: Mapping[str, str] | None = None) -> EventConfig:
    """Build an EventConfig from ``HOTSEAT_*`` environment variables."""
    env = os.environ if environ is None else environ
    questions = int(env.get("HOTSEAT_QUESTIONS_PER_SET", QUESTIONS_PER_SET))
    raw_milestones = env.get("HOTSEAT_MILESTONES")
    if raw_milestones:
        milestones = tuple(int(part) for part in raw_milestones.split(",") if part.strip())
    else:
        milestones = tuple(m for m in MILESTONE_QUESTIONS if m <= questions)
    return EventConfig(
        questions_per_set=questions,
        milestone_questions=milestones,
        phone_a_friend_seconds=int(
            env.get("HOTSEAT_PHONE_A_FRIEND_SECONDS", PHONE_A_FRIEND_DURATION_SECONDS)
        ),
        currency_symbol=env.get("HOTSEAT_CURRENCY", CURRENCY_SYMBOL),
        max_teams=int(env.get("HOTSEAT_MAX_TEAMS", MAX_TEAMS)),
    )
