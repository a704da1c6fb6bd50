"""Lifeline rules: eligibility, the 50/50 filter and the Phone-a-Friend timer."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import math
import random

from hotseat.constants.game_constants import (
    ANSWER_OPTIONS,
    FIFTY_FIFTY_REMOVE_COUNT,
    PHONE_A_FRIEND_DURATION_SECONDS,
)
from hotseat.core.errors import InvariantViolation
from hotseat.core.models import LifelineType, Team
from hotseat.core.services.question_flow import QuestionFlow


def lifeline_block_reason(lifeline: LifelineType, flow: QuestionFlow, team: Team | None) -> str | None:
    """Return why ``lifeline`` cannot be used now, or None when it can."""
    reason = flow.lifeline_block_reason()
    if reason is not None:
        return reason
    if team is None:
        return "no team is active"
    if not team.lifelines_available.is_available(lifeline):
        return "already used by this team"
    return None


def can_use_lifeline(lifeline: LifelineType, flow: QuestionFlow, team: Team | None) -> bool:
    return lifeline_block_reason(lifeline, flow, team) is None


@dataclass(frozen=True, slots=True)
class FiftyFiftyResult:
    removed_options: tuple[str, ...]
    remaining_options: tuple[str, ...]


def apply_fifty_fifty(
    correct_answer: str,
    rng: random.Random | None = None,
    options: Sequence[str] = ANSWER_OPTIONS,
) -> FiftyFiftyResult:
    """Remove two incorrect options chosen uniformly at random."""
    incorrect = [option for option in options if option != correct_answer]
    if len(incorrect) < FIFTY_FIFTY_REMOVE_COUNT:
        raise InvariantViolation("Not enough incorrect options to remove for 50/50.")

    rng = rng or random.Random()
    removed = set(rng.sample(incorrect, FIFTY_FIFTY_REMOVE_COUNT))
    return FiftyFiftyResult(
        removed_options=tuple(option for option in options if option in removed),
        remaining_options=tuple(option for option in options if option not in removed),
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timer_display(seconds: float) -> str:
    whole = max(0, math.ceil(seconds))
    minutes, secs = divmod(whole, 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass(frozen=True, slots=True)
class PhoneTimer:
    """Countdown for an in-progress call, anchored to a wall-clock start.

    Observers that reconnect recompute the remaining time from
    ``now - started_at``; nothing ticks in process.
    """

    started_at: datetime
    duration_seconds: int = PHONE_A_FRIEND_DURATION_SECONDS
    running: bool = True

    def remaining(self, now: datetime) -> float:
        elapsed = (now - self.started_at).total_seconds()
        return max(0.0, min(float(self.duration_seconds), self.duration_seconds - elapsed))

    def is_expired(self, now: datetime) -> bool:
        return self.remaining(now) <= 0

    def progress_pct(self, now: datetime) -> int:
        return round(self.remaining(now) / self.duration_seconds * 100)

    def display(self, now: datetime) -> str:
        return format_timer_display(self.remaining(now))

    def to_record(self) -> dict[str, object]:
        return {
            "running": self.running,
            "startedAt": self.started_at.isoformat(),
            "durationSeconds": self.duration_seconds,
        }
