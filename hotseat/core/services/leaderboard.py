"""Service for ranking teams once their turns are over."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hotseat.core.models import Team, TeamStatus

_STATUS_ORDER = {
    TeamStatus.COMPLETED: 0,
    TeamStatus.ELIMINATED: 1,
    TeamStatus.ACTIVE: 2,
    TeamStatus.WAITING: 3,
}


@dataclass(slots=True)
class LeaderboardRow:
    """Immutable snapshot returned to consumers."""

    place: int
    team_id: str
    team_name: str
    status: TeamStatus
    prize: int
    questions_answered: int

    def to_dict(self) -> dict[str, object]:
        return {
            "place": self.place,
            "teamId": self.team_id,
            "teamName": self.team_name,
            "status": self.status.value,
            "prize": self.prize,
            "questionsAnswered": self.questions_answered,
        }


def rank_teams(teams: Iterable[Team]) -> list[LeaderboardRow]:
    """Order by status (completed first), prize descending, then name.

    Teams with the same status and prize share a place; the next place skips.
    """
    ordered = sorted(
        teams,
        key=lambda t: (_STATUS_ORDER[t.status], -t.current_prize, t.name.casefold()),
    )
    rows: list[LeaderboardRow] = []
    previous: tuple[TeamStatus, int] | None = None
    place = 0
    for index, team in enumerate(ordered, start=1):
        key = (team.status, team.current_prize)
        if key != previous:
            place = index
            previous = key
        rows.append(
            LeaderboardRow(
                place=place,
                team_id=team.id,
                team_name=team.name,
                status=team.status,
                prize=team.current_prize,
                questions_answered=team.questions_answered,
            )
        )
    return rows
