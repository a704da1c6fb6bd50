"""Service for the event roster and team status transitions."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from hotseat.constants.game_constants import MAX_TEAMS
from hotseat.core.errors import IllegalStateTransition, ValidationError
from hotseat.core.models import Team, TeamStatus

# Terminal teams only return to WAITING through reset_all.
TEAM_STATUS_TRANSITIONS: dict[TeamStatus, frozenset[TeamStatus]] = {
    TeamStatus.WAITING: frozenset({TeamStatus.ACTIVE}),
    TeamStatus.ACTIVE: frozenset({TeamStatus.ELIMINATED, TeamStatus.COMPLETED}),
    TeamStatus.ELIMINATED: frozenset(),
    TeamStatus.COMPLETED: frozenset(),
}


def is_valid_team_transition(current: TeamStatus, target: TeamStatus) -> bool:
    return target in TEAM_STATUS_TRANSITIONS.get(current, frozenset())


class TeamRoster:
    """Holds the teams registered for the event."""

    def __init__(self, max_teams: int = MAX_TEAMS) -> None:
        self._max_teams = max_teams
        self._teams: dict[str, Team] = {}

    def add_team(self, name: str, participants: str = "", contact: str = "") -> Team:
        cleaned_name = name.strip()
        errors: list[str] = []
        if not cleaned_name:
            errors.append("Team name is required")
        elif any(t.name.casefold() == cleaned_name.casefold() for t in self._teams.values()):
            errors.append("Team name already exists")
        if len(self._teams) >= self._max_teams:
            errors.append(f"Cannot add more than {self._max_teams} teams")
        if errors:
            raise ValidationError(errors)

        team = Team(
            id=uuid4().hex,
            name=cleaned_name,
            participants=participants.strip(),
            contact=contact.strip(),
            created_at=datetime.now(timezone.utc),
        )
        self._teams[team.id] = team
        return team

    def update_details(
        self,
        team_id: str,
        *,
        name: str | None = None,
        participants: str | None = None,
        contact: str | None = None,
    ) -> Team:
        team = self.get_team(team_id)
        if name is not None:
            cleaned = name.strip()
            if not cleaned:
                raise ValidationError(["Team name is required"])
            if any(
                t.id != team_id and t.name.casefold() == cleaned.casefold() for t in self._teams.values()
            ):
                raise ValidationError(["Team name already exists"])
            team.name = cleaned
        if participants is not None:
            team.participants = participants.strip()
        if contact is not None:
            team.contact = contact.strip()
        return team

    def remove_team(self, team_id: str) -> None:
        self.get_team(team_id)
        del self._teams[team_id]

    def get_team(self, team_id: str) -> Team:
        try:
            return self._teams[team_id]
        except KeyError as exc:
            raise KeyError(f"Team '{team_id}' not found") from exc

    def get_teams(self) -> list[Team]:
        return sorted(self._teams.values(), key=lambda t: t.created_at or datetime.min.replace(tzinfo=timezone.utc))

    def as_mapping(self) -> dict[str, Team]:
        return dict(self._teams)

    def get_active_team(self) -> Team | None:
        return next((t for t in self._teams.values() if t.status is TeamStatus.ACTIVE), None)

    def transition(self, team_id: str, target: TeamStatus) -> Team:
        team = self.get_team(team_id)
        if not is_valid_team_transition(team.status, target):
            raise IllegalStateTransition(team.status.value, f"move team to '{target.value}'")
        if target is TeamStatus.ACTIVE:
            active = self.get_active_team()
            if active is not None and active.id != team_id:
                raise IllegalStateTransition(
                    team.status.value, f"activate a team while '{active.name}' is still active"
                )
        team.status = target
        return team

    def reset_all(self) -> None:
        """Full event reset: every team back to WAITING with prize and lifelines restored."""
        for team in self._teams.values():
            team.status = TeamStatus.WAITING
            team.current_prize = 0
            team.questions_answered = 0
            team.lifelines_available.restore()
