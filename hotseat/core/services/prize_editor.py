"""Host-side editing of the prize ladder values."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from hotseat.core.errors import ValidationError
from hotseat.core.prize_ladder import validate_prize_values

logger = logging.getLogger(__name__)


class PrizeLadderEditor:
    """Working copy of the ladder values with a pending-local-edit guard.

    Remote updates replace the working copy only while the host has no
    unsaved edit; once saved, the last writer wins.
    """

    def __init__(
        self,
        values: Sequence[int],
        milestones: Sequence[int] = (),
        expected_levels: int | None = None,
    ) -> None:
        self._saved: list[int] = list(values)
        self._working: list[int] = list(values)
        self._milestones = tuple(milestones)
        self._expected_levels = expected_levels
        self._pending_edit = False

    @property
    def values(self) -> list[int]:
        return list(self._working)

    @property
    def has_pending_edit(self) -> bool:
        return self._pending_edit

    def edit_value(self, question_number: int, amount: int) -> None:
        index = self._index(question_number)
        self._working[index] = amount
        self._pending_edit = True

    def discard(self) -> None:
        self._working = list(self._saved)
        self._pending_edit = False

    def receive_remote(self, values: Sequence[int]) -> bool:
        """Apply values written elsewhere. Returns False if skipped for a pending edit."""
        if self._pending_edit:
            logger.debug("Skipping remote prize update; local edit pending")
            return False
        self._saved = list(values)
        self._working = list(values)
        return True

    def errors(self) -> list[str]:
        errors = validate_prize_values(self._working, self._milestones)
        if self._expected_levels is not None and len(self._working) != self._expected_levels:
            errors.append(f"Prize structure must have exactly {self._expected_levels} levels")
        return errors

    def save(self) -> list[int]:
        errors = self.errors()
        if errors:
            raise ValidationError(errors)
        self._saved = list(self._working)
        self._pending_edit = False
        return list(self._saved)

    def _index(self, question_number: int) -> int:
        if not 1 <= question_number <= len(self._working):
            raise IndexError(f"No prize level {question_number} (1-{len(self._working)})")
        return question_number - 1
