"""Boundary to the persisted-state collaborator.

The engine writes plain dict records keyed by path: ``"game"`` for the
public game record and ``"teams/<id>"`` for each team. A single ``write``
call is applied atomically, and subscribers see each change set exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import copy
import logging
from threading import Lock
from typing import Protocol

logger = logging.getLogger(__name__)

GAME_RECORD = "game"
TEAM_RECORD_PREFIX = "teams/"

Records = dict[str, dict[str, object]]
Listener = Callable[[int, dict[str, dict[str, object] | None]], None]


def team_record_key(team_id: str) -> str:
    return f"{TEAM_RECORD_PREFIX}{team_id}"


class StateStore(Protocol):
    """Operations the engine needs from a durable store."""

    def snapshot(self) -> Records:
        ...

    def write(self, changes: Mapping[str, Mapping[str, object] | None]) -> int:
        ...

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        ...


class InMemoryStateStore:
    """Process-local store used by the server and the tests."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._records: Records = {}
        self._revision = 0
        self._listeners: list[Listener] = []

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    def snapshot(self) -> Records:
        with self._lock:
            return copy.deepcopy(self._records)

    def get(self, key: str) -> dict[str, object] | None:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    def write(self, changes: Mapping[str, Mapping[str, object] | None]) -> int:
        """Merge every field set in ``changes`` as one revision.

        A ``None`` field set deletes the record.
        """
        if not changes:
            return self.revision
        applied: dict[str, dict[str, object] | None] = {}
        with self._lock:
            for key, fields in changes.items():
                if fields is None:
                    self._records.pop(key, None)
                    applied[key] = None
                    continue
                record = self._records.setdefault(key, {})
                record.update(copy.deepcopy(dict(fields)))
                applied[key] = copy.deepcopy(record)
            self._revision += 1
            revision = self._revision
            listeners = list(self._listeners)
        logger.debug("State revision %d: %s", revision, ", ".join(sorted(changes)))
        for listener in listeners:
            listener(revision, copy.deepcopy(applied))
        return revision

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
