"""Tests for play_queue.py.

Verifies:
- the queue is a permutation of the teams
- the assignment is injective and uses only registered sets
- every failing rule is reported
- Fisher-Yates output is uniform over permutations
"""

from collections import Counter
import random

import pytest

from hotseat.core.errors import ValidationError
from hotseat.core.models import PlayQueue, Team
from hotseat.core.play_queue import (
    fisher_yates_shuffle,
    generate_play_queue,
    play_queue_preview,
    validate_can_initialize,
    validate_play_queue,
)


def _teams(count):
    return [Team(id=f"team-{i}", name=f"Team {i}") for i in range(count)]


class TestGenerate:

    def test_permutation_and_bijection(self, make_question_set):
        teams = _teams(6)
        sets = [make_question_set(f"set-{i}") for i in range(8)]
        for seed in range(20):
            queue = generate_play_queue(teams, sets, random.Random(seed))
            assert sorted(queue.order) == sorted(t.id for t in teams)
            assigned = list(queue.assignments.values())
            assert len(set(assigned)) == len(assigned)
            assert set(assigned) <= {s.set_id for s in sets}
            assert set(queue.assignments) == set(queue.order)
            assert validate_play_queue(queue) == []

    def test_insufficient_question_sets(self, make_question_set):
        teams = _teams(7)
        sets = [make_question_set(f"set-{i}") for i in range(5)]
        with pytest.raises(ValidationError) as excinfo:
            generate_play_queue(teams, sets)
        assert any("Insufficient question sets" in e for e in excinfo.value.errors)
        assert "need 7 sets for 7 teams (only 5 available)" in excinfo.value.errors[0]

    def test_reports_every_rule(self):
        errors = validate_can_initialize([], [])
        assert len(errors) == 2

    def test_single_team(self, make_question_set):
        queue = generate_play_queue(_teams(1), [make_question_set("set-0")])
        assert queue.order == ("team-0",)
        assert queue.assignments == {"team-0": "set-0"}


class TestShuffle:

    def test_returns_copy(self):
        items = [1, 2, 3]
        shuffled = fisher_yates_shuffle(items, random.Random(1))
        assert sorted(shuffled) == items
        assert items == [1, 2, 3]

    def test_uniform_over_permutations(self):
        rng = random.Random(99)
        runs = 6000
        counts = Counter(tuple(fisher_yates_shuffle("abc", rng)) for _ in range(runs))
        assert len(counts) == 6
        for count in counts.values():
            assert abs(count / runs - 1 / 6) < 0.03


class TestValidateQueue:

    def test_detects_problems(self):
        queue = PlayQueue(order=("a", "a", "b"), assignments={"a": "s1", "c": "s1"})
        errors = validate_play_queue(queue)
        assert "Play queue contains duplicate teams" in errors
        assert "A question set is assigned to more than one team" in errors
        assert any("missing question set" in e for e in errors)

    def test_empty(self):
        assert "Play queue cannot be empty" in validate_play_queue(PlayQueue(order=(), assignments={}))


class TestPreview:

    def test_rows(self, make_question_set):
        teams = _teams(2)
        teams[0].participants = "Ann, Abe"
        sets = [make_question_set("set-0"), make_question_set("set-1")]
        queue = generate_play_queue(teams, sets, random.Random(5))
        rows = play_queue_preview(queue, {t.id: t for t in teams}, {s.set_id: s for s in sets})
        assert [row.position for row in rows] == [1, 2]
        assert [row.team_id for row in rows] == list(queue.order)
        for row in rows:
            assert row.question_set_id == queue.assignments[row.team_id]
            assert row.question_set_name == f"Set {row.question_set_id}"

    def test_unknown_entries(self):
        queue = PlayQueue(order=("ghost",), assignments={"ghost": "nowhere"})
        row = play_queue_preview(queue, {}, {})[0]
        assert row.team_name == "Unknown Team"
        assert row.question_set_name == "Unknown Set"
