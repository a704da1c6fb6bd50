import random

import pytest

from hotseat.constants.game_constants import QUESTIONS_PER_SET
from hotseat.core.game_manager import GameManager
from hotseat.core.models import Question, QuestionSet
from hotseat.core.services.state_store import InMemoryStateStore

CORRECT = "B"
WRONG = "A"


def build_question(set_id, number, correct=CORRECT):
    return Question(
        id=f"{set_id}-q{number}",
        number=number,
        text=f"Question {number} of {set_id}?",
        options={"A": "Alpha", "B": "Bravo", "C": "Charlie", "D": "Delta"},
        correct_answer=correct,
    )


def build_question_set(set_id, count=QUESTIONS_PER_SET, correct=CORRECT):
    questions = tuple(build_question(set_id, n, correct) for n in range(1, count + 1))
    return QuestionSet(set_id=set_id, set_name=f"Set {set_id}", questions=questions)


@pytest.fixture()
def make_question():
    return build_question


@pytest.fixture()
def make_question_set():
    return build_question_set


@pytest.fixture()
def store():
    return InMemoryStateStore()


@pytest.fixture()
def manager(store):
    return GameManager(store=store, rng=random.Random(7))


@pytest.fixture()
def started_manager(manager):
    """One team, one set, event started; the team is on question 1."""
    manager.add_team("Alpha", "Ann, Abe")
    manager.add_question_set(build_question_set("set-one"))
    manager.initialize_game()
    manager.start_event()
    return manager


@pytest.fixture()
def two_team_manager(manager):
    manager.add_team("Alpha")
    manager.add_team("Bravo")
    manager.add_question_set(build_question_set("set-one"))
    manager.add_question_set(build_question_set("set-two"))
    manager.initialize_game()
    manager.start_event()
    return manager
