"""Tests for api_server.py: the HTTP adapter and the phone timer ticker."""

from datetime import datetime, timedelta, timezone
import random
import time

from fastapi.testclient import TestClient
import pytest

from hotseat.core.game_manager import GameManager
from hotseat.core.models import GameStatus, LifelineType
from hotseat.server.api_server import create_api_app, start_phone_timer_ticker

START = datetime(2026, 3, 14, 19, 0, 0, tzinfo=timezone.utc)


def _question_set_payload(set_id, count=20, correct="B"):
    return {
        "set_id": set_id,
        "set_name": f"Set {set_id}",
        "questions": [
            {
                "number": n,
                "text": f"Question {n}?",
                "options": {"A": "Alpha", "B": "Bravo", "C": "Charlie", "D": "Delta"},
                "correct_answer": correct.lower(),
            }
            for n in range(1, count + 1)
        ],
    }


@pytest.fixture()
def game_manager():
    return GameManager(rng=random.Random(3))


@pytest.fixture()
def client(game_manager):
    return TestClient(create_api_app(game_manager))


@pytest.fixture()
def live_client(client):
    assert client.post("/teams", json={"name": "Alpha", "participants": "Ann"}).status_code == 201
    assert client.post("/question-sets", json=_question_set_payload("set-one")).status_code == 201
    assert client.post("/game/initialize").status_code == 200
    assert client.post("/game/start").status_code == 200
    return client


def _keys(value):
    if isinstance(value, dict):
        for key, item in value.items():
            yield key
            yield from _keys(item)
    elif isinstance(value, list):
        for item in value:
            yield from _keys(item)


def test_full_turn(live_client):
    assert live_client.post("/question/load").json() == {"question_number": 1}
    live_client.post("/question/show")
    res = live_client.post("/question/select", json={"option": "b"})
    assert res.json() == {"selected_answer": "B"}
    outcome = live_client.post("/question/lock").json()
    assert outcome["kind"] == "correct"
    assert outcome["prize"] == 500

    public = live_client.get("/public").json()
    assert "correctAnswer" not in set(_keys(public))
    assert public["answerResult"] == "correct"
    host = live_client.get("/host").json()
    assert host["hostQuestion"]["correctAnswer"] == "B"


def test_initialize_returns_preview(client):
    client.post("/teams", json={"name": "Alpha"})
    client.post("/question-sets", json=_question_set_payload("set-one"))
    preview = client.post("/game/initialize").json()
    assert preview[0]["position"] == 1
    assert preview[0]["team_name"] == "Alpha"
    assert preview[0]["question_set_id"] == "set-one"


def test_validation_errors_are_422(client):
    res = client.post("/teams", json={"name": "   "})
    assert res.status_code == 422
    assert res.json()["detail"] == ["Team name is required"]

    res = client.post("/question-sets", json=_question_set_payload("set-one", count=3))
    assert res.status_code == 422

    res = client.post("/game/initialize")
    assert res.status_code == 422
    assert len(res.json()["detail"]) == 2


def test_illegal_transitions_are_409(client, live_client):
    assert client.post("/question/lock").status_code == 409
    assert client.post("/lifelines/fiftyFifty").status_code == 409
    assert client.post("/game/start").status_code == 409


def test_invalid_answer_is_422(live_client):
    live_client.post("/question/load")
    live_client.post("/question/show")
    assert live_client.post("/question/select", json={"option": "E"}).status_code == 422


def test_unknown_team_is_404(client):
    assert client.patch("/teams/missing", json={"name": "X"}).status_code == 404


def test_unknown_lifeline_is_rejected(live_client):
    assert live_client.post("/lifelines/askTheAudience").status_code == 422


def test_remove_team(client, game_manager):
    team = client.post("/teams", json={"name": "Alpha"}).json()
    assert client.delete(f"/teams/{team['id']}").status_code == 204
    assert game_manager.get_teams() == []


def test_prize_ladder(client):
    values = [1000 * n for n in range(1, 21)]
    res = client.put("/prize-ladder", json={"values": values})
    assert res.status_code == 200
    assert res.json()["milestones"] == [5, 10, 15, 20]
    assert client.put("/prize-ladder", json={"values": [0] * 20}).status_code == 422


def test_prize_editor(client):
    assert client.post("/prize-editor/save").status_code == 409
    assert client.post("/prize-editor").json()["pendingEdit"] is False
    res = client.put("/prize-editor/levels/1", json={"amount": 700})
    assert res.json()["values"][0] == 700
    assert client.put("/prize-editor/levels/21", json={"amount": 700}).status_code == 422
    assert client.delete("/prize-editor/edits").json()["values"][0] == 500
    client.put("/prize-editor/levels/2", json={"amount": 1200})
    res = client.post("/prize-editor/save")
    assert res.status_code == 200
    assert res.json()["values"][:2] == [500, 1200]


def test_question_sets_frozen_once_started(live_client):
    res = live_client.post("/question-sets", json=_question_set_payload("set-one", correct="D"))
    assert res.status_code == 409


def test_phone_a_friend(live_client):
    live_client.post("/question/load")
    live_client.post("/question/show")
    res = live_client.post("/lifelines/phoneAFriend")
    assert res.json() == {"lifeline": "phoneAFriend", "durationSeconds": 180}
    assert live_client.get("/public").json()["status"] == "paused"

    timer = live_client.post("/phone/start").json()
    assert timer["running"] is True
    assert timer["durationSeconds"] == 180
    assert live_client.get("/public").json()["phoneTimer"]["display"] in {"03:00", "02:59"}

    assert live_client.post("/phone/resume").json() == {"resumed": True, "status": "active"}
    assert live_client.post("/phone/resume").json() == {"resumed": False, "status": "active"}


def test_decision_endpoints(live_client):
    live_client.post("/question/load")
    live_client.post("/question/show")
    live_client.post("/question/select", json={"option": "A"})
    assert live_client.post("/question/lock").json()["kind"] == "decision-pending"
    assert live_client.post("/team/eliminate").json()["status"] == "eliminated"
    res = live_client.post("/team/next").json()
    assert res == {"team": None, "status": "completed"}
    leaderboard = live_client.get("/leaderboard").json()
    assert leaderboard[0]["teamName"] == "Alpha"
    assert live_client.post("/game/uninitialize").json() == {"status": "not-started"}


def test_ticker_resumes_expired_call(make_question_set):
    now = {"value": START}
    manager = GameManager(rng=random.Random(1), clock=lambda: now["value"])
    manager.add_team("Alpha")
    manager.add_question_set(make_question_set("set-one"))
    manager.initialize_game()
    manager.start_event()
    manager.load_question()
    manager.show_question()
    manager.activate_lifeline(LifelineType.PHONE_A_FRIEND)
    manager.start_phone_timer()
    now["value"] = START + timedelta(seconds=200)

    thread, stop = start_phone_timer_ticker(manager, interval=0.01)
    try:
        deadline = time.monotonic() + 5
        while manager.get_status() is not GameStatus.ACTIVE and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        stop.set()
        thread.join(timeout=1)
    assert manager.get_status() is GameStatus.ACTIVE
