"""FastAPI server exposing the host console actions and the two game views."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
import logging
from threading import Event, Thread

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
import uvicorn

from hotseat.constants.game_constants import PHONE_TIMER_TICK_SECONDS
from hotseat.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from hotseat.core.errors import (
    IllegalStateTransition,
    InvalidAnswerOption,
    InvalidQuestionData,
    LifelineUnavailable,
    ValidationError,
)
from hotseat.core.game_manager import GameManager
from hotseat.core.models import LifelineType, Question, QuestionSet, Team

logger = logging.getLogger(__name__)


class TeamPayload(BaseModel):
    """Payload schema for registering a team."""

    name: str
    participants: str = ""
    contact: str = ""


class TeamUpdatePayload(BaseModel):
    name: str | None = None
    participants: str | None = None
    contact: str | None = None


class QuestionPayload(BaseModel):
    number: int
    text: str
    options: dict[str, str]
    correct_answer: str
    id: str | None = None


class QuestionSetPayload(BaseModel):
    """Payload schema for a complete question set."""

    set_id: str
    set_name: str
    questions: list[QuestionPayload]


class AnswerPayload(BaseModel):
    option: str


class PrizeLadderPayload(BaseModel):
    values: list[int]


class PrizeLevelPayload(BaseModel):
    amount: int


def _question_set_from_payload(payload: QuestionSetPayload) -> QuestionSet:
    questions = tuple(
        Question(
            id=q.id or f"{payload.set_id}-q{q.number}",
            number=q.number,
            text=q.text,
            options=dict(q.options),
            correct_answer=q.correct_answer.strip().upper(),
        )
        for q in payload.questions
    )
    return QuestionSet(set_id=payload.set_id, set_name=payload.set_name, questions=questions)


def _team_response(team: Team | None) -> dict[str, object] | None:
    return team.to_record() if team else None


@contextmanager
def _http_errors() -> Iterator[None]:
    """Translate engine errors into HTTP responses."""
    try:
        yield
    except (ValidationError, InvalidQuestionData) as exc:
        raise HTTPException(status_code=422, detail=exc.errors) from exc
    except (InvalidAnswerOption, IndexError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (IllegalStateTransition, LifelineUnavailable) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except KeyError as exc:
        detail = exc.args[0] if exc.args else "Not found"
        raise HTTPException(status_code=404, detail=detail) from exc


def _get_game_manager_dependency(game_manager: GameManager):
    def dependency() -> GameManager:
        return game_manager

    return dependency


def create_api_app(game_manager: GameManager) -> FastAPI:
    """Create a FastAPI application wired to the provided game manager."""
    app = FastAPI(title="HotSeat API", version="0.1.0")
    manager_dep = _get_game_manager_dependency(game_manager)

    # --- views ---

    @app.get("/host")
    def get_host_view(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        return manager.host_view()

    @app.get("/public")
    def get_public_view(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        return manager.public_view()

    @app.get("/leaderboard")
    def get_leaderboard(manager: GameManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [row.to_dict() for row in manager.leaderboard()]

    # --- setup ---

    @app.post("/teams", status_code=201)
    def add_team(payload: TeamPayload, manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            team = manager.add_team(payload.name, payload.participants, payload.contact)
        return team.to_record()

    @app.patch("/teams/{team_id}")
    def update_team(
        team_id: str,
        payload: TeamUpdatePayload,
        manager: GameManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _http_errors():
            team = manager.update_team(
                team_id,
                name=payload.name,
                participants=payload.participants,
                contact=payload.contact,
            )
        return team.to_record()

    @app.delete("/teams/{team_id}", status_code=204)
    def remove_team(team_id: str, manager: GameManager = Depends(manager_dep)) -> None:
        with _http_errors():
            manager.remove_team(team_id)

    @app.post("/question-sets", status_code=201)
    def add_question_set(
        payload: QuestionSetPayload,
        manager: GameManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _http_errors():
            manager.add_question_set(_question_set_from_payload(payload))
        return {"set_id": payload.set_id, "question_count": len(payload.questions)}

    @app.put("/prize-ladder")
    def set_prize_ladder(
        payload: PrizeLadderPayload,
        manager: GameManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _http_errors():
            ladder = manager.set_prize_ladder(payload.values)
        return {"values": list(ladder.values), "milestones": list(ladder.milestones)}

    @app.post("/prize-editor")
    def open_prize_editor(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        editor = manager.open_prize_editor()
        return {"values": editor.values, "pendingEdit": editor.has_pending_edit}

    @app.put("/prize-editor/levels/{question_number}")
    def edit_prize_level(
        question_number: int,
        payload: PrizeLevelPayload,
        manager: GameManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _http_errors():
            values = manager.edit_prize_level(question_number, payload.amount)
        return {"values": values, "pendingEdit": True}

    @app.delete("/prize-editor/edits")
    def discard_prize_edits(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            values = manager.discard_prize_edits()
        return {"values": values, "pendingEdit": False}

    @app.post("/prize-editor/save")
    def save_prize_editor(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            ladder = manager.save_prize_editor()
        return {"values": list(ladder.values), "milestones": list(ladder.milestones)}

    # --- game lifecycle ---

    @app.post("/game/initialize")
    def initialize_game(manager: GameManager = Depends(manager_dep)) -> list[dict[str, object]]:
        with _http_errors():
            preview = manager.initialize_game()
        return [asdict(entry) for entry in preview]

    @app.post("/game/reinitialize")
    def reinitialize_game(manager: GameManager = Depends(manager_dep)) -> list[dict[str, object]]:
        with _http_errors():
            preview = manager.reinitialize_game()
        return [asdict(entry) for entry in preview]

    @app.post("/game/start")
    def start_event(manager: GameManager = Depends(manager_dep)) -> dict[str, object] | None:
        with _http_errors():
            team = manager.start_event()
        return _team_response(team)

    @app.post("/game/pause")
    def pause_game(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.pause_game()
        return {"status": manager.get_status().value}

    @app.post("/game/resume")
    def resume_game(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.resume_game()
        return {"status": manager.get_status().value}

    @app.post("/game/uninitialize")
    def uninitialize_game(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.uninitialize_game()
        return {"status": manager.get_status().value}

    # --- question flow ---

    @app.post("/question/load")
    def load_question(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            number = manager.load_question()
        return {"question_number": number}

    @app.post("/question/show")
    def show_question(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.show_question()
        return manager.public_view()

    @app.post("/question/hide")
    def hide_question(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.hide_question()
        return manager.public_view()

    @app.post("/question/select")
    def select_answer(payload: AnswerPayload, manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            letter = manager.select_answer(payload.option)
        return {"selected_answer": letter}

    @app.post("/question/lock")
    def lock_answer(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            outcome = manager.lock_answer()
        return outcome.to_dict()

    @app.post("/question/skip")
    def skip_question(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.skip_question()
        return manager.public_view()

    # --- turn decisions ---

    @app.post("/team/offer-lifeline")
    def offer_lifeline(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            manager.offer_lifeline()
        return manager.public_view()

    @app.post("/team/eliminate")
    def eliminate_team(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            team = manager.eliminate_team()
        return team.to_record()

    @app.post("/team/next")
    def advance_to_next_team(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            team = manager.advance_to_next_team()
        return {"team": _team_response(team), "status": manager.get_status().value}

    # --- lifelines ---

    @app.post("/lifelines/{lifeline}")
    def activate_lifeline(
        lifeline: LifelineType,
        manager: GameManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _http_errors():
            return manager.activate_lifeline(lifeline)

    @app.post("/phone/start")
    def start_phone_timer(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            timer = manager.start_phone_timer()
        return timer.to_record()

    @app.post("/phone/resume")
    def resume_from_phone_a_friend(manager: GameManager = Depends(manager_dep)) -> dict[str, object]:
        resumed = manager.resume_from_phone_a_friend()
        return {"resumed": resumed, "status": manager.get_status().value}

    return app


def start_phone_timer_ticker(
    game_manager: GameManager,
    interval: float = PHONE_TIMER_TICK_SECONDS,
    stop_event: Event | None = None,
) -> tuple[Thread, Event]:
    """Poll the Phone-a-Friend timer in a daemon thread and resume on expiry."""
    stop = stop_event or Event()

    def tick() -> None:
        while not stop.wait(interval):
            if game_manager.check_phone_timer():
                logger.info("Phone-a-Friend timer expired; game resumed")

    thread = Thread(target=tick, name="PhoneTimerTicker", daemon=True)
    thread.start()
    return thread, stop


def start_api_server(
    game_manager: GameManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(game_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="HotSeatApiServer", daemon=True)
    thread.start()
    return thread
