"""
FastAPI backend for the darts scorekeeper.
Provides REST API endpoints for match state management and actions.
Matches live in memory only; restarting the process forgets them.
"""

import threading
import traceback
import uuid
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from scorekeeper.config import (
    CORS_ORIGINS,
    DEFAULT_GAME_TYPE,
    DEFAULT_MAX_LEGS,
    MAX_TURN_POINTS,
)
from scorekeeper.engine.state import SetState
from scorekeeper.engine.actions import (
    Action,
    record_turn,
    undo_last_turn,
    advance_leg,
    reset_match,
)
from scorekeeper.engine.reducer import apply_action
from scorekeeper.engine.queries import (
    validate_action,
    get_available_action_types,
    get_match_summary,
)
from scorekeeper.engine.utils import start_new_set, rematch, opening_events

API_VERSION = "1.0.0"

app = FastAPI(
    title="Darts Scorekeeper API",
    description="Backend API for scoring two-player 301/501 darts sets",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Print one line per refused or failed request; successful calls stay quiet."""
    try:
        response = await call_next(request)
    except Exception:
        print(f"[scorekeeper] {request.method} {request.url.path} raised", flush=True)
        raise
    if response.status_code >= 400:
        print(f"[scorekeeper] {request.method} {request.url.path} -> {response.status_code}", flush=True)
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """
    Turn an engine crash into a JSON 500 the scoreboard can show.
    This response is built outside CORSMiddleware, so the allow-origin header is set by hand.
    """
    traceback.print_exception(type(exc), exc, exc.__traceback__)
    origin = request.headers.get("origin")
    headers = {}
    if origin in CORS_ORIGINS:
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
        }
    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Scoring failed on {request.method} {request.url.path}",
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        headers=headers,
    )


# match_id -> current state. Entries are replaced, never mutated.
matches: dict[str, SetState] = {}
# Held from reading a match to storing its successor so concurrent writes cannot drop a turn
_matches_lock = threading.Lock()


# ===== Pydantic Models =====

class CreateMatchRequest(BaseModel):
    player1_name: str = ""
    player2_name: str = ""
    game_type: Literal[301, 501] = DEFAULT_GAME_TYPE
    max_legs: int = Field(DEFAULT_MAX_LEGS, ge=1)


class TurnRequest(BaseModel):
    # Dart range is checked here; the engine does not check it
    points: int = Field(..., ge=0, le=MAX_TURN_POINTS)


# ===== Helper Functions =====

def get_match(match_id: str) -> SetState:
    """Get match state; raise 404 if not found."""
    state = matches.get(match_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Match {match_id} not found")
    return state


def save_match(match_id: str, state: SetState) -> None:
    matches[match_id] = state


def state_for_response(state: SetState) -> dict[str, Any]:
    """State dict plus the computed scoreboard summary for the UI."""
    return {"state": state.to_dict(), "summary": get_match_summary(state)}


def _run_action(match_id: str, action: Action) -> dict[str, Any]:
    """Validate, apply and store an action. Invalid actions are a 400 carrying the reason code."""
    with _matches_lock:
        state = get_match(match_id)
        validation = validate_action(state, action)
        if not validation.valid:
            raise HTTPException(
                status_code=400,
                detail={"reason": validation.reason, "message": validation.error},
            )
        new_state, events = apply_action(state, action)
        save_match(match_id, new_state)
    return {
        **state_for_response(new_state),
        "events": [e.to_dict() for e in events],
    }


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Darts Scorekeeper API", "version": API_VERSION}


@app.post("/matches")
def create_match(request: CreateMatchRequest):
    """Start a new set. Blank names become Player 1 / Player 2."""
    state = start_new_set(
        request.player1_name,
        request.player2_name,
        request.game_type,
        request.max_legs,
    )
    match_id = str(uuid.uuid4())
    with _matches_lock:
        save_match(match_id, state)
    return {
        "match_id": match_id,
        **state_for_response(state),
        "events": [e.to_dict() for e in opening_events(state)],
    }


@app.get("/matches")
def list_matches():
    return {
        "matches": [
            {"match_id": match_id, "summary": get_match_summary(state)}
            for match_id, state in list(matches.items())
        ]
    }


@app.get("/matches/{match_id}")
def get_match_state(match_id: str):
    return state_for_response(get_match(match_id))


@app.delete("/matches/{match_id}")
def delete_match(match_id: str):
    with _matches_lock:
        get_match(match_id)
        del matches[match_id]
    return {"deleted": match_id}


@app.get("/matches/{match_id}/available-actions")
def get_available_actions(match_id: str):
    """Action types the current state would accept."""
    state = get_match(match_id)
    return {"action_types": get_available_action_types(state)}


@app.post("/matches/{match_id}/turns")
def do_add_turn(match_id: str, request: TurnRequest):
    """Score a turn for whoever is up."""
    return _run_action(match_id, record_turn(request.points))


@app.post("/matches/{match_id}/undo")
def do_undo(match_id: str):
    """Remove the latest turn of the current (unfinished) leg."""
    return _run_action(match_id, undo_last_turn())


@app.post("/matches/{match_id}/next-leg")
def do_next_leg(match_id: str):
    return _run_action(match_id, advance_leg())


@app.post("/matches/{match_id}/reset")
def do_reset(match_id: str):
    """Zero leg tallies and clear the current leg; players and settings stay."""
    return _run_action(match_id, reset_match())


@app.post("/matches/{match_id}/rematch")
def do_rematch(match_id: str):
    """Start over at leg 1 with the same players and settings."""
    with _matches_lock:
        state = rematch(get_match(match_id))
        save_match(match_id, state)
    return {
        **state_for_response(state),
        "events": [e.to_dict() for e in opening_events(state)],
    }
