"""
Match events for UI hooks and logging.
Events describe what happened during action processing.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class MatchEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Set/leg lifecycle events
SET_STARTED = "set_started"
LEG_STARTED = "leg_started"
SET_RESET = "set_reset"

# Turn events
TURN_ADDED = "turn_added"
TURN_REMOVED = "turn_removed"

# Outcome events
LEG_WON = "leg_won"
SET_WON = "set_won"

# Nothing happened, and why
ACTION_REJECTED = "action_rejected"


# ===== Event Factory Functions =====

def set_started(players: list[dict[str, Any]], game_type: int, max_legs: int) -> MatchEvent:
    return MatchEvent(SET_STARTED, {
        "players": players,
        "game_type": game_type,
        "max_legs": max_legs,
    })


def leg_started(leg_number: int, starting_score: int) -> MatchEvent:
    return MatchEvent(LEG_STARTED, {
        "leg_number": leg_number,
        "starting_score": starting_score,
    })


def set_reset(max_legs: int) -> MatchEvent:
    return MatchEvent(SET_RESET, {"max_legs": max_legs})


def turn_added(
    leg_number: int,
    turn_id: int,
    player_id: int,
    points: int,
    running_score: int,
) -> MatchEvent:
    return MatchEvent(TURN_ADDED, {
        "leg_number": leg_number,
        "turn_id": turn_id,
        "player_id": player_id,
        "points": points,
        "running_score": running_score,
    })


def turn_removed(
    leg_number: int,
    turn_id: int,
    player_id: int,
    points: int,
    next_player_id: int,
) -> MatchEvent:
    """Emitted on undo. next_player_id is whoever throws after the rewind."""
    return MatchEvent(TURN_REMOVED, {
        "leg_number": leg_number,
        "turn_id": turn_id,
        "player_id": player_id,
        "points": points,
        "next_player_id": next_player_id,
    })


def leg_won(leg_number: int, player_id: int, legs_won: int) -> MatchEvent:
    return MatchEvent(LEG_WON, {
        "leg_number": leg_number,
        "player_id": player_id,
        "legs_won": legs_won,  # Winner's tally including this leg
    })


def set_won(player_id: int, legs_won: int, legs_needed: int) -> MatchEvent:
    return MatchEvent(SET_WON, {
        "player_id": player_id,
        "legs_won": legs_won,
        "legs_needed": legs_needed,
    })


def action_rejected(action_type: str, reason: str, message: str) -> MatchEvent:
    """Emitted instead of any state change when an action is not valid right now."""
    return MatchEvent(ACTION_REJECTED, {
        "action_type": action_type,
        "reason": reason,
        "message": message,
    })
