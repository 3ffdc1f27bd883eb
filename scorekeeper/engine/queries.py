"""
Query functions for UI integration.
These functions help the UI understand the match and which actions are available
without mutating match state.
"""

from dataclasses import dataclass
from typing import Any
from scorekeeper.config import NO_PLAYER_PLACEHOLDER
from scorekeeper.engine.state import SetState, LegState, Player
from scorekeeper.engine.actions import (
    Action,
    ADD_TURN,
    REMOVE_LAST_TURN,
    START_NEXT_LEG,
    RESET_SET,
    ACTION_TYPES,
    record_turn,
    undo_last_turn,
    advance_leg,
    reset_match,
)


# Reasons an action can be refused. Refusal never changes state.
NO_CURRENT_LEG = "no_current_leg"
SET_FINISHED = "set_finished"
LEG_FINISHED = "leg_finished"
LEG_NOT_FINISHED = "leg_not_finished"
SCORE_BELOW_ZERO = "score_below_zero"
NO_TURNS = "no_turns"
MAX_LEGS_REACHED = "max_legs_reached"
INVALID_POINTS = "invalid_points"
NO_PLAYERS = "no_players"


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    reason: str | None = None  # One of the reason codes above when invalid
    error: str | None = None  # Human-readable message

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "reason": self.reason, "error": self.error}


_OK = ValidationResult(True)


# ===== Scores =====

def legs_needed_to_win(max_legs: int) -> int:
    """Majority of a best-of-max_legs set."""
    return max_legs // 2 + 1


def get_remaining_score_for_player(leg: LegState, player_id: int) -> int:
    """
    Remaining score for a player, recomputed from the leg's full turn history.
    Never cached, so it stays correct after an undo.
    """
    remaining = leg.starting_score
    for turn in leg.turns:
        if turn.player_id == player_id:
            remaining -= turn.points
    return remaining


def get_remaining_scores(state: SetState) -> dict[int, int]:
    """player_id -> remaining score in the current leg (empty when there is no leg)."""
    leg = state.current_leg
    if leg is None:
        return {}
    return {p.id: get_remaining_score_for_player(leg, p.id) for p in state.players}


# ===== Turn order =====

def get_current_player(state: SetState) -> Player | None:
    """Player who throws next, or None when there is no current leg."""
    leg = state.current_leg
    if leg is None:
        return None
    if 0 <= leg.current_player_index < len(state.players):
        return state.players[leg.current_player_index]
    return None


def get_current_player_name(state: SetState) -> str:
    player = get_current_player(state)
    return player.name if player else NO_PLAYER_PLACEHOLDER


def can_start_next_leg(state: SetState) -> bool:
    """True once the current leg is won and the set is still open."""
    leg = state.current_leg
    if leg is None or not leg.is_finished or state.is_finished:
        return False
    return True


# ===== Action Validation =====

def validate_action(state: SetState, action: Action) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True, or valid=False with a reason code and message.

    Raises:
        ValueError: action.type is not one of ACTION_TYPES
    """
    if action.type == ADD_TURN:
        return _validate_add_turn(state, action)
    if action.type == REMOVE_LAST_TURN:
        return _validate_remove_last_turn(state)
    if action.type == START_NEXT_LEG:
        return _validate_start_next_leg(state)
    if action.type == RESET_SET:
        return _OK
    raise ValueError(f"Unknown action type: {action.type}. Known: {', '.join(ACTION_TYPES)}")


def _validate_add_turn(state: SetState, action: Action) -> ValidationResult:
    leg = state.current_leg
    if leg is None:
        return ValidationResult(False, NO_CURRENT_LEG, "No leg in progress. Start a new set first.")
    if state.is_finished:
        return ValidationResult(False, SET_FINISHED, "Set is over.")
    if leg.is_finished:
        return ValidationResult(False, LEG_FINISHED, f"Leg {leg.leg_number} is already won.")

    player = get_current_player(state)
    if player is None:
        return ValidationResult(False, NO_CURRENT_LEG, "No player is up in this leg.")
    points = action.payload.get("points")
    if isinstance(points, bool) or not isinstance(points, int):
        return ValidationResult(False, INVALID_POINTS, f"Turn points must be a whole number, got {points!r}.")
    remaining = get_remaining_score_for_player(leg, player.id)
    if remaining - points < 0:
        return ValidationResult(
            False,
            SCORE_BELOW_ZERO,
            f"{player.name} has {remaining} left; {points} would go below zero.",
        )
    return _OK


def _validate_remove_last_turn(state: SetState) -> ValidationResult:
    leg = state.current_leg
    if leg is None:
        return ValidationResult(False, NO_CURRENT_LEG, "No leg in progress.")
    if not state.players:
        return ValidationResult(False, NO_PLAYERS, "Set has no players to hand the throw to.")
    if not leg.turns:
        return ValidationResult(False, NO_TURNS, f"Leg {leg.leg_number} has no turns to undo.")
    if leg.is_finished:
        return ValidationResult(
            False, LEG_FINISHED, f"Leg {leg.leg_number} is finished; its checkout cannot be undone.")
    return _OK


def _validate_start_next_leg(state: SetState) -> ValidationResult:
    leg = state.current_leg
    if leg is None:
        return ValidationResult(False, NO_CURRENT_LEG, "No leg in progress.")
    if not leg.is_finished:
        return ValidationResult(False, LEG_NOT_FINISHED, f"Leg {leg.leg_number} is still being played.")
    if state.is_finished:
        return ValidationResult(False, SET_FINISHED, "Set is over.")
    if leg.leg_number + 1 > state.max_legs:
        return ValidationResult(
            False, MAX_LEGS_REACHED, f"All {state.max_legs} legs of this set have been played.")
    return _OK


def get_available_action_types(state: SetState) -> list[str]:
    """Action types that would be accepted right now (a zero-point turn stands in for add_turn)."""
    candidates = [record_turn(0), undo_last_turn(), advance_leg(), reset_match()]
    return [a.type for a in candidates if validate_action(state, a).valid]


# ===== Summary =====

def get_match_summary(state: SetState) -> dict[str, Any]:
    """Everything a scoreboard needs, in one JSON-friendly dict."""
    remaining = get_remaining_scores(state)
    leg = state.current_leg
    current = get_current_player(state)
    winner = state.get_player(state.winner_player_id) if state.winner_player_id is not None else None
    return {
        "players": [
            {
                "id": p.id,
                "name": p.name,
                "legs_won": p.legs_won,
                "remaining": remaining.get(p.id),
            }
            for p in state.players
        ],
        "game_type": state.game_type,
        "max_legs": state.max_legs,
        "legs_needed": legs_needed_to_win(state.max_legs),
        "leg_number": leg.leg_number if leg else None,
        "turn_count": len(leg.turns) if leg else 0,
        "leg_finished": leg.is_finished if leg else False,
        "current_player_id": current.id if current else None,
        "current_player_name": get_current_player_name(state),
        "can_start_next_leg": can_start_next_leg(state),
        "set_finished": state.is_finished,
        "winner_player_id": state.winner_player_id,
        "winner_name": winner.name if winner else None,
    }
