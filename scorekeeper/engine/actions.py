"""
Action definitions for a match.
Actions are immutable, deterministic instructions.
Nobody names the acting player: turn order is decided by the state.
"""

from dataclasses import dataclass, field


# Action types understood by the reducer
ADD_TURN = "add_turn"
REMOVE_LAST_TURN = "remove_last_turn"
START_NEXT_LEG = "start_next_leg"
RESET_SET = "reset_set"

ACTION_TYPES = (ADD_TURN, REMOVE_LAST_TURN, START_NEXT_LEG, RESET_SET)


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type and payload."""
    type: str  # one of ACTION_TYPES
    payload: dict = field(default_factory=dict)  # Action-specific data

    def to_dict(self) -> dict:
        return {"type": self.type, "payload": dict(self.payload)}


def record_turn(points: int) -> Action:
    """
    Record a turn for whoever is up in the current leg.
    points is the total thrown with three darts. It is trusted to be a
    non-negative dart total; the reducer only refuses a turn that would take
    the thrower's remaining score below zero.

    Example: record_turn(140)
    """
    return Action(type=ADD_TURN, payload={"points": points})


def undo_last_turn() -> Action:
    """
    Remove the most recent turn of the current leg and recompute the rest.
    Not allowed once the leg is finished.
    """
    return Action(type=REMOVE_LAST_TURN)


def advance_leg() -> Action:
    """Start the next leg after the current one has been won."""
    return Action(type=START_NEXT_LEG)


def reset_match() -> Action:
    """Zero the leg tallies and drop the current leg, keeping players and settings."""
    return Action(type=RESET_SET)
