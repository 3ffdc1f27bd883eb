"""
Match state representation.
Transitions never mutate a state they are given; the reducer works on copies.
Includes JSON serialization so the API can hand state to the UI.
"""

import json
from dataclasses import dataclass, field
from copy import deepcopy
from typing import Any


def _int(value: Any, default: int) -> int:
    """Coerce to int; fall back to default on None or junk."""
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


@dataclass
class Player:
    """One of the two players in a set."""
    id: int
    name: str
    legs_won: int = 0  # Legs won in the current set

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "legs_won": self.legs_won}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=_int(data.get("id"), 0),
            name=str(data.get("name") or ""),
            legs_won=max(0, _int(data.get("legs_won"), 0)),
        )


@dataclass(frozen=True)
class Turn:
    """A recorded turn. Immutable once created."""
    id: int  # 1-based position within the leg
    player_id: int
    points: int
    running_score: int  # Thrower's remaining score right after this turn

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "points": self.points,
            "running_score": self.running_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Turn":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=_int(data.get("id"), 0),
            player_id=_int(data.get("player_id"), 0),
            points=_int(data.get("points"), 0),
            running_score=_int(data.get("running_score"), 0),
        )


@dataclass
class LegState:
    """One leg: a countdown from starting_score to exactly zero."""
    leg_number: int  # 1-based
    starting_score: int  # 301 or 501, copied from the set's game type
    turns: list[Turn] = field(default_factory=list)  # Play history, oldest first
    is_finished: bool = False
    # Index into SetState.players of whoever throws next
    current_player_index: int = 0

    def next_turn_id(self) -> int:
        """Turn IDs are positional, so they restart at 1 for every leg."""
        return len(self.turns) + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "leg_number": self.leg_number,
            "starting_score": self.starting_score,
            "turns": [t.to_dict() for t in self.turns],
            "is_finished": self.is_finished,
            "current_player_index": self.current_player_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LegState":
        if not isinstance(data, dict):
            data = {}
        turns = data.get("turns")
        if not isinstance(turns, list):
            turns = []
        return cls(
            leg_number=_int(data.get("leg_number"), 1),
            starting_score=_int(data.get("starting_score"), 501),
            turns=[Turn.from_dict(t) for t in turns if isinstance(t, dict)],
            is_finished=bool(data.get("is_finished", False)),
            current_player_index=_int(data.get("current_player_index"), 0),
        )


@dataclass
class SetState:
    """Complete match state. The aggregate root every operation works on."""
    players: list[Player] = field(default_factory=list)  # Seat order is fixed
    game_type: int = 501  # Starting score for every leg
    max_legs: int = 5  # Best-of; odd values avoid ties but this is not enforced
    current_leg: LegState | None = None  # None before a match starts or after a reset
    is_finished: bool = False
    # Set once, when a player reaches the majority of legs; cleared only by reset
    winner_player_id: int | None = None

    def copy(self) -> "SetState":
        """Return a deep copy of this set state."""
        return deepcopy(self)

    def get_player(self, player_id: int) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: int) -> int:
        """Seat index of a player, or -1 if unknown."""
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return -1

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert SetState to a dictionary for JSON serialization."""
        return {
            "players": [p.to_dict() for p in self.players],
            "game_type": self.game_type,
            "max_legs": self.max_legs,
            "current_leg": self.current_leg.to_dict() if self.current_leg else None,
            "is_finished": self.is_finished,
            "winner_player_id": self.winner_player_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SetState":
        """Create SetState from a dictionary (handles missing/None fields)."""
        if not isinstance(data, dict):
            data = {}
        players = data.get("players")
        if not isinstance(players, list):
            players = []
        winner = data.get("winner_player_id")
        return cls(
            players=[Player.from_dict(p) for p in players if isinstance(p, dict)],
            game_type=_int(data.get("game_type"), 501),
            max_legs=_int(data.get("max_legs"), 5),
            current_leg=LegState.from_dict(data["current_leg"])
            if isinstance(data.get("current_leg"), dict) else None,
            is_finished=bool(data.get("is_finished", False)),
            winner_player_id=_int(winner, 0) if winner is not None else None,
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize SetState to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "SetState":
        """Deserialize SetState from a JSON string."""
        return cls.from_dict(json.loads(json_str))
