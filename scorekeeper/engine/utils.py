"""
Set construction and console helpers.
"""

from scorekeeper.config import GAME_TYPES, DEFAULT_GAME_TYPE, DEFAULT_MAX_LEGS
from scorekeeper.engine import DEFAULT_PLAYER_NAMES
from scorekeeper.engine.state import SetState, LegState, Player
from scorekeeper.engine.events import MatchEvent, set_started, leg_started
from scorekeeper.engine.queries import (
    get_remaining_scores,
    get_current_player_name,
    legs_needed_to_win,
)


def create_empty_set() -> SetState:
    """A blank set with default settings, before any players are added."""
    return SetState(
        players=[],
        game_type=DEFAULT_GAME_TYPE,
        max_legs=DEFAULT_MAX_LEGS,
        current_leg=None,
        is_finished=False,
        winner_player_id=None,
    )


def normalize_player_name(name: str | None, seat: int) -> str:
    """Trim a name; blank names become "Player 1" / "Player 2" by seat."""
    cleaned = (name or "").strip()
    return cleaned or DEFAULT_PLAYER_NAMES[seat]


def create_new_leg(state: SetState, leg_number: int) -> LegState:
    """
    Create a fresh leg for the set: empty history, first player up.
    Turn IDs are positional, so they start again at 1.
    """
    return LegState(
        leg_number=leg_number,
        starting_score=state.game_type,
        turns=[],
        is_finished=False,
        current_player_index=0,
    )


def start_new_set(
    player1_name: str,
    player2_name: str,
    game_type: int = DEFAULT_GAME_TYPE,
    max_legs: int = DEFAULT_MAX_LEGS,
) -> SetState:
    """
    Start a new set: build both players, apply the rules and open leg 1.
    Always returns a brand-new state; nothing from an earlier set is reused.

    Raises:
        ValueError: game_type is not 301/501 or max_legs is not a positive integer
    """
    if game_type not in GAME_TYPES:
        raise ValueError(
            f"Unsupported game type {game_type}. Allowed: {', '.join(str(g) for g in GAME_TYPES)}")
    if isinstance(max_legs, bool) or not isinstance(max_legs, int) or max_legs < 1:
        raise ValueError(f"max_legs must be a positive integer, got {max_legs!r}")

    players = [
        Player(id=1, name=normalize_player_name(player1_name, 0), legs_won=0),
        Player(id=2, name=normalize_player_name(player2_name, 1), legs_won=0),
    ]
    state = SetState(
        players=players,
        game_type=game_type,
        max_legs=max_legs,
        current_leg=None,
        is_finished=False,
        winner_player_id=None,
    )
    state.current_leg = create_new_leg(state, 1)
    return state


def rematch(state: SetState) -> SetState:
    """New set with the same names, game type and leg count."""
    names = [p.name for p in state.players] + ["", ""]
    return start_new_set(names[0], names[1], state.game_type, state.max_legs)


def opening_events(state: SetState) -> list[MatchEvent]:
    """Events describing a freshly started set, for callers that log or broadcast them."""
    events = [set_started([p.to_dict() for p in state.players], state.game_type, state.max_legs)]
    if state.current_leg is not None:
        events.append(leg_started(state.current_leg.leg_number, state.current_leg.starting_score))
    return events


def print_set_state(state: SetState, verbose: bool = False):
    """
    Pretty-print the current set state.

    Args:
        state: Current set state
        verbose: If True, also list every turn of the current leg
    """
    leg = state.current_leg
    print(f"\n{'='*60}")
    leg_str = f"Leg {leg.leg_number}/{state.max_legs}" if leg else "No leg"
    print(f"{state.game_type} | {leg_str} | First to {legs_needed_to_win(state.max_legs)} legs")
    print(f"{'='*60}")

    remaining = get_remaining_scores(state)
    for player in state.players:
        left = remaining.get(player.id, "-")
        print(f"  {player.name:<20} legs: {player.legs_won}  remaining: {left}")

    if leg and verbose:
        print(f"\n{'Turns':.<40}")
        for turn in leg.turns:
            player = state.get_player(turn.player_id)
            name = player.name if player else f"#{turn.player_id}"
            print(f"  {turn.id:>3}. {name}: {turn.points} -> {turn.running_score}")

    if state.is_finished:
        winner = state.get_player(state.winner_player_id)
        print(f"\n  *** SET OVER - {winner.name if winner else '?'} WINS ***")
    elif leg and leg.is_finished:
        print("\n  Leg finished.")
    else:
        print(f"\n  Up next: {get_current_player_name(state)}")
    print()
