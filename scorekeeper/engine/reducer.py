"""
Main match reducer.
Applies actions to state, enforcing the rules and producing new state.
Returns (new_state, events) where events describe what happened.
"""

from dataclasses import dataclass
from scorekeeper.engine.state import SetState, Player, Turn, LegState
from scorekeeper.engine.actions import (
    Action,
    ADD_TURN,
    REMOVE_LAST_TURN,
    START_NEXT_LEG,
    RESET_SET,
    record_turn,
    undo_last_turn,
    advance_leg,
    reset_match,
)
from scorekeeper.engine.queries import (
    validate_action,
    get_remaining_score_for_player,
    legs_needed_to_win,
)
from scorekeeper.engine.utils import create_new_leg
from scorekeeper.engine.events import (
    MatchEvent,
    ACTION_REJECTED,
    LEG_WON,
    action_rejected,
    turn_added,
    turn_removed,
    leg_won,
    set_won,
    leg_started,
    set_reset,
)


@dataclass
class TurnResult:
    """What add_turn did: whether the leg ended, who won it, or why nothing happened."""
    leg_finished: bool = False
    winner: Player | None = None
    reason: str | None = None  # Rejection reason code; None when the turn was recorded

    @property
    def accepted(self) -> bool:
        return self.reason is None


def apply_action(state: SetState, action: Action) -> tuple[SetState, list[MatchEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    The input state is never modified. An action that is not valid right now is
    a silent no-op: the same state object comes back with a single
    action_rejected event carrying the reason.

    Args:
        state: Current set state
        action: Action to apply

    Returns:
        Tuple of (new_state, events) where events describe what happened

    Raises:
        ValueError: action.type is not one of ACTION_TYPES
    """
    validation = validate_action(state, action)
    if not validation.valid:
        return state, [action_rejected(action.type, validation.reason, validation.error)]

    new_state = state.copy()

    if action.type == ADD_TURN:
        events = _handle_add_turn(new_state, action)
    elif action.type == REMOVE_LAST_TURN:
        events = _handle_remove_last_turn(new_state)
    elif action.type == START_NEXT_LEG:
        events = _handle_start_next_leg(new_state)
    else:
        events = _handle_reset_set(new_state)

    return new_state, events


def _handle_add_turn(state: SetState, action: Action) -> list[MatchEvent]:
    """
    Record a validated turn for the player who is up.
    A checkout finishes the leg and leaves current_player_index where it is;
    any other turn passes the throw to the next player.
    """
    leg = state.current_leg
    player = state.players[leg.current_player_index]
    points = action.payload["points"]

    # Always recomputed from the full history
    remaining_after = get_remaining_score_for_player(leg, player.id) - points

    turn = Turn(
        id=leg.next_turn_id(),
        player_id=player.id,
        points=points,
        running_score=remaining_after,
    )
    leg.turns.append(turn)
    events = [turn_added(leg.leg_number, turn.id, player.id, points, remaining_after)]

    if remaining_after == 0:
        leg.is_finished = True
        player.legs_won += 1
        events.append(leg_won(leg.leg_number, player.id, player.legs_won))
        events.extend(update_set_winner(state))
    else:
        leg.current_player_index = (leg.current_player_index + 1) % len(state.players)

    return events


def _handle_remove_last_turn(state: SetState) -> list[MatchEvent]:
    """
    Pop the latest turn, then rebuild the leg as if it had never been thrown:
    running scores replayed from the starting score, IDs renumbered from 1,
    and the throw handed to whoever follows the new last turn.
    """
    leg = state.current_leg
    removed = leg.turns.pop()
    leg.turns = _replay_turns(leg, state.players)

    if not leg.turns:
        leg.current_player_index = 0
    else:
        last_index = state.player_index(leg.turns[-1].player_id)
        leg.current_player_index = (last_index + 1) % len(state.players)

    next_player = state.players[leg.current_player_index]
    return [turn_removed(leg.leg_number, removed.id, removed.player_id, removed.points, next_player.id)]


def _replay_turns(leg: LegState, players: list[Player]) -> list[Turn]:
    """Recompute every running score from the leg's starting score, in original order."""
    remaining = {p.id: leg.starting_score for p in players}
    replayed = []
    for position, turn in enumerate(leg.turns, start=1):
        left = remaining.get(turn.player_id, leg.starting_score) - turn.points
        remaining[turn.player_id] = left
        replayed.append(Turn(id=position, player_id=turn.player_id, points=turn.points, running_score=left))
    return replayed


def _handle_start_next_leg(state: SetState) -> list[MatchEvent]:
    next_number = state.current_leg.leg_number + 1
    state.current_leg = create_new_leg(state, next_number)
    return [leg_started(next_number, state.current_leg.starting_score)]


def _handle_reset_set(state: SetState) -> list[MatchEvent]:
    """Zero the tallies and drop the leg. Players, game type and max legs survive."""
    for player in state.players:
        player.legs_won = 0
    state.is_finished = False
    state.winner_player_id = None
    state.current_leg = None
    return [set_reset(state.max_legs)]


def update_set_winner(state: SetState) -> list[MatchEvent]:
    """
    Declare a set winner once someone holds a majority of legs.
    Players are scanned in seat order and the first qualifying one wins.
    Mutates state in place; only the reducer calls this, on its working copy.
    A winner that is already decided is never replaced.
    """
    if state.is_finished:
        return []
    needed = legs_needed_to_win(state.max_legs)
    for player in state.players:
        if player.legs_won >= needed:
            state.is_finished = True
            state.winner_player_id = player.id
            return [set_won(player.id, player.legs_won, needed)]
    return []


# ===== Direct-call operations =====

def add_turn(state: SetState, points: int) -> tuple[SetState, TurnResult]:
    """
    Record a turn for the player who is up.

    points is trusted to be a non-negative dart total (range checks such as
    0-180 belong to the caller). A turn that would take the thrower below zero
    is refused and nothing changes.

    Returns:
        Tuple of (new_state, TurnResult)
    """
    new_state, events = apply_action(state, record_turn(points))
    for event in events:
        if event.type == ACTION_REJECTED:
            return new_state, TurnResult(reason=event.payload["reason"])
        if event.type == LEG_WON:
            return new_state, TurnResult(
                leg_finished=True,
                winner=new_state.get_player(event.payload["player_id"]),
            )
    return new_state, TurnResult()


def remove_last_turn(state: SetState) -> SetState:
    """Undo the latest turn of an unfinished leg; otherwise returns state unchanged."""
    new_state, _ = apply_action(state, undo_last_turn())
    return new_state


def start_next_leg(state: SetState) -> SetState:
    """Open leg N+1 if the current leg is won, the set is open and max_legs allows it."""
    new_state, _ = apply_action(state, advance_leg())
    return new_state


def reset_set(state: SetState) -> SetState:
    new_state, _ = apply_action(state, reset_match())
    return new_state


def replay_from_actions(
    initial_state: SetState,
    actions: list[Action],
) -> tuple[SetState, list[MatchEvent]]:
    """
    Replay a series of actions from an initial state.
    Event sourcing: state is derived from action log.

    Args:
        initial_state: Starting set state
        actions: List of actions to apply in sequence

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state.copy()
    all_events: list[MatchEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, action)
        all_events.extend(events)

    return current_state, all_events
