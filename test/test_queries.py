"""Tests for read-only match queries and action validation."""

import pytest

from scorekeeper.engine.actions import Action, record_turn, undo_last_turn, advance_leg, reset_match
from scorekeeper.engine.queries import (
    legs_needed_to_win,
    get_remaining_score_for_player,
    get_remaining_scores,
    get_current_player,
    get_current_player_name,
    can_start_next_leg,
    validate_action,
    get_available_action_types,
    get_match_summary,
    SCORE_BELOW_ZERO,
    INVALID_POINTS,
    NO_PLAYERS,
)
from scorekeeper.engine.reducer import add_turn, reset_set
from scorekeeper.engine.state import LegState, Turn, SetState
from scorekeeper.engine.utils import start_new_set, create_empty_set


def play(state, *points):
    for p in points:
        state, _ = add_turn(state, p)
    return state


@pytest.mark.parametrize("max_legs, needed", [(1, 1), (2, 2), (3, 2), (5, 3), (7, 4)])
def test_legs_needed_to_win(max_legs, needed):
    assert legs_needed_to_win(max_legs) == needed


def test_remaining_score_sums_only_that_player():
    leg = LegState(
        leg_number=1,
        starting_score=501,
        turns=[Turn(1, 1, 100, 401), Turn(2, 2, 60, 441), Turn(3, 1, 45, 356)],
    )
    assert get_remaining_score_for_player(leg, 1) == 356
    assert get_remaining_score_for_player(leg, 2) == 441
    assert get_remaining_score_for_player(leg, 3) == 501


def test_remaining_scores_for_set():
    state = play(start_new_set("Alice", "Bob", 301, 3), 100, 26)
    assert get_remaining_scores(state) == {1: 201, 2: 275}
    assert get_remaining_scores(reset_set(state)) == {}


class TestCurrentPlayer:

    def test_name_follows_rotation(self):
        state = start_new_set("Alice", "Bob", 501, 5)
        assert get_current_player_name(state) == "Alice"
        state = play(state, 60)
        assert get_current_player_name(state) == "Bob"
        assert get_current_player(state).id == 2

    def test_placeholder_without_leg(self):
        assert get_current_player(create_empty_set()) is None
        assert get_current_player_name(create_empty_set()) == "–"

    def test_placeholder_when_index_has_no_player(self):
        state = create_empty_set()
        state.current_leg = LegState(leg_number=1, starting_score=501)
        assert get_current_player_name(state) == "–"


class TestCanStartNextLeg:

    def test_false_without_leg(self):
        assert can_start_next_leg(create_empty_set()) is False

    def test_false_while_leg_in_progress(self):
        assert can_start_next_leg(start_new_set("A", "B", 501, 3)) is False

    def test_true_after_leg_won(self):
        state = play(start_new_set("A", "B", 301, 3), 180, 0, 121)
        assert can_start_next_leg(state) is True

    def test_false_after_set_won(self):
        state = play(start_new_set("A", "B", 301, 1), 180, 0, 121)
        assert can_start_next_leg(state) is False


class TestValidateAction:

    def test_valid_turn(self):
        result = validate_action(start_new_set("A", "B", 501, 3), record_turn(180))
        assert result.valid
        assert result.to_dict() == {"valid": True, "reason": None, "error": None}

    def test_bust(self):
        state = play(start_new_set("A", "B", 301, 3), 180, 0)
        result = validate_action(state, record_turn(122))
        assert result.valid is False
        assert result.reason == SCORE_BELOW_ZERO

    def test_exact_checkout_is_valid(self):
        state = play(start_new_set("A", "B", 301, 3), 180, 0)
        assert validate_action(state, record_turn(121)).valid

    def test_reset_always_valid(self):
        assert validate_action(create_empty_set(), reset_match()).valid

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError, match="double_out"):
            validate_action(create_empty_set(), Action(type="double_out"))

    @pytest.mark.parametrize("payload", [{}, {"points": "60"}, {"points": 60.0}, {"points": None}, {"points": True}])
    def test_turn_without_whole_points(self, payload):
        state = start_new_set("A", "B", 501, 3)
        result = validate_action(state, Action(type="add_turn", payload=payload))
        assert result.valid is False
        assert result.reason == INVALID_POINTS

    def test_undo_with_turns_but_no_players(self):
        state = SetState.from_dict({
            "players": [],
            "current_leg": {
                "leg_number": 1,
                "starting_score": 501,
                "turns": [{"id": 1, "player_id": 1, "points": 60, "running_score": 441}],
            },
        })
        result = validate_action(state, undo_last_turn())
        assert result.valid is False
        assert result.reason == NO_PLAYERS


class TestAvailableActions:

    def test_fresh_leg(self):
        state = start_new_set("A", "B", 501, 3)
        assert get_available_action_types(state) == ["add_turn", "reset_set"]

    def test_mid_leg(self):
        state = play(start_new_set("A", "B", 501, 3), 60)
        assert get_available_action_types(state) == ["add_turn", "remove_last_turn", "reset_set"]

    def test_leg_won(self):
        state = play(start_new_set("A", "B", 301, 3), 180, 0, 121)
        assert get_available_action_types(state) == ["start_next_leg", "reset_set"]

    def test_after_reset(self):
        state = reset_set(start_new_set("A", "B", 301, 3))
        assert get_available_action_types(state) == ["reset_set"]

    def test_queries_do_not_change_state(self):
        state = play(start_new_set("A", "B", 501, 3), 60)
        before = state.to_dict()
        get_available_action_types(state)
        validate_action(state, undo_last_turn())
        validate_action(state, advance_leg())
        assert state.to_dict() == before


def test_match_summary():
    state = play(start_new_set("Alice", "", 301, 3), 180, 0, 121)
    summary = get_match_summary(state)

    assert summary["players"] == [
        {"id": 1, "name": "Alice", "legs_won": 1, "remaining": 0},
        {"id": 2, "name": "Player 2", "legs_won": 0, "remaining": 301},
    ]
    assert summary["legs_needed"] == 2
    assert summary["leg_number"] == 1
    assert summary["turn_count"] == 3
    assert summary["leg_finished"] is True
    assert summary["current_player_name"] == "Alice"
    assert summary["can_start_next_leg"] is True
    assert summary["set_finished"] is False
    assert summary["winner_name"] is None
