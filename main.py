"""
Main entry point for the Darts Match State Engine.
Demonstrates core functionality with a scripted 501, best-of-5 set.
"""

from scorekeeper.engine.actions import record_turn, undo_last_turn, advance_leg
from scorekeeper.engine.reducer import apply_action, add_turn, start_next_leg
from scorekeeper.engine.queries import get_current_player_name, can_start_next_leg
from scorekeeper.engine.utils import start_new_set, print_set_state


def main():
    print("Darts Match State Engine - 501, best of 5")
    print("=" * 60)

    state = start_new_set("Alice", "Bob", 501, 5)

    print("\n[INITIAL STATE]")
    print_set_state(state)

    # ===== SCENARIO 1: Turns rotate, the leg is won on a checkout =====
    print("\n[SCENARIO 1: Alice checks out in four visits]")
    for alice, bob in [(140, 60), (140, 45), (140, 100)]:
        state, _ = add_turn(state, alice)
        state, _ = add_turn(state, bob)
    state, result = add_turn(state, 81)
    print(f"✓ Leg finished: {result.leg_finished}, winner: {result.winner.name}")
    print_set_state(state, verbose=True)

    # ===== SCENARIO 2: A throw below zero is refused =====
    print("\n[SCENARIO 2: Bust is refused]")
    state = start_next_leg(state)
    for points in (180, 180, 100, 140, 81, 100):
        state, _ = add_turn(state, points)
    print(f"{get_current_player_name(state)} is up needing 140... throws 180")
    state, events = apply_action(state, record_turn(180))
    print(f"  Events: {[(e.type, e.payload.get('reason')) for e in events]}")

    # ===== SCENARIO 3: Undo =====
    print("\n[SCENARIO 3: Undo the last visit]")
    print(f"Before undo, up next: {get_current_player_name(state)}")
    state, events = apply_action(state, undo_last_turn())
    print(f"  Events: {[e.type for e in events]}")
    print(f"After undo, up next: {get_current_player_name(state)}")
    print_set_state(state, verbose=True)

    # ===== SCENARIO 4: Play out the set =====
    print("\n[SCENARIO 4: Alice takes the next legs]")
    state, _ = add_turn(state, 81)   # Bob 181 -> 100
    state, _ = add_turn(state, 140)  # Alice 140 -> 0
    while not state.is_finished:
        if can_start_next_leg(state):
            state, _ = apply_action(state, advance_leg())
        # Alice: 180, 180, 141; Bob sits on 0-point visits
        for points in (180, 0, 180, 0, 141):
            state, _ = add_turn(state, points)
    print_set_state(state)

    print("=" * 60)
    print("✓ Demonstrated: rotation, checkout, rejection, undo, set win")
    print("=" * 60)


if __name__ == "__main__":
    main()
