"""
Darts Match State Engine
Two-player 301/501 scoring: sets, legs and turns, without web framework or UI
"""

# Names for players left blank, indexed by seat
DEFAULT_PLAYER_NAMES = ("Player 1", "Player 2")
