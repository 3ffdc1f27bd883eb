"""
Single place for default match/setup configuration.
Change DEFAULT_GAME_TYPE / DEFAULT_MAX_LEGS to switch what a new set uses when nothing is provided.
"""

import os

# Starting scores a leg can be played from
GAME_TYPES = (301, 501)

DEFAULT_GAME_TYPE = 501
DEFAULT_MAX_LEGS = 5

# Highest total three darts can score; enforced by the API, not the engine
MAX_TURN_POINTS = 180

# Shown instead of a player name when there is no current leg
NO_PLAYER_PLACEHOLDER = "–"

# Comma-separated list, e.g. "http://localhost:5173,https://darts.example.com"
_raw_origins = os.environ.get("SCOREKEEPER_CORS_ORIGINS")
if _raw_origins:
    CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]
else:
    CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"]
