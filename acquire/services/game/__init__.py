"""Game service module.

Provides:
- Game initialization (start_game.py)
- Game engine processing (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    GameAction,
    ProcessResult,
    apply_action,
    build_action_from_payload,
    get_player_view,
    process_action,
)
from .start_game import initialize_game, make_tile_rng

__all__ = [
    # Initialization
    "initialize_game",
    "make_tile_rng",
    # Engine
    "GameAction",
    "ProcessResult",
    "apply_action",
    "process_action",
    "get_player_view",
    "build_action_from_payload",
]
