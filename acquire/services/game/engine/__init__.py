"""Game engine module - pure functional game logic.

This module provides the core game engine with:
- Action types for explicit user inputs
- Event types for broadcasts
- ProcessResult pattern for error handling
- Modular processing logic

Usage:
    from acquire.services.game.engine import (
        apply_action,
        process_action,
        ProcessResult,
        PlayTileAction,
    )

    # Process an action
    result = process_action(state, PlayTileAction(player="ann", tile={"row": 3, "col": 4}))

    if result.success:
        new_state = result.state
        events = result.events  # Broadcast these
    else:
        # Handle error
        print(f"Error: {result.error_code} - {result.error_message}")

    # Or keep the error on the state itself
    new_state = apply_action(state, action)
"""

# Actions - explicit user inputs
from .actions import (
    AddPlayerAction,
    BreakMergerTieAction,
    BuySharesAction,
    FoundHotelAction,
    GameAction,
    MergerShares,
    PlayTileAction,
    RemovePlayerAction,
    ResolveMergerAction,
    StartGameAction,
    build_action_from_payload,
)

# Errors
from .errors import ErrorCode, GameError, InvalidActionError, ProcessingError

# Events - for broadcasts
from .events import (
    AnyGameEvent,
    BonusPaid,
    GameEnded,
    GameEvent,
    GameStarted,
    HotelExtended,
    HotelFounded,
    MergerStarted,
    MergerTieRaised,
    PlayerJoined,
    SharesPurchased,
    SharesResolved,
    TileDiscarded,
    TilePlaced,
    TurnEnded,
)

# Merger resolution
from .mergers import MergeResult, calculate_shareholder_payouts, merge_hotels

# Player view
from .player_view import get_player_view, orc_count

# Main processing
from .process import apply_action, process_action
from .turns import is_game_over

# Result types
from .validation import ProcessResult, ValidationResult, validate_action

__all__ = [
    # Actions
    "GameAction",
    "AddPlayerAction",
    "RemovePlayerAction",
    "StartGameAction",
    "PlayTileAction",
    "BuySharesAction",
    "FoundHotelAction",
    "MergerShares",
    "ResolveMergerAction",
    "BreakMergerTieAction",
    "build_action_from_payload",
    # Errors
    "ErrorCode",
    "GameError",
    "InvalidActionError",
    "ProcessingError",
    # Events
    "GameEvent",
    "AnyGameEvent",
    "PlayerJoined",
    "GameStarted",
    "TilePlaced",
    "HotelFounded",
    "HotelExtended",
    "MergerTieRaised",
    "MergerStarted",
    "BonusPaid",
    "SharesResolved",
    "SharesPurchased",
    "TileDiscarded",
    "TurnEnded",
    "GameEnded",
    # Mergers
    "MergeResult",
    "merge_hotels",
    "calculate_shareholder_payouts",
    # Processing
    "apply_action",
    "process_action",
    "is_game_over",
    # View
    "get_player_view",
    "orc_count",
    # Validation
    "ProcessResult",
    "ValidationResult",
    "validate_action",
]
