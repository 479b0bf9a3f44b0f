"""Validation layer for game actions and ProcessResult pattern.

Separates validation from processing logic:
- validate_action() checks if an action is valid given current state
- ProcessResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import (
    MAX_PLAYER_NAME_LENGTH,
    MAX_PLAYERS,
    MAX_SHARES_PER_TURN,
    MINIMUM_PLAYERS,
    RESERVED_NAMES,
    GamePhase,
    GameState,
    Player,
)

from .actions import (
    AddPlayerAction,
    BreakMergerTieAction,
    BuySharesAction,
    FoundHotelAction,
    GameAction,
    PlayTileAction,
    RemovePlayerAction,
    ResolveMergerAction,
    StartGameAction,
)
from .errors import ErrorCode
from .events import AnyGameEvent
from .hotels import get_hotel_by_name, hotel_size, remaining_shares, share_price
from .tiles import board_tiles, get_tile, tile_label


@dataclass
class ProcessResult:
    """Result of processing a game action.

    Replaces exceptions for control flow, providing explicit success/failure
    with error codes suitable for client localization.
    """

    state: GameState | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(
        cls,
        state: GameState,
        events: list[AnyGameEvent] | None = None,
    ) -> "ProcessResult":
        """Create a successful result with new state and events."""
        return cls(
            state=state,
            events=events or [],
            success=True,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            events=[],
            success=False,
            error_code=code,
            error_message=message,
        )


@dataclass
class ValidationResult:
    """Result of validating an action before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


# Phase each in-game action may be played in
REQUIRED_PHASES: dict[type, GamePhase] = {
    PlayTileAction: GamePhase.PLAY_TILE,
    FoundHotelAction: GamePhase.FOUND_HOTEL,
    BuySharesAction: GamePhase.BUY_SHARES,
    ResolveMergerAction: GamePhase.RESOLVE_MERGER,
    BreakMergerTieAction: GamePhase.BREAK_MERGER_TIE,
}


def get_player_by_name(state: GameState, name: str) -> Player | None:
    return next((p for p in state.players if p.name == name), None)


def validate_player_name(name: str, players: list[Player]) -> ValidationResult:
    """Lobby checks for a joining player, in the order they are reported."""
    if len(players) >= MAX_PLAYERS:
        return ValidationResult.error(
            ErrorCode.PLAYERS_MAX, f"Game already has maximum of {MAX_PLAYERS} players"
        )
    if not name or not name.strip():
        return ValidationResult.error(ErrorCode.PLAYER_INVALID_NAME, "Player name cannot be empty")
    if name in RESERVED_NAMES:
        return ValidationResult.error(
            ErrorCode.PLAYER_INVALID_NAME, f"{name} is a reserved word, please choose another"
        )
    if len(name) > MAX_PLAYER_NAME_LENGTH:
        return ValidationResult.error(
            ErrorCode.PLAYER_INVALID_NAME,
            f"Player name must be at most {MAX_PLAYER_NAME_LENGTH} characters",
        )
    if any(p.name == name for p in players):
        return ValidationResult.error(ErrorCode.PLAYER_EXISTS, "A player with this name already exists")
    return ValidationResult.ok()


def validate_buy_shares(state: GameState, player: Player, shares: dict) -> ValidationResult:
    """Share count limit, active chains, bank stock and money."""
    total = sum(shares.values())
    if total > MAX_SHARES_PER_TURN:
        return ValidationResult.error(
            ErrorCode.INVALID_ACTION, f"Only {MAX_SHARES_PER_TURN} shares may be purchased per turn"
        )

    board = board_tiles(state.tiles)
    cost = 0
    for name, count in shares.items():
        if count <= 0:
            return ValidationResult.error(
                ErrorCode.INVALID_ACTION, f"Can't buy {count} shares in hotel {name.value}"
            )
        if hotel_size(name, board) == 0:
            return ValidationResult.error(
                ErrorCode.INVALID_ACTION, f"Hotel {name.value} is not on the board"
            )
        hotel = get_hotel_by_name(state.hotels, name)
        if remaining_shares(hotel) < count:
            return ValidationResult.error(
                ErrorCode.INSUFFICIENT_RESOURCES, f"Hotel {name.value} doesn't have enough shares"
            )
        cost += share_price(name, board) * count

    if player.money < cost:
        return ValidationResult.error(
            ErrorCode.INSUFFICIENT_RESOURCES,
            f"You need ${cost} to purchase these shares and you only have ${player.money}",
        )
    return ValidationResult.ok()


def validate_action(state: GameState, action: GameAction) -> ValidationResult:
    """Validate an action before processing.

    Checks:
    - Game phase allows this action
    - The acting player is the one the game is waiting on
    - Action-specific resources (tile in hand, shares, money, names)

    Sell/trade limits for RESOLVE_MERGER and merge legality are checked while
    processing, still before any state is replaced.

    Args:
        state: Current game state.
        action: The action to validate.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    action_type = type(action).__name__
    logger.debug(
        "Validating action: type=%s, player=%s, phase=%s",
        action_type,
        action.player,
        state.current_phase.value,
    )

    if isinstance(action, RemovePlayerAction):
        return ValidationResult.ok()

    if isinstance(action, AddPlayerAction):
        if state.current_phase != GamePhase.WAITING_FOR_PLAYERS:
            logger.warning("Validation failed: game already started, player=%s", action.player)
            return ValidationResult.error(ErrorCode.INVALID_ACTION, "Game has already started")
        return validate_player_name(action.player, state.players)

    if isinstance(action, StartGameAction):
        if state.current_phase != GamePhase.WAITING_FOR_PLAYERS:
            logger.warning(
                "Validation failed: game already started, current_phase=%s",
                state.current_phase.value,
            )
            return ValidationResult.error(ErrorCode.INVALID_ACTION, "Game has already started")
        if action.player != state.owner:
            logger.warning("Validation failed: %s is not the owner", action.player)
            return ValidationResult.error(
                ErrorCode.INVALID_ACTION, "Only the game owner can start the game"
            )
        if len(state.players) < MINIMUM_PLAYERS:
            return ValidationResult.error(
                ErrorCode.NOT_ENOUGH_PLAYERS,
                f"Can't start game without minimum of {MINIMUM_PLAYERS} players",
            )
        return ValidationResult.ok()

    if state.current_phase == GamePhase.WAITING_FOR_PLAYERS:
        return ValidationResult.error(ErrorCode.INVALID_ACTION, "Game has not started yet")
    if state.current_phase == GamePhase.GAME_OVER:
        return ValidationResult.error(ErrorCode.INVALID_ACTION, "Game is over")

    player = get_player_by_name(state, action.player)
    if player is None or player.id is None:
        logger.warning("Validation failed: unknown player=%s", action.player)
        return ValidationResult.error(ErrorCode.INVALID_ACTION, f"Unknown player {action.player}")

    required_phase = REQUIRED_PHASES.get(type(action))
    if required_phase is None:
        return ValidationResult.error(ErrorCode.INVALID_ACTION, f"Unknown action type: {action_type}")
    if state.current_phase != required_phase:
        logger.warning(
            "Validation failed: INVALID_ACTION (%s), expected=%s, got=%s",
            action_type,
            required_phase.value,
            state.current_phase.value,
        )
        return ValidationResult.error(
            ErrorCode.INVALID_ACTION,
            f"Cannot {required_phase.value.lower()} - waiting for a different action",
        )

    if isinstance(action, ResolveMergerAction):
        queue = state.merge_context.stockholder_ids if state.merge_context else None
        if not queue:
            return ValidationResult.error(ErrorCode.PROCESSING_ERROR, "Invalid hotel merger context")
        acting_id = queue[0]
    else:
        acting_id = state.current_player
    if player.id != acting_id:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, expected=%d, attempted=%d", acting_id, player.id
        )
        return ValidationResult.error(ErrorCode.NOT_YOUR_TURN, "It's not your turn")

    if isinstance(action, PlayTileAction):
        tile = get_tile(state.tiles, action.tile.row, action.tile.col)
        if tile is None or tile.location != player.id:
            logger.warning(
                "Validation failed: tile %s not in hand of player=%d",
                tile_label(action.tile),
                player.id,
            )
            return ValidationResult.error(
                ErrorCode.INVALID_ACTION, f"Tile {tile_label(action.tile)} is not in your hand"
            )

    elif isinstance(action, BuySharesAction):
        result = validate_buy_shares(state, player, action.shares)
        if not result.is_valid:
            logger.warning("Validation failed: %s, shares=%s", result.error_code, action.shares)
            return result

    elif isinstance(action, FoundHotelAction):
        context = state.found_hotel_context
        if context is None:
            return ValidationResult.error(
                ErrorCode.PROCESSING_ERROR,
                f"Can't found hotel {action.hotel_name.value}, context missing in state",
            )
        board = board_tiles(state.tiles)
        if action.hotel_name not in context.available_hotels or hotel_size(action.hotel_name, board):
            return ValidationResult.error(
                ErrorCode.INVALID_ACTION, f"Hotel {action.hotel_name.value} is not available"
            )

    elif isinstance(action, BreakMergerTieAction):
        tied = state.merger_tie_context.tied_hotels if state.merger_tie_context else []
        resolved = action.resolved_tie
        if resolved.survivor == resolved.merged or not {resolved.survivor, resolved.merged} <= set(tied):
            return ValidationResult.error(
                ErrorCode.INVALID_ACTION, "Tie resolution contains invalid hotels"
            )

    logger.debug("Action validated successfully: type=%s", action_type)
    return ValidationResult.ok()
