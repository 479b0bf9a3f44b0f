"""Main entry point for game action processing.

This module provides the primary interface for processing game actions:
- process_action(): Validates and processes any game action
- apply_action(): State-in, state-out wrapper that records failures on the state
- Dispatches to specialized handlers based on action type
- Returns ProcessResult with new state and events
"""

import logging
import random

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import GameErrorInfo, GameState, phase_context_error

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
from .errors import ErrorCode, GameError, ProcessingError
from .turns import (
    process_add_player,
    process_break_merger_tie,
    process_buy_shares,
    process_found_hotel,
    process_play_tile,
    process_resolve_merger,
    process_start_game,
)
from .validation import ProcessResult, get_player_by_name, validate_action


def process_action(
    state: GameState,
    action: GameAction,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Process a game action and return the result.

    This is the main entry point for all game actions. It:
    1. Validates the action is legal given current state
    2. Dispatches to the appropriate handler
    3. Checks the new state's phase against its transient contexts
    4. Assigns sequence numbers to events

    Domain errors raised while processing become failures; nothing partial
    is ever returned.

    Args:
        state: Current game state.
        action: The action to process. The acting player is ``action.player``.
        rng: Randomness for tile draws. Defaults to the module-level generator.

    Returns:
        ProcessResult containing:
        - success: Whether the action was processed successfully
        - state: The new game state (if successful)
        - events: List of events that occurred (with seq numbers)
        - error_code/error_message: Error details (if failed)

    Example:
        >>> result = process_action(state, PlayTileAction(player="ann", tile={"row": 0, "col": 0}))
        >>> if result.success:
        ...     new_state = result.state
        ...     for event in result.events:
        ...         broadcast(event)  # event.seq is set
        ... else:
        ...     send_error(result.error_code, result.error_message)
    """
    action_type = type(action).__name__
    logger.info(
        "Processing action: type=%s, player=%s, phase=%s",
        action_type,
        action.player,
        state.current_phase.value,
    )
    logger.debug("Action details: %s", action)

    # Validate the action
    validation = validate_action(state, action)
    if not validation.is_valid:
        logger.warning(
            "Action validation failed: code=%s, message=%s, player=%s, action=%s",
            validation.error_code,
            validation.error_message,
            action.player,
            action_type,
        )
        return ProcessResult.failure(
            validation.error_code or ErrorCode.INVALID_ACTION,
            validation.error_message or "Invalid action",
        )

    try:
        result = _dispatch(state, action, rng)
        if result.success and result.state is not None:
            _check_phase_context(result.state)
    except ProcessingError as exc:
        logger.error(
            "Processing error: type=%s, player=%s, message=%s", action_type, action.player, exc.message
        )
        return ProcessResult.failure(exc.code, exc.message)
    except GameError as exc:
        logger.warning(
            "Action rejected: type=%s, player=%s, code=%s, message=%s",
            action_type,
            action.player,
            exc.code,
            exc.message,
        )
        return ProcessResult.failure(exc.code, exc.message)

    # Assign sequence numbers to events and update state
    if result.success and result.state is not None:
        result = _assign_event_sequences(result)
        logger.info(
            "Action processed successfully: type=%s, player=%s, phase=%s, events_generated=%d",
            action_type,
            action.player,
            result.state.current_phase.value,
            len(result.events),
        )
        logger.debug("Generated events: %s", [type(e).__name__ for e in result.events])
    else:
        logger.warning(
            "Action processing failed: type=%s, player=%s, error=%s",
            action_type,
            action.player,
            result.error_code,
        )

    return result


def _dispatch(state: GameState, action: GameAction, rng: random.Random | None) -> ProcessResult:
    logger.debug("Dispatching to handler for action type: %s", type(action).__name__)

    if isinstance(action, AddPlayerAction):
        return process_add_player(state, action.player)

    if isinstance(action, RemovePlayerAction):
        logger.info("Remove player ignored: player=%s", action.player)
        return ProcessResult.ok(state)

    if isinstance(action, StartGameAction):
        return process_start_game(state, rng)

    player = get_player_by_name(state, action.player)
    if player is None:
        raise ProcessingError(f"Player not found: {action.player}")

    if isinstance(action, PlayTileAction):
        return process_play_tile(state, player, action.tile, rng)

    if isinstance(action, FoundHotelAction):
        return process_found_hotel(state, player, action.hotel_name, rng)

    if isinstance(action, BreakMergerTieAction):
        return process_break_merger_tie(state, action.resolved_tie)

    if isinstance(action, ResolveMergerAction):
        return process_resolve_merger(state, player, action.shares, rng)

    if isinstance(action, BuySharesAction):
        return process_buy_shares(state, player, action.shares, rng)

    logger.error("Unknown action type received: %s", type(action).__name__)
    return ProcessResult.failure(
        ErrorCode.INVALID_ACTION,
        f"Unknown action type: {type(action).__name__}",
    )


def _check_phase_context(state: GameState) -> None:
    """Transitions use model_copy, which skips validators; check phase contexts here."""
    problem = phase_context_error(
        state.current_phase,
        state.merge_context,
        state.merger_tie_context,
        state.found_hotel_context,
    )
    if problem:
        raise ProcessingError(problem)


def _assign_event_sequences(result: ProcessResult) -> ProcessResult:
    """Assign monotonically increasing sequence numbers to events.

    Updates each event's seq field and increments the state's event_seq counter.
    """
    if result.state is None or not result.events:
        return result

    current_seq = result.state.event_seq
    for event in result.events:
        event.seq = current_seq
        current_seq += 1

    # Update state with new sequence counter
    new_state = result.state.model_copy(update={"event_seq": current_seq})

    return ProcessResult.ok(new_state, result.events)


def apply_action(
    state: GameState,
    action: GameAction,
    rng: random.Random | None = None,
) -> GameState:
    """Apply an action and always return a complete state.

    On failure the input state comes back with ``error`` set and nothing else
    changed. On success ``error`` is cleared. Unexpected exceptions are logged
    and reported as UNKNOWN_ERROR instead of propagating.
    """
    try:
        result = process_action(state, action, rng)
    except Exception as exc:
        logger.exception("Unexpected error processing %s", type(action).__name__)
        return state.model_copy(
            update={"error": GameErrorInfo(code=ErrorCode.UNKNOWN_ERROR.value, message=str(exc))}
        )

    if not result.success or result.state is None:
        return state.model_copy(
            update={
                "error": GameErrorInfo(
                    code=ErrorCode(result.error_code).value,
                    message=result.error_message or "Invalid action",
                )
            }
        )
    return result.state.model_copy(update={"error": None})
