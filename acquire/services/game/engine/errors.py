"""Domain errors raised by the engine.

Two kinds matter to callers:
- InvalidActionError: the acting player can correct and retry.
- ProcessingError: an internal invariant broke (missing context, unknown
  hotel, missing price bracket). Log it and investigate.
"""

from enum import Enum


class ErrorCode(str, Enum):
    # Add player errors
    PLAYERS_MAX = "PLAYERS_MAX"
    PLAYER_INVALID_NAME = "INVALID_PLAYER_NAME"
    PLAYER_EXISTS = "PLAYER_EXISTS"

    # Game errors
    INVALID_ACTION = "INVALID_ACTION"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    PROCESSING_ERROR = "PROCESSING_ERROR"

    # Resource errors
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"

    # Only produced at the entry point
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class GameError(Exception):
    """Base class for rule violations detected by the engine."""

    default_code = ErrorCode.INVALID_ACTION

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class InvalidActionError(GameError):
    """User-correctable: wrong turn, wrong phase, missing resources."""

    default_code = ErrorCode.INVALID_ACTION


class ProcessingError(GameError):
    """Internal invariant violation; the state or the caller is at fault."""

    default_code = ErrorCode.PROCESSING_ERROR
