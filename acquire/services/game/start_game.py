import random

from acquire.config import Settings, get_settings
from acquire.schemas.game_engine import GamePhase, GameState, Player

from .engine.hotels import initialize_hotels
from .engine.tiles import initialize_tiles
from .engine.validation import validate_player_name


def initialize_game(game_id: str, owner: str, settings: Settings | None = None) -> GameState:
    """
    Create a game waiting for players, with the owner already seated.

    Args:
        game_id: Identifier the caller stores the game under.
        owner: Name of the player creating the game; only they can start it.
        settings: Rule configuration. Defaults to get_settings().

    Returns:
        A GameState in WAITING_FOR_PLAYERS with every share in the bank and
        every tile in the bag.

    Raises:
        ValueError: If the game id is empty or the owner name is invalid.
    """
    if not game_id or not game_id.strip():
        raise ValueError("Game id cannot be empty.")
    check = validate_player_name(owner, [])
    if not check.is_valid:
        raise ValueError(check.error_message)

    settings = settings or get_settings()
    return GameState(
        game_id=game_id,
        owner=owner,
        current_phase=GamePhase.WAITING_FOR_PLAYERS,
        players=[Player(name=owner)],
        hotels=initialize_hotels(),
        tiles=initialize_tiles(),
        end_game_rule=settings.END_GAME_RULE,
    )


def make_tile_rng(settings: Settings | None = None) -> random.Random:
    """Random source for tile draws, seeded from TILE_SEED when set."""
    settings = settings or get_settings()
    return random.Random(settings.TILE_SEED)
