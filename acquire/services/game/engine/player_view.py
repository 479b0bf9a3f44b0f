"""Per-player projection of the game state."""

import logging

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import GameState, Hotel, HotelName
from acquire.schemas.player_view import HotelSummary, OpponentSummary, OrcCount, PlayerView

from .errors import InvalidActionError
from .hotels import hotel_size, player_shares, remaining_shares
from .tiles import board_tiles, get_player_tiles


def orc_count(amount: int) -> OrcCount:
    """Bucket an amount into '0', '1', '2' or 'many' (3 and up)."""
    if amount >= 3:
        return "many"
    if amount == 2:
        return "2"
    if amount == 1:
        return "1"
    return "0"


def _holdings(player_id: int | None, hotels: list[Hotel]) -> dict[HotelName, int]:
    if player_id is None:
        return {}
    holdings = {}
    for hotel in hotels:
        count = player_shares(hotel, player_id)
        if count:
            holdings[hotel.name] = count
    return holdings


def get_player_view(player_name: str, state: GameState) -> PlayerView:
    """Build what ``player_name`` may see.

    The viewer keeps exact money, shares and hand. Every player's money and
    holdings appear only as OrcCount buckets. Transient contexts and the
    board are shown as they are.

    Raises:
        InvalidActionError: If the player is not in the game.
    """
    viewer = next((p for p in state.players if p.name == player_name), None)
    if viewer is None:
        raise InvalidActionError(f"Player {player_name} doesn't exist in game")

    context = state.merge_context
    pending = context.stockholder_ids[0] if context and context.stockholder_ids else None

    board = board_tiles(state.tiles)
    hand = get_player_tiles(viewer.id, state.tiles) if viewer.id is not None else []
    logger.debug("Building player view: game=%s, player=%s", state.game_id, player_name)

    return PlayerView(
        game_id=state.game_id,
        owner=state.owner,
        player_id=viewer.id,
        money=viewer.money,
        stocks=_holdings(viewer.id, state.hotels),
        tiles=[{"row": tile.row, "col": tile.col} for tile in hand],
        current_phase=state.current_phase,
        current_turn=state.current_turn,
        current_player=state.current_player,
        pending_merge_player=pending,
        players=[
            OpponentSummary(
                name=player.name,
                money=orc_count(player.money),
                shares={
                    name: orc_count(count)
                    for name, count in _holdings(player.id, state.hotels).items()
                },
            )
            for player in state.players
        ],
        hotels={
            hotel.name: HotelSummary(shares=remaining_shares(hotel), size=hotel_size(hotel.name, board))
            for hotel in state.hotels
        },
        board=board,
        merger_tie_context=state.merger_tie_context,
        merge_context=state.merge_context,
        found_hotel_context=state.found_hotel_context,
        error=state.error,
    )
