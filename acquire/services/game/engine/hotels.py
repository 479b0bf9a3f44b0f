"""Hotel and share ledger: chain sizes, safety, price brackets, share movement."""

import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import (
    BANK,
    HOTEL_TIERS,
    SAFE_HOTEL_SIZE,
    SHARES_PER_HOTEL,
    Hotel,
    HotelName,
    HotelTier,
    Share,
    Tile,
)

from .errors import ProcessingError


@dataclass(frozen=True)
class PriceBracket:
    price: int
    majority: int
    minority: int


def _brackets(base: int) -> list[tuple[float, PriceBracket]]:
    """Ascending (max_size, bracket) pairs; each step adds 100 to the price."""
    max_sizes: list[float] = [2, 3, 4, 5, 10, 20, 30, 40, math.inf]
    brackets = []
    for step, max_size in enumerate(max_sizes):
        price = base + 100 * step
        brackets.append((max_size, PriceBracket(price, price * 10, price * 5)))
    return brackets


SHARE_PRICES: dict[HotelTier, list[tuple[float, PriceBracket]]] = {
    HotelTier.ECONOMY: _brackets(200),
    HotelTier.STANDARD: _brackets(300),
    HotelTier.LUXURY: _brackets(400),
}


def initialize_hotels() -> list[Hotel]:
    """All seven chains, every share in the bank."""
    return [
        Hotel(name=name, shares=[Share(location=BANK) for _ in range(SHARES_PER_HOTEL)])
        for name in HotelName
    ]


def get_hotel_by_name(hotels: list[Hotel], name: HotelName | str) -> Hotel:
    hotel = next((h for h in hotels if h.name == name), None)
    if hotel is None:
        raise ProcessingError(f"Hotel not found: {name}")
    return hotel


def hotel_tiles(hotel: HotelName | str, board: list[Tile]) -> list[Tile]:
    return [tile for tile in board if tile.hotel is not None and tile.hotel == hotel]


def hotel_size(hotel: HotelName | str, board: list[Tile]) -> int:
    return len(hotel_tiles(hotel, board))


def hotel_safe(hotel: HotelName | str, board: list[Tile]) -> bool:
    return hotel_size(hotel, board) >= SAFE_HOTEL_SIZE


def active_hotel_names(board: list[Tile]) -> list[HotelName]:
    """Chains with at least one tile on the board, in canonical order."""
    return [name for name in HotelName if hotel_size(name, board) > 0]


def unfounded_hotel_names(board: list[Tile]) -> list[HotelName]:
    """Chains with no tiles on the board, i.e. available to found."""
    return [name for name in HotelName if hotel_size(name, board) == 0]


def price_bracket(hotel: HotelName | str, size: int) -> PriceBracket:
    """First bracket whose max size covers ``size``; sizes 0 and 1 use the smallest.

    Raises:
        ProcessingError: If the price table has no bracket for the size.
    """
    try:
        tier = HOTEL_TIERS[HotelName(hotel)]
    except (KeyError, ValueError) as exc:
        raise ProcessingError(f"Hotel not found: {hotel}") from exc

    brackets = SHARE_PRICES.get(tier, [])
    for max_size, bracket in brackets:
        if size <= max_size:
            return bracket
    raise ProcessingError(
        f"No price bracket found for {hotel} at size {size} - check SHARE_PRICES configuration"
    )


def share_price_for_size(hotel: HotelName | str, size: int) -> int:
    return price_bracket(hotel, size).price


def share_price(hotel: HotelName | str, board: list[Tile]) -> int:
    return price_bracket(hotel, hotel_size(hotel, board)).price


def majority_minority_value(hotel: HotelName | str, board: list[Tile]) -> tuple[int, int]:
    bracket = price_bracket(hotel, hotel_size(hotel, board))
    return bracket.majority, bracket.minority


def remaining_shares(hotel: Hotel) -> int:
    """Shares still held by the bank."""
    return sum(1 for share in hotel.shares if share.location == BANK)


def player_shares(hotel: Hotel, player_id: int) -> int:
    return sum(1 for share in hotel.shares if share.location == player_id)


def can_buy_shares(money: int, hotels: list[Hotel], board: list[Tile]) -> bool:
    """Whether ``money`` covers at least one bank share of an active chain."""
    prices = [
        share_price(hotel.name, board)
        for hotel in hotels
        if hotel_size(hotel.name, board) > 0 and remaining_shares(hotel) > 0
    ]
    return bool(prices) and money >= min(prices)


def assign_shares_to_player(shares: list[Share], player_id: int, count: int = 1) -> list[Share]:
    """Move up to ``count`` bank shares to the player; never more than the bank holds."""
    assigned = 0
    updated = []
    for share in shares:
        if share.location == BANK and assigned < count:
            assigned += 1
            updated.append(Share(location=player_id))
        else:
            updated.append(share)
    if assigned < count:
        logger.debug("Bank short of shares: requested=%d, assigned=%d", count, assigned)
    return updated


def return_shares_to_bank(shares: list[Share], player_id: int, count: int = 1) -> list[Share]:
    """Move up to ``count`` of the player's shares back to the bank."""
    returned = 0
    updated = []
    for share in shares:
        if share.location == player_id and returned < count:
            returned += 1
            updated.append(Share(location=BANK))
        else:
            updated.append(share)
    return updated


def get_stockholders(hotel: Hotel) -> dict[int, int]:
    """Map of player id to shares held, in the order holders first appear."""
    holders: dict[int, int] = {}
    for share in hotel.shares:
        if share.location == BANK:
            continue
        holders[share.location] = holders.get(share.location, 0) + 1
    return holders


def rank_stockholders(hotel: Hotel) -> list[tuple[int, int]]:
    """(player_id, count) pairs by holding, largest first.

    Equal holdings keep the order in which holders first appear in the share
    list (Python's sort is stable).
    """
    return sorted(get_stockholders(hotel).items(), key=lambda item: item[1], reverse=True)

