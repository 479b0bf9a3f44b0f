"""Stockholder settlement: merger bonuses, sell/trade/keep decisions, end-of-game payout."""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import Hotel, HotelName, Player, Tile

from .errors import ErrorCode, InvalidActionError, ProcessingError
from .events import AnyGameEvent, BonusPaid, SharesResolved
from .hotels import (
    active_hotel_names,
    assign_shares_to_player,
    get_hotel_by_name,
    hotel_size,
    player_shares,
    rank_stockholders,
    remaining_shares,
    return_shares_to_bank,
    share_price,
    share_price_for_size,
)
from .mergers import calculate_shareholder_payouts


@dataclass
class SettlementResult:
    """New players and hotels after a settlement step, plus what happened."""

    players: list[Player]
    hotels: list[Hotel]
    events: list[AnyGameEvent] = field(default_factory=list)


def _credit(players: list[Player], amounts: dict[int, int]) -> list[Player]:
    return [
        player.model_copy(update={"money": player.money + amounts[player.id]})
        if player.id in amounts
        else player
        for player in players
    ]


def _replace_hotels(hotels: list[Hotel], updated: list[Hotel]) -> list[Hotel]:
    by_name = {hotel.name: hotel for hotel in updated}
    return [by_name.get(hotel.name, hotel) for hotel in hotels]


def stockholder_queue(hotel: Hotel) -> list[int]:
    """Stockholders in the order they resolve: largest holding first.

    Raises:
        ProcessingError: If nobody holds a share; a merger can't settle then.
    """
    queue = [player_id for player_id, _ in rank_stockholders(hotel)]
    if not queue:
        raise ProcessingError(f"No stockholders for merged hotel {hotel.name.value}")
    return queue


def pay_bonuses(
    players: list[Player], hotels: list[Hotel], hotel_name: HotelName, size: int
) -> SettlementResult:
    """Pay majority/minority bonuses for ``hotel_name`` valued at ``size`` tiles."""
    hotel = get_hotel_by_name(hotels, hotel_name)
    payouts = calculate_shareholder_payouts(hotel, size)
    events: list[AnyGameEvent] = [
        BonusPaid(player_id=player_id, hotel=hotel_name, amount=amount)
        for player_id, amount in payouts.items()
    ]
    for player_id, amount in payouts.items():
        logger.info("Bonus paid: hotel=%s, player=%d, amount=%d", hotel_name.value, player_id, amount)
    return SettlementResult(players=_credit(players, payouts), hotels=hotels, events=events)


def resolve_shares(
    players: list[Player],
    hotels: list[Hotel],
    player_id: int,
    merged: HotelName,
    survivor: HotelName,
    merged_size: int,
    sell: int = 0,
    trade: int = 0,
) -> SettlementResult:
    """Apply one stockholder's decision on the absorbed chain.

    Sold shares pay the price of the absorbed chain at ``merged_size`` and go
    back to the bank. Traded shares go back two-for-one against survivor
    shares from the bank. Anything else is kept.

    Raises:
        InvalidActionError: If the player holds too few shares, trades an odd
            number, or the survivor's bank can't cover the trade.
    """
    merged_hotel = get_hotel_by_name(hotels, merged)
    survivor_hotel = get_hotel_by_name(hotels, survivor)
    holding = player_shares(merged_hotel, player_id)

    if sell < 0 or trade < 0:
        raise InvalidActionError("Share counts cannot be negative")
    if sell + trade > holding:
        raise InvalidActionError(
            f"You don't have {sell + trade} shares in {merged.value} to trade/sell",
            ErrorCode.INSUFFICIENT_RESOURCES,
        )
    if trade % 2 != 0:
        raise InvalidActionError("You can only trade an even number of shares")
    if remaining_shares(survivor_hotel) < trade // 2:
        raise InvalidActionError(
            f"{survivor.value} doesn't have {trade // 2} shares left to trade",
            ErrorCode.INSUFFICIENT_RESOURCES,
        )

    merged_shares = merged_hotel.shares
    survivor_shares = survivor_hotel.shares
    if trade:
        merged_shares = return_shares_to_bank(merged_shares, player_id, trade)
        survivor_shares = assign_shares_to_player(survivor_shares, player_id, trade // 2)

    proceeds = 0
    if sell:
        proceeds = share_price_for_size(merged, merged_size) * sell
        merged_shares = return_shares_to_bank(merged_shares, player_id, sell)

    updated_hotels = _replace_hotels(
        hotels,
        [
            merged_hotel.model_copy(update={"shares": merged_shares}),
            survivor_hotel.model_copy(update={"shares": survivor_shares}),
        ],
    )
    updated_players = _credit(players, {player_id: proceeds}) if proceeds else players
    kept = holding - sell - trade

    logger.info(
        "Shares resolved: player=%d, merged=%s, sold=%d, traded=%d, kept=%d, proceeds=%d",
        player_id,
        merged.value,
        sell,
        trade,
        kept,
        proceeds,
    )
    return SettlementResult(
        players=updated_players,
        hotels=updated_hotels,
        events=[
            SharesResolved(
                player_id=player_id,
                merged_hotel=merged,
                surviving_hotel=survivor,
                sold=sell,
                traded=trade,
                kept=kept,
                proceeds=proceeds,
            )
        ],
    )


def settle_final_accounts(
    players: list[Player], hotels: list[Hotel], board: list[Tile]
) -> SettlementResult:
    """End-of-game payout.

    Every active chain pays its bonuses, then every share of an active chain
    is sold back to the bank at the chain's current price. Shares of chains
    with no tiles are worthless and stay where they are.
    """
    events: list[AnyGameEvent] = []
    for name in active_hotel_names(board):
        bonus = pay_bonuses(players, hotels, name, hotel_size(name, board))
        players = bonus.players
        events.extend(bonus.events)

    proceeds: dict[int, int] = {}
    updated_hotels: list[Hotel] = []
    for name in active_hotel_names(board):
        hotel = get_hotel_by_name(hotels, name)
        price = share_price(name, board)
        shares = hotel.shares
        for player_id, count in rank_stockholders(hotel):
            proceeds[player_id] = proceeds.get(player_id, 0) + price * count
            shares = return_shares_to_bank(shares, player_id, count)
        updated_hotels.append(hotel.model_copy(update={"shares": shares}))

    logger.info("Final share liquidation: proceeds=%s", proceeds)
    return SettlementResult(
        players=_credit(players, proceeds),
        hotels=_replace_hotels(hotels, updated_hotels),
        events=events,
    )
