"""Merger resolution and stockholder bonuses.

Pure functions only: merge_hotels decides which chain survives and which is
absorbed next, calculate_shareholder_payouts works out the majority/minority
bonuses. The orchestrator in turns.py applies the results to the state.
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import (
    Hotel,
    HotelName,
    MergeContext,
    ResolvedTie,
    Tile,
)

from .errors import InvalidActionError, ProcessingError
from .hotels import hotel_safe, hotel_size, hotel_tiles, price_bracket, rank_stockholders


@dataclass
class MergeResult:
    """Outcome of one merge pass.

    When needs_merge_order is set only tied_hotels and merge_context are
    meaningful: the caller must obtain a tie decision and call again with
    that context. Otherwise survivor_tiles is the survivor's complete new
    tile set (retagged) and remaining_hotels are still waiting to merge.
    """

    needs_merge_order: bool = False
    tied_hotels: list[HotelName] = field(default_factory=list)
    merge_context: MergeContext | None = None
    surviving_hotel: HotelName | None = None
    merged_hotel: HotelName | None = None
    merged_hotel_size: int = 0
    remaining_hotels: list[HotelName] = field(default_factory=list)
    survivor_tiles: list[Tile] = field(default_factory=list)


def sort_hotels_by_size(hotels: list[HotelName], board: list[Tile]) -> list[HotelName]:
    """Largest first; chains of equal size keep their given order."""
    return sorted(hotels, key=lambda name: hotel_size(name, board), reverse=True)


def get_tied_hotels(sorted_hotels: list[HotelName], board: list[Tile]) -> list[HotelName]:
    """Chains sharing the size of the first (largest) entry."""
    if not sorted_hotels:
        return []
    top_size = hotel_size(sorted_hotels[0], board)
    return [name for name in sorted_hotels if hotel_size(name, board) == top_size]


def _is_tied(sorted_hotels: list[HotelName], board: list[Tile]) -> bool:
    return len(sorted_hotels) >= 2 and hotel_size(sorted_hotels[0], board) == hotel_size(
        sorted_hotels[1], board
    )


def _check_tie_resolution(resolution: ResolvedTie, tied: list[HotelName]) -> None:
    if resolution.survivor == resolution.merged:
        raise InvalidActionError("Tie resolution must name two different hotels")
    if resolution.survivor not in tied or resolution.merged not in tied:
        raise InvalidActionError(
            f"Tie resolution contains invalid hotels: expected two of {[h.value for h in tied]}"
        )


def merge_hotels(
    context: MergeContext,
    board: list[Tile],
    tie_resolution: ResolvedTie | None = None,
) -> MergeResult:
    """Run one merge pass over the chains in ``context``.

    Without a fixed survivor the largest chain survives and the next largest
    is absorbed. Once a survivor is fixed (by an earlier tie decision or an
    earlier pass), the largest remaining chain is absorbed next. A tie at the
    deciding rank returns needs_merge_order unless ``tie_resolution`` orders
    the tied chains.

    Raises:
        ProcessingError: If there aren't enough chains to merge.
        InvalidActionError: If the tie resolution names chains outside the
            tied set, or the absorbed chain is safe.
    """
    survivor = context.surviving_hotel
    candidates = sort_hotels_by_size(
        [name for name in context.original_hotels if name != survivor], board
    )

    if survivor is None:
        if len(candidates) < 2:
            raise ProcessingError("Need at least 2 hotels to merge")

        if _is_tied(candidates, board):
            tied = get_tied_hotels(candidates, board)
            if tie_resolution is None:
                logger.debug("Merger tie for survivor: tied=%s", [h.value for h in tied])
                return MergeResult(needs_merge_order=True, tied_hotels=tied, merge_context=context)
            _check_tie_resolution(tie_resolution, tied)
            survivor = tie_resolution.survivor
            merged = tie_resolution.merged
        else:
            survivor = candidates[0]
            rest = candidates[1:]
            if _is_tied(rest, board):
                tied = get_tied_hotels(rest, board)
                logger.debug(
                    "Merger tie for absorption order: survivor=%s, tied=%s",
                    survivor.value,
                    [h.value for h in tied],
                )
                return MergeResult(
                    needs_merge_order=True,
                    tied_hotels=tied,
                    merge_context=context.model_copy(
                        update={"surviving_hotel": survivor, "original_hotels": rest}
                    ),
                )
            merged = rest[0]
    else:
        if not candidates:
            raise ProcessingError(f"No hotels left to merge into {survivor.value}")

        if _is_tied(candidates, board):
            tied = get_tied_hotels(candidates, board)
            if tie_resolution is None:
                logger.debug("Merger tie for absorption order: tied=%s", [h.value for h in tied])
                return MergeResult(needs_merge_order=True, tied_hotels=tied, merge_context=context)
            _check_tie_resolution(tie_resolution, tied)
            # The chain ranked first goes next, the other stays queued
            merged = tie_resolution.survivor
        else:
            merged = candidates[0]

    remaining = [name for name in candidates if name not in (survivor, merged)]

    if hotel_safe(merged, board):
        raise InvalidActionError(f"Cannot merge safe hotel {merged.value}")

    merged_tiles = hotel_tiles(merged, board)
    survivor_tiles = [
        *hotel_tiles(survivor, board),
        *(tile.model_copy(update={"hotel": survivor}) for tile in merged_tiles),
        *(tile.model_copy(update={"hotel": survivor}) for tile in context.additional_tiles),
    ]
    logger.info(
        "Merging hotels: survivor=%s, merged=%s, merged_size=%d, remaining=%s",
        survivor.value,
        merged.value,
        len(merged_tiles),
        [h.value for h in remaining],
    )
    return MergeResult(
        needs_merge_order=False,
        surviving_hotel=survivor,
        merged_hotel=merged,
        merged_hotel_size=len(merged_tiles),
        remaining_hotels=remaining,
        survivor_tiles=survivor_tiles,
    )


def round_up_to_nearest_hundred(amount: int, ways: int = 1) -> int:
    """Split ``amount`` ``ways`` ways and round each part up to a multiple of 100."""
    return -(-amount // (ways * 100)) * 100


def calculate_shareholder_payouts(hotel: Hotel, size: int) -> dict[int, int]:
    """Majority/minority bonuses for a chain of ``size`` tiles, keyed by player id.

    Holders are grouped by holding count. A tie at the top splits majority
    plus minority; so does a single holder with nobody below. Otherwise the
    top holder takes the majority and the next group splits the minority.
    Every split is rounded up to the nearest 100. Returns an empty map when
    the bank holds every share.
    """
    bracket = price_bracket(hotel.name, size)
    groups: list[list[int]] = []
    last_count = None
    for player_id, count in rank_stockholders(hotel):
        if count != last_count:
            groups.append([])
            last_count = count
        groups[-1].append(player_id)

    payouts: dict[int, int] = {}
    if not groups:
        return payouts

    top = groups[0]
    if len(top) > 1 or len(groups) == 1:
        per_player = round_up_to_nearest_hundred(bracket.majority + bracket.minority, len(top))
        for player_id in top:
            payouts[player_id] = per_player
    else:
        payouts[top[0]] = bracket.majority
        second = groups[1]
        per_player = round_up_to_nearest_hundred(bracket.minority, len(second))
        for player_id in second:
            payouts[player_id] = per_player

    logger.debug(
        "Shareholder payouts: hotel=%s, size=%d, majority=%d, minority=%d, payouts=%s",
        hotel.name.value,
        size,
        bracket.majority,
        bracket.minority,
        payouts,
    )
    return payouts
