"""Tests for merger resolution and bonus payouts.

Critical scenarios tested:
- Equal-size chains need an ordering before the merge can go ahead
- The largest chain survives and absorbs the next largest
- Safe chains can't be absorbed
- Survivor size after the merge includes the connector tiles
- Three-way mergers with a tie among the chains to absorb
- Majority/minority splits and rounding
"""

import pytest

from acquire.schemas.game_engine import HotelName, MergeContext, ResolvedTie, TileLocation
from acquire.services.game.engine.errors import InvalidActionError, ProcessingError
from acquire.services.game.engine.hotels import get_hotel_by_name, initialize_hotels
from acquire.services.game.engine.mergers import (
    calculate_shareholder_payouts,
    merge_hotels,
    round_up_to_nearest_hundred,
)
from acquire.services.game.engine.tiles import board_tiles, get_tile, initialize_tiles

from .conftest import ALICE_ID, BOB_ID, CAROL_ID, give_shares, place_hotel, row_run

TOWER = HotelName.TOWER
LUXOR = HotelName.LUXOR
AMERICAN = HotelName.AMERICAN
WORLDWIDE = HotelName.WORLDWIDE


def connector(tiles, row, col):
    return get_tile(tiles, row, col).model_copy(update={"location": TileLocation.BOARD})


def three_way_board():
    """Tower (5) above, Luxor (3) below, American (3) right of the empty cell 5E."""
    tiles = initialize_tiles()
    tiles = place_hotel(tiles, TOWER, row_run(4, 0, 5))
    tiles = place_hotel(tiles, LUXOR, row_run(6, 2, 3))
    tiles = place_hotel(tiles, AMERICAN, row_run(5, 5, 3))
    return tiles


class TestMergeHotels:
    """Test choosing survivor and absorbed chain."""

    def test_equal_sizes_need_a_merge_order(self):
        tiles = place_hotel(initialize_tiles(), TOWER, row_run(0, 0, 5))
        tiles = place_hotel(tiles, LUXOR, row_run(2, 0, 5))
        context = MergeContext(
            original_hotels=[TOWER, LUXOR], additional_tiles=[connector(tiles, 1, 0)]
        )

        result = merge_hotels(context, board_tiles(tiles))
        assert result.needs_merge_order
        assert set(result.tied_hotels) == {TOWER, LUXOR}

        resolved = merge_hotels(
            context, board_tiles(tiles), ResolvedTie(survivor=TOWER, merged=LUXOR)
        )
        assert not resolved.needs_merge_order
        assert resolved.surviving_hotel == TOWER
        assert resolved.merged_hotel == LUXOR

    def test_largest_chain_survives(self):
        tiles = place_hotel(initialize_tiles(), TOWER, row_run(0, 0, 3))
        tiles = place_hotel(tiles, LUXOR, row_run(2, 0, 6))
        context = MergeContext(
            original_hotels=[TOWER, LUXOR], additional_tiles=[connector(tiles, 1, 0)]
        )

        result = merge_hotels(context, board_tiles(tiles))

        assert result.surviving_hotel == LUXOR
        assert result.merged_hotel == TOWER
        assert result.merged_hotel_size == 3
        assert result.remaining_hotels == []

    def test_survivor_takes_every_tile(self):
        tiles = place_hotel(initialize_tiles(), TOWER, row_run(0, 0, 4))
        tiles = place_hotel(tiles, LUXOR, row_run(2, 0, 2))
        context = MergeContext(
            original_hotels=[TOWER, LUXOR], additional_tiles=[connector(tiles, 1, 0)]
        )

        result = merge_hotels(context, board_tiles(tiles))

        assert len(result.survivor_tiles) == 4 + 2 + 1
        assert all(t.hotel == TOWER for t in result.survivor_tiles)
        assert {(t.row, t.col) for t in result.survivor_tiles} >= {(1, 0), (2, 0), (2, 1)}

    def test_safe_chain_cannot_be_absorbed(self):
        tiles = place_hotel(initialize_tiles(), TOWER, row_run(0, 0, 9) + row_run(1, 0, 3))
        tiles = place_hotel(tiles, LUXOR, row_run(3, 0, 9) + row_run(4, 0, 2))
        context = MergeContext(
            original_hotels=[TOWER, LUXOR], additional_tiles=[connector(tiles, 2, 0)]
        )
        with pytest.raises(InvalidActionError):
            merge_hotels(context, board_tiles(tiles))

    def test_tie_resolution_outside_the_tied_set_is_rejected(self):
        tiles = place_hotel(initialize_tiles(), TOWER, row_run(0, 0, 2))
        tiles = place_hotel(tiles, LUXOR, row_run(2, 0, 2))
        context = MergeContext(original_hotels=[TOWER, LUXOR])
        with pytest.raises(InvalidActionError):
            merge_hotels(context, board_tiles(tiles), ResolvedTie(survivor=TOWER, merged=AMERICAN))

    def test_single_hotel_is_a_processing_error(self):
        tiles = place_hotel(initialize_tiles(), TOWER, row_run(0, 0, 2))
        with pytest.raises(ProcessingError):
            merge_hotels(MergeContext(original_hotels=[TOWER]), board_tiles(tiles))

    def test_three_way_tie_below_the_survivor(self):
        tiles = three_way_board()
        context = MergeContext(
            original_hotels=[TOWER, LUXOR, AMERICAN], additional_tiles=[connector(tiles, 5, 4)]
        )

        result = merge_hotels(context, board_tiles(tiles))

        assert result.needs_merge_order
        assert result.tied_hotels == [LUXOR, AMERICAN]
        assert result.merge_context.surviving_hotel == TOWER
        assert result.merge_context.original_hotels == [LUXOR, AMERICAN]

        # The first-ranked of the tied pair is absorbed first
        resolved = merge_hotels(
            result.merge_context,
            board_tiles(tiles),
            ResolvedTie(survivor=AMERICAN, merged=LUXOR),
        )
        assert resolved.surviving_hotel == TOWER
        assert resolved.merged_hotel == AMERICAN
        assert resolved.remaining_hotels == [LUXOR]
        assert len(resolved.survivor_tiles) == 5 + 3 + 1

    def test_cascade_continues_with_fixed_survivor(self):
        tiles = place_hotel(three_way_board(), TOWER, row_run(5, 5, 3) + [(5, 4)])
        context = MergeContext(original_hotels=[LUXOR], surviving_hotel=TOWER)

        result = merge_hotels(context, board_tiles(tiles))

        assert result.surviving_hotel == TOWER
        assert result.merged_hotel == LUXOR
        assert result.remaining_hotels == []


class TestShareholderPayouts:
    """Test majority/minority bonus calculation."""

    def test_round_up_to_nearest_hundred(self):
        assert round_up_to_nearest_hundred(4500, 2) == 2300
        assert round_up_to_nearest_hundred(3000, 3) == 1000
        assert round_up_to_nearest_hundred(1500, 2) == 800
        assert round_up_to_nearest_hundred(1001) == 1100

    def test_single_holder_takes_both_bonuses(self):
        hotels = give_shares(initialize_hotels(), TOWER, ALICE_ID, 1)
        payouts = calculate_shareholder_payouts(get_hotel_by_name(hotels, TOWER), 2)
        assert payouts == {ALICE_ID: 3000}

    def test_majority_and_minority_to_different_holders(self):
        hotels = give_shares(initialize_hotels(), TOWER, ALICE_ID, 3)
        hotels = give_shares(hotels, TOWER, BOB_ID, 2)
        payouts = calculate_shareholder_payouts(get_hotel_by_name(hotels, TOWER), 2)
        assert payouts == {ALICE_ID: 2000, BOB_ID: 1000}

    def test_tied_majority_splits_both_bonuses(self):
        hotels = give_shares(initialize_hotels(), WORLDWIDE, ALICE_ID, 2)
        hotels = give_shares(hotels, WORLDWIDE, BOB_ID, 2)
        hotels = give_shares(hotels, WORLDWIDE, CAROL_ID, 1)
        payouts = calculate_shareholder_payouts(get_hotel_by_name(hotels, WORLDWIDE), 2)
        # (3000 + 1500) / 2 rounded up; nothing for the third holder
        assert payouts == {ALICE_ID: 2300, BOB_ID: 2300}

    def test_tied_minority_splits_minority(self):
        hotels = give_shares(initialize_hotels(), WORLDWIDE, ALICE_ID, 4)
        hotels = give_shares(hotels, WORLDWIDE, BOB_ID, 2)
        hotels = give_shares(hotels, WORLDWIDE, CAROL_ID, 2)
        payouts = calculate_shareholder_payouts(get_hotel_by_name(hotels, WORLDWIDE), 2)
        assert payouts == {ALICE_ID: 3000, BOB_ID: 800, CAROL_ID: 800}

    def test_third_tier_gets_nothing(self):
        hotels = give_shares(initialize_hotels(), TOWER, ALICE_ID, 5)
        hotels = give_shares(hotels, TOWER, BOB_ID, 3)
        hotels = give_shares(hotels, TOWER, CAROL_ID, 1)
        payouts = calculate_shareholder_payouts(get_hotel_by_name(hotels, TOWER), 2)
        assert CAROL_ID not in payouts

    def test_no_holders_no_payouts(self):
        hotel = get_hotel_by_name(initialize_hotels(), TOWER)
        assert calculate_shareholder_payouts(hotel, 5) == {}
