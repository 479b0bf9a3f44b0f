"""Tests for the hotel and share ledger.

Critical scenarios tested:
- Price brackets per tier, including sizes 0 and 1
- Safe size threshold
- Share movement is clamped to what the bank or player holds
- Stockholder ranking keeps first-seen order on ties
"""

import pytest

from acquire.schemas.game_engine import BANK, HotelName, Share
from acquire.services.game.engine.errors import ProcessingError
from acquire.services.game.engine.hotels import (
    active_hotel_names,
    assign_shares_to_player,
    can_buy_shares,
    get_hotel_by_name,
    hotel_safe,
    hotel_size,
    initialize_hotels,
    majority_minority_value,
    player_shares,
    price_bracket,
    rank_stockholders,
    remaining_shares,
    return_shares_to_bank,
    share_price,
    share_price_for_size,
    unfounded_hotel_names,
)
from acquire.services.game.engine.tiles import board_tiles, initialize_tiles

from .conftest import ALICE_ID, BOB_ID, CAROL_ID, give_shares, place_hotel, row_run


class TestPricing:
    """Test share prices and bonuses."""

    def test_fresh_economy_chain_of_two(self):
        board = board_tiles(place_hotel(initialize_tiles(), HotelName.TOWER, row_run(0, 0, 2)))
        assert share_price(HotelName.TOWER, board) == 200
        assert majority_minority_value(HotelName.TOWER, board) == (2000, 1000)

    def test_sizes_zero_and_one_use_the_smallest_bracket(self):
        assert share_price_for_size(HotelName.LUXOR, 0) == 200
        assert share_price_for_size(HotelName.LUXOR, 1) == 200

    def test_tiers_add_a_hundred_each(self):
        assert share_price_for_size(HotelName.TOWER, 2) == 200
        assert share_price_for_size(HotelName.AMERICAN, 2) == 300
        assert share_price_for_size(HotelName.CONTINENTAL, 2) == 400

    @pytest.mark.parametrize(
        "size,price",
        [(3, 300), (4, 400), (5, 500), (6, 600), (10, 600), (11, 700), (21, 800), (31, 900), (41, 1000), (60, 1000)],
    )
    def test_economy_brackets(self, size: int, price: int):
        assert share_price_for_size(HotelName.TOWER, size) == price

    def test_luxury_top_bracket(self):
        bracket = price_bracket(HotelName.IMPERIAL, 45)
        assert bracket.price == 1200
        assert bracket.majority == 12000
        assert bracket.minority == 6000

    def test_unknown_hotel_is_a_processing_error(self):
        with pytest.raises(ProcessingError):
            price_bracket("Ritz", 2)


class TestHotelState:
    """Test chain size, safety and activity."""

    def test_safe_at_eleven_tiles(self):
        tiles = place_hotel(initialize_tiles(), HotelName.TOWER, row_run(0, 0, 9) + row_run(1, 0, 1))
        assert hotel_size(HotelName.TOWER, board_tiles(tiles)) == 10
        assert not hotel_safe(HotelName.TOWER, board_tiles(tiles))

        tiles = place_hotel(tiles, HotelName.TOWER, [(1, 1)])
        assert hotel_safe(HotelName.TOWER, board_tiles(tiles))

    def test_active_and_unfounded_partition_the_chains(self):
        tiles = place_hotel(initialize_tiles(), HotelName.FESTIVAL, row_run(6, 0, 2))
        board = board_tiles(tiles)
        assert active_hotel_names(board) == [HotelName.FESTIVAL]
        assert HotelName.FESTIVAL not in unfounded_hotel_names(board)
        assert len(unfounded_hotel_names(board)) == 6

    def test_get_missing_hotel_raises(self):
        with pytest.raises(ProcessingError):
            get_hotel_by_name([], HotelName.TOWER)


class TestShareMovement:
    """Test share assignment and return."""

    def test_all_shares_start_in_the_bank(self):
        hotels = initialize_hotels()
        assert len(hotels) == 7
        assert all(remaining_shares(h) == 25 for h in hotels)

    def test_assign_is_clamped_to_bank_stock(self):
        shares = [Share(location=BANK)] * 2 + [Share(location=BOB_ID)] * 23
        updated = assign_shares_to_player(shares, ALICE_ID, 5)
        assert len(updated) == 25
        assert sum(1 for s in updated if s.location == ALICE_ID) == 2
        assert sum(1 for s in updated if s.location == BANK) == 0

    def test_return_is_clamped_to_player_holding(self):
        shares = [Share(location=ALICE_ID)] * 3 + [Share(location=BANK)] * 22
        updated = return_shares_to_bank(shares, ALICE_ID, 10)
        assert all(s.location == BANK for s in updated)
        assert len(updated) == 25

    def test_assign_does_not_mutate_input(self):
        shares = [Share(location=BANK) for _ in range(25)]
        assign_shares_to_player(shares, ALICE_ID, 3)
        assert all(s.location == BANK for s in shares)


class TestStockholders:
    """Test stockholder ranking."""

    def test_ranked_by_holding_then_first_seen(self):
        hotels = initialize_hotels()
        hotels = give_shares(hotels, HotelName.TOWER, BOB_ID, 2)
        hotels = give_shares(hotels, HotelName.TOWER, CAROL_ID, 4)
        hotels = give_shares(hotels, HotelName.TOWER, ALICE_ID, 2)
        tower = get_hotel_by_name(hotels, HotelName.TOWER)

        assert rank_stockholders(tower) == [(CAROL_ID, 4), (BOB_ID, 2), (ALICE_ID, 2)]
        assert player_shares(tower, CAROL_ID) == 4
        assert remaining_shares(tower) == 17


class TestCanBuyShares:
    """Test whether a player can afford any share at all."""

    @pytest.fixture
    def tower_board(self):
        return board_tiles(place_hotel(initialize_tiles(), HotelName.TOWER, row_run(0, 0, 2)))

    def test_no_active_chain(self):
        assert not can_buy_shares(6000, initialize_hotels(), [])

    def test_exact_price_is_enough(self, tower_board):
        assert can_buy_shares(200, initialize_hotels(), tower_board)
        assert not can_buy_shares(199, initialize_hotels(), tower_board)

    def test_empty_bank_cannot_sell(self, tower_board):
        hotels = give_shares(initialize_hotels(), HotelName.TOWER, BOB_ID, 25)
        assert not can_buy_shares(6000, hotels, tower_board)

    def test_cheapest_chain_decides(self):
        tiles = place_hotel(initialize_tiles(), HotelName.TOWER, row_run(0, 0, 2))
        tiles = place_hotel(tiles, HotelName.IMPERIAL, row_run(5, 0, 2))
        hotels = give_shares(initialize_hotels(), HotelName.TOWER, BOB_ID, 25)
        # Tower is sold out, Imperial at two tiles costs 400
        assert not can_buy_shares(300, hotels, board_tiles(tiles))
        assert can_buy_shares(400, hotels, board_tiles(tiles))
