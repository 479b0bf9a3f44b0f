"""Shared fixtures for game engine tests."""

import random

import pytest

from acquire.schemas.game_engine import (
    BANK,
    SHARES_PER_HOTEL,
    EndGameRule,
    GamePhase,
    GameState,
    Hotel,
    HotelName,
    Player,
    Share,
    Tile,
    TileLocation,
)
from acquire.services.game.engine.hotels import initialize_hotels
from acquire.services.game.engine.tiles import initialize_tiles

# Fixed names and ids for deterministic testing
GAME_ID = "game-1"
ALICE = "alice"
BOB = "bob"
CAROL = "carol"
ALICE_ID = 0
BOB_ID = 1
CAROL_ID = 2


def create_player(player_id: int | None, name: str, money: int = 6000) -> Player:
    """Helper to create a player."""
    return Player(id=player_id, name=name, money=money)


def row_run(row: int, col_start: int, length: int) -> list[tuple[int, int]]:
    """Positions along one row, left to right."""
    return [(row, col) for col in range(col_start, col_start + length)]


def _set_tiles(tiles: list[Tile], positions: list[tuple[int, int]], **update) -> list[Tile]:
    targets = set(positions)
    return [
        tile.model_copy(update=update) if (tile.row, tile.col) in targets else tile
        for tile in tiles
    ]


def place_hotel(tiles: list[Tile], hotel: HotelName, positions: list[tuple[int, int]]) -> list[Tile]:
    """Put tiles on the board tagged with a chain."""
    return _set_tiles(tiles, positions, location=TileLocation.BOARD, hotel=hotel)


def place_loose(tiles: list[Tile], positions: list[tuple[int, int]]) -> list[Tile]:
    """Put tiles on the board without a chain."""
    return _set_tiles(tiles, positions, location=TileLocation.BOARD, hotel=None)


def deal_tiles(tiles: list[Tile], player_id: int, positions: list[tuple[int, int]]) -> list[Tile]:
    """Move tiles into a player's hand."""
    return _set_tiles(tiles, positions, location=player_id, hotel=None)


def give_shares(hotels: list[Hotel], hotel: HotelName, player_id: int, count: int) -> list[Hotel]:
    """Hand ``count`` bank shares of a chain to a player."""
    updated = []
    for h in hotels:
        if h.name != hotel:
            updated.append(h)
            continue
        given = 0
        shares = []
        for share in h.shares:
            if share.location == BANK and given < count:
                shares.append(Share(location=player_id))
                given += 1
            else:
                shares.append(share)
        updated.append(h.model_copy(update={"shares": shares}))
    return updated


def build_state(
    players: list[Player] | None = None,
    tiles: list[Tile] | None = None,
    hotels: list[Hotel] | None = None,
    phase: GamePhase = GamePhase.PLAY_TILE,
    current_player: int = ALICE_ID,
    current_turn: int = 1,
    end_game_rule: EndGameRule = EndGameRule.OBSERVED,
    **kwargs,
) -> GameState:
    """Helper to create a game state mid-game."""
    if players is None:
        players = [create_player(ALICE_ID, ALICE), create_player(BOB_ID, BOB)]
    return GameState(
        game_id=GAME_ID,
        owner=ALICE,
        current_phase=phase,
        current_turn=current_turn,
        current_player=current_player,
        players=players,
        hotels=hotels if hotels is not None else initialize_hotels(),
        tiles=tiles if tiles is not None else initialize_tiles(),
        end_game_rule=end_game_rule,
        **kwargs,
    )


def assert_conserved(state: GameState) -> None:
    """Every grid cell appears exactly once and every chain has 25 shares."""
    positions = [(tile.row, tile.col) for tile in state.tiles]
    assert len(positions) == 108
    assert len(set(positions)) == 108
    for hotel in state.hotels:
        assert len(hotel.shares) == SHARES_PER_HOTEL
    for tile in state.tiles:
        if tile.hotel is not None:
            assert tile.location == TileLocation.BOARD


@pytest.fixture
def rng() -> random.Random:
    """Seeded randomness so draws are repeatable."""
    return random.Random(1234)


@pytest.fixture
def lobby_state() -> GameState:
    """Two players waiting, alice owns the game."""
    return build_state(
        players=[create_player(None, ALICE), create_player(None, BOB)],
        phase=GamePhase.WAITING_FOR_PLAYERS,
        current_turn=0,
    )


@pytest.fixture
def solo_lobby_state() -> GameState:
    """Only the owner has joined."""
    return build_state(
        players=[create_player(None, ALICE)],
        phase=GamePhase.WAITING_FOR_PLAYERS,
        current_turn=0,
    )


@pytest.fixture
def two_player_game() -> GameState:
    """Alice to play, empty board, each player holding two tiles."""
    tiles = initialize_tiles()
    tiles = deal_tiles(tiles, ALICE_ID, [(5, 5), (8, 8)])
    tiles = deal_tiles(tiles, BOB_ID, [(11, 0), (11, 8)])
    return build_state(tiles=tiles)
