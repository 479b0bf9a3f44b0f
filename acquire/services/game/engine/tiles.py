"""Board and tile store: grid geometry, tile locations, dead tiles, drawing."""

import logging
import random
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import (
    CHARACTER_CODE_A,
    COLS,
    ROWS,
    Tile,
    TileLocation,
    TilePosition,
)

from .errors import ProcessingError
from .hotels import hotel_safe


@dataclass
class DrawResult:
    """Outcome of drawing from the bag. Every input tile lands in exactly one list."""

    drawn_tiles: list[Tile] = field(default_factory=list)
    dead_tiles: list[Tile] = field(default_factory=list)
    remaining_tiles: list[Tile] = field(default_factory=list)


def initialize_tiles(rows: int = ROWS, cols: int = COLS) -> list[Tile]:
    """Create every grid cell, all in the bag."""
    return [
        Tile(row=index // cols, col=index % cols, location=TileLocation.BAG)
        for index in range(rows * cols)
    ]


def tile_label(tile: TilePosition) -> str:
    """Human readable label, column number then row letter (e.g. ``1A``)."""
    return f"{tile.col + 1}{chr(tile.row + CHARACTER_CODE_A)}"


def tile_sort_key(tile: TilePosition) -> tuple[int, int]:
    """Order used to rank the opening draw: lowest column, then lowest row."""
    return (tile.col, tile.row)


def adjacent_positions(row: int, col: int) -> list[tuple[int, int]]:
    """Orthogonal neighbours inside the grid (2 in a corner, 4 in the middle)."""
    candidates = [(row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)]
    return [(r, c) for r, c in candidates if 0 <= r < ROWS and 0 <= c < COLS]


def board_tiles(tiles: list[Tile]) -> list[Tile]:
    """Return only the tiles on the board."""
    return [tile for tile in tiles if tile.location == TileLocation.BOARD]


def bag_tiles(tiles: list[Tile]) -> list[Tile]:
    return [tile for tile in tiles if tile.location == TileLocation.BAG]


def get_tile(tiles: list[Tile], row: int, col: int) -> Tile | None:
    return next((tile for tile in tiles if tile.row == row and tile.col == col), None)


def get_board_tile(board: list[Tile], row: int, col: int) -> Tile:
    tile = get_tile(board, row, col)
    if tile is None or tile.location != TileLocation.BOARD:
        raise ProcessingError(f"Tile not on board: {tile_label(TilePosition(row=row, col=col))}")
    return tile


def get_player_tiles(player_id: int, tiles: list[Tile]) -> list[Tile]:
    return [tile for tile in tiles if tile.location == player_id]


def update_tiles(current_tiles: list[Tile], tiles_to_update: list[Tile]) -> list[Tile]:
    """Return a new tile list with matching positions replaced."""
    updates = {(tile.row, tile.col): tile for tile in tiles_to_update}
    return [updates.get((tile.row, tile.col), tile) for tile in current_tiles]


def adjacent_board_tiles(tile: TilePosition, tiles: list[Tile]) -> list[Tile]:
    """Neighbouring tiles that are already on the board."""
    neighbours = []
    for r, c in adjacent_positions(tile.row, tile.col):
        neighbour = get_tile(tiles, r, c)
        if neighbour is not None and neighbour.location == TileLocation.BOARD:
            neighbours.append(neighbour)
    return neighbours


def loose_group(tile: TilePosition, tiles: list[Tile]) -> list[Tile]:
    """All loose board tiles connected to ``tile`` (not including ``tile`` itself).

    Walks outward through board tiles that carry no hotel.
    """
    seen = {(tile.row, tile.col)}
    frontier = [tile]
    group: list[Tile] = []
    while frontier:
        current = frontier.pop()
        for neighbour in adjacent_board_tiles(current, tiles):
            key = (neighbour.row, neighbour.col)
            if key in seen or neighbour.hotel is not None:
                continue
            seen.add(key)
            group.append(neighbour)
            frontier.append(neighbour)
    return sorted(group, key=lambda t: (t.row, t.col))


def is_dead(tile: Tile, board: list[Tile]) -> bool:
    """A tile is dead if placing it would join two or more safe hotels.

    Raises:
        ProcessingError: If the tile is already on the board.
    """
    if tile.location == TileLocation.BOARD:
        raise ProcessingError(f"Invalid check for dead tile {tile_label(tile)}")

    safe_hotels = {
        neighbour.hotel
        for neighbour in adjacent_board_tiles(tile, board)
        if neighbour.hotel is not None and hotel_safe(neighbour.hotel, board)
    }
    return len(safe_hotels) >= 2


def shuffle_tiles(tiles: list[Tile], rng: random.Random | None = None) -> list[Tile]:
    """Return a shuffled copy; pass ``rng`` for a reproducible order."""
    shuffled = list(tiles)
    (rng or random).shuffle(shuffled)
    return shuffled


def draw_tiles(
    available_tiles: list[Tile],
    player_id: int,
    board: list[Tile],
    count: int,
    rng: random.Random | None = None,
) -> DrawResult:
    """Draw up to ``count`` playable tiles into a player's hand.

    Dead tiles pulled from the bag are marked dead and don't count toward
    ``count``; drawing continues until enough live tiles are found or the
    bag runs out.
    """
    remaining = shuffle_tiles(available_tiles, rng)
    result = DrawResult()

    while len(result.drawn_tiles) < count and remaining:
        tile = remaining.pop(0)
        if is_dead(tile, board):
            logger.debug("Drew dead tile %s, discarding", tile_label(tile))
            result.dead_tiles.append(tile.model_copy(update={"location": TileLocation.DEAD}))
        else:
            result.drawn_tiles.append(tile.model_copy(update={"location": player_id}))

    result.remaining_tiles = remaining
    logger.debug(
        "Draw for player=%s: drawn=%d, dead=%d, left_in_bag=%d",
        player_id,
        len(result.drawn_tiles),
        len(result.dead_tiles),
        len(remaining),
    )
    return result
