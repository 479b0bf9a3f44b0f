"""Tile-placement classifier: what happens when a tile lands on the board."""

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import HotelName, Tile

from .hotels import unfounded_hotel_names
from .tiles import adjacent_board_tiles, board_tiles, loose_group, tile_label


class PlacementOutcome(str, Enum):
    SIMPLE = "simple"
    EXTEND = "extend"
    FOUND = "found"
    MERGE = "merge"


@dataclass
class PlacementAnalysis:
    """Classification of a placed tile against the current board.

    adjacent_hotels holds distinct chain names in the order first seen.
    loose_tiles are unassigned board tiles connected to the placed tile.
    """

    tile: Tile
    outcome: PlacementOutcome
    adjacent_hotels: list[HotelName] = field(default_factory=list)
    loose_tiles: list[Tile] = field(default_factory=list)
    available_hotels: list[HotelName] = field(default_factory=list)

    @property
    def chain_tiles(self) -> list[Tile]:
        """The placed tile followed by the loose tiles it connects."""
        return [self.tile, *self.loose_tiles]


def analyze_tile_placement(tile: Tile, tiles: list[Tile]) -> PlacementAnalysis:
    """Classify placing ``tile`` given every tile in the game.

    ``tiles`` is the state before placement; the tile itself is treated as
    the newcomer whatever location it currently holds.
    """
    neighbours = adjacent_board_tiles(tile, tiles)
    adjacent_hotels: list[HotelName] = []
    for neighbour in neighbours:
        if neighbour.hotel is not None and neighbour.hotel not in adjacent_hotels:
            adjacent_hotels.append(neighbour.hotel)
    loose = loose_group(tile, tiles)

    if len(adjacent_hotels) >= 2:
        outcome = PlacementOutcome.MERGE
        available: list[HotelName] = []
    elif len(adjacent_hotels) == 1:
        outcome = PlacementOutcome.EXTEND
        available = []
    elif loose:
        available = unfounded_hotel_names(board_tiles(tiles))
        # Every chain already on the board: the tiles just stay loose
        outcome = PlacementOutcome.FOUND if available else PlacementOutcome.SIMPLE
    else:
        outcome = PlacementOutcome.SIMPLE
        available = []

    logger.debug(
        "Placement analysis: tile=%s, outcome=%s, adjacent_hotels=%s, loose=%d",
        tile_label(tile),
        outcome.value,
        [h.value for h in adjacent_hotels],
        len(loose),
    )
    return PlacementAnalysis(
        tile=tile,
        outcome=outcome,
        adjacent_hotels=adjacent_hotels,
        loose_tiles=loose,
        available_hotels=available,
    )
