from enum import Enum
from typing import Literal

from pydantic import BaseModel, model_validator

# Board and game configuration
ROWS = 12
COLS = 9
TILES_PER_HAND = 6
MINIMUM_PLAYERS = 2
MAX_PLAYERS = 6
INITIAL_PLAYER_MONEY = 6000
MAX_SHARES_PER_TURN = 3
MAX_PLAYER_NAME_LENGTH = 20
SHARES_PER_HOTEL = 25
SAFE_HOTEL_SIZE = 11
END_GAME_HOTEL_SIZE = 41
CHARACTER_CODE_A = ord("A")

# Location tags are reserved so a player name can never collide with one
RESERVED_NAMES = ("bank", "bag", "board", "dead")

BANK = "bank"


# Game phases
class GamePhase(str, Enum):
    WAITING_FOR_PLAYERS = "WAITING_FOR_PLAYERS"
    PLAY_TILE = "PLAY_TILE"
    FOUND_HOTEL = "FOUND_HOTEL"
    RESOLVE_MERGER = "RESOLVE_MERGER"
    BREAK_MERGER_TIE = "BREAK_MERGER_TIE"
    BUY_SHARES = "BUY_SHARES"
    GAME_OVER = "GAME_OVER"


class EndGameRule(str, Enum):
    OBSERVED = "observed"
    STANDARD = "standard"


class TileLocation(str, Enum):
    BAG = "bag"
    BOARD = "board"
    DEAD = "dead"


class HotelName(str, Enum):
    TOWER = "Tower"
    LUXOR = "Luxor"
    WORLDWIDE = "Worldwide"
    AMERICAN = "American"
    FESTIVAL = "Festival"
    IMPERIAL = "Imperial"
    CONTINENTAL = "Continental"


class HotelTier(str, Enum):
    ECONOMY = "economy"
    STANDARD = "standard"
    LUXURY = "luxury"


HOTEL_TIERS: dict[HotelName, HotelTier] = {
    HotelName.TOWER: HotelTier.ECONOMY,
    HotelName.LUXOR: HotelTier.ECONOMY,
    HotelName.WORLDWIDE: HotelTier.STANDARD,
    HotelName.AMERICAN: HotelTier.STANDARD,
    HotelName.FESTIVAL: HotelTier.STANDARD,
    HotelName.IMPERIAL: HotelTier.LUXURY,
    HotelName.CONTINENTAL: HotelTier.LUXURY,
}


# Data models for game entities
class TilePosition(BaseModel):
    row: int
    col: int


class Tile(TilePosition):
    """A grid cell. Location is the bag, the board, dead, or a player id (in hand).

    Only board tiles carry a hotel; a board tile without one is loose.
    """

    location: TileLocation | int
    hotel: HotelName | None = None


class Share(BaseModel):
    location: Literal["bank"] | int = BANK


class Hotel(BaseModel):
    name: HotelName
    shares: list[Share]


class Player(BaseModel):
    id: int | None = None  # Assigned at game start by tile-draw ranking
    name: str
    money: int = INITIAL_PLAYER_MONEY
    first_tile: TilePosition | None = None


class ResolvedTie(BaseModel):
    survivor: HotelName
    merged: HotelName


class MergeContext(BaseModel):
    """Transient merger bookkeeping, alive only while a merger is in progress.

    original_hotels holds the chains still waiting to be absorbed (the fixed
    survivor, once known, is excluded). additional_tiles are the connector
    tiles that join the survivor on the first merge of a cascade.
    """

    original_hotels: list[HotelName]
    additional_tiles: list[Tile] = []
    surviving_hotel: HotelName | None = None
    merged_hotel: HotelName | None = None
    merged_hotel_size: int | None = None
    stockholder_ids: list[int] | None = None


class MergerTieContext(BaseModel):
    tied_hotels: list[HotelName]


class FoundHotelContext(BaseModel):
    available_hotels: list[HotelName]
    tiles: list[TilePosition]


class GameErrorInfo(BaseModel):
    code: str
    message: str


def phase_context_error(
    phase: GamePhase,
    merge_context: MergeContext | None,
    merger_tie_context: MergerTieContext | None,
    found_hotel_context: FoundHotelContext | None,
) -> str | None:
    """Describe how the transient contexts disagree with the phase, if they do."""
    if phase == GamePhase.FOUND_HOTEL:
        if found_hotel_context is None:
            return "FOUND_HOTEL phase requires a found hotel context"
        if merge_context is not None or merger_tie_context is not None:
            return "FOUND_HOTEL phase cannot carry merger contexts"
        return None

    if phase == GamePhase.RESOLVE_MERGER:
        if merge_context is None or not merge_context.stockholder_ids:
            return "RESOLVE_MERGER phase requires a merge context with stockholders"
        if merger_tie_context is not None or found_hotel_context is not None:
            return "RESOLVE_MERGER phase cannot carry tie or found hotel contexts"
        return None

    if phase == GamePhase.BREAK_MERGER_TIE:
        if merge_context is None or merger_tie_context is None:
            return "BREAK_MERGER_TIE phase requires merge and tie contexts"
        if found_hotel_context is not None:
            return "BREAK_MERGER_TIE phase cannot carry a found hotel context"
        return None

    if merge_context is not None or merger_tie_context is not None or found_hotel_context is not None:
        return f"{phase.value} phase cannot carry transient contexts"
    return None


# Game state for broadcasting and game flow
class GameState(BaseModel):
    """Aggregate root for a single game.

    Plain data only: tiles reference hotels by name and players by id, so the
    whole state round-trips through JSON. Every transition returns a new
    instance.
    """

    game_id: str
    owner: str
    current_phase: GamePhase = GamePhase.WAITING_FOR_PLAYERS
    current_turn: int = 0
    current_player: int = 0
    players: list[Player]
    hotels: list[Hotel]
    tiles: list[Tile]
    merge_context: MergeContext | None = None
    merger_tie_context: MergerTieContext | None = None
    found_hotel_context: FoundHotelContext | None = None
    error: GameErrorInfo | None = None
    end_game_rule: EndGameRule = EndGameRule.OBSERVED
    event_seq: int = 0  # Next sequence number for events (monotonically increasing)

    @model_validator(mode="after")
    def check_phase_context(self) -> "GameState":
        problem = phase_context_error(
            self.current_phase,
            self.merge_context,
            self.merger_tie_context,
            self.found_hotel_context,
        )
        if problem:
            raise ValueError(problem)
        return self
