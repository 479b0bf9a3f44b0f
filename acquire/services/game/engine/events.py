"""Game event types - emitted during state transitions.

Events describe what happened during a game action, enabling:
- Incremental client updates (only send what changed)
- Action replay / audit logging
- Reconnection state catch-up
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from acquire.schemas.game_engine import HotelName, TilePosition


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    seq: int = 0  # Sequence number assigned during processing


class PlayerJoined(GameEvent):
    """A player joined the lobby."""

    event_type: Literal["player_joined"] = "player_joined"
    player_name: str


class GameStarted(GameEvent):
    """Game has transitioned from WAITING_FOR_PLAYERS to PLAY_TILE."""

    event_type: Literal["game_started"] = "game_started"
    player_order: list[str] = Field(..., description="Player names in turn order")
    first_tiles: list[str] = Field(
        ..., description="Labels of the tiles drawn for turn order, same order"
    )


class TilePlaced(GameEvent):
    """A tile went from a player's hand to the board."""

    event_type: Literal["tile_placed"] = "tile_placed"
    player_id: int
    tile: TilePosition
    label: str
    outcome: str = Field(
        ..., description="Classifier result: 'simple', 'extend', 'found' or 'merge'"
    )


class HotelFounded(GameEvent):
    """A new chain was founded on loose tiles."""

    event_type: Literal["hotel_founded"] = "hotel_founded"
    player_id: int
    hotel: HotelName
    size: int
    founder_share: bool = Field(
        ..., description="True if the founder received a free share"
    )


class HotelExtended(GameEvent):
    """An existing chain grew by the placed tile and any loose tiles it joined."""

    event_type: Literal["hotel_extended"] = "hotel_extended"
    hotel: HotelName
    added_tiles: int
    size: int


class MergerTieRaised(GameEvent):
    """Chains tied in size; the current player has to order them."""

    event_type: Literal["merger_tie_raised"] = "merger_tie_raised"
    player_id: int
    tied_hotels: list[HotelName]


class MergerStarted(GameEvent):
    """A chain was absorbed and its stockholders now resolve their shares."""

    event_type: Literal["merger_started"] = "merger_started"
    surviving_hotel: HotelName
    merged_hotel: HotelName
    merged_hotel_size: int
    stockholder_ids: list[int]


class BonusPaid(GameEvent):
    """Majority/minority bonus paid to a stockholder."""

    event_type: Literal["bonus_paid"] = "bonus_paid"
    player_id: int
    hotel: HotelName
    amount: int


class SharesResolved(GameEvent):
    """A stockholder sold, traded or kept shares of an absorbed chain."""

    event_type: Literal["shares_resolved"] = "shares_resolved"
    player_id: int
    merged_hotel: HotelName
    surviving_hotel: HotelName
    sold: int
    traded: int
    kept: int
    proceeds: int


class SharesPurchased(GameEvent):
    """The current player bought shares from the bank."""

    event_type: Literal["shares_purchased"] = "shares_purchased"
    player_id: int
    shares: dict[HotelName, int]
    cost: int


class TileDiscarded(GameEvent):
    """A tile in a hand became unplayable and was removed from play."""

    event_type: Literal["tile_discarded"] = "tile_discarded"
    player_id: int
    tile: TilePosition
    label: str


class TurnEnded(GameEvent):
    """A player's turn has ended."""

    event_type: Literal["turn_ended"] = "turn_ended"
    player_id: int
    next_player_id: int
    turn_number: int = Field(..., description="Turn number after the rotation")


class GameEnded(GameEvent):
    """The game has finished and all shares were settled."""

    event_type: Literal["game_ended"] = "game_ended"
    standings: list[str] = Field(..., description="Player names by final money, richest first")
    final_money: dict[str, int]


# Union of all event types for type checking
AnyGameEvent = Annotated[
    PlayerJoined
    | GameStarted
    | TilePlaced
    | HotelFounded
    | HotelExtended
    | MergerTieRaised
    | MergerStarted
    | BonusPaid
    | SharesResolved
    | SharesPurchased
    | TileDiscarded
    | TurnEnded
    | GameEnded,
    Field(discriminator="event_type"),
]
