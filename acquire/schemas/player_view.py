from typing import Literal

from pydantic import BaseModel

from acquire.schemas.game_engine import (
    FoundHotelContext,
    GameErrorInfo,
    GamePhase,
    HotelName,
    MergeContext,
    MergerTieContext,
    Tile,
    TilePosition,
)

# Ordinal bucket used to obscure opponents' exact holdings
OrcCount = Literal["0", "1", "2", "many"]


class OpponentSummary(BaseModel):
    name: str
    money: OrcCount
    shares: dict[HotelName, OrcCount]


class HotelSummary(BaseModel):
    shares: int  # Remaining in the bank
    size: int


class PlayerView(BaseModel):
    """What a single player is allowed to see of the game."""

    game_id: str
    owner: str
    player_id: int | None
    money: int
    stocks: dict[HotelName, int]  # Only hotels this player holds shares in
    tiles: list[TilePosition]
    current_phase: GamePhase
    current_turn: int
    current_player: int
    pending_merge_player: int | None = None  # Next stockholder to act in a merger
    players: list[OpponentSummary]  # In player order
    hotels: dict[HotelName, HotelSummary]
    board: list[Tile]
    merger_tie_context: MergerTieContext | None = None
    merge_context: MergeContext | None = None
    found_hotel_context: FoundHotelContext | None = None
    error: GameErrorInfo | None = None
