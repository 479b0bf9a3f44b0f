"""Game action types - explicit user inputs separated from game state."""

from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, Field

from acquire.schemas.game_engine import HotelName, ResolvedTie, TilePosition


class AddPlayerAction(BaseModel):
    """A player joins the lobby."""

    action_type: Literal["ADD_PLAYER"] = "ADD_PLAYER"
    player: str


class RemovePlayerAction(BaseModel):
    """A player leaves the lobby. Accepted but currently has no effect."""

    action_type: Literal["REMOVE_PLAYER"] = "REMOVE_PLAYER"
    player: str


class StartGameAction(BaseModel):
    """Owner starts the game from the lobby."""

    action_type: Literal["START_GAME"] = "START_GAME"
    player: str


class PlayTileAction(BaseModel):
    """Current player places a tile from their hand."""

    action_type: Literal["PLAY_TILE"] = "PLAY_TILE"
    player: str
    tile: TilePosition


class BuySharesAction(BaseModel):
    """Current player buys up to three shares; an empty map passes."""

    action_type: Literal["BUY_SHARES"] = "BUY_SHARES"
    player: str
    shares: dict[HotelName, int] = Field(default_factory=dict)


class FoundHotelAction(BaseModel):
    """Current player picks the chain to found on the pending tiles."""

    action_type: Literal["FOUND_HOTEL"] = "FOUND_HOTEL"
    player: str
    hotel_name: HotelName = Field(
        ..., validation_alias=AliasChoices("hotel_name", "hotelName")
    )


class MergerShares(BaseModel):
    sell: int = Field(0, ge=0)
    trade: int = Field(0, ge=0)


class ResolveMergerAction(BaseModel):
    """Stockholder decides what to do with shares of the absorbed chain.

    Shares not sold or traded are kept. Omitting ``shares`` keeps everything.
    """

    action_type: Literal["RESOLVE_MERGER"] = "RESOLVE_MERGER"
    player: str
    shares: MergerShares | None = None


class BreakMergerTieAction(BaseModel):
    """Current player orders two chains that tied in size."""

    action_type: Literal["BREAK_MERGER_TIE"] = "BREAK_MERGER_TIE"
    player: str
    resolved_tie: ResolvedTie = Field(
        ..., validation_alias=AliasChoices("resolved_tie", "resolvedTie")
    )


# Union type for all game actions
GameAction = Annotated[
    AddPlayerAction
    | RemovePlayerAction
    | StartGameAction
    | PlayTileAction
    | BuySharesAction
    | FoundHotelAction
    | ResolveMergerAction
    | BreakMergerTieAction,
    Field(discriminator="action_type"),
]

_ACTION_MODELS: dict[str, type[BaseModel]] = {
    "ADD_PLAYER": AddPlayerAction,
    "REMOVE_PLAYER": RemovePlayerAction,
    "START_GAME": StartGameAction,
    "PLAY_TILE": PlayTileAction,
    "BUY_SHARES": BuySharesAction,
    "FOUND_HOTEL": FoundHotelAction,
    "RESOLVE_MERGER": ResolveMergerAction,
    "BREAK_MERGER_TIE": BreakMergerTieAction,
}


def build_action_from_payload(payload: dict) -> GameAction:
    """Build a typed action from a raw payload dict.

    Accepts the flat form ``{"action_type": ..., "player": ...}`` as well as
    the wire form ``{"type": ..., "payload": {...}}``.

    Args:
        payload: Dict describing the action.

    Returns:
        The appropriate GameAction subtype.

    Raises:
        ValueError: If the action type is missing or unknown.
        pydantic.ValidationError: If the fields don't match the action type.
    """
    if "type" in payload and "action_type" not in payload:
        payload = {"action_type": payload["type"], **(payload.get("payload") or {})}

    action_type = payload.get("action_type")
    model = _ACTION_MODELS.get(action_type) if isinstance(action_type, str) else None
    if model is None:
        raise ValueError(f"Unknown action type: {action_type}")
    return model.model_validate(payload)
