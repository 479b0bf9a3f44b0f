"""Turn and phase orchestration.

Each process_* handler takes a validated action, returns a ProcessResult with
the replacement state and the events it produced, and raises GameError when a
rule only shows up mid-processing (safe merge, bad sell/trade, missing
context). The entry point in process.py turns those into failures.
"""

import logging
import random

logger = logging.getLogger(__name__)

from acquire.schemas.game_engine import (
    END_GAME_HOTEL_SIZE,
    SAFE_HOTEL_SIZE,
    TILES_PER_HAND,
    EndGameRule,
    FoundHotelContext,
    GamePhase,
    GameState,
    HotelName,
    MergeContext,
    MergerTieContext,
    Player,
    ResolvedTie,
    Tile,
    TileLocation,
    TilePosition,
)

from .actions import MergerShares
from .errors import ProcessingError
from .events import (
    AnyGameEvent,
    GameEnded,
    GameStarted,
    HotelExtended,
    HotelFounded,
    MergerStarted,
    MergerTieRaised,
    PlayerJoined,
    SharesPurchased,
    TileDiscarded,
    TilePlaced,
    TurnEnded,
)
from .hotels import (
    active_hotel_names,
    assign_shares_to_player,
    can_buy_shares,
    get_hotel_by_name,
    hotel_size,
    remaining_shares,
    share_price,
)
from .mergers import merge_hotels
from .placement import PlacementOutcome, analyze_tile_placement
from .settlement import pay_bonuses, resolve_shares, settle_final_accounts, stockholder_queue
from .tiles import (
    bag_tiles,
    board_tiles,
    draw_tiles,
    get_board_tile,
    get_player_tiles,
    get_tile,
    is_dead,
    shuffle_tiles,
    tile_label,
    tile_sort_key,
    update_tiles,
)
from .validation import ProcessResult


def _replace_player(players: list[Player], updated: Player) -> list[Player]:
    return [updated if p.id == updated.id else p for p in players]


def process_add_player(state: GameState, name: str) -> ProcessResult:
    """Append a lobby player; ids are handed out at game start."""
    logger.info("Adding player: game=%s, player=%s", state.game_id, name)
    new_state = state.model_copy(update={"players": [*state.players, Player(name=name)]})
    return ProcessResult.ok(new_state, [PlayerJoined(player_name=name)])


def process_start_game(state: GameState, rng: random.Random | None = None) -> ProcessResult:
    """Draw turn-order tiles onto the board, number the players, deal hands.

    The player whose drawn tile has the lowest column (then lowest row) goes
    first.
    """
    logger.info("Starting game %s with %d players", state.game_id, len(state.players))

    shuffled = shuffle_tiles(bag_tiles(state.tiles), rng)
    first_tiles = [
        tile.model_copy(update={"location": TileLocation.BOARD})
        for tile in shuffled[: len(state.players)]
    ]
    ranked = sorted(zip(state.players, first_tiles), key=lambda pair: tile_sort_key(pair[1]))

    players = [
        player.model_copy(
            update={"id": index, "first_tile": TilePosition(row=tile.row, col=tile.col)}
        )
        for index, (player, tile) in enumerate(ranked)
    ]
    tiles = update_tiles(state.tiles, first_tiles)
    board = board_tiles(tiles)

    for player in players:
        draw = draw_tiles(bag_tiles(tiles), player.id, board, TILES_PER_HAND, rng)
        tiles = update_tiles(tiles, [*draw.drawn_tiles, *draw.dead_tiles])

    logger.debug(
        "Turn order: %s",
        [(p.name, tile_label(tile)) for p, (_, tile) in zip(players, ranked)],
    )
    new_state = state.model_copy(
        update={
            "players": players,
            "tiles": tiles,
            "current_phase": GamePhase.PLAY_TILE,
            "current_player": 0,
            "current_turn": 1,
        }
    )
    events: list[AnyGameEvent] = [
        GameStarted(
            player_order=[p.name for p in players],
            first_tiles=[tile_label(tile) for _, tile in ranked],
        )
    ]
    return ProcessResult.ok(new_state, events)


def process_play_tile(
    state: GameState,
    player: Player,
    position: TilePosition,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Put a tile from the player's hand on the board and route on what it touches."""
    tile = get_tile(state.tiles, position.row, position.col)
    if tile is None:
        raise ProcessingError(f"Tile not found: {tile_label(position)}")

    placed = tile.model_copy(update={"location": TileLocation.BOARD, "hotel": None})
    analysis = analyze_tile_placement(placed, state.tiles)
    tiles = update_tiles(state.tiles, [placed])
    events: list[AnyGameEvent] = [
        TilePlaced(
            player_id=player.id,
            tile=position,
            label=tile_label(placed),
            outcome=analysis.outcome.value,
        )
    ]
    logger.info(
        "Tile played: player=%s, tile=%s, outcome=%s",
        player.name,
        tile_label(placed),
        analysis.outcome.value,
    )

    if analysis.outcome == PlacementOutcome.MERGE:
        context = MergeContext(
            original_hotels=analysis.adjacent_hotels,
            additional_tiles=analysis.chain_tiles,
        )
        return run_merger(state.model_copy(update={"tiles": tiles}), context, None, events)

    if analysis.outcome == PlacementOutcome.FOUND:
        new_state = state.model_copy(
            update={
                "tiles": tiles,
                "current_phase": GamePhase.FOUND_HOTEL,
                "found_hotel_context": FoundHotelContext(
                    available_hotels=analysis.available_hotels,
                    tiles=[TilePosition(row=t.row, col=t.col) for t in analysis.chain_tiles],
                ),
            }
        )
        return ProcessResult.ok(new_state, events)

    if analysis.outcome == PlacementOutcome.EXTEND:
        hotel = analysis.adjacent_hotels[0]
        grown = [t.model_copy(update={"hotel": hotel}) for t in analysis.chain_tiles]
        tiles = update_tiles(tiles, grown)
        events.append(
            HotelExtended(
                hotel=hotel,
                added_tiles=len(grown),
                size=hotel_size(hotel, board_tiles(tiles)),
            )
        )

    return proceed_to_buy_shares(state.model_copy(update={"tiles": tiles}), events, rng)


def process_found_hotel(
    state: GameState,
    player: Player,
    hotel_name: HotelName,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Tag the pending tiles with the chosen chain; the founder gets a free share if one is left."""
    context = state.found_hotel_context
    if context is None:
        raise ProcessingError(f"Can't found hotel {hotel_name.value}, context missing in state")
    if len(context.tiles) <= 1:
        raise ProcessingError(f"Can't found hotel {hotel_name.value}, need at least two tiles")

    board = board_tiles(state.tiles)
    founded = [
        get_board_tile(board, pos.row, pos.col).model_copy(update={"hotel": hotel_name})
        for pos in context.tiles
    ]
    tiles = update_tiles(state.tiles, founded)

    hotel = get_hotel_by_name(state.hotels, hotel_name)
    founder_share = remaining_shares(hotel) > 0
    hotels = state.hotels
    if founder_share:
        updated = hotel.model_copy(
            update={"shares": assign_shares_to_player(hotel.shares, player.id, 1)}
        )
        hotels = [updated if h.name == hotel_name else h for h in state.hotels]

    logger.info(
        "Hotel founded: hotel=%s, player=%s, size=%d, founder_share=%s",
        hotel_name.value,
        player.name,
        len(founded),
        founder_share,
    )
    events: list[AnyGameEvent] = [
        HotelFounded(
            player_id=player.id,
            hotel=hotel_name,
            size=len(founded),
            founder_share=founder_share,
        )
    ]
    new_state = state.model_copy(update={"tiles": tiles, "hotels": hotels})
    return proceed_to_buy_shares(new_state, events, rng)


def run_merger(
    state: GameState,
    context: MergeContext,
    tie_resolution: ResolvedTie | None,
    events: list[AnyGameEvent],
) -> ProcessResult:
    """Run the next merge pass and set up either a tie decision or stockholder settlement."""
    result = merge_hotels(context, board_tiles(state.tiles), tie_resolution)

    if result.needs_merge_order:
        events.append(
            MergerTieRaised(player_id=state.current_player, tied_hotels=result.tied_hotels)
        )
        logger.info("Merger tie: tied=%s", [h.value for h in result.tied_hotels])
        new_state = state.model_copy(
            update={
                "current_phase": GamePhase.BREAK_MERGER_TIE,
                "merge_context": result.merge_context,
                "merger_tie_context": MergerTieContext(tied_hotels=result.tied_hotels),
                "found_hotel_context": None,
            }
        )
        return ProcessResult.ok(new_state, events)

    survivor = result.surviving_hotel
    merged = result.merged_hotel
    queue = stockholder_queue(get_hotel_by_name(state.hotels, merged))
    bonus = pay_bonuses(state.players, state.hotels, merged, result.merged_hotel_size)

    events.append(
        MergerStarted(
            surviving_hotel=survivor,
            merged_hotel=merged,
            merged_hotel_size=result.merged_hotel_size,
            stockholder_ids=queue,
        )
    )
    events.extend(bonus.events)

    new_state = state.model_copy(
        update={
            "tiles": update_tiles(state.tiles, result.survivor_tiles),
            "players": bonus.players,
            "hotels": bonus.hotels,
            "current_phase": GamePhase.RESOLVE_MERGER,
            "merge_context": MergeContext(
                original_hotels=result.remaining_hotels,
                additional_tiles=[],
                surviving_hotel=survivor,
                merged_hotel=merged,
                merged_hotel_size=result.merged_hotel_size,
                stockholder_ids=queue,
            ),
            "merger_tie_context": None,
            "found_hotel_context": None,
        }
    )
    return ProcessResult.ok(new_state, events)


def process_break_merger_tie(state: GameState, resolved_tie: ResolvedTie) -> ProcessResult:
    if state.merge_context is None:
        raise ProcessingError("Invalid merger context, couldn't find hotels")
    logger.info(
        "Merger tie broken: survivor=%s, merged=%s",
        resolved_tie.survivor.value,
        resolved_tie.merged.value,
    )
    return run_merger(state, state.merge_context, resolved_tie, [])


def process_resolve_merger(
    state: GameState,
    player: Player,
    shares: MergerShares | None,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Apply the head stockholder's sell/trade/keep decision and move the merger along."""
    context = state.merge_context
    if (
        context is None
        or context.surviving_hotel is None
        or context.merged_hotel is None
        or context.merged_hotel_size is None
        or not context.stockholder_ids
    ):
        raise ProcessingError("Invalid hotel merger context")

    decision = shares or MergerShares()
    settled = resolve_shares(
        state.players,
        state.hotels,
        player.id,
        context.merged_hotel,
        context.surviving_hotel,
        context.merged_hotel_size,
        sell=decision.sell,
        trade=decision.trade,
    )
    events: list[AnyGameEvent] = list(settled.events)
    new_state = state.model_copy(update={"players": settled.players, "hotels": settled.hotels})

    queue = context.stockholder_ids[1:]
    if queue:
        new_state = new_state.model_copy(
            update={"merge_context": context.model_copy(update={"stockholder_ids": queue})}
        )
        return ProcessResult.ok(new_state, events)

    if context.original_hotels:
        logger.debug(
            "Continuing merger cascade: survivor=%s, remaining=%s",
            context.surviving_hotel.value,
            [h.value for h in context.original_hotels],
        )
        cascade = MergeContext(
            original_hotels=context.original_hotels,
            surviving_hotel=context.surviving_hotel,
        )
        return run_merger(new_state, cascade, None, events)

    return proceed_to_buy_shares(new_state, events, rng)


def proceed_to_buy_shares(
    state: GameState,
    events: list[AnyGameEvent],
    rng: random.Random | None = None,
) -> ProcessResult:
    """Stop for a purchase, or end the turn when the mover can't afford any share."""
    new_state = state.model_copy(
        update={
            "current_phase": GamePhase.BUY_SHARES,
            "merge_context": None,
            "merger_tie_context": None,
            "found_hotel_context": None,
        }
    )
    mover = state.players[state.current_player]
    if not can_buy_shares(mover.money, state.hotels, board_tiles(state.tiles)):
        logger.debug("Skipping share purchase: player=%s, money=%d", mover.name, mover.money)
        return advance_turn(new_state, mover.id, events, rng)
    return ProcessResult.ok(new_state, events)


def process_buy_shares(
    state: GameState,
    player: Player,
    shares: dict[HotelName, int],
    rng: random.Random | None = None,
) -> ProcessResult:
    """Buy the requested shares at current prices, then end the turn."""
    board = board_tiles(state.tiles)
    hotels = state.hotels
    cost = 0
    for name, count in shares.items():
        hotel = get_hotel_by_name(hotels, name)
        cost += share_price(name, board) * count
        updated = hotel.model_copy(
            update={"shares": assign_shares_to_player(hotel.shares, player.id, count)}
        )
        hotels = [updated if h.name == name else h for h in hotels]

    events: list[AnyGameEvent] = []
    players = state.players
    if shares:
        players = _replace_player(players, player.model_copy(update={"money": player.money - cost}))
        events.append(SharesPurchased(player_id=player.id, shares=dict(shares), cost=cost))
        logger.info(
            "Shares purchased: player=%s, shares=%s, cost=%d",
            player.name,
            {name.value: count for name, count in shares.items()},
            cost,
        )

    new_state = state.model_copy(update={"players": players, "hotels": hotels})
    return advance_turn(new_state, player.id, events, rng)


def replace_dead_tiles(
    tiles: list[Tile], players: list[Player], rng: random.Random | None = None
) -> tuple[list[Tile], list[AnyGameEvent]]:
    """Discard every hand tile that can no longer be played and draw a replacement."""
    board = board_tiles(tiles)
    events: list[AnyGameEvent] = []
    for player in players:
        for tile in get_player_tiles(player.id, tiles):
            if not is_dead(tile, board):
                continue
            discarded = tile.model_copy(update={"location": TileLocation.DEAD})
            draw = draw_tiles(bag_tiles(tiles), player.id, board, 1, rng)
            tiles = update_tiles(tiles, [discarded, *draw.drawn_tiles, *draw.dead_tiles])
            events.append(
                TileDiscarded(
                    player_id=player.id,
                    tile=TilePosition(row=tile.row, col=tile.col),
                    label=tile_label(tile),
                )
            )
            logger.info("Dead tile discarded: player=%s, tile=%s", player.name, tile_label(tile))
    return tiles, events


def advance_turn(
    state: GameState,
    mover_id: int,
    events: list[AnyGameEvent],
    rng: random.Random | None = None,
) -> ProcessResult:
    """Refill the mover's hand, clear dead tiles, rotate the turn, check for game end.

    Players with an empty hand are passed over. When nobody holds a tile the
    game ends.
    """
    tiles = state.tiles
    draw = draw_tiles(bag_tiles(tiles), mover_id, board_tiles(tiles), 1, rng)
    tiles = update_tiles(tiles, [*draw.drawn_tiles, *draw.dead_tiles])
    tiles, discard_events = replace_dead_tiles(tiles, state.players, rng)
    events.extend(discard_events)

    player_count = len(state.players)
    next_player = mover_id
    next_turn = state.current_turn
    for _ in range(player_count):
        next_player = (next_player + 1) % player_count
        if next_player == 0:
            next_turn += 1
        if get_player_tiles(next_player, tiles):
            break
        logger.info("Skipping player with no tiles: player_id=%d", next_player)
    else:
        logger.info("No player holds a tile: game=%s", state.game_id)
        ended_state = state.model_copy(
            update={
                "tiles": tiles,
                "merge_context": None,
                "merger_tie_context": None,
                "found_hotel_context": None,
            }
        )
        return end_game(ended_state, events)

    events.append(TurnEnded(player_id=mover_id, next_player_id=next_player, turn_number=next_turn))

    new_state = state.model_copy(
        update={
            "tiles": tiles,
            "current_player": next_player,
            "current_turn": next_turn,
            "current_phase": GamePhase.PLAY_TILE,
            "merge_context": None,
            "merger_tie_context": None,
            "found_hotel_context": None,
        }
    )
    logger.debug("Turn advanced: next_player=%d, turn=%d", next_player, next_turn)

    if is_game_over(board_tiles(tiles), state.end_game_rule):
        return end_game(new_state, events)
    return ProcessResult.ok(new_state, events)


def is_game_over(board: list[Tile], rule: EndGameRule = EndGameRule.OBSERVED) -> bool:
    """End-of-game predicate over the active chains.

    observed: any chain is safe, or every active chain has reached the
    end-game size. standard: any chain has reached the end-game size, or
    every active chain is safe. No active chain never ends the game.
    """
    sizes = [hotel_size(name, board) for name in active_hotel_names(board)]
    if not sizes:
        return False
    if rule == EndGameRule.STANDARD:
        return any(s >= END_GAME_HOTEL_SIZE for s in sizes) or all(s >= SAFE_HOTEL_SIZE for s in sizes)
    return any(s >= SAFE_HOTEL_SIZE for s in sizes) or all(s >= END_GAME_HOTEL_SIZE for s in sizes)


def end_game(state: GameState, events: list[AnyGameEvent]) -> ProcessResult:
    """Pay final bonuses, sell every share back, and finish the game."""
    settled = settle_final_accounts(state.players, state.hotels, board_tiles(state.tiles))
    events.extend(settled.events)

    standings = sorted(settled.players, key=lambda p: p.money, reverse=True)
    events.append(
        GameEnded(
            standings=[p.name for p in standings],
            final_money={p.name: p.money for p in standings},
        )
    )
    logger.info(
        "Game over: game=%s, standings=%s",
        state.game_id,
        [(p.name, p.money) for p in standings],
    )
    new_state = state.model_copy(
        update={
            "players": settled.players,
            "hotels": settled.hotels,
            "current_phase": GamePhase.GAME_OVER,
        }
    )
    return ProcessResult.ok(new_state, events)
