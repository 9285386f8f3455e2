"""
Great people.

Each great person can be earned by only one tribe per game; the earned flag
lives in GameState.great_people_earned. A tribe qualifies by reaching the
definition's threshold, either a total kept on Player.great_people_progress
or a count taken from the live state, and then wins a coin flip at the end
of its turn. A great person appears as a legendary civilian unit at the
capital and is consumed by its one-time action.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from tribesim.content_loader import (
    ACCUMULATED_STATS,
    BorderExpansion,
    GreatPersonDefinition,
    GreatPersonEffect,
    InstantGold,
    YieldBuff,
    get_great_people_loader,
    get_great_person_definition,
)
from tribesim.data_models import (
    ActiveBuff,
    CheckResult,
    GameState,
    HexCoord,
    Rarity,
    TribeId,
    UnitId,
)
from tribesim.game_state.settlements import get_capital
from tribesim.hex_grid import hex_distance, hex_neighbors, hex_range
from tribesim.rng import RngFn
from tribesim.units import add_unit, create_unit, remove_unit
from tribesim.units.unit_engine import IMPASSABLE_TERRAIN

logger = logging.getLogger(__name__)

GREAT_PERSON_UNIT_TYPE = "great_person"
BORDER_SEARCH_RADIUS = 5
SPAWN_CHANCE = 0.5


def can_earn_great_person(state: GameState, tribe_id: TribeId, gp_id: str) -> CheckResult:
    if get_great_person_definition(gp_id) is None:
        return CheckResult.deny("Unknown great person")
    if gp_id in state.great_people_earned:
        return CheckResult.deny("Great person already earned")
    if get_capital(state, tribe_id) is None:
        return CheckResult.deny("No capital to spawn at")
    return CheckResult.ok()


def spawn_great_person(state: GameState, tribe_id: TribeId, gp_id: str) -> Optional[GameState]:
    """Award ``gp_id`` to ``tribe_id`` and place the unit at its capital."""
    if not can_earn_great_person(state, tribe_id, gp_id):
        return None

    capital = get_capital(state, tribe_id)
    unit_id, new_state = state.allocate_id("great_person")
    unit = replace(
        create_unit(
            GREAT_PERSON_UNIT_TYPE,
            tribe_id,
            capital.position,
            rarity=Rarity.LEGENDARY,
            unit_id=UnitId(unit_id),
        ),
        great_person_id=gp_id,
    )
    new_state = add_unit(new_state, unit)
    logger.info(f"{tribe_id} earned great person {gp_id}")
    return replace(new_state, great_people_earned={**new_state.great_people_earned, gp_id: tribe_id})


# =============================================================================
# PROGRESS
# =============================================================================


def add_great_people_points(state: GameState, tribe_id: TribeId, stat: str, amount: int) -> GameState:
    """
    Add ``amount`` to one of the tribe's accumulated totals.

    Raises:
        ValueError: For a stat that is counted from live state instead
    """
    if stat not in ACCUMULATED_STATS:
        raise ValueError(f"Not an accumulated stat: {stat}")
    player = state.get_player(tribe_id)
    if player is None or amount <= 0:
        return state
    progress = player.great_people_progress
    progress = replace(progress, **{stat: getattr(progress, stat) + amount})
    return state.with_player(replace(player, great_people_progress=progress))


def count_trade_routes(state: GameState, tribe_id: TribeId) -> int:
    """Active routes that start in one of the tribe's settlements."""
    count = 0
    for route in state.trade_routes:
        origin = state.settlements.get(route.origin)
        if route.active and origin is not None and origin.owner == tribe_id:
            count += 1
    return count


def get_great_people_stat(state: GameState, tribe_id: TribeId, stat: str) -> int:
    player = state.get_player(tribe_id)
    if player is None:
        return 0
    if stat == "trade_routes":
        return count_trade_routes(state, tribe_id)
    if stat == "kills":
        return player.kill_count
    return getattr(player.great_people_progress, stat)


def meets_threshold(state: GameState, tribe_id: TribeId, definition: GreatPersonDefinition) -> bool:
    threshold = definition.threshold
    if threshold is None:
        return False
    return get_great_people_stat(state, tribe_id, threshold.stat) >= threshold.amount


def check_great_people(state: GameState, tribe_id: TribeId, rng: RngFn) -> GameState:
    """
    End-of-turn check: spawn at most one great person the tribe qualifies for.

    Definitions are tried in file order. Each qualifying one that the tribe
    could still earn costs one rng draw and spawns when the draw is at or
    below SPAWN_CHANCE.
    """
    for definition in get_great_people_loader().all_definitions().values():
        if not meets_threshold(state, tribe_id, definition):
            continue
        if not can_earn_great_person(state, tribe_id, definition.id):
            continue
        if rng() > SPAWN_CHANCE:
            continue
        return spawn_great_person(state, tribe_id, definition.id)
    return state


def _expand_borders(state: GameState, tribe_id: TribeId, position: HexCoord, tiles: int) -> GameState:
    new_state = state
    nearby = set(hex_range(position, BORDER_SEARCH_RADIUS))

    for _ in range(tiles):
        owned = [
            coord
            for coord in nearby
            if coord in new_state.map.tiles and new_state.map.tiles[coord].owner == tribe_id
        ]
        candidates = set()
        for coord in owned:
            for neighbor in hex_neighbors(coord):
                tile = new_state.map.get_tile(neighbor)
                if tile is None or tile.owner is not None or tile.terrain in IMPASSABLE_TERRAIN:
                    continue
                candidates.add(neighbor)
        if not candidates:
            break

        def rank(coord: HexCoord) -> tuple:
            tile = new_state.map.get_tile(coord)
            return (tile.resource is None, hex_distance(position, coord), coord.q, coord.r)

        best = min(candidates, key=rank)
        tile = new_state.map.get_tile(best)
        new_state = replace(new_state, map=new_state.map.with_tile(replace(tile, owner=tribe_id)))

    return new_state


def apply_great_person_effect(
    state: GameState,
    tribe_id: TribeId,
    position: HexCoord,
    effect: GreatPersonEffect,
    source: str,
) -> GameState:
    """
    Apply one effect variant.

    Raises:
        TypeError: For an effect type this function does not handle
    """
    player = state.get_player(tribe_id)
    if player is None:
        return state

    if isinstance(effect, InstantGold):
        return state.with_player(replace(player, treasury=player.treasury + effect.amount))
    if isinstance(effect, YieldBuff):
        buff = ActiveBuff(
            source=source,
            yield_type=effect.yield_type,
            percent=effect.percent,
            turns_remaining=effect.turns,
        )
        return state.with_player(replace(player, active_buffs=player.active_buffs + (buff,)))
    if isinstance(effect, BorderExpansion):
        return _expand_borders(state, tribe_id, position, effect.tiles)
    raise TypeError(f"Unhandled great person effect: {type(effect).__name__}")


def use_great_person(state: GameState, unit_id: UnitId) -> Optional[GameState]:
    """Trigger the unit's one-time action and consume the unit."""
    unit = state.units.get(unit_id)
    if unit is None or unit.type != GREAT_PERSON_UNIT_TYPE or unit.great_person_id is None:
        return None
    definition = get_great_person_definition(unit.great_person_id)
    if definition is None:
        return None

    new_state = apply_great_person_effect(
        state, unit.owner, unit.position, definition.effect, definition.id
    )
    logger.info(f"{unit.owner} used {definition.name}: {definition.action_name}")
    return remove_unit(new_state, unit_id)


def tick_buffs(buffs: tuple[ActiveBuff, ...]) -> tuple[ActiveBuff, ...]:
    """Count every buff down one turn, dropping expired ones."""
    return tuple(
        replace(buff, turns_remaining=buff.turns_remaining - 1)
        for buff in buffs
        if buff.turns_remaining > 1
    )
