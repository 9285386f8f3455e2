"""
Barbarian camps.

Each live camp counts down a spawn cooldown stored on the camp itself and
spawns a common warrior or scout when it reaches zero. Barbarian units
act once per round, after spawning.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from tribesim.combat import apply_combat_result, resolve_combat
from tribesim.data_models import (
    BARBARIAN_TRIBE,
    BarbarianCamp,
    CampId,
    GameState,
    HexCoord,
    Rarity,
    TribeId,
    Unit,
    UnitId,
)
from tribesim.game_state.great_people import add_great_people_points
from tribesim.hex_grid import hex_distance, hex_neighbors
from tribesim.rng import RngFn
from tribesim.units import (
    add_unit,
    create_unit,
    find_unit_path,
    get_path_cost,
    get_reachable_hexes,
    get_units_at,
    move_unit,
    update_unit,
)
from tribesim.units.unit_engine import IMPASSABLE_TERRAIN

logger = logging.getLogger(__name__)

SPAWN_COOLDOWN = 3
MAX_UNITS_AT_SPAWN = 2
WARRIOR_CHANCE = 0.7
CAMP_CLEAR_GOLD = 25
ROAM_RADIUS = 5


def create_barbarian_camp(camp_id: CampId, position: HexCoord) -> BarbarianCamp:
    return BarbarianCamp(id=camp_id, position=position, spawn_cooldown=SPAWN_COOLDOWN)


def get_active_camps(state: GameState) -> list[BarbarianCamp]:
    return [camp for camp in state.barbarian_camps if not camp.destroyed]


def get_camp_at(state: GameState, coord: HexCoord) -> Optional[BarbarianCamp]:
    for camp in get_active_camps(state):
        if camp.position == coord:
            return camp
    return None


def _find_spawn_position(state: GameState, camp: BarbarianCamp) -> Optional[HexCoord]:
    for coord in [camp.position, *hex_neighbors(camp.position)]:
        tile = state.map.get_tile(coord)
        if tile is None or tile.terrain in IMPASSABLE_TERRAIN:
            continue
        if len(get_units_at(state, coord)) < MAX_UNITS_AT_SPAWN:
            return coord
    return None


def _spawn_unit(state: GameState, camp: BarbarianCamp, rng: RngFn) -> Optional[GameState]:
    position = _find_spawn_position(state, camp)
    if position is None:
        return None
    unit_type = "warrior" if rng() < WARRIOR_CHANCE else "scout"
    unit_id, new_state = state.allocate_id("barbarian")
    unit = create_unit(
        unit_type,
        BARBARIAN_TRIBE,
        position,
        rarity=Rarity.COMMON,
        unit_id=UnitId(unit_id),
    )
    logger.debug(f"Camp {camp.id} spawned {unit_type} at {position}")
    return add_unit(new_state, unit)


def process_barbarian_spawning(state: GameState, rng: RngFn) -> GameState:
    new_state = state
    camps: list[BarbarianCamp] = []

    for camp in state.barbarian_camps:
        if camp.destroyed:
            camps.append(camp)
            continue

        updated = camp
        if updated.spawn_cooldown > 0:
            updated = replace(updated, spawn_cooldown=updated.spawn_cooldown - 1)

        if updated.spawn_cooldown <= 0:
            spawned = _spawn_unit(new_state, updated, rng)
            if spawned is not None:
                new_state = spawned
                updated = replace(updated, spawn_cooldown=SPAWN_COOLDOWN)

        camps.append(updated)

    return replace(new_state, barbarian_camps=tuple(camps))


def destroy_camp_if_cleared(state: GameState, coord: HexCoord, tribe_id: TribeId) -> GameState:
    """
    Destroy the camp at ``coord`` when a non-barbarian unit stands on it and
    no barbarian defends it. The clearing tribe receives gold.
    """
    camp = get_camp_at(state, coord)
    if camp is None or tribe_id == BARBARIAN_TRIBE:
        return state
    if any(u.owner == BARBARIAN_TRIBE for u in get_units_at(state, coord)):
        return state

    camps = tuple(replace(c, destroyed=True) if c.id == camp.id else c for c in state.barbarian_camps)
    new_state = replace(state, barbarian_camps=camps)
    player = new_state.get_player(tribe_id)
    if player is not None:
        new_state = new_state.with_player(replace(player, treasury=player.treasury + CAMP_CLEAR_GOLD))
        new_state = add_great_people_points(new_state, tribe_id, "gold", CAMP_CLEAR_GOLD)
    logger.info(f"{tribe_id} cleared barbarian camp {camp.id}")
    return new_state


# =============================================================================
# BARBARIAN TURN
# =============================================================================


def _nearest(origin: HexCoord, items: list):
    """Closest unit or camp to ``origin``; ties go to the lower id."""
    return min(
        items,
        key=lambda item: (hex_distance(origin, item.position), str(item.id)),
        default=None,
    )


def _roam_candidates(state: GameState, unit: Unit) -> list[HexCoord]:
    """Reachable hexes, limited to ROAM_RADIUS around the nearest live camp."""
    home = _nearest(unit.position, get_active_camps(state))
    return sorted(
        (
            coord
            for coord in get_reachable_hexes(state, unit)
            if home is None or hex_distance(coord, home.position) <= ROAM_RADIUS
        ),
        key=lambda coord: (coord.q, coord.r),
    )


def _move_barbarian(state: GameState, unit: Unit, target: HexCoord) -> GameState:
    path = find_unit_path(state, unit, target)
    if path is None:
        return update_unit(state, replace(unit, has_acted=True))
    return update_unit(state, move_unit(unit, path, get_path_cost(state, unit, path)))


def _barbarian_unit_turn(state: GameState, unit: Unit, rng: RngFn) -> GameState:
    if unit.has_acted:
        return state

    targets = [u for u in state.units.values() if u.owner != BARBARIAN_TRIBE]
    enemy = _nearest(unit.position, targets)

    if enemy is not None and hex_distance(unit.position, enemy.position) == 1:
        result = resolve_combat(state, unit.id, enemy.id)
        if result is not None:
            return apply_combat_result(state, result)

    candidates = _roam_candidates(state, unit)
    if not candidates:
        return update_unit(state, replace(unit, has_acted=True))

    if enemy is not None and hex_distance(unit.position, enemy.position) <= ROAM_RADIUS:
        target = min(candidates, key=lambda coord: hex_distance(coord, enemy.position))
    else:
        target = candidates[int(rng() * len(candidates))]
    logger.debug(f"Barbarian {unit.id} moves {unit.position} -> {target}")
    return _move_barbarian(state, unit, target)


def process_barbarian_ai(state: GameState, rng: RngFn) -> GameState:
    """
    Play one turn for every barbarian unit, in unit order.

    A barbarian attacks an adjacent non-barbarian unit. Otherwise it closes
    on the nearest one within ROAM_RADIUS, or wanders near its camp using a
    single rng draw.
    """
    new_state = state
    for unit_id in [u.id for u in state.units.values() if u.owner == BARBARIAN_TRIBE]:
        unit = new_state.units.get(unit_id)
        if unit is not None:
            new_state = _barbarian_unit_turn(new_state, unit, rng)
    return new_state
