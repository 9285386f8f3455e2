"""
Unit creation, stacking and movement rules.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from tribesim.data_models import (
    CheckResult,
    GameState,
    HexCoord,
    Rarity,
    TerrainType,
    Tile,
    TribeId,
    Unit,
    UnitId,
)
from tribesim.hex_grid import find_path, reachable
from tribesim.rng import RngFn
from tribesim.units.unit_definitions import (
    MAX_CIVILIAN_STACK,
    MAX_MILITARY_STACK,
    RARITY_BONUSES,
    RARITY_WEIGHTS,
    UNIT_DEFINITIONS,
)
from tribesim.units.zone_of_control import is_in_zone_of_control

logger = logging.getLogger(__name__)


# =============================================================================
# CREATION
# =============================================================================


def roll_rarity(rng: RngFn) -> Rarity:
    """
    Roll a rarity tier from the cumulative weight table.

    Draws x in [0, total), subtracts each weight in table order and returns
    the tier at which the remainder drops to zero or below.
    """
    total = sum(weight for _, weight in RARITY_WEIGHTS)
    roll = rng() * total
    for rarity, weight in RARITY_WEIGHTS:
        roll -= weight
        if roll <= 0:
            return rarity
    return Rarity.COMMON


def create_unit(
    unit_type: str,
    owner: TribeId,
    position: HexCoord,
    rng: Optional[RngFn] = None,
    rarity: Optional[Rarity] = None,
    unit_id: Optional[UnitId] = None,
) -> Unit:
    """
    Create a unit with base stats plus its rarity bonus.

    An explicit rarity wins. Otherwise rarity is rolled with ``rng``; with
    neither, the unit is common. Ranged and settlement strength only gain the
    combat bonus when their base value is non-zero.

    Raises:
        ValueError: For an unknown unit type
    """
    definition = UNIT_DEFINITIONS.get(unit_type)
    if definition is None:
        raise ValueError(f"Unknown unit type: {unit_type}")

    if rarity is None:
        rarity = roll_rarity(rng) if rng is not None else Rarity.COMMON
    bonuses = RARITY_BONUSES[rarity]

    movement = definition.base_movement + bonuses.movement
    ranged = definition.base_ranged + bonuses.combat if definition.base_ranged > 0 else 0
    settlement = (
        definition.base_settlement + bonuses.combat if definition.base_settlement > 0 else 0
    )

    unit = Unit(
        id=unit_id or UnitId(f"unit_{uuid.uuid4().hex[:8]}"),
        type=unit_type,
        owner=owner,
        position=position,
        health=definition.base_health,
        max_health=definition.base_health,
        movement_remaining=movement,
        max_movement=movement,
        combat_strength=definition.base_combat + bonuses.combat,
        ranged_strength=ranged,
        settlement_strength=settlement,
        rarity=rarity,
        rarity_bonuses=bonuses,
        build_charges=definition.build_charges,
    )
    logger.debug(f"Created {rarity.value} {unit_type} {unit.id} for {owner} at {position}")
    return unit


# =============================================================================
# STATE HELPERS
# =============================================================================


def add_unit(state: GameState, unit: Unit) -> GameState:
    return replace(state, units={**state.units, unit.id: unit})


def update_unit(state: GameState, unit: Unit) -> GameState:
    return replace(state, units={**state.units, unit.id: unit})


def remove_unit(state: GameState, unit_id: UnitId) -> GameState:
    units = {uid: u for uid, u in state.units.items() if uid != unit_id}
    return replace(state, units=units)


def get_units_at(state: GameState, coord: HexCoord) -> list[Unit]:
    return [u for u in state.units.values() if u.position == coord]


def get_player_units(state: GameState, tribe_id: TribeId) -> list[Unit]:
    return [u for u in state.units.values() if u.owner == tribe_id]


# =============================================================================
# STACKING
# =============================================================================


@dataclass
class StackInfo:
    """Units on one hex split by class."""
    military: list[Unit] = field(default_factory=list)
    civilian: list[Unit] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.military) + len(self.civilian)


def get_stack_info(state: GameState, coord: HexCoord) -> StackInfo:
    info = StackInfo()
    for unit in get_units_at(state, coord):
        definition = UNIT_DEFINITIONS.get(unit.type)
        if definition is not None and definition.is_civilian:
            info.civilian.append(unit)
        else:
            info.military.append(unit)
    return info


def can_stack_unit(state: GameState, coord: HexCoord, unit: Unit) -> CheckResult:
    """Military cap 2, civilian cap 1. The moving unit itself is not counted."""
    stack = get_stack_info(state, coord)
    definition = UNIT_DEFINITIONS[unit.type]
    if definition.is_civilian:
        count = len([u for u in stack.civilian if u.id != unit.id])
        if count >= MAX_CIVILIAN_STACK:
            return CheckResult.deny("Civilian stack limit reached")
    else:
        count = len([u for u in stack.military if u.id != unit.id])
        if count >= MAX_MILITARY_STACK:
            return CheckResult.deny("Military stack limit reached")
    return CheckResult.ok()


def has_enemy_units(state: GameState, coord: HexCoord, owner: TribeId) -> bool:
    return any(u.owner != owner for u in get_units_at(state, coord))


# =============================================================================
# MOVEMENT COST
# =============================================================================

ROUGH_TERRAIN = frozenset(
    {TerrainType.FOREST, TerrainType.JUNGLE, TerrainType.MARSH, TerrainType.HILLS}
)
IMPASSABLE_TERRAIN = frozenset({TerrainType.MOUNTAIN, TerrainType.WATER})


class HexEntry(str, Enum):
    """Why a unit can or cannot enter a hex."""
    OPEN = "open"
    IMPASSABLE = "impassable"
    ENEMY_OCCUPIED = "enemy_occupied"  # attack instead
    STACK_FULL = "stack_full"  # blocked


@dataclass(frozen=True)
class EntryCheck:
    kind: HexEntry
    cost: float


def terrain_movement_cost(tile: Optional[Tile]) -> float:
    """Open terrain 1, rough terrain 2, mountain/water/off-map impassable."""
    if tile is None or tile.terrain in IMPASSABLE_TERRAIN:
        return math.inf
    if tile.terrain in ROUGH_TERRAIN:
        return 2
    return 1


def classify_hex_entry(state: GameState, unit: Unit, coord: HexCoord) -> EntryCheck:
    """
    Classify entry into ``coord`` for ``unit``.

    ENEMY_OCCUPIED and STACK_FULL both carry infinite cost; callers branch on
    the kind (attack vs blocked).
    """
    cost = terrain_movement_cost(state.map.get_tile(coord))
    if cost == math.inf:
        return EntryCheck(HexEntry.IMPASSABLE, math.inf)
    if has_enemy_units(state, coord, unit.owner):
        return EntryCheck(HexEntry.ENEMY_OCCUPIED, math.inf)
    if not can_stack_unit(state, coord, unit):
        return EntryCheck(HexEntry.STACK_FULL, math.inf)
    return EntryCheck(HexEntry.OPEN, cost)


def get_unit_movement_cost(state: GameState, unit: Unit, coord: HexCoord) -> float:
    """Terrain cost of entering ``coord``, or math.inf when entry is not open."""
    return classify_hex_entry(state, unit, coord).cost


def _zoc_stop(state: GameState, unit: Unit):
    return lambda coord: is_in_zone_of_control(state, coord, unit.owner)


# =============================================================================
# REACHABILITY AND PATHS
# =============================================================================


def get_reachable_hexes(state: GameState, unit: Unit) -> dict[HexCoord, float]:
    """
    Hexes the unit can end its move on, mapped to movement left there.

    The starting hex is excluded. Entering an enemy zone of control leaves
    zero movement.
    """
    result = reachable(
        unit.position,
        unit.movement_remaining,
        lambda coord: get_unit_movement_cost(state, unit, coord),
        in_bounds=state.map.in_bounds,
        stop_fn=_zoc_stop(state, unit),
    )
    result.pop(unit.position, None)
    return result


def find_unit_path(state: GameState, unit: Unit, target: HexCoord) -> Optional[list[HexCoord]]:
    """Cheapest path within the unit's remaining movement, or None."""
    return find_path(
        unit.position,
        target,
        lambda coord: get_unit_movement_cost(state, unit, coord),
        max_cost=unit.movement_remaining,
        in_bounds=state.map.in_bounds,
        stop_fn=_zoc_stop(state, unit),
    )


def get_path_cost(state: GameState, unit: Unit, path: list[HexCoord]) -> float:
    """
    Movement spent walking ``path``.

    A zone-of-control hex ends the walk and consumes whatever was left.
    """
    total: float = 0
    for coord in path[1:]:
        cost = get_unit_movement_cost(state, unit, coord)
        if cost == math.inf:
            return math.inf
        total += cost
        if is_in_zone_of_control(state, coord, unit.owner):
            return max(total, unit.movement_remaining)
    return total


def move_unit(unit: Unit, path: list[HexCoord], cost: float) -> Unit:
    """Place the unit at the end of ``path`` and spend ``cost`` movement."""
    if not path:
        return unit
    return replace(
        unit,
        position=path[-1],
        movement_remaining=max(0, int(unit.movement_remaining - cost)),
        has_acted=True,
    )


def reset_unit_movement(unit: Unit) -> Unit:
    return replace(unit, movement_remaining=unit.max_movement, has_acted=False)
