"""
Zone of control.

A hex is in an enemy zone of control when a neighboring hex holds a foreign
non-civilian unit that can attack. Entering such a hex consumes all of the
mover's remaining movement, layered on top of the terrain cost.
"""

from __future__ import annotations

import math

from tribesim.data_models import GameState, HexCoord, TribeId, Unit
from tribesim.hex_grid import hex_neighbors
from tribesim.units.unit_definitions import UNIT_DEFINITIONS


def _exerts_zoc(unit: Unit) -> bool:
    definition = UNIT_DEFINITIONS.get(unit.type)
    return definition is not None and not definition.is_civilian and definition.can_attack


def is_in_zone_of_control(state: GameState, coord: HexCoord, moving_owner: TribeId) -> bool:
    """True when any neighbor of ``coord`` holds a foreign combat unit."""
    neighbors = set(hex_neighbors(coord))
    for unit in state.units.values():
        if unit.owner != moving_owner and unit.position in neighbors and _exerts_zoc(unit):
            return True
    return False


def get_zoc_movement_cost(
    state: GameState,
    unit: Unit,
    coord: HexCoord,
    base_cost: float,
) -> float:
    """
    Movement cost of entering ``coord`` once zone of control is applied.

    Impassable stays impassable. Otherwise a ZoC hex costs everything the
    unit has left, but never less than the terrain cost.
    """
    if base_cost == math.inf:
        return base_cost
    if is_in_zone_of_control(state, coord, unit.owner):
        return max(base_cost, unit.movement_remaining)
    return base_cost
