"""
Unit model: base stats, rarity, stacking, movement and zone of control.
"""

from tribesim.units.unit_definitions import (
    MAX_CIVILIAN_STACK,
    MAX_MILITARY_STACK,
    RARITY_BONUSES,
    RARITY_WEIGHTS,
    SIEGE_UNIT_TYPES,
    UNIT_DEFINITIONS,
    UnitDefinition,
    get_unit_definition,
    is_civilian_type,
)
from tribesim.units.unit_engine import (
    EntryCheck,
    HexEntry,
    StackInfo,
    add_unit,
    can_stack_unit,
    classify_hex_entry,
    create_unit,
    find_unit_path,
    get_path_cost,
    get_player_units,
    get_reachable_hexes,
    get_stack_info,
    get_unit_movement_cost,
    get_units_at,
    has_enemy_units,
    move_unit,
    remove_unit,
    reset_unit_movement,
    roll_rarity,
    terrain_movement_cost,
    update_unit,
)
from tribesim.units.zone_of_control import (
    get_zoc_movement_cost,
    is_in_zone_of_control,
)

__all__ = [
    "MAX_CIVILIAN_STACK",
    "MAX_MILITARY_STACK",
    "RARITY_BONUSES",
    "RARITY_WEIGHTS",
    "SIEGE_UNIT_TYPES",
    "UNIT_DEFINITIONS",
    "UnitDefinition",
    "get_unit_definition",
    "is_civilian_type",
    "EntryCheck",
    "HexEntry",
    "StackInfo",
    "add_unit",
    "can_stack_unit",
    "classify_hex_entry",
    "create_unit",
    "find_unit_path",
    "get_path_cost",
    "get_player_units",
    "get_reachable_hexes",
    "get_stack_info",
    "get_unit_movement_cost",
    "get_units_at",
    "has_enemy_units",
    "move_unit",
    "remove_unit",
    "reset_unit_movement",
    "roll_rarity",
    "terrain_movement_cost",
    "update_unit",
    "get_zoc_movement_cost",
    "is_in_zone_of_control",
]
