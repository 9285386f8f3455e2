"""
Combat resolution: strength breakdowns, unit combat, zone of control,
healing and experience, settlement siege.
"""

from tribesim.combat.combat_engine import (
    BASE_COMBAT_DAMAGE,
    TERRAIN_DEFENSE_BONUS,
    XP_PER_COMBAT,
    XP_PER_KILL,
    CombatPreview,
    CombatResult,
    StrengthBreakdown,
    apply_combat_result,
    calculate_combat_strength,
    can_attack,
    get_combat_preview,
    get_valid_targets,
    is_river_crossing,
    resolve_combat,
)
from tribesim.combat.recovery import (
    AVAILABLE_PROMOTIONS,
    HEAL_ELSEWHERE,
    HEAL_IN_SETTLEMENT,
    HEAL_IN_TERRITORY,
    apply_promotion,
    calculate_healing,
    can_level_up,
    get_xp_for_next_level,
    heal_unit,
    level_up_unit,
)
from tribesim.combat.settlement_combat import (
    SETTLEMENT_DEFENSE_STRENGTH,
    SettlementCombatPreview,
    SettlementCombatResult,
    apply_settlement_combat_result,
    calculate_settlement_defense,
    can_attack_settlement,
    can_capture_settlement,
    capture_settlement,
    get_attackable_settlements,
    get_settlement_combat_preview,
    is_siege_unit,
    resolve_settlement_combat,
)
from tribesim.units.zone_of_control import get_zoc_movement_cost, is_in_zone_of_control

__all__ = [
    "BASE_COMBAT_DAMAGE",
    "TERRAIN_DEFENSE_BONUS",
    "XP_PER_COMBAT",
    "XP_PER_KILL",
    "CombatPreview",
    "CombatResult",
    "StrengthBreakdown",
    "apply_combat_result",
    "calculate_combat_strength",
    "can_attack",
    "get_combat_preview",
    "get_valid_targets",
    "is_river_crossing",
    "resolve_combat",
    "AVAILABLE_PROMOTIONS",
    "HEAL_ELSEWHERE",
    "HEAL_IN_SETTLEMENT",
    "HEAL_IN_TERRITORY",
    "apply_promotion",
    "calculate_healing",
    "can_level_up",
    "get_xp_for_next_level",
    "heal_unit",
    "level_up_unit",
    "SETTLEMENT_DEFENSE_STRENGTH",
    "SettlementCombatPreview",
    "SettlementCombatResult",
    "apply_settlement_combat_result",
    "calculate_settlement_defense",
    "can_attack_settlement",
    "can_capture_settlement",
    "capture_settlement",
    "get_attackable_settlements",
    "get_settlement_combat_preview",
    "is_siege_unit",
    "resolve_settlement_combat",
    "get_zoc_movement_cost",
    "is_in_zone_of_control",
]
