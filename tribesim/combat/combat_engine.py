"""
Unit-versus-unit combat.

Strength is computed as a breakdown of additive terms so callers (UI
previews, AI scoring) can show where the number comes from. Percentage
modifiers are floored individually against the base value.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from tribesim.data_models import (
    CheckResult,
    GameState,
    HexCoord,
    TerrainFeature,
    TerrainType,
    TribeId,
    Unit,
    UnitId,
)
from tribesim.diplomacy import are_at_war
from tribesim.hex_grid import hex_distance, hex_neighbors
from tribesim.observability.run_log import get_run_log
from tribesim.units import get_stack_info, get_unit_definition, remove_unit, update_unit

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

BASE_COMBAT_DAMAGE = 30
XP_PER_COMBAT = 5
XP_PER_KILL = 10
RANGED_ATTACK_RANGE = 2

TERRAIN_DEFENSE_BONUS: dict[TerrainType, float] = {
    TerrainType.FOREST: 0.25,
    TerrainType.HILLS: 0.3,
    TerrainType.JUNGLE: 0.25,
    TerrainType.DESERT: -0.1,
    TerrainType.MARSH: -0.15,
}

RIVER_CROSSING_PENALTY = -0.25
FORTIFICATION_BONUS = 0.1
STACKING_DEFENSE_BONUS = 0.1
ADJACENCY_BONUS_PER_UNIT = 0.05
MAX_ADJACENCY_BONUS = 0.15

# Promotion id -> (attack bonus, defense bonus)
PROMOTION_BONUSES: dict[str, tuple[int, int]] = {
    "battlecry": (2, 0),
    "defender": (0, 2),
}


# =============================================================================
# STRENGTH
# =============================================================================


@dataclass(frozen=True)
class StrengthBreakdown:
    """
    Additive terms of an effective combat strength.

    rarity_bonus is informational: it is already part of ``base``.
    health_penalty is stored positive and subtracted.
    """
    base: int
    rarity_bonus: int
    terrain_bonus: int
    stacking_bonus: int
    adjacency_bonus: int
    fortification_bonus: int
    health_penalty: int
    promotion_bonus: int
    river_crossing_penalty: int
    total: int


def _is_ranged(unit: Unit) -> bool:
    definition = get_unit_definition(unit.type)
    return definition is not None and definition.base_ranged > 0


def is_river_crossing(state: GameState, attacker_pos: HexCoord, defender_pos: HexCoord) -> bool:
    """True when the defender stands on a river and the attacker does not."""
    defender_tile = state.map.get_tile(defender_pos)
    if defender_tile is None or defender_tile.feature != TerrainFeature.RIVER:
        return False
    attacker_tile = state.map.get_tile(attacker_pos)
    return attacker_tile is None or attacker_tile.feature != TerrainFeature.RIVER


def _adjacent_friendly_military(state: GameState, coord: HexCoord, owner: TribeId) -> int:
    neighbors = set(hex_neighbors(coord))
    count = 0
    for unit in state.units.values():
        if unit.owner != owner or unit.position not in neighbors:
            continue
        definition = get_unit_definition(unit.type)
        if definition is not None and not definition.is_civilian:
            count += 1
    return count


def _promotion_bonus(unit: Unit, is_defending: bool) -> int:
    bonus = 0
    for promotion in unit.promotions:
        attack, defense = PROMOTION_BONUSES.get(promotion, (0, 0))
        bonus += defense if is_defending else attack
    return bonus


def calculate_combat_strength(
    state: GameState,
    unit: Unit,
    is_defending: bool,
    target_position: Optional[HexCoord] = None,
) -> StrengthBreakdown:
    """
    Effective strength of ``unit`` in an engagement.

    Args:
        state: Current game state
        unit: The unit whose strength is computed
        is_defending: Defender-only modifiers apply when True
        target_position: Defender hex, used for the attacker's river check

    Returns:
        StrengthBreakdown whose total is at least 1
    """
    if not is_defending and _is_ranged(unit) and unit.ranged_strength > 0:
        base = unit.ranged_strength
    else:
        base = unit.combat_strength

    tile = state.map.get_tile(unit.position)

    terrain_bonus = 0
    if is_defending and tile is not None:
        terrain_bonus = math.floor(base * TERRAIN_DEFENSE_BONUS.get(tile.terrain, 0))

    stacking_bonus = 0
    if is_defending and len(get_stack_info(state, unit.position).military) >= 2:
        stacking_bonus = math.floor(base * STACKING_DEFENSE_BONUS)

    adjacent = _adjacent_friendly_military(state, unit.position, unit.owner)
    adjacency_bonus = math.floor(
        base * min(MAX_ADJACENCY_BONUS, adjacent * ADJACENCY_BONUS_PER_UNIT)
    )

    fortification_bonus = 0
    if is_defending and not unit.has_acted:
        fortification_bonus = math.floor(base * FORTIFICATION_BONUS)

    health_penalty = 0
    if unit.max_health > 0 and unit.health < unit.max_health:
        health_ratio = unit.health / unit.max_health
        health_penalty = math.floor(base * (1 - health_ratio) * 0.5)

    promotion_bonus = _promotion_bonus(unit, is_defending)

    river_crossing_penalty = 0
    if not is_defending and target_position is not None:
        if is_river_crossing(state, unit.position, target_position):
            river_crossing_penalty = math.floor(base * RIVER_CROSSING_PENALTY)

    total = max(
        1,
        base
        + terrain_bonus
        + stacking_bonus
        + adjacency_bonus
        + fortification_bonus
        - health_penalty
        + promotion_bonus
        + river_crossing_penalty,
    )

    return StrengthBreakdown(
        base=base,
        rarity_bonus=unit.rarity_bonuses.combat,
        terrain_bonus=terrain_bonus,
        stacking_bonus=stacking_bonus,
        adjacency_bonus=adjacency_bonus,
        fortification_bonus=fortification_bonus,
        health_penalty=health_penalty,
        promotion_bonus=promotion_bonus,
        river_crossing_penalty=river_crossing_penalty,
        total=total,
    )


# =============================================================================
# ATTACK LEGALITY
# =============================================================================


def can_attack(state: GameState, attacker: Unit, defender: Unit) -> CheckResult:
    definition = get_unit_definition(attacker.type)
    if definition is None or not definition.can_attack:
        return CheckResult.deny("This unit cannot attack")
    if attacker.has_acted:
        return CheckResult.deny("Unit has already acted this turn")
    if attacker.owner == defender.owner:
        return CheckResult.deny("Cannot attack friendly units")
    if not are_at_war(state, attacker.owner, defender.owner):
        return CheckResult.deny("Not at war with this tribe")

    distance = hex_distance(attacker.position, defender.position)
    if definition.base_ranged > 0:
        if distance > RANGED_ATTACK_RANGE:
            return CheckResult.deny("Target out of range")
    elif distance != 1:
        return CheckResult.deny("Must be adjacent to attack")
    return CheckResult.ok()


def get_valid_targets(state: GameState, unit: Unit) -> list[Unit]:
    """Enemy units ``unit`` could legally attack right now."""
    return [
        other
        for other in state.units.values()
        if other.owner != unit.owner and can_attack(state, unit, other)
    ]


# =============================================================================
# RESOLUTION
# =============================================================================


@dataclass(frozen=True)
class CombatResult:
    """Outcome of one engagement. Units carry their post-combat state."""
    attacker: Unit
    defender: Unit
    attacker_damage: int
    defender_damage: int
    attacker_killed: bool
    defender_killed: bool
    attacker_xp_gained: int
    defender_xp_gained: int


def _exchange_damage(attacker_total: int, defender_total: int, ranged: bool) -> tuple[int, int]:
    """Return (damage to attacker, damage to defender)."""
    ratio = attacker_total / max(1, defender_total)
    defender_damage = math.floor(BASE_COMBAT_DAMAGE * ratio)
    attacker_damage = 0 if ranged else math.floor(BASE_COMBAT_DAMAGE / ratio)
    return attacker_damage, defender_damage


def resolve_combat(
    state: GameState, attacker_id: UnitId, defender_id: UnitId
) -> Optional[CombatResult]:
    """
    Resolve an attack. Returns None when either unit is missing or the
    attack is not legal.
    """
    attacker = state.units.get(attacker_id)
    defender = state.units.get(defender_id)
    if attacker is None or defender is None:
        return None

    check = can_attack(state, attacker, defender)
    if not check:
        logger.debug(f"Attack {attacker_id} -> {defender_id} rejected: {check.reason}")
        return None

    attacker_strength = calculate_combat_strength(state, attacker, False, defender.position)
    defender_strength = calculate_combat_strength(state, defender, True)
    attacker_damage, defender_damage = _exchange_damage(
        attacker_strength.total, defender_strength.total, _is_ranged(attacker)
    )

    attacker_health = max(0, attacker.health - attacker_damage)
    defender_health = max(0, defender.health - defender_damage)
    attacker_killed = attacker_health <= 0
    defender_killed = defender_health <= 0

    attacker_xp = XP_PER_COMBAT + (XP_PER_KILL if defender_killed else 0)
    defender_xp = XP_PER_COMBAT + (XP_PER_KILL if attacker_killed else 0)

    result = CombatResult(
        attacker=replace(
            attacker,
            health=attacker_health,
            has_acted=True,
            movement_remaining=0,
            experience=attacker.experience + attacker_xp,
        ),
        defender=replace(
            defender,
            health=defender_health,
            experience=defender.experience + defender_xp,
        ),
        attacker_damage=attacker_damage,
        defender_damage=defender_damage,
        attacker_killed=attacker_killed,
        defender_killed=defender_killed,
        attacker_xp_gained=attacker_xp,
        defender_xp_gained=defender_xp,
    )

    logger.debug(
        f"Combat {attacker_id} ({attacker_strength.total}) vs {defender_id} "
        f"({defender_strength.total}): {attacker_damage}/{defender_damage} damage"
    )
    get_run_log().log_combat(
        attacker_id=attacker_id,
        defender_id=defender_id,
        attacker_damage=attacker_damage,
        defender_damage=defender_damage,
        attacker_killed=attacker_killed,
        defender_killed=defender_killed,
        turn=state.turn,
    )
    return result


def _increment_kill_count(state: GameState, tribe_id: TribeId) -> GameState:
    player = state.get_player(tribe_id)
    if player is None:
        return state
    return state.with_player(replace(player, kill_count=player.kill_count + 1))


def apply_combat_result(state: GameState, result: CombatResult) -> GameState:
    """Write both units back, removing the dead and crediting kills."""
    new_state = state

    if result.attacker_killed:
        new_state = remove_unit(new_state, result.attacker.id)
        new_state = _increment_kill_count(new_state, result.defender.owner)
    else:
        new_state = update_unit(new_state, result.attacker)

    if result.defender_killed:
        new_state = remove_unit(new_state, result.defender.id)
        new_state = _increment_kill_count(new_state, result.attacker.owner)
    else:
        new_state = update_unit(new_state, result.defender)

    return new_state


# =============================================================================
# PREVIEW
# =============================================================================


@dataclass(frozen=True)
class CombatPreview:
    attacker_strength: StrengthBreakdown
    defender_strength: StrengthBreakdown
    estimated_attacker_damage: int
    estimated_defender_damage: int
    attacker_survives: bool
    defender_survives: bool


def get_combat_preview(state: GameState, attacker: Unit, defender: Unit) -> CombatPreview:
    """Deterministic forecast of an attack without applying it."""
    attacker_strength = calculate_combat_strength(state, attacker, False, defender.position)
    defender_strength = calculate_combat_strength(state, defender, True)
    attacker_damage, defender_damage = _exchange_damage(
        attacker_strength.total, defender_strength.total, _is_ranged(attacker)
    )
    return CombatPreview(
        attacker_strength=attacker_strength,
        defender_strength=defender_strength,
        estimated_attacker_damage=attacker_damage,
        estimated_defender_damage=defender_damage,
        attacker_survives=attacker_damage < attacker.health,
        defender_survives=defender_damage < defender.health,
    )
