"""
Settlement siege.

Attackers use their dedicated settlement strength against a fixed defense
value. Damage never conquers on its own: capture is a separate step the
attacking player chooses once the walls are at zero.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from tribesim.combat.combat_engine import (
    BASE_COMBAT_DAMAGE,
    RANGED_ATTACK_RANGE,
    XP_PER_COMBAT,
    XP_PER_KILL,
)
from tribesim.data_models import (
    CheckResult,
    GameState,
    Settlement,
    SettlementId,
    Unit,
    UnitId,
)
from tribesim.diplomacy import are_at_war
from tribesim.hex_grid import hex_distance, hex_range
from tribesim.observability.run_log import get_run_log
from tribesim.units import SIEGE_UNIT_TYPES, get_unit_definition, get_units_at, update_unit

logger = logging.getLogger(__name__)

SETTLEMENT_DEFENSE_STRENGTH = 20


def is_siege_unit(unit_type: str) -> bool:
    return unit_type in SIEGE_UNIT_TYPES


def calculate_settlement_defense(state: GameState, settlement: Settlement) -> int:
    return SETTLEMENT_DEFENSE_STRENGTH


def can_attack_settlement(state: GameState, attacker: Unit, settlement: Settlement) -> CheckResult:
    definition = get_unit_definition(attacker.type)
    if definition is None or not definition.can_attack:
        return CheckResult.deny("This unit cannot attack")
    if attacker.has_acted:
        return CheckResult.deny("Unit has already acted this turn")
    if attacker.owner == settlement.owner:
        return CheckResult.deny("Cannot attack your own settlement")
    if not are_at_war(state, attacker.owner, settlement.owner):
        return CheckResult.deny("Not at war with this tribe")

    defenders = [u for u in get_units_at(state, settlement.position) if u.owner == settlement.owner]
    if defenders:
        return CheckResult.deny("Must defeat defending units first")

    distance = hex_distance(attacker.position, settlement.position)
    if definition.base_ranged > 0:
        if distance > RANGED_ATTACK_RANGE:
            return CheckResult.deny("Settlement out of range")
    elif distance != 1:
        return CheckResult.deny("Must be adjacent to attack settlement")
    return CheckResult.ok()


def get_attackable_settlements(state: GameState, attacker: Unit) -> list[Settlement]:
    return [
        settlement
        for settlement in state.settlements.values()
        if settlement.owner != attacker.owner and can_attack_settlement(state, attacker, settlement)
    ]


@dataclass(frozen=True)
class SettlementCombatResult:
    attacker: Unit
    settlement: Settlement
    damage_dealt: int
    walls_breached: bool  # health reached 0; capture is now possible
    attacker_xp_gained: int


def _siege_damage(attacker: Unit, defense: int) -> int:
    return math.floor(BASE_COMBAT_DAMAGE * attacker.settlement_strength / max(1, defense))


def resolve_settlement_combat(
    state: GameState, attacker_id: UnitId, settlement_id: SettlementId
) -> Optional[SettlementCombatResult]:
    attacker = state.units.get(attacker_id)
    settlement = state.settlements.get(settlement_id)
    if attacker is None or settlement is None:
        return None

    check = can_attack_settlement(state, attacker, settlement)
    if not check:
        logger.debug(f"Siege {attacker_id} -> {settlement_id} rejected: {check.reason}")
        return None

    damage = _siege_damage(attacker, calculate_settlement_defense(state, settlement))
    health = max(0, settlement.health - damage)
    breached = health <= 0
    xp = XP_PER_COMBAT + (XP_PER_KILL if breached else 0)

    get_run_log().log_combat(
        attacker_id=attacker_id,
        defender_id=settlement_id,
        attacker_damage=0,
        defender_damage=damage,
        defender_killed=breached,
        turn=state.turn,
    )

    return SettlementCombatResult(
        attacker=replace(
            attacker,
            has_acted=True,
            movement_remaining=0,
            experience=attacker.experience + xp,
        ),
        settlement=replace(settlement, health=health),
        damage_dealt=damage,
        walls_breached=breached,
        attacker_xp_gained=xp,
    )


def apply_settlement_combat_result(state: GameState, result: SettlementCombatResult) -> GameState:
    """Write the attacker and the damaged settlement. Ownership is unchanged."""
    new_state = update_unit(state, result.attacker)
    return replace(
        new_state,
        settlements={**new_state.settlements, result.settlement.id: result.settlement},
    )


def can_capture_settlement(state: GameState, unit: Unit, settlement: Settlement) -> CheckResult:
    definition = get_unit_definition(unit.type)
    if definition is None or not definition.can_attack or definition.base_ranged > 0:
        return CheckResult.deny("Only melee units can capture")
    if unit.has_acted:
        return CheckResult.deny("Unit has already acted this turn")
    if unit.owner == settlement.owner:
        return CheckResult.deny("Cannot capture your own settlement")
    if not are_at_war(state, unit.owner, settlement.owner):
        return CheckResult.deny("Not at war with this tribe")
    if settlement.health > 0:
        return CheckResult.deny("Settlement defenses still standing")
    if hex_distance(unit.position, settlement.position) != 1:
        return CheckResult.deny("Must be adjacent to capture")
    return CheckResult.ok()


def capture_settlement(
    state: GameState, unit_id: UnitId, settlement_id: SettlementId
) -> Optional[GameState]:
    """
    Conquer a breached settlement.

    The capturing unit moves in and ends its turn. The settlement changes
    owner, loses capital status and its queue, recovers half its health,
    and the surrounding tiles of the former owner change hands.
    """
    unit = state.units.get(unit_id)
    settlement = state.settlements.get(settlement_id)
    if unit is None or settlement is None:
        return None
    if not can_capture_settlement(state, unit, settlement):
        return None

    previous_owner = settlement.owner
    captured = replace(
        settlement,
        owner=unit.owner,
        is_capital=False,
        production_queue=(),
        health=settlement.max_health // 2,
    )

    hex_map = state.map
    for coord in hex_range(settlement.position, 1):
        tile = hex_map.get_tile(coord)
        if tile is not None and tile.owner == previous_owner:
            hex_map = hex_map.with_tile(replace(tile, owner=unit.owner))

    moved = replace(unit, position=settlement.position, has_acted=True, movement_remaining=0)
    new_state = update_unit(state, moved)
    logger.info(f"{unit.owner} captured {settlement.name} from {previous_owner}")
    return replace(
        new_state,
        map=hex_map,
        settlements={**new_state.settlements, captured.id: captured},
    )


@dataclass(frozen=True)
class SettlementCombatPreview:
    settlement_strength: int
    settlement_defense: int
    estimated_damage: int
    is_siege: bool
    turns_to_conquer: int


def get_settlement_combat_preview(
    state: GameState, attacker: Unit, settlement: Settlement
) -> SettlementCombatPreview:
    defense = calculate_settlement_defense(state, settlement)
    damage = _siege_damage(attacker, defense)
    return SettlementCombatPreview(
        settlement_strength=attacker.settlement_strength,
        settlement_defense=defense,
        estimated_damage=damage,
        is_siege=is_siege_unit(attacker.type),
        turns_to_conquer=math.ceil(settlement.health / max(1, damage)),
    )
