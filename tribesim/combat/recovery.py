"""
Between-battle unit upkeep: end-of-turn healing, experience levels and
promotions.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from tribesim.data_models import GameState, Unit

logger = logging.getLogger(__name__)

HEAL_ELSEWHERE = 10
HEAL_IN_TERRITORY = 15
HEAL_IN_SETTLEMENT = 20

XP_TO_LEVEL = 10

REGENERATION_PROMOTION = "regeneration"

AVAILABLE_PROMOTIONS = frozenset({"battlecry", "defender", "regeneration"})


def calculate_healing(state: GameState, unit: Unit) -> int:
    """
    HP the unit recovers at end of turn.

    Units that acted heal nothing unless they hold regeneration. Otherwise a
    friendly settlement heals most, then own territory, then anywhere else.
    """
    if unit.has_acted and REGENERATION_PROMOTION not in unit.promotions:
        return 0

    for settlement in state.settlements.values():
        if settlement.position == unit.position and settlement.owner == unit.owner:
            return HEAL_IN_SETTLEMENT

    tile = state.map.get_tile(unit.position)
    if tile is not None and tile.owner == unit.owner:
        return HEAL_IN_TERRITORY
    return HEAL_ELSEWHERE


def heal_unit(unit: Unit, amount: int) -> Unit:
    return replace(unit, health=min(unit.max_health, unit.health + amount))


def get_xp_for_next_level(unit: Unit) -> int:
    return unit.level * XP_TO_LEVEL


def can_level_up(unit: Unit) -> bool:
    return unit.experience >= get_xp_for_next_level(unit)


def level_up_unit(unit: Unit, promotion_id: str) -> Unit:
    """Spend XP for one level and record the chosen promotion. No-op if not ready."""
    if not can_level_up(unit):
        return unit
    return replace(
        unit,
        level=unit.level + 1,
        promotions=unit.promotions + (promotion_id,),
        experience=unit.experience - get_xp_for_next_level(unit),
    )


def apply_promotion(unit: Unit, promotion_id: str) -> Unit | None:
    """
    Level up with ``promotion_id`` if it is known, not already held, and the
    unit has the XP. Returns None otherwise.
    """
    if promotion_id not in AVAILABLE_PROMOTIONS:
        logger.debug(f"Unknown promotion {promotion_id}")
        return None
    if promotion_id in unit.promotions or not can_level_up(unit):
        return None
    return level_up_unit(unit, promotion_id)
