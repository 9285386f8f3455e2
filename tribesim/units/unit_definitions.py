"""
Static unit content: base stats per unit type, rarity tables and stacking
limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tribesim.data_models import Rarity, RarityBonuses


@dataclass(frozen=True)
class UnitDefinition:
    """Base stats for one unit type."""
    type: str
    name: str
    base_health: int
    base_movement: int
    base_combat: int
    base_ranged: int = 0
    base_settlement: int = 0
    production_cost: int = 0
    is_civilian: bool = False
    can_attack: bool = True
    can_found: bool = False
    build_charges: int = 0
    is_siege: bool = False


def _military(
    unit_type: str,
    name: str,
    health: int,
    movement: int,
    combat: int,
    ranged: int,
    settlement: int,
    cost: int,
    is_siege: bool = False,
) -> UnitDefinition:
    return UnitDefinition(
        type=unit_type,
        name=name,
        base_health=health,
        base_movement=movement,
        base_combat=combat,
        base_ranged=ranged,
        base_settlement=settlement,
        production_cost=cost,
        is_siege=is_siege,
    )


def _civilian(
    unit_type: str,
    name: str,
    movement: int,
    cost: int,
    can_found: bool = False,
    build_charges: int = 0,
) -> UnitDefinition:
    return UnitDefinition(
        type=unit_type,
        name=name,
        base_health=50,
        base_movement=movement,
        base_combat=0,
        production_cost=cost,
        is_civilian=True,
        can_attack=False,
        can_found=can_found,
        build_charges=build_charges,
    )


UNIT_DEFINITIONS: dict[str, UnitDefinition] = {
    d.type: d
    for d in (
        # Era 1
        _military("scout", "Scout", 50, 4, 5, 0, 5, 30),
        _military("warrior", "Warrior", 100, 2, 20, 0, 20, 40),
        _military("archer", "Archer", 80, 2, 10, 25, 25, 50),
        _civilian("settler", "Settler", 2, 80, can_found=True),
        _civilian("builder", "Builder", 2, 50, build_charges=3),
        _civilian("great_person", "Great Person", 3, 0),
        # Era 2
        _military("horseman", "Horseman", 90, 4, 18, 0, 18, 60),
        _military("swordsman", "Swordsman", 120, 2, 35, 0, 35, 80),
        _military("sniper", "Sniper", 90, 2, 15, 40, 40, 90),
        _military("knight", "Knight", 110, 4, 30, 0, 30, 100),
        _military("social_engineer", "Social Engineer", 80, 2, 20, 20, 60, 100, is_siege=True),
        # Era 3
        _military("bot_fighter", "Bot Fighter", 150, 2, 55, 0, 55, 150),
        _military("rockeeter", "Rockeeter", 100, 2, 20, 60, 60, 160),
        _military("tank", "Tank", 140, 4, 50, 0, 50, 180),
        _military("bombard", "Bombard", 90, 2, 25, 25, 75, 170, is_siege=True),
        # Tribe unique units
        _military("banana_slinger", "Banana Slinger", 80, 2, 15, 30, 30, 50),
        _military("neon_geck", "Neon Geck", 90, 3, 15, 40, 40, 90),
        _military("deadgod", "DeadGod", 120, 2, 45, 0, 45, 80),
        _military("stuckers", "Stuckers", 120, 3, 35, 0, 35, 80),
    )
}

SIEGE_UNIT_TYPES: frozenset[str] = frozenset(
    d.type for d in UNIT_DEFINITIONS.values() if d.is_siege
)


# =============================================================================
# RARITY
# =============================================================================

# Ordered: the roll subtracts weights in this order.
RARITY_WEIGHTS: tuple[tuple[Rarity, int], ...] = (
    (Rarity.COMMON, 50),
    (Rarity.UNCOMMON, 30),
    (Rarity.RARE, 15),
    (Rarity.EPIC, 4),
    (Rarity.LEGENDARY, 1),
)

RARITY_BONUSES: dict[Rarity, RarityBonuses] = {
    Rarity.COMMON: RarityBonuses(combat=0, movement=0, vision=0),
    Rarity.UNCOMMON: RarityBonuses(combat=2, movement=0, vision=0),
    Rarity.RARE: RarityBonuses(combat=5, movement=0, vision=1),
    Rarity.EPIC: RarityBonuses(combat=10, movement=1, vision=1),
    Rarity.LEGENDARY: RarityBonuses(combat=20, movement=1, vision=2),
}


# =============================================================================
# STACKING
# =============================================================================

MAX_MILITARY_STACK = 2
MAX_CIVILIAN_STACK = 1


def get_unit_definition(unit_type: str) -> Optional[UnitDefinition]:
    return UNIT_DEFINITIONS.get(unit_type)


def is_civilian_type(unit_type: str) -> bool:
    definition = UNIT_DEFINITIONS.get(unit_type)
    return definition.is_civilian if definition else False
