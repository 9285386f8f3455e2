"""
Summed military strength per tribe, cached for the current turn.
"""

from __future__ import annotations

import logging

from tribesim.data_models import GameState, TribeId, Unit
from tribesim.units import is_civilian_type

logger = logging.getLogger(__name__)

PROMOTION_STRENGTH = 0.5


def unit_strength(unit: Unit) -> float:
    """Best attack value scaled by remaining health, plus promotions."""
    base = max(unit.combat_strength, unit.ranged_strength)
    health_ratio = unit.health / unit.max_health if unit.max_health else 0.0
    return base * health_ratio + PROMOTION_STRENGTH * len(unit.promotions)


def calculate_military_strength(state: GameState, tribe_id: TribeId) -> float:
    return sum(
        unit_strength(unit)
        for unit in state.units.values()
        if unit.owner == tribe_id and not is_civilian_type(unit.type)
    )


class MilitaryStrengthCache:
    """
    Per-turn memo of calculate_military_strength.

    The cache empties itself whenever it is asked about a different turn
    than the one it holds, so one instance can live for a whole game.
    """

    def __init__(self):
        self._turn: int | None = None
        self._values: dict[TribeId, float] = {}

    def get(self, state: GameState, tribe_id: TribeId) -> float:
        if state.turn != self._turn:
            self.clear(state.turn)
        if tribe_id not in self._values:
            self._values[tribe_id] = calculate_military_strength(state, tribe_id)
        return self._values[tribe_id]

    def clear(self, turn: int | None = None) -> None:
        if self._values:
            logger.debug(f"Military strength cache cleared for turn {turn}")
        self._turn = turn
        self._values = {}
