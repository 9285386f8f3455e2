"""
Frozen configuration records loaded from tribesim/data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class TargetPriority(str, Enum):
    """Which enemy unit a military AI prefers to attack."""
    WEAKEST = "weakest"
    STRONGEST = "strongest"
    CLOSEST = "closest"


@dataclass(frozen=True)
class TribePersonality:
    """Behavioral multipliers for the AI of one tribe."""
    aggression: float = 1.0
    peacefulness: float = 1.0
    alliance: float = 1.0
    war_ratio_mod: float = 0.0
    peace_ratio_mod: float = 0.0
    target_priority: TargetPriority = TargetPriority.WEAKEST
    war_weariness_tolerance: float = 1.0


@dataclass(frozen=True)
class TribeProfile:
    """
    Everything the AI needs to know about a tribe's leanings.

    Weight maps default to 1.0 for any category not listed.
    """
    tribe_id: str
    personality: TribePersonality = field(default_factory=TribePersonality)
    primary_strength: str = ""
    secondary_strength: str = ""
    wonder_priorities: dict[str, float] = field(default_factory=dict)
    tech_weights: dict[str, float] = field(default_factory=dict)
    culture_weights: dict[str, float] = field(default_factory=dict)
    trade_priority: float = 1.0

    def wonder_priority(self, category: str) -> float:
        return self.wonder_priorities.get(category, 1.0)

    def tech_weight(self, category: str) -> float:
        return self.tech_weights.get(category, 1.0)

    def culture_weight(self, category: str) -> float:
        return self.culture_weights.get(category, 1.0)


# =============================================================================
# GREAT PEOPLE
# =============================================================================


@dataclass(frozen=True)
class InstantGold:
    amount: int


@dataclass(frozen=True)
class YieldBuff:
    yield_type: str
    percent: int
    turns: int


@dataclass(frozen=True)
class BorderExpansion:
    tiles: int


GreatPersonEffect = Union[InstantGold, YieldBuff, BorderExpansion]

# Accumulated stats are summed on the player; the rest are counted from live state.
ACCUMULATED_STATS = ("alpha", "gold", "vibes", "wonders_built")
COUNTED_STATS = ("trade_routes", "kills")


@dataclass(frozen=True)
class GreatPersonThreshold:
    stat: str
    amount: int


@dataclass(frozen=True)
class GreatPersonDefinition:
    """A one-per-game great person and the effect of its one-time action."""
    id: str
    name: str
    category: str
    action_name: str
    effect: GreatPersonEffect
    threshold: Optional[GreatPersonThreshold] = None
