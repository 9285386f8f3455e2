"""
Read-only views of the economy, tech, culture and wonder subsystems.

The AI never looks inside those subsystems. It asks through a
SubsystemQueries implementation and only relies on the option records
below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from tribesim.data_models import GameState, Settlement, SettlementId, TribeId


@dataclass(frozen=True)
class TechOption:
    id: str
    era: int
    unlocked_units: tuple[str, ...] = ()
    unlocked_buildings: tuple[str, ...] = ()
    unlocked_improvements: tuple[str, ...] = ()
    culture_prerequisites: tuple[str, ...] = ()


@dataclass(frozen=True)
class CultureOption:
    id: str
    era: int
    # Slot types offered by the culture's policy choices, in order
    policy_slot_types: tuple[str, ...] = ()
    # Policy slots unlocked on completion ("military", "economy", "progress", "wildcard")
    slot_unlocks: tuple[str, ...] = ()
    tech_prerequisites: tuple[str, ...] = ()


@dataclass(frozen=True)
class WonderOption:
    id: str
    era: int
    category: str
    effect_type: str
    floor_price_bonus: int
    production_cost: int


@dataclass(frozen=True)
class TradeDestination:
    settlement: Settlement
    is_internal: bool
    gold_per_turn: int


class SubsystemQueries(Protocol):
    def available_techs(self, state: GameState, tribe_id: TribeId) -> list[TechOption]: ...

    def available_cultures(self, state: GameState, tribe_id: TribeId) -> list[CultureOption]: ...

    def available_wonders(self, state: GameState) -> list[WonderOption]: ...

    def can_build_wonder(
        self, state: GameState, settlement_id: SettlementId, wonder_id: str
    ) -> bool: ...

    def is_wonder_in_progress(
        self, state: GameState, wonder_id: str, excluding: TribeId
    ) -> bool: ...

    def trade_route_capacity(self, state: GameState, tribe_id: TribeId) -> int: ...

    def available_trade_destinations(
        self, state: GameState, origin: SettlementId
    ) -> list[TradeDestination]: ...

    def can_create_trade_route(
        self, state: GameState, origin: SettlementId, destination: SettlementId
    ) -> bool: ...


class NullSubsystemQueries:
    """Queries for a game with no tech, culture, wonder or trade content."""

    def available_techs(self, state: GameState, tribe_id: TribeId) -> list[TechOption]:
        return []

    def available_cultures(self, state: GameState, tribe_id: TribeId) -> list[CultureOption]:
        return []

    def available_wonders(self, state: GameState) -> list[WonderOption]:
        return []

    def can_build_wonder(self, state: GameState, settlement_id: SettlementId, wonder_id: str) -> bool:
        return False

    def is_wonder_in_progress(self, state: GameState, wonder_id: str, excluding: TribeId) -> bool:
        return False

    def trade_route_capacity(self, state: GameState, tribe_id: TribeId) -> int:
        return 0

    def available_trade_destinations(
        self, state: GameState, origin: SettlementId
    ) -> list[TradeDestination]:
        return []

    def can_create_trade_route(
        self, state: GameState, origin: SettlementId, destination: SettlementId
    ) -> bool:
        return False
