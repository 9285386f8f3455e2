"""
Player and AI actions.

The set of variants is closed: GameEngine.apply_action dispatches over every
class in ACTION_TYPES and raises for anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tribesim.data_models import (
    HexCoord,
    SettlementId,
    TradeRouteId,
    TribeId,
    UnitId,
)


# =============================================================================
# UNIT ACTIONS
# =============================================================================


@dataclass(frozen=True)
class MoveUnit:
    unit_id: UnitId
    target: HexCoord


@dataclass(frozen=True)
class Attack:
    attacker_id: UnitId
    defender_id: UnitId


@dataclass(frozen=True)
class AttackSettlement:
    attacker_id: UnitId
    settlement_id: SettlementId


@dataclass(frozen=True)
class CaptureSettlement:
    unit_id: UnitId
    settlement_id: SettlementId


@dataclass(frozen=True)
class FoundSettlement:
    settler_id: UnitId
    name: str | None = None


@dataclass(frozen=True)
class BuildImprovement:
    builder_id: UnitId
    improvement_type: str


@dataclass(frozen=True)
class SelectPromotion:
    unit_id: UnitId
    promotion_id: str


@dataclass(frozen=True)
class UseGreatPerson:
    unit_id: UnitId


# =============================================================================
# SETTLEMENT AND PLAYER ACTIONS
# =============================================================================


@dataclass(frozen=True)
class StartProduction:
    settlement_id: SettlementId
    kind: str  # "unit", "building", "wonder"
    item_id: str
    cost: int = 0


@dataclass(frozen=True)
class StartResearch:
    tribe_id: TribeId
    tech_id: str


@dataclass(frozen=True)
class StartCulture:
    tribe_id: TribeId
    culture_id: str


@dataclass(frozen=True)
class CreateTradeRoute:
    origin: SettlementId
    destination: SettlementId
    gold_per_turn: int = 0


@dataclass(frozen=True)
class CancelTradeRoute:
    route_id: TradeRouteId


# =============================================================================
# DIPLOMATIC ACTIONS
# =============================================================================


@dataclass(frozen=True)
class DeclareWar:
    tribe_id: TribeId
    target: TribeId


@dataclass(frozen=True)
class ProposePeace:
    """
    Peace proposal. ``accepted`` carries the target's answer; a refusal is
    recorded and starts the rejection cooldown.
    """
    tribe_id: TribeId
    target: TribeId
    accepted: bool = True


@dataclass(frozen=True)
class ProposeAlliance:
    tribe_id: TribeId
    target: TribeId


@dataclass(frozen=True)
class BreakAlliance:
    tribe_id: TribeId
    target: TribeId


@dataclass(frozen=True)
class SendGift:
    tribe_id: TribeId
    target: TribeId
    gold: int


@dataclass(frozen=True)
class EndTurn:
    tribe_id: TribeId


Action = Union[
    MoveUnit,
    Attack,
    AttackSettlement,
    CaptureSettlement,
    FoundSettlement,
    BuildImprovement,
    SelectPromotion,
    UseGreatPerson,
    StartProduction,
    StartResearch,
    StartCulture,
    CreateTradeRoute,
    CancelTradeRoute,
    DeclareWar,
    ProposePeace,
    ProposeAlliance,
    BreakAlliance,
    SendGift,
    EndTurn,
]

ACTION_TYPES: tuple[type, ...] = (
    MoveUnit,
    Attack,
    AttackSettlement,
    CaptureSettlement,
    FoundSettlement,
    BuildImprovement,
    SelectPromotion,
    UseGreatPerson,
    StartProduction,
    StartResearch,
    StartCulture,
    CreateTradeRoute,
    CancelTradeRoute,
    DeclareWar,
    ProposePeace,
    ProposeAlliance,
    BreakAlliance,
    SendGift,
    EndTurn,
)
