"""
Trade route selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tribesim.ai.subsystem_queries import SubsystemQueries, TradeDestination
from tribesim.content_loader import TribeProfile
from tribesim.data_models import GameState, SettlementId, Stance, TradeRoute, TribeId
from tribesim.diplomacy import get_stance
from tribesim.game_state.actions import Action, CreateTradeRoute
from tribesim.game_state.settlements import get_capital, get_player_settlements
from tribesim.rng import RngFn

logger = logging.getLogger(__name__)

INTERNAL_ROUTE_FACTOR = 1.2
STANCE_ROUTE_FACTORS = {
    Stance.ALLIED: 1.3,
    Stance.FRIENDLY: 1.1,
    Stance.NEUTRAL: 0.9,
}
EXTERNAL_ROUTE_AFFINITY = 0.8


@dataclass(frozen=True)
class TradePriority:
    origin: SettlementId
    destination: SettlementId
    gold_per_turn: int
    score: float


def get_player_trade_routes(state: GameState, tribe_id: TribeId) -> list[TradeRoute]:
    """Active routes originating in one of the tribe's settlements."""
    owned = {s.id for s in get_player_settlements(state, tribe_id)}
    return [r for r in state.trade_routes if r.active and r.origin in owned]


def score_trade_destination(
    state: GameState, tribe_id: TribeId, destination: TradeDestination, profile: TribeProfile
) -> float:
    score = float(destination.gold_per_turn)
    if destination.is_internal:
        return score * INTERNAL_ROUTE_FACTOR

    stance = get_stance(state, tribe_id, destination.settlement.owner)
    score *= STANCE_ROUTE_FACTORS.get(stance, 1.0)
    return score * profile.personality.alliance * EXTERNAL_ROUTE_AFFINITY


def get_trade_priorities(
    state: GameState, tribe_id: TribeId, profile: TribeProfile, queries: SubsystemQueries
) -> list[TradePriority]:
    capacity = queries.trade_route_capacity(state, tribe_id)
    if len(get_player_trade_routes(state, tribe_id)) >= capacity:
        return []

    settlements = get_player_settlements(state, tribe_id)
    if not settlements:
        return []
    origin = get_capital(state, tribe_id) or settlements[0]

    priorities: list[TradePriority] = []
    for destination in queries.available_trade_destinations(state, origin.id):
        target = destination.settlement
        if target.id == origin.id:
            continue
        if not queries.can_create_trade_route(state, origin.id, target.id):
            continue
        priorities.append(
            TradePriority(
                origin=origin.id,
                destination=target.id,
                gold_per_turn=destination.gold_per_turn,
                score=score_trade_destination(state, tribe_id, destination, profile),
            )
        )
    return sorted(priorities, key=lambda p: -p.score)


def generate_trade_action(
    state: GameState,
    tribe_id: TribeId,
    profile: TribeProfile,
    queries: SubsystemQueries,
    rng: RngFn,
) -> Optional[Action]:
    trade_priority = profile.trade_priority
    if trade_priority <= 0:
        return None
    if trade_priority < 1.0 and rng() > trade_priority:
        return None

    priorities = get_trade_priorities(state, tribe_id, profile, queries)
    if not priorities:
        return None

    best = priorities[0]
    if best.score < 1.0 / trade_priority:
        return None

    logger.debug(f"{tribe_id} opens trade route {best.origin} -> {best.destination}")
    return CreateTradeRoute(
        origin=best.origin, destination=best.destination, gold_per_turn=best.gold_per_turn
    )
