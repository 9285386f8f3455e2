"""
Settlement founding, territory and production queues.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from tribesim.data_models import (
    CheckResult,
    GameState,
    HexCoord,
    ProductionItem,
    Settlement,
    SettlementId,
    TerrainType,
    TribeId,
    UnitId,
)
from tribesim.hex_grid import hex_distance, hex_range
from tribesim.units import get_unit_definition, remove_unit

logger = logging.getLogger(__name__)

MIN_SETTLEMENT_DISTANCE = 2
TERRITORY_RADIUS = 1
MAX_QUEUE_LENGTH = 5

UNFOUNDABLE_TERRAIN = frozenset({TerrainType.WATER, TerrainType.MOUNTAIN})


def can_found_settlement(state: GameState, coord: HexCoord) -> CheckResult:
    tile = state.map.get_tile(coord)
    if tile is None:
        return CheckResult.deny("Invalid tile")
    if tile.terrain in UNFOUNDABLE_TERRAIN:
        return CheckResult.deny(f"Cannot settle on {tile.terrain.value}")
    for settlement in state.settlements.values():
        if hex_distance(settlement.position, coord) <= MIN_SETTLEMENT_DISTANCE:
            return CheckResult.deny("Too close to another settlement")
    return CheckResult.ok()


def get_player_settlements(state: GameState, tribe_id: TribeId) -> list[Settlement]:
    return [s for s in state.settlements.values() if s.owner == tribe_id]


def get_capital(state: GameState, tribe_id: TribeId) -> Optional[Settlement]:
    for settlement in get_player_settlements(state, tribe_id):
        if settlement.is_capital:
            return settlement
    return None


def get_settlement_at(state: GameState, coord: HexCoord) -> Optional[Settlement]:
    for settlement in state.settlements.values():
        if settlement.position == coord:
            return settlement
    return None


def claim_territory(state: GameState, center: HexCoord, tribe_id: TribeId, radius: int) -> GameState:
    """Give ``tribe_id`` every unowned tile within ``radius`` of ``center``."""
    hex_map = state.map
    for coord in hex_range(center, radius):
        tile = hex_map.get_tile(coord)
        if tile is not None and tile.owner is None:
            hex_map = hex_map.with_tile(replace(tile, owner=tribe_id))
    return replace(state, map=hex_map)


def found_settlement(
    state: GameState, settler_id: UnitId, name: Optional[str] = None
) -> Optional[GameState]:
    """
    Found a settlement on the settler's hex and consume the settler.

    A tribe's first settlement becomes its capital.
    """
    settler = state.units.get(settler_id)
    if settler is None:
        return None
    definition = get_unit_definition(settler.type)
    if definition is None or not definition.can_found:
        return None
    if not can_found_settlement(state, settler.position):
        return None

    settlement_id, new_state = state.allocate_id("settlement")
    is_capital = get_capital(state, settler.owner) is None
    if name is None:
        player = state.get_player(settler.owner)
        tribe_name = player.tribe_name if player else settler.owner
        count = len(get_player_settlements(state, settler.owner)) + 1
        name = f"{tribe_name} {count}"

    settlement = Settlement(
        id=SettlementId(settlement_id),
        name=name,
        owner=settler.owner,
        position=settler.position,
        is_capital=is_capital,
    )
    new_state = replace(new_state, settlements={**new_state.settlements, settlement.id: settlement})
    new_state = claim_territory(new_state, settler.position, settler.owner, TERRITORY_RADIUS)
    new_state = remove_unit(new_state, settler.id)
    logger.info(f"{settler.owner} founded {name} at {settler.position}")
    return new_state


def update_settlement(state: GameState, settlement: Settlement) -> GameState:
    return replace(state, settlements={**state.settlements, settlement.id: settlement})


def enqueue_production(
    state: GameState,
    settlement_id: SettlementId,
    kind: str,
    item_id: str,
    cost: int = 0,
) -> Optional[GameState]:
    settlement = state.settlements.get(settlement_id)
    if settlement is None or len(settlement.production_queue) >= MAX_QUEUE_LENGTH:
        return None
    item = ProductionItem(kind=kind, item_id=item_id, cost=cost)
    return update_settlement(
        state, replace(settlement, production_queue=settlement.production_queue + (item,))
    )


def has_queued_wonder(state: GameState, tribe_id: TribeId) -> bool:
    return any(
        item.kind == "wonder"
        for settlement in get_player_settlements(state, tribe_id)
        for item in settlement.production_queue
    )
