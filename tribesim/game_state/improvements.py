"""
Tile improvements built by builders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from tribesim.data_models import (
    CheckResult,
    GameState,
    HexCoord,
    TerrainFeature,
    TerrainType,
    TribeId,
    UnitId,
)
from tribesim.units import remove_unit, update_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImprovementDefinition:
    type: str
    name: str
    valid_terrain: frozenset[TerrainType]
    valid_resources: frozenset[str] = frozenset()
    prerequisite_tech: Optional[str] = None
    removes_feature: bool = False


_OPEN_LAND = frozenset({TerrainType.GRASSLAND, TerrainType.PLAINS, TerrainType.DESERT})

IMPROVEMENT_DEFINITIONS: dict[str, ImprovementDefinition] = {
    d.type: d
    for d in (
        ImprovementDefinition(
            "farm", "Farm", _OPEN_LAND, frozenset({"wheat"}), removes_feature=True
        ),
        ImprovementDefinition(
            "mine",
            "Mine",
            frozenset({TerrainType.HILLS, TerrainType.MOUNTAIN}),
            frozenset({"iron", "gems"}),
            "mining",
        ),
        ImprovementDefinition(
            "pasture",
            "Pasture",
            frozenset({TerrainType.GRASSLAND, TerrainType.PLAINS}),
            frozenset({"horses", "cattle"}),
            "animal_husbandry",
        ),
        ImprovementDefinition(
            "quarry", "Quarry", frozenset({TerrainType.HILLS}), frozenset({"marble"}), "mining"
        ),
        ImprovementDefinition("mint", "NFT Mint", _OPEN_LAND, frozenset({"whitelists"}), "currency"),
        ImprovementDefinition(
            "server_farm",
            "RPC Server Farm",
            frozenset({TerrainType.PLAINS, TerrainType.HILLS}),
            frozenset({"rpcs"}),
            "writing",
        ),
    )
}


def can_build_improvement(
    state: GameState,
    coord: HexCoord,
    improvement_type: str,
    tribe_id: TribeId,
) -> CheckResult:
    tile = state.map.get_tile(coord)
    improvement = IMPROVEMENT_DEFINITIONS.get(improvement_type)
    if tile is None or improvement is None:
        return CheckResult.deny("Invalid tile")
    if tile.improvement:
        return CheckResult.deny("Tile already improved")
    if tile.terrain not in improvement.valid_terrain:
        return CheckResult.deny(f"Cannot build {improvement.name} on {tile.terrain.value}")
    if tile.owner != tribe_id:
        return CheckResult.deny("Tile not owned by your tribe")

    if improvement.prerequisite_tech:
        player = state.get_player(tribe_id)
        if player is None or improvement.prerequisite_tech not in player.researched_techs:
            return CheckResult.deny(f"Requires {improvement.prerequisite_tech}")

    # A resource on the tile restricts the choice to its matching improvement
    if tile.resource is not None and improvement.valid_resources:
        if tile.resource.type not in improvement.valid_resources:
            return CheckResult.deny(f"{improvement.name} not valid for this resource")

    return CheckResult.ok()


def get_valid_improvements(state: GameState, coord: HexCoord, tribe_id: TribeId) -> list[str]:
    return [
        improvement_type
        for improvement_type in IMPROVEMENT_DEFINITIONS
        if can_build_improvement(state, coord, improvement_type, tribe_id)
    ]


def get_best_improvement_for_resource(resource_type: str) -> Optional[str]:
    for improvement_type, definition in IMPROVEMENT_DEFINITIONS.items():
        if resource_type in definition.valid_resources:
            return improvement_type
    return None


def build_improvement(
    state: GameState, builder_id: UnitId, improvement_type: str
) -> Optional[GameState]:
    """
    Build on the builder's hex, spending one charge. A builder with no
    charges left is removed.
    """
    builder = state.units.get(builder_id)
    if builder is None or builder.build_charges <= 0 or builder.has_acted:
        return None
    if not can_build_improvement(state, builder.position, improvement_type, builder.owner):
        return None

    tile = state.map.get_tile(builder.position)
    definition = IMPROVEMENT_DEFINITIONS[improvement_type]

    updated_tile = replace(tile, improvement=improvement_type)
    if tile.resource is not None and tile.resource.revealed:
        updated_tile = replace(updated_tile, resource=replace(tile.resource, improved=True))
    if definition.removes_feature and tile.feature != TerrainFeature.NONE:
        updated_tile = replace(updated_tile, feature=TerrainFeature.NONE)

    new_state = replace(state, map=state.map.with_tile(updated_tile))
    charges = builder.build_charges - 1
    logger.debug(f"{builder.owner} built {improvement_type} at {builder.position}")
    if charges <= 0:
        return remove_unit(new_state, builder.id)
    return update_unit(new_state, replace(builder, build_charges=charges, has_acted=True))
