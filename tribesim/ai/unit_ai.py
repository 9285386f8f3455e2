"""
Per-unit decisions.

Every generator looks at one unit in the turn's starting snapshot and returns
at most one action for it, or None to leave the unit idle.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from tribesim.combat import (
    can_capture_settlement,
    get_attackable_settlements,
    get_valid_targets,
)
from tribesim.content_loader import TargetPriority, TribePersonality
from tribesim.data_models import (
    GameState,
    HexCoord,
    Stance,
    TerrainFeature,
    TerrainType,
    Tile,
    TribeId,
    Unit,
)
from tribesim.diplomacy import get_stance
from tribesim.game_state.actions import (
    Action,
    Attack,
    AttackSettlement,
    BuildImprovement,
    CaptureSettlement,
    FoundSettlement,
    MoveUnit,
    UseGreatPerson,
)
from tribesim.game_state.improvements import (
    get_best_improvement_for_resource,
    get_valid_improvements,
)
from tribesim.game_state.lootboxes import get_unclaimed_lootboxes
from tribesim.game_state.settlements import can_found_settlement, get_player_settlements
from tribesim.hex_grid import hex_distance, hex_neighbors
from tribesim.units import get_reachable_hexes, is_civilian_type
from tribesim.units.unit_engine import IMPASSABLE_TERRAIN

logger = logging.getLogger(__name__)

# Settlers found on the spot while their tribe has fewer settlements than this
EARLY_SETTLEMENT_COUNT = 3

SETTLE_TERRAIN_SCORES = {
    TerrainType.GRASSLAND: 3,
    TerrainType.PLAINS: 2,
    TerrainType.HILLS: 2,
    TerrainType.FOREST: 1,
}

RESOURCE_PRIORITY = {
    # Strategic
    "iron": 10,
    "horses": 10,
    # Luxury
    "gems": 8,
    "marble": 8,
    "hops": 7,
    "airdrop": 7,
    "silicon": 7,
    # Bonus
    "pig": 5,
    "cattle": 5,
}
DEFAULT_RESOURCE_PRIORITY = 5
HILL_MINE_PRIORITY = 3
PLAIN_IMPROVEMENT_PRIORITY = 2


def _closest_reachable(state: GameState, unit: Unit, goal: HexCoord) -> Optional[HexCoord]:
    """Reachable hex strictly closer to ``goal`` than the unit is now."""
    best: Optional[HexCoord] = None
    best_distance = hex_distance(unit.position, goal)
    for coord in get_reachable_hexes(state, unit):
        distance = hex_distance(coord, goal)
        if distance < best_distance:
            best, best_distance = coord, distance
    return best


def _nearest(origin: HexCoord, coords: Iterable[HexCoord]) -> Optional[HexCoord]:
    return min(coords, key=lambda c: hex_distance(origin, c), default=None)


# =============================================================================
# SETTLERS
# =============================================================================


def score_settlement_site(state: GameState, coord: HexCoord, tile: Tile) -> float:
    score: float = SETTLE_TERRAIN_SCORES.get(tile.terrain, 0)
    if tile.feature == TerrainFeature.RIVER:
        score += 3
    if tile.resource is not None:
        score += 2

    nearest = min(
        (hex_distance(coord, s.position) for s in state.settlements.values()),
        default=None,
    )
    if nearest is not None:
        if 3 <= nearest <= 5:
            score += 3
        elif nearest < 3:
            score -= 5

    for neighbor in hex_neighbors(coord):
        neighbor_tile = state.map.get_tile(neighbor)
        if neighbor_tile is None:
            continue
        if neighbor_tile.resource is not None:
            score += 1
        if neighbor_tile.feature == TerrainFeature.RIVER:
            score += 0.5
    return score


def find_best_settlement_site(state: GameState, settler: Unit) -> Optional[HexCoord]:
    """Best foundable hex among the settler's own hex and those it can reach."""
    candidates = [settler.position, *get_reachable_hexes(state, settler)]
    best: Optional[HexCoord] = None
    best_score = float("-inf")
    for coord in candidates:
        tile = state.map.get_tile(coord)
        if tile is None or not can_found_settlement(state, coord):
            continue
        score = score_settlement_site(state, coord, tile)
        if score > best_score:
            best, best_score = coord, score
    return best


def generate_settler_action(state: GameState, settler: Unit) -> Optional[Action]:
    if (
        can_found_settlement(state, settler.position)
        and len(get_player_settlements(state, settler.owner)) < EARLY_SETTLEMENT_COUNT
    ):
        return FoundSettlement(settler_id=settler.id)

    site = find_best_settlement_site(state, settler)
    if site is None:
        return None
    if site == settler.position:
        return FoundSettlement(settler_id=settler.id)
    return MoveUnit(unit_id=settler.id, target=site)


# =============================================================================
# MILITARY
# =============================================================================


def _hostile_units(state: GameState, unit: Unit) -> list[Unit]:
    return [
        other
        for other in state.units.values()
        if other.owner != unit.owner and get_stance(state, unit.owner, other.owner) == Stance.WAR
    ]


def pick_target(unit: Unit, targets: list[Unit], priority: TargetPriority) -> Unit:
    if priority == TargetPriority.STRONGEST:
        return sorted(targets, key=lambda t: -max(t.combat_strength, t.ranged_strength))[0]
    if priority == TargetPriority.CLOSEST:
        return sorted(targets, key=lambda t: hex_distance(unit.position, t.position))[0]
    return sorted(targets, key=lambda t: t.health)[0]


def generate_attack_action(
    state: GameState, unit: Unit, personality: TribePersonality
) -> Optional[Action]:
    targets = get_valid_targets(state, unit)
    if targets:
        target = pick_target(unit, targets, personality.target_priority)
        return Attack(attacker_id=unit.id, defender_id=target.id)

    for settlement in state.settlements.values():
        if can_capture_settlement(state, unit, settlement):
            return CaptureSettlement(unit_id=unit.id, settlement_id=settlement.id)

    settlements = get_attackable_settlements(state, unit)
    if settlements:
        weakest = min(settlements, key=lambda s: s.health)
        return AttackSettlement(attacker_id=unit.id, settlement_id=weakest.id)
    return None


def generate_move_action(state: GameState, unit: Unit) -> Optional[Action]:
    """Advance toward the nearest enemy, but only if that closes the distance."""
    if unit.movement_remaining <= 0:
        return None

    enemies = _hostile_units(state, unit)
    if not enemies:
        return None
    goal = min(enemies, key=lambda e: hex_distance(unit.position, e.position)).position

    reachable = get_reachable_hexes(state, unit)
    best: Optional[HexCoord] = None
    best_distance = hex_distance(unit.position, goal)
    for coord in reachable:
        distance = hex_distance(coord, goal)
        if 0 < distance < best_distance:
            best, best_distance = coord, distance

    if best is None:
        return None
    return MoveUnit(unit_id=unit.id, target=best)


def generate_military_action(
    state: GameState, unit: Unit, personality: TribePersonality
) -> Optional[Action]:
    return generate_attack_action(state, unit, personality) or generate_move_action(state, unit)


# =============================================================================
# SCOUTS
# =============================================================================


def generate_lootbox_action(state: GameState, scout: Unit) -> Optional[Action]:
    if scout.movement_remaining <= 0:
        return None
    target = _nearest(scout.position, (lb.position for lb in get_unclaimed_lootboxes(state)))
    if target is None or target == scout.position:
        return None
    step = _closest_reachable(state, scout, target)
    if step is None:
        return None
    return MoveUnit(unit_id=scout.id, target=step)


def exploration_score(explored: frozenset[HexCoord], coord: HexCoord) -> float:
    """Unexplored tiles a unit would see from ``coord``; the outer ring counts half."""
    score = 0.0 if coord in explored else 1.0
    for neighbor in hex_neighbors(coord):
        if neighbor not in explored:
            score += 1
        for outer in hex_neighbors(neighbor):
            if outer not in explored:
                score += 0.5
    return score


def generate_explore_action(state: GameState, scout: Unit) -> Optional[Action]:
    explored = state.fog.get(scout.owner)
    if explored is None:
        return None

    best: Optional[HexCoord] = None
    best_score = 0.0
    for coord in get_reachable_hexes(state, scout):
        score = exploration_score(explored, coord)
        if score > best_score:
            best, best_score = coord, score

    if best is None:
        return None
    return MoveUnit(unit_id=scout.id, target=best)


def generate_scout_action(state: GameState, scout: Unit) -> Optional[Action]:
    return generate_lootbox_action(state, scout) or generate_explore_action(state, scout)


# =============================================================================
# BUILDERS
# =============================================================================


def choose_improvement(tile: Tile, valid: list[str]) -> Optional[str]:
    if not valid:
        return None
    if tile.resource is not None and tile.resource.revealed:
        for_resource = get_best_improvement_for_resource(tile.resource.type)
        if for_resource in valid:
            return for_resource
    if "mine" in valid and tile.terrain == TerrainType.HILLS:
        return "mine"
    if "pasture" in valid and tile.terrain in (TerrainType.GRASSLAND, TerrainType.PLAINS):
        return "pasture"
    return valid[0]


def improvement_priority(tile: Tile, valid: list[str]) -> int:
    if tile.resource is not None and tile.resource.revealed:
        for_resource = get_best_improvement_for_resource(tile.resource.type)
        if for_resource in valid:
            return RESOURCE_PRIORITY.get(tile.resource.type, DEFAULT_RESOURCE_PRIORITY)
    if "mine" in valid and tile.terrain == TerrainType.HILLS:
        return HILL_MINE_PRIORITY
    return PLAIN_IMPROVEMENT_PRIORITY


def find_builder_target(state: GameState, builder: Unit) -> Optional[HexCoord]:
    best: Optional[HexCoord] = None
    best_score = float("-inf")
    for coord, tile in state.map.tiles.items():
        if tile.owner != builder.owner or tile.improvement or tile.terrain in IMPASSABLE_TERRAIN:
            continue
        valid = get_valid_improvements(state, coord, builder.owner)
        if not valid:
            continue
        score = improvement_priority(tile, valid) * 2 - hex_distance(builder.position, coord)
        if score > best_score:
            best, best_score = coord, score
    return best


def generate_builder_action(state: GameState, builder: Unit) -> Optional[Action]:
    tile = state.map.get_tile(builder.position)
    if tile is not None and not tile.improvement and tile.owner == builder.owner:
        improvement = choose_improvement(
            tile, get_valid_improvements(state, builder.position, builder.owner)
        )
        if improvement is not None:
            return BuildImprovement(builder_id=builder.id, improvement_type=improvement)

    if builder.movement_remaining <= 0:
        return None
    target = find_builder_target(state, builder)
    if target is None or target == builder.position:
        return None
    step = _closest_reachable(state, builder, target)
    if step is None:
        return None
    return MoveUnit(unit_id=builder.id, target=step)


# =============================================================================
# DISPATCH
# =============================================================================


def generate_unit_actions(
    state: GameState, tribe_id: TribeId, personality: TribePersonality
) -> list[Action]:
    """
    Actions for every unit that has not acted, grouped by role: settlers,
    military, scouts, builders, then great people.
    """
    units = [u for u in state.units.values() if u.owner == tribe_id and not u.has_acted]

    actions: list[Optional[Action]] = []
    actions += [generate_settler_action(state, u) for u in units if u.type == "settler"]
    actions += [
        generate_military_action(state, u, personality)
        for u in units
        if not is_civilian_type(u.type) and u.type != "scout"
    ]
    actions += [generate_scout_action(state, u) for u in units if u.type == "scout"]
    actions += [generate_builder_action(state, u) for u in units if u.type == "builder"]
    actions += [
        UseGreatPerson(unit_id=u.id)
        for u in units
        if u.type == "great_person" and u.great_person_id is not None
    ]
    return [action for action in actions if action is not None]
