"""
Lootboxes: one-time caches scattered on the map.

Entering a lootbox hex claims it. The reward kind is a weighted roll on the
injected rng, using the same cumulative scheme as rarity rolls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from tribesim.data_models import (
    GameState,
    HexCoord,
    Lootbox,
    LootboxReward,
    TribeId,
    UnitId,
)
from tribesim.game_state.great_people import add_great_people_points
from tribesim.game_state.settlements import get_capital, get_player_settlements, update_settlement
from tribesim.hex_grid import hex_distance, hex_range
from tribesim.rng import RngFn
from tribesim.units import add_unit, can_stack_unit, create_unit

logger = logging.getLogger(__name__)

REWARD_WEIGHTS: dict[LootboxReward, int] = {
    LootboxReward.AIRDROP: 30,
    LootboxReward.ALPHA_LEAK: 15,
    LootboxReward.OG_HOLDER: 20,
    LootboxReward.COMMUNITY_GROWTH: 20,
    LootboxReward.SCOUT: 15,
}

AIRDROP_MIN_GOLD = 25
AIRDROP_GOLD_SPREAD = 26  # 25-50
BONUS_RESEARCH = 50
GROWTH_POPULATION = 3
SCOUT_REVEAL_RADIUS = 5
OG_HOLDER_UNIT = "warrior"


@dataclass(frozen=True)
class ClaimResult:
    """What a claimed lootbox gave. Fields not used by the reward stay empty."""
    state: GameState
    lootbox: Lootbox
    reward: LootboxReward
    gold: int = 0
    tech_id: Optional[str] = None
    unit_id: Optional[UnitId] = None
    settlement_id: Optional[str] = None
    hexes_revealed: int = 0


def get_lootbox_at(state: GameState, coord: HexCoord) -> Optional[Lootbox]:
    for lootbox in state.lootboxes:
        if lootbox.position == coord and not lootbox.claimed:
            return lootbox
    return None


def get_unclaimed_lootboxes(state: GameState) -> list[Lootbox]:
    return [lb for lb in state.lootboxes if not lb.claimed]


def roll_lootbox_reward(rng: RngFn) -> LootboxReward:
    roll = rng() * sum(REWARD_WEIGHTS.values())
    for reward, weight in REWARD_WEIGHTS.items():
        roll -= weight
        if roll <= 0:
            return reward
    return LootboxReward.AIRDROP


def roll_airdrop_gold(rng: RngFn) -> int:
    return AIRDROP_MIN_GOLD + int(rng() * AIRDROP_GOLD_SPREAD)


# =============================================================================
# REWARDS
# =============================================================================


def _airdrop(state: GameState, tribe_id: TribeId, rng: RngFn) -> tuple[GameState, dict]:
    gold = roll_airdrop_gold(rng)
    player = state.get_player(tribe_id)
    new_state = state.with_player(replace(player, treasury=player.treasury + gold))
    return (
        add_great_people_points(new_state, tribe_id, "gold", gold),
        {"reward": LootboxReward.AIRDROP, "gold": gold},
    )


def _alpha_leak(state: GameState, tribe_id: TribeId) -> tuple[GameState, dict]:
    player = state.get_player(tribe_id)
    if player.current_research is None:
        updated = replace(player, research_progress=player.research_progress + BONUS_RESEARCH)
        new_state = add_great_people_points(state.with_player(updated), tribe_id, "alpha", BONUS_RESEARCH)
        return new_state, {"reward": LootboxReward.ALPHA_LEAK}

    tech_id = player.current_research
    updated = replace(
        player,
        researched_techs=player.researched_techs | {tech_id},
        current_research=None,
        research_progress=0,
    )
    return state.with_player(updated), {"reward": LootboxReward.ALPHA_LEAK, "tech_id": tech_id}


def _og_holder(
    state: GameState, tribe_id: TribeId, position: HexCoord, rng: RngFn
) -> tuple[GameState, dict]:
    """A free warrior at the nearest own settlement; gold when there is nowhere to put it."""
    settlements = get_player_settlements(state, tribe_id)
    nearest = min(
        settlements,
        key=lambda s: (hex_distance(position, s.position), str(s.id)),
        default=None,
    )
    if nearest is None:
        return _airdrop(state, tribe_id, rng)

    unit_id, new_state = state.allocate_id("unit")
    unit = create_unit(OG_HOLDER_UNIT, tribe_id, nearest.position, rng=rng, unit_id=UnitId(unit_id))
    if not can_stack_unit(new_state, nearest.position, unit):
        return _airdrop(state, tribe_id, rng)
    return add_unit(new_state, unit), {"reward": LootboxReward.OG_HOLDER, "unit_id": unit.id}


def _community_growth(state: GameState, tribe_id: TribeId) -> tuple[GameState, dict]:
    settlements = get_player_settlements(state, tribe_id)
    target = get_capital(state, tribe_id) or (settlements[0] if settlements else None)
    if target is None:
        return state, {"reward": LootboxReward.COMMUNITY_GROWTH}
    grown = replace(target, population=target.population + GROWTH_POPULATION)
    return (
        update_settlement(state, grown),
        {"reward": LootboxReward.COMMUNITY_GROWTH, "settlement_id": target.id},
    )


def _scout(state: GameState, tribe_id: TribeId, position: HexCoord) -> tuple[GameState, dict]:
    known = state.fog.get(tribe_id, frozenset())
    revealed = frozenset(c for c in hex_range(position, SCOUT_REVEAL_RADIUS) if state.map.in_bounds(c))
    return (
        replace(state, fog={**state.fog, tribe_id: known | revealed}),
        {"reward": LootboxReward.SCOUT, "hexes_revealed": len(revealed - known)},
    )


def _apply_reward(
    state: GameState, reward: LootboxReward, tribe_id: TribeId, position: HexCoord, rng: RngFn
) -> tuple[GameState, dict]:
    if reward == LootboxReward.AIRDROP:
        return _airdrop(state, tribe_id, rng)
    if reward == LootboxReward.ALPHA_LEAK:
        return _alpha_leak(state, tribe_id)
    if reward == LootboxReward.OG_HOLDER:
        return _og_holder(state, tribe_id, position, rng)
    if reward == LootboxReward.COMMUNITY_GROWTH:
        return _community_growth(state, tribe_id)
    if reward == LootboxReward.SCOUT:
        return _scout(state, tribe_id, position)
    raise TypeError(f"Unhandled lootbox reward: {reward}")


def claim_lootbox(
    state: GameState, coord: HexCoord, tribe_id: TribeId, rng: RngFn
) -> Optional[ClaimResult]:
    """Claim the unclaimed lootbox at ``coord``, if any, for ``tribe_id``."""
    lootbox = get_lootbox_at(state, coord)
    if lootbox is None or state.get_player(tribe_id) is None:
        return None

    new_state, details = _apply_reward(state, roll_lootbox_reward(rng), tribe_id, coord, rng)
    claimed = replace(lootbox, claimed=True, reward=details["reward"])
    lootboxes = tuple(claimed if lb.id == lootbox.id else lb for lb in new_state.lootboxes)
    new_state = replace(new_state, lootboxes=lootboxes)
    logger.debug(f"{tribe_id} claimed lootbox {lootbox.id}: {details}")
    return ClaimResult(state=new_state, lootbox=claimed, **details)
