"""
Diplomatic decisions for AI tribes.

For every other living tribe the AI evaluates at most one proposal, in this
order: peace if at war, war if not, alliance if friendly. Each consider_*
function returns an action or None; personality multipliers scale the
thresholds and gate the final decision behind an rng roll.
"""

from __future__ import annotations

import logging
from typing import Optional

from tribesim.ai.military_strength import MilitaryStrengthCache
from tribesim.ai.personality import (
    HIGH_TRAIT,
    HIGH_WAR_WEARINESS,
    PEACE_STRENGTH_RATIO,
    WAR_STRENGTH_RATIO,
    max_allies,
    max_concurrent_wars,
)
from tribesim.content_loader import TribePersonality
from tribesim.data_models import BARBARIAN_TRIBE, GameState, Stance, TribeId
from tribesim.diplomacy import (
    are_allied,
    are_at_war,
    are_friendly_or_better,
    can_declare_war,
    can_propose_alliance,
    can_propose_peace,
    get_allies,
    get_enemies,
    get_friendly_tribes,
    get_stance,
    get_war_weariness,
)
from tribesim.game_state.actions import Action, DeclareWar, ProposeAlliance, ProposePeace
from tribesim.game_state.settlements import get_player_settlements
from tribesim.rng import RngFn

logger = logging.getLogger(__name__)

# A war against a friend needs this much more than the usual advantage
FRIENDLY_WAR_RATIO = 2.0
# Share of the peace threshold at which a peaceful tribe may roll for peace
MARGINAL_PEACE_SHARE = 0.8
# Weariness share of the threshold at which new wars are ruled out
WAR_WEARINESS_CAUTION = 0.7
OPPORTUNISTIC_ALLIANCE_SHARE = 0.7


def consider_peace(
    state: GameState,
    tribe_id: TribeId,
    target: TribeId,
    personality: TribePersonality,
    strength: MilitaryStrengthCache,
    rng: RngFn,
) -> Optional[Action]:
    if not can_propose_peace(state, tribe_id, target):
        return None

    weariness = get_war_weariness(state, tribe_id)
    ai_strength = strength.get(state, tribe_id)
    target_strength = strength.get(state, target)
    peace_ratio = PEACE_STRENGTH_RATIO + personality.peace_ratio_mod

    if weariness >= HIGH_WAR_WEARINESS * personality.war_weariness_tolerance:
        reason = f"war weariness {weariness}"
    elif target_strength > ai_strength * peace_ratio:
        reason = "outmatched"
    elif ai_strength == 0:
        reason = "no army left"
    elif (
        target_strength > ai_strength * peace_ratio * MARGINAL_PEACE_SHARE
        and rng() < (personality.peacefulness - 1) * 0.5
    ):
        reason = "marginal war, peaceful temperament"
    else:
        return None

    logger.debug(f"{tribe_id} proposes peace to {target}: {reason}")
    return ProposePeace(tribe_id=tribe_id, target=target)


def consider_war(
    state: GameState,
    tribe_id: TribeId,
    target: TribeId,
    personality: TribePersonality,
    strength: MilitaryStrengthCache,
    rng: RngFn,
) -> Optional[Action]:
    if not can_declare_war(state, tribe_id, target):
        return None
    if are_allied(state, tribe_id, target):
        return None

    ai_strength = strength.get(state, tribe_id)
    target_strength = strength.get(state, target)

    if are_friendly_or_better(state, tribe_id, target):
        friendly_ratio = FRIENDLY_WAR_RATIO + (1 - personality.aggression)
        if ai_strength < target_strength * friendly_ratio:
            return None

    if len(get_enemies(state, tribe_id)) >= max_concurrent_wars(personality):
        return None

    weariness = get_war_weariness(state, tribe_id)
    if weariness >= HIGH_WAR_WEARINESS * WAR_WEARINESS_CAUTION * personality.war_weariness_tolerance:
        return None

    war_ratio = WAR_STRENGTH_RATIO + personality.war_ratio_mod
    if ai_strength <= target_strength * war_ratio or ai_strength <= 0:
        return None

    if not get_player_settlements(state, target):
        return None

    if rng() >= personality.aggression:
        return None

    logger.debug(
        f"{tribe_id} declares war on {target} ({ai_strength:.1f} vs {target_strength:.1f})"
    )
    return DeclareWar(tribe_id=tribe_id, target=target)


def _is_strongest_friend(
    state: GameState, tribe_id: TribeId, target: TribeId, strength: MilitaryStrengthCache
) -> bool:
    """True when no friend of ``tribe_id`` is strictly stronger than ``target``; ties count."""
    friends = get_friendly_tribes(state, tribe_id)
    if not friends:
        return False
    return strength.get(state, target) >= max(strength.get(state, friend) for friend in friends)


def consider_alliance(
    state: GameState,
    tribe_id: TribeId,
    target: TribeId,
    personality: TribePersonality,
    strength: MilitaryStrengthCache,
    rng: RngFn,
) -> Optional[Action]:
    if not can_propose_alliance(state, tribe_id, target):
        return None
    if len(get_allies(state, tribe_id)) >= max_allies(personality):
        return None

    our_enemies = set(get_enemies(state, tribe_id))
    shared_enemies = our_enemies & set(get_enemies(state, target))

    if shared_enemies:
        if rng() < personality.alliance:
            logger.debug(f"{tribe_id} seeks alliance with {target} against {sorted(shared_enemies)}")
            return ProposeAlliance(tribe_id=tribe_id, target=target)
        return None

    if our_enemies:
        return None

    if personality.alliance < HIGH_TRAIT and not _is_strongest_friend(state, tribe_id, target, strength):
        return None
    if strength.get(state, target) <= 0:
        return None
    if rng() < personality.alliance * OPPORTUNISTIC_ALLIANCE_SHARE:
        logger.debug(f"{tribe_id} seeks alliance with {target}")
        return ProposeAlliance(tribe_id=tribe_id, target=target)
    return None


def generate_diplomacy_actions(
    state: GameState,
    tribe_id: TribeId,
    personality: TribePersonality,
    strength: MilitaryStrengthCache,
    rng: RngFn,
) -> list[Action]:
    actions: list[Action] = []
    for other in state.living_tribes():
        if other == tribe_id or other == BARBARIAN_TRIBE:
            continue

        if are_at_war(state, tribe_id, other):
            action = consider_peace(state, tribe_id, other, personality, strength, rng)
            if action is not None:
                actions.append(action)
                continue
        else:
            action = consider_war(state, tribe_id, other, personality, strength, rng)
            if action is not None:
                actions.append(action)
                continue

        if get_stance(state, tribe_id, other) == Stance.FRIENDLY:
            action = consider_alliance(state, tribe_id, other, personality, strength, rng)
            if action is not None:
                actions.append(action)
    return actions
