"""
Research, culture and wonder choices.

All three score the options a SubsystemQueries implementation offers and
pick the best one. Scores share an era timing curve: era 1 options are
favoured during the first 20 turns and era 3 options after them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tribesim.ai.subsystem_queries import (
    CultureOption,
    SubsystemQueries,
    TechOption,
    WonderOption,
)
from tribesim.content_loader import TribeProfile
from tribesim.data_models import GameState, Player, SettlementId, TribeId
from tribesim.diplomacy import get_enemies
from tribesim.game_state.actions import Action, StartCulture, StartProduction, StartResearch
from tribesim.game_state.settlements import get_player_settlements, has_queued_wonder

logger = logging.getLogger(__name__)

TIMING_HORIZON_TURNS = 20
UNMET_PREREQUISITE_FACTOR = 0.3
MIN_WONDER_SCORE = 1.5
WONDER_FLOOR_PRICE_UNIT = 25
# A wonder is only started when the chosen settlement has at most this many queued items
MAX_QUEUE_FOR_WONDER = 1

MILITARY_WONDER_EFFECTS = frozenset({"combat_strength", "unit_healing"})
PRODUCTION_WONDER_EFFECTS = frozenset({"production_speed", "forest_production"})
ECONOMY_WONDER_EFFECTS = frozenset({"trade_gold", "settlement_gold", "kill_gold"})
VIBES_WONDER_EFFECTS = frozenset({"culture_per_turn", "floor_price_per_tech"})

# Substrings of a tech's first building, checked in order
_BUILDING_CATEGORIES = (
    (("barracks", "arena"), "military"),
    (("market", "solanart", "farm", "yield"), "economy"),
    (("granary", "server", "bot"), "production"),
    (("library", "alpha"), "science"),
    (("gallery", "art", "cult"), "culture"),
)
_IMPROVEMENT_CATEGORIES = (
    (frozenset({"mine", "quarry", "server_farm"}), "production"),
    (frozenset({"pasture", "sty", "airdrop_farm"}), "economy"),
    (frozenset({"brewery"}), "culture"),
)
_SLOT_CATEGORIES = (
    ("military", "military"),
    ("economy", "economy"),
    ("progress", "expansion"),
    ("wildcard", "culture"),
)


def turn_factor(turn: int) -> float:
    """0.0 on turn 0 rising to 1.0 at the timing horizon."""
    return min(turn / TIMING_HORIZON_TURNS, 1.0)


def era_base_score(era: int, turn: int) -> float:
    tf = turn_factor(turn)
    if era == 1:
        return 3 + (1 - tf) * 2
    if era == 2:
        return 2 + tf
    return 1 + tf * 2


# =============================================================================
# RESEARCH
# =============================================================================


def categorize_tech(tech: TechOption) -> str:
    if tech.unlocked_units:
        return "military"
    if tech.unlocked_buildings:
        building = tech.unlocked_buildings[0].lower()
        for needles, category in _BUILDING_CATEGORIES:
            if any(needle in building for needle in needles):
                return category
    for improvements, category in _IMPROVEMENT_CATEGORIES:
        if improvements.intersection(tech.unlocked_improvements):
            return category
    return "science"


def score_tech(state: GameState, player: Player, tech: TechOption, profile: TribeProfile) -> float:
    category = categorize_tech(tech)
    score = era_base_score(tech.era, state.turn) * profile.tech_weight(category)

    at_war = bool(get_enemies(state, player.tribe_id))
    if at_war and tech.unlocked_units:
        score *= 1.5 * profile.personality.aggression
    if category == "economy" and not at_war:
        score *= 1.2

    if not all(c in player.unlocked_cultures for c in tech.culture_prerequisites):
        score *= UNMET_PREREQUISITE_FACTOR
    return score


def get_research_priorities(
    state: GameState, player: Player, profile: TribeProfile, queries: SubsystemQueries
) -> list[tuple[TechOption, float]]:
    scored = [
        (tech, score_tech(state, player, tech, profile))
        for tech in queries.available_techs(state, player.tribe_id)
    ]
    return sorted(scored, key=lambda item: -item[1])


def generate_research_action(
    state: GameState, tribe_id: TribeId, profile: TribeProfile, queries: SubsystemQueries
) -> Optional[Action]:
    player = state.get_player(tribe_id)
    if player is None or player.current_research:
        return None

    priorities = get_research_priorities(state, player, profile, queries)
    if not priorities:
        return None

    tech, score = priorities[0]
    logger.debug(f"{tribe_id} researches {tech.id} (score {score:.2f})")
    return StartResearch(tribe_id=tribe_id, tech_id=tech.id)


# =============================================================================
# CULTURE
# =============================================================================


def categorize_culture(culture: CultureOption) -> str:
    for slot_type in culture.policy_slot_types:
        if slot_type in ("military", "economy"):
            return slot_type
    for slot, category in _SLOT_CATEGORIES:
        if slot in culture.slot_unlocks:
            return category
    return "culture"


def score_culture(
    state: GameState, player: Player, culture: CultureOption, profile: TribeProfile
) -> float:
    category = categorize_culture(culture)
    score = era_base_score(culture.era, state.turn) * profile.culture_weight(category)

    if culture.slot_unlocks:
        score *= 1.3
    if category == "military" and get_enemies(state, player.tribe_id):
        score *= 1.4 * profile.personality.aggression

    if not all(t in player.researched_techs for t in culture.tech_prerequisites):
        score *= UNMET_PREREQUISITE_FACTOR
    return score


def get_culture_priorities(
    state: GameState, player: Player, profile: TribeProfile, queries: SubsystemQueries
) -> list[tuple[CultureOption, float]]:
    scored = [
        (culture, score_culture(state, player, culture, profile))
        for culture in queries.available_cultures(state, player.tribe_id)
    ]
    return sorted(scored, key=lambda item: -item[1])


def generate_culture_action(
    state: GameState, tribe_id: TribeId, profile: TribeProfile, queries: SubsystemQueries
) -> Optional[Action]:
    player = state.get_player(tribe_id)
    if player is None or player.current_culture:
        return None

    priorities = get_culture_priorities(state, player, profile, queries)
    if not priorities:
        return None

    culture, score = priorities[0]
    logger.debug(f"{tribe_id} pursues culture {culture.id} (score {score:.2f})")
    return StartCulture(tribe_id=tribe_id, culture_id=culture.id)


# =============================================================================
# WONDERS
# =============================================================================


@dataclass(frozen=True)
class WonderPriority:
    wonder: WonderOption
    score: float
    settlement_id: SettlementId


def score_wonder(
    state: GameState,
    tribe_id: TribeId,
    wonder: WonderOption,
    profile: TribeProfile,
    queries: SubsystemQueries,
) -> float:
    score = wonder.floor_price_bonus / WONDER_FLOOR_PRICE_UNIT
    score *= profile.wonder_priority(wonder.category)

    strengths = (profile.primary_strength, profile.secondary_strength)
    effect = wonder.effect_type
    if effect in MILITARY_WONDER_EFFECTS:
        if get_enemies(state, tribe_id):
            score *= 1.5
        score *= profile.personality.aggression
    elif effect == "research_speed":
        if profile.primary_strength == "tech":
            score *= 1.3
    elif effect in PRODUCTION_WONDER_EFFECTS:
        if "production" in strengths:
            score *= 1.3
    elif effect in ECONOMY_WONDER_EFFECTS:
        if "economy" in strengths:
            score *= 1.3
    elif effect in VIBES_WONDER_EFFECTS:
        if profile.primary_strength == "vibes":
            score *= 1.3

    if queries.is_wonder_in_progress(state, wonder.id, excluding=tribe_id):
        score *= 0.5

    tf = turn_factor(state.turn)
    if wonder.era == 1:
        score *= 1 + (1 - tf) * 0.3
    elif wonder.era == 3:
        score *= 0.7 + tf * 0.3
    return score


def get_wonder_priorities(
    state: GameState, tribe_id: TribeId, profile: TribeProfile, queries: SubsystemQueries
) -> list[WonderPriority]:
    settlements = get_player_settlements(state, tribe_id)
    if not settlements:
        return []

    priorities: list[WonderPriority] = []
    for wonder in queries.available_wonders(state):
        builders = [s for s in settlements if queries.can_build_wonder(state, s.id, wonder.id)]
        if not builders:
            continue
        capital = next((s for s in builders if s.is_capital), None)
        chosen = capital or builders[0]
        priorities.append(
            WonderPriority(wonder, score_wonder(state, tribe_id, wonder, profile, queries), chosen.id)
        )
    return sorted(priorities, key=lambda p: -p.score)


def generate_wonder_action(
    state: GameState, tribe_id: TribeId, profile: TribeProfile, queries: SubsystemQueries
) -> Optional[Action]:
    if has_queued_wonder(state, tribe_id):
        return None

    priorities = get_wonder_priorities(state, tribe_id, profile, queries)
    if not priorities or priorities[0].score < MIN_WONDER_SCORE:
        return None

    top = priorities[0]
    settlement = state.settlements.get(top.settlement_id)
    if settlement is None or len(settlement.production_queue) > MAX_QUEUE_FOR_WONDER:
        return None

    logger.debug(f"{tribe_id} starts wonder {top.wonder.id} in {settlement.name} (score {top.score:.2f})")
    return StartProduction(
        settlement_id=settlement.id,
        kind="wonder",
        item_id=top.wonder.id,
        cost=top.wonder.production_cost,
    )
