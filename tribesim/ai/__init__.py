"""
AI director: personality-driven planning of whole turns.
"""

from tribesim.ai.ai_director import execute_ai_turn, generate_ai_actions
from tribesim.ai.diplomacy_ai import (
    consider_alliance,
    consider_peace,
    consider_war,
    generate_diplomacy_actions,
)
from tribesim.ai.military_strength import (
    MilitaryStrengthCache,
    calculate_military_strength,
    unit_strength,
)
from tribesim.ai.personality import (
    HIGH_WAR_WEARINESS,
    PEACE_STRENGTH_RATIO,
    WAR_STRENGTH_RATIO,
    get_tribe_personality,
    max_allies,
    max_concurrent_wars,
)
from tribesim.ai.planning_ai import (
    WonderPriority,
    categorize_culture,
    categorize_tech,
    era_base_score,
    generate_culture_action,
    generate_research_action,
    generate_wonder_action,
    get_culture_priorities,
    get_research_priorities,
    get_wonder_priorities,
    score_culture,
    score_tech,
    score_wonder,
)
from tribesim.ai.subsystem_queries import (
    CultureOption,
    NullSubsystemQueries,
    SubsystemQueries,
    TechOption,
    TradeDestination,
    WonderOption,
)
from tribesim.ai.trade_ai import (
    TradePriority,
    generate_trade_action,
    get_player_trade_routes,
    get_trade_priorities,
    score_trade_destination,
)
from tribesim.ai.unit_ai import (
    RESOURCE_PRIORITY,
    choose_improvement,
    exploration_score,
    find_best_settlement_site,
    generate_builder_action,
    generate_explore_action,
    generate_military_action,
    generate_scout_action,
    generate_settler_action,
    generate_unit_actions,
    pick_target,
    score_settlement_site,
)

__all__ = [
    "execute_ai_turn",
    "generate_ai_actions",
    "consider_alliance",
    "consider_peace",
    "consider_war",
    "generate_diplomacy_actions",
    "MilitaryStrengthCache",
    "calculate_military_strength",
    "unit_strength",
    "HIGH_WAR_WEARINESS",
    "PEACE_STRENGTH_RATIO",
    "WAR_STRENGTH_RATIO",
    "get_tribe_personality",
    "max_allies",
    "max_concurrent_wars",
    "WonderPriority",
    "categorize_culture",
    "categorize_tech",
    "era_base_score",
    "generate_culture_action",
    "generate_research_action",
    "generate_wonder_action",
    "get_culture_priorities",
    "get_research_priorities",
    "get_wonder_priorities",
    "score_culture",
    "score_tech",
    "score_wonder",
    "CultureOption",
    "NullSubsystemQueries",
    "SubsystemQueries",
    "TechOption",
    "TradeDestination",
    "WonderOption",
    "TradePriority",
    "generate_trade_action",
    "get_player_trade_routes",
    "get_trade_priorities",
    "score_trade_destination",
    "RESOURCE_PRIORITY",
    "choose_improvement",
    "exploration_score",
    "find_best_settlement_site",
    "generate_builder_action",
    "generate_explore_action",
    "generate_military_action",
    "generate_scout_action",
    "generate_settler_action",
    "generate_unit_actions",
    "pick_target",
    "score_settlement_site",
]
